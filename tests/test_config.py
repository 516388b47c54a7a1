import logging

from ledger_console.config import Settings, load_settings
from ledger_console.constants import DEFAULT_API_BASE_URL, DEFAULT_PAGE_SIZE
from ledger_console.main import parse_args
from ledger_console.utils.helpers import fmt_money, fmt_quantity
from ledger_console.utils.loggers import get_logger


def test_defaults_when_env_is_empty():
    assert load_settings({}) == Settings()
    assert Settings().api_base_url == DEFAULT_API_BASE_URL


def test_env_overrides():
    s = load_settings(
        {
            "LEDGER_API_BASE_URL": "https://erp.example.com/api/",
            "LEDGER_COMPANY_ID": "3",
            "LEDGER_CURRENCY": " USD ",
            "LEDGER_LOG_LEVEL": "debug",
            "LEDGER_PAGE_SIZE": "200",
        }
    )
    assert s.api_base_url == "https://erp.example.com/api"
    assert s.company_id == 3
    assert s.currency == "USD"
    assert s.log_level == "DEBUG"
    assert s.page_size == 200


def test_malformed_numbers_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        s = load_settings({"LEDGER_PAGE_SIZE": "lots"})
    assert s.page_size == DEFAULT_PAGE_SIZE
    assert "LEDGER_PAGE_SIZE" in caplog.text


def test_cli_arguments():
    args = parse_args(["--customer-id", "7", "--opening-due", "150.5"])
    assert args.customer_id == 7
    assert args.opening_due == 150.5
    assert args.api_base_url is None


def test_logger_is_configured_once():
    log = get_logger("ledger_console.test_once")
    get_logger("ledger_console.test_once")
    assert len(log.handlers) == 1


def test_money_and_quantity_formatting():
    assert fmt_money(1234.5) == "1,234.50"
    assert fmt_money("12", currency="PKR") == "PKR 12.00"
    assert fmt_money("n/a") == "n/a"
    assert fmt_money(None, sentinel="-") == "-"
    assert fmt_quantity("8.000") == "8"
    assert fmt_quantity(2.25) == "2.25"
