import pytest

from ledger_console.modules.customer.summary import (
    extract_payment_summary,
    extract_payments,
    has_any_payment_data,
    normalize_summary,
    sort_payments,
)
from ledger_console.modules.payments.customer_payments.models import AccountSummary


FLAT = {"customer_id": 7, "due_amount": 100, "total_spent": 400}


@pytest.mark.parametrize(
    "raw",
    [
        FLAT,
        {"payment_summary": FLAT},
        {"paymentSummary": FLAT},
        {"data": {"payment_summary": FLAT}},
        {"data": {"paymentSummary": FLAT}},
        {"data": FLAT},
    ],
)
def test_every_known_summary_shape_is_found(raw):
    assert extract_payment_summary(raw) == FLAT


@pytest.mark.parametrize("raw", [None, [], "oops", {}, {"data": None}, {"data": {"customer_id": 7}}])
def test_unrecognized_summary_means_no_data(raw):
    assert extract_payment_summary(raw) is None
    assert normalize_summary(raw) is None


def test_root_wins_over_nested_candidates():
    nested = dict(FLAT, due_amount=999)
    raw = dict(FLAT, payment_summary=nested)
    assert extract_payment_summary(raw)["due_amount"] == 100


def test_bare_list_and_nested_data_payments_normalize_the_same():
    rows = [{"id": 1, "amount": 50}, {"id": 2, "amount": 75}]
    assert extract_payments(rows) == rows
    assert extract_payments({"data": {"payments": rows}}) == rows


@pytest.mark.parametrize(
    "raw",
    [
        {"data": [{"id": 1}]},
        {"payments": [{"id": 1}]},
        {"payments": {"data": [{"id": 1}]}},
        {"data": {"data": [{"id": 1}]}},
        {"data": {"data": {"data": [{"id": 1}]}}},
        {"data": {"payments": {"data": [{"id": 1}]}}},
    ],
)
def test_paginated_payment_shapes(raw):
    assert extract_payments(raw) == [{"id": 1}]


def test_unknown_payments_shape_is_empty_and_junk_rows_dropped():
    assert extract_payments({"rows": [{"id": 1}]}) == []
    assert extract_payments(None) == []
    assert extract_payments([{"id": 1}, "x", None]) == [{"id": 1}]


def test_normalize_reads_server_fields(summary_body):
    s = normalize_summary(summary_body())
    assert isinstance(s, AccountSummary)
    assert s.customer_id == 7
    assert s.due_amount == 1300.0
    assert s.total_spent == 2500.0
    assert s.total_paid == 1200.0
    assert s.prepaid_amount == 200.0
    assert s.advance_balance == 200.0
    assert [i.invoice_id for i in s.outstanding_invoices] == [11, 12]
    assert [t.transaction_type for t in s.advance_transactions] == ["received", "used"]
    assert s.estimated is False


def test_server_prepaid_is_authoritative_over_the_log(summary_body):
    # Log says 500 - 300 = 200; server says 50. Server wins.
    s = normalize_summary(summary_body(prepaid_amount=50.0, advance_balance=None))
    assert s.prepaid_amount == 50.0
    assert s.advance_balance == 50.0


def test_advance_balance_used_when_prepaid_missing(summary_body):
    body = summary_body(advance_balance=80.0)
    del body["prepaid_amount"]
    s = normalize_summary(body)
    assert s.prepaid_amount == 80.0
    assert s.advance_balance == 80.0


def test_log_fallback_is_received_minus_used_minus_refunded(summary_body):
    body = summary_body(
        advance_transactions=[
            {"transaction_type": "received", "amount": 1000},
            {"transaction_type": "Used", "amount": 250},
            {"transaction_type": "refunded", "amount": 100},
            {"transaction_type": "received", "amount": 50},
        ]
    )
    del body["prepaid_amount"]
    del body["advance_balance"]
    s = normalize_summary(body)
    assert s.prepaid_amount == pytest.approx(700.0)
    assert s.advance_balance == pytest.approx(700.0)


def test_running_balance_snapshot_kept_verbatim(summary_body):
    s = normalize_summary(summary_body())
    assert [t.balance for t in s.advance_transactions] == [500.0, 200.0]


def test_caller_opening_due_is_added_when_server_omits_it(summary_body):
    body = summary_body(due_amount=100.0)
    del body["opening_due_amount"]
    s = normalize_summary(body, opening_due_amount=40.0)
    assert s.opening_due_amount == 40.0
    assert s.due_amount == 140.0


def test_server_opening_due_is_already_in_due_amount(summary_body):
    s = normalize_summary(summary_body(due_amount=100.0, opening_due_amount=40.0), opening_due_amount=999.0)
    assert s.opening_due_amount == 40.0
    assert s.due_amount == 100.0


def test_string_numbers_and_bad_values_are_lenient():
    s = normalize_summary({"customer_id": "7", "due_amount": "12.50", "total_spent": "abc"})
    assert s.customer_id == 7
    assert s.due_amount == 12.5
    assert s.total_spent == 0.0


def test_outstanding_due_is_clamped_to_amount():
    s = normalize_summary(
        dict(FLAT, outstanding_invoices=[{"invoice_id": 1, "amount": 100, "due_amount": 150}])
    )
    assert s.outstanding_invoices[0].due_amount == 100.0


def test_sort_payments_latest_first():
    rows = [
        {"id": 1, "created_at": "2024-01-01T10:00:00"},
        {"id": 3, "created_at": "2024-03-01T10:00:00"},
        {"id": 2, "payment_date": "2024-02-01"},
        {"id": 4, "created_at": "2024-03-01T10:00:00"},
    ]
    assert [p["id"] for p in sort_payments(rows)] == [4, 3, 1, 2]


def test_has_any_payment_data():
    empty = AccountSummary(customer_id=7)
    assert not has_any_payment_data(empty, [])
    assert has_any_payment_data(empty, [{"id": 1}])
    assert has_any_payment_data(AccountSummary(customer_id=7, opening_due_amount=5.0), [])
    assert has_any_payment_data(AccountSummary(customer_id=7, prepaid_amount=1.0), [])
