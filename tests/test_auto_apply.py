import logging

from ledger_console.constants import ADVANCE_PAYMENT, INVOICE_PAYMENT, REFUND
from ledger_console.modules.payments.customer_payments.auto_apply import (
    applied_rows,
    check_arithmetic,
    interpret_response,
    parse_auto_apply,
    summary_rows,
)
from ledger_console.modules.payments.customer_payments.models import AdvanceSummary


def _applied_response(**summary_overrides):
    summary = {
        "total_advance_received": 1000,
        "amount_applied_to_invoices": 750,
        "remaining_advance_balance": 250,
        "customer_new_advance_balance": 450,
    }
    summary.update(summary_overrides)
    return {
        "id": 301,
        "auto_applied_payments": [
            {
                "id": 901,
                "invoice_id": 11,
                "invoice_number": "INV-011",
                "amount_applied": 500,
                "invoice_status_after": "paid",
                "remaining_invoice_balance": 0,
            },
            {
                "id": 902,
                "invoice_id": 12,
                "invoice_number": "INV-012",
                "amount_applied": 250,
                "invoice_status_after": "partially_paid",
                "remaining_invoice_balance": 50,
            },
        ],
        "advance_summary": summary,
    }


def test_auto_applied_advance_holds_the_dialog_open():
    outcome = interpret_response(ADVANCE_PAYMENT, _applied_response())
    assert outcome.hold_open is True
    assert outcome.anomaly is None
    assert outcome.toast == (
        "Advance payment recorded! Applied PKR 750.00 to 2 invoice(s). Remaining balance: PKR 250.00"
    )


def test_server_figures_are_shown_verbatim():
    outcome = interpret_response(ADVANCE_PAYMENT, _applied_response())
    assert dict(summary_rows(outcome.result.advance_summary)) == {
        "Total Advance Received": "PKR 1,000.00",
        "Applied to Invoices": "PKR 750.00",
        "Remaining Advance Balance": "PKR 250.00",
        "Customer's New Advance Balance": "PKR 450.00",
    }
    assert applied_rows(outcome.result) == [
        {"invoice_number": "INV-011", "amount_applied": "PKR 500.00", "status": "Fully Paid", "remaining": "PKR 0.00"},
        {
            "invoice_number": "INV-012",
            "amount_applied": "PKR 250.00",
            "status": "Partially Paid",
            "remaining": "PKR 50.00",
        },
    ]


def test_inconsistent_totals_are_flagged_not_corrected(caplog):
    with caplog.at_level(logging.WARNING):
        outcome = interpret_response(ADVANCE_PAYMENT, _applied_response(remaining_advance_balance=300))
    assert outcome.hold_open is True
    assert outcome.anomaly.startswith("Note: the totals reported by the server do not add up")
    assert outcome.result.advance_summary.remaining_advance_balance == 300.0
    assert "does not add up" in caplog.text


def test_sub_cent_noise_is_not_an_anomaly():
    s = AdvanceSummary(1000.0, 750.001, 250.0, 250.0)
    assert check_arithmetic(s) is None
    assert check_arithmetic(None) is None


def test_advance_with_nothing_applied_closes_with_toast():
    response = {
        "auto_applied_payments": [],
        "advance_summary": {
            "total_advance_received": 500,
            "amount_applied_to_invoices": 0,
            "remaining_advance_balance": 500,
            "customer_new_advance_balance": 700,
        },
    }
    outcome = interpret_response(ADVANCE_PAYMENT, response, currency="USD")
    assert outcome.hold_open is False
    assert outcome.toast == "Advance payment recorded! Added USD 500.00 to advance balance."


def test_plain_advance_response_gets_generic_toast():
    outcome = interpret_response(ADVANCE_PAYMENT, {"id": 5})
    assert outcome.hold_open is False
    assert outcome.result is None
    assert outcome.toast == "Advance payment recorded successfully!"


def test_other_types_never_hold_open():
    # Even a response carrying auto-apply fields is ignored for non-advance types.
    assert interpret_response(INVOICE_PAYMENT, _applied_response()).hold_open is False
    assert interpret_response(REFUND, {}).toast == "Refund recorded successfully!"


def test_auto_apply_fields_nested_under_data():
    result = parse_auto_apply({"data": _applied_response()})
    assert len(result.auto_applied_payments) == 2
    assert result.advance_summary.amount_applied_to_invoices == 750.0


def test_no_auto_apply_fields():
    assert parse_auto_apply({"id": 1}) is None
    assert parse_auto_apply(None) is None
    assert summary_rows(None) == []
    assert applied_rows(None) == []
