"""
customer_payments/auto_apply.py

Reading the server's answer to a recorded payment.

An advance payment may be auto-applied by the server to outstanding
invoices. When at least one invoice was touched, the dialog stays open on
a reconciliation panel until the user dismisses it; otherwise a toast is
enough and the dialog closes.

Numbers are shown exactly as the server sent them. check_arithmetic()
only produces an informational note; it never corrects anything.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ....constants import ADVANCE_PAYMENT, PAYMENT_TYPE_LABELS
from ....utils.helpers import fmt_money
from ..payment_utilities.calculations import MONEY_EPSILON
from ..payment_utilities.status import label as status_label
from .models import AdvanceSummary, AutoAppliedPayment, AutoApplyResult

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitOutcome:
    hold_open: bool                      # True -> show the reconciliation panel
    toast: str
    result: Optional[AutoApplyResult] = None
    anomaly: Optional[str] = None


def parse_auto_apply(response: Any) -> Optional[AutoApplyResult]:
    """None unless the response carries auto_applied_payments or advance_summary."""
    if not isinstance(response, dict):
        return None
    body = response
    if not any(k in body for k in ("auto_applied_payments", "advance_summary")) and isinstance(body.get("data"), dict):
        body = body["data"]
    rows = body.get("auto_applied_payments")
    summary = body.get("advance_summary")
    if rows is None and summary is None:
        return None
    return AutoApplyResult(
        auto_applied_payments=[
            AutoAppliedPayment.from_dict(r) for r in (rows if isinstance(rows, list) else []) if isinstance(r, dict)
        ],
        advance_summary=AdvanceSummary.from_dict(summary) if isinstance(summary, dict) else None,
    )


def check_arithmetic(summary: Optional[AdvanceSummary]) -> Optional[str]:
    """Note when received != applied + remaining. Display-only."""
    if summary is None:
        return None
    expected = summary.amount_applied_to_invoices + summary.remaining_advance_balance
    if abs(summary.total_advance_received - expected) <= MONEY_EPSILON:
        return None
    _log.warning(
        "advance summary does not add up: received=%s applied=%s remaining=%s",
        summary.total_advance_received,
        summary.amount_applied_to_invoices,
        summary.remaining_advance_balance,
    )
    return (
        "Note: the totals reported by the server do not add up "
        f"(received {fmt_money(summary.total_advance_received)}, applied "
        f"{fmt_money(summary.amount_applied_to_invoices)}, remaining "
        f"{fmt_money(summary.remaining_advance_balance)})."
    )


def interpret_response(payment_type: str, response: Any, *, currency: str = "PKR") -> SubmitOutcome:
    label = PAYMENT_TYPE_LABELS.get(payment_type, "Payment")
    result = parse_auto_apply(response) if payment_type == ADVANCE_PAYMENT else None
    if result is None:
        return SubmitOutcome(hold_open=False, toast=f"{label} recorded successfully!")

    summary = result.advance_summary
    anomaly = check_arithmetic(summary)
    applied = result.auto_applied_payments

    if applied:
        applied_amount = summary.amount_applied_to_invoices if summary else 0.0
        remaining = summary.remaining_advance_balance if summary else 0.0
        toast = (
            f"Advance payment recorded! Applied {fmt_money(applied_amount, currency=currency)} "
            f"to {len(applied)} invoice(s). Remaining balance: {fmt_money(remaining, currency=currency)}"
        )
        return SubmitOutcome(hold_open=True, toast=toast, result=result, anomaly=anomaly)

    if summary is not None:
        toast = (
            f"Advance payment recorded! Added {fmt_money(summary.remaining_advance_balance, currency=currency)} "
            "to advance balance."
        )
    else:
        toast = f"{label} recorded successfully!"
    return SubmitOutcome(hold_open=False, toast=toast, result=result, anomaly=anomaly)


# ---------- display rows ----------

def summary_rows(summary: Optional[AdvanceSummary], *, currency: str = "PKR") -> List[tuple[str, str]]:
    if summary is None:
        return []
    return [
        ("Total Advance Received", fmt_money(summary.total_advance_received, currency=currency)),
        ("Applied to Invoices", fmt_money(summary.amount_applied_to_invoices, currency=currency)),
        ("Remaining Advance Balance", fmt_money(summary.remaining_advance_balance, currency=currency)),
        ("Customer's New Advance Balance", fmt_money(summary.customer_new_advance_balance, currency=currency)),
    ]


def applied_rows(result: Optional[AutoApplyResult], *, currency: str = "PKR") -> List[Dict[str, str]]:
    if result is None:
        return []
    return [
        {
            "invoice_number": p.invoice_number or (f"#{p.invoice_id}" if p.invoice_id is not None else ""),
            "amount_applied": fmt_money(p.amount_applied, currency=currency),
            "status": status_label(p.invoice_status_after),
            "remaining": fmt_money(p.remaining_invoice_balance, currency=currency),
        }
        for p in result.auto_applied_payments
    ]
