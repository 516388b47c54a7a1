# ledger_console/modules/customer/estimator.py
"""
Fallback estimation of an AccountSummary from the customer's invoice list.

Used when the payment-summary endpoint returned nothing usable. Rules:
  - total_spent = sum(total_amount) over non-cancelled invoices
  - due_amount  = sum(total_amount) over 'issued' invoices (+ opening due)
  - total_paid  = sum(total_amount) over 'paid' invoices
  - outstanding = every 'issued' invoice, due_amount := total_amount

Partial payments cannot be seen from invoice status alone, so an issued
invoice always counts as fully outstanding. No advance data exists in
this mode: prepaid/advance balance are 0 and the log is empty.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from ..payments.customer_payments.models import AccountSummary, OutstandingInvoiceRef
from ..payments.payment_utilities.status import normalize
from ...utils.validators import to_float


def _total(invoice: Dict[str, Any]) -> float:
    return to_float(invoice.get("total_amount"))


def estimate_from_invoices(
    invoices: Iterable[Dict[str, Any]],
    *,
    customer_id: Optional[int] = None,
    opening_due_amount: float = 0.0,
) -> AccountSummary:
    rows = [inv for inv in (invoices or []) if isinstance(inv, dict)]
    issued = [inv for inv in rows if normalize(inv.get("status")) == "issued"]

    total_spent = sum(_total(inv) for inv in rows if normalize(inv.get("status")) != "cancelled")
    invoice_due = sum(_total(inv) for inv in issued)
    total_paid = sum(_total(inv) for inv in rows if normalize(inv.get("status")) == "paid")
    opening = to_float(opening_due_amount)

    outstanding = [
        OutstandingInvoiceRef(
            invoice_id=int(to_float(inv.get("id"))),
            invoice_number=str(inv.get("invoice_number") or ""),
            amount=_total(inv),
            due_amount=_total(inv),
            invoice_date=inv.get("invoice_date"),
            status="issued",
        )
        for inv in issued
    ]

    return AccountSummary(
        customer_id=customer_id,
        due_amount=float(invoice_due + opening),
        prepaid_amount=0.0,
        advance_balance=0.0,
        total_spent=float(total_spent),
        total_paid=float(total_paid),
        opening_due_amount=opening,
        outstanding_invoices=outstanding,
        advance_transactions=[],
        estimated=True,
    )
