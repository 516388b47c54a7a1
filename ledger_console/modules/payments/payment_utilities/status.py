from __future__ import annotations
from typing import Optional

from .calculations import MONEY_EPSILON

# ---------- Invoice statuses ----------

# Never payable, whatever the balance says
NOT_PAYABLE = frozenset({"refunded", "cancelled", "paid"})
# Never refundable
NOT_REFUNDABLE = frozenset({"refunded", "cancelled"})

# ---------- Human labels ----------
LABELS = {
    "draft": "Draft",
    "issued": "Issued",
    "partially_paid": "Partially Paid",
    "paid": "Fully Paid",
    "refunded": "Refunded",
    "cancelled": "Cancelled",
}


# ---------- API ----------

def normalize(state: Optional[str]) -> Optional[str]:
    """Lowercase & strip; return None if empty. Does NOT invent synonyms."""
    if state is None:
        return None
    s = str(state).strip().lower()
    return s or None


def label(state: Optional[str]) -> str:
    """Human label ('Fully Paid'). If unknown, returns the original string title-cased."""
    s = normalize(state)
    if s in LABELS:
        return LABELS[s]  # type: ignore[index]
    return (state or "").replace("_", " ").strip().title()


def is_fully_paid(invoice) -> bool:
    return invoice.due_amount <= MONEY_EPSILON


def is_payable(invoice) -> bool:
    """Eligible for invoice_payment: something is still due and the status allows it."""
    return invoice.due_amount > MONEY_EPSILON and normalize(invoice.status) not in NOT_PAYABLE


def is_refundable(invoice) -> bool:
    """
    Eligible for refund: some portion has been paid (due_amount < amount),
    the invoice is not fully settled (due_amount > 0, outstanding refs only)
    and it is not cancelled/refunded.
    """
    return (
        not is_fully_paid(invoice)
        and invoice.due_amount < invoice.amount - MONEY_EPSILON
        and normalize(invoice.status) not in NOT_REFUNDABLE
    )
