# ledger_console/modules/customer/summary.py
"""
Ledger aggregation for the customer payments tab.

The payment-summary endpoint has shipped several response shapes:

    {customer_id, due_amount, total_spent, ...}
    {"payment_summary": {...}}  /  {"paymentSummary": {...}}
    {"data": {...}}  /  {"data": {"payment_summary": {...}}}

SUMMARY_EXTRACTORS lists the candidate paths in priority order; the first
candidate that looks like a summary wins. No match means "no data yet" and
normalize_summary() returns None (callers fall back to the estimator).

The same approach is used for the payments list (PAYMENT_LIST_EXTRACTORS).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..payments.customer_payments.models import (
    AccountSummary,
    AdvanceTransaction,
    OutstandingInvoiceRef,
)
from ..payments.payment_utilities.calculations import advance_balance_from_log
from ...utils.validators import to_float

_log = logging.getLogger(__name__)

Extractor = Tuple[str, Callable[[Any], Any]]

SUMMARY_KEYS = ("customer_id", "due_amount", "total_spent")


def _field(obj: Any, *path: str) -> Any:
    """Walk dict keys; any non-dict along the way yields None."""
    cur = obj
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def is_payment_summary(value: Any) -> bool:
    return isinstance(value, dict) and all(k in value for k in SUMMARY_KEYS)


SUMMARY_EXTRACTORS: Sequence[Extractor] = (
    ("root", lambda r: r),
    ("payment_summary", lambda r: _field(r, "payment_summary")),
    ("paymentSummary", lambda r: _field(r, "paymentSummary")),
    ("data.payment_summary", lambda r: _field(r, "data", "payment_summary")),
    ("data.paymentSummary", lambda r: _field(r, "data", "paymentSummary")),
    ("data", lambda r: _field(r, "data")),
)

PAYMENT_LIST_EXTRACTORS: Sequence[Extractor] = (
    ("root", lambda r: r),
    ("data", lambda r: _field(r, "data")),
    ("payments", lambda r: _field(r, "payments")),
    ("data.payments", lambda r: _field(r, "data", "payments")),
    ("payments.data", lambda r: _field(r, "payments", "data")),
    ("data.data", lambda r: _field(r, "data", "data")),
    ("data.data.data", lambda r: _field(r, "data", "data", "data")),
    ("data.payments.data", lambda r: _field(r, "data", "payments", "data")),
)


def extract_payment_summary(raw: Any) -> Optional[Dict[str, Any]]:
    for name, project in SUMMARY_EXTRACTORS:
        candidate = project(raw)
        if is_payment_summary(candidate):
            _log.debug("payment summary matched at %s", name)
            return candidate
    _log.debug("payment summary: no candidate matched (%s)", type(raw).__name__)
    return None


def extract_payments(raw: Any) -> List[Dict[str, Any]]:
    for name, project in PAYMENT_LIST_EXTRACTORS:
        candidate = project(raw)
        if isinstance(candidate, list):
            _log.debug("payments list matched at %s", name)
            return [p for p in candidate if isinstance(p, dict)]
    return []


def _advance_transactions(raw: Any) -> List[AdvanceTransaction]:
    if not isinstance(raw, list):
        return []
    return [AdvanceTransaction.from_dict(r) for r in raw if isinstance(r, dict)]


def _outstanding(raw: Any) -> List[OutstandingInvoiceRef]:
    if not isinstance(raw, list):
        return []
    return [OutstandingInvoiceRef.from_dict(r) for r in raw if isinstance(r, dict)]


def normalize_summary(raw: Any, *, opening_due_amount: float = 0.0) -> Optional[AccountSummary]:
    """
    Canonicalize a payment-summary response. Pure; never raises.

    Advance fields:
      prepaid_amount  := server prepaid_amount, else server advance_balance,
                         else received - used - refunded from advance_transactions
      advance_balance := server advance_balance, else prepaid_amount

    Opening due: when the server reports opening_due_amount, its due_amount
    already includes it; otherwise the caller's opening_due_amount is added.
    """
    found = extract_payment_summary(raw)
    if found is None:
        return None

    transactions = _advance_transactions(found.get("advance_transactions"))

    if found.get("prepaid_amount") is not None:
        prepaid = to_float(found.get("prepaid_amount"))
    elif found.get("advance_balance") is not None:
        prepaid = to_float(found.get("advance_balance"))
    else:
        prepaid = advance_balance_from_log(transactions)

    advance_balance = (
        to_float(found.get("advance_balance")) if found.get("advance_balance") is not None else prepaid
    )

    due = to_float(found.get("due_amount"))
    server_opening = found.get("opening_due_amount")
    if server_opening is not None:
        opening = to_float(server_opening)
    else:
        opening = to_float(opening_due_amount)
        due += opening

    customer_id = found.get("customer_id")
    try:
        customer_id = int(customer_id) if customer_id is not None else None
    except (TypeError, ValueError):
        customer_id = None

    return AccountSummary(
        customer_id=customer_id,
        due_amount=due,
        prepaid_amount=prepaid,
        advance_balance=advance_balance,
        total_spent=to_float(found.get("total_spent")),
        total_paid=to_float(found.get("total_paid")),
        opening_due_amount=opening,
        outstanding_invoices=_outstanding(found.get("outstanding_invoices")),
        advance_transactions=transactions,
    )


# ---------- payments list helpers ----------

def sort_payments(payments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Latest first: created_at, then payment_date, then id. Missing values
    sort as oldest. ISO timestamps compare correctly as strings.
    """
    def key(p: Dict[str, Any]):
        return (str(p.get("created_at") or ""), str(p.get("payment_date") or ""), to_float(p.get("id")))

    return sorted(payments, key=key, reverse=True)


def has_any_payment_data(summary: AccountSummary, payments: List[Dict[str, Any]]) -> bool:
    return (
        summary.total_spent > 0
        or summary.due_amount > 0
        or summary.opening_due_amount > 0
        or summary.prepaid_amount > 0
        or len(summary.advance_transactions) > 0
        or len(payments) > 0
    )
