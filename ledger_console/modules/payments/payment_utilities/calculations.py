"""
payment_utilities/calculations.py

Pure helpers for account summaries and payment form checks.

Do not import repositories or touch the network here.
Only compute numbers; formatting belongs in the UI.
"""
from __future__ import annotations

from typing import Iterable

from ....constants import ADVANCE_RECEIVED, ADVANCE_REFUNDED, ADVANCE_USED

__all__ = [
    "MONEY_EPSILON",
    "sum_by_type",
    "advance_balance_from_log",
    "sum_amounts",
    "exceeds",
]

# Half a cent: comparisons below this are treated as equal.
MONEY_EPSILON = 0.005


def sum_by_type(transactions: Iterable, transaction_type: str) -> float:
    """Sum of `amount` for advance transactions of the given type."""
    return float(sum(t.amount for t in transactions if t.transaction_type == transaction_type))


def advance_balance_from_log(transactions: Iterable) -> float:
    """
    advance_balance = received - used - refunded

    Used only when the server omits prepaid_amount/advance_balance.
    Not clamped: a negative result means the log itself is inconsistent.
    """
    txs = list(transactions)
    return (
        sum_by_type(txs, ADVANCE_RECEIVED)
        - sum_by_type(txs, ADVANCE_USED)
        - sum_by_type(txs, ADVANCE_REFUNDED)
    )


def sum_amounts(amounts: Iterable[float]) -> float:
    return float(sum(amounts))


def exceeds(value: float, limit: float) -> bool:
    """True iff value is strictly greater than limit (beyond float noise)."""
    return value - limit > MONEY_EPSILON
