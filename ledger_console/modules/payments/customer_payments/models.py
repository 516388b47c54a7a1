# ledger_console/modules/payments/customer_payments/models.py
"""
customer_payments/models.py

Data shapes for the customer account subsystem. Everything here is derived
from API responses on each fetch; nothing is persisted locally.

from_dict() constructors are lenient: missing or malformed fields become
zero/None/empty instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....utils.validators import to_float


def _opt_int(v: Any) -> Optional[int]:
    if v is None or v == "" or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _opt_str(v: Any) -> Optional[str]:
    return None if v in (None, "") else str(v)


# ---------- Ledger shapes ----------

@dataclass(frozen=True)
class AdvanceTransaction:
    id: Optional[int]
    transaction_type: str          # 'received' | 'used' | 'refunded'
    amount: float                  # unsigned; sign comes from transaction_type
    transaction_date: Optional[str]
    balance: Optional[float]       # server's running balance snapshot, never recomputed
    notes: Optional[str] = None
    reference: Optional[str] = None
    invoice_number: Optional[str] = None   # invoice a 'used' entry paid, if the server embeds it

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "AdvanceTransaction":
        bal = row.get("balance")
        payment = row.get("payment") if isinstance(row.get("payment"), dict) else {}
        invoice = payment.get("invoice") if isinstance(payment.get("invoice"), dict) else {}
        return cls(
            id=_opt_int(row.get("id")),
            transaction_type=str(row.get("transaction_type") or "").strip().lower(),
            amount=abs(to_float(row.get("amount"))),
            transaction_date=_opt_str(row.get("transaction_date") or row.get("created_at")),
            balance=None if bal is None else to_float(bal),
            notes=_opt_str(row.get("notes")),
            reference=_opt_str(row.get("reference")),
            invoice_number=_opt_str(invoice.get("invoice_number") or row.get("invoice_number")),
        )


@dataclass(frozen=True)
class OutstandingInvoiceRef:
    invoice_id: int
    invoice_number: str
    amount: float                  # original total
    due_amount: float              # remaining unpaid, 0 <= due_amount <= amount
    invoice_date: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "OutstandingInvoiceRef":
        amount = to_float(row.get("amount", row.get("total_amount")))
        due = to_float(row.get("due_amount"), amount)
        return cls(
            invoice_id=_opt_int(row.get("invoice_id", row.get("id"))) or 0,
            invoice_number=str(row.get("invoice_number") or ""),
            amount=amount,
            due_amount=min(max(due, 0.0), amount) if amount > 0 else max(due, 0.0),
            invoice_date=_opt_str(row.get("invoice_date")),
            status=_opt_str(row.get("status")),
        )

    @property
    def paid_amount(self) -> float:
        return self.amount - self.due_amount


@dataclass(frozen=True)
class AccountSummary:
    customer_id: Optional[int]
    due_amount: float = 0.0
    prepaid_amount: float = 0.0
    advance_balance: float = 0.0
    total_spent: float = 0.0
    total_paid: float = 0.0
    opening_due_amount: float = 0.0
    outstanding_invoices: List[OutstandingInvoiceRef] = field(default_factory=list)
    advance_transactions: List[AdvanceTransaction] = field(default_factory=list)
    estimated: bool = False        # True when derived from invoices (no summary endpoint data)


# ---------- Auto-apply (advance payment response) ----------

@dataclass(frozen=True)
class AutoAppliedPayment:
    id: Optional[int]
    invoice_id: Optional[int]
    invoice_number: str
    amount_applied: float
    invoice_status_after: str      # 'paid' | 'partially_paid'
    remaining_invoice_balance: float

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "AutoAppliedPayment":
        return cls(
            id=_opt_int(row.get("id")),
            invoice_id=_opt_int(row.get("invoice_id")),
            invoice_number=str(row.get("invoice_number") or ""),
            amount_applied=to_float(row.get("amount_applied")),
            invoice_status_after=str(row.get("invoice_status_after") or ""),
            remaining_invoice_balance=to_float(row.get("remaining_invoice_balance")),
        )


@dataclass(frozen=True)
class AdvanceSummary:
    total_advance_received: float
    amount_applied_to_invoices: float
    remaining_advance_balance: float
    customer_new_advance_balance: float

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "AdvanceSummary":
        return cls(
            total_advance_received=to_float(row.get("total_advance_received")),
            amount_applied_to_invoices=to_float(row.get("amount_applied_to_invoices")),
            remaining_advance_balance=to_float(row.get("remaining_advance_balance")),
            customer_new_advance_balance=to_float(row.get("customer_new_advance_balance")),
        )


@dataclass(frozen=True)
class AutoApplyResult:
    auto_applied_payments: List[AutoAppliedPayment] = field(default_factory=list)
    advance_summary: Optional[AdvanceSummary] = None
