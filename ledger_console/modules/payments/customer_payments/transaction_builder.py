"""
customer_payments/transaction_builder.py

Record-payment form logic without any Qt:

- Drafts: one frozen dataclass per payment type (InvoicePaymentDraft,
  AdvancePaymentDraft, RefundDraft). Each carries only its own fields.
- validate(draft, summary) -> {field: message}. Empty dict means OK.
  Keys: invoice, amount, method, advance, account, date, reference, cheque_number,
  cheque_date, bank_name, refund_amount_{i}, refund_account_{i}, refund_total.
- build_request(draft, customer_id) -> the JSON body for POST /customer-payments.
- PaymentFormState: the mutable form the dialog edits; switches type,
  auto-fills amounts and produces drafts.

Validation reports problems as data and never talks to the network.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ....constants import (
    ADVANCE_PAYMENT,
    INVOICE_PAYMENT,
    METHOD_VALUES,
    PAYMENT_TYPES,
    REFUND,
)
from ....utils.helpers import fmt_money, today_str
from ....utils.validators import is_future_date, non_empty, parse_iso_date, try_parse_float
from ..payment_utilities.calculations import exceeds, sum_amounts
from ..payment_utilities.status import is_payable, is_refundable
from .models import AccountSummary, OutstandingInvoiceRef

__all__ = [
    "ChequeDetails",
    "RefundLine",
    "InvoicePaymentDraft",
    "AdvancePaymentDraft",
    "RefundDraft",
    "PaymentDraft",
    "RefundLineInput",
    "PaymentFormState",
    "validate",
    "build_request",
]

ValidationErrors = Dict[str, str]


# ---------- Drafts ----------

@dataclass(frozen=True)
class ChequeDetails:
    cheque_number: str = ""
    cheque_date: str = ""
    bank_name: str = ""


@dataclass(frozen=True)
class RefundLine:
    amount: Optional[float]        # None when the entered text is not a number
    payment_account_id: Optional[int]
    payment_method: str = "cash"


@dataclass(frozen=True)
class _DraftBase:
    amount: Optional[float] = None
    payment_method: str = "cash"
    payment_date: str = ""
    payment_account_id: Optional[int] = None
    cheque: ChequeDetails = field(default_factory=ChequeDetails)
    reference_number: str = ""
    notes: str = ""


@dataclass(frozen=True)
class InvoicePaymentDraft(_DraftBase):
    invoice_id: Optional[int] = None
    use_advance: bool = False

    payment_type = INVOICE_PAYMENT


@dataclass(frozen=True)
class AdvancePaymentDraft(_DraftBase):
    payment_type = ADVANCE_PAYMENT


@dataclass(frozen=True)
class RefundDraft(_DraftBase):
    invoice_id: Optional[int] = None
    lines: Tuple[RefundLine, ...] = ()
    restock_items: bool = False
    loss_account_id: Optional[int] = None

    payment_type = REFUND

    @property
    def total(self) -> float:
        return sum_amounts(line.amount or 0.0 for line in self.lines)


PaymentDraft = Union[InvoicePaymentDraft, AdvancePaymentDraft, RefundDraft]


# ---------- Validation ----------

def _find_invoice(summary: Optional[AccountSummary], invoice_id: Optional[int]) -> Optional[OutstandingInvoiceRef]:
    if summary is None or invoice_id is None:
        return None
    for inv in summary.outstanding_invoices:
        if inv.invoice_id == invoice_id:
            return inv
    return None


def _is_positive_amount(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _check_date(draft: PaymentDraft, errors: ValidationErrors, today: Optional[date]) -> None:
    if not non_empty(draft.payment_date):
        errors["date"] = "Payment date is required"
    elif parse_iso_date(draft.payment_date) is None:
        errors["date"] = "Payment date must be YYYY-MM-DD"
    elif is_future_date(draft.payment_date, today):
        errors["date"] = "Payment date cannot be in the future"


def _check_method_fields(draft: PaymentDraft, errors: ValidationErrors) -> None:
    """Amount, account, cheque and reference rules shared by invoice/advance payments."""
    if not _is_positive_amount(draft.amount):
        errors["amount"] = "Amount must be greater than 0"

    if draft.payment_method not in METHOD_VALUES:
        errors["method"] = "Please select a payment method"
        return

    use_advance = getattr(draft, "use_advance", False)
    if not use_advance and draft.payment_method != "cheque" and draft.payment_account_id is None:
        errors["account"] = "Please select a payment account"

    if draft.payment_method == "cheque":
        if not non_empty(draft.cheque.cheque_number):
            errors["cheque_number"] = "Cheque number is required for cheque payments"
        if not non_empty(draft.cheque.cheque_date):
            errors["cheque_date"] = "Cheque date is required"
        elif parse_iso_date(draft.cheque.cheque_date) is None:
            errors["cheque_date"] = "Cheque date must be YYYY-MM-DD"
        if not non_empty(draft.cheque.bank_name):
            errors["bank_name"] = "Bank name is required"

    if draft.payment_method == "bank_transfer" and not non_empty(draft.reference_number):
        errors["reference"] = "Transaction reference is required for bank transfers"


def _validate_invoice_payment(
    draft: InvoicePaymentDraft, summary: Optional[AccountSummary], errors: ValidationErrors
) -> None:
    if draft.invoice_id is None:
        errors["invoice"] = "Please select an invoice"
    else:
        inv = _find_invoice(summary, draft.invoice_id)
        if inv is None or not is_payable(inv):
            errors["invoice"] = "Selected invoice cannot receive payments"

    _check_method_fields(draft, errors)

    if draft.use_advance and "amount" not in errors:
        available = summary.advance_balance if summary is not None else 0.0
        if exceeds(draft.amount or 0.0, available):
            errors["advance"] = f"Insufficient advance balance. Available: {fmt_money(available)}"


def _validate_advance_payment(
    draft: AdvancePaymentDraft, summary: Optional[AccountSummary], errors: ValidationErrors
) -> None:
    _check_method_fields(draft, errors)


def _validate_refund(draft: RefundDraft, summary: Optional[AccountSummary], errors: ValidationErrors) -> None:
    inv = None
    if draft.invoice_id is None:
        errors["invoice"] = "Please select an invoice to refund"
    else:
        inv = _find_invoice(summary, draft.invoice_id)
        if inv is None or not is_refundable(inv):
            errors["invoice"] = "Selected invoice has no paid amount to refund"
            inv = None

    if not draft.lines:
        errors["refund_total"] = "Add at least one refund line"
        return

    for i, line in enumerate(draft.lines):
        if not _is_positive_amount(line.amount):
            errors[f"refund_amount_{i}"] = "Refund amount must be greater than 0"
        if line.payment_account_id is None:
            errors[f"refund_account_{i}"] = "Please select an account"

    if not math.isfinite(draft.total):
        errors["refund_total"] = "Refund total is not a valid amount"
    elif inv is not None and exceeds(draft.total, inv.amount):
        errors["refund_total"] = (
            f"Total refund {fmt_money(draft.total)} exceeds invoice amount {fmt_money(inv.amount)}"
        )


_VALIDATORS: Dict[type, Callable[[Any, Optional[AccountSummary], ValidationErrors], None]] = {
    InvoicePaymentDraft: _validate_invoice_payment,
    AdvancePaymentDraft: _validate_advance_payment,
    RefundDraft: _validate_refund,
}


def validate(
    draft: PaymentDraft, summary: Optional[AccountSummary], *, today: Optional[date] = None
) -> ValidationErrors:
    """Field-scoped errors for the draft against the current account state."""
    errors: ValidationErrors = {}
    check = _VALIDATORS.get(type(draft))
    if check is None:
        raise TypeError(f"Unknown payment draft: {type(draft).__name__}")
    check(draft, summary, errors)
    _check_date(draft, errors, today)
    return errors


# ---------- Request building ----------

def _base_payload(draft: PaymentDraft, customer_id: int, amount: float, method: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "customer_id": customer_id,
        "payment_type": draft.payment_type,
        "amount": round(amount, 2),
        "payment_method": method,
        "payment_date": draft.payment_date,
    }
    if non_empty(draft.reference_number):
        payload["reference_number"] = draft.reference_number.strip()
    if non_empty(draft.notes):
        payload["notes"] = draft.notes.strip()
    return payload


def _add_account_and_cheque(payload: Dict[str, Any], draft: PaymentDraft, *, with_account: bool = True) -> None:
    if with_account and draft.payment_account_id is not None:
        payload["payment_account_id"] = draft.payment_account_id
    if draft.payment_method == "cheque":
        payload["cheque_number"] = draft.cheque.cheque_number.strip()
        payload["cheque_date"] = draft.cheque.cheque_date
        payload["bank_name"] = draft.cheque.bank_name.strip()


def _build_invoice_payment(draft: InvoicePaymentDraft, customer_id: int) -> Dict[str, Any]:
    payload = _base_payload(draft, customer_id, draft.amount or 0.0, draft.payment_method)
    payload["invoice_id"] = draft.invoice_id
    if draft.use_advance:
        payload["use_advance"] = True
    _add_account_and_cheque(payload, draft, with_account=not draft.use_advance)
    return payload


def _build_advance_payment(draft: AdvancePaymentDraft, customer_id: int) -> Dict[str, Any]:
    payload = _base_payload(draft, customer_id, draft.amount or 0.0, draft.payment_method)
    _add_account_and_cheque(payload, draft)
    return payload


def _build_refund(draft: RefundDraft, customer_id: int) -> Dict[str, Any]:
    first = draft.lines[0] if draft.lines else RefundLine(amount=0.0, payment_account_id=None)
    payload = _base_payload(draft, customer_id, draft.total, first.payment_method)
    payload["invoice_id"] = draft.invoice_id
    if first.payment_account_id is not None:
        payload["payment_account_id"] = first.payment_account_id
    payload["payments"] = [
        {
            "amount": round(line.amount or 0.0, 2),
            "payment_account_id": line.payment_account_id,
            "payment_method": line.payment_method,
        }
        for line in draft.lines
    ]
    payload["restock_items"] = bool(draft.restock_items)
    if draft.loss_account_id is not None:
        payload["loss_account_id"] = draft.loss_account_id
    return payload


_BUILDERS: Dict[type, Callable[[Any, int], Dict[str, Any]]] = {
    InvoicePaymentDraft: _build_invoice_payment,
    AdvancePaymentDraft: _build_advance_payment,
    RefundDraft: _build_refund,
}


def build_request(draft: PaymentDraft, customer_id: int) -> Dict[str, Any]:
    """One fixed request shape per payment type. Call only after validate() passed."""
    builder = _BUILDERS.get(type(draft))
    if builder is None:
        raise TypeError(f"Unknown payment draft: {type(draft).__name__}")
    return builder(draft, customer_id)


# ---------- Mutable form state ----------

@dataclass
class RefundLineInput:
    amount_text: str = ""
    payment_account_id: Optional[int] = None
    payment_method: str = "cash"


def _parse_amount(text: Any) -> Optional[float]:
    ok, value = try_parse_float(str(text).strip() if text is not None else None)
    return value if ok else None


def _amount_text(value: float) -> str:
    return f"{value:.2f}"


class PaymentFormState:
    """
    What the record-payment dialog edits. Holds raw text for amounts so a
    half-typed number survives validation errors untouched.
    """

    def __init__(self, summary: Optional[AccountSummary], *, payment_type: str = INVOICE_PAYMENT):
        self.summary = summary
        self.payment_type = INVOICE_PAYMENT
        self.invoice_id: Optional[int] = None
        self.amount_text = ""
        self.payment_method = "cash"
        self.payment_account_id: Optional[int] = None
        self.use_advance = False
        self.cheque_number = ""
        self.cheque_date = ""
        self.bank_name = ""
        self.payment_date = today_str()
        self.reference_number = ""
        self.notes = ""
        self.refund_lines: List[RefundLineInput] = []
        self.restock_items = False
        self.loss_account_id: Optional[int] = None
        self.errors: ValidationErrors = {}
        self.set_payment_type(payment_type)

    # ---- eligible invoices ----

    def payable_invoices(self) -> List[OutstandingInvoiceRef]:
        if self.summary is None:
            return []
        return [inv for inv in self.summary.outstanding_invoices if is_payable(inv)]

    def refundable_invoices(self) -> List[OutstandingInvoiceRef]:
        if self.summary is None:
            return []
        return [inv for inv in self.summary.outstanding_invoices if is_refundable(inv)]

    def eligible_invoices(self) -> List[OutstandingInvoiceRef]:
        if self.payment_type == INVOICE_PAYMENT:
            return self.payable_invoices()
        if self.payment_type == REFUND:
            return self.refundable_invoices()
        return []

    def selected_invoice(self) -> Optional[OutstandingInvoiceRef]:
        return _find_invoice(self.summary, self.invoice_id)

    # ---- transitions ----

    def set_payment_type(self, payment_type: str) -> None:
        if payment_type not in PAYMENT_TYPES:
            raise ValueError(f"Unknown payment type: {payment_type!r}")
        self.payment_type = payment_type
        self.errors = {}
        self.invoice_id = None
        if payment_type != INVOICE_PAYMENT:
            self.use_advance = False
        if payment_type == REFUND:
            self.refund_lines = [RefundLineInput(payment_account_id=self.payment_account_id)]
        else:
            self.refund_lines = []

        candidates = self.eligible_invoices()
        if candidates:
            self.select_invoice(candidates[0].invoice_id)
        elif payment_type != ADVANCE_PAYMENT:
            self.amount_text = ""

    def select_invoice(self, invoice_id: Optional[int]) -> None:
        self.invoice_id = invoice_id
        inv = self.selected_invoice()
        if inv is None:
            return
        if self.payment_type == INVOICE_PAYMENT:
            self.amount_text = _amount_text(inv.due_amount)
        elif self.payment_type == REFUND and len(self.refund_lines) == 1 and not self.refund_lines[0].amount_text:
            self.refund_lines[0].amount_text = _amount_text(inv.paid_amount)

    def set_use_advance(self, flag: bool) -> None:
        self.use_advance = bool(flag) and self.payment_type == INVOICE_PAYMENT
        if self.use_advance:
            self.payment_account_id = None

    def set_payment_account(self, account_id: Optional[int]) -> None:
        self.payment_account_id = account_id
        if account_id is not None:
            self.use_advance = False

    def apply_default_account(self, accounts: List[Dict[str, Any]]) -> None:
        """Preselect the first offered account when nothing is chosen yet."""
        if self.payment_account_id is not None or self.use_advance or not accounts:
            return
        first = accounts[0].get("id")
        try:
            self.payment_account_id = int(first) if first is not None else None
        except (TypeError, ValueError):
            self.payment_account_id = None
        for line in self.refund_lines:
            if line.payment_account_id is None:
                line.payment_account_id = self.payment_account_id

    def add_refund_line(self) -> RefundLineInput:
        line = RefundLineInput(payment_account_id=self.payment_account_id)
        self.refund_lines.append(line)
        return line

    def remove_refund_line(self, index: int) -> None:
        """The last remaining line cannot be removed."""
        if len(self.refund_lines) <= 1:
            return
        if 0 <= index < len(self.refund_lines):
            del self.refund_lines[index]

    def update_refund_line(self, index: int, **changes: Any) -> None:
        line = self.refund_lines[index]
        for key, value in changes.items():
            if not hasattr(line, key):
                raise AttributeError(f"RefundLineInput has no field {key!r}")
            setattr(line, key, value)

    def refund_total(self) -> float:
        return sum_amounts(_parse_amount(line.amount_text) or 0.0 for line in self.refund_lines)

    # ---- output ----

    def draft(self) -> PaymentDraft:
        common = dict(
            amount=_parse_amount(self.amount_text),
            payment_method=self.payment_method,
            payment_date=self.payment_date,
            payment_account_id=self.payment_account_id,
            cheque=ChequeDetails(self.cheque_number, self.cheque_date, self.bank_name),
            reference_number=self.reference_number,
            notes=self.notes,
        )
        if self.payment_type == INVOICE_PAYMENT:
            return InvoicePaymentDraft(invoice_id=self.invoice_id, use_advance=self.use_advance, **common)
        if self.payment_type == ADVANCE_PAYMENT:
            return AdvancePaymentDraft(**common)
        lines = tuple(
            RefundLine(
                amount=_parse_amount(line.amount_text),
                payment_account_id=line.payment_account_id,
                payment_method=line.payment_method,
            )
            for line in self.refund_lines
        )
        common["amount"] = None
        return RefundDraft(
            invoice_id=self.invoice_id,
            lines=lines,
            restock_items=self.restock_items,
            loss_account_id=self.loss_account_id,
            **common,
        )

    def validate(self, *, today: Optional[date] = None) -> ValidationErrors:
        self.errors = validate(self.draft(), self.summary, today=today)
        return self.errors

    def build(self, customer_id: int, *, today: Optional[date] = None) -> Optional[Dict[str, Any]]:
        """Request body, or None when validation failed (errors kept on self.errors)."""
        if self.validate(today=today):
            return None
        return build_request(self.draft(), customer_id)
