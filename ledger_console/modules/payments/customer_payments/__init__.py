from .auto_apply import SubmitOutcome, interpret_response, parse_auto_apply
from .models import (
    AccountSummary,
    AdvanceSummary,
    AdvanceTransaction,
    AutoAppliedPayment,
    AutoApplyResult,
    OutstandingInvoiceRef,
)
from .submission import ActionResult, describe_api_error, submit_payment
from .transaction_builder import (
    AdvancePaymentDraft,
    InvoicePaymentDraft,
    PaymentFormState,
    RefundDraft,
    RefundLine,
    build_request,
    validate,
)

__all__ = [
    "AccountSummary",
    "ActionResult",
    "AdvancePaymentDraft",
    "AdvanceSummary",
    "AdvanceTransaction",
    "AutoAppliedPayment",
    "AutoApplyResult",
    "InvoicePaymentDraft",
    "OutstandingInvoiceRef",
    "PaymentFormState",
    "RefundDraft",
    "RefundLine",
    "SubmitOutcome",
    "build_request",
    "describe_api_error",
    "interpret_response",
    "parse_auto_apply",
    "submit_payment",
    "validate",
]
