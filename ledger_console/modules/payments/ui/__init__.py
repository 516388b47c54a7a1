from .advance_summary_dialog import AdvanceSummaryDialog
from .record_payment_form import RecordPaymentDialog, open_record_payment_form

__all__ = ["AdvanceSummaryDialog", "RecordPaymentDialog", "open_record_payment_form"]
