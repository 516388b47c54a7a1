import pytest

pytest.importorskip("PySide6")

from PySide6.QtWidgets import QDialog  # noqa: E402

from ledger_console.constants import ADVANCE_PAYMENT, REFUND  # noqa: E402
from ledger_console.modules.payments.customer_payments.models import (  # noqa: E402
    AccountSummary,
    OutstandingInvoiceRef,
)
from ledger_console.modules.payments.customer_payments.transaction_builder import PaymentFormState  # noqa: E402
from ledger_console.modules.payments.ui.record_payment_form import (  # noqa: E402
    RecordPaymentDialog,
    open_record_payment_form,
)

ACCOUNTS = [{"id": 3, "name": "Cash in Hand"}, {"id": 4, "name": "Meezan Bank"}]


@pytest.fixture
def summary():
    return AccountSummary(
        customer_id=7,
        due_amount=1300.0,
        advance_balance=200.0,
        outstanding_invoices=[
            OutstandingInvoiceRef(11, "INV-011", 1000.0, 1000.0, status="issued"),
            OutstandingInvoiceRef(12, "INV-012", 1000.0, 300.0, status="partially_paid"),
        ],
    )


@pytest.fixture
def dialog(qtbot, summary):
    dlg = RecordPaymentDialog(
        form=PaymentFormState(summary),
        customer_id=7,
        payment_accounts=ACCOUNTS,
        loss_accounts=[{"id": 90, "name": "Inventory Loss"}],
    )
    qtbot.addWidget(dlg)
    return dlg


def test_opens_on_first_payable_invoice_with_due_filled(dialog):
    assert dialog.invoiceCombo.currentData() == 11
    assert dialog.amountEdit.text() == "1000.00"
    assert dialog.accountCombo.currentData() == 3
    assert dialog.saveBtn.isEnabled()
    assert dialog.errorLabel.text() == ""


def test_save_builds_invoice_payment(dialog):
    dialog._on_save()
    assert dialog.result() == QDialog.Accepted
    payload = dialog.payload()
    assert payload["payment_type"] == "invoice_payment"
    assert payload["invoice_id"] == 11
    assert payload["amount"] == 1000.0
    assert payload["payment_account_id"] == 3
    assert payload["customer_id"] == 7


def test_changing_invoice_refills_amount(dialog):
    dialog.invoiceCombo.setCurrentIndex(dialog.invoiceCombo.findData(12))
    assert dialog.amountEdit.text() == "300.00"


def test_invalid_amount_disables_save(dialog):
    dialog.amountEdit.setText("")
    assert not dialog.saveBtn.isEnabled()
    assert dialog.errorLabel.text() == "Amount must be greater than 0"

    dialog.amountEdit.setText("250")
    assert dialog.saveBtn.isEnabled()


def test_cheque_method_shows_cheque_fields(dialog):
    assert dialog.chequeBox.isHidden()
    dialog.methodCombo.setCurrentIndex(dialog.methodCombo.findData("cheque"))
    assert not dialog.chequeBox.isHidden()
    assert dialog.errorLabel.text() == "Cheque number is required for cheque payments"
    dialog.chequeNoEdit.setText("000123")
    dialog.bankNameEdit.setText("HBL")
    assert dialog.saveBtn.isEnabled()


def test_method_error_is_reported_before_account(dialog):
    errors = {"account": "Please select a payment account", "method": "Please select a payment method"}
    assert dialog._first_error(errors) == "Please select a payment method"


def test_nan_amount_disables_save(dialog):
    dialog.amountEdit.setText("nan")
    assert not dialog.saveBtn.isEnabled()
    assert dialog.errorLabel.text() == "Amount must be greater than 0"


def test_use_advance_hides_account_and_checks_balance(dialog):
    dialog.useAdvanceCheck.setChecked(True)
    assert dialog.accountCombo.isHidden()
    assert dialog.form.payment_account_id is None
    assert dialog.errorLabel.text() == "Insufficient advance balance. Available: 200.00"

    dialog.amountEdit.setText("150")
    assert dialog.saveBtn.isEnabled()


def test_advance_type_hides_invoice(dialog):
    dialog.typeButtons[ADVANCE_PAYMENT].setChecked(True)
    assert dialog.form.payment_type == ADVANCE_PAYMENT
    assert dialog.invoiceCombo.isHidden()
    assert dialog.advanceRow.isHidden()


def test_refund_type_shows_refund_lines(dialog):
    dialog.typeButtons[REFUND].setChecked(True)

    assert not dialog.refundBox.isHidden()
    assert dialog.amountEdit.isHidden()
    # only the partially paid invoice is refundable; paid portion prefilled
    assert dialog.invoiceCombo.count() == 2
    assert dialog.invoiceCombo.currentData() == 12
    assert len(dialog._refund_rows) == 1
    assert dialog._refund_rows[0].amountEdit.text() == "700.00"
    assert not dialog._refund_rows[0].removeBtn.isEnabled()


def test_refund_lines_can_be_added_and_removed(dialog):
    dialog.typeButtons[REFUND].setChecked(True)
    dialog.addLineBtn.click()
    assert len(dialog._refund_rows) == 2
    assert dialog._refund_rows[0].amountEdit.text() == "700.00"

    dialog._refund_rows[1].amountEdit.setText("400")
    assert dialog.errorLabel.text().startswith("Total refund")
    assert not dialog.saveBtn.isEnabled()

    dialog._refund_rows[1].removeBtn.click()
    assert len(dialog._refund_rows) == 1
    assert dialog.saveBtn.isEnabled()


def test_submit_error_keeps_fields(dialog):
    dialog.amountEdit.setText("420")
    dialog.referenceEdit.setText("R-1")
    dialog.show_submit_error("Invoice already paid")
    assert dialog.errorLabel.text() == "Invoice already paid"
    assert dialog.amountEdit.text() == "420"
    assert dialog.referenceEdit.text() == "R-1"
    assert dialog.payload() is None


def test_open_form_returns_payload_or_none(qtbot, monkeypatch, summary):
    def accept_and_save(self):
        self._on_save()
        return self.result()

    monkeypatch.setattr(RecordPaymentDialog, "exec", accept_and_save)
    payload = open_record_payment_form(PaymentFormState(summary), customer_id=7, payment_accounts=ACCOUNTS)
    assert payload["invoice_id"] == 11

    monkeypatch.setattr(RecordPaymentDialog, "exec", lambda self: QDialog.Rejected)
    assert open_record_payment_form(PaymentFormState(summary), customer_id=7, payment_accounts=ACCOUNTS) is None
