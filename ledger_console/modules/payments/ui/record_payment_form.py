from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import Qt, QDate
from PySide6.QtWidgets import (
    QApplication,
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from ....constants import (
    ADVANCE_PAYMENT,
    DEFAULT_CURRENCY,
    INVOICE_PAYMENT,
    METHODS,
    PAYMENT_TYPE_LABELS,
    PAYMENT_TYPES,
    REFUND,
)
from ....utils.helpers import fmt_money
from ..customer_payments.transaction_builder import PaymentFormState


def _t(s: str) -> str:
    """Trivial translation shim (replace with Qt tr() if you wire it)."""
    return s


# Order in which errors are reported in the inline label
ERROR_ORDER = (
    "invoice", "amount", "method", "advance", "account", "cheque_number", "cheque_date",
    "bank_name", "reference", "date", "refund_total",
)


def open_record_payment_form(
    form: PaymentFormState,
    *,
    customer_id: int,
    payment_accounts: Optional[List[Dict[str, Any]]] = None,
    loss_accounts: Optional[List[Dict[str, Any]]] = None,
    currency: str = DEFAULT_CURRENCY,
    parent: Optional[QWidget] = None,
) -> Optional[dict]:
    """
    Shows the record-payment dialog.
    Returns the request body on Save, or None on Cancel.
    """
    app = QApplication.instance()
    owns_app = False
    if app is None:
        # Allow standalone manual testing
        app = QApplication([])
        owns_app = True
    dlg = RecordPaymentDialog(
        parent,
        form=form,
        customer_id=customer_id,
        payment_accounts=payment_accounts,
        loss_accounts=loss_accounts,
        currency=currency,
    )
    result = dlg.exec()
    payload = dlg.payload() if result == QDialog.Accepted else None
    if owns_app:
        app.quit()
    return payload


class _RefundLineRow(QWidget):
    def __init__(self, index: int, accounts: List[Dict[str, Any]], parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.index = index
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)

        self.amountEdit = QLineEdit()
        self.amountEdit.setPlaceholderText(_t("Amount"))
        self.accountCombo = QComboBox()
        self.accountCombo.addItem(_t("Select account"), None)
        for acc in accounts:
            self.accountCombo.addItem(str(acc.get("name", "")), acc.get("id"))
        self.methodCombo = QComboBox()
        for value, label in METHODS:
            self.methodCombo.addItem(_t(label), value)
        self.removeBtn = QPushButton(_t("Remove"))

        lay.addWidget(self.amountEdit, 1)
        lay.addWidget(self.accountCombo, 2)
        lay.addWidget(self.methodCombo, 1)
        lay.addWidget(self.removeBtn)


class RecordPaymentDialog(QDialog):
    """
    Record payment / advance / refund for one customer.

    All rules live in PaymentFormState; this dialog only mirrors widgets
    into it and shows its errors. Save stays disabled while validation
    fails, and nothing in the form is reset after a failed submission.

    Exposed methods:
      - exec() -> int  (QDialog.Accepted / Rejected)
      - payload() -> dict | None  (None iff canceled)
    """

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        form: PaymentFormState,
        customer_id: int,
        payment_accounts: Optional[List[Dict[str, Any]]] = None,
        loss_accounts: Optional[List[Dict[str, Any]]] = None,
        currency: str = DEFAULT_CURRENCY,
    ):
        super().__init__(parent)
        self.setWindowTitle(_t("Record Payment"))
        self.setModal(True)
        self.form = form
        self._customer_id = int(customer_id)
        self._payment_accounts = list(payment_accounts or [])
        self._loss_accounts = list(loss_accounts or [])
        self._currency = currency
        self._payload: Optional[dict] = None
        self._syncing = False
        self._refund_rows: List[_RefundLineRow] = []

        self.form.apply_default_account(self._payment_accounts)

        self._build_ui()
        self._wire_signals()
        self._sync_from_state()
        self._sync_to_state()
        self._validate_live()
        self.resize(620, 560)

    # ------------------------- UI -------------------------
    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)

        # Payment type
        type_row = QHBoxLayout()
        self.typeGroup = QButtonGroup(self)
        self.typeButtons: Dict[str, QRadioButton] = {}
        for i, ptype in enumerate(PAYMENT_TYPES):
            btn = QRadioButton(_t(PAYMENT_TYPE_LABELS[ptype]))
            self.typeGroup.addButton(btn, i)
            self.typeButtons[ptype] = btn
            type_row.addWidget(btn)
        outer.addLayout(type_row)

        form = QFormLayout()
        outer.addLayout(form)

        self.invoiceCombo = QComboBox()
        self.invoiceLabel = QLabel(_t("Invoice"))
        form.addRow(self.invoiceLabel, self.invoiceCombo)

        self.amountEdit = QLineEdit()
        self.amountEdit.setPlaceholderText("0.00")
        self.amountLabel = QLabel(_t("Amount"))
        form.addRow(self.amountLabel, self.amountEdit)

        self.methodCombo = QComboBox()
        for value, label in METHODS:
            self.methodCombo.addItem(_t(label), value)
        self.methodLabel = QLabel(_t("Payment Method"))
        form.addRow(self.methodLabel, self.methodCombo)

        self.useAdvanceCheck = QCheckBox(_t("Pay from customer advance"))
        self.advanceHint = QLabel("")
        adv_row = QHBoxLayout()
        adv_row.addWidget(self.useAdvanceCheck)
        adv_row.addWidget(self.advanceHint, 1, Qt.AlignRight)
        self.advanceRow = QWidget()
        self.advanceRow.setLayout(adv_row)
        form.addRow(QLabel(""), self.advanceRow)

        self.accountCombo = QComboBox()
        self.accountCombo.addItem(_t("Select account"), None)
        for acc in self._payment_accounts:
            self.accountCombo.addItem(str(acc.get("name", "")), acc.get("id"))
        self.accountLabel = QLabel(_t("Payment Account"))
        form.addRow(self.accountLabel, self.accountCombo)

        # Cheque details
        self.chequeBox = QGroupBox(_t("Cheque Details"))
        cheque_grid = QGridLayout(self.chequeBox)
        self.chequeNoEdit = QLineEdit()
        self.chequeDateEdit = QDateEdit()
        self.chequeDateEdit.setCalendarPopup(True)
        self.chequeDateEdit.setDisplayFormat("yyyy-MM-dd")
        self.chequeDateEdit.setDate(QDate.currentDate())
        self.bankNameEdit = QLineEdit()
        cheque_grid.addWidget(QLabel(_t("Cheque No")), 0, 0)
        cheque_grid.addWidget(self.chequeNoEdit, 0, 1)
        cheque_grid.addWidget(QLabel(_t("Cheque Date")), 1, 0)
        cheque_grid.addWidget(self.chequeDateEdit, 1, 1)
        cheque_grid.addWidget(QLabel(_t("Bank Name")), 2, 0)
        cheque_grid.addWidget(self.bankNameEdit, 2, 1)
        outer.addWidget(self.chequeBox)

        # Refund lines
        self.refundBox = QGroupBox(_t("Refund Lines"))
        refund_lay = QVBoxLayout(self.refundBox)
        self.refundLinesLayout = QVBoxLayout()
        refund_lay.addLayout(self.refundLinesLayout)
        foot = QHBoxLayout()
        self.addLineBtn = QPushButton(_t("Add line"))
        self.refundTotalLabel = QLabel("")
        foot.addWidget(self.addLineBtn)
        foot.addStretch(1)
        foot.addWidget(self.refundTotalLabel)
        refund_lay.addLayout(foot)

        refund_form = QFormLayout()
        self.lossAccountCombo = QComboBox()
        self.lossAccountCombo.addItem(_t("Default (Sales Return)"), None)
        for acc in self._loss_accounts:
            self.lossAccountCombo.addItem(str(acc.get("name", "")), acc.get("id"))
        self.restockCheck = QCheckBox(_t("Return items to stock"))
        refund_form.addRow(_t("Loss Account"), self.lossAccountCombo)
        refund_form.addRow(QLabel(""), self.restockCheck)
        refund_lay.addLayout(refund_form)
        outer.addWidget(self.refundBox)

        tail = QFormLayout()
        self.dateEdit = QDateEdit()
        self.dateEdit.setCalendarPopup(True)
        self.dateEdit.setDisplayFormat("yyyy-MM-dd")
        self.referenceEdit = QLineEdit()
        self.referenceEdit.setPlaceholderText(_t("Reference / transaction number (optional)"))
        self.notesEdit = QLineEdit()
        self.notesEdit.setPlaceholderText(_t("Notes (optional)"))
        tail.addRow(_t("Payment Date"), self.dateEdit)
        tail.addRow(_t("Reference No"), self.referenceEdit)
        tail.addRow(_t("Notes"), self.notesEdit)
        outer.addLayout(tail)

        self.errorLabel = QLabel("")
        self.errorLabel.setWordWrap(True)
        self.errorLabel.setStyleSheet("color:#b00020;")
        outer.addWidget(self.errorLabel)

        bb = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        self.saveBtn = bb.button(QDialogButtonBox.Save)
        self.saveBtn.setText(_t("Record Payment"))
        bb.accepted.connect(self._on_save)
        bb.rejected.connect(self.reject)
        outer.addWidget(bb)

    def _wire_signals(self) -> None:
        self.typeGroup.idToggled.connect(self._on_type_toggled)
        self.invoiceCombo.currentIndexChanged.connect(self._on_invoice_changed)
        self.amountEdit.textChanged.connect(self._on_field_changed)
        self.methodCombo.currentIndexChanged.connect(self._on_field_changed)
        self.accountCombo.currentIndexChanged.connect(self._on_account_changed)
        self.useAdvanceCheck.toggled.connect(self._on_use_advance)
        self.chequeNoEdit.textChanged.connect(self._on_field_changed)
        self.chequeDateEdit.dateChanged.connect(self._on_field_changed)
        self.bankNameEdit.textChanged.connect(self._on_field_changed)
        self.lossAccountCombo.currentIndexChanged.connect(self._on_field_changed)
        self.restockCheck.toggled.connect(self._on_field_changed)
        self.dateEdit.dateChanged.connect(self._on_field_changed)
        self.referenceEdit.textChanged.connect(self._on_field_changed)
        self.notesEdit.textChanged.connect(self._on_field_changed)
        self.addLineBtn.clicked.connect(self._on_add_line)

    # ------------------------- state <-> widgets -------------------------
    def _sync_from_state(self) -> None:
        """Push PaymentFormState into the widgets (signals suppressed)."""
        self._syncing = True
        try:
            st = self.form
            self.typeButtons[st.payment_type].setChecked(True)

            self.invoiceCombo.clear()
            self.invoiceCombo.addItem(_t("Select invoice"), None)
            for inv in st.eligible_invoices():
                text = f"{inv.invoice_number or inv.invoice_id}  ({_t('Due')}: {fmt_money(inv.due_amount, currency=self._currency)})"
                self.invoiceCombo.addItem(text, inv.invoice_id)
            self._select_data(self.invoiceCombo, st.invoice_id)

            self.amountEdit.setText(st.amount_text)
            self._select_data(self.methodCombo, st.payment_method)
            self._select_data(self.accountCombo, st.payment_account_id)
            self.useAdvanceCheck.setChecked(st.use_advance)
            balance = st.summary.advance_balance if st.summary is not None else 0.0
            self.advanceHint.setText(_t("Available: ") + fmt_money(balance, currency=self._currency))
            self.chequeNoEdit.setText(st.cheque_number)
            if st.cheque_date:
                self.chequeDateEdit.setDate(QDate.fromString(st.cheque_date, "yyyy-MM-dd"))
            self.bankNameEdit.setText(st.bank_name)
            self._select_data(self.lossAccountCombo, st.loss_account_id)
            self.restockCheck.setChecked(st.restock_items)
            self.dateEdit.setDate(QDate.fromString(st.payment_date, "yyyy-MM-dd"))
            self.referenceEdit.setText(st.reference_number)
            self.notesEdit.setText(st.notes)
            self._rebuild_refund_rows()
        finally:
            self._syncing = False
        self._refresh_visibility()

    def _sync_to_state(self) -> None:
        st = self.form
        st.amount_text = self.amountEdit.text()
        st.payment_method = self.methodCombo.currentData() or "cash"
        if not st.use_advance:
            st.payment_account_id = self.accountCombo.currentData()
        st.cheque_number = self.chequeNoEdit.text()
        st.cheque_date = self.chequeDateEdit.date().toString("yyyy-MM-dd")
        st.bank_name = self.bankNameEdit.text()
        st.loss_account_id = self.lossAccountCombo.currentData()
        st.restock_items = self.restockCheck.isChecked()
        st.payment_date = self.dateEdit.date().toString("yyyy-MM-dd")
        st.reference_number = self.referenceEdit.text()
        st.notes = self.notesEdit.text()
        for i, row in enumerate(self._refund_rows):
            st.update_refund_line(
                i,
                amount_text=row.amountEdit.text(),
                payment_account_id=row.accountCombo.currentData(),
                payment_method=row.methodCombo.currentData() or "cash",
            )

    def _rebuild_refund_rows(self) -> None:
        for row in self._refund_rows:
            self.refundLinesLayout.removeWidget(row)
            row.deleteLater()
        self._refund_rows = []
        for i, line in enumerate(self.form.refund_lines):
            row = _RefundLineRow(i, self._payment_accounts, self)
            row.amountEdit.setText(line.amount_text)
            self._select_data(row.accountCombo, line.payment_account_id)
            self._select_data(row.methodCombo, line.payment_method)
            row.removeBtn.setEnabled(len(self.form.refund_lines) > 1)
            row.amountEdit.textChanged.connect(self._on_field_changed)
            row.accountCombo.currentIndexChanged.connect(self._on_field_changed)
            row.methodCombo.currentIndexChanged.connect(self._on_field_changed)
            row.removeBtn.clicked.connect(lambda _=False, idx=i: self._on_remove_line(idx))
            self.refundLinesLayout.addWidget(row)
            self._refund_rows.append(row)

    def _refresh_visibility(self) -> None:
        ptype = self.form.payment_type
        is_refund = ptype == REFUND
        self.invoiceLabel.setVisible(ptype != ADVANCE_PAYMENT)
        self.invoiceCombo.setVisible(ptype != ADVANCE_PAYMENT)
        for w in (self.amountLabel, self.amountEdit, self.methodLabel, self.methodCombo):
            w.setVisible(not is_refund)
        self.advanceRow.setVisible(ptype == INVOICE_PAYMENT)
        show_account = not is_refund and not self.form.use_advance
        self.accountLabel.setVisible(show_account)
        self.accountCombo.setVisible(show_account)
        self.chequeBox.setVisible(not is_refund and self.form.payment_method == "cheque")
        self.refundBox.setVisible(is_refund)
        if is_refund:
            self.refundTotalLabel.setText(
                _t("Total refund: ") + fmt_money(self.form.refund_total(), currency=self._currency)
            )

    @staticmethod
    def _select_data(combo: QComboBox, value: Any) -> None:
        idx = combo.findData(value)
        combo.setCurrentIndex(idx if idx >= 0 else 0)

    # ------------------------- handlers -------------------------
    def _on_type_toggled(self, button_id: int, checked: bool) -> None:
        if self._syncing or not checked:
            return
        self._sync_to_state()
        self.form.set_payment_type(PAYMENT_TYPES[button_id])
        self._sync_from_state()
        self._validate_live()

    def _on_invoice_changed(self) -> None:
        if self._syncing:
            return
        self._sync_to_state()
        self.form.select_invoice(self.invoiceCombo.currentData())
        self._sync_from_state()
        self._validate_live()

    def _on_account_changed(self) -> None:
        if self._syncing:
            return
        self.form.set_payment_account(self.accountCombo.currentData())
        self._on_field_changed()

    def _on_use_advance(self, checked: bool) -> None:
        if self._syncing:
            return
        self._sync_to_state()
        self.form.set_use_advance(checked)
        self._sync_from_state()
        self._validate_live()

    def _on_add_line(self) -> None:
        self._sync_to_state()
        self.form.add_refund_line()
        self._sync_from_state()
        self._validate_live()

    def _on_remove_line(self, index: int) -> None:
        self._sync_to_state()
        self.form.remove_refund_line(index)
        self._sync_from_state()
        self._validate_live()

    def _on_field_changed(self, *_args) -> None:
        if self._syncing:
            return
        self._sync_to_state()
        self._refresh_visibility()
        self._validate_live()

    # ------------------------- Validation -------------------------
    def _first_error(self, errors: Dict[str, str]) -> Optional[str]:
        for key in ERROR_ORDER:
            if key in errors:
                return errors[key]
        return next(iter(errors.values()), None)

    def _validate_live(self) -> None:
        ok, msg = self._validate()
        self.errorLabel.setText(msg or "")
        self.saveBtn.setEnabled(ok)

    def _validate(self) -> tuple[bool, Optional[str]]:
        errors = self.form.validate()
        if errors:
            return False, _t(self._first_error(errors) or "")
        return True, None

    # ------------------------- Save / Cancel -------------------------
    def _on_save(self) -> None:
        self._sync_to_state()
        payload = self.form.build(self._customer_id)
        if payload is None:
            msg = self._first_error(self.form.errors)
            self.errorLabel.setText(msg or "")
            QMessageBox.warning(self, _t("Cannot Save"), msg or _t("Please correct the highlighted fields."))
            return
        self._payload = payload
        self.accept()

    def payload(self) -> Optional[dict]:
        return self._payload

    def show_submit_error(self, message: str) -> None:
        """Server rejected the request: keep every field and show why."""
        self._payload = None
        self.errorLabel.setText(message)
