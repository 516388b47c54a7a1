from __future__ import annotations

from typing import Dict, Optional

from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from ...constants import DEFAULT_CURRENCY
from ...utils.helpers import fmt_money
from ...widgets.table_view import TableView
from ..payments.customer_payments.models import AccountSummary
from .model import AdvanceTransactionsTableModel, OutstandingInvoicesTableModel


class CustomerAccountDetails(QWidget):
    def __init__(self, parent=None, *, currency: str = DEFAULT_CURRENCY):
        super().__init__(parent)
        self._currency = currency

        box = QGroupBox("Account Summary")
        f = QFormLayout(box)

        self.lab_total_spent = QLabel("-")
        self.lab_total_paid = QLabel("-")
        self.lab_due = QLabel("-")
        self.lab_opening_due = QLabel("-")
        self.lab_advance = QLabel("-")
        self.lab_outstanding = QLabel("-")    # count of outstanding invoices

        f.addRow("Total Spent:", self.lab_total_spent)
        f.addRow("Total Paid:", self.lab_total_paid)
        f.addRow("Amount Due:", self.lab_due)
        f.addRow("Opening Due:", self.lab_opening_due)
        f.addRow("Advance Balance:", self.lab_advance)
        f.addRow("Outstanding Invoices:", self.lab_outstanding)

        self.lab_estimated = QLabel(
            "Estimated from invoices; partial payments and advances are not reflected."
        )
        self.lab_estimated.setWordWrap(True)
        self.lab_estimated.setStyleSheet("color:#8a6d3b;")
        self.lab_estimated.setVisible(False)

        self.lab_empty = QLabel("No payment data for this customer yet.")
        self.lab_empty.setVisible(False)

        # Lists are hidden while empty
        self.outstanding_box = QGroupBox("Outstanding Invoices")
        self.outstanding_model = OutstandingInvoicesTableModel()
        self.outstanding_table = TableView()
        self.outstanding_table.set_source_model(self.outstanding_model)
        QVBoxLayout(self.outstanding_box).addWidget(self.outstanding_table)
        self.outstanding_box.setVisible(False)

        self.advance_box = QGroupBox("Advance Transactions")
        self.advance_model = AdvanceTransactionsTableModel()
        self.advance_table = TableView()
        self.advance_table.set_source_model(self.advance_model)
        QVBoxLayout(self.advance_box).addWidget(self.advance_table)
        self.advance_box.setVisible(False)

        root = QVBoxLayout(self)
        root.addWidget(box)
        root.addWidget(self.lab_estimated)
        root.addWidget(self.lab_empty)
        root.addWidget(self.outstanding_box, 1)
        root.addWidget(self.advance_box, 1)
        root.addStretch(1)

    def _money(self, val) -> str:
        return fmt_money(val, currency=self._currency)

    # ---------------- API ----------------

    def clear(self):
        for lab in (
            self.lab_total_spent, self.lab_total_paid, self.lab_due,
            self.lab_opening_due, self.lab_advance, self.lab_outstanding,
        ):
            lab.setText("-")
        self.lab_estimated.setVisible(False)
        self.lab_empty.setVisible(False)
        self.outstanding_model.replace([], {})
        self.advance_model.replace([])
        self.outstanding_box.setVisible(False)
        self.advance_box.setVisible(False)

    def set_summary(
        self,
        summary: Optional[AccountSummary],
        *,
        has_data: bool = True,
        item_summaries: Optional[Dict[int, str]] = None,
    ):
        if summary is None:
            self.clear()
            return
        self.lab_total_spent.setText(self._money(summary.total_spent))
        self.lab_total_paid.setText(self._money(summary.total_paid))
        self.lab_due.setText(self._money(summary.due_amount))
        self.lab_opening_due.setText(self._money(summary.opening_due_amount))
        self.lab_advance.setText(self._money(summary.advance_balance))
        self.lab_outstanding.setText(str(len(summary.outstanding_invoices)))
        self.lab_estimated.setVisible(summary.estimated)
        self.lab_empty.setVisible(not has_data)

        self.outstanding_model.replace(summary.outstanding_invoices, item_summaries or {})
        self.outstanding_box.setVisible(bool(summary.outstanding_invoices))
        self.advance_model.replace(summary.advance_transactions)
        self.advance_box.setVisible(bool(summary.advance_transactions))
        self.outstanding_table.resizeColumnsToContents()
        self.advance_table.resizeColumnsToContents()
