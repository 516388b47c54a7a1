from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSplitter,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ...constants import DEFAULT_CURRENCY, TAB_CUSTOMER_PAYMENTS, TAB_TRANSACTIONS
from ...widgets.table_view import TableView
from .details import CustomerAccountDetails
from .model import CustomerInvoicesTableModel, CustomerPaymentsTableModel


class CustomerAccountView(QWidget):
    """
    Customer account view:
      - Toolbar: Record Payment, Clear Cheque, Bounce Cheque, Refresh
      - Tabs: Customer Payments (summary + payments table), Transactions (invoices)
    """

    TAB_IDS = (TAB_CUSTOMER_PAYMENTS, TAB_TRANSACTIONS)

    def __init__(self, parent=None, *, currency: str = DEFAULT_CURRENCY):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.btn_record_payment = QPushButton("Record Payment")
        self.btn_clear_cheque = QPushButton("Clear Cheque")
        self.btn_bounce_cheque = QPushButton("Bounce Cheque")
        self.btn_refresh = QPushButton("Refresh")
        for b in (self.btn_record_payment, self.btn_clear_cheque, self.btn_bounce_cheque):
            bar.addWidget(b)
        bar.addStretch(1)
        self.lab_status = QLabel("")
        bar.addWidget(self.lab_status)
        bar.addWidget(self.btn_refresh)
        root.addLayout(bar)

        self.tabs = QTabWidget()

        # Customer payments tab
        pay_tab = QWidget()
        split = QSplitter(Qt.Horizontal, pay_tab)
        self.details = CustomerAccountDetails(currency=currency)
        self.payments_model = CustomerPaymentsTableModel()
        self.payments_table = TableView()
        self.payments_table.set_source_model(self.payments_model)
        split.addWidget(self.details)
        split.addWidget(self.payments_table)
        split.setStretchFactor(0, 2)
        split.setStretchFactor(1, 3)
        lay = QVBoxLayout(pay_tab)
        lay.addWidget(split)
        self.tabs.addTab(pay_tab, "Customer Payments")

        # Transactions tab
        self.invoices_model = CustomerInvoicesTableModel()
        self.invoices_table = TableView()
        self.invoices_table.set_source_model(self.invoices_model)
        self.tabs.addTab(self.invoices_table, "Transactions")

        root.addWidget(self.tabs, 1)

    def current_tab_id(self) -> str:
        return self.TAB_IDS[max(0, self.tabs.currentIndex())]

    def selected_payment(self):
        row = self.payments_table.selected_source_row()
        return self.payments_model.at(row) if row is not None else None
