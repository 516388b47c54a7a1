from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...constants import ADVANCE_RECEIVED, ADVANCE_REFUNDED, ADVANCE_USED, METHODS, PAYMENT_TYPE_LABELS
from ...utils.helpers import fmt_money
from ...utils.validators import to_float
from ..payments.customer_payments.models import AdvanceTransaction, OutstandingInvoiceRef
from ..payments.payment_utilities.status import label as status_label

_METHOD_LABELS = dict(METHODS)


class CustomerPaymentsTableModel(QAbstractTableModel):
    """
    Customer payments, latest first (the controller sorts them).

    Rows are raw API dicts; missing fields show as empty text. The custom
    ROW_ROLE returns the whole dict so actions (clear/bounce cheque) can
    read the payment behind a selected row.
    """

    HEADERS = ["Payment #", "Date", "Type", "Method", "Invoice", "Amount", "Status"]
    ROW_ROLE = Qt.UserRole + 1

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        super().__init__()
        self._rows = list(rows or [])

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    @staticmethod
    def _invoice_text(r: Dict[str, Any]) -> str:
        inv = r.get("invoice") if isinstance(r.get("invoice"), dict) else {}
        if inv.get("invoice_number"):
            return str(inv["invoice_number"])
        return f"#{r['invoice_id']}" if r.get("invoice_id") else ""

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        c = index.column()

        if role == Qt.DisplayRole:
            values = [
                str(r.get("payment_number") or r.get("id") or ""),
                str(r.get("payment_date") or ""),
                PAYMENT_TYPE_LABELS.get(r.get("payment_type"), str(r.get("payment_type") or "")),
                _METHOD_LABELS.get(r.get("payment_method"), str(r.get("payment_method") or "")),
                self._invoice_text(r),
                fmt_money(to_float(r.get("amount"))),
                status_label(r.get("status")),
            ]
            return values[c]
        if role == Qt.TextAlignmentRole and c == 5:
            return Qt.AlignRight | Qt.AlignVCenter
        if role == self.ROW_ROLE:
            return r
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Dict[str, Any]:
        return self._rows[row]

    def replace(self, rows: List[Dict[str, Any]]):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()


class CustomerInvoicesTableModel(QAbstractTableModel):
    """Sale invoices for the transactions tab, with their line-item summary."""

    HEADERS = ["Invoice #", "Date", "Items", "Total", "Status"]

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, item_summaries: Optional[Dict[int, str]] = None):
        super().__init__()
        self._rows = list(rows or [])
        self._items = dict(item_summaries or {})

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid() or role != Qt.DisplayRole:
            return None
        r = self._rows[index.row()]
        try:
            items = self._items.get(int(r.get("id")), "")
        except (TypeError, ValueError):
            items = ""
        values = [
            str(r.get("invoice_number") or ""),
            str(r.get("invoice_date") or ""),
            items,
            fmt_money(to_float(r.get("total_amount"))),
            status_label(r.get("status")),
        ]
        return values[index.column()]

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, rows: List[Dict[str, Any]], item_summaries: Optional[Dict[int, str]] = None):
        self.beginResetModel()
        self._rows = list(rows)
        if item_summaries is not None:
            self._items = dict(item_summaries)
        self.endResetModel()


class OutstandingInvoicesTableModel(QAbstractTableModel):
    """Invoices still owing money, as listed by the account summary."""

    HEADERS = ["Invoice #", "Date", "Due", "Items"]

    def __init__(self, invoices: Optional[List[OutstandingInvoiceRef]] = None,
                 item_summaries: Optional[Dict[int, str]] = None):
        super().__init__()
        self._rows = list(invoices or [])
        self._items = dict(item_summaries or {})

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        inv = self._rows[index.row()]
        c = index.column()
        if role == Qt.DisplayRole:
            values = [
                inv.invoice_number,
                inv.invoice_date or "",
                fmt_money(inv.due_amount),
                self._items.get(inv.invoice_id, ""),
            ]
            return values[c]
        if role == Qt.TextAlignmentRole and c == 2:
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, invoices: List[OutstandingInvoiceRef], item_summaries: Optional[Dict[int, str]] = None):
        self.beginResetModel()
        self._rows = list(invoices)
        if item_summaries is not None:
            self._items = dict(item_summaries)
        self.endResetModel()


_ADVANCE_TYPE_LABELS = {
    ADVANCE_RECEIVED: "Received",
    ADVANCE_USED: "Used",
    ADVANCE_REFUNDED: "Refunded",
}


def advance_description(tx: AdvanceTransaction) -> str:
    if tx.notes or tx.reference:
        return tx.notes or tx.reference
    if tx.transaction_type == ADVANCE_USED and tx.invoice_number:
        return f"Used to pay Invoice #{tx.invoice_number}"
    if tx.transaction_type == ADVANCE_RECEIVED:
        return "Advance payment received"
    if tx.transaction_type == ADVANCE_REFUNDED:
        return "Advance refunded"
    return ""


class AdvanceTransactionsTableModel(QAbstractTableModel):
    """
    Latest advance movements in server order. Amounts are signed for
    display only (+ received, - used/refunded); Balance is the server's
    running snapshot and shows blank when the server sent none.
    """

    HEADERS = ["Date", "Type", "Description", "Amount", "Balance"]
    LIMIT = 10

    def __init__(self, transactions: Optional[List[AdvanceTransaction]] = None):
        super().__init__()
        self._rows = list(transactions or [])[: self.LIMIT]

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        tx = self._rows[index.row()]
        c = index.column()
        if role == Qt.DisplayRole:
            sign = "+" if tx.transaction_type == ADVANCE_RECEIVED else "-"
            values = [
                (tx.transaction_date or "")[:10],
                _ADVANCE_TYPE_LABELS.get(tx.transaction_type, tx.transaction_type.title()),
                advance_description(tx),
                f"{sign}{fmt_money(tx.amount)}",
                fmt_money(tx.balance, sentinel=""),
            ]
            return values[c]
        if role == Qt.TextAlignmentRole and c in (3, 4):
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, transactions: List[AdvanceTransaction]):
        self.beginResetModel()
        self._rows = list(transactions)[: self.LIMIT]
        self.endResetModel()
