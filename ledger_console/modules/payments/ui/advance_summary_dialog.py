from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ....constants import DEFAULT_CURRENCY
from ..customer_payments.auto_apply import SubmitOutcome, applied_rows, summary_rows


def _t(s: str) -> str:
    return s


class AdvanceSummaryDialog(QDialog):
    """
    Shown after an advance payment the server auto-applied to invoices.
    Every figure is the server's; nothing is recomputed here.
    Closing the dialog is the caller's cue to refresh the account.
    """

    COLUMNS = ["Invoice", "Amount Applied", "Status", "Remaining Balance"]

    def __init__(self, outcome: SubmitOutcome, parent: Optional[QWidget] = None, *, currency: str = DEFAULT_CURRENCY):
        super().__init__(parent)
        self.setWindowTitle(_t("Advance Payment Applied"))
        self.setModal(True)
        self.outcome = outcome

        outer = QVBoxLayout(self)
        headline = QLabel(outcome.toast)
        headline.setWordWrap(True)
        outer.addWidget(headline)

        result = outcome.result
        box_sum = QGroupBox(_t("Advance Summary"))
        f_sum = QFormLayout(box_sum)
        self.summaryLabels = {}
        for caption, value in summary_rows(result.advance_summary if result else None, currency=currency):
            lab = QLabel(value)
            self.summaryLabels[caption] = lab
            f_sum.addRow(_t(caption) + ":", lab)
        outer.addWidget(box_sum)

        rows = applied_rows(result, currency=currency)
        self.table = QTableWidget(len(rows), len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels([_t(c) for c in self.COLUMNS])
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        for r, row in enumerate(rows):
            for c, key in enumerate(("invoice_number", "amount_applied", "status", "remaining")):
                self.table.setItem(r, c, QTableWidgetItem(row[key]))
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.resizeColumnsToContents()
        outer.addWidget(self.table, 1)

        self.anomalyLabel = QLabel(outcome.anomaly or "")
        self.anomalyLabel.setWordWrap(True)
        self.anomalyLabel.setStyleSheet("color:#8a6d3b;")
        self.anomalyLabel.setVisible(bool(outcome.anomaly))
        outer.addWidget(self.anomalyLabel)

        bb = QDialogButtonBox(QDialogButtonBox.Close)
        bb.rejected.connect(self.accept)
        bb.accepted.connect(self.accept)
        outer.addWidget(bb)
        self.resize(560, 420)
