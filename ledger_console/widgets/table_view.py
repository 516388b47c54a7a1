from typing import Optional

from PySide6.QtCore import QSortFilterProxyModel, Qt
from PySide6.QtWidgets import QTableView


class TableView(QTableView):
    """
    Read-only, row-selecting table. Models are wrapped in a sort proxy so
    header clicks sort without touching the source rows.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSortingEnabled(True)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.SingleSelection)
        self.setEditTriggers(QTableView.NoEditTriggers)
        self.horizontalHeader().setStretchLastSection(True)
        self.verticalHeader().setVisible(False)
        self.proxy = QSortFilterProxyModel(self)

    def set_source_model(self, model) -> None:
        self.proxy.setSourceModel(model)
        self.setModel(self.proxy)
        # Source order until the user clicks a header
        self.horizontalHeader().setSortIndicator(-1, Qt.AscendingOrder)
        self.proxy.sort(-1)
        self.resizeColumnsToContents()

    def selected_source_row(self) -> Optional[int]:
        sel = self.selectionModel()
        if sel is None:
            return None
        idxs = sel.selectedRows()
        if not idxs:
            return None
        return self.proxy.mapToSource(idxs[0]).row()
