from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, QObject, Qt
from PyQt6.QtGui import QColor

from hackasm.symbols import PREDEFINED_SYMBOLS, SymbolTable


class SymbolTableModel(QAbstractTableModel):
    headers = ["Symbol", "Address", "Kind"]

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._rows: list[tuple[str, int, str]] = []
        self._labels: set[str] = set()

    def refresh(self, table: Optional[SymbolTable], labels: set[str] | None = None) -> None:
        self.beginResetModel()
        self._labels = set(labels or ())
        self._rows = []
        if table is not None:
            for name, address in sorted(table.items(), key=lambda item: (item[1], item[0])):
                self._rows.append((name, address, self._kind_of(name)))
        self.endResetModel()

    def _kind_of(self, name: str) -> str:
        if name in PREDEFINED_SYMBOLS:
            return "Predefined"
        if name in self._labels:
            return "Label"
        return "Variable"

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self.headers)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole):
        if role == Qt.ItemDataRole.DisplayRole and orientation == Qt.Orientation.Horizontal:
            return self.headers[section]
        return None

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        name, address, kind = self._rows[index.row()]
        column = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if column == 0:
                return name
            if column == 1:
                return str(address)
            if column == 2:
                return kind
        if role == Qt.ItemDataRole.ForegroundRole:
            if kind == "Predefined":
                return QColor("#6272a4")
            if kind == "Label":
                return QColor("#50fa7b")
        if role == Qt.ItemDataRole.ToolTipRole and column == 1:
            return f"0x{address:04X}"
        return None
