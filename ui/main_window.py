from __future__ import annotations

import json
import os
import re
from typing import Optional

from PyQt6.QtCore import QRect, QSize, Qt, QTimer
from PyQt6.QtGui import (
    QAction,
    QColor,
    QFont,
    QFontDatabase,
    QKeySequence,
    QPainter,
    QSyntaxHighlighter,
    QTextCharFormat,
    QTextCursor,
)
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QSplitter,
    QStatusBar,
    QTableView,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from hackasm.assembler import AssemblyResult, assemble_program
from hackasm.model import AssemblyError, Label
from ui.symbols import SymbolTableModel


class HackHighlighter(QSyntaxHighlighter):
    ADDRESS_RE = re.compile(r"@\S+")
    LABEL_RE = re.compile(r"\(.*\)")
    JUMP_RE = re.compile(r";\s*J\w\w")
    DEST_RE = re.compile(r"^\s*[AMD]+=")

    def __init__(self, parent) -> None:
        super().__init__(parent)
        self.address_format = QTextCharFormat()
        self.address_format.setForeground(QColor("#ffb86c"))

        self.label_format = QTextCharFormat()
        self.label_format.setForeground(QColor("#50fa7b"))
        self.label_format.setFontWeight(QFont.Weight.Bold)

        self.jump_format = QTextCharFormat()
        self.jump_format.setForeground(QColor("#ff79c6"))

        self.dest_format = QTextCharFormat()
        self.dest_format.setForeground(QColor("#bd93f9"))

        self.comment_format = QTextCharFormat()
        self.comment_format.setForeground(QColor("#6272a4"))

    def highlightBlock(self, text: str) -> None:
        if not text.strip():
            return

        comment_index = text.find("//")
        if comment_index >= 0:
            self.setFormat(comment_index, len(text) - comment_index, self.comment_format)
            text = text[:comment_index]

        for pattern, fmt in (
            (self.ADDRESS_RE, self.address_format),
            (self.LABEL_RE, self.label_format),
            (self.JUMP_RE, self.jump_format),
            (self.DEST_RE, self.dest_format),
        ):
            for match in pattern.finditer(text):
                self.setFormat(match.start(), match.end() - match.start(), fmt)


class LineNumberArea(QWidget):
    def __init__(self, editor: "CodeEditor") -> None:
        super().__init__(editor)
        self.editor = editor

    def sizeHint(self) -> QSize:
        return QSize(self.editor.line_number_area_width(), 0)

    def paintEvent(self, event) -> None:
        self.editor.line_number_area_paint_event(event)


class CodeEditor(QPlainTextEdit):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._line_number_bg = QColor("#1e1f29")
        self._line_number_fg = QColor("#6272a4")
        self._marker_area_width = 14
        self._error_color = QColor("#ff5555")
        self.error_line: Optional[int] = None
        self.line_number_area = LineNumberArea(self)

        self.blockCountChanged.connect(self.update_line_number_area_width)
        self.updateRequest.connect(self.update_line_number_area)
        self.update_line_number_area_width(0)

    def line_number_area_width(self) -> int:
        digits = max(1, len(str(self.blockCount())))
        return self._marker_area_width + 10 + self.fontMetrics().horizontalAdvance("9") * digits

    def set_error_line(self, line_no: Optional[int]) -> None:
        self.error_line = line_no
        self.line_number_area.update()

    def update_line_number_area_width(self, _block_count: int) -> None:
        self.setViewportMargins(self.line_number_area_width(), 0, 0, 0)

    def update_line_number_area(self, rect: QRect, dy: int) -> None:
        if dy:
            self.line_number_area.scroll(0, dy)
        else:
            self.line_number_area.update(0, rect.y(), self.line_number_area.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self.update_line_number_area_width(0)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        contents = self.contentsRect()
        self.line_number_area.setGeometry(
            QRect(contents.left(), contents.top(), self.line_number_area_width(), contents.height())
        )

    def line_number_area_paint_event(self, event) -> None:
        painter = QPainter(self.line_number_area)
        painter.fillRect(event.rect(), self._line_number_bg)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        bottom = top + self.blockBoundingRect(block).height()

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                line_no = block_number + 1
                if line_no == self.error_line:
                    radius = 5
                    center_x = self._marker_area_width // 2
                    center_y = int(top + (self.fontMetrics().height() / 2))
                    painter.setPen(self._error_color)
                    painter.setBrush(self._error_color)
                    painter.drawEllipse(center_x - radius, center_y - radius, radius * 2, radius * 2)
                painter.setPen(self._line_number_fg)
                painter.drawText(
                    self._marker_area_width,
                    int(top),
                    self.line_number_area.width() - self._marker_area_width - 6,
                    int(self.fontMetrics().height()),
                    Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                    str(line_no),
                )
            block = block.next()
            top = bottom
            bottom = top + self.blockBoundingRect(block).height()
            block_number += 1


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Hack Assembler")
        self.resize(1100, 700)

        self.current_file: Optional[str] = None
        self.result: Optional[AssemblyResult] = None
        self.source_dirty = True
        self.recent_files: list[str] = []
        self._max_recent_files = 10

        self._build_ui()
        self._build_menus()
        self._load_layout()
        self.set_state("Ready")

    def _build_ui(self) -> None:
        font = self._default_font()

        self.editor = CodeEditor()
        self.editor.setFont(font)
        self.editor.textChanged.connect(self.on_text_changed)
        self.highlighter = HackHighlighter(self.editor.document())

        self.binary_output = QPlainTextEdit()
        self.binary_output.setReadOnly(True)
        self.binary_output.setFont(font)

        self.symbol_model = SymbolTableModel(self)
        self.symbol_table = QTableView()
        self.symbol_table.setModel(self.symbol_model)
        self.symbol_table.verticalHeader().setVisible(False)
        self.symbol_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)

        self.log_output = QPlainTextEdit()
        self.log_output.setReadOnly(True)
        self.log_output.setFont(font)

        self.right_splitter = QSplitter(Qt.Orientation.Vertical)
        self.right_splitter.addWidget(self._build_output_panel(self.binary_output, self.binary_output.clear))
        self.right_splitter.addWidget(self.symbol_table)

        self.central_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.central_splitter.addWidget(self.editor)
        self.central_splitter.addWidget(self.right_splitter)
        self.central_splitter.setSizes([700, 400])

        self.main_splitter = QSplitter(Qt.Orientation.Vertical)
        self.main_splitter.addWidget(self.central_splitter)
        self.main_splitter.addWidget(self._build_output_panel(self.log_output, self.log_output.clear))
        self.main_splitter.setSizes([540, 160])
        self.setCentralWidget(self.main_splitter)

        status = QStatusBar()
        self.state_label = QLabel()
        self.words_label = QLabel("Words: -")
        status.addWidget(self.state_label)
        status.addPermanentWidget(self.words_label)
        self.setStatusBar(status)

    def _build_output_panel(self, text_edit: QPlainTextEdit, clear_handler) -> QWidget:
        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        controls = QHBoxLayout()
        controls.setContentsMargins(8, 6, 8, 0)
        controls.addStretch(1)
        clear_button = QToolButton()
        clear_button.setText("Clear")
        clear_button.setAutoRaise(True)
        clear_button.clicked.connect(clear_handler)
        controls.addWidget(clear_button)
        layout.addLayout(controls)
        layout.addWidget(text_edit)
        return container

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        for title, shortcut, handler in (
            ("New", QKeySequence.StandardKey.New, self.new_file),
            ("Open...", QKeySequence.StandardKey.Open, self.open_file),
            ("Save", QKeySequence.StandardKey.Save, self.save_file),
            ("Save As...", QKeySequence.StandardKey.SaveAs, self.save_file_as),
        ):
            action = QAction(title, self)
            action.setShortcut(shortcut)
            action.triggered.connect(handler)
            file_menu.addAction(action)
        self.open_recent_menu = file_menu.addMenu("Open Recent")
        self._rebuild_recent_menu()
        file_menu.addSeparator()
        export_action = QAction("Export .hack...", self)
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        export_action.triggered.connect(self.export_binary)
        file_menu.addAction(export_action)
        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        build_menu = self.menuBar().addMenu("&Build")
        assemble_action = QAction("Assemble", self)
        assemble_action.setShortcut(QKeySequence("Ctrl+B"))
        assemble_action.triggered.connect(self.assemble_current_program)
        build_menu.addAction(assemble_action)

    def _rebuild_recent_menu(self) -> None:
        self.open_recent_menu.clear()
        if not self.recent_files:
            empty_action = QAction("No recent files", self)
            empty_action.setEnabled(False)
            self.open_recent_menu.addAction(empty_action)
            return
        for path in self.recent_files:
            action = QAction(path, self)
            action.triggered.connect(lambda checked=False, p=path: self._open_recent_path(p))
            self.open_recent_menu.addAction(action)
        self.open_recent_menu.addSeparator()
        clear_action = QAction("Clear Recent", self)
        clear_action.triggered.connect(self.clear_recent_files)
        self.open_recent_menu.addAction(clear_action)

    def _add_recent_file(self, path: str) -> None:
        if not path:
            return
        if path in self.recent_files:
            self.recent_files.remove(path)
        self.recent_files.insert(0, path)
        if len(self.recent_files) > self._max_recent_files:
            self.recent_files = self.recent_files[: self._max_recent_files]
        self._rebuild_recent_menu()

    def _open_recent_path(self, path: str) -> None:
        if not os.path.exists(path):
            QMessageBox.warning(self, "Open Failed", f"File not found: {path}")
            if path in self.recent_files:
                self.recent_files.remove(path)
                self._rebuild_recent_menu()
            return
        self._open_file_path(path)

    def clear_recent_files(self) -> None:
        self.recent_files = []
        self._rebuild_recent_menu()

    def _set_current_file(self, path: Optional[str]) -> None:
        self.current_file = os.path.abspath(path) if path else None
        if self.current_file:
            self.setWindowTitle(f"Hack Assembler - {self.current_file}")
        else:
            self.setWindowTitle("Hack Assembler")

    def _config_path(self) -> str:
        base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        return os.path.join(base_dir, ".hackasm_layout.json")

    def _load_layout(self) -> None:
        path = self._config_path()
        if not os.path.exists(path):
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            geo = data.get("geometry")
            if geo:
                self.restoreGeometry(bytes.fromhex(geo))
            for key, splitter in (
                ("central_sizes", self.central_splitter),
                ("main_sizes", self.main_splitter),
                ("right_sizes", self.right_splitter),
            ):
                sizes = data.get(key)
                if sizes:
                    QTimer.singleShot(0, lambda s=splitter, v=list(sizes): s.setSizes(v))
            recent = data.get("recent_files", [])
            if isinstance(recent, list):
                self.recent_files = [path for path in recent if isinstance(path, str)]
                self._rebuild_recent_menu()
        except (OSError, ValueError, json.JSONDecodeError) as exc:
            self.log(f"Ignoring unreadable layout file: {exc}")

    def _save_layout(self) -> None:
        data = {
            "geometry": self.saveGeometry().toHex().data().decode("ascii"),
            "central_sizes": self.central_splitter.sizes(),
            "main_sizes": self.main_splitter.sizes(),
            "right_sizes": self.right_splitter.sizes(),
            "recent_files": self.recent_files,
        }
        try:
            with open(self._config_path(), "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as exc:
            self.log(f"Could not save layout: {exc}")

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._save_layout()
        super().closeEvent(event)

    def _default_font(self) -> QFont:
        preferred = [
            "JetBrains Mono",
            "Cascadia Code",
            "Fira Code",
            "Source Code Pro",
            "DejaVu Sans Mono",
            "Consolas",
            "Menlo",
        ]
        available = set(QFontDatabase.families())
        for name in preferred:
            if name in available:
                return QFont(name, 11)
        return QFont("Monospace", 11)

    def _open_file_path(self, path: str) -> bool:
        try:
            with open(path, "r", encoding="utf-8") as file:
                self.editor.setPlainText(file.read())
            self._set_current_file(path)
            self.source_dirty = True
            self.log(f"Opened {path}")
            self._add_recent_file(path)
            return True
        except OSError as exc:
            QMessageBox.warning(self, "Open Failed", str(exc))
            return False

    def _jump_to_line(self, line_no: int) -> None:
        block = self.editor.document().findBlockByNumber(line_no - 1)
        if not block.isValid():
            return
        cursor = QTextCursor(block)
        self.editor.setTextCursor(cursor)
        self.editor.centerCursor()

    def on_text_changed(self) -> None:
        self.source_dirty = True

    def new_file(self) -> None:
        self.editor.clear()
        self._set_current_file(None)
        self._clear_result()
        self.log("New file created.")

    def open_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open .asm", "", "ASM Files (*.asm);;All Files (*)")
        if not path:
            return
        self._open_file_path(path)

    def save_file(self) -> None:
        if not self.current_file:
            self.save_file_as()
            return
        try:
            with open(self.current_file, "w", encoding="utf-8") as file:
                file.write(self.editor.toPlainText())
            self.log(f"Saved {self.current_file}")
            self._add_recent_file(self.current_file)
        except OSError as exc:
            QMessageBox.warning(self, "Save Failed", str(exc))

    def save_file_as(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Save .asm", "", "ASM Files (*.asm);;All Files (*)")
        if not path:
            return
        self._set_current_file(path)
        self.save_file()

    def export_binary(self) -> None:
        if self.source_dirty and not self.assemble_current_program():
            return
        default = os.path.splitext(self.current_file)[0] + ".hack" if self.current_file else ""
        path, _ = QFileDialog.getSaveFileName(self, "Export .hack", default, "Hack Files (*.hack);;All Files (*)")
        if not path:
            return
        words = self.result.words if self.result else []
        try:
            with open(path, "w", encoding="utf-8") as file:
                file.write("".join(f"{word}\n" for word in words))
            self.log(f"Wrote {len(words)} words to {path}")
        except OSError as exc:
            QMessageBox.warning(self, "Export Failed", str(exc))

    def _clear_result(self) -> None:
        self.result = None
        self.binary_output.clear()
        self.symbol_model.refresh(None)
        self.words_label.setText("Words: -")

    def assemble_current_program(self) -> bool:
        self.editor.set_error_line(None)
        try:
            result = assemble_program(self.editor.toPlainText().splitlines())
        except AssemblyError as exc:
            self._clear_result()
            self.set_state("Error")
            if exc.line_no:
                self.log(f"Assembly error (line {exc.line_no}): {exc.message}")
                self.log(f"  {exc.text}")
                self.editor.set_error_line(exc.line_no)
                self._jump_to_line(exc.line_no)
            else:
                self.log(f"Assembly error: {exc.message}")
            return False

        self.result = result
        self.source_dirty = False
        self.binary_output.setPlainText("\n".join(result.words))
        labels = {instr.name for instr in result.instructions if isinstance(instr, Label)}
        self.symbol_model.refresh(result.symbols, labels)
        self.words_label.setText(f"Words: {len(result.words)}")
        self.log(f"Assembled {len(result.words)} words.")
        self.set_state("Assembled")
        return True

    def set_state(self, state: str) -> None:
        self.state_label.setText(state)

    def log(self, message: str) -> None:
        self.log_output.appendPlainText(message)


def run_app() -> None:
    app = QApplication([])
    window = MainWindow()
    window.show()
    app.exec()
