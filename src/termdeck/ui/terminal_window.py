"""Qt host window for the virtual terminal."""

from __future__ import annotations

import logging as py_logging
import sys

from termdeck.config import AppConfig
from termdeck.errors import ExitCode, TermdeckError
from termdeck.terminal import OutputLine, VirtualTerminal

logger = py_logging.getLogger(__name__)

REFRESH_INTERVAL_MS = 100
WINDOW_TITLE = "Terminal Output"


def render_lines(lines: list[OutputLine]) -> str:
    return "\n".join(line.render() for line in lines)


def launch_terminal_window(
    config: AppConfig,
    *,
    terminal: VirtualTerminal | None = None,
    run_ui: bool = True,
) -> int:
    """Open the terminal in a Qt window and block until it is closed."""
    terminal = terminal or VirtualTerminal.from_config(config)
    if not run_ui:
        return int(ExitCode.SUCCESS)

    try:
        from PySide6.QtCore import Qt, QTimer
        from PySide6.QtGui import QFontDatabase
        from PySide6.QtWidgets import (
            QApplication,
            QLineEdit,
            QPlainTextEdit,
            QVBoxLayout,
            QWidget,
        )
    except ImportError as exc:
        raise TermdeckError(
            "PySide6 is not installed; the terminal window cannot open.",
            code=ExitCode.RUNTIME_ERROR,
            hint="Run `pip install termdeck[gui]` or use the console host.",
        ) from exc

    class TerminalWindow(QWidget):  # pragma: no cover
        def __init__(self, vterm: VirtualTerminal) -> None:
            super().__init__()
            self.vterm = vterm
            self._rendered_version = -1
            self.setWindowTitle(WINDOW_TITLE)
            self.resize(900, 560)

            fixed_font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
            self.output_view = QPlainTextEdit(self)
            self.output_view.setReadOnly(True)
            self.output_view.setFont(fixed_font)
            self.output_view.setMaximumBlockCount(vterm.buffer.capacity)

            self.input_field = QLineEdit(self)
            self.input_field.setFont(fixed_font)
            self.input_field.setPlaceholderText("> ")
            self.input_field.returnPressed.connect(self._submit)

            layout = QVBoxLayout(self)
            layout.addWidget(self.output_view, 1)
            layout.addWidget(self.input_field, 0)

            self.timer = QTimer(self)
            self.timer.setInterval(REFRESH_INTERVAL_MS)
            self.timer.timeout.connect(self.refresh)
            self.timer.start()
            self.refresh()

        def _submit(self) -> None:
            text = self.input_field.text()
            if not text:
                return
            self.input_field.clear()
            self.vterm.submit(text)
            self.refresh()

        def refresh(self) -> None:
            version = self.vterm.buffer.version
            if version == self._rendered_version:
                return
            self._rendered_version = version
            self.output_view.setPlainText(render_lines(self.vterm.snapshot()))
            scrollbar = self.output_view.verticalScrollBar()
            scrollbar.setValue(scrollbar.maximum())

        def keyPressEvent(self, event) -> None:  # noqa: N802
            if event.key() == Qt.Key.Key_Escape:
                self.close()
                return
            super().keyPressEvent(event)

        def closeEvent(self, event) -> None:  # noqa: N802
            self.timer.stop()
            self.vterm.hide()
            super().closeEvent(event)

    app = QApplication.instance() or QApplication(sys.argv)
    window = TerminalWindow(terminal)
    terminal.set_cancel_func(window.close)
    terminal.display()
    window.show()
    window.input_field.setFocus()
    logger.info("terminal-window opened shell=%s", terminal.session.shell_path)
    return int(app.exec())
