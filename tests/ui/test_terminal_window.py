from __future__ import annotations

from pathlib import Path

from termdeck.config import AppConfig
from termdeck.errors import ExitCode
from termdeck.terminal import OutputLine, Severity, VirtualTerminal
from termdeck.ui.terminal_window import launch_terminal_window, render_lines


def test_render_lines_marks_errors() -> None:
    rendered = render_lines([OutputLine("ok"), OutputLine("bad", Severity.ERROR)])

    assert rendered == "ok\n[ERROR] bad"


def test_launch_without_ui_returns_success(tmp_path: Path) -> None:
    config = AppConfig(shell="/bin/sh", working_directory=str(tmp_path))
    terminal = VirtualTerminal.from_config(config)

    assert launch_terminal_window(config, terminal=terminal, run_ui=False) == int(ExitCode.SUCCESS)
    assert terminal.is_displayed is False
