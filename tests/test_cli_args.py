from __future__ import annotations

import io
from contextlib import redirect_stderr
from pathlib import Path

from termdeck import cli
from termdeck.config import AppConfig
from termdeck.errors import ExitCode, TermdeckError


def test_cli_help_includes_public_flags() -> None:
    help_text = cli.build_parser().format_help()

    for flag in ("--shell", "--cwd", "--scrollback", "--timeout", "--config", "--gui", "--log-level", "--log-file"):
        assert flag in help_text


def test_invalid_scrollback_returns_invalid_args() -> None:
    with redirect_stderr(io.StringIO()):
        assert cli.main(["--scrollback", "3"]) == int(ExitCode.INVALID_ARGS)


def test_invalid_log_level_returns_invalid_args() -> None:
    with redirect_stderr(io.StringIO()):
        assert cli.main(["--log-level", "chatty"]) == int(ExitCode.INVALID_ARGS)


def test_help_flag_exits_successfully() -> None:
    with redirect_stderr(io.StringIO()):
        assert cli.main(["--help"]) == int(ExitCode.SUCCESS)


def test_resolve_config_applies_flags_over_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('shell = "/bin/bash"\nscrollback_lines = 200\n', encoding="utf-8")
    namespace = cli.parse_args(
        ["--config", str(config_path), "--shell", "/bin/sh", "--timeout", "5", "--log-level", "warning"]
    )

    config = cli.resolve_config(namespace)

    assert config.shell == "/bin/sh"
    assert config.scrollback_lines == 200
    assert config.command_timeout_seconds == 5.0
    assert config.log_level == "WARN"


def test_resolve_config_rejects_out_of_range_scrollback(tmp_path: Path) -> None:
    namespace = cli.parse_args(["--config", str(tmp_path / "missing.toml"), "--scrollback", "1000000"])

    try:
        cli.resolve_config(namespace)
    except TermdeckError as exc:
        assert exc.code == ExitCode.VALIDATION_ERROR
    else:
        raise AssertionError("expected TermdeckError")


def test_gui_flag_triggers_gui_launcher(tmp_path: Path) -> None:
    seen: list[AppConfig] = []

    def fake_gui(config: AppConfig) -> int:
        seen.append(config)
        return 0

    code = cli.main(
        ["--gui", "--shell", "/bin/sh", "--log-file", str(tmp_path / "termdeck.log")],
        gui_launcher=fake_gui,
    )

    assert code == 0
    assert seen[0].shell == "/bin/sh"


def test_gui_error_is_reported_to_stderr(tmp_path: Path) -> None:
    def fake_gui(_config: AppConfig) -> int:
        raise TermdeckError(
            "PySide6 missing",
            code=ExitCode.RUNTIME_ERROR,
            hint="Install PySide6.",
        )

    stream = io.StringIO()
    with redirect_stderr(stream):
        code = cli.main(["--gui", "--log-file", str(tmp_path / "termdeck.log")], gui_launcher=fake_gui)

    assert code == int(ExitCode.RUNTIME_ERROR)
    assert "Error: PySide6 missing. Next step: Install PySide6." in stream.getvalue()


def test_unexpected_gui_failure_maps_to_runtime_error(tmp_path: Path) -> None:
    def fake_gui(_config: AppConfig) -> int:
        raise RuntimeError("boom")

    stream = io.StringIO()
    with redirect_stderr(stream):
        code = cli.main(["--gui", "--log-file", str(tmp_path / "termdeck.log")], gui_launcher=fake_gui)

    assert code == int(ExitCode.RUNTIME_ERROR)
    assert "Unexpected runtime failure" in stream.getvalue()
