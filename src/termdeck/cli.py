"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from .config import AppConfig, load_config
from .errors import ExitCode, TermdeckError, user_facing_error
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level
from .terminal import VirtualTerminal

_POLL_SECONDS = 0.1


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized is None:
        accepted = ", ".join(LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _scrollback_type(value: str) -> int:
    try:
        lines = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--scrollback must be an integer") from exc
    if lines < 10:
        raise argparse.ArgumentTypeError("--scrollback must be at least 10")
    return lines


def _timeout_type(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--timeout must be a number") from exc
    if seconds <= 0:
        raise argparse.ArgumentTypeError("--timeout must be positive")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="termdeck")
    parser.add_argument("--shell", default=None, help="Shell used for external commands")
    parser.add_argument("--cwd", type=Path, default=None, help="Initial working directory")
    parser.add_argument("--scrollback", type=_scrollback_type, default=None)
    parser.add_argument("--timeout", type=_timeout_type, default=None, help="Per-command timeout in seconds")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--gui", action="store_true", help="Open the Qt terminal window")
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_config(namespace: argparse.Namespace) -> AppConfig:
    config = load_config(namespace.config)
    try:
        if namespace.shell:
            config.shell = namespace.shell
        if namespace.cwd is not None:
            config.working_directory = str(namespace.cwd.expanduser())
        if namespace.scrollback is not None:
            config.scrollback_lines = namespace.scrollback
        if namespace.timeout is not None:
            config.command_timeout_seconds = namespace.timeout
        if namespace.log_level is not None:
            config.log_level = namespace.log_level
    except ValueError as exc:
        raise TermdeckError(
            "Invalid terminal options.",
            code=ExitCode.VALIDATION_ERROR,
            hint=str(exc).splitlines()[0],
        ) from exc
    return config


def _flush(terminal: VirtualTerminal, mark: int, stdout: TextIO) -> int:
    lines, mark = terminal.buffer.lines_since(mark)
    for line in lines:
        stdout.write(line.render() + "\n")
    stdout.flush()
    return mark


def run_console(
    terminal: VirtualTerminal,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Drive the terminal from a line-oriented text stream until exit or EOF."""
    source = stdin or sys.stdin
    sink = stdout or sys.stdout
    interactive = source.isatty()
    closed = False

    def _close() -> None:
        nonlocal closed
        closed = True

    terminal.set_cancel_func(_close)
    terminal.display()
    mark = _flush(terminal, 0, sink)
    try:
        while not closed:
            if interactive:
                sink.write("> ")
                sink.flush()
            line = source.readline()
            if not line:
                break
            terminal.submit(line.rstrip("\r\n"))
            try:
                while not terminal.wait_idle(_POLL_SECONDS):
                    mark = _flush(terminal, mark, sink)
            except KeyboardInterrupt:
                terminal.kill()
                terminal.wait_idle()
            mark = _flush(terminal, mark, sink)
    finally:
        terminal.hide()
    return int(ExitCode.SUCCESS)


def launch_gui(config: AppConfig) -> int:
    from termdeck.ui.terminal_window import launch_terminal_window

    return launch_terminal_window(config)


def main(
    argv: Sequence[str] | None = None,
    *,
    gui_launcher: Callable[[AppConfig], int | None] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code in (None, 0):
            return int(ExitCode.SUCCESS)
        logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(ExitCode.INVALID_ARGS)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()

    try:
        config = resolve_config(namespace)
        logger = configure_logging(level=config.log_level, log_file=log_path)
        if namespace.gui:
            launcher = gui_launcher or launch_gui
            logger.debug("Starting GUI host")
            result = launcher(config)
            if isinstance(result, int):
                return result
            return int(ExitCode.SUCCESS)

        logger.debug("Starting console host")
        terminal = VirtualTerminal.from_config(config)
        return run_console(terminal, stdin=stdin, stdout=stdout)
    except TermdeckError as exc:
        logger.error(
            "Handled TermdeckError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
