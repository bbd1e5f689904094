"""Built-in command dispatch for the virtual terminal."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable

from termdeck.terminal.buffer import OutputBuffer
from termdeck.terminal.models import BuiltinKind, Command
from termdeck.terminal.runner import ProcessRunner
from termdeck.terminal.session import Session
from termdeck.terminal.shell import home_directory

logger = py_logging.getLogger(__name__)

_SIMPLE_BUILTINS = {
    "help": BuiltinKind.HELP,
    "clear": BuiltinKind.CLEAR,
    "exit": BuiltinKind.EXIT,
    "quit": BuiltinKind.EXIT,
}


def classify(line: str) -> Command:
    stripped = line.strip()
    lowered = stripped.lower()
    simple = _SIMPLE_BUILTINS.get(lowered)
    if simple is not None:
        return Command(raw=line, kind=simple)
    if lowered == "cd":
        return Command(raw=line, kind=BuiltinKind.CD)
    if lowered[:3] in {"cd ", "cd\t"}:
        return Command(raw=line, kind=BuiltinKind.CD, argument=stripped[3:].strip())
    return Command(raw=line, argument=stripped)


def help_lines(shell_path: str) -> list[str]:
    return [
        "",
        "Available Commands:",
        "  help      - Show this help message",
        "  clear     - Clear terminal output",
        "  exit/quit - Close terminal",
        "  cd <dir>  - Change working directory",
        "",
        "Any other command will be executed in the shell",
        f"Current shell: {shell_path}",
        "",
    ]


class CommandInterpreter:
    def __init__(
        self,
        session: Session,
        buffer: OutputBuffer,
        runner: ProcessRunner,
        *,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self.session = session
        self.buffer = buffer
        self.runner = runner
        self.on_cancel = on_cancel

    def classify(self, line: str) -> Command:
        return classify(line)

    def execute(self, line: str) -> Command:
        command = classify(line)
        logger.debug("command-dispatch kind=%s raw=%s", command.kind, command.raw)
        if command.kind == BuiltinKind.CLEAR:
            self.buffer.clear()
        elif command.kind == BuiltinKind.HELP:
            for text in help_lines(self.session.shell_path):
                self.buffer.append(text)
        elif command.kind == BuiltinKind.EXIT:
            if self.on_cancel is not None:
                self.on_cancel()
        elif command.kind == BuiltinKind.CD:
            self._change_directory(command.argument)
        elif command.argument:
            self.runner.run(command.argument)
        return command

    def _change_directory(self, target: str) -> None:
        path = target or home_directory()
        try:
            resolved = self.session.check_directory(path)
        except OSError as exc:
            self.buffer.append_error(f"Error: {exc}")
            return
        if not self.session.set_working_directory(resolved):
            self.buffer.append_error(f"Error: cannot change directory to {resolved}")
            return
        logger.info("session-cd directory=%s", self.session.working_directory)
        self.buffer.append(f"Changed directory to: {self.session.working_directory}")
