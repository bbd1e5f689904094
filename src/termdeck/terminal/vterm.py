"""Host-facing virtual terminal: lifecycle toggles, submission and scroll-back."""

from __future__ import annotations

import logging as py_logging
import sys
from collections.abc import Callable

from termdeck.config import AppConfig
from termdeck.terminal.buffer import DEFAULT_CAPACITY, OutputBuffer
from termdeck.terminal.interpreter import CommandInterpreter
from termdeck.terminal.models import Command, OutputLine, SessionState
from termdeck.terminal.runner import DEFAULT_KILL_GRACE_SECONDS, ProcessRunner, Spawn
from termdeck.terminal.session import Session

logger = py_logging.getLogger(__name__)

PRODUCT_NAME = "Termdeck"


class VirtualTerminal:
    """One terminal view: a session, its scroll-back and the command pipeline.

    All methods are safe to call from the host UI thread; none of them block
    on process I/O.
    """

    def __init__(
        self,
        *,
        working_directory: str = "",
        shell_path: str = "",
        capacity: int = DEFAULT_CAPACITY,
        timeout_seconds: float | None = None,
        kill_grace_seconds: float = DEFAULT_KILL_GRACE_SECONDS,
        spawn: Spawn | None = None,
        banner: bool = True,
    ) -> None:
        self.buffer = OutputBuffer(capacity)
        self.session = Session(working_directory=working_directory, shell_path=shell_path)
        self.runner = ProcessRunner(
            self.session,
            self.buffer,
            spawn=spawn,
            timeout_seconds=timeout_seconds,
            kill_grace_seconds=kill_grace_seconds,
        )
        self.interpreter = CommandInterpreter(self.session, self.buffer, self.runner)
        self._displayed = False
        self._cancel_func: Callable[[], None] | None = None
        self.interpreter.on_cancel = self._cancel
        if banner:
            self._write_banner()

    @classmethod
    def from_config(cls, config: AppConfig, *, spawn: Spawn | None = None) -> VirtualTerminal:
        return cls(
            working_directory=config.working_directory,
            shell_path=config.shell,
            capacity=config.scrollback_lines,
            timeout_seconds=config.command_timeout_seconds,
            kill_grace_seconds=config.kill_grace_seconds,
            spawn=spawn,
        )

    @property
    def is_displayed(self) -> bool:
        return self._displayed

    @property
    def state(self) -> SessionState:
        return self.session.state

    def display(self) -> None:
        self._displayed = True

    def hide(self) -> None:
        self._displayed = False
        self.runner.kill()

    def set_cancel_func(self, handler: Callable[[], None] | None) -> None:
        self._cancel_func = handler

    def submit(self, line: str) -> Command | None:
        if not line.strip():
            return None
        self.buffer.append(f"> {line}")
        return self.interpreter.execute(line)

    def snapshot(self) -> list[OutputLine]:
        return self.buffer.snapshot()

    def kill(self) -> bool:
        return self.runner.kill()

    def wait_idle(self, timeout: float | None = None) -> bool:
        return self.runner.wait(timeout)

    def _cancel(self) -> None:
        logger.debug("terminal-cancel requested")
        if self._cancel_func is not None:
            self._cancel_func()

    def _write_banner(self) -> None:
        for text in (
            f"{PRODUCT_NAME} Terminal - {sys.platform}",
            f"Working Directory: {self.session.working_directory}",
            f"Shell: {self.session.shell_path}",
            "Type 'help' for available commands, 'clear' to clear output",
            "",
        ):
            self.buffer.append(text)
