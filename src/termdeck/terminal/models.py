"""Virtual terminal domain models."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    NORMAL = "normal"
    ERROR = "error"


class BuiltinKind(str, Enum):
    HELP = "help"
    CLEAR = "clear"
    EXIT = "exit"
    CD = "cd"


class ProcessStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class OutputLine:
    text: str
    severity: Severity = Severity.NORMAL

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def render(self) -> str:
        if self.is_error:
            return f"[ERROR] {self.text}"
        return self.text


@dataclass(frozen=True)
class Command:
    """A submitted line and its classification.

    ``kind`` is ``None`` for external commands; ``argument`` holds the
    ``cd`` target for built-ins and the full command text for externals.
    """

    raw: str
    kind: BuiltinKind | None = None
    argument: str = ""

    @property
    def is_builtin(self) -> bool:
        return self.kind is not None

    @property
    def is_external(self) -> bool:
        return self.kind is None


@dataclass
class ProcessHandle:
    command: str
    cwd: str
    argv: tuple[str, ...]
    process: subprocess.Popen[bytes] = field(repr=False)
    status: ProcessStatus = ProcessStatus.PENDING
    returncode: int | None = None
    kill_requested: bool = False
    timed_out: bool = False

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_running(self) -> bool:
        return self.process.poll() is None
