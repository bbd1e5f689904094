"""Virtual terminal domain package."""

from .buffer import DEFAULT_CAPACITY, OutputBuffer
from .interpreter import CommandInterpreter, classify
from .models import (
    BuiltinKind,
    Command,
    OutputLine,
    ProcessHandle,
    ProcessStatus,
    SessionState,
    Severity,
)
from .runner import ProcessRunner
from .session import Session
from .shell import (
    PosixShellResolver,
    ShellResolver,
    WindowsShellResolver,
    build_shell_command,
    resolve_default_shell,
)
from .streams import CompletionBarrier, StreamReader
from .vterm import VirtualTerminal

__all__ = [
    "build_shell_command",
    "BuiltinKind",
    "classify",
    "Command",
    "CommandInterpreter",
    "CompletionBarrier",
    "DEFAULT_CAPACITY",
    "OutputBuffer",
    "OutputLine",
    "PosixShellResolver",
    "ProcessHandle",
    "ProcessRunner",
    "ProcessStatus",
    "resolve_default_shell",
    "Session",
    "SessionState",
    "Severity",
    "ShellResolver",
    "StreamReader",
    "VirtualTerminal",
    "WindowsShellResolver",
]
