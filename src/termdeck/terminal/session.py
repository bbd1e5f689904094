"""Per-view session record: working directory, shell and the active process slot."""

from __future__ import annotations

import logging as py_logging
import os
import tempfile
import threading
from pathlib import Path

from termdeck.terminal.models import ProcessHandle, SessionState
from termdeck.terminal.shell import resolve_default_shell

logger = py_logging.getLogger(__name__)


def default_working_directory() -> str:
    try:
        return os.getcwd()
    except OSError:
        return tempfile.gettempdir()


class Session:
    def __init__(self, *, working_directory: str = "", shell_path: str = "") -> None:
        self._lock = threading.RLock()
        self._working_directory = default_working_directory()
        if working_directory and not self.set_working_directory(working_directory):
            logger.warning(
                "session-init invalid working directory=%s; using %s",
                working_directory,
                self._working_directory,
            )
        self._shell_path = shell_path.strip() or resolve_default_shell()
        self._active_process: ProcessHandle | None = None

    @property
    def working_directory(self) -> str:
        with self._lock:
            return self._working_directory

    @property
    def shell_path(self) -> str:
        return self._shell_path

    @property
    def active_process(self) -> ProcessHandle | None:
        with self._lock:
            return self._active_process

    @property
    def state(self) -> SessionState:
        with self._lock:
            return SessionState.IDLE if self._active_process is None else SessionState.RUNNING

    def resolve_path(self, path: str) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = Path(self.working_directory) / candidate
        return candidate

    def check_directory(self, path: str) -> str:
        """Return the resolved directory or raise ``OSError`` describing why it is unusable."""
        candidate = self.resolve_path(path)
        if not candidate.exists():
            raise FileNotFoundError(2, "No such file or directory", str(candidate))
        if not candidate.is_dir():
            raise NotADirectoryError(20, "Not a directory", str(candidate))
        if not os.access(candidate, os.X_OK):
            raise PermissionError(13, "Permission denied", str(candidate))
        return str(candidate.resolve())

    def set_working_directory(self, path: str) -> bool:
        try:
            resolved = self.check_directory(path)
        except OSError as exc:
            logger.debug("session-cd rejected path=%s reason=%s", path, exc)
            return False
        with self._lock:
            self._working_directory = resolved
        return True

    def claim(self, handle: ProcessHandle) -> bool:
        with self._lock:
            if self._active_process is not None:
                return False
            self._active_process = handle
            return True

    def release(self, handle: ProcessHandle) -> None:
        with self._lock:
            if self._active_process is handle:
                self._active_process = None
