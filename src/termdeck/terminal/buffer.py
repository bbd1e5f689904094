"""Bounded, thread-safe scroll-back log."""

from __future__ import annotations

import logging as py_logging
import threading
from collections import deque
from collections.abc import Callable, Iterable

from termdeck.errors import ExitCode, TermdeckError
from termdeck.terminal.models import OutputLine, Severity

logger = py_logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000

ChangeListener = Callable[[int], None]


class OutputBuffer:
    """Ordered display lines with FIFO eviction past ``capacity``.

    Every mutation happens under one lock so readers, built-ins and both
    stream readers of a running command can append concurrently without torn
    or lost lines. ``snapshot()`` hands out a copy that stays consistent while
    producers keep writing.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, *, on_change: ChangeListener | None = None) -> None:
        if capacity < 1:
            raise TermdeckError(
                f"Invalid scroll-back capacity: {capacity}",
                code=ExitCode.VALIDATION_ERROR,
                hint="Use a positive number of lines.",
            )
        self._capacity = capacity
        self._lines: deque[OutputLine] = deque()
        self._lock = threading.Lock()
        self._version = 0
        self._appended = 0
        self._on_change = on_change

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def append(self, text: str, severity: Severity = Severity.NORMAL) -> None:
        self.extend([OutputLine(text=text, severity=severity)])

    def append_error(self, text: str) -> None:
        self.append(text, Severity.ERROR)

    def extend(self, lines: Iterable[OutputLine]) -> None:
        batch = list(lines)
        if not batch:
            return
        with self._lock:
            for line in batch:
                self._lines.append(line)
                self._appended += 1
                while len(self._lines) > self._capacity:
                    self._lines.popleft()
            self._version += 1
            version = self._version
        self._notify(version)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
            self._version += 1
            version = self._version
        self._notify(version)

    def snapshot(self) -> list[OutputLine]:
        with self._lock:
            return list(self._lines)

    def lines_since(self, mark: int) -> tuple[list[OutputLine], int]:
        """Return retained lines appended after ``mark`` and the new mark.

        Marks count every line ever appended, so lines evicted or cleared
        before the caller caught up are simply skipped.
        """
        with self._lock:
            total = self._appended
            fresh = min(max(total - mark, 0), len(self._lines))
            if fresh == 0:
                return [], total
            return list(self._lines)[-fresh:], total

    def texts(self) -> list[str]:
        return [line.text for line in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def _notify(self, version: int) -> None:
        listener = self._on_change
        if listener is None:
            return
        try:
            listener(version)
        except Exception:
            logger.exception("buffer-listener failed version=%s", version)
