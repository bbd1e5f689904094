"""Concurrent pipe readers and their completion barrier."""

from __future__ import annotations

import logging as py_logging
import threading
from typing import IO

from termdeck.terminal.buffer import OutputBuffer
from termdeck.terminal.models import Severity

logger = py_logging.getLogger(__name__)


class CompletionBarrier:
    """Counting latch released once ``parties`` calls to ``arrive`` have happened."""

    def __init__(self, parties: int) -> None:
        self._remaining = parties
        self._lock = threading.Lock()
        self._done = threading.Event()
        if parties <= 0:
            self._done.set()

    def arrive(self) -> None:
        with self._lock:
            if self._remaining <= 0:
                return
            self._remaining -= 1
            if self._remaining == 0:
                self._done.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining


def decode_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


class StreamReader:
    """Drains one process stream into the buffer, one line per entry.

    Line order within the stream is preserved. The barrier is signalled
    exactly once, whether the stream hit EOF or failed mid-read.
    """

    def __init__(
        self,
        stream: IO[bytes],
        buffer: OutputBuffer,
        *,
        severity: Severity,
        barrier: CompletionBarrier,
        name: str = "stdout",
    ) -> None:
        self.stream = stream
        self.buffer = buffer
        self.severity = severity
        self.barrier = barrier
        self.name = name
        self.lines_read = 0
        self._thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name=f"termdeck-{self.name}", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        try:
            for raw in iter(self.stream.readline, b""):
                self.buffer.append(decode_line(raw), self.severity)
                self.lines_read += 1
        except (OSError, ValueError) as exc:
            logger.warning("stream-read failed stream=%s error=%s", self.name, exc)
            self.buffer.append_error(f"Error reading {self.name}: {exc}")
        finally:
            try:
                self.stream.close()
            except OSError:
                logger.debug("stream-close failed stream=%s", self.name)
            logger.debug("stream-eof stream=%s lines=%s", self.name, self.lines_read)
            self.barrier.arrive()
