"""Logging for the terminal host and its worker threads."""

from __future__ import annotations

import logging as py_logging
import sys
from pathlib import Path
from typing import TextIO

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
LOGGER_NAME = "termdeck"
DEFAULT_LOG_PATH = Path("~/.config/termdeck/logs/termdeck.log")
_FALLBACK_LOG_PATH = Path(".termdeck/logs/termdeck.log")
# Readers and finalizers log from their own threads; the thread name ties a
# line back to the command that produced it.
_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s:%(lineno)d %(message)s"


def normalize_level(value: str) -> str | None:
    """Canonical level name for ``value`` or None when it is not a known level.

    ``WARNING`` is accepted as an alias and folds into ``WARN``.
    """
    normalized = value.strip().upper()
    if normalized == "WARNING":
        normalized = "WARN"
    return normalized if normalized in LOG_LEVELS else None


def _expand(path: str | Path) -> Path:
    try:
        resolved = Path(path).expanduser()
    except RuntimeError:
        resolved = Path(path)
    return resolved if resolved.is_absolute() else resolved.resolve()


def default_log_path() -> Path:
    try:
        resolved = DEFAULT_LOG_PATH.expanduser()
    except RuntimeError:
        return (Path.cwd() / _FALLBACK_LOG_PATH).resolve()
    return resolved if resolved.is_absolute() else resolved.resolve()


def _open_file_handler(log_file: str | Path, formatter: py_logging.Formatter) -> py_logging.Handler | None:
    log_path = _expand(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = py_logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(py_logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    """Reset the ``termdeck`` logger to a stream handler plus an optional file handler.

    The file handler always records DEBUG so a quiet console still leaves a
    full trail of spawned processes on disk. Unknown levels fall back to INFO.
    """
    resolved = LOG_LEVELS[normalize_level(level) or "INFO"]
    formatter = py_logging.Formatter(_FORMAT)

    logger = py_logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    console = py_logging.StreamHandler(stream or sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)

    file_handler = _open_file_handler(log_file, formatter) if log_file else None
    if file_handler is not None:
        logger.addHandler(file_handler)
        logger.setLevel(py_logging.DEBUG)
    else:
        logger.setLevel(resolved)

    logger.propagate = False
    return logger
