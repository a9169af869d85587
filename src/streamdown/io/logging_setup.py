"""Logging bootstrap for the streamdown command.

Library modules only ever call ``logging.getLogger(__name__)``. Handlers are
attached here, once, to the ``streamdown`` logger; everything below it
propagates up to that logger and no further.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "streamdown"
DEFAULT_LOG_DIR = "~/.local/share/streamdown/logs"
# Warnings and up only: stderr output interleaves with the paced stream.
DEFAULT_LEVEL = "WARNING"


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved logging configuration."""

    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str | None) -> tuple[str, int]:
    normalized = str(raw or DEFAULT_LEVEL).strip().upper()
    level = getattr(logging, normalized, None)
    if not isinstance(level, int):
        level = logging.WARNING
    return logging.getLevelName(level), level


def _default_log_path() -> str:
    log_dir = Path(os.path.expanduser(os.environ.get("STREAMDOWN_LOG_DIR", DEFAULT_LOG_DIR)))
    return str(log_dir / "streamdown.log")


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=20 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure() -> LoggingRuntime:
    """Attach stderr and rotating-file handlers to the streamdown logger.

    Level comes from STREAMDOWN_LOG_LEVEL, the file from STREAMDOWN_LOG_FILE
    or STREAMDOWN_LOG_DIR. Idempotent: later calls return the first result.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _parse_level(os.environ.get("STREAMDOWN_LOG_LEVEL"))
    file_path = os.path.expanduser(os.environ.get("STREAMDOWN_LOG_FILE") or _default_log_path())
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(_make_stream_handler(level))
    logger.addHandler(_make_file_handler(level, file_path))

    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return the configured runtime, if configure() has run."""
    return _RUNTIME


def reset() -> None:
    """Detach handlers and forget the runtime so configure() runs again."""
    global _RUNTIME
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _RUNTIME = None
