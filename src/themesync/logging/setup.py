"""Logging setup helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "themesync"
LOG_FILENAME = f"{LOGGER_NAME}.log"
LOG_FORMAT = "%(asctime)s %(process)08x %(levelname).1s %(name)s %(message)s"
CONSOLE_FORMAT = ">> %(message)s"
MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 5


def configure_logging(
    log_path: Path | None = None,
    level: str = "INFO",
    mirror_to_console: bool = True,
) -> logging.Logger:
    """Configure the Themesync logger.

    The rotating file always receives the full record format; the console
    mirror only shows the message so notices read cleanly in a terminal.
    """

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = False

    numeric_level = _normalize_level(level)
    logger.setLevel(numeric_level)

    file_path = _resolve_log_path(log_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        file_path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    if mirror_to_console:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(numeric_level)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(stream_handler)

    return logger


def _normalize_level(level: str) -> int:
    """Convert log level strings to logging constants."""

    candidate = level.strip().upper()
    if candidate == "WARN":
        candidate = "WARNING"
    numeric = getattr(logging, candidate, None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unsupported log level: {level!r}")
    return numeric


def _resolve_log_path(log_path: Path | None) -> Path:
    """Pick the log file; a directory or suffix-less path gets themesync.log inside it."""

    if log_path is None:
        return Path.cwd() / LOG_FILENAME

    candidate = log_path if log_path.is_absolute() else Path.cwd() / log_path
    if candidate.is_dir() or candidate.suffix == "":
        return candidate / LOG_FILENAME
    return candidate
