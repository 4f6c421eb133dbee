"""
Roadwork logging setup.

Two outputs:
- Console: short human-readable lines, colored unless NO_COLOR is set or
  stdout is not a terminal
- File (optional): JSONL, one object per record with level, logger, message
  and structured context, for tailing and machine parsing

Modules log through ``logging.getLogger(__name__)``; everything sits under
the ``roadwork`` logger configured here.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

ROOT_LOGGER = "roadwork"
LOG_FILE_NAME = "roadwork.log"


def _use_color() -> bool:
    return not os.environ.get("NO_COLOR") and sys.stdout.isatty()


def _ansi(code: str) -> str:
    return f"\033[{code}m" if _use_color() else ""


# level -> ANSI SGR code
_LEVEL_CODES = {
    logging.DEBUG: "36",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "35",
}


# =============================================================================
# Formatters
# =============================================================================


class JSONLFormatter(logging.Formatter):
    """
    One JSON object per record.

    Example output:
    {"timestamp":"2024-01-15T10:30:45.123000Z","level":"INFO","logger":"roadwork.runtime.api","message":"--> created GET /users for: $everyone"}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if context := getattr(record, "context", None):
            payload["context"] = context

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            payload["exception"] = {"type": type(error).__name__, "message": str(error)}

        return json.dumps(payload, default=str, separators=(",", ":"))


class ConsoleFormatter(logging.Formatter):
    """``HH:MM:SS [roadwork] LEVEL: message``; the level is omitted for INFO."""

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{_ansi('2')}{clock}{_ansi('0')}", "[roadwork]"]

        if record.levelno != logging.INFO:
            code = _LEVEL_CODES.get(record.levelno)
            label = f"{_ansi(code)}{record.levelname}{_ansi('0')}" if code else record.levelname
            parts.append(f"{label}:")

        parts.append(record.getMessage())
        text = " ".join(parts)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    log_dir: Path | str | None = None,
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the ``roadwork`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_dir: Directory for the JSONL log file; console only when None
        level: Minimum log level
        max_bytes: Rotate the log file at this size
        backup_count: Rotated files kept

    Returns:
        The configured ``roadwork`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(ConsoleFormatter())

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / LOG_FILE_NAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONLFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """
    Log ``message`` with structured context.

    ``context`` and any keyword ``fields`` are merged into the record's
    ``context`` attribute, which JSONLFormatter writes out under ``"context"``.
    """
    merged = {**(context or {}), **fields}
    logger.log(level, message, extra={"context": merged} if merged else None, exc_info=exc_info)
