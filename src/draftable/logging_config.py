"""
Logging configuration for draftable.

Every module logs through ``logging.getLogger(__name__)``, so all records flow
into the ``draftable`` logger configured here. Supports plain text output and
structured JSON lines.

Usage:
    from draftable.logging_config import configure_logging

    # Text logging to the console
    configure_logging(log_level="DEBUG")

    # JSON lines to a file as well
    configure_logging(log_file=Path("logs/draftable.log"), structured=True)

Environment Variables:
    DRAFTABLE_LOG_LEVEL - Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import settings

LOGGER_NAME = "draftable"

_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "message",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each log entry includes timestamp, level, logger name, message and any
    extra fields passed through ``extra=`` on the logging call.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def _resolve_level(log_level: Optional[str]) -> int:
    if log_level is None:
        log_level = os.environ.get("DRAFTABLE_LOG_LEVEL", settings.log_level)
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {log_level}")
    return level


def configure_logging(
    log_level: Optional[str] = None,
    log_to_console: bool = True,
    log_file: Optional[Path] = None,
    structured: bool = False,
) -> logging.Logger:
    """
    Configure the ``draftable`` logger.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Falls back
            to DRAFTABLE_LOG_LEVEL, then settings.log_level.
        log_to_console: Whether to log to stdout
        log_file: Optional file to append log lines to
        structured: Emit JSON lines instead of plain text

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Clear existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = _resolve_level(log_level)
    logger.setLevel(level)

    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        logger.debug(f"Logging to: {log_file}")

    return logger
