# src/logging/logger.py
"""Logger factory with JSON and text formatters.

Library modules only create loggers; ``setup_logging`` is for applications
(the CLI calls it once at startup).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from opshelpers.logging.context import get_context

ROOT_LOGGER = "opshelpers"
CONSOLE_TIME_FORMAT = "%H:%M:%S"
FILE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def caller_location(record: logging.LogRecord) -> str:
    """``function file:line`` of the logging call."""
    return f"{record.funcName} {Path(record.pathname).name}:{record.lineno}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "caller": caller_location(record),
        }
        context_dict = get_context().as_dict()
        if context_dict:
            log_entry["context"] = context_dict

        if hasattr(record, "data") and record.data:  # type: ignore[attr-defined]
            log_entry["data"] = record.data  # type: ignore[attr-defined]

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter: ``time [LEVEL] [op:target] msg [caller]``."""

    def __init__(self, timestamp_format: str = FILE_TIME_FORMAT) -> None:
        super().__init__()
        self._timestamp_format = timestamp_format

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.now().strftime(self._timestamp_format),
            f"[{record.levelname[:4]}]",
        ]
        if ctx.run_id:
            parts.append(f"[{ctx.run_id}]")
        if ctx.operation:
            parts.append(f"[{ctx.operation}:{ctx.target}]" if ctx.target else f"[{ctx.operation}]")
        parts.append(record.getMessage().strip())
        parts.append(f"[{caller_location(record)}]")
        text = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            text += "\n" + self.formatException(record.exc_info)
        return text


def get_logger(name: str) -> logging.Logger:
    """Get a named logger below the package root logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 6,
    max_age_days: int = 30,
    console: bool | None = None,
) -> logging.Logger:
    """Configure the package root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Rotating log file; None disables file output.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
        max_age_days: Delete rotated files older than this many days.
        console: Force console output on or off. None enables it only when
            stdout is a terminal.

    Returns:
        The configured root logger.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates on re-init
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if console is None:
        console = _is_tty(sys.stdout)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            JsonFormatter() if log_format == "json" else TextFormatter(CONSOLE_TIME_FORMAT)
        )
        root_logger.addHandler(console_handler)

    if log_file:
        from opshelpers.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention,
            max_age_days=max_age_days,
        )
        file_handler.setFormatter(
            JsonFormatter() if log_format == "json" else TextFormatter(FILE_TIME_FORMAT)
        )
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    return root_logger
