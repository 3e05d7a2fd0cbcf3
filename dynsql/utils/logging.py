"""Centralized logging configuration for dynsql.

Every logger lives under the ``dynsql`` namespace. Statement logging attaches
its payload as ``extra_fields`` so the structured formatter can emit it as
JSON next to the message.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = ("StructuredFormatter", "configure_logging", "get_logger", "log_with_context")

ROOT_LOGGER_NAME = "dynsql"


class StructuredFormatter(logging.Formatter):
    """JSON line formatter that merges a record's ``extra_fields`` into the entry."""

    def format(self, record: LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)  # pyright: ignore

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # statement arguments may hold values json cannot encode natively
        return json.dumps(log_entry, default=repr, ensure_ascii=False)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance under the ``dynsql`` namespace.

    Args:
        name: Logger name. If not provided, returns the root dynsql logger.

    Returns:
        Configured logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def configure_logging(
    level: str = "INFO",
    format_style: str = "structured",
    log_to_file: str | None = None,
    extra_handlers: list[logging.Handler] | None = None,
) -> None:
    """Configure logging for the whole dynsql package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_style: Log format style ("structured" for JSON, "simple" for text)
        log_to_file: Optional file path to log to
        extra_handlers: Additional handlers to add
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if format_style == "structured":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        file_handler = logging.FileHandler(log_to_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    if extra_handlers:
        for handler in extra_handlers:
            root_logger.addHandler(handler)

    root_logger.propagate = False

    root_logger.debug(
        "dynsql logging configured",
        extra={"extra_fields": {"level": level, "format_style": format_style, "handlers_count": len(root_logger.handlers)}},
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log a message with structured extra fields.

    Args:
        logger: The logger to use
        level: Log level
        message: Log message
        **extra_fields: Additional fields to include in structured logs
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)
