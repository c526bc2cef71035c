# ruff: noqa: PLR6301
"""Logging setup shared by the proxies and the query listeners.

Every logger handed out by :func:`get_logger` lives under the ``sqlproxy``
namespace and stamps records with the correlation ID of the current context.
Query log entries produced on different connections can then be grouped by
the unit of work that issued them.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlproxy._serialization import encode_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
    "set_correlation_id",
)

correlation_id_var: ContextVar[str | None] = ContextVar("sqlproxy_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Tag subsequent query logs of this context with ``correlation_id``.

    Args:
        correlation_id: Identifier of the unit of work, or None to stop tagging.
    """
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Renders records as one JSON object per line.

    Fields passed as ``extra_fields`` (elapsed time, connection id, batch size
    of an execution) become top-level keys of the object.
    """

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

        if correlation_id := get_correlation_id():
            log_entry["correlation_id"] = correlation_id

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)  # pyright: ignore

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return encode_json(log_entry)


class CorrelationIDFilter(logging.Filter):
    """Copies the context's correlation ID onto each record as ``correlation_id``."""

    def filter(self, record: LogRecord) -> bool:
        if correlation_id := get_correlation_id():
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for a module of this package.

    Args:
        name: Dotted module path relative to ``sqlproxy`` (``"proxy.statement"``).
            The package logger is returned when omitted.

    Returns:
        The ``sqlproxy.<name>`` logger with a :class:`CorrelationIDFilter` attached.
    """
    if name is None:
        return logging.getLogger("sqlproxy")

    if not name.startswith("sqlproxy"):
        name = f"sqlproxy.{name}"

    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())

    return logger


def configure_logging(
    level: str = "INFO",
    format_style: str = "structured",
    log_to_file: str | None = None,
    extra_handlers: list[logging.Handler] | None = None,
) -> None:
    """Install handlers on the ``sqlproxy`` logger.

    Replaces any handlers installed by a previous call and stops propagation to
    the root logger, so proxy and listener output is written exactly once.

    Args:
        level: Level name, case-insensitive.
        format_style: ``"structured"`` for JSON lines, anything else for plain text.
        log_to_file: Also write JSON lines to this path.
        extra_handlers: Further handlers to attach as-is.
    """
    root_logger = logging.getLogger("sqlproxy")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if format_style == "structured":
        formatter = StructuredFormatter()
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
        "sqlproxy logging configured",
        extra={
            "extra_fields": {"level": level, "format_style": format_style, "handlers_count": len(root_logger.handlers)}
        },
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Emit ``message`` with ``extra_fields`` attached for :class:`StructuredFormatter`.

    Nothing is built when ``level`` is disabled on ``logger``.
    """
    if not logger.isEnabledFor(level):
        return
    record = logger.makeRecord(logger.name, level, "(unknown file)", 0, message, (), None)
    record.extra_fields = extra_fields  # type: ignore[attr-defined]
    logger.handle(record)
