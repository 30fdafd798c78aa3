"""Leveled structured logging on top of structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("console", "json")


class NamedPrintLogger(structlog.PrintLogger):
    """Print logger that remembers the module name it was requested for."""

    def __init__(self, file: TextIO | None = None, name: str | None = None) -> None:
        super().__init__(file)
        self.name = name


class NamedPrintLoggerFactory:
    """Create a :class:`NamedPrintLogger` per ``get_logger(name)`` call."""

    def __init__(self, file: TextIO | None = None) -> None:
        self._file = file

    def __call__(self, *args: Any) -> NamedPrintLogger:
        name = args[0] if args and isinstance(args[0], str) else None
        return NamedPrintLogger(self._file, name)


def add_logger_name(
    logger: Any, method_name: str, event_dict: structlog.typing.EventDict
) -> structlog.typing.EventDict:
    name = getattr(logger, "name", None)
    if name:
        event_dict.setdefault("logger", name)
    return event_dict


def configure_logging(
    level: str = "info",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog processors and the output stream."""
    normalized_level = level.lower()
    if normalized_level not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}.")
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Log format must be one of {', '.join(LOG_FORMATS)}.")
    output = stream or sys.stderr
    numeric_level = getattr(logging, normalized_level.upper())

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=NamedPrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a lazily configured logger; ``name`` ends up under the ``logger`` key."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
