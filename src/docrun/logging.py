"""Structured logging for docrun.

Diagnostics are structlog events rendered as one line each on stderr, so
they never mix with anything an engine writes to stdout.

Example:
    configure_logging(level="DEBUG")
    logger = get_logger(__name__)
    logger.error("invalid_arguments", where="docrun:file", args=["a", "b", "c"])
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "docrun"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    if "logger_name" in event_dict:
        event_dict["log.logger"] = event_dict.pop("logger_name")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    service: str = "docrun",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON lines, False for the console renderer
        service: Service name to include in JSON logs
        add_timestamp: Include ISO timestamp in logs
        stream: Where diagnostics go (default ``sys.stderr``)
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service
    stream = stream or sys.stderr

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_add_service_metadata)
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer(default=repr)
    else:
        colors = bool(getattr(stream, "isatty", lambda: False)())
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger whose events carry ``logger_name``.

    The name is an initial value, not a bind, so the logger keeps picking up
    whatever ``configure_logging`` installs later.
    """
    if name:
        return structlog.get_logger(name, logger_name=name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
