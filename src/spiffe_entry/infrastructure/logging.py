"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


def add_service_name(service_name: str) -> Processor:
    """Processor stamping every event with the emitting service."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    service_name: str = "spiffe_entry",
) -> structlog.BoundLogger:
    """Set up structured logging.

    Events are rendered as JSON lines, or for ``log_format="console"`` in
    structlog's human-readable format.
    """
    log_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name(service_name),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger()


def get_logger(name: str | None = None, **context: Any) -> structlog.BoundLogger:
    """Get a bound logger."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
