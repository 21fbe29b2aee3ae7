"""
Structured logging for spine-migrate.

Thin configuration layer over structlog. ``configure_logging()`` is called
once by the CLI; library code only calls ``get_logger(__name__)`` and logs
dotted event names with key/value context::

    logger = get_logger(__name__)
    logger.info("migration.applied", filename="V001__init.sql", execution_time_ms=12)

Architecture:
    ::

        configure_logging(level="INFO", json_format=False, service="spine-migrate")
            ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars   (run_id, version bound by LogContext)
          3. add_log_level, logger name
          4. add_service_metadata
          5. JSONRenderer (CI, log shipping) or ConsoleRenderer (terminal)

Tags:
    logging, structlog, observability, spine-migrate

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "spine-migrate"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _add_logger_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the name passed to ``get_logger`` as ``logger``."""
    name = getattr(logger, "name", None)
    if name:
        event_dict.setdefault("logger", name)
    return event_dict


class _NamedPrintLogger(structlog.PrintLogger):
    """``PrintLogger`` that remembers the name it was created for."""

    def __init__(self, name: str | None = None) -> None:
        # stdout is reserved for command output (tables, JSON)
        super().__init__(sys.stderr)
        self.name = name


def _stderr_logger(*args: Any) -> _NamedPrintLogger:
    # Called per log call (no caching) so a swapped sys.stderr is honoured
    return _NamedPrintLogger(args[0] if args else None)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "spine-migrate",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs

    Example:
        # CI (JSON for log aggregation)
        configure_logging(level="INFO", json_format=True)

        # Terminal
        configure_logging(level="DEBUG")
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__), rendered as the ``logger`` key
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(run_id="abc123"):
            logger.info("migrate.started")
        # run_id unbound here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
]
