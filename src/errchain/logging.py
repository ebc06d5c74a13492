"""
Structured logging for errchain.

Configures structlog so an AppError handed to a logger under the ``error``
key is rendered as its recursive ``to_dict()`` record plus the one-line
``chain()`` summary. Log pipelines then receive the whole cause chain as data
instead of a flattened string.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True)
            │
            ▼
        processor chain:
          1. TimeStamper (iso)
          2. add_log_level
          3. add_service_metadata
          4. error_chain_processor      error=AppError -> error={...}, error.chain="..."
          5. elasticsearch_compatible   (JSON only)
          6. JSONRenderer / ConsoleRenderer

        log_error(error, "load_failed", user_id="123")
            │
            ▼
        {"event": "load_failed", "error": {"kind": "AppError", ..., "cause": {...}},
         "error.chain": "[AppError] ... -> [NotFoundError] ...", "user_id": "123"}

Examples:
    >>> from errchain.logging import configure_logging, log_error
    >>> configure_logging(level="INFO", json_format=True)
    >>> log_error(NotFoundError("User", "123").wrap("Failed to load user"), "load_failed")

Tags:
    logging, structlog, observability, json-logging, errchain
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.types import EventDict, Processor, WrappedLogger

from errchain.errors import AppError
from errchain.settings import get_settings

# Store service name for metadata
_SERVICE_NAME = "errchain"


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def error_chain_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render an AppError under ``error`` as its chain record."""
    error = event_dict.get("error")
    if isinstance(error, AppError):
        event_dict["error"] = error.to_dict()
        event_dict["error.chain"] = error.chain()
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "errchain",
    add_timestamp: bool = True,
    file: TextIO | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to ``ERRCHAIN_LOG_LEVEL``
        json_format: True for JSON, False for console, None for ``ERRCHAIN_LOG_JSON``
            and then auto (JSON if not a tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
        file: Stream to write rendered lines to; stdout when None
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.log_json
    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
        error_chain_processor,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger (usually ``get_logger(__name__)``).

    The name is bound as the ``logger`` field, so it works with any
    structlog logger factory.
    """
    if name is None:
        return structlog.get_logger()
    return BoundLoggerLazyProxy(
        None, initial_values={"logger": name}, logger_factory_args=()
    )


def log_error(
    error: Any,
    event: str = "error",
    *,
    logger: Any = None,
    **fields: Any,
) -> AppError:
    """Log a failure with its full chain at error level.

    Anything that is not already an AppError is converted with
    ``from_unknown`` first. The logged node is returned so callers can keep
    propagating it.
    """
    from errchain.convert import from_unknown

    node = from_unknown(error)
    (logger or get_logger(__name__)).error(event, error=node, **fields)
    return node


__all__ = [
    "configure_logging",
    "error_chain_processor",
    "get_logger",
    "log_error",
]
