"""
Structured logging for the tag engine.

A nightly batch that touches thousands of users is only debuggable after
the fact if every line says which run and which user it belongs to. The
scheduler binds ``run_id`` for a whole pass and ``user_id`` for each
user's task through :class:`LogContext`; structlog's contextvars keep the
per-task bindings apart while the batch runs concurrently.

Output:
    ::

        configure_logging(level, json_format, service, stream)
            │
            ├── TimeStamper(iso)            (optional)
            ├── merge_contextvars           run_id / user_id
            ├── add_log_level
            ├── service.name
            └── JSON (ECS keys: @timestamp, log.level)  │  console (tty)

    Event names are dotted (``run.started``, ``reconcile.user_failed``,
    ``notify.failed``) with key/value fields, never interpolated strings.

Examples:
    >>> from chrono_tags.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> get_logger(__name__).info("run.started", users=42)

Tags:
    logging, structlog, observability, ecs, chrono-tags
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_service_name = "chrono-tags"

# structlog key → ECS key
_ECS_RENAMES = {"timestamp": "@timestamp", "level": "log.level", "logger_name": "log.logger"}


def _stamp_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _service_name)
    return event_dict


def _ecs_keys(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for source, target in _ECS_RENAMES.items():
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    return event_dict


def _build_processors(json_format: bool, add_timestamp: bool, colors: bool) -> list[Processor]:
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _stamp_service,
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            _ecs_keys,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "chrono-tags",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines when True, console when False; ``None``
            picks JSON unless ``stream`` is a terminal
        service: Value of the ``service.name`` field
        add_timestamp: Prefix every event with an ISO timestamp
        stream: Destination, stdout by default. The CLI passes stderr so
            that ``--json`` output on stdout stays parseable.
    """
    global _service_name
    _service_name = service

    stream = stream or sys.stdout
    is_tty = stream.isatty()
    numeric_level = getattr(logging, level.upper())

    structlog.configure(
        processors=_build_processors(
            json_format=not is_tty if json_format is None else json_format,
            add_timestamp=add_timestamp,
            colors=is_tty,
        ),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # The timing backends log through the standard library
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=stream,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> Any:
    """Structured logger; ``name`` is bound as the ``logger_name`` field (``log.logger`` in JSON)."""
    # PrintLogger has no .name, so the name travels as an initial value
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name, logger_name=name)


def bind_context(**fields: Any) -> None:
    structlog.contextvars.bind_contextvars(**fields)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Bind fields for the duration of a ``with`` block.

    Usage::

        with LogContext(run_id=report.run_id):
            logger.info("run.started")
    """

    def __init__(self, **fields: Any):
        self.fields = fields

    def __enter__(self) -> LogContext:
        bind_context(**self.fields)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        unbind_context(*self.fields)


__all__ = [
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
