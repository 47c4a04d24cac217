"""
Structured logging for the modeler engine.

Every engine module logs through ``get_logger(__name__)``.  Lifecycle steps
(``instance_saving``, ``instance_saved``, ``instance_destroyed`` ...) are
emitted at debug level and misbehaving event listeners at warning level, as
key/value events an application can render for a terminal or ship to a log
aggregator.

Nothing is configured on import: applications call ``configure_logging()``
(or ``configure_from_settings()`` to read the ``MODELER_*`` environment)
once at startup.

Examples:
    >>> from modeler.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True, service="pets-api")
    >>> get_logger(__name__).info("kind_declared", kind="Pet", attributes=3)

    Scoped context, for example around one request:

    >>> with LogContext(request_id="r-17"):
    ...     await pet.save()

Guardrails:
    - ``json_format=None`` picks JSON when stdout is not a terminal
    - JSON output uses ECS field names (``@timestamp``, ``log.level``,
      ``service.name``)
    - Unknown level names raise ``ConfigError``

Tags:
    logging, structlog, observability, modeler

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from modeler.core.errors import ConfigError

# structlog key -> ECS key, applied only to JSON output
_ECS_RENAMES = {
    "timestamp": "@timestamp",
    "level": "log.level",
}


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ConfigError(f"unknown log level: {level!r}").with_context(level=level)
    return number


def _tag_service(service: str) -> Processor:
    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return processor


def _rename_for_ecs(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key, ecs_key in _ECS_RENAMES.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def build_processors(*, json_format: bool, service: str, add_timestamp: bool = True) -> list[Processor]:
    """Processor chain used by :func:`configure_logging`, renderer last."""
    chain: list[Processor] = []
    if add_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    chain += [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _tag_service(service),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if json_format:
        chain += [
            structlog.processors.format_exc_info,
            _rename_for_ecs,
            structlog.processors.JSONRenderer(),
        ]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(
    level: str | int = "INFO",
    json_format: bool | None = None,
    service: str = "modeler",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the whole process.

    Args:
        level: Minimum level, as a name (``"DEBUG"``) or a ``logging`` constant
        json_format: True for JSON lines, False for console, None to decide
            from whether stdout is a terminal
        service: Value of the ``service.name`` field on every event
        add_timestamp: Add an ISO-8601 UTC timestamp to every event

    Raises:
        ConfigError: If *level* is not a known level name
    """
    threshold = _resolve_level(level)
    if json_format is None:
        json_format = not sys.stdout.isatty()

    structlog.configure(
        processors=build_processors(json_format=json_format, service=service, add_timestamp=add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings() -> None:
    """Configure logging from :class:`~modeler.core.settings.ModelerSettings`."""
    from modeler.core.settings import get_settings

    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        service=settings.service_name,
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**values: Any) -> None:
    """Attach *values* to every event logged from the current context."""
    structlog.contextvars.bind_contextvars(**values)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind log context for the duration of a ``with`` / ``async with`` block.

    On exit the keys are removed, or restored to the values they had before
    the block when an outer context had bound them::

        with LogContext(kind="Pet"):
            with LogContext(kind="Toy"):
                ...                     # kind="Toy"
            ...                         # kind="Pet" again
    """

    def __init__(self, **values: Any):
        self._values = values
        self._previous: dict[str, Any] = {}

    def _enter(self) -> LogContext:
        bound = structlog.contextvars.get_contextvars()
        self._previous = {key: bound[key] for key in self._values if key in bound}
        bind_context(**self._values)
        return self

    def _exit(self) -> None:
        unbind_context(*self._values)
        if self._previous:
            bind_context(**self._previous)

    def __enter__(self) -> LogContext:
        return self._enter()

    def __exit__(self, *exc_info: Any) -> None:
        self._exit()

    async def __aenter__(self) -> LogContext:
        return self._enter()

    async def __aexit__(self, *exc_info: Any) -> None:
        self._exit()


__all__ = [
    "build_processors",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
