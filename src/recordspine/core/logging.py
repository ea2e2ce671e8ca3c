"""
recordspine logging - structured diagnostics through structlog.

Every diagnostic the engine emits (rendered SQL, skipped types, applied
migrations, cache maintenance) goes through this module. Nothing writes to
a fixed stream directly.

Manifesto:
    An ORM runs inside somebody else's application. Its logging must be
    quiet by default, switchable at runtime, and structured so the host
    application can route it. The switch and the engine level only gate
    loggers handed out by ``get_logger``; the host's own structlog
    configuration is never touched unless it calls ``configure_logging``.

    - **Switchable:** ``set_logging_enabled(False)`` silences engine events
    - **Structured:** event name plus key/value context, never f-strings
    - **Flexible:** JSON for log aggregation, console for development

Architecture:
    ::

        get_logger(__name__) ─► EngineLogger
             │   switch off or below engine level ─► dropped
             ▼
        structlog (host configuration, or configure_logging):
          1. add_log_level
          2. add_logger_name
          3. TimeStamper(iso)
          4. JSONRenderer | ConsoleRenderer

        logger = get_logger(__name__)
        logger.debug("sql.rendered", sql="SELECT * FROM Student", args=[])

Examples:
    >>> from recordspine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", enabled=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("registry.built", tables=3)

Guardrails:
    ❌ DON'T: print() or write to sys.stderr from engine code
    ❌ DON'T: call structlog.configure() from engine code
    ✅ DO: logger.warning("event.name", **error.to_dict())

Tags:
    logging, structlog, observability, recordspine

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

LOG_LEVELS: dict[str, int] = {
    "VERBOSE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_METHOD_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "msg": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "exception": logging.ERROR,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_ENABLED = False
_ENGINE_LEVEL = logging.DEBUG


def level_number(level: str) -> int:
    """Numeric level for a level name; ``VERBOSE`` is an alias for DEBUG.

    Raises:
        ValueError: unknown level name
    """
    try:
        return LOG_LEVELS[level.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}"
        ) from None


def set_logging_enabled(enabled: bool) -> None:
    """Turn engine diagnostics on or off at runtime."""
    global _ENABLED
    _ENABLED = enabled


def is_logging_enabled() -> bool:
    return _ENABLED


def set_engine_level(level: str) -> None:
    """Minimum level of engine events; host loggers are unaffected."""
    global _ENGINE_LEVEL
    _ENGINE_LEVEL = level_number(level)


def _discard(*args: Any, **kwargs: Any) -> None:
    return None


class EngineLogger:
    """structlog logger gated by the engine switch and engine level.

    Everything except the logging methods is forwarded to the wrapped
    structlog logger, so ``bind``/``new``/``unbind`` keep working.
    """

    def __init__(self, logger: Any) -> None:
        self._logger = logger

    def __getattr__(self, name: str) -> Any:
        level = _METHOD_LEVELS.get(name)
        if level is not None and (not _ENABLED or level < _ENGINE_LEVEL):
            return _discard
        return getattr(self._logger, name)

    def bind(self, **kwargs: Any) -> EngineLogger:
        return EngineLogger(self._logger.bind(**kwargs))

    def new(self, **kwargs: Any) -> EngineLogger:
        return EngineLogger(self._logger.new(**kwargs))

    def unbind(self, *keys: str) -> EngineLogger:
        return EngineLogger(self._logger.unbind(*keys))


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    enabled: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure process-wide structured logging.

    An opt-in helper for applications and tools that have no structlog
    setup of their own. ``RecordSpine.initialize`` never calls it.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR). ``VERBOSE`` is
            accepted as an alias for DEBUG.
        json_format: True for JSON, False for console, None for auto
            (JSON if stdout is not a tty)
        enabled: State of the engine on/off switch
        add_timestamp: Include ISO timestamp in logs

    Raises:
        ValueError: unknown level name
    """
    numeric_level = level_number(level)
    set_logging_enabled(enabled)
    set_engine_level(level)

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> EngineLogger:
    """Get an engine logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        EngineLogger wrapping a structlog bound logger
    """
    return EngineLogger(structlog.get_logger(name))


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(database="Application.db"):
            logger.info("bootstrap.started")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "level_number",
    "set_engine_level",
    "set_logging_enabled",
    "is_logging_enabled",
    "EngineLogger",
    "LogContext",
]
