"""Correlation-aware logging for the ``clustersync`` package.

Test runs interleave many waits, triggers and reservations. Every record is
tagged with the test, background task and service it was emitted for, so
the output of one test stays separable from the next. ``setup_logging``
only configures the ``clustersync`` logger; the host test runner keeps its
own root handlers.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime

from clustersync.config import LoggingConfig, get_settings

PACKAGE_LOGGER = "clustersync"
_CORRELATION_FIELDS = ("test_id", "task_id", "service_id")


@dataclass(frozen=True, slots=True)
class CorrelationContext:
    test_id: str | None = None
    task_id: str | None = None
    service_id: str | None = None

    def merged(self, **ids: str | None) -> CorrelationContext:
        """Copy with every given non-``None`` id replaced."""
        return replace(self, **{name: value for name, value in ids.items() if value is not None})

    def tags(self) -> dict[str, str]:
        return {name: value for name, value in asdict(self).items() if value is not None}


_current: contextvars.ContextVar[CorrelationContext] = contextvars.ContextVar(
    "clustersync_correlation",
    default=CorrelationContext(),
)


def get_correlation_context() -> CorrelationContext:
    return _current.get()


@contextmanager
def correlation_scope(
    *,
    test_id: str | None = None,
    task_id: str | None = None,
    service_id: str | None = None,
) -> Iterator[CorrelationContext]:
    """Tag records emitted inside the block. Unset ids inherit the outer scope."""
    context = _current.get().merged(test_id=test_id, task_id=task_id, service_id=service_id)
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


class CorrelationFilter(logging.Filter):
    """Copy the current correlation ids onto each record.

    ``record.correlation`` holds them as ``key=value`` pairs, or ``-`` when
    no scope is active.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = _current.get()
        for name in _CORRELATION_FIELDS:
            setattr(record, name, getattr(context, name))
        tags = context.tags()
        record.correlation = " ".join(f"{k}={v}" for k, v in tags.items()) or "-"
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; correlation ids appear only when set."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _CORRELATION_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


_installed_handler: logging.Handler | None = None


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Attach a correlation-aware stdout handler to the package logger.

    Uses the active settings' logging section unless ``config`` is given.
    Calling it again replaces the handler installed by the previous call.
    """
    global _installed_handler
    config = config or get_settings().logging

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        package_logger.removeHandler(_installed_handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    if config.json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(correlation)s] %(message)s")
        )
    handler.addFilter(CorrelationFilter())

    package_logger.setLevel(config.level.upper())
    package_logger.addHandler(handler)
    _installed_handler = handler
    return handler


__all__ = [
    "PACKAGE_LOGGER",
    "CorrelationContext",
    "CorrelationFilter",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
]
