"""
Structured logging for optimization requests (structlog).

Overview
--------
Every log entry of the optimizer carries three correlation fields:

- ``component``: the emitting module, e.g. ``core.strategies``;
- ``operation``: the step inside it, e.g. ``genetic``;
- ``thread_id``: one identifier per optimization request, shared by the
  scorer, the strategies, the analyzer and the ranker.

structlog keeps the log message itself under ``event``. Nothing is configured
until ``setup_logging()`` is called; before that structlog's defaults apply.

Design
------
- JSON lines on stderr by default; ``pretty=True`` switches to structlog's
  console renderer for interactive runs of the demo script.
- stdlib ``logging`` is the sink, so the level filter and third-party loggers
  share one configuration.
- Entries built without ``logger_for`` still get placeholder correlation
  fields.
- No project-internal imports, so any module can depend on this one.

Usage
-----
>>> from team_optimizer.infra.logging import setup_logging, logger_for
>>> setup_logging("DEBUG", pretty=True)
>>> log = logger_for(component="core.optimizer", event="optimize")
>>> log.info("Optimization started", criteria="balanced")
"""

from __future__ import annotations

import logging
import sys
import uuid
from typing import Any, Final

import structlog

DEFAULT_COMPONENT: Final[str] = "unspecified.component"
DEFAULT_OPERATION: Final[str] = "unspecified.operation"
DEFAULT_THREAD_ID: Final[str] = "no-thread-id"

__all__: Final[list[str]] = [
    "setup_logging",
    "logger_for",
    "generate_thread_id",
]

_configured_level: int | None = None


def _add_correlation_defaults(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("component", DEFAULT_COMPONENT)
    event_dict.setdefault("operation", DEFAULT_OPERATION)
    event_dict.setdefault("thread_id", DEFAULT_THREAD_ID)
    return event_dict


def _level_number(level: int | str) -> int:
    """Map ``"debug"``/``"INFO"``/``10`` style input to a stdlib level; unknown names mean INFO."""

    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(str(level).strip().upper(), logging.INFO)


def setup_logging(level: int | str = "INFO", *, pretty: bool = False) -> None:
    """Configure structlog on top of stdlib logging.

    The first call wins; later calls only lower or raise the stdlib level, so
    library code and tests can call this freely.

    Args:
        level: Minimum level, by name or number.
        pretty: Render human-readable console lines instead of JSON.
    """

    global _configured_level
    resolved = _level_number(level)
    if _configured_level is not None:
        if resolved != _configured_level:
            logging.getLogger().setLevel(resolved)
            _configured_level = resolved
        return

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=resolved, force=True)

    renderer: Any = structlog.dev.ConsoleRenderer() if pretty else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_correlation_defaults,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured_level = resolved


def generate_thread_id() -> str:
    """Return a fresh correlation id for one optimization request."""

    return uuid.uuid4().hex


def logger_for(component: str, event: str, thread_id: str | None = None) -> structlog.BoundLogger:
    """Return a logger bound to a component, an operation and a request.

    Args:
        component: Emitting module, e.g. ``"core.scoring"``.
        event: Operation name, bound as ``operation``.
        thread_id: Request correlation id; a new one is generated when omitted.

    Returns:
        A bound structlog logger.
    """

    return structlog.get_logger().bind(
        component=component,
        operation=event,
        thread_id=thread_id or generate_thread_id(),
    )
