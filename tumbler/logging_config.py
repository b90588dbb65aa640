"""
Structured logging for TaskTumbler (structlog rendering through stdlib logging).

The root level defaults to WARNING because `tumbler duel` shares the
terminal with its prompts: engine events such as duel.resolved are logged
at INFO on every round and would otherwise interleave with the fighters
being drawn. Failures (collaborator errors, invalid config) are WARNING or
above and still show. Set TUMBLER_LOG_LEVEL=INFO (or pass --log-level) to
follow rounds, and TUMBLER_LOG_FORMAT=json to get one JSON object per line.

bind_session() attaches a duel session id that merge_contextvars adds to
every event logged until clear_session().
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    if level is None:
        level = os.environ.get("TUMBLER_LOG_LEVEL", "WARNING")

    if json_output is None:
        json_output = os.environ.get("TUMBLER_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def bind_session(**values) -> None:
    """Attach key/values (e.g. a duel session id) to every log line in this context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_session() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = ["bind_session", "clear_session", "setup_logging"]
