"""
Structured logging setup.

Library modules only ever call `structlog.get_logger()`; entry points call
`configure_logging()` once to choose level and renderer.
"""
from __future__ import annotations

import logging
import sys

import structlog


def resolve_log_level(level: str = "INFO", debug: bool = False) -> int:
    """Map a level name to its logging constant; `debug` forces DEBUG."""
    if debug:
        return logging.DEBUG
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(level: str = "INFO", fmt: str = "console", app_name: str = "",
                      debug: bool = False) -> None:
    """Route structlog through stdlib logging with a JSON or console renderer."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=resolve_log_level(level, debug),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if app_name:
        structlog.contextvars.bind_contextvars(app=app_name)
