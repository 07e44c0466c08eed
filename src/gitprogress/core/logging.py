"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(level: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Configure structlog with console output on stderr.

    Level comes from the argument, then GITPROGRESS_LOG_LEVEL, then WARNING
    so progress bars are not interleaved with log lines by default.
    """
    log_level = (level or os.environ.get("GITPROGRESS_LOG_LEVEL", "WARNING")).upper()
    numeric = getattr(logging, log_level, logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(level=numeric, stream=sys.stderr, format="%(message)s")

    return structlog.get_logger()
