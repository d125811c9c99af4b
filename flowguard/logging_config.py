"""Structured logging setup. Logs go to stderr so stdout stays the report."""

import logging
import sys

import structlog


def configure_logging(level: str = "warning", debug: bool = False) -> None:
    """Configure structlog once per process.

    Args:
        level: Minimum level name (debug, info, warning, error)
        debug: Human-readable console output instead of JSON lines
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
