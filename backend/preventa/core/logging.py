"""Structured logging configuration for the Preventa backend."""

import logging
import sys
from typing import Any, Optional

import structlog

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "passlib": logging.ERROR,
    "sqlalchemy.engine": logging.WARNING,
}


def setup_logging(debug: bool = False, level: Optional[str] = None) -> None:
    """Configure structlog and route standard-library logging to stdout.

    Args:
        debug: Colored console output when True, JSON lines otherwise.
        level: Level name such as "INFO"; defaults to DEBUG in debug mode.
    """
    if level:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    else:
        log_level = logging.DEBUG if debug else logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(noisy_level, log_level))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger, usually named after the calling module."""
    return structlog.get_logger(name)
