"""
Structured logging for the fieldrec storage and user layers.

Usage:
    >>> from fieldrec.log import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.info("user_written", username="alice")  # doctest: +SKIP

Notes:
    - fieldrec.core never logs; errors propagate to callers instead.
    - JSON output is chosen automatically when stdout is not a TTY.
    - Events are printed directly (PrintLoggerFactory); the logger name is bound as
      initial context by get_logger rather than read from a stdlib logger.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from .io.config import StorageSettings

__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
]


def configure_logging(level: str = "INFO", json_format: bool | None = None) -> None:
    """Configure structlog processors and the stdlib root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        json_format: True for JSON, False for console, None for auto (JSON if not tty).
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())


def configure_from_settings(settings: StorageSettings) -> None:
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: str | None = None) -> Any:
    """Get a structlog bound logger; name is carried in every event as "logger_name"."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name, logger_name=name)
