"""Structured logging setup."""

from __future__ import annotations

import logging
from typing import Any

import structlog

__all__ = ["get_logger", "setup_logging"]


def setup_logging(*, debug: bool = False) -> None:
    """Configure structlog for console output."""
    level = logging.DEBUG if debug else logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    # discord.py's own loggers go through stdlib logging
    logging.basicConfig(level=logging.WARNING if not debug else logging.INFO)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)
