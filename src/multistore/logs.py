"""Structured logging helpers.

Importing multistore never touches the global structlog configuration;
applications that want multistore's renderer call ``configure_logging()``.

Usage:
    from multistore.logs import configure_logging, get_logger

    configure_logging()  # optional, levels and format from StoreSettings
    logger = get_logger(__name__)
    logger.debug("driver_registered", driver="MemoryDriver")
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import structlog

from multistore.config import StoreSettings


def configure_logging(
    level: str | None = None,
    fmt: Literal["json", "console"] | None = None,
) -> None:
    """Configure structlog processors and the minimum log level.

    Safe to call more than once; the last call wins. Loggers returned by
    get_logger() pick up the new configuration on their next call.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...). Defaults to
            ``StoreSettings.log_level``.
        fmt: Render as JSON lines or as human-readable console output.
            Defaults to ``StoreSettings.log_format``.
    """
    if level is None or fmt is None:
        settings = StoreSettings()
        level = level or settings.log_level
        fmt = fmt or settings.log_format

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a lazy structlog logger tagged with the module name."""
    return structlog.get_logger(logger_name=name)
