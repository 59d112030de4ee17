"""Logging setup for the CLI and embedding hosts."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
PACKAGE_LOGGER = "weather_tables"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Install one stderr handler on the package logger.

    Calling this more than once replaces the handler instead of stacking a
    second one, so repeated CLI invocations in one process log each line once.

    Args:
        level: Level name or number for the package logger.

    Returns:
        The configured ``weather_tables`` logger.
    """
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_weather_tables", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._weather_tables = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
