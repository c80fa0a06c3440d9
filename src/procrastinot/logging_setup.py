"""Logging configuration for the command shell."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "procrastinot"

_handler: logging.Handler | None = None


def setup_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """
    Send package logs to stderr at the given level.

    Safe to call more than once: the handler from a previous call is replaced,
    handlers installed by others are left alone.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if _handler is not None:
        logger.removeHandler(_handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setLevel(level)
    _handler.setFormatter(fmt)
    logger.addHandler(_handler)
    return logger
