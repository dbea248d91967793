"""Shared logging utilities for consistent client observability.

Usage example:
    from asc_client.observability.logging import get_logger

    logger = get_logger("asc_client.infrastructure.http")
    logger.warning("Rate limited; retrying in %.1fs", delay)
"""

from __future__ import annotations

import logging
import time

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_ROOT_NAME = "asc_client"


def get_logger(name: str) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def set_log_level(level: int) -> None:
    """Apply a level to every client logger created so far."""
    for name, candidate in logging.root.manager.loggerDict.items():
        if name == _ROOT_NAME or name.startswith(f"{_ROOT_NAME}."):
            if isinstance(candidate, logging.Logger):
                candidate.setLevel(level)
