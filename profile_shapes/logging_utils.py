"""Logging helpers for the profiler shape engine.

Every module logs through a child of the ``profile_shapes`` logger. The
single console handler lives on that package logger, which does not
propagate, so a record is written once even when the host application
has configured the root logger.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER = "profile_shapes"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``profile_shapes.<name>`` logger."""
    _package_logger()
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
