"""Logging setup for the package logger."""

from __future__ import annotations

import logging

from .config import settings

PACKAGE_LOGGER = "db_validations"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Apply the configured level to the package logger and return it."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(resolved)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {resolved}")
    logger.setLevel(numeric_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    return logger
