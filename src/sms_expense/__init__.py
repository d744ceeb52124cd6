"""Core package for the SMS expense scanner.

This module bootstraps a consistent logging configuration so every submodule can
retrieve loggers via :func:`get_logger` without repeating handler setup.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_ROOT_LOGGER_NAME = "sms_expense"


def _bootstrap_logging() -> None:
    """Configure the package-wide logger once."""
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if logger.handlers:
        # Logging already configured elsewhere (e.g., tests), so reuse it.
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(os.getenv("LOG_LEVEL", "INFO")))
    logger.propagate = False


def _resolve_level(level: str | None) -> str:
    candidate = (level or "INFO").upper()
    return candidate if candidate in logging.getLevelNamesMapping() else "INFO"


def set_log_level(level: str | None) -> None:
    """Apply a level (e.g. from Settings or a CLI flag) to the package logger."""
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(_resolve_level(level))


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Return a child logger scoped under the package root."""
    name = (
        _ROOT_LOGGER_NAME
        if not component
        else f"{_ROOT_LOGGER_NAME}.{component.strip('.')}"
    )
    return logging.getLogger(name)


_bootstrap_logging()

__all__ = ["get_logger", "set_log_level"]
