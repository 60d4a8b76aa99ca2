"""
Logging utilities for the SheetGrid service.

Provides standardized logger configuration.

RULES:
- NEVER log cell contents (sheets may hold customer or invoice data)
- Log high-level events only: sheet created/deleted, resize accepted or
  rejected, window sizes, edit counts
"""

import logging
from typing import Optional

from sheetgrid.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to settings.LOG_LEVEL)

    Returns:
        Configured logger instance

    Usage:
        >>> from sheetgrid.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Sheet created")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
