"""Logging configuration, built on loguru."""

from __future__ import annotations

import sys

from loguru import logger

from crm_dedupe.config import get_settings


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a stderr sink at ``level``."""
    level = level or get_settings().log_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )
    logger.debug(f"Logging configured: level={level}")
