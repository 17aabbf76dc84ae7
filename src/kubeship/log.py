"""Loguru setup for the kubeship CLI."""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "KUBESHIP_LOG_LEVEL"


def configure_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at the configured level.

    Args:
        verbose: Force DEBUG level regardless of the environment
    """
    level = "DEBUG" if verbose else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}",
    )
