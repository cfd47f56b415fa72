"""Logging configuration."""

import logging
from typing import Optional

PACKAGE_LOGGER = "clusterops"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name or __name__)

    # Only configure if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def set_verbose(verbose: bool) -> None:
    """Switch every clusterops logger between DEBUG and INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(PACKAGE_LOGGER) and isinstance(logger, logging.Logger):
            logger.setLevel(level)
