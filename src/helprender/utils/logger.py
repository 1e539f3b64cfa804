"""Minimal logging utilities for helprender.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from helprender.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Rendering topic")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "helprender." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'helprender.mymodule'
    """
    if not (name == "helprender" or name.startswith("helprender.")):
        name = f"helprender.{name}"
    return logging.getLogger(name)
