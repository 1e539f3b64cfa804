"""Utility modules for helprender.

Provides:
- logger: get_logger for logging
- stringbuilder: StringBuilder for output accumulation
"""

from helprender.utils.logger import get_logger
from helprender.utils.stringbuilder import StringBuilder

__all__ = [
    "StringBuilder",
    "get_logger",
]
