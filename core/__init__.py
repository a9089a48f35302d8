"""
Core Layer - configuration, logging, errors and process-wide plumbing.
"""

from .config import Settings, get_settings
from .logger import logger

__all__ = [
    "Settings",
    "get_settings",
    "logger",
]
