"""Utility modules."""

from .config import Settings, get_settings
from .logger import logger, setup_logging

__all__ = ["Settings", "get_settings", "logger", "setup_logging"]
