"""Utility functions and constants."""

from .constants import *

__all__ = ["APP_NAME", "CONFIG_DIR", "CONFIG_FILE", "LOG_FILE", "DEFAULT_SERVICE_NAME"]
