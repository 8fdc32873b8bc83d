"""
Application configuration.

Re-exports the settings of the stockapp package so the API and the
library read one configuration.
"""

from stockapp.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
