"""Configuration management."""

from tfdc.infrastructure.config.settings import (
    DEFAULT_CACHE_DIR,
    Settings,
    get_settings,
    parse_duration,
)

__all__ = ["DEFAULT_CACHE_DIR", "Settings", "get_settings", "parse_duration"]
