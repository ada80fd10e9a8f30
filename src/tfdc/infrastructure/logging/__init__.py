"""Logging infrastructure."""

from tfdc.infrastructure.logging.setup import (
    IgnoreUrllib3RetryFilter,
    set_level,
    setup_logging,
)

__all__ = [
    "IgnoreUrllib3RetryFilter",
    "set_level",
    "setup_logging",
]
