"""Response cache infrastructure."""

from tfdc.infrastructure.cache.store import CacheInitError, CacheStore

__all__ = ["CacheInitError", "CacheStore"]
