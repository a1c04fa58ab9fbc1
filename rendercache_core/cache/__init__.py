"""Cache module - Entries, key normalization and the cache facade."""

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.cache.keys import normalize_key
from rendercache_core.cache.cache import (
    RenderCache,
    CacheConfig,
    CacheStats,
    CachedResponse,
)

__all__ = [
    "CacheEntry",
    "normalize_key",
    "RenderCache",
    "CacheConfig",
    "CacheStats",
    "CachedResponse",
]
