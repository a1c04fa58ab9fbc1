"""Store module - Persistent entry index and content blobs."""

from rendercache_core.store.backend import (
    CacheIndexError,
    StorageStats,
)
from rendercache_core.store.index import EntryIndex
from rendercache_core.store.file import ContentStore

__all__ = [
    "CacheIndexError",
    "StorageStats",
    "EntryIndex",
    "ContentStore",
]
