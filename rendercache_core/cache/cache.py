"""RenderCache Cache - Rendered Response Cache Facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from rendercache_core.cache.entry import CacheEntry, new_file_id
from rendercache_core.cache.keys import DEFAULT_BYPASS_PARAM, normalize_key
from rendercache_core.eviction.lru import LRUPolicy
from rendercache_core.eviction.ttl import DEFAULT_TTL_SECONDS, TTLPolicy
from rendercache_core.store.file import ContentStore
from rendercache_core.store.index import EntryIndex

logger = logging.getLogger(__name__)


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        directory: Directory holding the index and content blobs
        max_entries: Maximum number of cached responses
        ttl_seconds: Time to live per entry (default 24 hours)
        index_name: Index filename inside ``directory``
        bypass_param: Query parameter that forces a cache miss
        delete_orphans: Delete blobs of evicted, expired and replaced
            entries instead of leaving them on disk
        cached_header: Response header marking a cache hit
    """

    directory: str = "file-cache-data"
    max_entries: int = 1000
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    index_name: str = "index.json"
    bypass_param: str = DEFAULT_BYPASS_PARAM
    delete_orphans: bool = False
    cached_header: str = "x-rendercache-cached"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheConfig":
        """Create from a mapping, ignoring unknown keys.

        Args:
            data: Settings

        Returns:
            CacheConfig instance
        """
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Number of cache hits
        misses: Number of cache misses
        bypasses: Number of lookups skipped on request
        sets: Number of stored responses
        evictions: Number of evictions
        expirations: Number of entries dropped as stale
        errors: Number of swallowed storage errors
        entry_count: Current entry count
        started_at: When cache started
    """

    hits: int = 0
    misses: int = 0
    bypasses: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0
    errors: int = 0
    entry_count: int = 0
    started_at: Optional[datetime] = None

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset counters."""
        self.hits = 0
        self.misses = 0
        self.bypasses = 0
        self.sets = 0
        self.evictions = 0
        self.expirations = 0
        self.errors = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "bypasses": self.bypasses,
            "sets": self.sets,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "errors": self.errors,
            "entry_count": self.entry_count,
            "hit_rate": self.hit_rate,
        }


@dataclass(frozen=True)
class CachedResponse:
    """What a cache hit hands back to the request pipeline.

    Attributes:
        key: Normalized cache key
        headers: Response headers to apply
        file_id: Content blob identifier
        saved_at: Epoch seconds the response was stored
    """

    key: str
    headers: Dict[str, str] = field(default_factory=dict)
    file_id: str = ""
    saved_at: float = 0.0

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CachedResponse":
        return cls(
            key=entry.key,
            headers=dict(entry.headers),
            file_id=entry.file_id,
            saved_at=entry.saved_at,
        )


class RenderCache:
    """Disk-backed LRU cache for rendered responses.

    One instance serves the whole process: construct it at startup,
    call :meth:`open`, and hand it to request handlers. Entries live in
    an ordered index (oldest first) persisted as ``index.json``; bodies
    live in one ``{file_id}.html`` blob each.

    Storage errors while storing or reordering are logged and swallowed;
    the cache only ever degrades to a miss. A corrupt index at startup
    is the one error that propagates.

    Example:
        cache = RenderCache.open(CacheConfig(directory="/var/cache/render"))

        hit = cache.fetch("/page?x=1", bypass=False)
        if hit is None:
            body = render("/page?x=1")
            cache.store("/page?x=1", {"Content-Type": "text/html"}, body)
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache.

        Args:
            config: Cache configuration
            clock: Returns current epoch seconds
        """
        self.config = config or CacheConfig()
        self._clock = clock

        directory = Path(self.config.directory)
        self._index = EntryIndex(directory, self.config.index_name)
        self._content = ContentStore(directory)
        self._eviction = LRUPolicy(max_entries=self.config.max_entries)
        self._expiry = TTLPolicy(ttl_seconds=self.config.ttl_seconds)

        self._lock = threading.RLock()
        self._stats = CacheStats(started_at=datetime.now())
        self._loaded = False

    @classmethod
    def open(
        cls,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> "RenderCache":
        """Create and load a cache.

        Raises:
            CacheIndexError: If the persisted index is corrupt
        """
        cache = cls(config, clock=clock)
        cache.load()
        return cache

    def load(self) -> int:
        """Load the persisted index.

        Returns:
            Number of entries loaded

        Raises:
            CacheIndexError: If the persisted index is corrupt
        """
        with self._lock:
            entries = self._index.load()
            self._loaded = True
            self._stats.entry_count = len(entries)
            return len(entries)

    def normalize(self, request_key: str) -> str:
        """Normalize a request URL into a cache key."""
        return normalize_key(request_key, self.config.bypass_param)

    def lookup(self, request_key: str, bypass: bool = False) -> Optional[CachedResponse]:
        """Look up a cached response.

        A hit promotes the entry to most recently used. A stale entry is
        dropped from the index and reported as a miss.

        Args:
            request_key: Request URL including the query string
            bypass: Force a miss without touching the store

        Returns:
            CachedResponse on hit, None on miss
        """
        if bypass:
            with self._lock:
                self._stats.bypasses += 1
            return None

        key = self.normalize(request_key)

        with self._lock:
            self._ensure_loaded()
            found = self._index.find(key)

            if found is None:
                self._stats.misses += 1
                logger.debug(f"Cache miss for {key!r}")
                return None

            position, entry = found

            if self._expiry.is_expired(entry, self._clock()):
                self._index.remove(position)
                self._discard_blob(entry)
                self._stats.expirations += 1
                self._stats.misses += 1
                self._persist()
                logger.debug(f"Cache entry {key!r} expired")
                return None

            self._eviction.on_hit(self._index, position)
            self._stats.hits += 1
            self._persist()
            logger.debug(f"Cache hit for {key!r}")
            return CachedResponse.from_entry(entry)

    def load_content(self, file_id: str) -> Optional[bytes]:
        """Read a cached body.

        Args:
            file_id: Content blob identifier

        Returns:
            Body bytes, or None if the blob is missing or unreadable
        """
        try:
            return self._content.read(file_id)
        except OSError as e:
            logger.warning(f"Error reading cached content {file_id}, falling back to render: {e}")
            with self._lock:
                self._stats.errors += 1
            return None

    def fetch(
        self,
        request_key: str,
        bypass: bool = False,
    ) -> Optional[Tuple[CachedResponse, bytes]]:
        """Look up a response and read its body.

        Returns:
            (CachedResponse, body) on hit, None on miss or unreadable body
        """
        hit = self.lookup(request_key, bypass=bypass)
        if hit is None:
            return None

        body = self.load_content(hit.file_id)
        if body is None:
            return None
        return hit, body

    def store(
        self,
        request_key: str,
        headers: Mapping[str, str],
        payload: Union[bytes, str],
    ) -> Optional[CacheEntry]:
        """Store a rendered response.

        Writes the body blob, replaces any entry with the same key,
        evicts the least recently used entry when at capacity, appends
        the new entry and persists the index.

        Args:
            request_key: Request URL including the query string
            headers: Outgoing response headers
            payload: Response body

        Returns:
            The stored entry, or None if storage failed
        """
        key = self.normalize(request_key)
        file_id = new_file_id()

        try:
            self._content.write(file_id, payload)
        except OSError as e:
            logger.error(f"Error writing cached content for {key!r}: {e}")
            with self._lock:
                self._stats.errors += 1
            return None

        with self._lock:
            self._ensure_loaded()

            found = self._index.find(key)
            if found is not None:
                replaced = self._index.remove(found[0])
                self._discard_blob(replaced)

            for evicted in self._eviction.make_room(self._index):
                self._discard_blob(evicted)
                self._stats.evictions += 1

            entry = CacheEntry(
                key=key,
                headers={str(k): str(v) for k, v in headers.items()},
                file_id=file_id,
                saved_at=self._clock(),
            )
            self._index.append(entry)
            self._stats.sets += 1

            if not self._persist():
                return None
            return entry

    def clear(self) -> int:
        """Remove every entry and every content blob.

        Returns:
            Number of index entries removed
        """
        with self._lock:
            self._ensure_loaded()
            removed = self._index.clear()
            for file_id in self._content.file_ids():
                self._content.delete(file_id)
            self._persist()
            self._stats.entry_count = 0
            logger.info(f"Cleared {len(removed)} cache entries")
            return len(removed)

    def purge_orphans(self) -> int:
        """Delete blobs that no live entry references.

        Returns:
            Number of blobs deleted
        """
        with self._lock:
            self._ensure_loaded()
            live = {entry.file_id for entry in self._index}
            count = 0
            for file_id in self._content.file_ids():
                if file_id not in live and self._content.delete(file_id):
                    count += 1
            if count:
                logger.info(f"Purged {count} orphaned content blobs")
            return count

    def keys(self) -> List[str]:
        """Get cache keys, least recently used first."""
        with self._lock:
            return self._index.keys()

    def entries(self) -> List[CacheEntry]:
        """Get a snapshot of entries, least recently used first."""
        with self._lock:
            return list(self._index)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            self._stats.entry_count = len(self._index)
            return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._lock:
            self._stats.reset()

    @property
    def content(self) -> ContentStore:
        """Content blob store."""
        return self._content

    @property
    def index(self) -> EntryIndex:
        """Ordered entry index."""
        return self._index

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _discard_blob(self, entry: CacheEntry) -> None:
        # Without delete_orphans the blob stays on disk until purge_orphans().
        if self.config.delete_orphans:
            self._content.delete(entry.file_id)

    def _persist(self) -> bool:
        try:
            self._index.persist()
            return True
        except OSError as e:
            logger.error(f"Error writing cache index {self._index.path}: {e}")
            self._stats.errors += 1
            return False

    def __contains__(self, request_key: str) -> bool:
        """Check if a key is indexed, regardless of freshness."""
        key = self.normalize(request_key)
        with self._lock:
            return self._index.find(key) is not None

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"RenderCache(directory={self.config.directory!r}, entries={len(self._index)})"


__all__ = ["RenderCache", "CacheConfig", "CacheStats", "CachedResponse"]
