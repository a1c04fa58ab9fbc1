"""RenderCache - Disk-Backed Cache for Rendered Responses.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Stores the rendered output (headers + body) of expensive requests on
disk, keyed by normalized request URL, and serves cached copies until
they expire or are evicted:
- Ordered LRU index persisted as a single ``index.json``
- One ``{fileId}.html`` content blob per entry
- Lazy TTL expiry (default 24 hours)
- Explicit ``refreshCache`` bypass signal
- WSGI middleware for the surrounding request pipeline

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                       RenderCache System                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ Middleware  │  │ RenderCache │  │    Keys     │   CACHE     │
    │  │    WSGI     │  │lookup/store │  │  normalize  │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              Eviction Policies                 │   EVICTION  │
    │  │          ┌─────┐          ┌─────┐             │   LAYER     │
    │  │          │ LRU │          │ TTL │             │             │
    │  │          └─────┘          └─────┘             │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │                   Storage                      │   STORAGE   │
    │  │      ┌────────────┐      ┌──────────────┐     │   LAYER     │
    │  │      │ EntryIndex │      │ ContentStore │     │             │
    │  │      └────────────┘      └──────────────┘     │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from rendercache_core import CacheConfig, CacheMiddleware, RenderCache

    cache = RenderCache.open(CacheConfig(directory="/var/cache/render"))

    hit = cache.fetch("/page?id=1")
    if hit is None:
        cache.store("/page?id=1", {"Content-Type": "text/html"}, render())

    # Or in front of any WSGI app
    app = CacheMiddleware(render_app, cache)
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.cache.keys import normalize_key
from rendercache_core.cache.cache import (
    RenderCache,
    CacheConfig,
    CacheStats,
    CachedResponse,
)
from rendercache_core.store.backend import CacheIndexError, StorageStats
from rendercache_core.store.index import EntryIndex
from rendercache_core.store.file import ContentStore
from rendercache_core.eviction.policy import EvictionPolicy, EvictionStats
from rendercache_core.eviction.lru import LRUPolicy
from rendercache_core.eviction.ttl import TTLPolicy
from rendercache_core.middleware import CacheMiddleware

__all__ = [
    # Cache
    "RenderCache",
    "CacheConfig",
    "CacheStats",
    "CachedResponse",
    "CacheEntry",
    "normalize_key",
    # Storage
    "CacheIndexError",
    "StorageStats",
    "EntryIndex",
    "ContentStore",
    # Eviction
    "EvictionPolicy",
    "EvictionStats",
    "LRUPolicy",
    "TTLPolicy",
    # Middleware
    "CacheMiddleware",
]
