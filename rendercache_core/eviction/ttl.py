"""RenderCache TTL Policy - Lazy Time-Based Expiry.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from typing import Optional

from rendercache_core.cache.entry import CacheEntry

DEFAULT_TTL_SECONDS = 86400.0


class TTLPolicy:
    """Fixed time-to-live measured from each entry's save time.

    Staleness is computed on demand; nothing is swept in the background.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds

    def is_expired(self, entry: CacheEntry, now: Optional[float] = None) -> bool:
        """Check whether an entry is stale at ``now``."""
        return entry.is_expired(self.ttl_seconds, time.time() if now is None else now)

    def remaining(self, entry: CacheEntry, now: Optional[float] = None) -> float:
        """Get seconds until the entry expires, never negative."""
        now = time.time() if now is None else now
        return max(0.0, entry.expires_at(self.ttl_seconds) - now)

    def __repr__(self) -> str:
        return f"TTLPolicy(ttl={self.ttl_seconds}s)"


__all__ = ["TTLPolicy", "DEFAULT_TTL_SECONDS"]
