"""RenderCache LRU Policy - Least Recently Used Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import List

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.eviction.policy import EvictionPolicy
from rendercache_core.store.index import EntryIndex

logger = logging.getLogger(__name__)


class LRUPolicy(EvictionPolicy):
    """Least Recently Used eviction policy.

    A hit moves the entry to the most recently used end of the index;
    an insert at capacity drops position 0 first.

    Example:
        policy = LRUPolicy(max_entries=2)
        policy.make_room(index)   # no-op below capacity
        policy.on_hit(index, 0)   # promote oldest to newest
    """

    def on_hit(self, index: EntryIndex, position: int) -> CacheEntry:
        """Promote the entry at a position to most recently used."""
        entry = index.remove(position)
        index.append(entry)
        self._stats.promotions += 1
        return entry

    def make_room(self, index: EntryIndex) -> List[CacheEntry]:
        """Evict least recently used entries until one more fits."""
        evicted = []
        while len(index) >= self.max_entries:
            entry = index.remove_oldest()
            if entry is None:
                break
            evicted.append(entry)
            self._stats.evictions += 1
            logger.debug(f"Evicted {entry.key!r}")
        return evicted

    def peek_lru(self, index: EntryIndex) -> CacheEntry:
        """Peek at the entry that would be evicted next.

        Raises:
            IndexError: If the index is empty
        """
        return index[0]

    def __repr__(self) -> str:
        return f"LRUPolicy(max={self.max_entries})"


__all__ = ["LRUPolicy"]
