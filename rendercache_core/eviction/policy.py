"""RenderCache Eviction Policy - Abstract Eviction Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.store.index import EntryIndex


@dataclass
class EvictionStats:
    """Eviction policy statistics.

    Attributes:
        evictions: Number of evictions
        promotions: Number of promotions
        max_entries: Maximum entries
    """

    evictions: int = 0
    promotions: int = 0
    max_entries: int = 0


class EvictionPolicy(ABC):
    """Abstract base for eviction policies.

    Policies reorder and trim an :class:`EntryIndex` in place; they
    never touch content blobs or persist the index.

    Example:
        policy = LRUPolicy(max_entries=1000)
        evicted = policy.make_room(index)
        index.append(entry)
    """

    def __init__(self, max_entries: int = 1000):
        """Initialize policy.

        Args:
            max_entries: Maximum entries held by the index

        Raises:
            ValueError: If max_entries is below 1
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._stats = EvictionStats(max_entries=max_entries)

    @abstractmethod
    def on_hit(self, index: EntryIndex, position: int) -> CacheEntry:
        """Record a read of the entry at a position.

        Args:
            index: Entry index
            position: Position of the entry that was read

        Returns:
            The entry
        """
        pass

    @abstractmethod
    def make_room(self, index: EntryIndex) -> List[CacheEntry]:
        """Evict entries so one more can be appended.

        Args:
            index: Entry index

        Returns:
            Evicted entries
        """
        pass

    def get_stats(self) -> EvictionStats:
        """Get eviction statistics."""
        return self._stats


__all__ = ["EvictionPolicy", "EvictionStats"]
