"""Tests for eviction and expiry policies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.eviction.lru import LRUPolicy
from rendercache_core.eviction.ttl import TTLPolicy
from rendercache_core.store.index import EntryIndex


@pytest.fixture()
def index(tmp_path):
    idx = EntryIndex(tmp_path)
    idx.load()
    return idx


def fill(index, *keys):
    for key in keys:
        index.append(CacheEntry(key=key, saved_at=0.0))


class TestLRUPolicy:
    """Tests for LRU eviction policy."""

    def test_basic_eviction(self, index):
        """Test oldest entry is evicted at capacity."""
        policy = LRUPolicy(max_entries=3)
        fill(index, "key1", "key2", "key3")

        evicted = policy.make_room(index)

        assert [e.key for e in evicted] == ["key1"]
        assert index.keys() == ["key2", "key3"]

    def test_no_eviction_below_capacity(self, index):
        """Test make_room is a no-op with space left."""
        policy = LRUPolicy(max_entries=3)
        fill(index, "key1", "key2")

        assert policy.make_room(index) == []
        assert len(index) == 2

    def test_access_updates_order(self, index):
        """Test that a hit updates recency."""
        policy = LRUPolicy(max_entries=3)
        fill(index, "key1", "key2", "key3")

        # Hit key1, making key2 the LRU
        entry = policy.on_hit(index, 0)

        assert entry.key == "key1"
        assert index.keys() == ["key2", "key3", "key1"]
        assert policy.peek_lru(index).key == "key2"
        assert [e.key for e in policy.make_room(index)] == ["key2"]

    def test_stats(self, index):
        """Test promotion and eviction counters."""
        policy = LRUPolicy(max_entries=2)
        fill(index, "key1", "key2")

        policy.on_hit(index, 0)
        policy.make_room(index)

        stats = policy.get_stats()
        assert stats.promotions == 1
        assert stats.evictions == 1
        assert stats.max_entries == 2

    def test_invalid_max_entries(self):
        """Test capacity must be at least one."""
        with pytest.raises(ValueError):
            LRUPolicy(max_entries=0)


class TestTTLPolicy:
    """Tests for TTL expiry."""

    def test_boundaries(self):
        """Test expiry is strictly after saved + ttl."""
        policy = TTLPolicy(ttl_seconds=10)
        entry = CacheEntry(key="k", saved_at=100.0)

        assert not policy.is_expired(entry, now=109.999)
        assert not policy.is_expired(entry, now=110.0)
        assert policy.is_expired(entry, now=110.001)

    def test_default_is_one_day(self):
        """Test default TTL."""
        assert TTLPolicy().ttl_seconds == 86400.0

    def test_remaining(self):
        """Test remaining TTL never goes negative."""
        policy = TTLPolicy(ttl_seconds=10)
        entry = CacheEntry(key="k", saved_at=100.0)

        assert policy.remaining(entry, now=104.0) == pytest.approx(6.0)
        assert policy.remaining(entry, now=200.0) == 0.0

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_invalid_ttl(self, ttl):
        """Test TTL must be positive."""
        with pytest.raises(ValueError):
            TTLPolicy(ttl_seconds=ttl)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
