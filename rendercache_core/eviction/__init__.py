"""Eviction module - LRU ordering and TTL expiry."""

from rendercache_core.eviction.policy import (
    EvictionPolicy,
    EvictionStats,
)
from rendercache_core.eviction.lru import LRUPolicy
from rendercache_core.eviction.ttl import TTLPolicy

__all__ = [
    "EvictionPolicy",
    "EvictionStats",
    "LRUPolicy",
    "TTLPolicy",
]
