"""RenderCache Entry Index - Ordered, Persisted Entry Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from rendercache_core.cache.entry import CacheEntry
from rendercache_core.store.backend import CacheIndexError, StorageStats, atomic_write

logger = logging.getLogger(__name__)


class EntryIndex:
    """Ordered sequence of cache entries persisted as one JSON file.

    Position encodes recency: index 0 is least recently used, the last
    position is most recently used. The index does not enforce key
    uniqueness or capacity; the cache facade and the eviction policy do.

    The whole sequence is rewritten on every persist, through a temp
    file and a rename.

    Example:
        index = EntryIndex("/var/cache/render")
        index.load()
        found = index.find("/page")
        if found:
            position, entry = found
    """

    def __init__(self, directory: Union[str, Path], index_name: str = "index.json"):
        """Initialize index.

        Args:
            directory: Cache directory
            index_name: Index filename inside the directory
        """
        self.directory = Path(directory)
        self.path = self.directory / index_name
        self._entries: List[CacheEntry] = []
        self._stats = StorageStats()

    def load(self) -> List[CacheEntry]:
        """Load persisted state, creating empty storage if absent.

        Returns:
            The loaded entries, oldest first

        Raises:
            CacheIndexError: If the index exists but cannot be parsed
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._entries = []
            atomic_write(self.path, b"[]")
            logger.info(f"Created empty cache index at {self.path}")
            return []
        except UnicodeDecodeError as e:
            raise CacheIndexError(f"Cache index {self.path} is not valid UTF-8") from e

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheIndexError(f"Cache index {self.path} is not valid JSON: {e}") from e

        if not isinstance(records, list):
            raise CacheIndexError(f"Cache index {self.path} must hold a JSON array")

        entries = []
        for position, record in enumerate(records):
            try:
                entries.append(CacheEntry.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise CacheIndexError(
                    f"Cache index {self.path} has an invalid record at {position}: {e!r}"
                ) from e

        unique = self._drop_duplicates(entries)
        if len(unique) != len(entries):
            logger.warning(
                f"Dropped {len(entries) - len(unique)} duplicate cache entries from {self.path}"
            )
        entries = unique

        self._stats.reads += 1
        self._entries = entries
        logger.info(f"Loaded {len(entries)} cache entries from {self.path}")
        return list(entries)

    @staticmethod
    def _drop_duplicates(entries: List[CacheEntry]) -> List[CacheEntry]:
        # Keep the most recently used copy of each key.
        seen = set()
        kept = []
        for entry in reversed(entries):
            if entry.key not in seen:
                seen.add(entry.key)
                kept.append(entry)
        kept.reverse()
        return kept

    def find(self, key: str) -> Optional[Tuple[int, CacheEntry]]:
        """Find an entry by key.

        Args:
            key: Normalized cache key

        Returns:
            (position, entry) or None
        """
        for position, entry in enumerate(self._entries):
            if entry.key == key:
                return position, entry
        return None

    def remove(self, position: int) -> CacheEntry:
        """Remove the entry at a position.

        Args:
            position: Position in the ordering

        Returns:
            The removed entry
        """
        return self._entries.pop(position)

    def remove_oldest(self) -> Optional[CacheEntry]:
        """Remove the least recently used entry.

        Returns:
            The removed entry or None if empty
        """
        if not self._entries:
            return None
        return self._entries.pop(0)

    def append(self, entry: CacheEntry) -> None:
        """Add an entry at the most recently used end."""
        self._entries.append(entry)

    def clear(self) -> List[CacheEntry]:
        """Remove all entries.

        Returns:
            The removed entries
        """
        removed, self._entries = self._entries, []
        return removed

    def persist(self) -> None:
        """Rewrite the persisted index from the in-memory ordering.

        Raises:
            OSError: If the write fails
        """
        payload = json.dumps([entry.to_dict() for entry in self._entries], indent=2)
        try:
            atomic_write(self.path, payload.encode("utf-8"))
        except OSError as e:
            self._stats.record_error(str(e))
            raise
        self._stats.writes += 1

    def keys(self) -> List[str]:
        """Get keys in recency order, oldest first."""
        return [entry.key for entry in self._entries]

    def get_stats(self) -> StorageStats:
        """Get storage statistics."""
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries))

    def __getitem__(self, position: int) -> CacheEntry:
        return self._entries[position]

    def __repr__(self) -> str:
        return f"EntryIndex(path={self.path}, entries={len(self._entries)})"


__all__ = ["EntryIndex"]
