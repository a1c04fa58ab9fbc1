"""RenderCache Content Store - File-Based Content Blobs.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from rendercache_core.store.backend import StorageStats, atomic_write

logger = logging.getLogger(__name__)


class ContentStore:
    """One file per cached body, named ``{file_id}.html``.

    Blobs are keyed by freshly generated identifiers, so writes for
    different entries never touch the same file and need no locking.

    Example:
        store = ContentStore("/var/cache/render")
        store.write(file_id, b"<html>...</html>")
        body = store.read(file_id)
    """

    SUFFIX = ".html"

    def __init__(self, directory: Union[str, Path]):
        """Initialize content store.

        Args:
            directory: Cache directory
        """
        self.directory = Path(directory)
        self._stats = StorageStats()

    def path_for(self, file_id: str) -> Path:
        """Get blob path for an identifier."""
        return self.directory / f"{file_id}{self.SUFFIX}"

    def write(self, file_id: str, payload: Union[bytes, str]) -> None:
        """Write a blob.

        Args:
            file_id: Content identifier
            payload: Body; text is encoded as UTF-8

        Raises:
            OSError: If the write fails
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        try:
            atomic_write(self.path_for(file_id), bytes(payload))
        except OSError as e:
            self._stats.record_error(str(e))
            raise
        self._stats.writes += 1

    def read(self, file_id: str) -> bytes:
        """Read a blob.

        Raises:
            OSError: If the blob is missing or unreadable
        """
        try:
            data = self.path_for(file_id).read_bytes()
        except OSError as e:
            self._stats.record_error(str(e))
            raise
        self._stats.reads += 1
        return data

    def delete(self, file_id: str) -> bool:
        """Delete a blob.

        Returns:
            True if a file was removed
        """
        path = self.path_for(file_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting {path}: {e}")
            self._stats.record_error(str(e))
            return False
        self._stats.deletes += 1
        return True

    def exists(self, file_id: str) -> bool:
        """Check if a blob exists."""
        return self.path_for(file_id).is_file()

    def file_ids(self) -> List[str]:
        """List identifiers of all blobs on disk."""
        if not self.directory.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.directory.iterdir()
            if path.is_file() and path.suffix == self.SUFFIX and not path.name.startswith(".")
        )

    def disk_usage(self) -> int:
        """Get total blob size in bytes."""
        return sum(self.path_for(file_id).stat().st_size for file_id in self.file_ids())

    def get_stats(self) -> StorageStats:
        """Get storage statistics."""
        return self._stats

    def __repr__(self) -> str:
        return f"ContentStore(path={self.directory})"


__all__ = ["ContentStore"]
