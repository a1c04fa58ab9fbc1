"""RenderCache Storage - Shared Storage Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class CacheIndexError(Exception):
    """Persisted index exists but cannot be read.

    Raised at startup; the cache must not serve from an index in an
    unknown state.
    """


@dataclass
class StorageStats:
    """Storage statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        errors: Number of errors
        last_error: Most recent error message
        last_error_at: When the most recent error happened
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


def atomic_write(path: Path, data: bytes) -> None:
    """Write bytes so readers never observe a half-written file.

    Writes to a unique sibling temp file, then renames it over ``path``.

    Args:
        path: Destination file
        data: File contents

    Raises:
        OSError: If the write or rename fails
    """
    temp_path = path.with_name(f".{path.name}.{os.getpid()}.{uuid.uuid4().hex[:8]}.tmp")

    try:
        with open(temp_path, "wb") as f:
            f.write(data)
        temp_path.replace(path)
    except OSError:
        try:
            if temp_path.exists():
                temp_path.unlink()
        except OSError as e:
            logger.error(f"Error removing temp file {temp_path}: {e}")
        raise


__all__ = ["CacheIndexError", "StorageStats", "atomic_write"]
