"""RenderCache Entry - Cached Response Record with TTL.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


def new_file_id() -> str:
    """Generate a collision-free content identifier."""
    return uuid.uuid4().hex


def format_saved(saved_at: float) -> str:
    """Format an epoch as an ISO-8601 UTC string with milliseconds.

    Args:
        saved_at: Epoch seconds

    Returns:
        String such as ``2024-05-01T12:00:00.000Z``
    """
    moment = datetime.fromtimestamp(saved_at, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_saved(value: Union[str, int, float]) -> float:
    """Parse a persisted ``saved`` value into epoch seconds.

    Accepts ISO-8601 strings (``Z`` suffix or explicit offset) and
    numeric epochs in milliseconds.

    Args:
        value: Persisted timestamp

    Returns:
        Epoch seconds

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid saved timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return float(value) / 1000.0
    if not isinstance(value, str):
        raise ValueError(f"Invalid saved timestamp: {value!r}")

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


@dataclass
class CacheEntry:
    """One cached response.

    Attributes:
        key: Normalized cache key (persisted as ``url``)
        headers: Response headers, case preserved
        file_id: Name of the content blob (persisted as ``fileId``)
        saved_at: Epoch seconds of the last write (persisted as ``saved``)
    """

    key: str
    headers: Dict[str, str] = field(default_factory=dict)
    file_id: str = field(default_factory=new_file_id)
    saved_at: float = field(default_factory=time.time)

    @property
    def content_filename(self) -> str:
        """Get the blob filename for this entry."""
        return f"{self.file_id}.html"

    def expires_at(self, ttl_seconds: float) -> float:
        """Get expiration timestamp.

        Args:
            ttl_seconds: Time to live

        Returns:
            Epoch seconds after which the entry is stale
        """
        return self.saved_at + ttl_seconds

    def is_expired(self, ttl_seconds: float, now: Optional[float] = None) -> bool:
        """Check if entry has expired.

        Args:
            ttl_seconds: Time to live
            now: Current epoch seconds (defaults to wall clock)

        Returns:
            True if strictly past ``saved_at + ttl_seconds``
        """
        if now is None:
            now = time.time()
        return now > self.expires_at(ttl_seconds)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted index record.

        Returns:
            Dictionary with ``saved``, ``headers``, ``fileId`` and ``url``
        """
        return {
            "saved": format_saved(self.saved_at),
            "headers": dict(self.headers),
            "fileId": self.file_id,
            "url": self.key,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from a persisted index record.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong shape
        """
        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise ValueError(f"Invalid headers for {data.get('url')!r}")

        return cls(
            key=str(data["url"]),
            headers={str(k): str(v) for k, v in headers.items()},
            file_id=str(data["fileId"]),
            saved_at=parse_saved(data["saved"]),
        )

    def __repr__(self) -> str:
        return f"CacheEntry(key={self.key!r}, file_id={self.file_id!r})"


__all__ = ["CacheEntry", "new_file_id", "format_saved", "parse_saved"]
