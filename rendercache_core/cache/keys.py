"""RenderCache Keys - Cache Key Normalization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import re
from typing import Pattern

DEFAULT_BYPASS_PARAM = "refreshCache"


@functools.lru_cache(maxsize=16)
def _bypass_pattern(param: str) -> Pattern[str]:
    return re.compile(rf"&?{re.escape(param)}=(?:true|false)&?", re.IGNORECASE)


def _rejoin(match: "re.Match[str]") -> str:
    # Keep one separator when the parameter sat between two others.
    text = match.group(0)
    return "&" if text.startswith("&") and text.endswith("&") else ""


def normalize_key(url: str, param: str = DEFAULT_BYPASS_PARAM) -> str:
    """Normalize a request URL into a cache key.

    Removes the first ``refreshCache=true|false`` parameter (with an
    adjoining ``&`` on either side) and then a single trailing ``?``.
    A parameter sitting between two others leaves one ``&`` behind.
    Lookup and store must both go through this function so the same
    logical request always maps to the same key.

    Args:
        url: Request URL including the query string
        param: Name of the bypass-control parameter

    Returns:
        Normalized cache key

    Example:
        >>> normalize_key("/page?refreshCache=true")
        '/page'
        >>> normalize_key("/page?a=1&refreshCache=false")
        '/page?a=1'
    """
    key = _bypass_pattern(param).sub(_rejoin, url, count=1)
    if key.endswith("?"):
        key = key[:-1]
    return key


__all__ = ["normalize_key", "DEFAULT_BYPASS_PARAM"]
