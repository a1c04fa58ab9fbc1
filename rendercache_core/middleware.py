"""RenderCache Middleware - WSGI Request Pipeline Integration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from email.utils import formatdate
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, quote

from rendercache_core.cache.cache import CachedResponse, RenderCache

logger = logging.getLogger(__name__)

Headers = List[Tuple[str, str]]
StartResponse = Callable[..., Any]
WSGIApp = Callable[[Dict[str, Any], StartResponse], Iterable[bytes]]

# Recomputed from the stored body on every response.
_DROPPED_HEADERS = {"content-length"}


def request_url(environ: Dict[str, Any]) -> str:
    """Build the cache key source: raw path plus query string.

    Prefers the undecoded request URI when the server passes one on,
    otherwise re-quotes ``SCRIPT_NAME + PATH_INFO`` so an encoded ``?``
    or ``/`` in the path never collides with a real separator.
    """
    raw = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw:
        return raw

    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    url = quote(path, safe="/;=,", encoding="latin1") or "/"
    query = environ.get("QUERY_STRING", "")
    if query:
        url += "?" + query
    return url


def bypass_requested(environ: Dict[str, Any], param: str) -> bool:
    """Check whether the request carries a non-empty bypass parameter."""
    values = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True).get(param, [])
    return any(values)


def cached_response_headers(hit: CachedResponse, header_name: str, body: bytes) -> Headers:
    """Build response headers for a cache hit.

    Args:
        hit: Cached response
        header_name: Header marking the response as served from cache
        body: Cached body

    Returns:
        WSGI header list
    """
    headers = [
        (name, value)
        for name, value in hit.headers.items()
        if name.lower() not in _DROPPED_HEADERS and name.lower() != header_name.lower()
    ]
    headers.append(("Content-Length", str(len(body))))
    headers.append((header_name, formatdate(hit.saved_at, usegmt=True)))
    return headers


class CacheMiddleware:
    """Serve cached renders in front of a WSGI application.

    On a hit the stored headers and body are returned without calling
    the wrapped app. On a miss the app runs, its body is buffered, and
    a ``200`` response is stored. Cache problems never fail a request.

    Example:
        cache = RenderCache.open(CacheConfig(directory="/var/cache/render"))
        app = CacheMiddleware(render_app, cache)
    """

    def __init__(self, app: WSGIApp, cache: RenderCache):
        """Initialize middleware.

        Args:
            app: Wrapped WSGI application
            cache: Cache service shared by all requests
        """
        self.app = app
        self.cache = cache

    def __call__(self, environ: Dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        if environ.get("REQUEST_METHOD", "GET").upper() != "GET":
            return self.app(environ, start_response)

        url = request_url(environ)
        bypass = bypass_requested(environ, self.cache.config.bypass_param)

        hit = self.cache.fetch(url, bypass=bypass)
        if hit is not None:
            cached, body = hit
            start_response(
                "200 OK",
                cached_response_headers(cached, self.cache.config.cached_header, body),
            )
            return [body]

        return self._render(environ, start_response, url)

    def _render(
        self,
        environ: Dict[str, Any],
        start_response: StartResponse,
        url: str,
    ) -> Iterable[bytes]:
        captured: Dict[str, Any] = {}

        def capture(status: str, headers: Headers, exc_info: Optional[Any] = None):
            captured["status"] = status
            captured["headers"] = headers
            return start_response(status, headers, exc_info)

        result = self.app(environ, capture)
        try:
            body = b"".join(result)
        finally:
            close = getattr(result, "close", None)
            if close is not None:
                close()

        if captured.get("status", "").startswith("200"):
            headers = {
                name: value
                for name, value in captured["headers"]
                if name.lower() not in _DROPPED_HEADERS
            }
            self.cache.store(url, headers, body)
        else:
            logger.debug(f"Not caching {url!r}: {captured.get('status')}")

        return [body]


__all__ = ["CacheMiddleware", "cached_response_headers", "request_url", "bypass_requested"]
