"""Tests for the WSGI cache middleware.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from wsgiref.util import setup_testing_defaults

import pytest

from rendercache_core.cache.cache import CacheConfig, RenderCache
from rendercache_core.middleware import CacheMiddleware, bypass_requested, request_url


class RenderApp:
    """WSGI app that counts renders."""

    def __init__(self, status="200 OK", body=b"<html>rendered</html>"):
        self.status = status
        self.body = body
        self.calls = 0

    def __call__(self, environ, start_response):
        self.calls += 1
        start_response(
            self.status,
            [("Content-Type", "text/html"), ("Content-Length", str(len(self.body)))],
        )
        return [self.body]


def make_environ(path="/", query="", method="GET"):
    environ = {"PATH_INFO": path, "QUERY_STRING": query, "REQUEST_METHOD": method}
    setup_testing_defaults(environ)
    return environ


def call(app, environ):
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


@pytest.fixture()
def cache(tmp_path):
    return RenderCache.open(CacheConfig(directory=str(tmp_path / "cache")))


class TestRequestHelpers:
    """Tests for environ helpers."""

    def test_request_url(self):
        """Test key includes path and query."""
        assert request_url(make_environ("/page", "a=1")) == "/page?a=1"
        assert request_url(make_environ("/page")) == "/page"

    def test_request_url_requotes_decoded_path(self):
        """Test encoded separators in the path stay distinct from real ones."""
        assert request_url(make_environ("/a?x=1")) == "/a%3Fx=1"
        assert request_url(make_environ("/a b")) == "/a%20b"

    def test_request_url_prefers_raw_uri(self):
        """Test the server's undecoded URI is used when present."""
        environ = make_environ("/a/b", "x=1")
        environ["RAW_URI"] = "/a%2Fb?x=1"
        assert request_url(environ) == "/a%2Fb?x=1"

        environ = make_environ("/a/b", "x=1")
        environ["REQUEST_URI"] = "/a%2Fb?x=1"
        assert request_url(environ) == "/a%2Fb?x=1"

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("refreshCache=true", True),
            ("a=1&refreshCache=false", True),
            ("refreshCache=", False),
            ("a=1", False),
        ],
    )
    def test_bypass_requested(self, query, expected):
        """Test bypass flag detection."""
        assert bypass_requested(make_environ("/", query), "refreshCache") is expected


class TestCacheMiddleware:
    """Tests for CacheMiddleware."""

    def test_miss_then_hit(self, cache):
        """Test second request is served from cache."""
        render = RenderApp()
        app = CacheMiddleware(render, cache)

        status, headers, body = call(app, make_environ("/page", "a=1"))
        assert status == "200 OK"
        assert body == b"<html>rendered</html>"
        assert "x-rendercache-cached" not in headers

        status, headers, body = call(app, make_environ("/page", "a=1"))
        assert status == "200 OK"
        assert body == b"<html>rendered</html>"
        assert headers["Content-Type"] == "text/html"
        assert headers["Content-Length"] == str(len(body))
        assert headers["x-rendercache-cached"].endswith("GMT")
        assert render.calls == 1

    def test_encoded_path_not_served_for_query(self, cache):
        """Test /a%3Fx=1 and /a?x=1 are cached separately."""
        def echo(environ, start_response):
            body = f"path={environ['PATH_INFO']} q={environ['QUERY_STRING']}".encode()
            start_response("200 OK", [("Content-Type", "text/plain")])
            return [body]

        app = CacheMiddleware(echo, cache)

        _, _, first = call(app, make_environ("/a?x=1", ""))
        _, headers, second = call(app, make_environ("/a", "x=1"))

        assert first == b"path=/a?x=1 q="
        assert second == b"path=/a q=x=1"
        assert "x-rendercache-cached" not in headers
        assert len(cache) == 2

    def test_bypass_renders_again(self, cache):
        """Test refreshCache forces a render and refreshes the entry."""
        render = RenderApp()
        app = CacheMiddleware(render, cache)

        call(app, make_environ("/page"))
        call(app, make_environ("/page", "refreshCache=true"))

        assert render.calls == 2
        assert cache.keys() == ["/page"]

        call(app, make_environ("/page"))
        assert render.calls == 2

    def test_error_response_not_cached(self, cache):
        """Test only 200 responses are stored."""
        render = RenderApp(status="500 Internal Server Error", body=b"boom")
        app = CacheMiddleware(render, cache)

        call(app, make_environ("/page"))
        status, _, _ = call(app, make_environ("/page"))

        assert status.startswith("500")
        assert render.calls == 2
        assert len(cache) == 0

    def test_non_get_passes_through(self, cache):
        """Test non-GET requests skip the cache."""
        render = RenderApp()
        app = CacheMiddleware(render, cache)

        call(app, make_environ("/page", method="POST"))
        call(app, make_environ("/page", method="POST"))

        assert render.calls == 2
        assert len(cache) == 0

    def test_missing_blob_falls_back_to_render(self, cache):
        """Test unreadable content renders instead of failing."""
        render = RenderApp()
        app = CacheMiddleware(render, cache)

        call(app, make_environ("/page"))
        for entry in cache.entries():
            cache.content.path_for(entry.file_id).unlink()

        status, _, body = call(app, make_environ("/page"))

        assert status == "200 OK"
        assert body == b"<html>rendered</html>"
        assert render.calls == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
