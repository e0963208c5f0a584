"""Tests for perch.http.request."""

from typing import Any

import pytest

from perch.http.request import Request


def _receiver(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict[str, Any]:
        return messages.pop(0)

    return receive


def _scope(**overrides: Any) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "type": "http",
        "method": "get",
        "path": "/posts/hello",
        "query_string": b"preview=true",
        "headers": [(b"x-page-state", b"single")],
        "client": ["127.0.0.1", 5000],
    }
    scope.update(overrides)
    return scope


class TestFromAsgi:
    def test_fields(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        assert request.method == "GET"
        assert request.path == "/posts/hello"
        assert request.query["preview"] == "true"
        assert request.headers["X-Page-State"] == "single"
        assert request.client == ("127.0.0.1", 5000)
        assert request.http_version == "1.1"
        assert request.path_params == {}

    def test_url(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        assert request.url == "/posts/hello?preview=true"
        bare = Request.from_asgi(_scope(query_string=b""), _receiver(b""))
        assert bare.url == "/posts/hello"

    def test_with_path_params_copies(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        routed = request.with_path_params({"slug": "hello"})
        assert routed.path_params == {"slug": "hello"}
        assert request.path_params == {}

    def test_frozen(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        with pytest.raises(AttributeError):
            request.path = "/other"  # type: ignore[misc]


class TestBody:
    async def test_chunked_body_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b"hel", b"lo"))
        assert await request.body() == b"hello"
        assert await request.text() == "hello"

    async def test_json(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b'{"title": "Hi"}'))
        assert await request.json() == {"title": "Hi"}
