"""Tests for perch.server.sender response emission rules."""

import pytest

from perch.http.response import Response
from perch.server.sender import send_response


async def _send_all(response: Response, method: str = "GET") -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send, method=method)
    return messages


class TestSendResponse:
    async def test_start_then_body(self) -> None:
        messages = await _send_all(Response("<p>hi</p>").with_header("X-Routed", "yes"))

        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-type"] == b"text/html; charset=utf-8"
        assert headers[b"x-routed"] == b"yes"
        assert headers[b"content-length"] == b"9"
        assert messages[1] == {"type": "http.response.body", "body": b"<p>hi</p>"}

    @pytest.mark.parametrize("status", [204, 304])
    async def test_no_body_statuses(self, status: int) -> None:
        # A body attached by mistake is still dropped
        messages = await _send_all(Response("unexpected-body").with_status(status))
        assert dict(messages[0]["headers"])[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_head_drops_body(self) -> None:
        messages = await _send_all(Response("home"), method="HEAD")
        assert messages[0]["status"] == 200
        assert messages[1]["body"] == b""
