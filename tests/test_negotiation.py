"""Tests for perch.server.negotiation — return value to Response."""

import pytest

from perch.http.response import Redirect, Response
from perch.server.negotiation import negotiate


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        response = Response("x", status=418)
        assert negotiate(response) is response

    def test_str(self) -> None:
        response = negotiate("<h1>hi</h1>")
        assert response.status == 200
        assert response.text == "<h1>hi</h1>"
        assert response.is_html

    def test_bytes(self) -> None:
        assert negotiate(b"\x00").content_type == "application/octet-stream"

    def test_dict_is_json(self) -> None:
        response = negotiate({"a": 1})
        assert response.content_type == "application/json"
        assert response.text == '{"a": 1}'

    def test_none_is_204(self) -> None:
        assert negotiate(None).status == 204

    def test_redirect(self) -> None:
        response = negotiate(Redirect("/login", status=303))
        assert response.status == 303
        assert response.header("location") == "/login"

    def test_tuple_status(self) -> None:
        assert negotiate(("created", 201)).status == 201

    def test_tuple_status_headers(self) -> None:
        response = negotiate(("x", 202, {"X-Queue": "1"}))
        assert response.status == 202
        assert response.header("X-Queue") == "1"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="cannot"):
            negotiate(object())
