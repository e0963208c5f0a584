"""Tests for perch.http.headers."""

from perch.http.headers import Headers


def _headers(*pairs: tuple[str, str]) -> Headers:
    return Headers(tuple((k.encode(), v.encode()) for k, v in pairs))


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = _headers(("Content-Type", "text/html"))
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-Type" in headers

    def test_first_value_wins(self) -> None:
        headers = _headers(("Accept", "text/html"), ("accept", "application/json"))
        assert headers["accept"] == "text/html"
        assert headers.get_list("Accept") == ["text/html", "application/json"]

    def test_missing(self) -> None:
        headers = _headers()
        assert headers.get("x-page-state") is None
        assert headers.get_list("x-page-state") == []
        assert len(headers) == 0

    def test_raw_preserved(self) -> None:
        raw = ((b"X-Page-State", b"home"),)
        assert Headers(raw).raw is raw
