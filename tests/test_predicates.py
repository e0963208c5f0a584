"""Tests for perch.predicates — snapshots and providers."""

from perch.http.headers import Headers
from perch.http.query import QueryParams
from perch.http.request import Request
from perch.predicates import (
    PREDICATE_NAMES,
    PredicateSnapshot,
    QueryPredicates,
    RequestPredicates,
    StaticPredicates,
)


async def _receive() -> dict:
    return {"type": "http.request", "body": b""}


def _request(path: str = "/", headers: dict[str, str] | None = None) -> Request:
    raw = tuple((k.encode(), v.encode()) for k, v in (headers or {}).items())
    return Request(
        method="GET",
        path=path,
        headers=Headers(raw),
        query=QueryParams(),
        path_params={},
        http_version="1.1",
        client=None,
        _receive=_receive,
    )


class TestPredicateSnapshot:
    def test_unknown_name_is_false(self) -> None:
        snapshot = PredicateSnapshot({"home": True})
        assert snapshot["home"] is True
        assert snapshot["nope"] is False
        assert snapshot.get("nope") is False

    def test_non_bool_values_are_false(self) -> None:
        snapshot = PredicateSnapshot({"home": 1, "single": "yes"})  # type: ignore[dict-item]
        assert snapshot["home"] is False
        assert snapshot["single"] is False

    def test_true_names(self) -> None:
        snapshot = PredicateSnapshot({"home": True, "single": False, "page": True})
        assert snapshot.true_names() == ("home", "page")

    def test_copy_is_isolated(self) -> None:
        values = {"home": True}
        snapshot = PredicateSnapshot(values)
        values["home"] = False
        assert snapshot["home"] is True

    def test_mapping_protocol(self) -> None:
        snapshot = PredicateSnapshot({"home": True, "single": False})
        assert len(snapshot) == 2
        assert set(snapshot) == {"home", "single"}
        assert "single" in snapshot
        assert "page" not in snapshot


class TestStandardNames:
    def test_contains_host_tags(self) -> None:
        assert {"home", "front_page", "single", "page", "category", "404"} <= PREDICATE_NAMES


class TestStaticPredicates:
    def test_mapping_and_kwargs(self) -> None:
        provider = StaticPredicates({"home": True}, single=False)
        assert provider.snapshot(_request()) == {"home": True, "single": False}


class TestQueryPredicates:
    def test_checks_receive_request(self) -> None:
        provider = QueryPredicates({"single": lambda r: r.path.startswith("/posts/")})
        assert provider.snapshot(_request("/posts/hello")) == {"single": True}
        assert provider.snapshot(_request("/")) == {"single": False}

    def test_blog_page_derived(self) -> None:
        provider = QueryPredicates({"home": lambda r: True, "front_page": lambda r: True})
        assert provider.snapshot(_request())["blog_page"] is True

        provider = QueryPredicates({"home": lambda r: True, "front_page": lambda r: False})
        assert provider.snapshot(_request())["blog_page"] is False

    def test_explicit_blog_page_wins(self) -> None:
        provider = QueryPredicates(
            {
                "home": lambda r: True,
                "front_page": lambda r: True,
                "blog_page": lambda r: False,
            }
        )
        assert provider.snapshot(_request())["blog_page"] is False


    def test_every_check_runs_once_per_snapshot(self) -> None:
        calls: list[str] = []

        def check(name: str):
            def run(request: Request) -> bool:
                calls.append(name)
                return False

            return run

        provider = QueryPredicates({"home": check("home"), "search": check("search")})
        provider.snapshot(_request())
        assert calls == ["home", "search"]


class TestRequestPredicates:
    def test_reads_header(self) -> None:
        request = _request(headers={"X-Page-State": "home, front_page"})
        assert RequestPredicates().snapshot(request) == {"home": True, "front_page": True}

    def test_missing_header(self) -> None:
        assert RequestPredicates().snapshot(_request()) == {}

    def test_custom_header(self) -> None:
        request = _request(headers={"X-Tags": "single"})
        assert RequestPredicates("x-tags").snapshot(request) == {"single": True}
