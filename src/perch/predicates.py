"""Page-state predicates for conditional routing.

A predicate is a named boolean fact about the current request ("is this
the home page", "is this a single post"). The content host answers those
questions; perch only asks once per request, right before conditional
dispatch, and freezes the answers into a :class:`PredicateSnapshot`.

Providers are plain objects with a ``snapshot(request)`` method, so a
host adapter, a fixed map in tests, or a header set by an upstream proxy
all plug in the same way::

    app.set_predicates(StaticPredicates({"home": True}))
"""

from collections.abc import Callable, Iterator, Mapping
from typing import Protocol

from perch.http.request import Request

# The standard conditional tags a content host is expected to answer.
PREDICATE_NAMES: frozenset[str] = frozenset(
    {
        "home",
        "front_page",
        "blog_page",
        "admin",
        "single",
        "page",
        "page_template",
        "category",
        "tag",
        "tax",
        "archive",
        "search",
        "singular",
        "404",
    }
)

PAGE_STATE_HEADER = "x-page-state"


class PredicateSnapshot(Mapping[str, bool]):
    """Immutable predicate values for one request.

    Looking up a name the provider never answered yields ``False``
    instead of raising, so conditional matching stays total.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, bool] | None = None) -> None:
        self._values: dict[str, bool] = {
            name: value is True for name, value in (values or {}).items()
        }

    def __getitem__(self, name: str) -> bool:
        return self._values.get(name, False)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PredicateSnapshot({self._values!r})"

    def true_names(self) -> tuple[str, ...]:
        """Names that hold for this request, in provider order."""
        return tuple(name for name, value in self._values.items() if value)


class PredicateProvider(Protocol):
    """Anything that can answer the page-state questions for a request."""

    def snapshot(self, request: Request) -> Mapping[str, bool]: ...


class StaticPredicates:
    """Provider that returns the same fixed values for every request."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, bool] | None = None, **flags: bool) -> None:
        self._values = {**(values or {}), **flags}

    def snapshot(self, request: Request) -> Mapping[str, bool]:
        return self._values


class QueryPredicates:
    """Provider built from one check callable per predicate name.

    Each check receives the request and returns a bool. When the host
    answers ``home`` and ``front_page`` but not ``blog_page``, the latter
    is derived as their conjunction::

        predicates = QueryPredicates({
            "home": lambda r: r.path == "/",
            "single": lambda r: r.path.startswith("/posts/"),
        })
    """

    __slots__ = ("_checks",)

    def __init__(self, checks: Mapping[str, Callable[[Request], bool]]) -> None:
        self._checks = dict(checks)

    def snapshot(self, request: Request) -> Mapping[str, bool]:
        values = {name: bool(check(request)) for name, check in self._checks.items()}
        if "blog_page" not in values and "home" in values and "front_page" in values:
            values["blog_page"] = values["home"] and values["front_page"]
        return values


class RequestPredicates:
    """Provider that reads page state handed in by an upstream host.

    The host (or a proxy in front of perch) lists the predicates that
    hold as a comma-separated header::

        X-Page-State: home,front_page
    """

    __slots__ = ("_header",)

    def __init__(self, header: str = PAGE_STATE_HEADER) -> None:
        self._header = header

    def snapshot(self, request: Request) -> Mapping[str, bool]:
        raw = request.headers.get(self._header) or ""
        return {name.strip(): True for name in raw.split(",") if name.strip()}
