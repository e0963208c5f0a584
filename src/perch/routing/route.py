"""Route data model: explicit routes, conditional routes, and matches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from perch.errors import ConfigurationError


class HTTPMethod(StrEnum):
    """Verbs an explicit route may be registered for."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: str) -> HTTPMethod:
        """Normalize *value* to a member, rejecting anything else."""
        try:
            return cls(value.upper())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            msg = f"Unsupported HTTP method {value!r}. Expected one of: {allowed}."
            raise ConfigurationError(msg) from None


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:    ``/posts``        (is_param=False)
    Param:     ``/{slug}``       (is_param=True, param_name="slug")
    Typed:     ``/{id:int}``     (is_param=True, param_type="int")
    Optional:  ``/{page:int?}``  (is_param=True, optional=True)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Route:
    """An explicit route: verb(s) + path pattern -> controller id."""

    path: str
    controller: str
    methods: frozenset[str]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful explicit match."""

    route: Route
    path_params: dict[str, str]

    @property
    def params(self) -> tuple[str, ...]:
        """Captured values in pattern order, for positional controller args."""
        return tuple(self.path_params.values())


@dataclass(frozen=True, slots=True)
class ConditionalRoute:
    """A conditional route: every predicate must hold for it to match."""

    predicates: tuple[str, ...]
    controller: str

    @property
    def key(self) -> str:
        """Comma-joined predicate names, in registration order."""
        return ",".join(self.predicates)
