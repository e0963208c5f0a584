"""Explicit route table with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. Registering the same verb for a path of the
same shape (same static parts, same converters) replaces the earlier route.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from perch.errors import ConfigurationError, MethodNotAllowed, NotFound
from perch.routing.params import CONVERTERS
from perch.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/posts"                 -> [PathSegment("posts")]
        "/posts/{slug}"          -> [..., PathSegment("{slug}", is_param=True, ...)]
        "/archive/{year:int?}"   -> [..., PathSegment(..., param_type="int", optional=True)]
        "/files/{rest:path}"     -> [..., PathSegment(..., param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` syntax, unknown converters,
    a required segment after an optional one, or segments after a catch-all.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = f"Route {path!r} uses <param> syntax; perch expects {{param}}."
            raise ConfigurationError(msg)
        if segments and segments[-1].param_type == "path":
            msg = f"Route {path!r}: a {{name:path}} segment must be last."
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            optional = inner.endswith("?")
            if optional:
                inner = inner[:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Route {path!r}: unknown converter {param_type!r}."
                raise ConfigurationError(msg)
            segment = PathSegment(
                value=part,
                is_param=True,
                param_name=param_name,
                param_type=param_type,
                optional=optional,
            )
        else:
            segment = PathSegment(value=part)
        if segments and segments[-1].optional and not segment.optional:
            msg = f"Route {path!r}: only optional segments may follow an optional one."
            raise ConfigurationError(msg)
        segments.append(segment)
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_edges", "targets")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # One edge per converter, tried in registration order
        self.param_edges: dict[str, _ParamEdge] = {}
        self.catch_all: dict[str, _Target] = {}
        self.targets: dict[str, _Target] = {}


@dataclass(slots=True)
class _ParamEdge:
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(frozen=True, slots=True)
class _Target:
    """A route bound to a terminal, with its own names for the captured values."""

    route: Route
    param_names: tuple[str, ...]


class Router:
    """Explicit route table.

    Routes whose parameters sit at the same position share a trie edge
    only when they use the same converter. ``/archive/{year:int}`` and
    ``/archive/{slug}`` get separate edges, so ``/archive/hello`` still
    reaches the second route. When several edges accept a segment the
    one registered first is tried first.

    Usage::

        router = Router()
        router.add(Route("/posts/{slug}", "PostController", frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/posts/hello")
        match.params  # ("hello",)
    """

    __slots__ = ("_compiled", "_registered", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._registered: dict[Route, None] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        required = next((i for i, s in enumerate(segments) if s.optional), len(segments))
        # One terminal per prefix: "/a/{b?}/{c?}" serves /a, /a/x and /a/x/y
        for end in range(required, len(segments) + 1):
            self._insert(segments[:end], route)
        self._registered[route] = None

    def _insert(self, segments: list[PathSegment], route: Route) -> None:
        names = tuple(s.param_name or "" for s in segments if s.is_param)
        target = _Target(route, names)
        node = self._root
        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                for method in route.methods:
                    node.catch_all[method] = target
                return
            if seg.is_param:
                edge = node.param_edges.get(seg.param_type)
                if edge is None:
                    edge = _ParamEdge(
                        regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
                        node=_TrieNode(),
                    )
                    node.param_edges[seg.param_type] = edge
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        for method in route.methods:
            node.targets[method] = target

    @property
    def routes(self) -> list[Route]:
        """Reachable routes in registration order.

        A route whose every terminal slot was taken over by a later
        registration is no longer listed.
        """
        live: set[Route] = set()
        stack = [self._root]
        while stack:
            node = stack.pop()
            live.update(t.route for t in node.targets.values())
            live.update(t.route for t in node.catch_all.values())
            stack.extend(node.children.values())
            stack.extend(edge.node for edge in node.param_edges.values())
        return [route for route in self._registered if route in live]

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path against the table.

        Candidates are walked in priority order and the first one that
        serves *method* wins. ``HEAD`` falls back to the ``GET`` route for
        the same path.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        allowed: set[str] = set()
        for targets, values in self._candidates(self._root, parts, 0, ()):
            target = targets.get(method)
            if target is None and method == "HEAD":
                target = targets.get("GET")
            if target is not None:
                params = dict(zip(target.param_names, values, strict=True))
                return RouteMatch(route=target.route, path_params=params)
            allowed.update(targets)
        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")

    def _candidates(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        values: tuple[str, ...],
    ) -> Iterator[tuple[dict[str, _Target], tuple[str, ...]]]:
        """Yield matching terminals; static beats param beats catch-all."""
        if index == len(parts):
            if node.targets:
                yield node.targets, values
            return

        part = parts[index]

        if part in node.children:
            yield from self._candidates(node.children[part], parts, index + 1, values)

        for edge in node.param_edges.values():
            if edge.regex.match(part):
                yield from self._candidates(edge.node, parts, index + 1, (*values, part))

        if node.catch_all:
            yield node.catch_all, (*values, "/".join(parts[index:]))
