"""The routing engine — explicit routes first, conditional routes second.

Dispatch for one request walks this state machine::

    Idle -> ExplicitMatchAttempted
         -> Dispatched(explicit)
         |  ConditionalPhase -> Dispatched(conditional)
         |                   |  Unmatched -> FallbackResponse
    (the request handler then flushes the diagnostics log)

An explicit match always wins: when one exists, the predicate provider
is never consulted. Otherwise, for the methods listed in
``AppConfig.conditional_methods``, the predicate snapshot is taken once
and the conditional table is walked in registration order.

Registration happens during single-threaded setup. ``freeze()`` makes
both tables read-only, after which dispatch needs no locking.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from perch.config import AppConfig
from perch.context import get_diagnostics
from perch.controllers import ControllerResolver
from perch.diagnostics import DiagnosticsLog
from perch.errors import ConfigurationError, HTTPError, ResolutionError
from perch.http.request import Request
from perch.http.response import Response
from perch.predicates import PredicateProvider, PredicateSnapshot, StaticPredicates
from perch.routing.conditional import ConditionalRouteTable
from perch.routing.route import ConditionalRoute, HTTPMethod, Route
from perch.routing.router import Router

logger = logging.getLogger("perch.routing")


class RoutingEngine:
    """Registers routes and dispatches requests to controllers.

    Usage::

        engine = RoutingEngine(ControllerResolver("blog.controllers"), predicates)
        engine.get("/feed", "FeedController")
        engine.when(["single"], "PostController")
        engine.when([], "DefaultController")
        engine.freeze()
        response = await engine.dispatch(request)
    """

    __slots__ = ("_frozen", "config", "conditional", "explicit", "predicates", "resolver")

    def __init__(
        self,
        resolver: ControllerResolver | None = None,
        predicates: PredicateProvider | None = None,
        *,
        config: AppConfig | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.resolver = resolver or ControllerResolver(self.config.controller_namespace)
        self.predicates: PredicateProvider = predicates or StaticPredicates()
        self.explicit = Router()
        self.conditional = ConditionalRouteTable()
        self._frozen = False

    # -- Registration --

    def route(self, method: str | HTTPMethod, path: str, controller: str) -> Route:
        """Register an explicit route for one verb."""
        self._check_not_frozen()
        verb = HTTPMethod.parse(method)
        route = Route(path=path, controller=controller, methods=frozenset({verb.value}))
        self._log(f"adding route: {verb.value}({path}) :: {controller}")
        self.explicit.add(route)
        return route

    register_explicit = route

    def get(self, path: str, controller: str) -> Route:
        return self.route(HTTPMethod.GET, path, controller)

    def post(self, path: str, controller: str) -> Route:
        return self.route(HTTPMethod.POST, path, controller)

    def put(self, path: str, controller: str) -> Route:
        return self.route(HTTPMethod.PUT, path, controller)

    def delete(self, path: str, controller: str) -> Route:
        return self.route(HTTPMethod.DELETE, path, controller)

    def patch(self, path: str, controller: str) -> Route:
        return self.route(HTTPMethod.PATCH, path, controller)

    def when(self, predicates: str | Sequence[str], controller: str) -> ConditionalRoute:
        """Register a conditional route.

        *predicates* is a list of names or a comma-separated string. All
        of them must hold for the route to match. Registration order is
        priority order; an empty set matches every request, so register
        it last.
        """
        self._check_not_frozen()
        entry = self.conditional.add(predicates, controller)
        self._log(f"adding conditional route: [{entry.key}] :: {controller}")
        return entry

    register_conditional = when

    def load_routes(self, routes: Mapping[str, Any]) -> None:
        """Register routes from an in-memory mapping.

        Accepted shape::

            {
                "explicit": {"GET /feed": "FeedController"},
                "conditional": [(["single"], "PostController"), ([], "DefaultController")],
            }

        ``explicit`` may also be a list of ``(verb, path, controller)``
        triples; ``conditional`` may be a ``{"home,front_page": controller}``
        mapping, whose order is kept.
        """
        for verb, path, controller in _explicit_entries(routes.get("explicit") or ()):
            self.route(verb, path, controller)
        conditional = routes.get("conditional") or ()
        items = conditional.items() if isinstance(conditional, Mapping) else conditional
        for predicates, controller in items:
            self.when(predicates, controller)

    def set_controller_namespace(self, namespace: str) -> None:
        self._check_not_frozen()
        self.resolver.set_namespace(namespace)

    def set_predicates(self, predicates: PredicateProvider) -> None:
        self._check_not_frozen()
        self.predicates = predicates

    def freeze(self) -> None:
        """Make both route tables read-only."""
        self.explicit.compile()
        self.conditional.compile()
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def unresolved(self) -> list[tuple[str, ResolutionError]]:
        """Controller ids referenced by any route that fail to resolve."""
        ids = [r.controller for r in self.explicit.routes]
        ids += [r.controller for r in self.conditional]
        failures: list[tuple[str, ResolutionError]] = []
        for controller_id in dict.fromkeys(ids):
            try:
                self.resolver.resolve(controller_id)
            except ResolutionError as exc:
                failures.append((controller_id, exc))
        return failures

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response:
        """Route *request* to a controller and return its response.

        Raises ``HTTPError`` when no explicit route matched and the method
        is not eligible for conditional routing. ``ResolutionError``
        propagates to the request handler.
        """
        log = get_diagnostics()
        try:
            match = self.explicit.match(request.method, request.path)
        except HTTPError:
            if request.method not in self.config.conditional_methods:
                raise
        else:
            log.write(f"explicit route matched: {match.route.path} :: {match.route.controller}")
            return await self.resolver.invoke(
                match.route.controller,
                request.with_path_params(match.path_params),
                match.params,
            )

        log.write("checking conditional routes...")
        response = await self.run_conditional_routes(request, log)
        if response is None:
            return self.fallback_response()
        return response

    async def run_conditional_routes(
        self,
        request: Request,
        log: DiagnosticsLog | None = None,
    ) -> Response | None:
        """Invoke the first fully matching conditional route.

        Returns the controller's response, or ``None`` if no entry
        matched. The predicate provider is asked exactly once.
        """
        snapshot = self.snapshot(request)
        entry = self.conditional.match(snapshot, log or get_diagnostics())
        if entry is None:
            return None
        return await self.resolver.invoke(entry.controller, request, ())

    def snapshot(self, request: Request) -> PredicateSnapshot:
        """Ask the predicate provider about *request* and freeze the answers."""
        return PredicateSnapshot(self.predicates.snapshot(request))

    def fallback_response(self) -> Response:
        return Response(
            body=self.config.fallback_body,
            status=self.config.fallback_status,
            content_type="text/plain; charset=utf-8",
        )

    # -- Internal --

    def _log(self, line: str) -> None:
        logger.debug(line)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot register routes after the app has started serving requests. "
                "Register routes before calling app.run()."
            )
            raise RuntimeError(msg)


def _explicit_entries(explicit: Any) -> Iterable[tuple[str, str, str]]:
    if isinstance(explicit, Mapping):
        for spec, controller in explicit.items():
            verb, _, path = spec.strip().partition(" ")
            if not path:
                msg = f"Explicit route key {spec!r} must look like 'GET /path'."
                raise ConfigurationError(msg)
            yield verb, path.strip(), controller
    else:
        yield from explicit
