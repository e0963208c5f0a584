"""Perch application class.

Mutable during setup (routes, controllers, middleware, lifecycle
listeners). Frozen at runtime when app.run() or __call__() is first
invoked.
"""

import inspect
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.types import ErrorHandler, Listener
from perch.config import AppConfig
from perch.controllers import ControllerResolver
from perch.engine import RoutingEngine
from perch.lifecycle import EventEmitter, Stage
from perch.middleware.protocol import Middleware
from perch.predicates import PredicateProvider
from perch.routing.route import ConditionalRoute, Route
from perch.server.handler import handle_request


class App:
    """The perch application.

    Wires the routing engine, controller resolver, and predicate provider
    together explicitly; there is no global instance::

        app = App(AppConfig(controller_namespace="blog.controllers"))
        app.set_predicates(QueryPredicates({"home": lambda r: r.path == "/"}))

        app.get("/feed", "FeedController")
        app.when("home", "HomeController")
        app.when([], "DefaultController")

    Thread safety:
        The setup phase is single-threaded (module import time). The
        freeze transition uses a Lock + double-check so exactly one thread
        compiles the route tables, even if several workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_engine",
        "_error_handlers",
        "_events",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        predicates: PredicateProvider | None = None,
        resolver: ControllerResolver | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._engine = RoutingEngine(
            resolver or ControllerResolver(self.config.controller_namespace),
            predicates,
            config=self.config,
        )
        self._events = EventEmitter()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._middleware: tuple[Callable[..., Any], ...] = ()

    @property
    def engine(self) -> RoutingEngine:
        return self._engine

    @property
    def events(self) -> EventEmitter:
        return self._events

    # -- Explicit routes --

    def route(self, path: str, controller: str, *, methods: Sequence[str] = ("GET",)) -> None:
        """Register *controller* for *path* under each of *methods*."""
        self._check_not_frozen()
        for method in methods:
            self._engine.route(method, path, controller)

    def get(self, path: str, controller: str) -> Route:
        self._check_not_frozen()
        return self._engine.get(path, controller)

    def post(self, path: str, controller: str) -> Route:
        self._check_not_frozen()
        return self._engine.post(path, controller)

    def put(self, path: str, controller: str) -> Route:
        self._check_not_frozen()
        return self._engine.put(path, controller)

    def delete(self, path: str, controller: str) -> Route:
        self._check_not_frozen()
        return self._engine.delete(path, controller)

    def patch(self, path: str, controller: str) -> Route:
        self._check_not_frozen()
        return self._engine.patch(path, controller)

    # -- Conditional routes --

    def when(self, predicates: str | Sequence[str], controller: str) -> ConditionalRoute:
        """Register a conditional route. See :meth:`RoutingEngine.when`."""
        self._check_not_frozen()
        return self._engine.when(predicates, controller)

    def load_routes(self, routes: Mapping[str, Any]) -> None:
        """Register explicit and conditional routes from a mapping."""
        self._check_not_frozen()
        self._engine.load_routes(routes)

    # -- Controllers and predicates --

    def controller(self, controller_id: str | None = None) -> Callable[[type], type]:
        """Register a controller class via decorator.

        Usage::

            @app.controller()
            class HomeController:
                def handle(self, request, params):
                    return "home"
        """
        self._check_not_frozen()
        return self._engine.resolver.controller(controller_id)

    def set_controller_namespace(self, namespace: str) -> None:
        self._check_not_frozen()
        self._engine.set_controller_namespace(namespace)

    def set_predicates(self, predicates: PredicateProvider) -> None:
        self._check_not_frozen()
        self._engine.set_predicates(predicates)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle --

    def on(self, stage: Stage | str) -> Callable[[Listener], Listener]:
        """Register a listener for a host lifecycle stage via decorator."""
        self._check_not_frozen()
        return self._events.on(stage)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a startup hook. Runs after the setup stages."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a shutdown hook."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Run the setup stages in host order, then the startup hooks."""
        self._ensure_frozen()
        await self._events.run_setup()
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with pounce."""
        self._ensure_frozen()
        from perch.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            engine=self._engine,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            events=self._events,
            config=self.config,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self._engine.freeze()
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, controllers, and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
