"""Controller resolution and invocation.

Routes name their controller by string id. The resolver turns an id into
a class, either from its explicit registry or by importing it from the
configured namespace::

    resolver = ControllerResolver("blog.controllers")
    resolver.resolve("HomeController")        # blog.controllers.HomeController
    resolver.resolve("admin.UsersController")  # blog.controllers.admin.UsersController

Controllers are constructed with no arguments and then asked to
``handle(request, params)``. ``params`` holds the values captured by an
explicit route's path pattern, in pattern order; conditional routes
always pass an empty tuple.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from perch._internal.invoke import invoke
from perch.errors import ResolutionError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.routing")


@runtime_checkable
class Controller(Protocol):
    """Protocol for perch controllers.

    ``handle`` may be ``def`` or ``async def`` and may return anything
    :func:`~perch.server.negotiation.negotiate` understands::

        class PostController:
            async def handle(self, request: Request, params: tuple[str, ...]):
                (slug,) = params
                return f"<h1>{slug}</h1>"
    """

    def handle(self, request: Request, params: tuple[str, ...]) -> Any: ...


class ControllerResolver:
    """Maps controller ids to controller classes.

    Explicitly registered classes are consulted first; anything else is
    imported from ``namespace``. Successful lookups are cached.
    """

    __slots__ = ("_cache", "_registry", "namespace")

    def __init__(self, namespace: str = "") -> None:
        self.namespace = namespace.strip(".")
        self._registry: dict[str, type] = {}
        self._cache: dict[str, type] = {}

    def set_namespace(self, namespace: str) -> None:
        """Change the import prefix. Clears cached imports."""
        self.namespace = namespace.strip(".")
        self._cache.clear()

    def register(self, controller_id: str, cls: type) -> None:
        """Bind *controller_id* to *cls* without going through imports."""
        _check_controller(controller_id, cls, self.namespace)
        self._registry[controller_id] = cls

    def controller(self, controller_id: str | None = None) -> Callable[[type], type]:
        """Decorator form of :meth:`register`; defaults to the class name."""

        def decorator(cls: type) -> type:
            self.register(controller_id or cls.__name__, cls)
            return cls

        return decorator

    @property
    def registered(self) -> dict[str, type]:
        return dict(self._registry)

    def resolve(self, controller_id: str) -> type:
        """Return the class for *controller_id*.

        Raises ``ResolutionError`` if the id cannot be imported or does
        not name a controller class.
        """
        if controller_id in self._registry:
            return self._registry[controller_id]
        if controller_id in self._cache:
            return self._cache[controller_id]

        module_part, _, attr = controller_id.rpartition(".")
        module_path = ".".join(p for p in (self.namespace, module_part) if p)
        if not attr or not module_path:
            raise ResolutionError(
                controller_id, self.namespace, "no controller namespace configured"
            )

        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise ResolutionError(controller_id, self.namespace, str(exc)) from exc

        cls = getattr(module, attr, None)
        if cls is None:
            raise ResolutionError(
                controller_id, self.namespace, f"module {module_path!r} has no attribute {attr!r}"
            )
        _check_controller(controller_id, cls, self.namespace)
        self._cache[controller_id] = cls
        return cls

    async def invoke(
        self,
        controller_id: str,
        request: Request,
        params: tuple[str, ...] = (),
    ) -> Response:
        """Resolve, construct, and run a controller; negotiate its result."""
        cls = self.resolve(controller_id)
        instance = cls()
        logger.debug("invoking %s with params %r", controller_id, params)
        result = await invoke(instance.handle, request, params)
        return negotiate(result)


def _check_controller(controller_id: str, cls: Any, namespace: str) -> None:
    if not isinstance(cls, type):
        raise ResolutionError(controller_id, namespace, f"{cls!r} is not a class")
    if not callable(getattr(cls, "handle", None)):
        raise ResolutionError(controller_id, namespace, f"{cls.__name__} has no handle() method")
