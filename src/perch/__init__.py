"""Perch — explicit and conditional request routing for content sites.

Requests are matched against explicit routes (verb + path) first. When
none matches, perch asks the host which page-state predicates hold
("home", "single", "category", ...) and dispatches to the first
conditional route whose predicates all hold.

Basic usage::

    from perch import App, StaticPredicates

    app = App(predicates=StaticPredicates(home=True))

    @app.controller()
    class HomeController:
        def handle(self, request, params):
            return "Hello from the home page"

    app.get("/feed/{format?}", "FeedController")
    app.when("home", "HomeController")
    app.when([], "DefaultController")
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "ControllerResolver",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "PerchError",
    "QueryPredicates",
    "Redirect",
    "Request",
    "RequestPredicates",
    "ResolutionError",
    "Response",
    "RoutingEngine",
    "Stage",
    "StaticPredicates",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "RoutingEngine":
        from perch.engine import RoutingEngine

        return RoutingEngine

    if name in ("Controller", "ControllerResolver"):
        from perch import controllers as _controllers

        return getattr(_controllers, name)

    if name in ("QueryPredicates", "RequestPredicates", "StaticPredicates"):
        from perch import predicates as _predicates

        return getattr(_predicates, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "Stage":
        from perch.lifecycle import Stage

        return Stage

    if name == "get_request":
        from perch.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PerchError",
        "ResolutionError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
