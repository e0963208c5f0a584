"""Perch exception hierarchy.

Shared across the routing engine, controller resolver, App, and handler
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app setup is invalid.

    Unknown HTTP verbs, malformed path patterns, and malformed route
    mappings end up here. Registering after the app has frozen is a
    ``RuntimeError`` instead.
    """


class ResolutionError(PerchError):
    """A controller id does not resolve to a handler type.

    Fatal for the current request. The request handler logs it and
    answers with a 500 (or the ``@app.error(ResolutionError)`` handler).
    """

    def __init__(self, controller_id: str, namespace: str, reason: str = "") -> None:
        self.controller_id = controller_id
        self.namespace = namespace
        self.reason = reason
        target = f"{namespace}.{controller_id}" if namespace else controller_id
        msg = f"Cannot resolve controller {controller_id!r} ({target})"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or controllers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no explicit route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — an explicit route exists for the path but not for this verb.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
