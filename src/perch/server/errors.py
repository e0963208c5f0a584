"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures (including controller
ResolutionError) to Response objects, using registered error handlers or
plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result
    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Exact class, then status code, then base classes
    handler = (
        error_handlers.get(type(exc))
        or error_handlers.get(exc.status)
        or _find_handler(exc, error_handlers)
    )
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, status=exc.status, content_type="text/plain; charset=utf-8")
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(exc, error_handlers) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")


def _find_handler(
    exc: Exception,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Callable[..., Any] | None:
    """Most specific handler registered for the exception's class or a base."""
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return None
