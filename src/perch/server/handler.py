"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI HTTP messages. Builds a typed
Request, runs the middleware chain around the routing engine, maps
errors to responses, flushes the routing diagnostics, and sends the
Response back through ASGI send().
"""

from collections.abc import Callable
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.context import diagnostics_var, request_var
from perch.diagnostics import DiagnosticsLog
from perch.engine import RoutingEngine
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.lifecycle import DISPATCH_STAGE, EventEmitter
from perch.middleware.protocol import Next
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    engine: RoutingEngine,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    events: EventEmitter,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    log = DiagnosticsLog(enabled=config.log_enabled, level=config.log_level)

    token: Token[Request] = request_var.set(request)
    log_token: Token[DiagnosticsLog] = diagnostics_var.set(log)

    try:
        # Innermost handler: the host's dispatch stage, then routing
        async def dispatch(req: Request) -> Response:
            await events.emit(DISPATCH_STAGE)
            return await engine.dispatch(req)

        handler: Next = dispatch
        for mw in reversed(middleware):

            async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, config.debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, config.debug)
    finally:
        diagnostics = log.flush()
        diagnostics_var.reset(log_token)
        request_var.reset(token)

    if config.debug and diagnostics and response.is_html:
        response = _append_diagnostics(response, diagnostics)

    await send_response(response, send, method=request.method)


def _append_diagnostics(response: Response, diagnostics: str) -> Response:
    """Append the routing trace to an HTML body as a comment."""
    safe = diagnostics.replace("--", "- -")
    return response.with_body(f"{response.text}\n<!-- perch routing\n{safe}\n-->\n")
