"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: the current ``Request`` for this task/thread.
- ``diagnostics_var``: the routing ``DiagnosticsLog`` for this request.

Both are set by the request handler before dispatch and reset after it.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threads. No locks needed.
"""

from contextvars import ContextVar

from perch.diagnostics import DiagnosticsLog
from perch.http.request import Request

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The current request. Set by the ASGI handler before dispatch."""

diagnostics_var: ContextVar[DiagnosticsLog] = ContextVar("perch_diagnostics")
"""The current request's routing diagnostics buffer."""

_DISABLED = DiagnosticsLog(enabled=False)


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_diagnostics() -> DiagnosticsLog:
    """Return the current diagnostics log, or a disabled one outside a request."""
    return diagnostics_var.get(_DISABLED)
