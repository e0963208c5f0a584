"""Invoke helpers — call sync or async callables uniformly.

Controllers may implement ``handle`` as ``def`` or ``async def``, and the
same goes for error handlers and lifecycle listeners. This module keeps
the sync/async check in exactly one place.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(controller.handle, request, params)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
