"""Host lifecycle stages and the event emitter that drives them.

A content host boots in a fixed sequence of stages. perch models that
sequence explicitly instead of hanging callbacks off host hooks: the
setup stages run once, in order, when the server starts; the
``TEMPLATE_REDIRECT`` stage is the per-request dispatch point and is the
only stage the routing engine takes part in.

Usage::

    @app.on(Stage.INIT)
    def register_taxonomies():
        ...

    @app.on(Stage.TEMPLATE_REDIRECT)
    async def before_routing():
        ...
"""

import logging
from collections.abc import Callable
from enum import Enum

from perch._internal.invoke import invoke
from perch._internal.types import Listener

logger = logging.getLogger("perch.lifecycle")


class Stage(Enum):
    """Lifecycle stages in the order the host reaches them."""

    MUPLUGINS_LOADED = "muplugins_loaded"
    PLUGINS_LOADED = "plugins_loaded"
    SETUP_THEME = "setup_theme"
    AFTER_SETUP_THEME = "after_setup_theme"
    INIT = "init"
    WP_LOADED = "wp_loaded"
    TEMPLATE_REDIRECT = "template_redirect"


SETUP_STAGES: tuple[Stage, ...] = tuple(s for s in Stage if s is not Stage.TEMPLATE_REDIRECT)
DISPATCH_STAGE = Stage.TEMPLATE_REDIRECT


class EventEmitter:
    """Ordered listeners per stage. Listeners may be sync or async."""

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: dict[Stage, list[Listener]] = {stage: [] for stage in Stage}

    def on(self, stage: Stage | str) -> Callable[[Listener], Listener]:
        """Register a listener for *stage* via decorator."""
        resolved = Stage(stage)

        def decorator(func: Listener) -> Listener:
            self._listeners[resolved].append(func)
            return func

        return decorator

    def listeners(self, stage: Stage | str) -> tuple[Listener, ...]:
        return tuple(self._listeners[Stage(stage)])

    async def emit(self, stage: Stage | str) -> None:
        """Run the listeners for *stage* in registration order.

        Errors propagate to the caller.
        """
        resolved = Stage(stage)
        listeners = self._listeners[resolved]
        if listeners:
            logger.debug("emit %s (%d listeners)", resolved.value, len(listeners))
        for listener in listeners:
            await invoke(listener)

    async def run_setup(self) -> None:
        """Emit every setup stage, in host order."""
        for stage in SETUP_STAGES:
            await self.emit(stage)
