"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, controller_namespace="blog.controllers")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1

    # Controllers: dotted module prefix that controller ids resolve under
    controller_namespace: str = "app.controllers"

    # Routing diagnostics: lines are recorded only when enabled and the
    # level is at or below "debug"
    log_enabled: bool = True
    log_level: str = "debug"

    # Conditional dispatch
    conditional_methods: tuple[str, ...] = ("GET", "HEAD")
    fallback_body: str = "no routes found."
    fallback_status: int = 404
