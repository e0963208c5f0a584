"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Lifecycle listener: zero-argument, sync or async
Listener: TypeAlias = Callable[[], Any]
