"""App import resolution — resolves ``"module:attribute"`` strings to App instances."""

import importlib

from perch.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a perch App instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``app``.
    If the attribute is a factory function it is called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a perch ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "app")

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)
    return obj


def load_app(import_string: str) -> App:
    """Like :func:`resolve_app`, but prints the error and exits on failure."""
    import sys

    try:
        return resolve_app(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
