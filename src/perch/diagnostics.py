"""Per-request routing diagnostics.

A small line buffer the routing engine writes to while it tries routes.
Lines are kept only when logging is enabled and the configured level is
at or below ``DEBUG``. The request handler flushes the buffer once, at
the end of the request; nothing is retained across requests.
"""

import logging

logger = logging.getLogger("perch.routing")

DIAGNOSTICS_THRESHOLD = logging.DEBUG


def parse_level(level: str | int) -> int:
    """Map ``"debug"`` / ``"INFO"`` / ``10`` style levels to an int."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


class DiagnosticsLog:
    """Append-only line buffer for one request."""

    __slots__ = ("_lines", "enabled", "level")

    def __init__(self, *, enabled: bool = False, level: str | int = logging.INFO) -> None:
        self.enabled = enabled
        self.level = parse_level(level)
        self._lines: list[str] = []

    @property
    def active(self) -> bool:
        return self.enabled and self.level <= DIAGNOSTICS_THRESHOLD

    def write(self, line: str) -> None:
        if not self.active:
            return
        self._lines.append(line)
        logger.debug(line)

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def flush(self) -> str:
        """Return the buffered lines joined by newlines and clear the buffer."""
        text = "\n".join(self._lines)
        self._lines.clear()
        return text
