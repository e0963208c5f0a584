"""Ordered conditional route table.

Conditional routes map a set of predicate names to a controller. At
dispatch time the table is walked in registration order and the first
entry whose predicates *all* hold wins. Earlier registrations beat later
ones even when a later entry is more specific, so register the specific
cases first and any catch-all last::

    table = ConditionalRouteTable()
    table.add(["single", "category"], "CategoryPostController")
    table.add("single", "PostController")
    table.add([], "DefaultController")     # empty set: always matches

Entries are keyed by the comma-joined predicate names. Registering the
same key again replaces the controller but keeps the entry's original
position.
"""

from collections.abc import Iterator, Mapping, Sequence

from perch.diagnostics import DiagnosticsLog
from perch.routing.route import ConditionalRoute


def normalize_predicates(predicates: str | Sequence[str]) -> tuple[str, ...]:
    """Turn ``"single, category"`` or ``["single", "category"]`` into a tuple.

    Caller order is preserved. Blank names are dropped, so ``""`` and
    ``[]`` both give the empty set.
    """
    names = predicates.split(",") if isinstance(predicates, str) else predicates
    return tuple(name.strip() for name in names if name.strip())


def full_match(predicates: Sequence[str], snapshot: Mapping[str, bool]) -> bool:
    """True when every name in *predicates* is ``True`` in *snapshot*.

    Names missing from the snapshot count as false. An empty
    *predicates* is vacuously a full match.
    """
    matches = sum(1 for name in predicates if snapshot.get(name, False) is True)
    return matches == len(predicates)


class ConditionalRouteTable:
    """Conditional routes in priority order."""

    __slots__ = ("_compiled", "_entries")

    def __init__(self) -> None:
        self._entries: dict[str, ConditionalRoute] = {}
        self._compiled = False

    def add(self, predicates: str | Sequence[str], controller: str) -> ConditionalRoute:
        """Register *controller* for *predicates*. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add conditional routes after compilation."
            raise RuntimeError(msg)
        entry = ConditionalRoute(normalize_predicates(predicates), controller)
        self._entries[entry.key] = entry
        return entry

    def clear(self) -> None:
        """Drop every entry. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot clear conditional routes after compilation."
            raise RuntimeError(msg)
        self._entries.clear()

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> list[ConditionalRoute]:
        """Entries in priority order."""
        return list(self._entries.values())

    def __iter__(self) -> Iterator[ConditionalRoute]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def match(
        self,
        snapshot: Mapping[str, bool],
        log: DiagnosticsLog | None = None,
    ) -> ConditionalRoute | None:
        """Return the first fully matching entry, or ``None``."""
        for entry in self._entries.values():
            if log is not None:
                log.write(f"checking conditional match for: {entry.key}")
            if full_match(entry.predicates, snapshot):
                if log is not None:
                    log.write(f"matched: {entry.controller}")
                return entry
            if log is not None:
                log.write("no match found.")
        return None
