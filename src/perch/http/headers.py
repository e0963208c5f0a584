"""Immutable, case-insensitive HTTP headers."""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Case-insensitive view over raw ASGI header pairs.

    ``__getitem__`` returns the first value for a name; ``get_list``
    returns every value in arrival order.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        index: dict[str, list[str]] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(
                value.decode("latin-1")
            )
        self._raw = raw
        self._index = index

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._index.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs as received from the ASGI scope."""
        return self._raw
