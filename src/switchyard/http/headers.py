"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]``. Names are stored lower-cased; values
keep their original text. Repeated names are preserved in order.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(
            self, "_items", tuple((name.lower(), value) for name, value in items)
        )

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        """Build from ASGI byte pairs (latin-1 per RFC 9110)."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str] | None) -> "Headers":
        return cls((headers or {}).items())

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._items:
            if name == key_lower:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name == key_lower for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower()
        return [value for name, value in self._items if name == key_lower]

    def with_header(self, name: str, value: str) -> "Headers":
        """Return new headers with an extra ``name: value`` pair appended."""
        return Headers((*self._items, (name, value)))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Header pairs encoded for ASGI."""
        return tuple(
            (name.encode("latin-1"), value.encode("latin-1")) for name, value in self._items
        )
