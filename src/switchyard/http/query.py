"""Immutable query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Parsed query string.

    ``__getitem__`` returns the first value for a key,
    ``get_list`` returns all of them. ``raw`` keeps the undecoded string
    so ``Request.url`` can rebuild the request target.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: str = "") -> None:
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_data", parse_qs(query_string, keep_blank_values=True))

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))

    @property
    def raw(self) -> str:
        return self._raw
