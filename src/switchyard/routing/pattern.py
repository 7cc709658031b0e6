"""Route pattern compilation and matching.

Pattern syntax, one element per ``/``-separated segment::

    "/users"            literal, matched exactly (case-sensitive)
    "/users/:id"        named capture, one non-empty segment bound to "id"
    "/users/:"          unnamed capture, one segment, not bound
    "/static/*"         wildcard, zero or more trailing segments
    "/static/*path"     named wildcard, remainder also bound to "path"

Empty segments are ignored, so leading, trailing, and doubled slashes
do not change a pattern. A wildcard is only legal as the last segment.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum

from switchyard.errors import PatternError


class SegmentKind(IntEnum):
    """Segment shapes, ordered by how specific a match they make.

    ``END`` marks a pattern that stops without a wildcard; it outranks
    ``WILDCARD`` so ``/echo/:p`` beats ``/echo/:p/*`` on ``/echo/x``.
    """

    WILDCARD = 0
    END = 1
    CAPTURE = 2
    LITERAL = 3


@dataclass(frozen=True, slots=True)
class Segment:
    """A parsed pattern segment.

    Literal:   ``users``  (kind=LITERAL, value="users")
    Capture:   ``:id``    (kind=CAPTURE, name="id")
    Anonymous: ``:``      (kind=CAPTURE, name=None)
    Wildcard:  ``*rest``  (kind=WILDCARD, name="rest")
    """

    kind: SegmentKind
    value: str = ""
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Captures(Mapping[str, str]):
    """Bindings produced by one successful match.

    Maps capture names to the path segments they matched. ``wildcard``
    holds the remainder consumed by a trailing ``*``, or ``None`` when
    the pattern has no wildcard.
    """

    params: Mapping[str, str] = field(default_factory=dict)
    wildcard: str | None = None

    def __getitem__(self, key: str) -> str:
        return self.params[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)


def split_path(path: str) -> list[str]:
    """Split a request path into its non-empty segments.

    ``"/foo/"`` and ``"/foo"`` both give ``["foo"]``; ``"/"`` gives ``[]``.
    """
    return [part for part in path.split("/") if part]


def parse_segment(part: str) -> Segment:
    if part.startswith(":"):
        return Segment(SegmentKind.CAPTURE, part, part[1:] or None)
    if part.startswith("*"):
        return Segment(SegmentKind.WILDCARD, part, part[1:] or None)
    return Segment(SegmentKind.LITERAL, part)


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """An immutable, compiled route pattern."""

    source: str
    segments: tuple[Segment, ...]

    @property
    def has_wildcard(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is SegmentKind.WILDCARD

    @property
    def specificity(self) -> tuple[int, ...]:
        """Precedence key; higher compares as more specific.

        Built position by position from segment kinds, terminated by
        ``END`` for patterns without a trailing wildcard.
        """
        key = tuple(int(seg.kind) for seg in self.segments)
        if self.has_wildcard:
            return key
        return (*key, int(SegmentKind.END))

    @property
    def shape(self) -> tuple[tuple[SegmentKind, str], ...]:
        """The pattern with capture names erased.

        Two patterns with equal shapes match exactly the same paths.
        """
        return tuple(
            (seg.kind, seg.value if seg.kind is SegmentKind.LITERAL else "")
            for seg in self.segments
        )

    @property
    def names(self) -> tuple[str | None, ...]:
        return tuple(seg.name for seg in self.segments if seg.kind is not SegmentKind.LITERAL)

    def match(self, path: str) -> Captures | None:
        """Match *path* against this pattern.

        Returns the ``Captures`` on success, ``None`` otherwise. Captures
        accept any non-empty segment; parsing them is the handler's job.
        """
        return self.match_parts(split_path(path))

    def match_parts(self, parts: list[str]) -> Captures | None:
        """Match already-split path segments (see ``split_path``)."""
        params: dict[str, str] = {}

        for index, seg in enumerate(self.segments):
            if seg.kind is SegmentKind.WILDCARD:
                remainder = "/".join(parts[index:])
                if seg.name is not None:
                    params[seg.name] = remainder
                return Captures(params, remainder)

            if index >= len(parts):
                return None

            part = parts[index]
            if seg.kind is SegmentKind.LITERAL:
                if part != seg.value:
                    return None
            elif seg.name is not None:
                params[seg.name] = part

        if len(parts) != len(self.segments):
            return None
        return Captures(params)


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a pattern string.

    Raises ``PatternError`` if a wildcard is not the final segment or a
    capture name is bound twice.
    """
    segments = tuple(parse_segment(part) for part in split_path(pattern))

    for seg in segments[:-1]:
        if seg.kind is SegmentKind.WILDCARD:
            raise PatternError(pattern, "a wildcard must be the last segment")

    seen: set[str] = set()
    for seg in segments:
        if seg.name is None:
            continue
        if seg.name in seen:
            raise PatternError(pattern, f"capture {seg.name!r} is bound more than once")
        seen.add(seg.name)

    return CompiledPattern(pattern, segments)
