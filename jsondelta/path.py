"""Path value object locating a node inside a JSON value tree."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import PathSyntaxError

Segment = Union[str, int]

_IDENTIFIER = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')


@dataclass(frozen=True)
class JsonPath:
    """
    Ordered sequence of segments: ``str`` for object keys, ``int`` for array
    indices. The root path has no segments.

    Equality and hashing are structural, so ``JsonPath(("a", 0))`` equals any
    other path built from the same segments.
    """
    segments: tuple = ()

    def __post_init__(self):
        if not isinstance(self.segments, tuple):
            object.__setattr__(self, "segments", tuple(self.segments))

    @classmethod
    def root(cls) -> JsonPath:
        return cls(())

    @classmethod
    def of(cls, *segments: Segment) -> JsonPath:
        return cls(tuple(segments))

    def append(self, segment: Segment) -> JsonPath:
        """Return a new path with ``segment`` appended."""
        return JsonPath(self.segments + (segment,))

    def parent(self) -> Optional[JsonPath]:
        """Return the parent path, or None for the root."""
        if not self.segments:
            return None
        return JsonPath(self.segments[:-1])

    def last_segment(self) -> Optional[Segment]:
        if not self.segments:
            return None
        return self.segments[-1]

    def is_root(self) -> bool:
        return not self.segments

    def is_descendant_of(self, other: JsonPath) -> bool:
        """True if ``other``'s segments are a strict prefix of this path's."""
        n = len(other.segments)
        return len(self.segments) > n and self.segments[:n] == other.segments

    def is_at_or_under(self, other: JsonPath) -> bool:
        return self == other or self.is_descendant_of(other)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return self.to_display_string()

    def to_display_string(self) -> str:
        """
        Render in ``$.key[0].key2`` notation.

        Identifier-like keys use dot notation, integer segments use ``[n]``,
        every other key is quoted as ``['some key']``.
        """
        parts = ["$"]
        for segment in self.segments:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            elif _IDENTIFIER.match(segment):
                parts.append(f".{segment}")
            else:
                escaped = segment.replace("\\", "\\\\").replace("'", "\\'")
                parts.append(f"['{escaped}']")
        return "".join(parts)

    def to_pointer_string(self) -> str:
        """Render as an RFC 6901 JSON Pointer; the root is the empty string."""
        return "".join(
            "/" + str(segment).replace("~", "~0").replace("/", "~1")
            for segment in self.segments
        )

    @classmethod
    def from_pointer_string(cls, pointer: str) -> JsonPath:
        """Parse an RFC 6901 JSON Pointer. All-digit tokens become indices."""
        if pointer == "":
            return cls.root()
        if not pointer.startswith("/"):
            raise PathSyntaxError(pointer, 0, "pointer must start with '/'")

        segments = []
        for token in pointer[1:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            segments.append(int(token) if token.isdigit() else token)
        return cls(tuple(segments))

    @classmethod
    def from_display_string(cls, path: str) -> JsonPath:
        """
        Parse the display form produced by ``to_display_string``.

        Args:
            path: A string such as ``$.items[0]['display name']``. The leading
                ``$`` may be omitted.

        Returns:
            The equivalent JsonPath

        Raises:
            PathSyntaxError: if the string is not a display path
        """
        if path in ("", "$"):
            return cls.root()

        i = 1 if path.startswith("$") else 0
        if i == 0 and path[0] not in ".[":
            # Bare leading key, e.g. "foo.bar"
            path = "." + path

        segments: list = []
        while i < len(path):
            char = path[i]

            if char == ".":
                j = i + 1
                while j < len(path) and path[j] not in ".[":
                    j += 1
                name = path[i + 1:j]
                if not name:
                    raise PathSyntaxError(path, i, "empty key after '.'")
                segments.append(name)
                i = j
            elif char == "[":
                if i + 1 < len(path) and path[i + 1] in "'\"":
                    name, i = _read_quoted(path, i + 1)
                    if i >= len(path) or path[i] != "]":
                        raise PathSyntaxError(path, i, "expected ']'")
                    segments.append(name)
                    i += 1
                else:
                    j = path.find("]", i)
                    if j == -1:
                        raise PathSyntaxError(path, i, "unterminated '['")
                    content = path[i + 1:j]
                    if not content.isdigit():
                        raise PathSyntaxError(path, i, f"invalid index '{content}'")
                    segments.append(int(content))
                    i = j + 1
            else:
                raise PathSyntaxError(path, i, f"unexpected character '{char}'")

        return cls(tuple(segments))


def _read_quoted(path: str, start: int) -> tuple:
    """Read a quoted key starting at the opening quote; return (key, next index)."""
    quote = path[start]
    chars = []
    i = start + 1
    while i < len(path):
        char = path[i]
        if char == "\\" and i + 1 < len(path):
            chars.append(path[i + 1])
            i += 2
            continue
        if char == quote:
            return "".join(chars), i + 1
        chars.append(char)
        i += 1
    raise PathSyntaxError(path, start, "unterminated quoted key")
