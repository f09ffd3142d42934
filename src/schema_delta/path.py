"""Structured schema paths and their JSON Pointer form.

A schema path is a sequence of segments walked from the root of a schema tree:

  PropertySegment("address")  -> /properties/address
  ItemsSegment()              -> /items

So the path ``address.lines[*]`` is written ``/properties/address/properties/lines/items``.
Property names are escaped per RFC 6901 (``~`` -> ``~0``, ``/`` -> ``~1``).
"""

from dataclasses import dataclass
from typing import Iterable

from schema_delta.errors import InvalidPath

PROPERTIES_TOKEN = "properties"
ITEMS_TOKEN = "items"


# --- Pointer token codec ---


def escape_token(token: str) -> str:
    """Escape one JSON Pointer reference token."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    """Reverse escape_token."""
    return token.replace("~1", "/").replace("~0", "~")


def split_pointer(pointer: str) -> list[str]:
    """Split a JSON Pointer into unescaped reference tokens.

    ``""`` and ``"/"`` both address the document root.
    """
    if pointer in ("", "/"):
        return []
    if not pointer.startswith("/"):
        raise InvalidPath(f'Invalid JSON Pointer (must start with "/"): {pointer!r}')
    tokens = pointer.split("/")[1:]
    for token in tokens:
        # A "~" must be followed by 0 or 1
        stripped = token.replace("~0", "").replace("~1", "")
        if "~" in stripped:
            raise InvalidPath(f"Invalid escape sequence in JSON Pointer: {pointer!r}")
    return [unescape_token(t) for t in tokens]


def join_pointer(tokens: Iterable[str]) -> str:
    """Build a JSON Pointer from unescaped reference tokens."""
    return "".join(f"/{escape_token(str(t))}" for t in tokens)


# --- Segments ---


@dataclass(frozen=True)
class PropertySegment:
    """Named object property."""

    name: str

    def is_items(self) -> bool:
        return False

    def tokens(self) -> tuple[str, ...]:
        return (PROPERTIES_TOKEN, self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ItemsSegment:
    """The item schema of an array."""

    def is_items(self) -> bool:
        return True

    def tokens(self) -> tuple[str, ...]:
        return (ITEMS_TOKEN,)

    def __str__(self) -> str:
        return "[*]"


PathSegment = PropertySegment | ItemsSegment

ITEMS = ItemsSegment()


# --- Path ---


@dataclass(frozen=True)
class Path:
    """Immutable sequence of path segments from the tree root."""

    segments: tuple[PathSegment, ...] = ()

    @classmethod
    def of(cls, *segments: PathSegment | str) -> "Path":
        """Build a path; plain strings become property segments."""
        return cls(
            tuple(PropertySegment(s) if isinstance(s, str) else s for s in segments)
        )

    def length(self) -> int:
        return len(self.segments)

    def is_empty(self) -> bool:
        return not self.segments

    def last(self) -> PathSegment | None:
        return self.segments[-1] if self.segments else None

    def parent(self) -> "Path":
        """Parent path; the root is its own parent."""
        if len(self.segments) <= 1:
            return EMPTY_PATH
        return Path(self.segments[:-1])

    def child(self, name: str) -> "Path":
        return Path(self.segments + (PropertySegment(name),))

    def child_items(self) -> "Path":
        return Path(self.segments + (ITEMS,))

    def join(self, segment: PathSegment) -> "Path":
        return Path(self.segments + (segment,))

    def is_child_of(self, other: "Path") -> bool:
        """True if this path lies strictly below ``other``."""
        if len(self.segments) <= len(other.segments):
            return False
        return self.segments[: len(other.segments)] == other.segments

    def items_depth(self) -> int:
        """Number of array boundaries the path crosses."""
        return sum(1 for seg in self.segments if seg.is_items())

    def as_pointer(self) -> str:
        tokens: list[str] = []
        for seg in self.segments:
            tokens.extend(seg.tokens())
        return join_pointer(tokens)

    def as_simple(self) -> str:
        """Dotted form: ``address.lines[*]``."""
        parts: list[str] = []
        for seg in self.segments:
            if seg.is_items():
                if parts:
                    parts[-1] = parts[-1] + "[*]"
                else:
                    parts.append("[*]")
            else:
                parts.append(seg.name)
        return ".".join(parts)

    def as_data_pointer(self) -> str | None:
        """Pointer into a data instance of the schema.

        Returns None when the path crosses an array items segment, since that
        location has one value per array element rather than a single pointer.
        """
        if self.items_depth():
            return None
        return join_pointer(seg.name for seg in self.segments)

    def __str__(self) -> str:
        return self.as_pointer()


EMPTY_PATH = Path()


def json_pointer_to_path(pointer: str) -> Path:
    """Parse a schema JSON Pointer into a Path.

    Raises:
        InvalidPath: If the pointer is not made of ``properties/<name>`` and
            ``items`` tokens.
    """
    tokens = split_pointer(pointer)
    segments: list[PathSegment] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token == PROPERTIES_TOKEN:
            if i + 1 >= len(tokens) or tokens[i + 1] == "":
                raise InvalidPath(
                    f"'properties' segment requires a name in path {pointer!r}"
                )
            segments.append(PropertySegment(tokens[i + 1]))
            i += 2
        elif token == ITEMS_TOKEN:
            segments.append(ITEMS)
            i += 1
        else:
            raise InvalidPath(f"Invalid path segment {token!r} in path {pointer!r}")
    return Path(tuple(segments))

