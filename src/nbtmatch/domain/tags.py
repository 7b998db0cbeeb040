"""Tag tree model — typed leaves, compounds, lists and path traversal.

The tree mirrors the NBT data model: twelve node types identified by a
numeric tag id. Leaves are immutable; :class:`Compound` and :class:`TagList`
are mutable containers so that :func:`put` and :func:`visit` can rewrite a
tree in place.

Equality is structural and type-sensitive: ``Int(0) != Short(0)``. Code that
wants to compare numbers across widths (the matcher, the dollar evaluator)
does so explicitly through :func:`numeric_value`.

Paths are tuples of string segments. List elements are addressed by decimal
index segments::

    >>> split_path('display.Lore[0]')
    ('display', 'Lore', '0')
    >>> join_path(('display', 'Lore', '0'))
    'display.Lore[0]'
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any, ClassVar

from nbtmatch.domain.errors import TagError


class TagType(IntEnum):
    """Numeric tag ids, shared with the binary wire form."""

    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12


class VisitAction(StrEnum):
    """What :func:`visit` does after the callback has seen a node."""

    RECURSE = "recurse"
    SKIP = "skip"
    STOP = "stop"


TagPath = tuple[str, ...]


class TagNode:
    """Base of the closed tag node union."""

    type_id: ClassVar[TagType]

    def copy(self) -> TagNode:
        return self

    def __str__(self) -> str:
        return to_snbt(self)


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


class NumericTag(TagNode):
    """Marker base for the six numeric leaf types."""

    value: int | float


def _check_width(cls_name: str, value: int, bits: int) -> None:
    low = -(1 << (bits - 1))
    high = (1 << (bits - 1)) - 1
    if not low <= value <= high:
        raise TagError(f"{cls_name} value {value} is outside [{low}, {high}]")


@dataclass(frozen=True)
class _IntegralTag(NumericTag):
    value: int
    bits: ClassVar[int] = 32

    def __post_init__(self) -> None:
        if isinstance(self.value, bool):
            object.__setattr__(self, "value", int(self.value))
        if not isinstance(self.value, int):
            raise TagError(f"{type(self).__name__} requires an int, got {self.value!r}")
        _check_width(type(self).__name__, self.value, self.bits)


@dataclass(frozen=True)
class Byte(_IntegralTag):
    type_id: ClassVar[TagType] = TagType.BYTE
    bits: ClassVar[int] = 8


@dataclass(frozen=True)
class Short(_IntegralTag):
    type_id: ClassVar[TagType] = TagType.SHORT
    bits: ClassVar[int] = 16


@dataclass(frozen=True)
class Int(_IntegralTag):
    type_id: ClassVar[TagType] = TagType.INT
    bits: ClassVar[int] = 32


@dataclass(frozen=True)
class Long(_IntegralTag):
    type_id: ClassVar[TagType] = TagType.LONG
    bits: ClassVar[int] = 64


@dataclass(frozen=True)
class _FloatingTag(NumericTag):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class Float(_FloatingTag):
    type_id: ClassVar[TagType] = TagType.FLOAT


@dataclass(frozen=True)
class Double(_FloatingTag):
    type_id: ClassVar[TagType] = TagType.DOUBLE


@dataclass(frozen=True)
class String(TagNode):
    type_id: ClassVar[TagType] = TagType.STRING

    value: str


@dataclass(frozen=True)
class _ArrayTag(TagNode):
    values: tuple[int, ...] = ()
    bits: ClassVar[int] = 32

    def __post_init__(self) -> None:
        values = tuple(int(v) for v in self.values)
        for v in values:
            _check_width(type(self).__name__, v, self.bits)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class ByteArray(_ArrayTag):
    type_id: ClassVar[TagType] = TagType.BYTE_ARRAY
    bits: ClassVar[int] = 8


@dataclass(frozen=True)
class IntArray(_ArrayTag):
    type_id: ClassVar[TagType] = TagType.INT_ARRAY
    bits: ClassVar[int] = 32


@dataclass(frozen=True)
class LongArray(_ArrayTag):
    type_id: ClassVar[TagType] = TagType.LONG_ARRAY
    bits: ClassVar[int] = 64


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass
class TagList(TagNode):
    """Ordered sequence of nodes, homogeneous by convention."""

    type_id: ClassVar[TagType] = TagType.LIST

    items: list[TagNode] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[TagNode]:
        return iter(self.items)

    def __getitem__(self, index: int) -> TagNode:
        return self.items[index]

    def append(self, node: TagNode) -> None:
        self.items.append(node)

    def is_empty(self) -> bool:
        return not self.items

    def copy(self) -> TagList:
        return TagList([item.copy() for item in self.items])


@dataclass
class Compound(TagNode):
    """Unordered key-to-node mapping with unique keys."""

    type_id: ClassVar[TagType] = TagType.COMPOUND

    entries: dict[str, TagNode] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __getitem__(self, key: str) -> TagNode:
        return self.entries[key]

    def __setitem__(self, key: str, node: TagNode) -> None:
        self.entries[key] = node

    def __delitem__(self, key: str) -> None:
        del self.entries[key]

    def get(self, key: str) -> TagNode | None:
        return self.entries.get(key)

    def keys(self) -> list[str]:
        return list(self.entries)

    def items(self) -> list[tuple[str, TagNode]]:
        return list(self.entries.items())

    def is_empty(self) -> bool:
        return not self.entries

    def copy(self) -> Compound:
        return Compound({key: node.copy() for key, node in self.entries.items()})


# ---------------------------------------------------------------------------
# Type probes
# ---------------------------------------------------------------------------


def is_string(node: TagNode | None) -> bool:
    return isinstance(node, String)


def is_numeric(node: TagNode | None) -> bool:
    return isinstance(node, NumericTag)


def as_string(node: TagNode) -> str:
    """Return the text of a string leaf, or the SNBT rendering of anything else."""
    if isinstance(node, String):
        return node.value
    return to_snbt(node)


def numeric_value(node: TagNode | None) -> int | float | None:
    """Return the Python number held by a numeric leaf, else None."""
    if isinstance(node, NumericTag):
        return node.value
    return None


def array_values(node: TagNode | None) -> tuple[int, ...] | None:
    """Return the values of a byte/int/long array, else None."""
    if isinstance(node, _ArrayTag):
        return node.values
    return None


_SNBT_SUFFIX: dict[type[TagNode], str] = {
    Byte: "b",
    Short: "s",
    Int: "",
    Long: "L",
    Float: "f",
    Double: "d",
}
_ARRAY_PREFIX: dict[type[TagNode], str] = {ByteArray: "B", IntArray: "I", LongArray: "L"}
_BARE_KEY_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-.+")


def _snbt_key(key: str) -> str:
    if key and all(ch in _BARE_KEY_CHARS for ch in key):
        return key
    return json.dumps(key)


def to_snbt(node: TagNode) -> str:
    """Render *node* in stringified-NBT notation (diagnostics only)."""
    if isinstance(node, NumericTag):
        return f"{node.value}{_SNBT_SUFFIX[type(node)]}"
    if isinstance(node, String):
        return json.dumps(node.value)
    if isinstance(node, _ArrayTag):
        prefix = _ARRAY_PREFIX[type(node)]
        return f"[{prefix};" + ",".join(str(v) for v in node.values) + "]"
    if isinstance(node, TagList):
        return "[" + ",".join(to_snbt(item) for item in node.items) + "]"
    if isinstance(node, Compound):
        inner = ",".join(f"{_snbt_key(k)}:{to_snbt(v)}" for k, v in node.entries.items())
        return "{" + inner + "}"
    raise TypeError(f"Unknown tag node {node!r}")


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def split_path(text: str) -> TagPath:
    """Split a dotted path into segments.

    Supports ``a.b``, list indices ``a[0]`` and quoted keys ``a."x.y"``.
    Inside quotes a backslash escapes the next character.
    """
    segments: list[str] = []
    buf: list[str] = []
    quoted = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == ".":
            if buf or quoted:
                segments.append("".join(buf))
                buf = []
                quoted = False
            i += 1
        elif ch == "[":
            if buf or quoted:
                segments.append("".join(buf))
                buf = []
                quoted = False
            end = text.find("]", i)
            if end == -1:
                raise TagError(f"Unclosed '[' in path '{text}'")
            index = text[i + 1 : end].strip()
            if not index.isdigit():
                raise TagError(f"List index '{index}' in path '{text}' is not a number")
            segments.append(index)
            i = end + 1
        elif ch == '"':
            quoted = True
            i += 1
            while True:
                if i >= n:
                    raise TagError(f"Unclosed quote in path '{text}'")
                ch = text[i]
                if ch == "\\" and i + 1 < n:
                    buf.append(text[i + 1])
                    i += 2
                elif ch == '"':
                    i += 1
                    break
                else:
                    buf.append(ch)
                    i += 1
        else:
            buf.append(ch)
            i += 1
    if buf or quoted:
        segments.append("".join(buf))
    return tuple(segments)


def join_path(path: TagPath) -> str:
    """Render segments back into the dotted form accepted by :func:`split_path`."""
    parts: list[str] = []
    for segment in path:
        if segment.isdigit():
            parts.append(f"[{segment}]")
            continue
        if any(ch in segment for ch in '.[]"\\') or not segment:
            escaped = segment.replace("\\", "\\\\").replace('"', '\\"')
            segment = f'"{escaped}"'
        parts.append(f".{segment}" if parts else segment)
    return "".join(parts)


def _list_index(segment: str, size: int) -> int | None:
    if not segment.isdigit():
        return None
    index = int(segment)
    return index if index < size else None


def get(node: TagNode, path: TagPath) -> TagNode | None:
    """Return the node at *path* below *node*, or None when any step misses."""
    current: TagNode | None = node
    for segment in path:
        if isinstance(current, Compound):
            current = current.get(segment)
        elif isinstance(current, TagList):
            index = _list_index(segment, len(current))
            current = None if index is None else current.items[index]
        else:
            return None
        if current is None:
            return None
    return current


def put(node: TagNode, path: TagPath, value: TagNode) -> None:
    """Store *value* at *path*, creating intermediate compounds as needed.

    Raises:
        TagError: The path is empty, an intermediate segment holds a
            non-container, or a list index is out of range.
    """
    if not path:
        raise TagError("Cannot put a value at an empty path")
    current = node
    for depth, segment in enumerate(path[:-1]):
        if isinstance(current, Compound):
            child = current.get(segment)
            if child is None:
                child = Compound()
                current[segment] = child
        elif isinstance(current, TagList):
            index = _list_index(segment, len(current))
            if index is None:
                raise TagError(f"No list element at '{join_path(path[: depth + 1])}'")
            child = current.items[index]
        else:
            raise TagError(f"Cannot descend into {type(current).__name__} at '{join_path(path[:depth])}'")
        current = child

    last = path[-1]
    if isinstance(current, Compound):
        current[last] = value
    elif isinstance(current, TagList):
        index = _list_index(last, len(current))
        if index is None:
            raise TagError(f"No list element at '{join_path(path)}'")
        current.items[index] = value
    else:
        raise TagError(f"Cannot set '{join_path(path)}': parent is {type(current).__name__}")


VisitCallback = Callable[[TagPath, str, TagNode], VisitAction]


def _children(node: TagNode) -> list[tuple[str, TagNode]]:
    if isinstance(node, Compound):
        return node.items()
    if isinstance(node, TagList):
        return [(str(i), item) for i, item in enumerate(node.items)]
    return []


def visit(node: TagNode, callback: VisitCallback, path: TagPath = ()) -> bool:
    """Depth-first pre-order traversal below *node*.

    ``callback(parent_path, key, child)`` decides whether to descend into
    *child* (``RECURSE``), move on (``SKIP``) or abort the walk (``STOP``).
    Children are snapshotted per container, so the callback may replace
    entries of the container it is visiting.

    Returns:
        False if the walk was stopped, True otherwise.
    """
    for key, child in _children(node):
        action = callback(path, key, child)
        if action is VisitAction.STOP:
            return False
        if action is VisitAction.RECURSE and isinstance(child, (Compound, TagList)):
            if not visit(child, callback, (*path, key)):
                return False
    return True


# ---------------------------------------------------------------------------
# JSON bridge
# ---------------------------------------------------------------------------

_INT_MIN = -(1 << 31)
_INT_MAX = (1 << 31) - 1


def tag_from_json(value: Any) -> TagNode:
    """Convert a JSON-like Python value into a tag tree."""
    if isinstance(value, bool):
        return Byte(1 if value else 0)
    if isinstance(value, int):
        if _INT_MIN <= value <= _INT_MAX:
            return Int(value)
        return Long(value)
    if isinstance(value, float):
        return Double(value)
    if isinstance(value, str):
        return String(value)
    if isinstance(value, Mapping):
        return Compound({str(k): tag_from_json(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return TagList([tag_from_json(v) for v in value])
    raise TagError(f"Cannot convert {type(value).__name__} value {value!r} to a tag")


def compound_from_json(value: Mapping[str, Any]) -> Compound:
    node = tag_from_json(value)
    if not isinstance(node, Compound):
        raise TagError(f"Expected an object, got {type(value).__name__}")
    return node


def tag_to_json(node: TagNode) -> Any:
    """Convert a tag tree into JSON-compatible Python values."""
    if isinstance(node, NumericTag):
        return node.value
    if isinstance(node, String):
        return node.value
    if isinstance(node, _ArrayTag):
        return list(node.values)
    if isinstance(node, TagList):
        return [tag_to_json(item) for item in node.items]
    if isinstance(node, Compound):
        return {key: tag_to_json(child) for key, child in node.entries.items()}
    raise TypeError(f"Unknown tag node {node!r}")
