"""PacketBuffer — sequential binary reader/writer for tag blobs.

Tag blobs use the NBT layout, big-endian throughout:

- root: type id byte, 2-byte name length + UTF-8 name (always empty),
  payload; a missing tag is a single ``TAG_End`` (0) byte;
- compound payload: named entries terminated by ``TAG_End``;
- list payload: element type id, 4-byte length, unnamed payloads;
- strings: 2-byte length + UTF-8 bytes.

The buffer carries no framing of its own: a condition is simply two
consecutive blobs.
"""

from __future__ import annotations

import struct

from nbtmatch.domain.condition import Condition
from nbtmatch.domain.errors import WireFormatError
from nbtmatch.domain.tags import (
    Byte,
    ByteArray,
    Compound,
    Double,
    Float,
    Int,
    IntArray,
    Long,
    LongArray,
    Short,
    String,
    TagList,
    TagNode,
    TagType,
)

_SCALAR_FORMATS: dict[TagType, tuple[str, type[TagNode]]] = {
    TagType.BYTE: (">b", Byte),
    TagType.SHORT: (">h", Short),
    TagType.INT: (">i", Int),
    TagType.LONG: (">q", Long),
    TagType.FLOAT: (">f", Float),
    TagType.DOUBLE: (">d", Double),
}
_ARRAY_FORMATS: dict[TagType, tuple[str, type[TagNode]]] = {
    TagType.BYTE_ARRAY: ("b", ByteArray),
    TagType.INT_ARRAY: ("i", IntArray),
    TagType.LONG_ARRAY: ("q", LongArray),
}

# Nesting deeper than this is rejected when reading, as NBT readers do.
MAX_DEPTH = 512


class PacketBuffer:
    """Append-only writer with an independent read cursor."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)
        self._cursor = 0

    def getvalue(self) -> bytes:
        return bytes(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self._cursor

    # -- primitives --------------------------------------------------------

    def _pack(self, fmt: str, *values: object) -> None:
        self._data.extend(struct.pack(fmt, *values))

    def _unpack(self, fmt: str) -> tuple:
        size = struct.calcsize(fmt)
        if self.remaining < size:
            msg = f"Truncated tag data: need {size} bytes at offset {self._cursor}, have {self.remaining}"
            raise WireFormatError(msg)
        values = struct.unpack_from(fmt, self._data, self._cursor)
        self._cursor += size
        return values

    def _write_string(self, text: str) -> None:
        encoded = text.encode("utf-8")
        if len(encoded) > 0xFFFF:
            raise WireFormatError(f"String of {len(encoded)} bytes is too long for a tag")
        self._pack(">H", len(encoded))
        self._data.extend(encoded)

    def _read_string(self) -> str:
        (length,) = self._unpack(">H")
        (raw,) = self._unpack(f">{length}s")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WireFormatError(f"Invalid UTF-8 in tag string: {exc}") from exc

    # -- tags ------------------------------------------------------------------

    def write_tag(self, tag: Compound | None) -> None:
        """Write a root compound, or a single ``TAG_End`` byte for None."""
        if tag is None:
            self._pack(">b", TagType.END)
            return
        self._pack(">b", TagType.COMPOUND)
        self._write_string("")
        self._write_payload(tag)

    def read_tag(self) -> Compound:
        """Read a root compound; a ``TAG_End`` reads back as an empty compound."""
        (type_id,) = self._unpack(">b")
        if type_id == TagType.END:
            return Compound()
        if type_id != TagType.COMPOUND:
            raise WireFormatError(f"Root tag must be a compound, got type {type_id}")
        self._read_string()
        return self._read_compound(0)

    def _write_payload(self, node: TagNode) -> None:
        type_id = node.type_id
        if type_id in _SCALAR_FORMATS:
            self._pack(_SCALAR_FORMATS[type_id][0], node.value)  # type: ignore[attr-defined]
        elif type_id in _ARRAY_FORMATS:
            values = node.values  # type: ignore[attr-defined]
            self._pack(">i", len(values))
            self._pack(f">{len(values)}{_ARRAY_FORMATS[type_id][0]}", *values)
        elif isinstance(node, String):
            self._write_string(node.value)
        elif isinstance(node, TagList):
            element_type = node.items[0].type_id if node.items else TagType.END
            if any(item.type_id != element_type for item in node.items):
                raise WireFormatError("List elements must all have the same tag type")
            self._pack(">bi", element_type, len(node.items))
            for item in node.items:
                self._write_payload(item)
        elif isinstance(node, Compound):
            for key, child in node.entries.items():
                self._pack(">b", child.type_id)
                self._write_string(key)
                self._write_payload(child)
            self._pack(">b", TagType.END)
        else:
            raise WireFormatError(f"Cannot encode {type(node).__name__}")

    def _read_payload(self, type_id: int, depth: int) -> TagNode:
        if depth > MAX_DEPTH:
            raise WireFormatError(f"Tag nesting deeper than {MAX_DEPTH}")
        if type_id in _SCALAR_FORMATS:
            fmt, cls = _SCALAR_FORMATS[TagType(type_id)]
            (value,) = self._unpack(fmt)
            return cls(value)  # type: ignore[call-arg]
        if type_id in _ARRAY_FORMATS:
            code, cls = _ARRAY_FORMATS[TagType(type_id)]
            (length,) = self._unpack(">i")
            if length < 0:
                raise WireFormatError(f"Negative array length {length}")
            return cls(self._unpack(f">{length}{code}"))  # type: ignore[call-arg]
        if type_id == TagType.STRING:
            return String(self._read_string())
        if type_id == TagType.LIST:
            element_type, length = self._unpack(">bi")
            if length < 0:
                raise WireFormatError(f"Negative list length {length}")
            return TagList([self._read_payload(element_type, depth + 1) for _ in range(length)])
        if type_id == TagType.COMPOUND:
            return self._read_compound(depth)
        raise WireFormatError(f"Unknown tag type {type_id}")

    def _read_compound(self, depth: int) -> Compound:
        compound = Compound()
        while True:
            (child_type,) = self._unpack(">b")
            if child_type == TagType.END:
                return compound
            key = self._read_string()
            compound[key] = self._read_payload(child_type, depth + 1)


def encode_condition(condition: Condition) -> bytes:
    """Serialize the runtime state of *condition* (predicates are dropped)."""
    buffer = PacketBuffer()
    condition.write(buffer)
    return buffer.getvalue()


def decode_condition(data: bytes) -> Condition:
    buffer = PacketBuffer(data)
    condition = Condition.read(buffer)
    if buffer.remaining:
        raise WireFormatError(f"{buffer.remaining} trailing bytes after condition")
    return condition
