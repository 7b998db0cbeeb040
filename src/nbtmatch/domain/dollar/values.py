"""Dynamic values produced by dollar evaluation and their coercions.

A value is either a tag node (what references resolve to), a plain Python
scalar (literals and comparison results) or None (a path that missed).
"""

from __future__ import annotations

from typing import Any

from nbtmatch.domain.tags import Compound, NumericTag, String, TagList, TagNode, tag_to_json

Value = Any


def unwrap(value: Value) -> Value:
    """Unwrap numeric and string leaves into Python scalars."""
    if isinstance(value, (NumericTag, String)):
        return value.value
    return value


def is_number(value: Value) -> bool:
    return isinstance(value, (int, float))


def as_boolean(value: Value) -> bool:
    """Interpret a value as pass/fail.

    Zero, empty strings, empty compounds/lists/arrays, None and False are
    false; everything else is true.
    """
    value = unwrap(value)
    if value is None:
        return False
    if isinstance(value, (bool, int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value)
    if isinstance(value, (Compound, TagList)):
        return not value.is_empty()
    if isinstance(value, TagNode):
        return len(value) > 0  # type: ignore[arg-type]
    return bool(value)


def values_equal(left: Value, right: Value) -> bool:
    """Equality with numeric coercion across leaf widths."""
    left, right = unwrap(left), unwrap(right)
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, TagNode) or isinstance(right, TagNode):
        return left == right
    return type(left) is type(right) and left == right


def to_json(value: Value) -> Any:
    """Render an evaluation result for JSON output."""
    if isinstance(value, TagNode):
        return tag_to_json(value)
    return value
