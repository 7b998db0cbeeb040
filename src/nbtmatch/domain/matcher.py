"""Structural matcher — containment and overlap of tag trees.

Pure functions, no side effects, never raise on mismatched input.

Leaf comparison rules shared by both tests:

- numeric leaves compare by value across widths (``Short(1)`` matches
  ``Int(1)`` and ``Double(1.0)``);
- a string leaf holding ``$<range>`` matches a numeric leaf inside the range;
- an array tag equals another array, or a list, holding the same values in
  the same order (a config document writes arrays as plain lists);
- anything else uses structural, type-sensitive equality.
"""

from __future__ import annotations

from nbtmatch.domain.ranges import parse_dollar_range
from nbtmatch.domain.tags import (
    Compound,
    Long,
    String,
    TagList,
    TagNode,
    array_values,
    numeric_value,
)


def _range_matches(pattern: TagNode, actual: TagNode) -> bool:
    if not isinstance(pattern, String):
        return False
    value = numeric_value(actual)
    if value is None:
        return False
    number_range = parse_dollar_range(pattern.value)
    return number_range is not None and number_range.contains(value)


def leaves_equal(expected: TagNode, actual: TagNode) -> bool:
    """Compare two leaves with numeric coercion and range patterns."""
    if expected == actual:
        return True
    expected_number = numeric_value(expected)
    actual_number = numeric_value(actual)
    if expected_number is not None and actual_number is not None:
        return expected_number == actual_number
    return _range_matches(expected, actual)


def _is_array(node: TagNode) -> bool:
    return array_values(node) is not None


def _sequence(node: TagNode) -> list[TagNode] | None:
    values = array_values(node)
    if values is not None:
        return [Long(value) for value in values]
    if isinstance(node, TagList):
        return node.items
    return None


def _sequences_equal(expected: TagNode, actual: TagNode) -> bool:
    """Ordered, element-wise comparison of list and array tags."""
    left, right = _sequence(expected), _sequence(actual)
    if left is None or right is None or len(left) != len(right):
        return False
    return all(leaves_equal(e, a) for e, a in zip(left, right, strict=True))


def _element_contained(expected: TagNode, actual: TagNode) -> bool:
    if isinstance(expected, Compound):
        return isinstance(actual, Compound) and contained(expected, actual)
    if _is_array(expected) or (isinstance(expected, TagList) and _is_array(actual)):
        return _sequences_equal(expected, actual)
    if isinstance(expected, TagList):
        return isinstance(actual, TagList) and _list_contained(expected, actual)
    return leaves_equal(expected, actual)


def _list_contained(expected: TagList, actual: TagList) -> bool:
    # Order-independent: every required element must match some actual element.
    return all(any(_element_contained(e, a) for a in actual) for e in expected)


def contained(subset: Compound, superset: Compound) -> bool:
    """Whether every key of *subset* is present in *superset* with a matching value.

    An empty *subset* is vacuously contained.
    """
    for key, expected in subset.entries.items():
        actual = superset.get(key)
        if actual is None or not _element_contained(expected, actual):
            return False
    return True


def _values_overlap(left: TagNode, right: TagNode) -> bool:
    if isinstance(left, Compound) and isinstance(right, Compound):
        return overlaps(left, right)
    if _is_array(left) or _is_array(right):
        return _sequences_equal(left, right) or _sequences_equal(right, left)
    if isinstance(left, TagList) and isinstance(right, TagList):
        return any(_values_overlap(a, b) for a in left for b in right)
    if isinstance(left, (Compound, TagList)) or isinstance(right, (Compound, TagList)):
        return False
    return leaves_equal(left, right) or _range_matches(right, left)


def overlaps(a: Compound, b: Compound) -> bool:
    """Whether *a* and *b* share at least one key with matching values.

    Used to detect a denied value in an instance. Empty operands never
    overlap.
    """
    if len(a) > len(b):
        a, b = b, a
    for key, left in a.entries.items():
        right = b.get(key)
        if right is not None and _values_overlap(left, right):
            return True
    return False
