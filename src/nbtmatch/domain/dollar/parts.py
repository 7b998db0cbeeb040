"""AST nodes for dollar expressions.

Every node is immutable and evaluates itself against a resolver: a callable
mapping a reference name (``"$"`` for the root) to a tag node, or raising
:class:`UnresolvedReferenceError`. Evaluation never mutates what the
resolver returns.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from nbtmatch.domain.dollar.values import Value, as_boolean, is_number, unwrap, values_equal
from nbtmatch.domain.errors import DollarEvaluationError
from nbtmatch.domain.ranges import NumberRange
from nbtmatch.domain.tags import TagNode, TagPath, get

Resolver = Callable[[str], TagNode]

ROOT_REFERENCE = "$"
EQUALITY_OPERATORS = frozenset({"==", "!="})
ORDERING_OPERATORS = frozenset({"<", "<=", ">", ">="})


class DollarPart:
    """Base class for all expression nodes."""

    kind: ClassVar[str]

    def evaluate(self, resolver: Resolver) -> Value:
        raise NotImplementedError

    def to_source(self) -> str:
        raise NotImplementedError

    def describe(self) -> dict[str, Any]:
        """Return a JSON-friendly view of the subtree."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_source()


def _wrapped(part: DollarPart) -> str:
    if isinstance(part, (Comparison, BooleanCombinator)) or (
        isinstance(part, RangeTest) and part.target != Reference(ROOT_REFERENCE)
    ):
        return f"({part.to_source()})"
    return part.to_source()


@dataclass(frozen=True)
class Reference(DollarPart):
    """A named root plus an optional accessor path, e.g. ``$.display.Name``."""

    kind: ClassVar[str] = "reference"

    name: str
    path: TagPath = ()

    def evaluate(self, resolver: Resolver) -> Value:
        root = resolver(self.name)
        if not self.path:
            return root
        return get(root, self.path)

    def to_source(self) -> str:
        parts = [self.name]
        for segment in self.path:
            if segment.isdigit():
                parts.append(f"[{segment}]")
            elif segment.isidentifier():
                parts.append(f".{segment}")
            else:
                parts.append(f"[{json.dumps(segment)}]")
        return "".join(parts)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "path": list(self.path)}


@dataclass(frozen=True)
class Literal(DollarPart):
    kind: ClassVar[str] = "literal"

    value: int | float | str | bool | None

    def evaluate(self, resolver: Resolver) -> Value:
        return self.value

    def to_source(self) -> str:
        return json.dumps(self.value)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "value": self.value}


@dataclass(frozen=True)
class RangeTest(DollarPart):
    """True when the numeric value of *target* lies inside *range*."""

    kind: ClassVar[str] = "range"

    target: DollarPart
    range: NumberRange

    def evaluate(self, resolver: Resolver) -> Value:
        value = unwrap(self.target.evaluate(resolver))
        if isinstance(value, bool) or not is_number(value):
            raise DollarEvaluationError(
                f"Range test ${self.range} needs a number, got {_type_name(value)}"
            )
        return self.range.contains(value)

    def to_source(self) -> str:
        if self.target == Reference(ROOT_REFERENCE):
            return f"${self.range}"
        return f"{_wrapped(self.target)} == ${self.range}"

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "target": self.target.describe(), "range": str(self.range)}


@dataclass(frozen=True)
class Comparison(DollarPart):
    kind: ClassVar[str] = "comparison"

    op: str
    left: DollarPart
    right: DollarPart

    def evaluate(self, resolver: Resolver) -> Value:
        left = self.left.evaluate(resolver)
        right = self.right.evaluate(resolver)
        if self.op == "==":
            return values_equal(left, right)
        if self.op == "!=":
            return not values_equal(left, right)

        left, right = unwrap(left), unwrap(right)
        comparable = (is_number(left) and is_number(right)) or (
            isinstance(left, str) and isinstance(right, str)
        )
        if not comparable:
            raise DollarEvaluationError(
                f"Cannot compare {_type_name(left)} {self.op} {_type_name(right)}"
            )
        if self.op == "<":
            return left < right
        if self.op == "<=":
            return left <= right
        if self.op == ">":
            return left > right
        return left >= right

    def to_source(self) -> str:
        return f"{_wrapped(self.left)} {self.op} {_wrapped(self.right)}"

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "op": self.op,
            "left": self.left.describe(),
            "right": self.right.describe(),
        }


@dataclass(frozen=True)
class BooleanCombinator(DollarPart):
    """``&&`` / ``||`` over two or more children, short-circuiting."""

    kind: ClassVar[str] = "boolean"

    op: str
    children: tuple[DollarPart, ...]

    def evaluate(self, resolver: Resolver) -> Value:
        results = (as_boolean(child.evaluate(resolver)) for child in self.children)
        if self.op == "&&":
            return all(results)
        return any(results)

    def to_source(self) -> str:
        return f" {self.op} ".join(_wrapped(child) for child in self.children)

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "op": self.op,
            "children": [child.describe() for child in self.children],
        }


@dataclass(frozen=True)
class Negation(DollarPart):
    kind: ClassVar[str] = "not"

    child: DollarPart

    def evaluate(self, resolver: Resolver) -> Value:
        return not as_boolean(self.child.evaluate(resolver))

    def to_source(self) -> str:
        return "!" + _wrapped(self.child)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "child": self.child.describe()}


def _type_name(value: Value) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def evaluate(part: DollarPart, resolver: Resolver) -> Value:
    """Evaluate *part* against *resolver*.

    Raises:
        DollarEvaluationError: Type mismatch or unresolved reference.
    """
    return part.evaluate(resolver)
