"""Exception hierarchy for the matching engine.

Syntax-level errors (document shape, dollar expressions, ranges) are fatal
where they are raised. Evaluation errors are recoverable: the condition
layer catches them, records a warning and treats the predicate as failed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


class NbtMatchError(Exception):
    """Base class for all nbtmatch errors."""


class TagError(NbtMatchError):
    """Tag tree operation failed (type conflict, bad path, width overflow)."""


class RangeError(NbtMatchError):
    """Number range text could not be parsed."""

    def __init__(self, text: str, message: str) -> None:
        super().__init__(f"Malformed range '{text}': {message}")
        self.text = text


class DollarSyntaxError(NbtMatchError):
    """Dollar expression text is malformed."""

    def __init__(self, text: str, position: int, message: str) -> None:
        super().__init__(f"{message} at position {position} in '{text}'")
        self.text = text
        self.position = position
        self.reason = message


class DollarEvaluationError(NbtMatchError):
    """A parsed dollar expression failed during evaluation."""


class UnresolvedReferenceError(DollarEvaluationError):
    """The resolver does not know a referenced name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unresolved reference '{name}'")
        self.name = name


class ConditionFormatError(NbtMatchError):
    """A configuration document field has the wrong shape."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"data.{field} {message}" if field else message)
        self.field = field


@dataclass(frozen=True)
class PredicateFailure:
    """One predicate that failed to compile."""

    index: int
    source: str
    message: str


class ConditionSyntaxError(NbtMatchError):
    """One or more predicates of a condition failed to compile."""

    def __init__(self, failures: Sequence[PredicateFailure]) -> None:
        lines = [f"conditions[{f.index}] ({f.source}): {f.message}" for f in failures]
        super().__init__("Invalid dollar predicates: " + "; ".join(lines))
        self.failures = tuple(failures)


class WireFormatError(NbtMatchError):
    """Binary tag data is truncated or malformed."""


class DocumentError(NbtMatchError):
    """A configuration or instance document could not be read or parsed."""
