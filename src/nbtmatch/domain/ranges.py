"""Number ranges — the ``a..b`` syntax used by dollar range tests.

Grammar::

    range := [open] [number] [".." [number]] [close]
    open  := "[" | "("          close := "]" | ")"

A bare number is an exact match. ``a..b`` is the closed interval,
``a..`` / ``..b`` are half-open, and round brackets make a bound
exclusive. Examples:

    >>> parse_range("5..10").contains(10)
    True
    >>> parse_range("(5..10)").contains(10)
    False
    >>> parse_range("..3").example()
    3

Inside tag values a range is written with the dollar sigil, e.g.
``{"Damage": "$0..10"}``; :func:`parse_dollar_range` strips it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from nbtmatch.domain.errors import RangeError

DOLLAR_SIGIL = "$"
RANGE_SEPARATOR = ".."

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

Number = int | float


def parse_number(token: str) -> Number:
    """Parse an integer or decimal token; ints stay ints."""
    token = token.strip()
    if not _NUMBER_PATTERN.match(token):
        raise ValueError(f"'{token}' is not a number")
    if any(ch in token for ch in ".eE"):
        return float(token)
    return int(token)


@dataclass(frozen=True)
class NumberRange:
    """Interval over numeric leaf values. Immutable once parsed."""

    lower: Number | None = None
    upper: Number | None = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True

    def contains(self, value: Number) -> bool:
        if self.lower is not None:
            if value < self.lower or (value == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if value > self.upper or (value == self.upper and not self.upper_inclusive):
                return False
        return True

    def is_exact(self) -> bool:
        return self.lower is not None and self.lower == self.upper

    def example(self) -> Number:
        """Return one value inside the range, preferring the lower bound.

        Only used to build preview instances, never for matching.
        """
        if self.lower is not None:
            if self.lower_inclusive:
                return self.lower
            candidate = self.lower + 1
            if self.upper is not None and (isinstance(self.lower, float) or not self.contains(candidate)):
                return (self.lower + self.upper) / 2
            return candidate
        if self.upper is not None:
            if self.upper_inclusive:
                return self.upper
            return self.upper - 1
        return 0

    def __str__(self) -> str:
        if self.is_exact() and self.lower_inclusive and self.upper_inclusive:
            return str(self.lower)
        text = ("" if self.lower is None else str(self.lower)) + RANGE_SEPARATOR
        text += "" if self.upper is None else str(self.upper)
        if not self.lower_inclusive or not self.upper_inclusive:
            text = ("[" if self.lower_inclusive else "(") + text
            text += "]" if self.upper_inclusive else ")"
        return text


def parse_range(text: str) -> NumberRange:
    """Parse range syntax into a :class:`NumberRange`.

    Raises:
        RangeError: Empty text, non-numeric bounds, or lower > upper.
    """
    body = text.strip()
    if not body:
        raise RangeError(text, "empty range")

    lower_inclusive = upper_inclusive = True
    if body[0] in "[(":
        lower_inclusive = body[0] == "["
        body = body[1:]
    if body and body[-1] in "])":
        upper_inclusive = body[-1] == "]"
        body = body[:-1]
    body = body.strip()

    try:
        if RANGE_SEPARATOR in body:
            low_text, _, high_text = body.partition(RANGE_SEPARATOR)
            lower = parse_number(low_text) if low_text.strip() else None
            upper = parse_number(high_text) if high_text.strip() else None
        else:
            lower = upper = parse_number(body)
    except ValueError as exc:
        raise RangeError(text, str(exc)) from exc

    if lower is not None and upper is not None:
        if lower > upper:
            raise RangeError(text, f"lower bound {lower} is greater than upper bound {upper}")
        if lower == upper and not (lower_inclusive and upper_inclusive):
            raise RangeError(text, "exclusive bounds leave the range empty")
    return NumberRange(lower, upper, lower_inclusive, upper_inclusive)


def is_dollar_range(text: str) -> bool:
    """Whether *text* is a ``$``-prefixed, well-formed range."""
    if not text.startswith(DOLLAR_SIGIL):
        return False
    try:
        parse_range(text[1:])
    except RangeError:
        return False
    return True


def parse_dollar_range(text: str) -> NumberRange | None:
    """Parse ``$<range>`` tag value text; None when it is not one."""
    if not text.startswith(DOLLAR_SIGIL):
        return None
    try:
        return parse_range(text[1:])
    except RangeError:
        return None
