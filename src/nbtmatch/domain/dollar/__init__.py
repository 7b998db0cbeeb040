"""Dollar expressions — a small reference-and-predicate language.

``$`` is the instance being matched; ``$.Damage < 10``,
``$.display.Name == "Excalibur"`` and ``$.Count == $1..16`` are predicates
over it. Parsing and evaluation are independent of any condition: callers
inject the resolver that maps reference names to tag nodes.
"""

from __future__ import annotations

from nbtmatch.domain.dollar.parser import parse
from nbtmatch.domain.dollar.parts import (
    ROOT_REFERENCE,
    BooleanCombinator,
    Comparison,
    DollarPart,
    Literal,
    Negation,
    RangeTest,
    Reference,
    Resolver,
    evaluate,
)
from nbtmatch.domain.dollar.values import as_boolean

__all__ = [
    "ROOT_REFERENCE",
    "BooleanCombinator",
    "Comparison",
    "DollarPart",
    "Literal",
    "Negation",
    "RangeTest",
    "Reference",
    "Resolver",
    "as_boolean",
    "evaluate",
    "parse",
]
