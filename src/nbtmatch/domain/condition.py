"""Condition — required/denied sub-structure plus dollar predicates.

A condition is compiled once from a configuration document and then shared
read-only across any number of ``matches`` calls. Matching runs three
short-circuiting stages:

1. the instance must not overlap ``denied`` (skipped when empty),
2. ``required`` must be contained in the instance (skipped when empty),
3. every dollar predicate must evaluate to true.

INVARIANT: an empty ``required``/``denied`` compound means "no constraint",
never "must be empty".

Non-fatal problems (a predicate that fails to evaluate, an unknown potion,
a preview value that cannot be written) are logged as warnings and, when the
caller passes a ``warnings`` list, appended to it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from nbtmatch.domain.collaborators import Registry, TagBuffer, TagHolder
from nbtmatch.domain.dollar import ROOT_REFERENCE, DollarPart, as_boolean, parse
from nbtmatch.domain.errors import (
    ConditionFormatError,
    ConditionSyntaxError,
    DollarEvaluationError,
    DollarSyntaxError,
    PredicateFailure,
    TagError,
    UnresolvedReferenceError,
)
from nbtmatch.domain.identifiers import normalize_identifier
from nbtmatch.domain.matcher import contained, overlaps
from nbtmatch.domain.ranges import DOLLAR_SIGIL, parse_dollar_range
from nbtmatch.domain.tags import (
    Compound,
    String,
    TagNode,
    TagPath,
    VisitAction,
    compound_from_json,
    join_path,
    put,
    tag_from_json,
    tag_to_json,
    visit,
)

logger = logging.getLogger(__name__)

REQUIRE_KEY = "require"
DENY_KEY = "deny"
CONDITIONS_KEY = "conditions"
POTION_KEY = "potion"
DOCUMENT_KEYS = (REQUIRE_KEY, DENY_KEY, CONDITIONS_KEY, POTION_KEY)

POTION_TAG = "Potion"


@dataclass(frozen=True)
class CompiledPredicate:
    """A dollar predicate with the source text it was compiled from."""

    source: str
    part: DollarPart


def _warn(warnings: list[str] | None, message: str) -> None:
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)


def compile_predicates(sources: Iterable[str]) -> tuple[CompiledPredicate, ...]:
    """Compile every source independently, then report all failures at once.

    Raises:
        ConditionSyntaxError: At least one source failed to parse.
    """
    compiled: list[CompiledPredicate] = []
    failures: list[PredicateFailure] = []
    for index, source in enumerate(sources):
        try:
            compiled.append(CompiledPredicate(source, parse(source)))
        except DollarSyntaxError as exc:
            failures.append(PredicateFailure(index, source, str(exc)))
    if failures:
        raise ConditionSyntaxError(failures)
    return tuple(compiled)


def _compound_field(document: Mapping[str, Any], key: str) -> Compound:
    value = document[key]
    if not isinstance(value, Mapping):
        raise ConditionFormatError(key, "must be an object")
    try:
        return compound_from_json(value)
    except TagError as exc:
        raise ConditionFormatError(key, str(exc)) from exc


class Condition:
    """Compiled matching condition.

    Attributes:
        required: Sub-structure every matching instance must contain.
        denied: Sub-structure no matching instance may overlap.
        predicates: Dollar predicates, evaluated in declaration order.
    """

    def __init__(
        self,
        required: Compound | None = None,
        denied: Compound | None = None,
        predicates: Iterable[CompiledPredicate] = (),
    ) -> None:
        self.required = required if required is not None else Compound()
        self.denied = denied if denied is not None else Compound()
        self.predicates = tuple(predicates)
        self._preview: Compound | None = None
        self._preview_lock = threading.Lock()

    @classmethod
    def empty(cls) -> Condition:
        return cls()

    def is_empty(self) -> bool:
        return self.required.is_empty() and self.denied.is_empty() and not self.predicates

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Condition):
            return NotImplemented
        return (
            self.required == other.required
            and self.denied == other.denied
            and [p.source for p in self.predicates] == [p.source for p in other.predicates]
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        sources = [p.source for p in self.predicates]
        return f"Condition(required={self.required}, denied={self.denied}, predicates={sources})"

    # -- matching ------------------------------------------------------------

    def matches(self, instance: TagHolder, warnings: list[str] | None = None) -> bool:
        """Whether *instance* satisfies this condition.

        An instance without tag data matches only when nothing is required.
        """
        if not instance.has_tag():
            return self.required.is_empty()
        return self.matches_tag(instance.get_tag(), warnings)

    def matches_tag(self, tag: Compound | None, warnings: list[str] | None = None) -> bool:
        """Like :meth:`matches`, for a bare tag (None meaning no tag data)."""
        if tag is None:
            return self.required.is_empty()
        if not self.denied.is_empty() and overlaps(tag, self.denied):
            return False
        if not self.required.is_empty() and not contained(self.required, tag):
            return False
        return all(self._predicate_holds(predicate, tag, warnings) for predicate in self.predicates)

    def _predicate_holds(
        self, predicate: CompiledPredicate, tag: Compound, warnings: list[str] | None
    ) -> bool:
        def resolve(name: str) -> TagNode:
            if name == ROOT_REFERENCE:
                return tag
            raise UnresolvedReferenceError(name)

        try:
            return as_boolean(predicate.part.evaluate(resolve))
        except DollarEvaluationError as exc:
            _warn(warnings, f"Failed to evaluate dollar predicate ({predicate.source}): {exc}")
            return False

    # -- preview ---------------------------------------------------------------

    def preview(self, warnings: list[str] | None = None) -> Compound:
        """Return an example instance tag satisfying ``required``.

        Computed once per condition (warnings are only reported by the call
        that builds it) and published under a lock. Each call returns a copy,
        so callers may modify the result freely.
        """
        if self._preview is None:
            with self._preview_lock:
                if self._preview is None:
                    self._preview = self._build_preview(warnings)
        return self._preview.copy()

    def _build_preview(self, warnings: list[str] | None) -> Compound:
        preview = self.required.copy()
        replacements: list[tuple[TagPath, int | float]] = []

        def collect(path: TagPath, key: str, node: TagNode) -> VisitAction:
            if isinstance(node, String) and node.value.startswith(DOLLAR_SIGIL):
                number_range = parse_dollar_range(node.value)
                if number_range is not None:
                    replacements.append(((*path, key), number_range.example()))
            return VisitAction.RECURSE

        visit(preview, collect)
        for path, value in replacements:
            # A failed leaf keeps its range text.
            try:
                put(preview, path, tag_from_json(value))
            except TagError as exc:
                _warn(
                    warnings,
                    f"Failed to set dollar range value {value} for key {join_path(path)} "
                    f"in preview tag {preview}: {exc}",
                )
        return preview

    # -- configuration documents -------------------------------------------------

    def to_config(self) -> dict[str, Any]:
        """Serialize to a configuration document, omitting empty fields."""
        document: dict[str, Any] = {}
        if not self.required.is_empty():
            document[REQUIRE_KEY] = tag_to_json(self.required)
        if not self.denied.is_empty():
            document[DENY_KEY] = tag_to_json(self.denied)
        if self.predicates:
            document[CONDITIONS_KEY] = [p.source for p in self.predicates]
        return document

    @classmethod
    def from_config(
        cls,
        document: Mapping[str, Any],
        registry: Registry | None = None,
        warnings: list[str] | None = None,
    ) -> Condition:
        """Build a condition from a configuration document.

        A document with none of ``require``/``deny``/``conditions``/``potion``
        is *flat*: the whole object is the required sub-structure.

        Raises:
            ConditionFormatError: A field has the wrong shape.
            ConditionSyntaxError: One or more predicates failed to compile.
        """
        if not isinstance(document, Mapping):
            raise ConditionFormatError("", "condition must be an object")

        if not any(key in document for key in DOCUMENT_KEYS):
            try:
                return cls(required=compound_from_json(document))
            except TagError as exc:
                raise ConditionFormatError("", str(exc)) from exc

        required = _compound_field(document, REQUIRE_KEY) if REQUIRE_KEY in document else None
        if POTION_KEY in document:
            potion = cls._resolve_potion(document[POTION_KEY], registry, warnings)
            if potion is not None:
                required = required if required is not None else Compound()
                required[POTION_TAG] = String(potion)
        denied = _compound_field(document, DENY_KEY) if DENY_KEY in document else None

        predicates: tuple[CompiledPredicate, ...] = ()
        if CONDITIONS_KEY in document:
            sources = document[CONDITIONS_KEY]
            if not isinstance(sources, list):
                raise ConditionFormatError(CONDITIONS_KEY, "must be an array")
            if not all(isinstance(source, str) for source in sources):
                raise ConditionFormatError(CONDITIONS_KEY, "must be an array of strings")
            predicates = compile_predicates(sources)

        return cls(required=required, denied=denied, predicates=predicates)

    @staticmethod
    def _resolve_potion(
        value: Any, registry: Registry | None, warnings: list[str] | None
    ) -> str | None:
        if not isinstance(value, str):
            raise ConditionFormatError(POTION_KEY, "must be a string")
        try:
            normalize_identifier(value)
        except ValueError as exc:
            raise ConditionFormatError(POTION_KEY, str(exc)) from exc
        # The registry applies its own default namespace to bare names.
        resolved = registry.resolve(value) if registry is not None else None
        if resolved is None:
            _warn(warnings, f"Unknown potion '{value}'")
        return resolved

    # -- binary wire form -----------------------------------------------------------

    def write(self, buffer: TagBuffer) -> None:
        """Write ``required`` then ``denied``. Predicates are not transferred."""
        buffer.write_tag(self.required)
        buffer.write_tag(self.denied)

    @classmethod
    def read(cls, buffer: TagBuffer) -> Condition:
        return cls(required=buffer.read_tag(), denied=buffer.read_tag())
