"""ConditionService — compile, match, preview and transcode conditions.

Every operation takes plain documents (as loaded from JSON/YAML) and
returns a ServiceResult. Engine exceptions are mapped to ServiceError;
non-fatal engine warnings are surfaced in ``ServiceResult.warnings``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from nbtmatch.domain.collaborators import Registry
from nbtmatch.domain.condition import Condition
from nbtmatch.domain.dollar import ROOT_REFERENCE, as_boolean, parse
from nbtmatch.domain.dollar.values import to_json
from nbtmatch.domain.errors import (
    ConditionFormatError,
    DollarEvaluationError,
    NbtMatchError,
    UnresolvedReferenceError,
    WireFormatError,
)
from nbtmatch.domain.items import ItemStack
from nbtmatch.domain.tags import TagNode, compound_from_json, tag_to_json, to_snbt
from nbtmatch.infrastructure.buffer import decode_condition, encode_condition
from nbtmatch.infrastructure.registry import potion_registry
from nbtmatch.services.contracts import (
    ConditionData,
    EvaluationData,
    ExpressionData,
    MatchResultData,
    PreviewData,
    WireData,
    dump_validated,
)
from nbtmatch.services.result import ServiceError, ServiceResult
from nbtmatch.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class ConditionService:
    """Operations over condition documents.

    Args:
        registry: Resolves the ``potion`` shorthand. Defaults to the vanilla
            potion set.
    """

    def __init__(self, registry: Registry | None = None) -> None:
        self._registry = registry if registry is not None else potion_registry()

    def _compile(self, document: Any, warnings: list[str]) -> Condition:
        with trace_span("compile") as span:
            condition = Condition.from_config(document, self._registry, warnings)
            if span:
                span.annotate("predicates", len(condition.predicates))
        return condition

    @traced
    def check(self, document: Any, instances: Any) -> ServiceResult:
        """Match every instance against the condition in *document*.

        *instances* is one item stack object or a list of them.
        """
        warnings: list[str] = []
        try:
            condition = self._compile(document, warnings)
            stacks = _load_instances(instances)
        except NbtMatchError as exc:
            return ServiceResult.failure("match", exc, warnings=warnings)

        rows: list[dict[str, Any]] = []
        with trace_span("match") as span:
            for index, stack in enumerate(stacks):
                rows.append(
                    {"index": index, "item": stack.item, "matches": condition.matches(stack, warnings)}
                )
            if span:
                span.annotate("instances", len(stacks))

        matched = sum(1 for row in rows if row["matches"])
        logger.debug("Matched %d of %d instances", matched, len(rows))
        data = {"count": len(rows), "matched": matched, "results": rows}
        return ServiceResult(
            ok=True, op="match", data=dump_validated(MatchResultData, data), warnings=warnings
        )

    @traced
    def preview(self, document: Any) -> ServiceResult:
        """Build the example instance tag for the condition in *document*."""
        warnings: list[str] = []
        try:
            condition = self._compile(document, warnings)
        except NbtMatchError as exc:
            return ServiceResult.failure("preview", exc, warnings=warnings)

        tag = condition.preview(warnings)
        data = {"preview": tag_to_json(tag), "snbt": to_snbt(tag)}
        return ServiceResult(
            ok=True, op="preview", data=dump_validated(PreviewData, data), warnings=warnings
        )

    @traced
    def normalize(self, document: Any) -> ServiceResult:
        """Compile *document* and serialize it back to its canonical form."""
        warnings: list[str] = []
        try:
            condition = self._compile(document, warnings)
        except NbtMatchError as exc:
            return ServiceResult.failure("normalize", exc, warnings=warnings)

        data = {"condition": condition.to_config(), "predicates": len(condition.predicates)}
        return ServiceResult(
            ok=True, op="normalize", data=dump_validated(ConditionData, data), warnings=warnings
        )

    @traced
    def parse_expression(self, text: str) -> ServiceResult:
        try:
            part = parse(text)
        except NbtMatchError as exc:
            return ServiceResult.failure("parse_expression", exc)

        data = {"source": text, "canonical": part.to_source(), "ast": part.describe()}
        return ServiceResult(
            ok=True, op="parse_expression", data=dump_validated(ExpressionData, data)
        )

    @traced
    def evaluate_expression(self, text: str, tag_document: Any) -> ServiceResult:
        """Evaluate one expression with ``$`` bound to *tag_document*."""
        op = "evaluate_expression"
        try:
            part = parse(text)
            if not isinstance(tag_document, Mapping):
                raise ConditionFormatError("tag", "must be an object")
            tag = compound_from_json(tag_document)
        except NbtMatchError as exc:
            return ServiceResult.failure(op, exc)

        def resolve(name: str) -> TagNode:
            if name == ROOT_REFERENCE:
                return tag
            raise UnresolvedReferenceError(name)

        try:
            value = part.evaluate(resolve)
        except DollarEvaluationError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="EVALUATION_FAILED", message=str(exc), detail={"source": text}),
            )

        data = {"source": text, "value": to_json(value), "result": as_boolean(value)}
        return ServiceResult(ok=True, op=op, data=dump_validated(EvaluationData, data))

    @traced
    def encode(self, document: Any) -> ServiceResult:
        """Encode the runtime state of a condition to its binary wire form."""
        warnings: list[str] = []
        try:
            condition = self._compile(document, warnings)
            blob = encode_condition(condition)
        except NbtMatchError as exc:
            return ServiceResult.failure("encode", exc, warnings=warnings)

        dropped = len(condition.predicates)
        if dropped:
            warnings.append(f"{dropped} dollar predicate(s) are not carried by the binary form")
        data = {"hex": blob.hex(), "size": len(blob), "dropped_predicates": dropped}
        return ServiceResult(
            ok=True, op="encode", data=dump_validated(WireData, data), warnings=warnings
        )

    @traced
    def decode(self, hex_text: str) -> ServiceResult:
        """Decode a hex-encoded wire blob back into a condition document."""
        try:
            try:
                blob = bytes.fromhex(hex_text.strip())
            except ValueError as exc:
                raise WireFormatError(f"Invalid hex input: {exc}") from exc
            condition = decode_condition(blob)
        except NbtMatchError as exc:
            return ServiceResult.failure("decode", exc)

        data = {"condition": condition.to_config(), "predicates": 0}
        return ServiceResult(ok=True, op="decode", data=dump_validated(ConditionData, data))


def _load_instances(instances: Any) -> list[ItemStack]:
    if isinstance(instances, Mapping):
        instances = [instances]
    if not isinstance(instances, Sequence) or isinstance(instances, str):
        raise ConditionFormatError("", "instances must be an object or an array of objects")
    return [ItemStack.from_config(entry) for entry in instances]
