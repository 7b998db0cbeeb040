"""Typed payload contracts for service boundaries.

Each service operation validates its ``data`` payload against one of these
models before returning, so renderer/CLI key regressions fail fast.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class MatchRow(BaseModel):
    """Outcome for one instance."""

    model_config = ConfigDict(extra="allow")

    index: int
    item: str
    matches: bool


class MatchResultData(BaseModel):
    """Payload contract for ``ConditionService.check``."""

    count: int
    matched: int
    results: list[MatchRow]


class ConditionData(BaseModel):
    """Payload contract for ``normalize`` and ``decode``."""

    condition: dict[str, Any]
    predicates: int


class PreviewData(BaseModel):
    """Payload contract for ``ConditionService.preview``."""

    preview: dict[str, Any]
    snbt: str


class ExpressionData(BaseModel):
    """Payload contract for ``parse_expression``."""

    source: str
    canonical: str
    ast: dict[str, Any]


class EvaluationData(BaseModel):
    """Payload contract for ``evaluate_expression``."""

    source: str
    value: Any = None
    result: bool


class WireData(BaseModel):
    """Payload contract for ``ConditionService.encode``."""

    hex: str
    size: int
    dropped_predicates: int
