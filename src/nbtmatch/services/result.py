"""ServiceResult: what every ConditionService operation returns.

Engine exceptions never escape a service method. Each one is mapped to a
``ServiceError`` whose ``code`` is stable across releases, so the CLI and
scripts reading ``--json`` can branch on it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from nbtmatch.domain.errors import (
    ConditionFormatError,
    ConditionSyntaxError,
    DocumentError,
    DollarSyntaxError,
    NbtMatchError,
    RangeError,
    TagError,
    WireFormatError,
)

# Most specific first: ``error_code`` returns the first isinstance match.
ERROR_CODES: tuple[tuple[type[NbtMatchError], str], ...] = (
    (DocumentError, "INVALID_DOCUMENT"),
    (ConditionSyntaxError, "INVALID_CONDITION"),
    (ConditionFormatError, "INVALID_CONDITION"),
    (DollarSyntaxError, "INVALID_EXPRESSION"),
    (RangeError, "INVALID_EXPRESSION"),
    (WireFormatError, "INVALID_WIRE"),
    (TagError, "INVALID_TAG"),
)


def error_code(exc: NbtMatchError) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ERROR"


class ServiceError(BaseModel):
    """Why an operation failed: a stable ``code`` plus a readable message."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: NbtMatchError, *, code: str | None = None) -> ServiceError:
        """Map an engine exception onto a structured error."""
        detail: dict[str, Any] = {}
        if isinstance(exc, ConditionFormatError) and exc.field:
            detail["field"] = exc.field
        elif isinstance(exc, ConditionSyntaxError):
            detail["failures"] = [
                {"index": f.index, "source": f.source, "message": f.message} for f in exc.failures
            ]
        elif isinstance(exc, DollarSyntaxError):
            detail["text"] = exc.text
            detail["position"] = exc.position
        elif isinstance(exc, RangeError):
            detail["text"] = exc.text
        return cls(code=code or error_code(exc), message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: False when ``error`` is set.
        op: Operation name, e.g. ``"match"`` or ``"encode"``.
        data: Payload validated by the matching model in ``contracts``.
        warnings: Problems that did not stop the operation, such as a
            predicate that failed to evaluate or an unknown potion.
        error: Set on failure.
        meta: Telemetry spans when running with ``--verbose``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls, op: str, exc: NbtMatchError, *, warnings: list[str] | None = None
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError.from_exception(exc),
            warnings=list(warnings or []),
        )
