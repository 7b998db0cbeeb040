"""Span timing for service calls.

Off by default: every hook costs a single ContextVar lookup. ``--verbose``
switches it on, after which each ``@traced`` service method records a span
tree (``compile``, ``match``, ...) and attaches it to
``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from nbtmatch.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("nbtmatch_telemetry", default=False)
_current_span: ContextVar[Span | None] = ContextVar("nbtmatch_span", default=None)

_log = structlog.get_logger("nbtmatch.telemetry")


@dataclass
class Span:
    """One timed region; children are nested regions opened while it was active."""

    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started_ns: int = field(default_factory=time.perf_counter_ns)
    ended_ns: int | None = None

    @property
    def duration_ms(self) -> float:
        if self.ended_ns is None:
            return 0.0
        return (self.ended_ns - self.started_ns) / 1_000_000

    def end(self) -> None:
        self.ended_ns = time.perf_counter_ns()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        view: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            view["annotations"] = dict(self.annotations)
        if self.children:
            view["children"] = [child.to_dict() for child in self.children]
        return view


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    """Make *span* current until the block exits, then stop its clock."""
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a nested region of the current traced call.

    Yields None when telemetry is off or no traced call is running, so
    callers guard ``annotate`` with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    child = Span(name=name)
    parent.children.append(child)
    with _activate(child):
        yield child


P = ParamSpec("P")
R = TypeVar("R")


def traced(func: Callable[P, R]) -> Callable[P, R]:
    """Record a root span around a service method.

    A returned ServiceResult gets the span tree merged into its ``meta``.
    Exceptions still close and log the span before propagating.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        ok = False
        try:
            with _activate(span):
                result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            _log.debug(
                "span.complete",
                span_name=span.name,
                duration_ms=round(span.duration_ms, 2),
                ok=ok,
                children=len(span.children),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span recording on for the current context."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    return _current_span.get() if _enabled.get() else None
