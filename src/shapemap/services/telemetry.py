"""Telemetry primitives — Span, @traced, trace_span.

Near-zero overhead when disabled (single ContextVar.get per call).
When enabled (verbose mode), builds hierarchical span trees around
planning and compilation and injects them into a report's ``meta``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog
from pydantic import BaseModel

log = structlog.get_logger("shapemap.telemetry")

# ── Context variables ────────────────────────────────────────────────

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


# ── Span ─────────────────────────────────────────────────────────────


@dataclass
class Span:
    """Hierarchical timing span."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 3),
        }
        if self.annotations:
            result["annotations"] = self.annotations
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


# ── trace_span context manager ───────────────────────────────────────


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Create a child span under the current span.

    Yields None when telemetry is disabled or no root span is active.
    """
    if not _verbose_enabled.get():
        yield None
        return

    parent = _current_span.get()
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent)
    parent.children.append(child)

    token = _current_span.set(child)
    try:
        yield child
    finally:
        child.end()
        _current_span.reset(token)


# ── @traced decorator ────────────────────────────────────────────────


def _inject_meta(result: BaseModel, span: Span) -> BaseModel:
    """Copy *result* with span data merged into its ``meta`` field."""
    existing_meta = getattr(result, "meta", None) or {}
    merged_meta = {**existing_meta, "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": merged_meta})


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Decorator: time a call and inject span data into the returned report.

    Applies to pydantic results declaring a ``meta`` field; other return
    values are passed through.  No-op when telemetry is disabled.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _current_span.set(span)
        try:
            result = func(*args, **kwargs)
        except Exception:
            span.end()
            log.debug("span.complete", span_name=span.name, ok=False)
            raise
        finally:
            _current_span.reset(token)

        span.end()
        if isinstance(result, BaseModel) and "meta" in type(result).model_fields:
            result = _inject_meta(result, span)  # type: ignore[assignment]
        log.debug(
            "span.complete",
            span_name=span.name,
            duration_ms=round(span.duration_ms, 3),
            ok=True,
            children=len(span.children),
        )
        return result

    return wrapper


# ── Public helpers ───────────────────────────────────────────────────


def enable_telemetry() -> None:
    """Enable verbose telemetry (called by the CLI when ``-v`` is given)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    """Disable verbose telemetry."""
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    """Get the current active span (for manual annotation)."""
    if not _verbose_enabled.get():
        return None
    return _current_span.get()
