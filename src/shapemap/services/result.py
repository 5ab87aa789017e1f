"""Report models returned by introspective operations.

Mapping calls return mapped objects directly; ``explain`` and the
benchmark harness return these frozen models, which the CLI renders as
Rich tables or JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from shapemap.domain.errors import MappingError, PropertyPlanError
from shapemap.domain.plan import BindingDecision, type_name


class PlanDiagnostic(BaseModel):
    """A recorded planning fault (the opt-in diagnostics channel)."""

    model_config = {"frozen": True}

    code: str
    message: str
    source: str | None = None
    target: str | None = None
    prop: str | None = None

    @classmethod
    def from_error(cls, exc: MappingError) -> PlanDiagnostic:
        if isinstance(exc, PropertyPlanError):
            return cls(
                code="PROPERTY_PLAN_ERROR",
                message=str(exc),
                source=type_name(exc.source) if exc.source is not None else None,
                target=type_name(exc.target) if exc.target is not None else None,
                prop=exc.prop,
            )
        return cls(code="CONFIGURATION_ERROR", message=str(exc))


class BindingRow(BaseModel):
    """Display form of one :class:`~shapemap.domain.plan.BindingDecision`."""

    model_config = {"frozen": True}

    target: str
    source: str | None = None
    kind: str
    nested: str | None = None
    reason: str = ""

    @classmethod
    def from_decision(cls, decision: BindingDecision) -> BindingRow:
        return cls(
            target=decision.target_name,
            source=decision.source_name,
            kind=str(decision.kind),
            nested=str(decision.nested) if decision.nested is not None else None,
            reason=decision.reason,
        )


class PlanReport(BaseModel):
    """Result of :meth:`Mapper.explain`.

    Attributes:
        ok: False when the pair was rejected (see ``error``).
        op: Always ``"explain"``.
        source: Source type name.
        target: Target type name.
        bindings: One row per assignable target property.
        diagnostics: Planning faults recorded for this pair.
        error: The rejection, when ``ok`` is False.
        meta: Optional telemetry (verbose mode).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str = "explain"
    source: str
    target: str
    bindings: list[BindingRow] = Field(default_factory=list)
    diagnostics: list[PlanDiagnostic] = Field(default_factory=list)
    error: PlanDiagnostic | None = None
    meta: dict[str, Any] | None = None


class BenchTiming(BaseModel):
    """Timings for one benchmark scenario."""

    model_config = {"frozen": True}

    scenario: str
    iterations: int
    cold_ms: float
    warm_ms: float

    @property
    def per_op_us(self) -> float:
        return self.warm_ms * 1000 / self.iterations if self.iterations else 0.0


class BenchReport(BaseModel):
    """Result of a benchmark run."""

    model_config = {"frozen": True}

    ok: bool = True
    op: str = "bench"
    timings: list[BenchTiming] = Field(default_factory=list)
    meta: dict[str, Any] | None = None
