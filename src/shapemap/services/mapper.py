"""Public mapping facade.

:class:`Mapper` owns a :class:`~shapemap.services.cache.CompiledFunctionCache`
and the diagnostics recorded while planning.  The module-level helpers
delegate to a lazily created process-wide default mapper.

Usage::

    from shapemap import map_object, map_list, update

    dto = map_object(order, OrderDto)
    dtos = map_list(orders, OrderDto)
    update(dto, order)
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

import structlog

from shapemap.config.settings import MapperSettings
from shapemap.domain.errors import ConfigurationError, PropertyPlanError
from shapemap.domain.plan import (
    BindingDecision,
    TypePair,
    plan_bindings,
    type_name,
    validate_root,
)
from shapemap.domain.types import BindingKind
from shapemap.services.cache import CompiledFunctionCache
from shapemap.services.result import BindingRow, PlanDiagnostic, PlanReport
from shapemap.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)

_S = TypeVar("_S")
_T = TypeVar("_T")


class Mapper:
    """Maps instances between class pairs using cached compiled callables.

    Args:
        settings: Planner policy; defaults to env vars and code defaults.
    """

    def __init__(self, settings: MapperSettings | None = None) -> None:
        self.settings = settings or MapperSettings()
        self._diagnostics: list[PlanDiagnostic] = []
        self._cache = CompiledFunctionCache(self._plan)

    @property
    def cache(self) -> CompiledFunctionCache:
        return self._cache

    @property
    def diagnostics(self) -> tuple[PlanDiagnostic, ...]:
        """Planning faults recovered so far, oldest first."""
        return tuple(self._diagnostics)

    def _plan(self, pair: TypePair) -> list[BindingDecision]:
        policy = self.settings.plan
        with trace_span("plan") as span:
            decisions = plan_bindings(
                pair,
                on_property_error=policy.on_property_error,
                unmatched_reference=policy.unmatched_reference,
                report=self._record,
            )
            if span is not None:
                span.annotate("bindings", len(decisions))
        for decision in decisions:
            if decision.kind is BindingKind.SKIP and decision.reason.startswith("unmatched"):
                log.debug(
                    "plan.unmatched_reference",
                    pair=str(pair),
                    prop=decision.target_name,
                    reason=decision.reason,
                )
        return decisions

    def _record(self, exc: PropertyPlanError) -> None:
        diagnostic = PlanDiagnostic.from_error(exc)
        self._diagnostics.append(diagnostic)
        if self.settings.plan.log_diagnostics:
            log.warning(
                "plan.property_error",
                source=diagnostic.source,
                target=diagnostic.target,
                prop=diagnostic.prop,
                error=diagnostic.message,
            )

    # ── Single objects ───────────────────────────────────────────────

    def map_object(
        self,
        source: _S | None,
        target_type: type[_T],
        *,
        source_type: type[_S] | None = None,
        post_process: Callable[[_T], None] | None = None,
    ) -> _T | None:
        """Construct a new *target_type* instance from *source*.

        *source_type* defaults to ``type(source)``.  A ``None`` source maps
        to ``None`` and *post_process* is not called for it.

        Raises:
            ConfigurationError: If either type is a collection or not an
                object class.
        """
        if source_type is None:
            if source is None:
                validate_root(target_type)
                return None
            source_type = type(source)
        result = self._cache.constructor(TypePair(source_type, target_type))(source)
        if result is not None and post_process is not None:
            post_process(result)
        return result

    def update(
        self,
        source: Any,
        target: Any,
        *,
        source_type: type | None = None,
        target_type: type | None = None,
    ) -> None:
        """Copy *source* onto an existing *target*; no-op if either is None."""
        if source is None or target is None:
            return
        pair = TypePair(source_type or type(source), target_type or type(target))
        self._cache.mutator(pair)(source, target)

    # ── Sequences ────────────────────────────────────────────────────

    def map_iter(
        self,
        sources: Iterable[_S | None],
        target_type: type[_T],
        *,
        source_type: type[_S] | None = None,
    ) -> Iterator[_T | None]:
        """Lazily map every element of *sources*.

        With *source_type* the pair is compiled up front, so configuration
        errors surface at the call rather than on first iteration; without
        it each element is mapped by its own runtime type.
        """
        if source_type is None:
            validate_root(target_type)
            return (self.map_object(item, target_type) for item in sources)
        return map(self._cache.constructor(TypePair(source_type, target_type)), sources)

    def map_list(
        self,
        sources: Iterable[_S | None],
        target_type: type[_T],
        *,
        source_type: type[_S] | None = None,
    ) -> list[_T | None]:
        return list(self.map_iter(sources, target_type, source_type=source_type))

    def map_tuple(
        self,
        sources: Iterable[_S | None],
        target_type: type[_T],
        *,
        source_type: type[_S] | None = None,
    ) -> tuple[_T | None, ...]:
        return tuple(self.map_iter(sources, target_type, source_type=source_type))

    # ── Introspection ────────────────────────────────────────────────

    @traced
    def explain(self, source_type: type, target_type: type) -> PlanReport:
        """Plan and compile a pair, reporting each binding and any faults."""
        pair = TypePair(source_type, target_type)
        try:
            decisions = self._cache.plan(pair)
            self._cache.constructor(pair)
            self._cache.mutator(pair)
        except (ConfigurationError, PropertyPlanError) as exc:
            return PlanReport(
                ok=False,
                source=type_name(source_type),
                target=type_name(target_type),
                error=PlanDiagnostic.from_error(exc),
            )
        source, target = type_name(source_type), type_name(target_type)
        return PlanReport(
            ok=True,
            source=source,
            target=target,
            bindings=[BindingRow.from_decision(d) for d in decisions],
            diagnostics=[
                d for d in self._diagnostics if d.source == source and d.target == target
            ],
        )

    def clear(self) -> None:
        """Forget compiled pairs and diagnostics."""
        self._cache.clear()
        self._diagnostics.clear()


# ── Process-wide default ─────────────────────────────────────────────

_default: Mapper | None = None
_default_lock = threading.Lock()


def get_default_mapper() -> Mapper:
    """The shared mapper, created on first use from discovered settings."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Mapper(MapperSettings.load())
    return _default


def reset_default_mapper(mapper: Mapper | None = None) -> None:
    """Replace (or drop, when *mapper* is None) the shared mapper."""
    global _default
    with _default_lock:
        _default = mapper


def map_object(
    source: _S | None,
    target_type: type[_T],
    *,
    source_type: type[_S] | None = None,
    post_process: Callable[[_T], None] | None = None,
) -> _T | None:
    return get_default_mapper().map_object(
        source, target_type, source_type=source_type, post_process=post_process
    )


def map_iter(
    sources: Iterable[_S | None],
    target_type: type[_T],
    *,
    source_type: type[_S] | None = None,
) -> Iterator[_T | None]:
    return get_default_mapper().map_iter(sources, target_type, source_type=source_type)


def map_list(
    sources: Iterable[_S | None],
    target_type: type[_T],
    *,
    source_type: type[_S] | None = None,
) -> list[_T | None]:
    return get_default_mapper().map_list(sources, target_type, source_type=source_type)


def map_tuple(
    sources: Iterable[_S | None],
    target_type: type[_T],
    *,
    source_type: type[_S] | None = None,
) -> tuple[_T | None, ...]:
    return get_default_mapper().map_tuple(sources, target_type, source_type=source_type)


def update(
    source: Any,
    target: Any,
    *,
    source_type: type | None = None,
    target_type: type | None = None,
) -> None:
    get_default_mapper().update(
        source, target, source_type=source_type, target_type=target_type
    )
