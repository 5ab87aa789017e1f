"""Process-lifetime cache of compiled constructor and mutator callables.

Plans, constructors and mutators are three independent stores keyed by
:class:`~shapemap.domain.plan.TypePair`, each filled on first demand and
never evicted.  Reads of a populated entry take no lock; a miss takes the
cache lock, re-checks, and compiles at most once per entry.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from typing import TypeVar

import structlog

from shapemap.domain.plan import BindingDecision, TypePair
from shapemap.services.compiler import (
    Constructor,
    Mutator,
    compile_constructor,
    compile_mutator,
)
from shapemap.services.telemetry import trace_span

log = structlog.get_logger(__name__)

_V = TypeVar("_V")

Planner = Callable[[TypePair], list[BindingDecision]]


class CompiledFunctionCache:
    """Memoized ``TypePair -> callable`` stores.

    Args:
        planner: Builds the binding plan for a pair; its exceptions
            propagate and leave every store unchanged.
    """

    def __init__(self, planner: Planner) -> None:
        self._planner = planner
        self._plans: dict[TypePair, tuple[BindingDecision, ...]] = {}
        self._constructors: dict[TypePair, Constructor] = {}
        self._mutators: dict[TypePair, Mutator] = {}
        self._lock = threading.RLock()

    def _get_or_build(
        self,
        store: dict[TypePair, _V],
        pair: TypePair,
        kind: str,
        build: Callable[[], _V],
    ) -> _V:
        value = store.get(pair)
        if value is not None:
            return value
        with self._lock:
            value = store.get(pair)
            if value is None:
                with trace_span(f"{kind} {pair}") as span:
                    value = build()
                    if span is not None:
                        span.annotate("pair", str(pair))
                store[pair] = value
                log.debug("cache.compiled", pair=str(pair), kind=kind)
        return value

    def plan(self, pair: TypePair) -> tuple[BindingDecision, ...]:
        """The binding plan for *pair*, built once."""
        return self._get_or_build(
            self._plans, pair, "plan", lambda: tuple(self._planner(pair))
        )

    def constructor(self, pair: TypePair) -> Constructor:
        """The ``source -> target`` callable for *pair*, compiled on first use."""
        return self._get_or_build(
            self._constructors,
            pair,
            "constructor",
            lambda: compile_constructor(pair, self.plan(pair), self.constructor),
        )

    def mutator(self, pair: TypePair) -> Mutator:
        """The ``(source, target)`` updater for *pair*, compiled on first use."""
        return self._get_or_build(
            self._mutators,
            pair,
            "mutator",
            lambda: compile_mutator(pair, self.plan(pair), self.constructor),
        )

    def __contains__(self, pair: object) -> bool:
        return pair in self._constructors or pair in self._mutators

    def __len__(self) -> int:
        return len(self._constructors.keys() | self._mutators.keys())

    def __iter__(self) -> Iterator[TypePair]:
        return iter(list(self._constructors.keys() | self._mutators.keys()))

    def has_constructor(self, pair: TypePair) -> bool:
        return pair in self._constructors

    def has_mutator(self, pair: TypePair) -> bool:
        return pair in self._mutators

    def clear(self) -> None:
        """Drop every entry (test support; the mapping path never evicts)."""
        with self._lock:
            self._plans.clear()
            self._constructors.clear()
            self._mutators.clear()
