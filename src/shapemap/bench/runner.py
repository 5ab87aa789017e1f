"""Time cold (compiling) and warm mapping of the benchmark scenarios."""

from __future__ import annotations

import time
from collections.abc import Iterable

from shapemap.bench.models import SCENARIOS, TestB
from shapemap.config.settings import MapperSettings
from shapemap.services.mapper import Mapper
from shapemap.services.result import BenchReport, BenchTiming
from shapemap.services.telemetry import trace_span, traced


def _time_scenario(
    name: str, settings: MapperSettings, iterations: int, list_size: int
) -> BenchTiming:
    model = SCENARIOS[name](list_size)
    mapper = Mapper(settings)

    start = time.perf_counter()
    mapper.map_object(model, TestB)
    cold_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    for _ in range(iterations):
        mapper.map_object(model, TestB)
    warm_ms = (time.perf_counter() - start) * 1000

    return BenchTiming(
        scenario=name,
        iterations=iterations,
        cold_ms=round(cold_ms, 3),
        warm_ms=round(warm_ms, 3),
    )


@traced
def run_bench(
    settings: MapperSettings,
    scenarios: Iterable[str] | None = None,
    *,
    iterations: int | None = None,
    list_size: int | None = None,
) -> BenchReport:
    """Run *scenarios* (default: all), each on a fresh :class:`Mapper`."""
    iterations = iterations or settings.bench.iterations
    list_size = settings.bench.list_size if list_size is None else list_size
    timings = []
    for name in scenarios or SCENARIOS:
        with trace_span(f"scenario {name}"):
            timings.append(_time_scenario(name, settings, iterations, list_size))
    return BenchReport(timings=timings)
