"""Command: time the mapper on the bundled benchmark models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shapemap.bench.models import SCENARIOS
from shapemap.commands._base import ShapemapCommand

if TYPE_CHECKING:
    from shapemap.commands._context import AppContext


@click.command(
    cls=ShapemapCommand,
    examples="""\
  shapemap bench
  shapemap bench --scenario nest --iterations 50000
  shapemap --json bench --scenario list --list-size 100""",
)
@click.option(
    "--scenario",
    "scenarios",
    multiple=True,
    type=click.Choice([*SCENARIOS, "all"]),
    help="Scenario to run (repeatable). Default: all.",
)
@click.option("-n", "--iterations", type=click.IntRange(min=1), default=None)
@click.option("--list-size", type=click.IntRange(min=0), default=None)
@click.pass_obj
def bench(
    app: AppContext,
    scenarios: tuple[str, ...],
    iterations: int | None,
    list_size: int | None,
) -> None:
    """Time cold and warm mapping of the benchmark scenarios."""
    from shapemap.bench.runner import run_bench

    selected = None if not scenarios or "all" in scenarios else list(scenarios)
    app.emit(run_bench(app.settings, selected, iterations=iterations, list_size=list_size))
