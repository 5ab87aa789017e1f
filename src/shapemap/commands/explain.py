"""Command: show the binding plan for a type pair."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

import click

from shapemap.commands._base import ShapemapCommand

if TYPE_CHECKING:
    from shapemap.commands._context import AppContext


def load_type(ref: str) -> Any:
    """Import ``package.module:Class`` (nested attributes separated by dots)."""
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"expected MODULE:NAME, got {ref!r}"
        raise click.BadParameter(msg)
    try:
        obj: Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as exc:
        raise click.BadParameter(f"cannot load {ref!r}: {exc}") from exc
    return obj


@click.command(
    cls=ShapemapCommand,
    examples="""\
  shapemap explain shapemap.bench.models:TestA shapemap.bench.models:TestB
  shapemap -v explain myapp.domain:Order myapp.api:OrderDto
  shapemap --json explain myapp.domain:Order myapp.api:OrderDto""",
)
@click.argument("source")
@click.argument("target")
@click.pass_obj
def explain(app: AppContext, source: str, target: str) -> None:
    """Plan and compile SOURCE -> TARGET and print each property binding."""
    app.emit(app.mapper.explain(load_type(source), load_type(target)))
