"""Rich renderers for plan and benchmark reports.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
gets plain text back from :func:`render_report`; ``--json`` output
bypasses this module and dumps the model directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from shapemap.output.console import create_console, get_output, style_for_kind
from shapemap.services.result import BenchReport, PlanReport

if TYPE_CHECKING:
    from pydantic import BaseModel
    from rich.console import Console


# ── Public API ────────────────────────────────────────────────────────


def render_report(report: BaseModel, *, verbose: bool = False) -> str:
    """Render a report to a styled string via Rich."""
    console = create_console()
    if isinstance(report, PlanReport):
        _render_plan(report, console, verbose=verbose)
    elif isinstance(report, BenchReport):
        _render_bench(report, console, verbose=verbose)
    else:
        console.print(report.model_dump_json(indent=2))
    return get_output(console).rstrip("\n")


def render_json(report: BaseModel) -> str:
    return report.model_dump_json(indent=2)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, op: str, detail: str = "") -> None:
    label = Text("OK", style="map.ok")
    console.print(label, Text(f"  {op}", style="map.op"), Text(f"  {detail}", style="map.pair"))


def _render_meta(console: Console, meta: dict[str, Any] | None) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 10 else "dim"
    line = f"{prefix}[{style}]{duration:>8.3f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line, markup=True, highlight=False)
    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Plan renderer ─────────────────────────────────────────────────────


def _render_plan(report: PlanReport, console: Console, *, verbose: bool = False) -> None:
    if not report.ok:
        msg = report.error.message if report.error else "Unknown error"
        label = Text("ERROR", style="map.error")
        console.print(label, Text(f"  {report.op}", style="map.op"), f" - {msg}")
        return

    _status_line(console, report.op, f"{report.source} -> {report.target}")

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Target", style="map.prop", no_wrap=True)
    table.add_column("Source")
    table.add_column("Binding")
    table.add_column("Nested")
    if verbose:
        table.add_column("Reason", style="dim")

    for row in report.bindings:
        cells = [
            row.target,
            row.source or "",
            Text(row.kind, style=style_for_kind(row.kind)),
            row.nested or "",
        ]
        if verbose:
            cells.append(row.reason)
        table.add_row(*cells)
    console.print(table)

    for diagnostic in report.diagnostics:
        console.print(
            Text("  WARNING", style="map.warning"),
            f" {diagnostic.prop}: {diagnostic.message}",
        )
    if verbose:
        _render_meta(console, report.meta)


# ── Bench renderer ────────────────────────────────────────────────────


def _render_bench(report: BenchReport, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, report.op)

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Scenario", style="map.prop")
    table.add_column("Iterations", justify="right")
    table.add_column("Cold (ms)", justify="right")
    table.add_column("Warm (ms)", justify="right")
    table.add_column("Per op (us)", justify="right")
    for timing in report.timings:
        table.add_row(
            timing.scenario,
            str(timing.iterations),
            f"{timing.cold_ms:.3f}",
            f"{timing.warm_ms:.3f}",
            f"{timing.per_op_us:.3f}",
        )
    console.print(table)
    if verbose:
        _render_meta(console, report.meta)
