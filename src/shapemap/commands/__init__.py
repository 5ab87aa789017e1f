"""Subcommand modules for shapemap.

Provides register_commands() which uses deferred imports to keep
``shapemap --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from shapemap.commands.bench import bench
    from shapemap.commands.explain import explain

    cli.add_command(explain)
    cli.add_command(bench)
