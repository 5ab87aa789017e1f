"""``shapemap`` console entry point."""

from __future__ import annotations

from pathlib import Path

import click

from shapemap import __version__
from shapemap.commands import register_commands
from shapemap.commands._context import AppContext
from shapemap.config.settings import MapperSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="shapemap")
@click.option("--json", "json_output", is_flag=True, help="Print reports as JSON.")
@click.option(
    "-v", "--verbose", is_flag=True, help="Show binding reasons, debug events and span timings."
)
@click.option("--log-json", is_flag=True, help="Write log events to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="shapemap.toml to read instead of searching parent directories.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """Inspect and benchmark compiled object-to-object mappings."""
    ctx.obj = AppContext(
        MapperSettings.load(
            config_path=config_path,
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
