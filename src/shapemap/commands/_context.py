"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides the configured :class:`Mapper` and
centralized report emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shapemap.output.renderers import render_json, render_report

if TYPE_CHECKING:
    from pydantic import BaseModel

    from shapemap.config.settings import MapperSettings
    from shapemap.services.mapper import Mapper


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: MapperSettings) -> None:
        self.settings = settings
        self._mapper: Mapper | None = None

        from shapemap.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from shapemap.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def mapper(self) -> Mapper:
        """The mapper instance (created lazily on first access)."""
        if self._mapper is None:
            from shapemap.services.mapper import Mapper

            self._mapper = Mapper(self.settings)
        return self._mapper

    def emit(self, report: BaseModel) -> None:
        """Format and output a report with correct exit semantics.

        * Success: writes to stdout, returns normally.
        * Failure (``report.ok`` is False): writes to stderr, exits with code 1.
        """
        if self.settings.json_output:
            output = render_json(report)
        else:
            output = render_report(report, verbose=self.settings.verbose)
        if getattr(report, "ok", True):
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
