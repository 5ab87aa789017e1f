"""Shared pytest fixtures for shapemap tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
import structlog
from click.testing import CliRunner

from shapemap.config.settings import MapperSettings
from shapemap.services.mapper import Mapper, reset_default_mapper
from shapemap.services.telemetry import _current_span, disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings() -> MapperSettings:
    """Code-default settings with diagnostic logging silenced."""
    return MapperSettings(plan={"log_diagnostics": False})


@pytest.fixture
def mapper(settings: MapperSettings) -> Mapper:
    """A fresh mapper with its own empty cache."""
    return Mapper(settings)


@pytest.fixture
def strict_mapper() -> Mapper:
    """Mapper that raises planning faults instead of recovering."""
    return Mapper(
        MapperSettings(plan={"on_property_error": "raise", "unmatched_reference": "error"})
    )


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep env-driven config, logging, the default mapper and telemetry per-test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    pkg_level = logging.getLogger("shapemap").level
    for name in ("SHAPEMAP_CONFIG", "SHAPEMAP_VERBOSE", "SHAPEMAP_JSON_OUTPUT"):
        monkeypatch.delenv(name, raising=False)
    reset_default_mapper()
    yield
    reset_default_mapper()
    disable_telemetry()
    _current_span.set(None)
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("shapemap").setLevel(pkg_level)
    structlog.reset_defaults()
