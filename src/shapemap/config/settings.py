"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags or explicit ``Mapper`` construction
  2. Env vars     — ``SHAPEMAP_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``shapemap.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`shapemap.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from shapemap.config.discovery import find_config
from shapemap.config.models import BenchConfig, PlanConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``shapemap.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ValueError(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class MapperSettings(BaseSettings):
    """Settings for a :class:`~shapemap.services.mapper.Mapper` and the CLI.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        plan: Planner policy (diagnostics and unmatched shapes).
        bench: Benchmark harness defaults.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SHAPEMAP_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    plan: PlanConfig = Field(default_factory=PlanConfig)
    bench: BenchConfig = Field(default_factory=BenchConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        start: Path | None = None,
        **overrides: Any,
    ) -> MapperSettings:
        """Construct settings with TOML discovery.

        Uses the explicit *config_path* when given, otherwise walks up from
        *start* (default: cwd) looking for ``shapemap.toml``.  *overrides*
        take precedence over every other source.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
