"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, shapemap.toml only contains overrides.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- shapemap.toml sections ---


class PlanConfig(BaseModel):
    """[plan] section."""

    model_config = {"frozen": True}

    on_property_error: Literal["default", "raise"] = "default"
    unmatched_reference: Literal["skip", "error"] = "skip"
    log_diagnostics: bool = True


class BenchConfig(BaseModel):
    """[bench] section."""

    model_config = {"frozen": True}

    iterations: int = Field(default=10_000, ge=1)
    list_size: int = Field(default=10, ge=0)

