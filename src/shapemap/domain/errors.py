"""Mapping exceptions.

``ConfigurationError`` is the only error a mapping call surfaces.
``PropertyPlanError`` is raised inside the planner for a single property
and converted to a diagnostic unless strict planning is configured.
"""

from __future__ import annotations


class MappingError(Exception):
    """Base class for all shapemap errors."""


class ConfigurationError(MappingError, TypeError):
    """A type pair cannot be mapped through the single-object entry points."""


class PropertyPlanError(MappingError):
    """Planning one property of a type pair failed."""

    def __init__(
        self,
        message: str,
        *,
        source: type | None = None,
        target: type | None = None,
        prop: str | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.target = target
        self.prop = prop
