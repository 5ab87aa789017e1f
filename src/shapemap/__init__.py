"""shapemap — cached, plan-driven mapping between parallel class families."""

from __future__ import annotations

from shapemap.domain.descriptors import NOT_MAPPED
from shapemap.domain.errors import ConfigurationError, MappingError, PropertyPlanError
from shapemap.services.mapper import (
    Mapper,
    get_default_mapper,
    map_iter,
    map_list,
    map_object,
    map_tuple,
    reset_default_mapper,
    update,
)

__version__ = "0.3.0"

__all__ = [
    "NOT_MAPPED",
    "ConfigurationError",
    "Mapper",
    "MappingError",
    "PropertyPlanError",
    "__version__",
    "get_default_mapper",
    "map_iter",
    "map_list",
    "map_object",
    "map_tuple",
    "reset_default_mapper",
    "update",
]
