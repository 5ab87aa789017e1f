"""Classification enums for property shapes and binding decisions."""

from __future__ import annotations

from enum import StrEnum


class ValueKind(StrEnum):
    """Shape of a single property type."""

    SCALAR = "scalar"
    OPTIONAL = "optional"
    OBJECT = "object"
    ARRAY = "array"
    CONTAINER = "container"
    MAPPING = "mapping"
    OTHER = "other"

    @property
    def is_reference(self) -> bool:
        return self not in (ValueKind.SCALAR, ValueKind.OPTIONAL)

    @property
    def is_collection(self) -> bool:
        return self in (ValueKind.ARRAY, ValueKind.CONTAINER, ValueKind.MAPPING)


class BindingKind(StrEnum):
    """How one target property is populated from the source."""

    DIRECT_COPY = "direct_copy"
    NULLABLE_NARROW = "nullable_narrow"
    NULLABLE_WIDEN = "nullable_widen"
    NESTED_OBJECT = "nested_object"
    NESTED_COLLECTION = "nested_collection"
    DEFAULT = "default"
    SKIP = "skip"
