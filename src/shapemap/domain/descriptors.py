"""Static property shapes of mappable classes.

A :class:`TypeDescriptor` is derived once per class from its annotations
and ``property`` objects, never from instance data.  Every property type is
classified into a :class:`~shapemap.domain.types.ValueKind` that the
binding planner dispatches on.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import decimal
import fractions
import functools
import inspect
import pathlib
import sys
import types
import typing
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from shapemap.domain.types import ValueKind


class _NotMapped:
    """Marker type for :data:`NOT_MAPPED`."""

    def __repr__(self) -> str:
        return "NOT_MAPPED"


#: ``Annotated[int, NOT_MAPPED]`` keeps a source property out of every plan.
NOT_MAPPED = _NotMapped()

#: Dataclass field metadata key with the same effect as :data:`NOT_MAPPED`.
NOT_MAPPED_KEY = "not_mapped"

SCALAR_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    decimal.Decimal,
    fractions.Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    pathlib.PurePath,
    Enum,
)


# ── Descriptors ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class PropertyDescriptor:
    """One public property of a class.

    Attributes:
        name: Attribute name.
        hint: Declared annotation with ``Annotated`` metadata stripped.
        type_: The hint without its ``None`` member (the comparable type).
        kind: Shape classification of ``type_``.
        nullable: Whether the declaration admits ``None``.
        element: Element hint for arrays, containers and mappings.
        readable: Whether the value can be read from an instance.
        writable: Whether the value can be assigned after construction.
        initable: Whether the value is passed as a constructor keyword.
        required: An init keyword the constructor cannot do without.
        excluded: Carries the not-mapped marker.
        error: Why the annotation could not be resolved, if it could not.
    """

    name: str
    hint: Any
    type_: Any
    kind: ValueKind
    nullable: bool = False
    element: Any = None
    readable: bool = True
    writable: bool = True
    initable: bool = False
    required: bool = False
    excluded: bool = False
    error: str | None = None

    def same_type(self, other: PropertyDescriptor) -> bool:
        """Nominal type identity; nullability counts only for scalars."""
        if self.kind.is_reference and other.kind.is_reference:
            return bool(self.type_ == other.type_)
        return self.kind == other.kind and bool(self.type_ == other.type_)


@dataclass(frozen=True)
class TypeDescriptor:
    """Reflected shape of a class, immutable once built."""

    cls: type
    properties: dict[str, PropertyDescriptor] = field(default_factory=dict)
    keyword_init: bool = False

    def get(self, name: str) -> PropertyDescriptor | None:
        return self.properties.get(name)

    def assignable(self) -> list[PropertyDescriptor]:
        """Properties a target instance can receive, in declaration order."""
        return [p for p in self.properties.values() if p.writable or p.initable]


# ── Classification ───────────────────────────────────────────────────


def is_scalar_type(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, SCALAR_TYPES)


def is_model_class(tp: Any) -> bool:
    """Dataclasses and pydantic models are objects even when they define ``__iter__``."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or isinstance(getattr(tp, "model_fields", None), dict)


def _split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        return hint.__origin__, tuple(hint.__metadata__)
    return hint, ()


def _split_optional(hint: Any) -> tuple[Any, bool]:
    """Strip ``None`` from a two-member union; other unions stay as-is."""
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = get_args(hint)
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return members[0], True
    return hint, False


def classify(hint: Any) -> tuple[Any, ValueKind, bool, Any]:
    """Return ``(type_, kind, nullable, element)`` for a resolved hint."""
    hint, _ = _split_annotated(hint)
    base, nullable = _split_optional(hint)
    base, _ = _split_annotated(base)

    origin = get_origin(base) or base
    args = get_args(base)

    if base is Any or not isinstance(origin, type) or origin is type or origin is type(None):
        return base, ValueKind.OTHER, nullable, None

    if is_scalar_type(origin):
        kind = ValueKind.OPTIONAL if nullable else ValueKind.SCALAR
        return base, kind, nullable, None

    if origin is tuple:
        if not args:
            return base, ValueKind.ARRAY, nullable, Any
        if len(args) == 2 and args[1] is Ellipsis:
            return base, ValueKind.ARRAY, nullable, args[0]
        return base, ValueKind.OTHER, nullable, None

    if is_model_class(origin):
        if args:
            return base, ValueKind.OTHER, nullable, None
        return base, ValueKind.OBJECT, nullable, None

    if issubclass(origin, collections.abc.Mapping):
        return base, ValueKind.MAPPING, nullable, args[0] if args else Any

    if issubclass(origin, collections.abc.Iterable):
        if len(args) > 1:
            return base, ValueKind.OTHER, nullable, None
        return base, ValueKind.CONTAINER, nullable, args[0] if args else Any

    if args:
        # Parameterized user generics are neither plain objects nor collections.
        return base, ValueKind.OTHER, nullable, None

    return base, ValueKind.OBJECT, nullable, None


def is_collection_type(tp: Any) -> bool:
    """Whether *tp* is iterable-shaped (str and bytes excluded)."""
    if isinstance(tp, type) and not get_args(tp):
        if is_scalar_type(tp) or is_model_class(tp):
            return False
        return issubclass(tp, collections.abc.Iterable)
    return classify(tp)[1].is_collection


def container_origin(tp: Any) -> Any:
    """Runtime class behind a (possibly parameterized) container hint."""
    return get_origin(tp) or tp


def default_value(prop: PropertyDescriptor) -> Any:
    """Zero value of a non-nullable scalar property; ``None`` otherwise."""
    if prop.kind is not ValueKind.SCALAR:
        return None
    try:
        return prop.type_()
    except Exception:  # noqa: BLE001
        # no zero-argument form (date, UUID)
        return None


# ── Introspection ────────────────────────────────────────────────────


def _has_not_mapped(hint: Any) -> bool:
    hint, metadata = _split_annotated(hint)
    if any(m is NOT_MAPPED for m in metadata):
        return True
    inner, nullable = _split_optional(hint)
    if nullable:
        _, metadata = _split_annotated(inner)
        return any(m is NOT_MAPPED for m in metadata)
    return False


def _library_base(base: type) -> bool:
    return base is object or base.__module__.split(".")[0] == "pydantic"


def _module_globals(cls: type) -> dict[str, Any]:
    module = sys.modules.get(cls.__module__)
    return dict(vars(module)) if module is not None else {}


def _evaluate(annotation: str, globalns: dict[str, Any], localns: dict[str, Any]) -> Any:
    holder = types.SimpleNamespace(
        __annotations__={"hint": typing.ForwardRef(annotation, is_class=True)}
    )
    return typing.get_type_hints(
        holder, globalns=globalns, localns=localns, include_extras=True
    )["hint"]


def _resolve_annotations(cls: type) -> tuple[dict[str, Any], dict[str, str]]:
    """Resolve annotations across the MRO.

    Falls back to one-by-one evaluation when the whole-class resolution
    fails, so that a single unresolvable annotation only affects itself.
    """
    localns = {cls.__name__: cls}
    try:
        return typing.get_type_hints(cls, localns=localns, include_extras=True), {}
    except Exception:  # noqa: BLE001
        pass

    hints: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for base in reversed(cls.__mro__):
        if _library_base(base):
            continue
        globalns = _module_globals(base)
        try:
            raw = inspect.get_annotations(base)
        except Exception as exc:  # noqa: BLE001
            errors.update(
                {name: str(exc) for name in getattr(base, "__annotations__", {})}
            )
            continue
        for name, value in raw.items():
            if isinstance(value, str):
                try:
                    value = _evaluate(value, globalns, {**vars(base), **localns})
                except Exception as exc:  # noqa: BLE001
                    hints[name] = Any
                    errors[name] = f"unresolvable annotation {value!r}: {exc}"
                    continue
            hints[name] = value
            errors.pop(name, None)
    return hints, errors


def _property_hint(cls: type, prop: property) -> tuple[Any, str | None]:
    if prop.fget is None:
        return Any, None
    try:
        hints = typing.get_type_hints(
            prop.fget,
            globalns=_module_globals(cls),
            localns={cls.__name__: cls},
            include_extras=True,
        )
    except Exception as exc:  # noqa: BLE001
        return Any, f"unresolvable return annotation: {exc}"
    return hints.get("return", Any), None


def _frozen(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return True
    config = getattr(cls, "model_config", None)
    return isinstance(config, dict) and bool(config.get("frozen"))


def _init_fields(cls: type) -> tuple[bool, set[str], set[str], set[str]]:
    """Return ``(keyword_init, init_names, required_names, excluded_names)``."""
    if dataclasses.is_dataclass(cls):
        fields = dataclasses.fields(cls)
        return (
            True,
            {f.name for f in fields if f.init},
            {
                f.name
                for f in fields
                if f.init
                and f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING
            },
            {f.name for f in fields if f.metadata.get(NOT_MAPPED_KEY)},
        )
    model_fields = getattr(cls, "model_fields", None)
    if isinstance(model_fields, dict):
        required = {name for name, info in model_fields.items() if info.is_required()}
        return True, set(model_fields), required, set()
    return False, set(), set(), set()


def _descriptor(
    name: str,
    hint: Any,
    *,
    readable: bool = True,
    writable: bool = True,
    initable: bool = False,
    required: bool = False,
    excluded: bool = False,
    error: str | None = None,
) -> PropertyDescriptor:
    type_, kind, nullable, element = classify(hint)
    if error is not None:
        kind = ValueKind.OTHER
    return PropertyDescriptor(
        name=name,
        hint=_split_annotated(hint)[0],
        type_=type_,
        kind=kind,
        nullable=nullable,
        element=element,
        readable=readable,
        writable=writable,
        initable=initable,
        required=required,
        excluded=excluded or _has_not_mapped(hint),
        error=error,
    )


@functools.cache
def describe(cls: type) -> TypeDescriptor:
    """Build the :class:`TypeDescriptor` for *cls* (memoized per class)."""
    hints, errors = _resolve_annotations(cls)
    keyword_init, init_names, required_names, excluded_names = _init_fields(cls)
    frozen = _frozen(cls)

    props: dict[str, PropertyDescriptor] = {}
    for name, hint in hints.items():
        if name.startswith("_") or get_origin(hint) is ClassVar or hint is ClassVar:
            continue
        if isinstance(hint, dataclasses.InitVar):
            continue
        props[name] = _descriptor(
            name,
            hint,
            writable=not frozen,
            initable=name in init_names,
            required=name in required_names,
            excluded=name in excluded_names,
            error=errors.get(name),
        )

    for base in reversed(cls.__mro__):
        if _library_base(base):
            continue
        for name, attr in vars(base).items():
            if name.startswith("_") or not isinstance(attr, property):
                continue
            hint, error = _property_hint(cls, attr)
            props[name] = _descriptor(
                name,
                hint,
                readable=attr.fget is not None,
                writable=attr.fset is not None,
                error=error,
            )

    return TypeDescriptor(cls=cls, properties=props, keyword_init=keyword_init)
