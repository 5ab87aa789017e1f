"""Binding plans — per-property mapping decisions for one type pair.

The planner inspects two :class:`~shapemap.domain.descriptors.TypeDescriptor`
objects and decides, for every assignable target property, how it is fed
from the source.  Plans are built once per :class:`TypePair` and never
recomputed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, get_args

from shapemap.domain.descriptors import (
    PropertyDescriptor,
    classify,
    describe,
    is_collection_type,
    is_scalar_type,
)
from shapemap.domain.errors import ConfigurationError, PropertyPlanError
from shapemap.domain.types import BindingKind, ValueKind

OnPropertyError = Literal["default", "raise"]
UnmatchedReference = Literal["skip", "error"]


def type_name(tp: Any) -> str:
    """Readable name for classes and typing hints alike."""
    if isinstance(tp, type) and not get_args(tp):
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


@dataclass(frozen=True)
class TypePair:
    """Ordered ``(source, target)`` pair; equal iff both classes are identical."""

    source: type
    target: type

    def __str__(self) -> str:
        return f"{type_name(self.source)} -> {type_name(self.target)}"


@dataclass(frozen=True)
class BindingDecision:
    """How one target property is populated.

    For ``NESTED_OBJECT`` *nested* is the property-level pair.  For
    ``NESTED_COLLECTION`` it is the element-level pair, or None when
    elements pass through unchanged (identical element types) or the
    target is a mapping.
    """

    kind: BindingKind
    target: PropertyDescriptor
    source: PropertyDescriptor | None = None
    nested: TypePair | None = None
    reason: str = ""

    @property
    def target_name(self) -> str:
        return self.target.name

    @property
    def source_name(self) -> str | None:
        return self.source.name if self.source is not None else None


def validate_root(tp: Any) -> None:
    """Reject root types that cannot go through the single-object entry points."""
    if is_collection_type(tp):
        msg = (
            f"{type_name(tp)} is a collection type; "
            "map collections with map_iter, map_list or map_tuple"
        )
        raise ConfigurationError(msg)
    if not isinstance(tp, type) or get_args(tp):
        msg = f"{type_name(tp)} is not a class"
        raise ConfigurationError(msg)
    if is_scalar_type(tp):
        msg = f"{type_name(tp)} is a scalar type, not an object type"
        raise ConfigurationError(msg)


def _compatible(source: Any, target: Any) -> bool:
    if source is target:
        return True
    if not isinstance(source, type) or not isinstance(target, type):
        return False
    if issubclass(source, target):
        return True
    return target in (float, complex) and source in (int, float) and source is not bool


def _element_pair(s: PropertyDescriptor, t: PropertyDescriptor) -> TypePair | None:
    if t.kind is ValueKind.MAPPING:
        return None
    s_type, s_kind, _, _ = classify(s.element)
    t_type, t_kind, _, _ = classify(t.element)
    if s_kind is ValueKind.OBJECT and t_kind is ValueKind.OBJECT:
        return TypePair(s_type, t_type)
    if s.element == t.element:
        return None
    if s_kind.is_collection or t_kind.is_collection:
        msg = "collections of collections are not mapped"
        raise PropertyPlanError(msg, prop=t.name)
    msg = f"no element conversion from {type_name(s.element)} to {type_name(t.element)}"
    raise PropertyPlanError(msg, prop=t.name)


def _decide(
    s: PropertyDescriptor,
    t: PropertyDescriptor,
    unmatched_reference: UnmatchedReference,
    pair: TypePair,
) -> BindingDecision:
    for prop in (s, t):
        if prop.error is not None:
            raise PropertyPlanError(prop.error, prop=t.name)

    if s.kind.is_reference and not s.same_type(t):
        if s.kind is ValueKind.OBJECT and t.kind is ValueKind.OBJECT:
            return BindingDecision(
                BindingKind.NESTED_OBJECT, t, s, nested=TypePair(s.type_, t.type_)
            )
        if s.kind.is_collection and t.kind.is_collection:
            return BindingDecision(
                BindingKind.NESTED_COLLECTION, t, s, nested=_element_pair(s, t)
            )
        reason = f"unmatched reference shapes {s.kind} -> {t.kind}"
        if unmatched_reference == "error":
            raise ConfigurationError(f"{pair}: property {t.name!r} has {reason}")
        return BindingDecision(BindingKind.SKIP, t, s, reason=reason)

    if s.kind is ValueKind.OPTIONAL and t.kind is ValueKind.SCALAR:
        if _compatible(s.type_, t.type_):
            return BindingDecision(BindingKind.NULLABLE_NARROW, t, s)
    elif s.kind is ValueKind.SCALAR and t.kind is ValueKind.OPTIONAL:
        if _compatible(s.type_, t.type_):
            return BindingDecision(BindingKind.NULLABLE_WIDEN, t, s)

    if s.same_type(t):
        return BindingDecision(BindingKind.DIRECT_COPY, t, s)

    return BindingDecision(
        BindingKind.SKIP,
        t,
        s,
        reason=f"type mismatch {type_name(s.hint)} -> {type_name(t.hint)}",
    )


def plan_bindings(
    pair: TypePair,
    *,
    on_property_error: OnPropertyError = "default",
    unmatched_reference: UnmatchedReference = "skip",
    report: Callable[[PropertyPlanError], None] | None = None,
) -> list[BindingDecision]:
    """Derive the ordered binding plan for *pair*.

    A failure while planning one property is passed to *report* and
    replaced by a ``DEFAULT`` decision, unless *on_property_error* is
    ``"raise"``.

    Raises:
        ConfigurationError: If either side is a collection or not an object
            class, or an unmatched reference shape is configured as an error.
    """
    validate_root(pair.source)
    validate_root(pair.target)

    source = describe(pair.source)
    target = describe(pair.target)

    decisions: list[BindingDecision] = []
    for t in target.assignable():
        s = source.get(t.name)
        if s is None or not s.readable:
            decisions.append(BindingDecision(BindingKind.SKIP, t, reason="no readable source"))
            continue
        if s.excluded:
            decisions.append(BindingDecision(BindingKind.SKIP, t, s, reason="not mapped"))
            continue
        try:
            decisions.append(_decide(s, t, unmatched_reference, pair))
        except ConfigurationError:
            raise
        except Exception as exc:  # noqa: BLE001
            err = exc if isinstance(exc, PropertyPlanError) else PropertyPlanError(str(exc))
            err.source, err.target, err.prop = pair.source, pair.target, t.name
            if on_property_error == "raise":
                if err is exc:
                    raise
                raise err from exc
            if report is not None:
                report(err)
            decisions.append(BindingDecision(BindingKind.DEFAULT, t, s, reason=str(err)))
    return decisions
