"""Turn binding plans into constructor and mutator callables.

Each decision is compiled once into a small closure; the resulting
callables interpret nothing at call time beyond running those closures
in plan order.  Nested pairs are bound lazily through
:class:`NestedResolver`, so compiling a pair never compiles its nested
pairs and self-referential type graphs compile without recursion.
"""

from __future__ import annotations

import collections
import collections.abc
import inspect
import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from shapemap.domain.descriptors import (
    PropertyDescriptor,
    container_origin,
    default_value,
    describe,
)
from shapemap.domain.plan import BindingDecision, TypePair
from shapemap.domain.types import BindingKind, ValueKind

Constructor = Callable[[Any], Any]
Mutator = Callable[[Any, Any], None]
Reader = Callable[[Any], Any]
Writer = Callable[[Any, Any], None]

_MISSING = object()

_LIST_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_SET_ORIGINS = (set, collections.abc.Set, collections.abc.MutableSet)


class NestedResolver:
    """Constructor for a nested pair, fetched from the cache on first call."""

    __slots__ = ("_fn", "_resolve", "pair")

    def __init__(self, pair: TypePair, resolve: Callable[[TypePair], Constructor]) -> None:
        self.pair = pair
        self._resolve = resolve
        self._fn: Constructor | None = None

    def __call__(self, value: Any) -> Any:
        fn = self._fn
        if fn is None:
            fn = self._fn = self._resolve(self.pair)
        return fn(value)


# ── Value readers ────────────────────────────────────────────────────


def _converter(source: Any, target: Any) -> Callable[[Any], Any]:
    if source is target:
        return lambda v: v
    return lambda v: v if v is None else target(v)


def collection_builder(target: PropertyDescriptor) -> Callable[[Iterator[Any]], Any]:
    """Adapt a lazily mapped element stream to the target's declared shape."""
    if target.kind is ValueKind.ARRAY:
        return tuple
    origin = container_origin(target.type_)
    if origin in (collections.abc.Iterator, collections.abc.Generator):
        return lambda elements: elements
    if origin in _LIST_ORIGINS:
        return list
    if origin in _SET_ORIGINS:
        return set
    if origin is frozenset:
        return frozenset
    if origin is collections.deque:
        return collections.deque
    if inspect.isabstract(origin):
        return list
    return origin


def _collection_reader(
    decision: BindingDecision, resolve: Callable[[TypePair], Constructor]
) -> Reader:
    get = operator.attrgetter(decision.source_name)
    if decision.target.kind is ValueKind.MAPPING:
        return lambda src: None

    build = collection_builder(decision.target)
    if decision.nested is None:

        def read_passthrough(src: Any) -> Any:
            value = get(src)
            return None if value is None else build(iter(value))

        return read_passthrough

    element = NestedResolver(decision.nested, resolve)

    def read_mapped(src: Any) -> Any:
        value = get(src)
        return None if value is None else build(map(element, value))

    return read_mapped


def _reader(decision: BindingDecision, resolve: Callable[[TypePair], Constructor]) -> Reader:
    """Compile the ``source -> new target value`` step of one decision."""
    target = decision.target
    if decision.kind is BindingKind.DEFAULT:
        default = default_value(target)
        return lambda src: default

    source = decision.source
    assert source is not None
    get = operator.attrgetter(source.name)

    if decision.kind is BindingKind.DIRECT_COPY:
        return get

    if decision.kind is BindingKind.NULLABLE_NARROW:
        default = default_value(target)
        convert = _converter(source.type_, target.type_)

        def narrow(src: Any) -> Any:
            value = get(src)
            return default if value is None else convert(value)

        return narrow

    if decision.kind is BindingKind.NULLABLE_WIDEN:
        convert = _converter(source.type_, target.type_)
        return lambda src: convert(get(src))

    if decision.kind is BindingKind.NESTED_OBJECT:
        assert decision.nested is not None
        nested = NestedResolver(decision.nested, resolve)

        def read_nested(src: Any) -> Any:
            value = get(src)
            return None if value is None else nested(value)

        return read_nested

    if decision.kind is BindingKind.NESTED_COLLECTION:
        return _collection_reader(decision, resolve)

    msg = f"no reader for {decision.kind}"
    raise ValueError(msg)


# ── Constructing compiler ────────────────────────────────────────────


def compile_constructor(
    pair: TypePair,
    decisions: Iterable[BindingDecision],
    resolve: Callable[[TypePair], Constructor],
) -> Constructor:
    """Build ``construct(source) -> target | None`` for *pair*.

    Keyword-initialised classes (dataclasses, pydantic models) receive
    their init fields as constructor arguments; every other assignment
    happens through ``setattr`` on the freshly constructed instance.  A
    required init field with no source is passed its default value.
    """
    cls = pair.target
    keyword_init = describe(cls).keyword_init
    init_steps: list[tuple[str, Reader]] = []
    set_steps: list[tuple[str, Reader]] = []
    for decision in decisions:
        if decision.kind is BindingKind.SKIP:
            if keyword_init and decision.target.required:
                default = default_value(decision.target)
                init_steps.append((decision.target_name, lambda src, d=default: d))
            continue
        step = (decision.target_name, _reader(decision, resolve))
        if keyword_init and decision.target.initable:
            init_steps.append(step)
        else:
            set_steps.append(step)

    def construct(source: Any) -> Any:
        if source is None:
            return None
        obj = cls(**{name: read(source) for name, read in init_steps})
        for name, read in set_steps:
            setattr(obj, name, read(source))
        return obj

    construct.__qualname__ = f"construct[{pair}]"
    return construct


# ── Mutating compiler ────────────────────────────────────────────────


def _writer(decision: BindingDecision, resolve: Callable[[TypePair], Constructor]) -> Writer:
    """Compile the ``(source, target) -> None`` step of one decision."""
    name = decision.target_name
    read = _reader(decision, resolve)

    if decision.kind is BindingKind.DIRECT_COPY:

        def copy_changed(src: Any, tgt: Any) -> None:
            value = read(src)
            if getattr(tgt, name, _MISSING) != value:
                setattr(tgt, name, value)

        return copy_changed

    if decision.kind is BindingKind.NULLABLE_NARROW:
        source = decision.source
        assert source is not None
        get = operator.attrgetter(source.name)
        default = default_value(decision.target)

        def narrow_changed(src: Any, tgt: Any) -> None:
            if get(src) is None:
                setattr(tgt, name, default)
                return
            value = read(src)
            if getattr(tgt, name, _MISSING) != value:
                setattr(tgt, name, value)

        return narrow_changed

    if decision.kind is BindingKind.NULLABLE_WIDEN:

        def widen_changed(src: Any, tgt: Any) -> None:
            value = read(src)
            current = getattr(tgt, name, None)
            if current is None or current != value:
                setattr(tgt, name, value)

        return widen_changed

    def assign(src: Any, tgt: Any) -> None:
        setattr(tgt, name, read(src))

    return assign


def compile_mutator(
    pair: TypePair,
    decisions: Iterable[BindingDecision],
    resolve: Callable[[TypePair], Constructor],
) -> Mutator:
    """Build ``update(source, target) -> None`` for *pair*.

    Scalar writes are change-guarded; nested objects and collections are
    always rebuilt and reassigned.  Properties that cannot be assigned
    after construction are left untouched.
    """
    steps = [
        _writer(decision, resolve)
        for decision in decisions
        if decision.kind is not BindingKind.SKIP and decision.target.writable
    ]

    def update(source: Any, target: Any) -> None:
        if source is None or target is None:
            return
        for step in steps:
            step(source, target)

    update.__qualname__ = f"update[{pair}]"
    return update
