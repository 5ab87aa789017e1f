"""Tests for type descriptors and property classification."""

from __future__ import annotations

import collections.abc
from collections import deque
from datetime import date
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

import pytest

from shapemap.domain.descriptors import (
    classify,
    default_value,
    describe,
    is_collection_type,
)
from shapemap.domain.types import ValueKind
from tests.models import (
    Account,
    AccountModel,
    Address,
    BrokenTarget,
    ChildModel,
    ElemA,
    FrozenAccountView,
    Node,
    Person,
    ReqModel,
    ReqView,
    TrackedReading,
)


class Color(Enum):
    RED = "red"


class TestClassify:
    @pytest.mark.parametrize(
        ("hint", "kind"),
        [
            (int, ValueKind.SCALAR),
            (str, ValueKind.SCALAR),
            (Color, ValueKind.SCALAR),
            (int | None, ValueKind.OPTIONAL),
            (Address, ValueKind.OBJECT),
            (Address | None, ValueKind.OBJECT),
            (ElemA, ValueKind.OBJECT),
            (AccountModel, ValueKind.OBJECT),
            (ChildModel | None, ValueKind.OBJECT),
            (list[ChildModel], ValueKind.CONTAINER),
            (tuple[Address, ...], ValueKind.ARRAY),
            (list[Address], ValueKind.CONTAINER),
            (collections.abc.Sequence[int], ValueKind.CONTAINER),
            (deque[int], ValueKind.CONTAINER),
            (dict[str, Address], ValueKind.MAPPING),
            (tuple[int, str], ValueKind.OTHER),
            (int | str, ValueKind.OTHER),
            (Any, ValueKind.OTHER),
        ],
    )
    def test_kinds(self, hint: Any, kind: ValueKind) -> None:
        assert classify(hint)[1] is kind

    def test_optional_reference_is_nullable(self) -> None:
        type_, kind, nullable, _ = classify(Address | None)
        assert type_ is Address
        assert kind is ValueKind.OBJECT
        assert nullable is True

    def test_element_of_array_and_container(self) -> None:
        assert classify(tuple[Address, ...])[3] is Address
        assert classify(list[int])[3] is int
        assert classify(list)[3] is Any

    def test_collection_type_detection(self) -> None:
        assert is_collection_type(list)
        assert is_collection_type(list[Address])
        assert is_collection_type(dict)
        assert not is_collection_type(str)
        assert not is_collection_type(Address)

    def test_models_are_not_collections(self) -> None:
        # BaseModel defines __iter__ over its fields
        assert not is_collection_type(AccountModel)
        assert not is_collection_type(ChildModel)
        assert not is_collection_type(ElemA)
        assert classify(list[ChildModel])[3] is ChildModel


class TestDescribe:
    def test_plain_class_properties(self) -> None:
        desc = describe(Person)
        assert list(desc.properties) == [
            "id",
            "name",
            "age",
            "score",
            "address",
            "tags",
            "code",
        ]
        assert desc.keyword_init is False
        assert desc.get("age").kind is ValueKind.OPTIONAL
        assert desc.get("address").kind is ValueKind.OBJECT

    def test_self_reference_resolves(self) -> None:
        assert describe(Node).get("parent").type_ is Node

    def test_memoized(self) -> None:
        assert describe(Person) is describe(Person)

    def test_not_mapped_markers(self) -> None:
        desc = describe(Account)
        assert desc.get("password").excluded is True
        assert desc.get("token").excluded is True
        assert desc.get("login").excluded is False

    def test_dataclass_is_keyword_init(self) -> None:
        desc = describe(Account)
        assert desc.keyword_init is True
        assert desc.get("id").initable is True

    def test_frozen_dataclass_not_writable(self) -> None:
        prop = describe(FrozenAccountView).get("id")
        assert prop.initable is True
        assert prop.writable is False

    def test_pydantic_model_fields(self) -> None:
        desc = describe(AccountModel)
        assert desc.keyword_init is True
        assert set(desc.properties) == {"id", "login"}

    def test_required_init_fields(self) -> None:
        dataclass_desc = describe(ReqView)
        assert dataclass_desc.get("id").required is True
        assert dataclass_desc.get("note").required is True
        assert describe(Account).get("id").required is False
        model_desc = describe(ReqModel)
        assert model_desc.get("extra").required is True
        assert describe(AccountModel).get("login").required is False

    def test_properties_from_getters(self) -> None:
        desc = describe(TrackedReading)
        assert desc.get("id").writable is True
        assert desc.get("total").kind is ValueKind.OPTIONAL
        label = desc.get("label")
        assert label.writable is False
        assert label not in desc.assignable()
        assert desc.get("writes") is None

    def test_unresolvable_annotation_is_isolated(self) -> None:
        desc = describe(BrokenTarget)
        assert desc.get("id").error is None
        assert desc.get("id").kind is ValueKind.SCALAR
        assert desc.get("ghost").error is not None
        assert desc.get("ghost").kind is ValueKind.OTHER

    def test_fallback_resolves_siblings_of_a_broken_annotation(self) -> None:
        class Partial:
            home: Address | None = None
            limit: ClassVar[int] = 3
            ghost: Missing | None = None  # noqa: F821

        desc = describe(Partial)
        assert desc.get("home").type_ is Address
        assert desc.get("home").kind is ValueKind.OBJECT
        assert desc.get("limit") is None
        assert "Missing" in desc.get("ghost").error


class TestDefaultValue:
    def test_scalar_zero_values(self) -> None:
        class Sample:
            n: int = 5
            s: str = "x"
            d: date | None = None

        desc = describe(Sample)
        assert default_value(desc.get("n")) == 0
        assert default_value(desc.get("s")) == ""
        assert default_value(desc.get("d")) is None

    def test_no_zero_value(self) -> None:
        class Sample:
            day: date = date(2024, 1, 1)
            key: UUID | None = None

        desc = describe(Sample)
        assert default_value(desc.get("day")) is None
        assert default_value(desc.get("key")) is None
