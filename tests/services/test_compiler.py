"""Tests for compiled constructors and mutators."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

import pytest

from shapemap.domain.plan import TypePair
from shapemap.services.mapper import Mapper
from tests.models import (
    Account,
    AccountModel,
    AccountView,
    Address,
    AddressView,
    ArrayHolder,
    ChildModel,
    ChildModelView,
    Crew,
    CrewCopy,
    CrewView,
    DequeHolder,
    ElemA,
    ElemB,
    FrozenAccountView,
    Holder,
    IteratorHolder,
    ListHolder,
    MapHolder,
    Measurement,
    MeasurementView,
    Node,
    NodeView,
    Numbers,
    ParentModel,
    ParentModelView,
    ParentRecord,
    Person,
    PersonView,
    Reading,
    Req,
    ReqModel,
    ReqView,
    Tagged,
    TagSet,
    TrackedReading,
    Words,
)


def _person(**values: object) -> Person:
    person = Person()
    for name, value in values.items():
        setattr(person, name, value)
    return person


def _reading(id: int = 1, name: str = "r", level: int | None = 5, total: int = 3) -> Reading:
    reading = Reading()
    reading.id, reading.name, reading.level, reading.total = id, name, level, total
    return reading


class TestConstruct:
    def test_none_maps_to_none(self, mapper: Mapper) -> None:
        assert mapper.map_object(None, PersonView, source_type=Person) is None

    def test_identity_shapes(self, mapper: Mapper) -> None:
        address = Address()
        address.street, address.city = "Main", "Springfield"
        view = mapper.map_object(address, AddressView)
        assert isinstance(view, AddressView)
        assert (view.street, view.city) == ("Main", "Springfield")

    def test_identity_shapes_with_nested_object_and_collection(self, mapper: Mapper) -> None:
        lead = Address()
        lead.street, lead.city = "Main", "Springfield"
        crew = Crew(id=3, lead=lead, members=[ElemA(id=1), ElemA(id=2)])
        copy = mapper.map_object(crew, CrewCopy)
        assert isinstance(copy, CrewCopy)
        assert copy.id == 3
        assert copy.lead is lead
        assert vars(copy.lead) == {"street": "Main", "city": "Springfield"}
        assert copy.members == [ElemA(id=1), ElemA(id=2)]
        assert mapper.map_object(Crew(), CrewCopy) == CrewCopy(id=0, lead=None, members=[])

    def test_parallel_shapes_map_nested_values(self, mapper: Mapper) -> None:
        lead = Address()
        lead.street, lead.city = "Main", "Springfield"
        crew = Crew(id=3, lead=lead, members=[ElemA(id=1), ElemA(id=2)])
        view = mapper.map_object(crew, CrewView)
        assert isinstance(view.lead, AddressView)
        assert (view.lead.street, view.lead.city) == ("Main", "Springfield")
        assert view.members == [ElemB(id=1), ElemB(id=2)]

    def test_direct_copy_shares_reference_values(self, mapper: Mapper) -> None:
        tags = ["a", "b"]
        view = mapper.map_object(_person(tags=tags), PersonView)
        assert view.tags is tags

    def test_nullable_narrow(self, mapper: Mapper) -> None:
        assert mapper.map_object(_person(age=5), PersonView).age == 5
        assert mapper.map_object(_person(age=None), PersonView).age == 0

    def test_nullable_widen(self, mapper: Mapper) -> None:
        assert mapper.map_object(_person(score=7), PersonView).score == 7

    def test_skipped_property_keeps_class_default(self, mapper: Mapper) -> None:
        assert mapper.map_object(_person(code=12), PersonView).code == "unset"

    def test_numeric_conversions(self, mapper: Mapper) -> None:
        view = mapper.map_object(Measurement(ratio=2, reading=None, flag=True), MeasurementView)
        assert view == MeasurementView(ratio=2.0, reading=0.0, flag=1)
        assert isinstance(view.ratio, float)
        assert type(view.flag) is int

        view = mapper.map_object(Measurement(reading=3), MeasurementView)
        assert view.reading == 3.0
        assert isinstance(view.reading, float)

    def test_nested_object(self, mapper: Mapper) -> None:
        address = Address()
        address.city = "Paris"
        view = mapper.map_object(_person(address=address), PersonView)
        assert isinstance(view.address, AddressView)
        assert view.address.city == "Paris"

    def test_nested_none_stays_none(self, mapper: Mapper) -> None:
        assert mapper.map_object(_person(address=None), PersonView).address is None

    def test_self_recursive_graph(self, mapper: Mapper) -> None:
        root = Node()
        root.id = 1
        child = Node()
        child.id, child.parent = 2, root
        view = mapper.map_object(child, NodeView)
        assert view.id == 2
        assert isinstance(view.parent, NodeView)
        assert view.parent.id == 1
        assert view.parent.parent is None

    def test_not_mapped_properties_keep_defaults(self, mapper: Mapper) -> None:
        view = mapper.map_object(
            Account(id=1, login="ann", password="pw", token="tk"), AccountView
        )
        assert view == AccountView(id=1, login="ann", password="hidden", token="hidden")

    def test_frozen_target_built_by_keyword(self, mapper: Mapper) -> None:
        view = mapper.map_object(Account(id=3, login="bo"), FrozenAccountView)
        assert view == FrozenAccountView(id=3, login="bo")

    def test_pydantic_target(self, mapper: Mapper) -> None:
        model = mapper.map_object(Account(id=4, login="cy"), AccountModel)
        assert model == AccountModel(id=4, login="cy")

    def test_pydantic_source(self, mapper: Mapper) -> None:
        view = mapper.map_object(AccountModel(id=4, login="cy"), AccountView)
        assert view == AccountView(id=4, login="cy")

    def test_nested_pydantic_child(self, mapper: Mapper) -> None:
        parent = ParentModel(id=1, child=ChildModel(id=2, items=[5, 6]))
        view = mapper.map_object(parent, ParentModelView)
        assert view == ParentModelView(id=1, child=ChildModelView(id=2, items=[5, 6]))
        assert mapper.map_object(ParentModel(id=1), ParentModelView).child is None

    def test_pydantic_child_inside_dataclass(self, mapper: Mapper) -> None:
        record = mapper.map_object(ParentModel(id=1, child=ChildModel(id=2)), ParentRecord)
        assert record == ParentRecord(id=1, child=ChildModel(id=2))
        assert record.child is not None

    def test_required_init_field_without_source_gets_default(self, mapper: Mapper) -> None:
        assert mapper.map_object(Req(id=1), ReqView) == ReqView(id=1, extra="", note=None)
        assert mapper.map_object(Req(id=1), ReqModel) == ReqModel(id=1, extra="")

    def test_default_on_planning_fault(self, mapper: Mapper) -> None:
        words = mapper.map_object(Numbers(values=[1, 2], count=2), Words)
        assert words == Words(values=None, count=2)

    def test_post_process(self, mapper: Mapper) -> None:
        seen: list[PersonView] = []
        view = mapper.map_object(_person(id=9), PersonView, post_process=seen.append)
        assert seen == [view]

    def test_post_process_skipped_for_none(self, mapper: Mapper) -> None:
        seen: list[object] = []
        mapper.map_object(None, PersonView, source_type=Person, post_process=seen.append)
        assert seen == []

    def test_missing_attribute_propagates(self, mapper: Mapper) -> None:
        class Bare:
            pass

        with pytest.raises(AttributeError):
            mapper.map_object(Bare(), Address, source_type=AddressView)


class TestCollections:
    def test_array_target(self, mapper: Mapper) -> None:
        holder = mapper.map_object(Holder(items=[ElemA(1), ElemA(2)]), ArrayHolder)
        assert holder.items == (ElemB(1), ElemB(2))

    def test_list_target(self, mapper: Mapper) -> None:
        holder = mapper.map_object(Holder(items=[ElemA(1)]), ListHolder)
        assert holder.items == [ElemB(1)]

    def test_deque_target(self, mapper: Mapper) -> None:
        holder = mapper.map_object(Holder(items=[ElemA(1)]), DequeHolder)
        assert isinstance(holder.items, deque)
        assert list(holder.items) == [ElemB(1)]

    def test_iterator_target_is_lazy(self, mapper: Mapper) -> None:
        holder = mapper.map_object(Holder(items=[ElemA(1), ElemA(2)]), IteratorHolder)
        assert isinstance(holder.items, Iterator)
        assert list(holder.items) == [ElemB(1), ElemB(2)]

    def test_mapping_target_gets_none(self, mapper: Mapper) -> None:
        assert mapper.map_object(Holder(items=[ElemA(1)]), MapHolder).items is None

    def test_none_collection(self, mapper: Mapper) -> None:
        assert mapper.map_object(Holder(items=None), ArrayHolder).items is None

    def test_empty_collection(self, mapper: Mapper) -> None:
        assert mapper.map_object(Holder(items=[]), ArrayHolder).items == ()

    def test_none_elements_map_to_none(self, mapper: Mapper) -> None:
        holder = mapper.map_object(Holder(items=[ElemA(1), None]), ListHolder)
        assert holder.items == [ElemB(1), None]

    def test_scalar_elements_pass_through(self, mapper: Mapper) -> None:
        assert mapper.map_object(Tagged(tags=["x", "y", "x"]), TagSet).tags == {"x", "y"}


class TestUpdate:
    def test_copies_onto_existing_target(self, mapper: Mapper) -> None:
        target = TrackedReading()
        mapper.update(_reading(id=1, name="r", level=5, total=3), target)
        assert (target.id, target.name, target.level, target.total) == (1, "r", 5, 3)
        assert target.writes == 4

    def test_unchanged_values_are_not_written(self, mapper: Mapper) -> None:
        source = _reading()
        target = TrackedReading()
        mapper.update(source, target)
        before = target.writes
        mapper.update(source, target)
        assert target.writes == before

    def test_only_changed_property_written(self, mapper: Mapper) -> None:
        source = _reading()
        target = TrackedReading()
        mapper.update(source, target)
        before = target.writes
        source.name = "renamed"
        mapper.update(source, target)
        assert target.writes == before + 1
        assert target.name == "renamed"

    def test_narrow_absent_value_writes_default(self, mapper: Mapper) -> None:
        target = TrackedReading()
        mapper.update(_reading(level=8), target)
        assert target.level == 8
        mapper.update(_reading(level=None), target)
        assert target.level == 0

    def test_widen_writes_when_target_lacks_value(self, mapper: Mapper) -> None:
        target = TrackedReading()
        assert target.total is None
        mapper.update(_reading(total=0), target)
        assert target.total == 0

    def test_nested_always_reassigned(self, mapper: Mapper) -> None:
        address = Address()
        address.city = "Rome"
        target = PersonView()
        mapper.update(_person(address=address), target)
        first = target.address
        mapper.update(_person(address=address), target)
        assert target.address is not first
        assert target.address.city == "Rome"

    def test_none_arguments_are_noops(self, mapper: Mapper) -> None:
        target = TrackedReading()
        mapper.update(None, target, source_type=Reading)
        mapper.update(_reading(), None, target_type=TrackedReading)
        assert target.writes == 0

    def test_frozen_target_untouched(self, mapper: Mapper) -> None:
        target = FrozenAccountView(id=1, login="old")
        mapper.update(Account(id=2, login="new"), target)
        assert target == FrozenAccountView(id=1, login="old")

    def test_skipped_and_excluded_untouched(self, mapper: Mapper) -> None:
        target = AccountView()
        mapper.update(Account(id=5, login="eve", password="pw", token="tk"), target)
        assert target == AccountView(id=5, login="eve", password="hidden", token="hidden")


class TestCompiledNames:
    def test_qualnames_name_the_pair(self, mapper: Mapper) -> None:
        pair = TypePair(Person, PersonView)
        assert mapper.cache.constructor(pair).__qualname__ == "construct[Person -> PersonView]"
        assert mapper.cache.mutator(pair).__qualname__ == "update[Person -> PersonView]"
