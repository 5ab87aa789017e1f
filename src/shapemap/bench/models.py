"""Benchmark model pair covering every binding kind.

``TestA`` is the domain-side shape and ``TestB`` the transport-side
shape; the scenario builders fill progressively more of the graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ItemA:
    id: int = 0
    name: str = ""


@dataclass
class ItemB:
    id: int = 0
    name: str = ""


@dataclass
class TestA:
    __test__ = False

    id: int = 0
    name: str = ""
    amount: float = 0.0
    created: datetime | None = None
    score: int | None = None
    count: int = 0
    child: TestA | None = None
    items: list[ItemA] = field(default_factory=list)


@dataclass
class TestB:
    __test__ = False

    id: int = 0
    name: str = ""
    amount: float = 0.0
    created: datetime | None = None
    score: int = 0
    count: int | None = None
    child: TestB | None = None
    items: tuple[ItemB, ...] = ()


def normal_model(list_size: int = 0) -> TestA:
    return TestA(id=1, name="normal", amount=9.5)


def complex_model(list_size: int = 0) -> TestA:
    return TestA(
        id=2,
        name="complex",
        amount=19.25,
        created=datetime(2024, 1, 1, 12, 0),
        score=7,
        count=3,
    )


def nest_model(list_size: int = 0) -> TestA:
    leaf = complex_model()
    return TestA(id=3, name="nest", child=TestA(id=4, name="middle", child=leaf))


def list_model(list_size: int = 10) -> TestA:
    model = complex_model()
    model.items = [ItemA(id=i, name=f"item-{i}") for i in range(list_size)]
    return model


SCENARIOS = {
    "normal": normal_model,
    "complex": complex_model,
    "nest": nest_model,
    "list": list_model,
}
