"""Tests for the equality comparers."""

from dataclasses import dataclass

from datastores.comparers import (
    EqualityComparerService,
    default_equals,
    entity_id_equals,
    key_comparer,
)
from datastores.entity import Entity


@dataclass(kw_only=True)
class Person(Entity):
    name: str = ""


@dataclass(kw_only=True)
class Employee(Person):
    title: str = ""


@dataclass
class Point:
    x: int
    y: int


def test_default_equals() -> None:
    assert default_equals(Point(1, 2), Point(1, 2))
    assert not default_equals(Point(1, 2), Point(2, 1))


def test_entity_id_equals() -> None:
    """Test that entities compare by id regardless of other fields."""
    assert entity_id_equals(Person(id=1, name="a"), Person(id=1, name="b"))
    assert not entity_id_equals(Person(id=1), Person(id=2))


def test_entity_id_equals_unsaved() -> None:
    """Test that unsaved entities are only equal to themselves."""
    person = Person(name="a")
    assert entity_id_equals(person, person)
    assert not entity_id_equals(person, Person(name="a"))
    assert not entity_id_equals(Person(id=1), Person())


def test_entity_id_equals_non_entities() -> None:
    point = Point(1, 2)
    assert entity_id_equals(point, point)
    assert not entity_id_equals(point, Point(1, 2))
    assert not entity_id_equals(Person(id=1), point)


def test_key_comparer() -> None:
    by_name = key_comparer(lambda person: person.name)
    assert by_name(Person(id=1, name="a"), Person(id=2, name="a"))
    assert not by_name(Person(id=1, name="a"), Person(id=1, name="b"))


def test_comparer_service_defaults() -> None:
    service = EqualityComparerService()
    assert service.get_comparer(Person) is entity_id_equals
    assert service.get_comparer(Employee) is entity_id_equals
    assert service.get_comparer(Point) is None


def test_comparer_service_registered() -> None:
    """Test that a registered comparer takes precedence for its exact type."""
    service = EqualityComparerService()
    by_name = key_comparer(lambda person: person.name)
    service.register(Person, by_name)
    assert service.get_comparer(Person) is by_name
    assert service.get_comparer(Employee) is entity_id_equals
