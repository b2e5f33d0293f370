"""Tests for the GlobalStoreRegistry."""

import threading
from dataclasses import dataclass
from typing import Any

import pytest

from datastores.entity import Entity
from datastores.exceptions import (
    GlobalStoreAlreadyRegisteredError,
    GlobalStoreNotRegisteredError,
)
from datastores.persistence import PersistentStoreDecorator
from datastores.registry import GlobalStoreRegistry
from datastores.store import InMemoryStore


@dataclass(kw_only=True)
class Customer(Entity):
    name: str = ""


@dataclass(kw_only=True)
class Order(Entity):
    customer_id: int = 0


def test_register_and_resolve(registry: GlobalStoreRegistry) -> None:
    """Test that the same instance is returned on every resolve."""
    store = InMemoryStore(Customer)
    registry.register_global(store)
    assert registry.resolve_global(Customer) is store
    assert registry.resolve_global(Customer) is store
    assert registry.is_registered(Customer)
    assert not registry.is_registered(Order)


def test_register_twice_fails(registry: GlobalStoreRegistry) -> None:
    """Test that a second store for the same type is rejected."""
    first = InMemoryStore(Customer)
    registry.register_global(first)
    with pytest.raises(
        GlobalStoreAlreadyRegisteredError, match="'Customer' has already been registered"
    ):
        registry.register_global(InMemoryStore(Customer))
    assert registry.resolve_global(Customer) is first


def test_register_none(registry: GlobalStoreRegistry) -> None:
    with pytest.raises(ValueError, match="store must not be None"):
        registry.register_global(None)  # type: ignore[arg-type]


def test_resolve_unregistered(registry: GlobalStoreRegistry) -> None:
    with pytest.raises(GlobalStoreNotRegisteredError, match="'Order'") as exc_info:
        registry.resolve_global(Order)
    assert exc_info.value.store_type is Order


def test_try_resolve(registry: GlobalStoreRegistry) -> None:
    assert registry.try_resolve_global(Customer) is None
    store = InMemoryStore(Customer)
    registry.register_global(store)
    assert registry.try_resolve_global(Customer) is store


def test_types_are_independent(registry: GlobalStoreRegistry) -> None:
    customers = InMemoryStore(Customer)
    orders = InMemoryStore(Order)
    registry.register_global(customers)
    registry.register_global(orders)
    assert registry.resolve_global(Customer) is customers
    assert registry.resolve_global(Order) is orders


def test_registries_are_independent() -> None:
    """Test that stores registered in one registry are not visible in another."""
    first = GlobalStoreRegistry()
    first.register_global(InMemoryStore(Customer))
    assert not GlobalStoreRegistry().is_registered(Customer)


def test_concurrent_registration(registry: GlobalStoreRegistry) -> None:
    """Test that exactly one of many concurrent registrations wins."""
    barrier = threading.Barrier(8)
    winners: list[InMemoryStore[Customer]] = []
    failures: list[Exception] = []

    def register() -> None:
        store = InMemoryStore(Customer)
        barrier.wait()
        try:
            registry.register_global(store)
        except GlobalStoreAlreadyRegisteredError as err:
            failures.append(err)
        else:
            winners.append(store)

    threads = [threading.Thread(target=register) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    assert len(failures) == 7
    assert registry.resolve_global(Customer) is winners[0]


def test_initializable_stores(registry: GlobalStoreRegistry, make_strategy: Any) -> None:
    """Test that only stores needing initialization are returned."""
    persistent = PersistentStoreDecorator(
        InMemoryStore(Customer), make_strategy()
    )
    registry.register_global(persistent)
    registry.register_global(InMemoryStore(Order))
    assert registry.initializable_stores() == [persistent]
