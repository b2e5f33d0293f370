"""Tests for the DataStores facade."""

from dataclasses import dataclass

import pytest

from datastores.comparers import EqualityComparerService, entity_id_equals, key_comparer
from datastores.entity import Entity
from datastores.exceptions import DuplicateItemError, GlobalStoreNotRegisteredError
from datastores.facade import DataStores
from datastores.registry import GlobalStoreRegistry
from datastores.store import InMemoryStore


@dataclass(kw_only=True)
class Product(Entity):
    sku: str
    price: float = 0.0


@dataclass
class Tag:
    label: str


@pytest.fixture
def products(registry: GlobalStoreRegistry) -> InMemoryStore[Product]:
    store = InMemoryStore(Product, comparer=entity_id_equals)
    registry.register_global(store)
    store.add_range(
        [
            Product(id=1, sku="a", price=5),
            Product(id=2, sku="b", price=50),
            Product(id=3, sku="c", price=500),
        ]
    )
    return store


def test_requires_registry() -> None:
    with pytest.raises(ValueError, match="registry"):
        DataStores(None)  # type: ignore[arg-type]


def test_get_global(stores: DataStores, products: InMemoryStore[Product]) -> None:
    assert stores.get_global(Product) is products
    assert stores.get_global(Product) is stores.get_global(Product)


def test_get_global_not_registered(stores: DataStores) -> None:
    with pytest.raises(GlobalStoreNotRegisteredError):
        stores.get_global(Product)


def test_create_local_is_independent(
    stores: DataStores, products: InMemoryStore[Product]
) -> None:
    """Test that a local store is empty and unrelated to the global store."""
    local = stores.create_local(Product)
    assert local.items == ()
    assert local is not products
    local.add(Product(id=10, sku="z"))
    assert len(products) == 3
    assert stores.create_local(Product) is not local
    assert stores.get_global(Product) is products


def test_create_local_entity_comparer(stores: DataStores) -> None:
    """Test that local stores of entities reject duplicate ids."""
    local = stores.create_local(Product)
    local.add(Product(id=1, sku="a"))
    with pytest.raises(DuplicateItemError):
        local.add(Product(id=1, sku="other"))


def test_create_local_plain_type_allows_duplicates(stores: DataStores) -> None:
    local = stores.create_local(Tag)
    local.add_range([Tag("x"), Tag("x")])
    assert len(local) == 2


def test_create_local_explicit_comparer(stores: DataStores) -> None:
    local = stores.create_local(Tag, comparer=key_comparer(lambda tag: tag.label))
    local.add(Tag("x"))
    with pytest.raises(DuplicateItemError):
        local.add(Tag("x"))


def test_registered_comparer(registry: GlobalStoreRegistry) -> None:
    service = EqualityComparerService()
    service.register(Product, key_comparer(lambda product: product.sku))
    stores = DataStores(registry, comparer_service=service)
    local = stores.create_local(Product)
    local.add(Product(id=1, sku="a"))
    local.add(Product(id=1, sku="b"))
    with pytest.raises(DuplicateItemError):
        local.add(Product(id=2, sku="a"))


def test_snapshot_copies_items(
    stores: DataStores, products: InMemoryStore[Product]
) -> None:
    """Test that a snapshot holds the global items in order."""
    snapshot = stores.create_local_snapshot_from_global(Product)
    assert snapshot is not products
    assert snapshot.items == products.items


def test_snapshot_with_predicate(
    stores: DataStores, products: InMemoryStore[Product]
) -> None:
    snapshot = stores.create_local_snapshot_from_global(
        Product, lambda product: product.price > 10
    )
    assert [product.sku for product in snapshot] == ["b", "c"]


def test_snapshot_is_isolated(
    stores: DataStores, products: InMemoryStore[Product]
) -> None:
    """Test that later changes on either side are not visible on the other."""
    snapshot = stores.create_local_snapshot_from_global(Product)
    products.add(Product(id=4, sku="d"))
    products.remove(Product(id=1, sku="a"))
    snapshot.add(Product(id=5, sku="e"))
    assert [product.id for product in snapshot] == [1, 2, 3, 5]
    assert [product.id for product in products] == [2, 3, 4]


def test_snapshot_not_registered(stores: DataStores) -> None:
    with pytest.raises(GlobalStoreNotRegisteredError):
        stores.create_local_snapshot_from_global(Product)


def test_snapshot_of_empty_global(
    stores: DataStores, registry: GlobalStoreRegistry
) -> None:
    registry.register_global(InMemoryStore(Tag))
    snapshot = stores.create_local_snapshot_from_global(Tag)
    assert snapshot.items == ()
