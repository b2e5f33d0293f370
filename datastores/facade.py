"""Single entry point used by application code to obtain stores."""

from collections.abc import Callable
import logging
from typing import TypeVar

from .comparers import Comparer, EqualityComparerService
from .factory import LocalStoreFactory
from .registry import GlobalStoreRegistry
from .store import InMemoryStore, Store

__all__ = ["DataStores"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class DataStores:
    """Facade over the global registry and the local store factory.

    When no comparer is passed for a local store, one is resolved from the
    comparer service, so local stores of `Entity` types reject duplicate ids
    the same way their global stores usually do.
    """

    def __init__(
        self,
        registry: GlobalStoreRegistry,
        local_factory: LocalStoreFactory | None = None,
        comparer_service: EqualityComparerService | None = None,
    ) -> None:
        """Initialize the DataStores facade."""
        if registry is None:
            raise ValueError("registry must not be None")
        self._registry = registry
        self._local_factory = local_factory or LocalStoreFactory()
        self._comparer_service = comparer_service or EqualityComparerService()

    @property
    def registry(self) -> GlobalStoreRegistry:
        return self._registry

    def get_global(self, item_type: type[T]) -> Store[T]:
        """Return the global store for an item type.

        Raises:
            GlobalStoreNotRegisteredError: If no store is registered for the type.
        """
        return self._registry.resolve_global(item_type)

    def create_local(
        self, item_type: type[T], comparer: Comparer[T] | None = None
    ) -> InMemoryStore[T]:
        """Create a new, empty local store."""
        return self._local_factory.create_local(
            item_type, comparer=self._resolve_comparer(item_type, comparer)
        )

    def create_local_snapshot_from_global(
        self,
        item_type: type[T],
        predicate: Callable[[T], bool] | None = None,
        comparer: Comparer[T] | None = None,
    ) -> InMemoryStore[T]:
        """Copy the matching items of the global store into a new local store.

        The copy is taken once. Later changes to either store are not visible in
        the other.

        Raises:
            GlobalStoreNotRegisteredError: If no store is registered for the type.
        """
        global_store = self._registry.resolve_global(item_type)
        local_store = self.create_local(item_type, comparer)
        all_items = global_store.items
        items = all_items
        if predicate is not None:
            items = tuple(item for item in all_items if predicate(item))
        local_store.add_range(items)
        _LOGGER.debug(
            "Created %s snapshot with %d of %d items",
            item_type.__qualname__,
            len(items),
            len(all_items),
        )
        return local_store

    def _resolve_comparer(
        self, item_type: type[T], comparer: Comparer[T] | None
    ) -> Comparer[T] | None:
        if comparer is not None:
            return comparer
        return self._comparer_service.get_comparer(item_type)
