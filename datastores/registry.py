"""Process-wide registry holding at most one global store per item type."""

import logging
import threading
from typing import Any, TypeVar

from .exceptions import GlobalStoreAlreadyRegisteredError, GlobalStoreNotRegisteredError
from .persistence import AsyncInitializable
from .store import Store

__all__ = ["GlobalStoreRegistry"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class GlobalStoreRegistry:
    """Maps item types to their single global store.

    The registry is an ordinary object created once by the composition root and
    passed to registrars and the facade. A type may be registered only once for
    the lifetime of the registry.
    """

    def __init__(self) -> None:
        """Initialize the GlobalStoreRegistry."""
        self._stores: dict[type, Store[Any]] = {}
        self._lock = threading.Lock()

    def register_global(self, store: Store[T]) -> None:
        """Bind a store to its item type.

        Raises:
            ValueError: If store is None.
            GlobalStoreAlreadyRegisteredError: If the item type already has a store.
        """
        if store is None:
            raise ValueError("store must not be None")
        store_type = store.item_type
        with self._lock:
            if store_type in self._stores:
                raise GlobalStoreAlreadyRegisteredError(store_type)
            self._stores[store_type] = store
        _LOGGER.debug(
            "Registered global %s store (%s)",
            store_type.__qualname__,
            type(store).__name__,
        )

    def resolve_global(self, item_type: type[T]) -> Store[T]:
        """Return the global store for an item type.

        Raises:
            GlobalStoreNotRegisteredError: If no store is registered for the type.
        """
        if (store := self.try_resolve_global(item_type)) is None:
            raise GlobalStoreNotRegisteredError(item_type)
        return store

    def try_resolve_global(self, item_type: type[T]) -> Store[T] | None:
        """Return the global store for an item type, or None if not registered."""
        with self._lock:
            return self._stores.get(item_type)

    def is_registered(self, item_type: type) -> bool:
        with self._lock:
            return item_type in self._stores

    def initializable_stores(self) -> list[AsyncInitializable]:
        """Return the registered stores that need asynchronous initialization."""
        with self._lock:
            stores = list(self._stores.values())
        return [store for store in stores if isinstance(store, AsyncInitializable)]
