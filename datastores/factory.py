"""Factory for stores that live outside the global registry."""

from typing import TypeVar

from .comparers import Comparer
from .store import Dispatcher, InMemoryStore

__all__ = ["LocalStoreFactory"]

T = TypeVar("T")


class LocalStoreFactory:
    """Creates independent, unregistered in-memory stores."""

    def create_local(
        self,
        item_type: type[T],
        comparer: Comparer[T] | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> InMemoryStore[T]:
        """Return a new empty store, unrelated to any global store of the same type."""
        return InMemoryStore(item_type, comparer=comparer, dispatcher=dispatcher)
