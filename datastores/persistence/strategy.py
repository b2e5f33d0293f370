"""Contracts between persisted stores and their backing medium."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

T = TypeVar("T")

__all__ = [
    "PersistenceStrategy",
    "AsyncInitializable",
]


class PersistenceStrategy(ABC, Generic[T]):
    """Loads and saves the full set of items of a store."""

    @abstractmethod
    async def load_all(self) -> list[T]:
        """Load all persisted items.

        Returns an empty list when nothing was persisted yet.
        """

    @abstractmethod
    async def save_all(self, items: Sequence[T]) -> None:
        """Overwrite the persisted items with exactly the given items.

        An empty sequence persists an empty collection.
        """


class AsyncInitializable(ABC):
    """A component that needs one asynchronous initialization step at startup."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the component. Calling this more than once is a no-op."""
