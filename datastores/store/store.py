"""Store module for holding a shared, observable collection of items."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

__all__ = [
    "ChangeType",
    "ChangeEvent",
    "ChangeListener",
    "Dispatcher",
    "Store",
]


class ChangeType(StrEnum):
    """Kind of mutation reported by a change event."""

    ADD = "add"
    BULK_ADD = "bulk_add"
    UPDATE = "update"
    REMOVE = "remove"
    CLEAR = "clear"


@dataclass(frozen=True)
class ChangeEvent(Generic[T]):
    """Record of a single mutation and the items it affected."""

    change_type: ChangeType
    items: tuple[T, ...] = ()


ChangeListener = Callable[[ChangeEvent[T]], None]

Dispatcher = Callable[[Callable[[], None]], Any]
"""Runs a listener invocation on another execution context.

For example `loop.call_soon_threadsafe` or `executor.submit`.
"""


class Store(ABC, Generic[T]):
    """Abstract base class for a thread-safe collection with change listeners."""

    @property
    @abstractmethod
    def item_type(self) -> type[T]:
        """The type of item held by the store, used as its registry key."""

    @property
    @abstractmethod
    def items(self) -> tuple[T, ...]:
        """Return a point-in-time snapshot of the items in insertion order."""

    @abstractmethod
    def add(self, item: T) -> None:
        """Append an item to the store.

        Raises:
            ValueError: If the item is None.
            DuplicateItemError: If the comparer finds an equal item already present.
        """

    @abstractmethod
    def add_range(self, items: Iterable[T]) -> None:
        """Append all items as a single mutation.

        Either every item is added or none is. A single BULK_ADD event lists the
        added items in input order.

        Raises:
            ValueError: If items is None or contains None.
            DuplicateItemError: If any item duplicates an existing item or another
                item in the same batch.
        """

    @abstractmethod
    def add_or_replace(self, item: T) -> None:
        """Replace the first equal item in place, or append the item if none exists."""

    @abstractmethod
    def remove(self, item: T) -> bool:
        """Remove the first matching item, returning whether anything was removed."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all items.

        A CLEAR event carrying the previously held items is always fired, even
        when the store was already empty.
        """

    @abstractmethod
    def contains(self, item: T) -> bool:
        """Check whether an equal item exists in the store."""

    @abstractmethod
    def add_listener(self, callback: ChangeListener[T]) -> Callable[[], None]:
        """Register a callback invoked once per mutation with its ChangeEvent.

        Returns a callable that can be called to remove the listener.
        """

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __contains__(self, item: object) -> bool:
        return self.contains(item)  # type: ignore[arg-type]
