"""Module for in memory object store."""

from collections.abc import Callable, Iterable
from functools import partial
import logging
import threading
from typing import Generic, TypeVar

from datastores.comparers import Comparer, default_equals
from datastores.exceptions import DuplicateItemError

from .store import ChangeEvent, ChangeListener, ChangeType, Dispatcher, Store

__all__ = ["InMemoryStore"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryStore(Store[T], Generic[T]):
    """In-memory implementation of the Store interface.

    Items are kept in a list guarded by a lock. Every mutation fires exactly one
    event after the item lock is released. A separate re-entrant dispatch lock
    is held across the mutation and its event so listeners observe events in
    the same order the mutations were applied.

    Duplicate rejection is only enforced when a comparer is supplied; otherwise
    lookups use `==` and equal items may be added more than once.
    """

    def __init__(
        self,
        item_type: type[T],
        comparer: Comparer[T] | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        """Initialize the InMemoryStore."""
        if item_type is None:
            raise ValueError("item_type must not be None")
        self._item_type = item_type
        self._comparer = comparer
        self._dispatcher = dispatcher
        self._items: list[T] = []
        self._listeners: list[ChangeListener[T]] = []
        self._lock = threading.Lock()
        self._dispatch_lock = threading.RLock()

    @property
    def item_type(self) -> type[T]:
        """The type of item held by the store."""
        return self._item_type

    @property
    def items(self) -> tuple[T, ...]:
        """Return a point-in-time snapshot of the items."""
        with self._lock:
            return tuple(self._items)

    def add(self, item: T) -> None:
        """Append an item to the store."""
        _check_item(item)
        with self._dispatch_lock:
            with self._lock:
                if self._comparer is not None and self._find(item) >= 0:
                    raise DuplicateItemError(
                        f"Duplicate {self._name} rejected, an equal item already exists"
                    )
                self._items.append(item)
            self._fire_event(ChangeEvent(ChangeType.ADD, (item,)))

    def add_range(self, items: Iterable[T]) -> None:
        """Append all items as a single mutation."""
        if items is None:
            raise ValueError("items must not be None")
        batch = tuple(items)
        for item in batch:
            _check_item(item)
        if not batch:
            return
        with self._dispatch_lock:
            with self._lock:
                if self._comparer is not None:
                    self._check_batch(batch)
                self._items.extend(batch)
            self._fire_event(ChangeEvent(ChangeType.BULK_ADD, batch))

    def add_or_replace(self, item: T) -> None:
        """Replace the first equal item in place, or append the item."""
        _check_item(item)
        with self._dispatch_lock:
            with self._lock:
                index = self._find(item)
                if index >= 0:
                    self._items[index] = item
                    change_type = ChangeType.UPDATE
                else:
                    self._items.append(item)
                    change_type = ChangeType.ADD
            self._fire_event(ChangeEvent(change_type, (item,)))

    def remove(self, item: T) -> bool:
        """Remove the first matching item."""
        _check_item(item)
        with self._dispatch_lock:
            with self._lock:
                index = self._find(item)
                if index < 0:
                    return False
                removed = self._items.pop(index)
            self._fire_event(ChangeEvent(ChangeType.REMOVE, (removed,)))
        return True

    def clear(self) -> None:
        """Remove all items."""
        with self._dispatch_lock:
            with self._lock:
                previous = tuple(self._items)
                self._items.clear()
            self._fire_event(ChangeEvent(ChangeType.CLEAR, previous))

    def contains(self, item: T) -> bool:
        """Check whether an equal item exists in the store."""
        if item is None:
            return False
        with self._lock:
            return self._find(item) >= 0

    def add_listener(self, callback: ChangeListener[T]) -> Callable[[], None]:
        """Register a callback invoked once per mutation."""
        if callback is None:
            raise ValueError("callback must not be None")

        def remove() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        with self._lock:
            self._listeners.append(callback)
        return remove

    @property
    def _name(self) -> str:
        return self._item_type.__qualname__

    def _equals(self, a: T, b: T) -> bool:
        if self._comparer is None:
            return default_equals(a, b)
        return self._comparer(a, b)

    def _find(self, item: T) -> int:
        """Return the index of the first equal item, must hold the lock."""
        for index, existing in enumerate(self._items):
            if self._equals(existing, item):
                return index
        return -1

    def _check_batch(self, batch: tuple[T, ...]) -> None:
        """Reject a batch with duplicates, must hold the lock."""
        existing = [item for item in batch if self._find(item) >= 0]
        if existing:
            raise DuplicateItemError(
                f"Duplicate {self._name} items rejected, {len(existing)} item(s) "
                "already exist in the store"
            )
        for index, item in enumerate(batch):
            for earlier in batch[:index]:
                if self._equals(earlier, item):
                    raise DuplicateItemError(
                        f"Duplicate {self._name} items rejected, batch contains equal items"
                    )

    def _fire_event(self, event: ChangeEvent[T]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        _LOGGER.debug(
            "Store %s changed: %s (%d items)",
            self._name,
            event.change_type,
            len(event.items),
        )
        if self._dispatcher is not None:
            self._dispatcher(partial(_invoke_listeners, listeners, event))
        else:
            _invoke_listeners(listeners, event)


def _check_item(item: object) -> None:
    if item is None:
        raise ValueError("item must not be None")


def _invoke_listeners(
    listeners: list[ChangeListener[T]], event: ChangeEvent[T]
) -> None:
    for cb in listeners:
        try:
            cb(event)
        except Exception:
            _LOGGER.exception("Store listener callback failed for event %s", event.change_type)
