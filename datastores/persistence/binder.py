"""Tracks field changes of observable items held in a store."""

from collections.abc import Callable, Iterable
import logging
import threading
from typing import Any, Generic, TypeVar

from datastores.entity import ObservableItem
from datastores.store import ChangeEvent, ChangeType, Store

__all__ = ["ItemChangeBinder"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ItemChangeBinder(Generic[T]):
    """Subscribes to every ObservableItem in a store.

    Items are attached when added and detached when removed or cleared, so the
    binder never keeps listeners on items that left the store. Items are
    tracked by identity since equal items may be distinct objects.
    """

    def __init__(self, on_item_changed: Callable[[T, str], None]) -> None:
        """Initialize the ItemChangeBinder."""
        if on_item_changed is None:
            raise ValueError("on_item_changed must not be None")
        self._on_item_changed = on_item_changed
        self._bound: dict[int, tuple[T, Callable[[], None]]] = {}
        self._lock = threading.Lock()
        self._store: Store[T] | None = None
        self._remove_store_listener: Callable[[], None] | None = None

    def attach_store(self, store: Store[T]) -> None:
        """Bind all current items and follow the store's changes."""
        if store is None:
            raise ValueError("store must not be None")
        if self._store is not None:
            raise ValueError("Binder is already attached to a store")
        self._store = store
        self._remove_store_listener = store.add_listener(self._on_store_changed)
        self.attach_range(store.items)

    def attach(self, item: T) -> None:
        """Subscribe to an item, ignoring items without the capability."""
        if not isinstance(item, ObservableItem):
            return
        with self._lock:
            if id(item) in self._bound:
                return
            remove = item.add_change_listener(self._item_changed)
            self._bound[id(item)] = (item, remove)

    def attach_range(self, items: Iterable[T]) -> None:
        for item in items:
            self.attach(item)

    def detach(self, item: T) -> None:
        with self._lock:
            entry = self._bound.pop(id(item), None)
        if entry is not None:
            entry[1]()

    def detach_all(self) -> None:
        with self._lock:
            entries = list(self._bound.values())
            self._bound.clear()
        for _, remove in entries:
            remove()

    @property
    def num_bound(self) -> int:
        """Number of items currently subscribed to."""
        with self._lock:
            return len(self._bound)

    def close(self) -> None:
        """Stop following the store and detach from all items."""
        if self._remove_store_listener is not None:
            self._remove_store_listener()
            self._remove_store_listener = None
        self._store = None
        self.detach_all()

    def _item_changed(self, item: Any, field_name: str) -> None:
        _LOGGER.debug("Item %s changed field %s", type(item).__name__, field_name)
        self._on_item_changed(item, field_name)

    def _on_store_changed(self, event: ChangeEvent[T]) -> None:
        if event.change_type in (ChangeType.ADD, ChangeType.BULK_ADD):
            self.attach_range(event.items)
        elif event.change_type == ChangeType.REMOVE:
            for item in event.items:
                self.detach(item)
        elif event.change_type == ChangeType.CLEAR:
            self.detach_all()
        elif event.change_type == ChangeType.UPDATE:
            # The replaced instance is not part of the event, so resync.
            self.detach_all()
            if self._store is not None:
                self.attach_range(self._store.items)
