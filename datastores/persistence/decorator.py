"""Decorator that adds asynchronous load and save to a store."""

import asyncio
from collections.abc import Callable, Iterable
import logging
import threading
from typing import Any, Generic, TypeVar

from datastores.context import trace_context
from datastores.store import ChangeEvent, ChangeListener, ChangeType, Store
from datastores.task import TaskService, get_task_service

from .binder import ItemChangeBinder
from .strategy import AsyncInitializable, PersistenceStrategy

__all__ = ["PersistentStoreDecorator"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class PersistentStoreDecorator(Store[T], AsyncInitializable, Generic[T]):
    """Wraps a store with a persistence strategy.

    All store operations are forwarded to the inner store. On top of that:

    - `initialize` loads the persisted items into the inner store, at most once
      and only when `auto_load` is enabled.
    - When `auto_save_on_change` is enabled, every mutation (and every field
      change of an ObservableItem in the store) schedules a background save of
      the full item snapshot. Mutations never wait for the save.

    Saves are run by a single worker per decorator that keeps saving while
    changes are pending, so bursts of mutations coalesce into fewer saves and
    the last save always reflects the final state. Save failures are logged
    and never raised to the mutating caller.
    """

    def __init__(
        self,
        inner: Store[T],
        strategy: PersistenceStrategy[T],
        auto_load: bool = True,
        auto_save_on_change: bool = True,
        task_service: TaskService | None = None,
    ) -> None:
        """Initialize the PersistentStoreDecorator."""
        if inner is None:
            raise ValueError("inner store must not be None")
        if strategy is None:
            raise ValueError("strategy must not be None")
        self._inner = inner
        self._strategy = strategy
        self._auto_load = auto_load
        self._auto_save_on_change = auto_save_on_change
        self._task_service = task_service or get_task_service()
        self._init_lock = asyncio.Lock()
        self._initialized = False
        self._loaded_items: tuple[T, ...] | None = None
        self._save_lock = threading.Lock()
        self._save_pending = False
        self._save_running = False
        self._remove_listener: Callable[[], None] | None = None
        self._binder: ItemChangeBinder[T] | None = None

        if auto_save_on_change:
            self._remove_listener = inner.add_listener(self._on_inner_changed)
            self._binder = ItemChangeBinder(self._on_item_changed)
            self._binder.attach_store(inner)

    @property
    def item_type(self) -> type[T]:
        return self._inner.item_type

    @property
    def items(self) -> tuple[T, ...]:
        return self._inner.items

    @property
    def auto_load(self) -> bool:
        return self._auto_load

    @property
    def auto_save_on_change(self) -> bool:
        return self._auto_save_on_change

    @property
    def initialized(self) -> bool:
        """True once initialize completed successfully."""
        return self._initialized

    def add(self, item: T) -> None:
        self._inner.add(item)

    def add_range(self, items: Iterable[T]) -> None:
        self._inner.add_range(items)

    def add_or_replace(self, item: T) -> None:
        self._inner.add_or_replace(item)

    def remove(self, item: T) -> bool:
        return self._inner.remove(item)

    def clear(self) -> None:
        self._inner.clear()

    def contains(self, item: T) -> bool:
        return self._inner.contains(item)

    def add_listener(self, callback: ChangeListener[T]) -> Callable[[], None]:
        return self._inner.add_listener(callback)

    async def initialize(self) -> None:
        """Load persisted items into the store the first time this is called.

        A load failure propagates and leaves the store uninitialized, so a later
        call will try again. Cancelling the caller aborts the load before any
        item is applied.
        """
        async with self._init_lock:
            if self._initialized:
                return
            if self._auto_load:
                with trace_context(f"Load {self._name} store"):
                    items = tuple(await self._strategy.load_all())
                if items and self._auto_save_on_change:
                    with self._save_lock:
                        self._loaded_items = items
                try:
                    self._inner.add_range(items)
                except BaseException:
                    with self._save_lock:
                        self._loaded_items = None
                    raise
                _LOGGER.debug("Loaded %d %s items", len(items), self._name)
            self._initialized = True

    def close(self) -> None:
        """Stop tracking changes of the inner store and its items."""
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        if self._binder is not None:
            self._binder.close()
            self._binder = None

    @property
    def _name(self) -> str:
        return self.item_type.__qualname__

    def _on_inner_changed(self, event: ChangeEvent[T]) -> None:
        if self._is_load_event(event):
            return
        self._schedule_save()

    def _is_load_event(self, event: ChangeEvent[T]) -> bool:
        """Claim the BULK_ADD that applied the loaded items, matched by identity."""
        if event.change_type != ChangeType.BULK_ADD:
            return False
        with self._save_lock:
            loaded = self._loaded_items
            if loaded is None or len(loaded) != len(event.items):
                return False
            if not all(a is b for a, b in zip(loaded, event.items)):
                return False
            self._loaded_items = None
            return True

    def _on_item_changed(self, item: Any, field_name: str) -> None:
        self._schedule_save()

    def _schedule_save(self) -> None:
        with self._save_lock:
            self._save_pending = True
            if self._save_running:
                return
            self._save_running = True
        self._task_service.create_task(
            self._save_worker(), name=f"save-{self._name}"
        )

    def _take_pending_save(self) -> bool:
        """Claim the pending save, or mark the worker stopped if there is none."""
        with self._save_lock:
            if self._save_pending:
                self._save_pending = False
                return True
            self._save_running = False
            return False

    async def _save_worker(self) -> None:
        try:
            while self._take_pending_save():
                items = self._inner.items
                try:
                    await self._strategy.save_all(items)
                except Exception:
                    _LOGGER.exception("Failed to save %s store", self._name)
                else:
                    _LOGGER.debug("Saved %d %s items", len(items), self._name)
        except BaseException:
            with self._save_lock:
                self._save_running = False
            raise
