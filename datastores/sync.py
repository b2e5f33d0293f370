"""Keeps two stores of the same item type in step."""

from collections.abc import Callable
import logging
import threading
from typing import TypeVar

from .comparers import Comparer, default_equals
from .config import SyncOptions
from .exceptions import DuplicateItemError
from .store import ChangeEvent, ChangeType, Store

__all__ = ["synchronize"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def synchronize(
    source: Store[T],
    target: Store[T],
    options: SyncOptions | None = None,
    comparer: Comparer[T] | None = None,
) -> Callable[[], None]:
    """Mirror adds, removes and clears between two stores.

    Changes applied while mirroring are not mirrored back. Items already present
    in the other store (per the comparer) are not added again.

    Returns a callable that stops the synchronization.
    """
    if source is None:
        raise ValueError("source must not be None")
    if target is None:
        raise ValueError("target must not be None")
    options = options or SyncOptions()
    equals = comparer or default_equals
    syncing = threading.local()

    def exists_in(store: Store[T], item: T) -> bool:
        return any(equals(existing, item) for existing in store.items)

    def add_missing(store: Store[T], item: T) -> None:
        if exists_in(store, item):
            return
        try:
            store.add(item)
        except DuplicateItemError:
            _LOGGER.debug("Item already present in synchronized store, skipping")

    def apply(to: Store[T], event: ChangeEvent[T]) -> None:
        if getattr(syncing, "active", False):
            return
        syncing.active = True
        try:
            if event.change_type in (ChangeType.ADD, ChangeType.BULK_ADD):
                for item in event.items:
                    add_missing(to, item)
            elif event.change_type == ChangeType.REMOVE:
                for item in event.items:
                    to.remove(item)
            elif event.change_type == ChangeType.CLEAR:
                if len(to):
                    to.clear()
            elif event.change_type == ChangeType.UPDATE:
                for item in event.items:
                    to.add_or_replace(item)
        finally:
            syncing.active = False

    removers: list[Callable[[], None]] = []
    if options.source_to_target:
        removers.append(source.add_listener(lambda event: apply(target, event)))
    if options.target_to_source:
        removers.append(target.add_listener(lambda event: apply(source, event)))

    if options.initial_sync:
        for item in source.items:
            add_missing(target, item)

    def stop() -> None:
        for remove in removers:
            remove()
        removers.clear()

    return stop
