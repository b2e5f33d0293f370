"""Equality comparers used to detect duplicate items in a store.

A comparer is a plain callable `(a, b) -> bool`. Stores created without a
comparer fall back to `==` for lookups and accept duplicates.
"""

from collections.abc import Callable
import logging
import threading
from typing import Any, TypeVar

from .entity import Entity

__all__ = [
    "Comparer",
    "default_equals",
    "entity_id_equals",
    "key_comparer",
    "EqualityComparerService",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Comparer = Callable[[T, T], bool]


def default_equals(a: Any, b: Any) -> bool:
    """Compare two items with their own equality."""
    return bool(a == b)


def entity_id_equals(a: Any, b: Any) -> bool:
    """Compare two entities by id.

    The same instance is always equal to itself. Entities that were never
    persisted (id 0) are only equal by identity.
    """
    if a is b:
        return True
    if not isinstance(a, Entity) or not isinstance(b, Entity):
        return False
    if a.id == 0 or b.id == 0:
        return False
    return a.id == b.id


def key_comparer(key: Callable[[T], Any]) -> Comparer[T]:
    """Return a comparer that treats items with the same key as equal."""

    def equals(a: T, b: T) -> bool:
        return bool(key(a) == key(b))

    return equals


class EqualityComparerService:
    """Resolves the comparer to use for stores of a given item type.

    Lookup order is an explicitly registered comparer for the type, then the
    entity id comparer for `Entity` subclasses, else no comparer.
    """

    def __init__(self) -> None:
        """Initialize the EqualityComparerService."""
        self._comparers: dict[type, Comparer[Any]] = {}
        self._lock = threading.Lock()

    def register(self, item_type: type[T], comparer: Comparer[T]) -> None:
        """Register the comparer to use for an item type."""
        if comparer is None:
            raise ValueError("comparer must not be None")
        with self._lock:
            self._comparers[item_type] = comparer
        _LOGGER.debug("Registered comparer for %s", item_type.__qualname__)

    def get_comparer(self, item_type: type[T]) -> Comparer[T] | None:
        """Return the comparer for an item type, or None for default equality."""
        with self._lock:
            if (comparer := self._comparers.get(item_type)) is not None:
                return comparer
        if isinstance(item_type, type) and issubclass(item_type, Entity):
            return entity_id_equals
        return None
