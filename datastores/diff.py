"""Module for computing differences between two item snapshots.

This is used to turn a full store snapshot into inserts and deletes, for
example when writing to a backend that supports incremental changes.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .comparers import Comparer, default_equals
from .entity import Entity

__all__ = ["DataStoreDiff", "compute_diff", "compute_entity_diff"]

T = TypeVar("T")
E = TypeVar("E", bound=Entity)


@dataclass(frozen=True)
class DataStoreDiff(Generic[T]):
    """Items to insert into and delete from a target to match a source."""

    to_insert: tuple[T, ...] = field(default_factory=tuple)
    to_delete: tuple[T, ...] = field(default_factory=tuple)

    @property
    def has_changes(self) -> bool:
        return bool(self.to_insert or self.to_delete)

    def __str__(self) -> str:
        return f"{len(self.to_insert)} to insert, {len(self.to_delete)} to delete"


def compute_diff(
    source: Sequence[T], target: Sequence[T], comparer: Comparer[T] | None = None
) -> DataStoreDiff[T]:
    """Compare two snapshots.

    Items in source without an equal item in target are inserts, items in
    target without an equal item in source are deletes. Order follows the
    input sequences.
    """
    if source is None or target is None:
        raise ValueError("source and target must not be None")
    equals = comparer or default_equals

    def _in(item: T, items: Sequence[T]) -> bool:
        return any(equals(other, item) for other in items)

    return DataStoreDiff(
        to_insert=tuple(item for item in source if not _in(item, target)),
        to_delete=tuple(item for item in target if not _in(item, source)),
    )


def compute_entity_diff(
    store_items: Sequence[E], persisted_items: Sequence[E]
) -> DataStoreDiff[E]:
    """Compare a store snapshot with persisted entities by id.

    Entities with id 0 were never persisted and are inserts. Persisted entities
    whose id no longer appears in the store are deletes.
    """
    if store_items is None or persisted_items is None:
        raise ValueError("store_items and persisted_items must not be None")
    store_ids = {item.id for item in store_items if item.id > 0}
    return DataStoreDiff(
        to_insert=tuple(item for item in store_items if item.id == 0),
        to_delete=tuple(item for item in persisted_items if item.id not in store_ids),
    )
