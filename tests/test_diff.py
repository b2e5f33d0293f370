"""Tests for computing store diffs."""

from dataclasses import dataclass

import pytest

from datastores.comparers import entity_id_equals
from datastores.diff import DataStoreDiff, compute_diff, compute_entity_diff
from datastores.entity import Entity


@dataclass(kw_only=True)
class Row(Entity):
    value: str = ""


def test_compute_diff() -> None:
    diff = compute_diff(["a", "b", "c"], ["b", "c", "d"])
    assert diff == DataStoreDiff(to_insert=("a",), to_delete=("d",))
    assert diff.has_changes
    assert str(diff) == "1 to insert, 1 to delete"


def test_compute_diff_no_changes() -> None:
    diff = compute_diff(["a", "b"], ["b", "a"])
    assert not diff.has_changes
    assert not DataStoreDiff().has_changes


def test_compute_diff_with_comparer() -> None:
    """Test that a comparer decides which items are the same."""
    source = [Row(id=1, value="new"), Row(id=2)]
    target = [Row(id=1, value="old"), Row(id=3)]
    diff = compute_diff(source, target, comparer=entity_id_equals)
    assert diff.to_insert == (Row(id=2),)
    assert diff.to_delete == (Row(id=3),)


def test_compute_diff_none() -> None:
    with pytest.raises(ValueError):
        compute_diff(None, [])  # type: ignore[arg-type]


def test_compute_entity_diff() -> None:
    """Test that unsaved entities are inserted and missing ids are deleted."""
    unsaved = Row(value="new")
    store_items = [Row(id=1), Row(id=2), unsaved]
    persisted = [Row(id=1), Row(id=2), Row(id=3)]
    diff = compute_entity_diff(store_items, persisted)
    assert diff.to_insert == (unsaved,)
    assert diff.to_delete == (Row(id=3),)


def test_compute_entity_diff_empty_store() -> None:
    persisted = [Row(id=1), Row(id=2)]
    diff = compute_entity_diff([], persisted)
    assert diff.to_insert == ()
    assert diff.to_delete == tuple(persisted)
