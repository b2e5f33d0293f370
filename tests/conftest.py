"""Shared fixtures for datastores tests."""

import asyncio
from collections.abc import Callable, Generator, Sequence
from typing import Any

import pytest

from datastores.facade import DataStores
from datastores.persistence import PersistenceStrategy
from datastores.registry import GlobalStoreRegistry
from datastores.task import TaskServiceImpl


class FakePersistenceStrategy(PersistenceStrategy[Any]):
    """In-memory strategy that records every load and save call."""

    def __init__(
        self,
        initial: Sequence[Any] = (),
        fail_load: bool = False,
        fail_save: bool = False,
        save_delay: float = 0,
    ) -> None:
        self.persisted: list[Any] = list(initial)
        self.load_calls = 0
        self.save_calls = 0
        self.saved_snapshots: list[list[Any]] = []
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.save_delay = save_delay

    async def load_all(self) -> list[Any]:
        self.load_calls += 1
        await asyncio.sleep(0)
        if self.fail_load:
            raise OSError("load failed")
        return list(self.persisted)

    async def save_all(self, items: Sequence[Any]) -> None:
        self.save_calls += 1
        if self.save_delay:
            await asyncio.sleep(self.save_delay)
        if self.fail_save:
            raise OSError("save failed")
        self.persisted = list(items)
        self.saved_snapshots.append(list(items))


@pytest.fixture
def make_strategy() -> Callable[..., FakePersistenceStrategy]:
    """Fixture returning a factory for fake persistence strategies."""
    return FakePersistenceStrategy


@pytest.fixture
def task_service() -> Generator[TaskServiceImpl, None, None]:
    """Task service used by persisted stores within a test."""
    service = TaskServiceImpl()
    yield service
    service.shutdown(timeout=5)


@pytest.fixture
def registry() -> GlobalStoreRegistry:
    """Create an empty global store registry."""
    return GlobalStoreRegistry()


@pytest.fixture
def stores(registry: GlobalStoreRegistry) -> DataStores:
    """Create a facade over the registry."""
    return DataStores(registry)
