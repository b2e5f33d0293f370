"""Tests for the DataStoreBootstrap."""

from dataclasses import dataclass
import logging
from typing import Any

import pytest

from datastores.bootstrap import DataStoreBootstrap
from datastores.entity import Entity
from datastores.persistence import AsyncInitializable, PersistentStoreDecorator
from datastores.registration import DataStoreRegistrar
from datastores.registry import GlobalStoreRegistry
from datastores.store import InMemoryStore
from datastores.task import TaskServiceImpl


@dataclass(kw_only=True)
class Account(Entity):
    owner: str = ""


class AccountRegistrar(DataStoreRegistrar):
    def __init__(self, strategy: Any, task_service: TaskServiceImpl) -> None:
        self.strategy = strategy
        self.task_service = task_service
        self.register_calls = 0

    def register(self, registry: GlobalStoreRegistry) -> None:
        self.register_calls += 1
        registry.register_global(
            PersistentStoreDecorator(
                InMemoryStore(Account),
                self.strategy,
                task_service=self.task_service,
            )
        )


class Warmup(AsyncInitializable):
    def __init__(self) -> None:
        self.calls = 0

    async def initialize(self) -> None:
        self.calls += 1


def test_requires_arguments(registry: GlobalStoreRegistry) -> None:
    with pytest.raises(ValueError, match="registry"):
        DataStoreBootstrap(None, [])  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="registrars"):
        DataStoreBootstrap(registry, None)  # type: ignore[arg-type]


async def test_run(
    registry: GlobalStoreRegistry, make_strategy: Any, task_service: TaskServiceImpl
) -> None:
    """Test that registered stores are loaded before run returns."""
    strategy = make_strategy([Account(id=1, owner="ada")])
    registrar = AccountRegistrar(strategy, task_service)
    warmup = Warmup()
    bootstrap = DataStoreBootstrap(registry, [registrar], [warmup])
    assert not bootstrap.done

    await bootstrap.run()
    assert bootstrap.done
    assert registry.resolve_global(Account).items == (Account(id=1, owner="ada"),)
    assert warmup.calls == 1


async def test_run_is_idempotent(
    registry: GlobalStoreRegistry, make_strategy: Any, task_service: TaskServiceImpl
) -> None:
    strategy = make_strategy()
    registrar = AccountRegistrar(strategy, task_service)
    warmup = Warmup()
    bootstrap = DataStoreBootstrap(registry, [registrar], [warmup])
    await bootstrap.run()
    await bootstrap.run()
    assert registrar.register_calls == 1
    assert strategy.load_calls == 1
    assert warmup.calls == 1


async def test_retry_after_load_failure(
    registry: GlobalStoreRegistry, make_strategy: Any, task_service: TaskServiceImpl
) -> None:
    """Test that a failed initialization can be retried without re-registering."""
    strategy = make_strategy([Account(id=1)], fail_load=True)
    registrar = AccountRegistrar(strategy, task_service)
    bootstrap = DataStoreBootstrap(registry, [registrar])
    with pytest.raises(OSError):
        await bootstrap.run()
    assert not bootstrap.done

    strategy.fail_load = False
    await bootstrap.run()
    assert bootstrap.done
    assert registrar.register_calls == 1
    assert len(registry.resolve_global(Account)) == 1


def test_run_sync(registry: GlobalStoreRegistry, make_strategy: Any) -> None:
    strategy = make_strategy([Account(id=1)])
    task_service = TaskServiceImpl()
    bootstrap = DataStoreBootstrap(
        registry, [AccountRegistrar(strategy, task_service)]
    )
    bootstrap.run_sync()
    assert bootstrap.done
    assert len(registry.resolve_global(Account)) == 1
    task_service.shutdown(timeout=5)


async def test_run_traces_nested_steps(
    registry: GlobalStoreRegistry,
    make_strategy: Any,
    task_service: TaskServiceImpl,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Test that store loads are logged under the bootstrap steps."""
    caplog.set_level(logging.DEBUG, logger="datastores.context")
    registrar = AccountRegistrar(make_strategy([Account(id=1)]), task_service)
    await DataStoreBootstrap(registry, [registrar]).run()
    assert "[Trace] > Bootstrap > Register stores" in caplog.text
    assert "[Trace] > Bootstrap > Initialize stores > Load Account store" in caplog.text
    assert "[Trace] < Bootstrap (" in caplog.text
