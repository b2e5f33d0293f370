"""Registration of global stores at application startup.

An application declares its global stores in one or more registrars. Each
registrar adds store builders, and every builder constructs one store (plain
or wrapped in a PersistentStoreDecorator) and registers it in the registry.

Example:

    class AppRegistrar(DataStoreRegistrarBase):
        def configure_stores(self, paths: DataStorePaths) -> None:
            self.add_store(JsonStoreBuilder(Customer, paths.json_file("customers")))
            self.add_store(InMemoryStoreBuilder(Order))
"""

from abc import ABC, abstractmethod
import logging
from pathlib import Path
from typing import Generic, TypeVar

from .comparers import Comparer, EqualityComparerService
from .config import PersistenceOptions
from .paths import DataStorePaths
from .persistence import (
    FilePersistenceStrategy,
    JsonFilePersistenceStrategy,
    PersistentStoreDecorator,
    YamlFilePersistenceStrategy,
)
from .registry import GlobalStoreRegistry
from .store import Dispatcher, InMemoryStore, Store
from .task import TaskService

__all__ = [
    "DataStoreRegistrar",
    "DataStoreRegistrarBase",
    "StoreBuilder",
    "InMemoryStoreBuilder",
    "JsonStoreBuilder",
    "YamlStoreBuilder",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class DataStoreRegistrar(ABC):
    """Registers the global stores an application needs."""

    @abstractmethod
    def register(self, registry: GlobalStoreRegistry) -> None:
        """Create and register global stores."""


class StoreBuilder(ABC, Generic[T]):
    """Builds one global store."""

    def __init__(
        self,
        item_type: type[T],
        comparer: Comparer[T] | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        if item_type is None:
            raise ValueError("item_type must not be None")
        self.item_type = item_type
        self.comparer = comparer
        self.dispatcher = dispatcher

    @abstractmethod
    def build(self, comparer_service: EqualityComparerService) -> Store[T]:
        """Construct the store."""

    def register(
        self, registry: GlobalStoreRegistry, comparer_service: EqualityComparerService
    ) -> Store[T]:
        store = self.build(comparer_service)
        registry.register_global(store)
        return store

    def _inner_store(self, comparer_service: EqualityComparerService) -> InMemoryStore[T]:
        comparer = self.comparer
        if comparer is None:
            comparer = comparer_service.get_comparer(self.item_type)
        return InMemoryStore(self.item_type, comparer=comparer, dispatcher=self.dispatcher)


class InMemoryStoreBuilder(StoreBuilder[T]):
    """Builds a store without persistence."""

    def build(self, comparer_service: EqualityComparerService) -> Store[T]:
        return self._inner_store(comparer_service)


class _FileStoreBuilder(StoreBuilder[T]):
    """Builds a store persisted to a single file."""

    def __init__(
        self,
        item_type: type[T],
        path: Path | str,
        options: PersistenceOptions | None = None,
        comparer: Comparer[T] | None = None,
        dispatcher: Dispatcher | None = None,
        task_service: TaskService | None = None,
    ) -> None:
        super().__init__(item_type, comparer, dispatcher)
        if not path or not str(path).strip():
            raise ValueError("path must not be empty")
        self.path = Path(path)
        self.options = options or PersistenceOptions()
        self.task_service = task_service

    @abstractmethod
    def _strategy(self) -> FilePersistenceStrategy[T]:
        """Return the strategy for the store file."""

    def build(self, comparer_service: EqualityComparerService) -> Store[T]:
        _LOGGER.debug(
            "Building %s store persisted to %s", self.item_type.__qualname__, self.path
        )
        return PersistentStoreDecorator(
            self._inner_store(comparer_service),
            self._strategy(),
            auto_load=self.options.auto_load,
            auto_save_on_change=self.options.auto_save_on_change,
            task_service=self.task_service,
        )


class JsonStoreBuilder(_FileStoreBuilder[T]):
    """Builds a store persisted to a JSON file."""

    def _strategy(self) -> FilePersistenceStrategy[T]:
        return JsonFilePersistenceStrategy(self.path, self.item_type)


class YamlStoreBuilder(_FileStoreBuilder[T]):
    """Builds a store persisted to a YAML file."""

    def _strategy(self) -> FilePersistenceStrategy[T]:
        return YamlFilePersistenceStrategy(self.path, self.item_type)


class DataStoreRegistrarBase(DataStoreRegistrar):
    """Registrar that collects store builders from `configure_stores`."""

    def __init__(
        self,
        paths: DataStorePaths,
        comparer_service: EqualityComparerService | None = None,
    ) -> None:
        if paths is None:
            raise ValueError("paths must not be None")
        self._paths = paths
        self._comparer_service = comparer_service or EqualityComparerService()
        self._builders: list[StoreBuilder] = []

    @abstractmethod
    def configure_stores(self, paths: DataStorePaths) -> None:
        """Add the builders for this registrar's stores with `add_store`."""

    def add_store(self, builder: StoreBuilder) -> None:
        if builder is None:
            raise ValueError("builder must not be None")
        self._builders.append(builder)

    def register(self, registry: GlobalStoreRegistry) -> None:
        """Configure and register all stores of this registrar."""
        self._builders.clear()
        self.configure_stores(self._paths)
        for builder in self._builders:
            builder.register(registry, self._comparer_service)
        _LOGGER.debug(
            "%s registered %d stores", type(self).__name__, len(self._builders)
        )
