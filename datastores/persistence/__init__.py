"""Persistence for data stores.

A PersistentStoreDecorator wraps any store and a PersistenceStrategy. It loads
the persisted items once on `initialize` and saves the full snapshot in the
background after every change.
"""

from .strategy import AsyncInitializable, PersistenceStrategy
from .binder import ItemChangeBinder
from .decorator import PersistentStoreDecorator
from .file import (
    FilePersistenceStrategy,
    JsonFilePersistenceStrategy,
    YamlFilePersistenceStrategy,
)

__all__ = [
    "AsyncInitializable",
    "PersistenceStrategy",
    "ItemChangeBinder",
    "PersistentStoreDecorator",
    "FilePersistenceStrategy",
    "JsonFilePersistenceStrategy",
    "YamlFilePersistenceStrategy",
]
