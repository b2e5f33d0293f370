"""Configuration objects for datastores."""

from dataclasses import dataclass


@dataclass
class PersistenceOptions:
    """Configuration for a store wrapped in a PersistentStoreDecorator."""

    auto_load: bool = True
    """Load persisted items the first time the store is initialized."""

    auto_save_on_change: bool = True
    """Save the full item snapshot in the background after every change."""


@dataclass
class SyncOptions:
    """Configuration for synchronizing two stores."""

    source_to_target: bool = True
    target_to_source: bool = True
    initial_sync: bool = True
