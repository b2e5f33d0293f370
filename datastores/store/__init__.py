"""
The store module provides a typed, thread-safe, observable collection of items.

- Every mutation is serialized by a per-store lock.
- Every mutation fires exactly one ChangeEvent to registered listeners.
- `items` always returns an immutable snapshot.

This abstract interface allows for various implementations (in-memory, persistent, etc.).
"""

from .store import ChangeEvent, ChangeListener, ChangeType, Dispatcher, Store
from .in_memory import InMemoryStore

__all__ = [
    "Store",
    "ChangeEvent",
    "ChangeListener",
    "ChangeType",
    "Dispatcher",
    "InMemoryStore",
]
