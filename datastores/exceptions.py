"""Exceptions related to datastores."""

__all__ = [
    "DataStoreException",
    "GlobalStoreAlreadyRegisteredError",
    "GlobalStoreNotRegisteredError",
    "DuplicateItemError",
    "InvalidRelationshipStateError",
    "PersistenceError",
    "MultipleChildrenError",
]


class DataStoreException(Exception):
    """Generic base exception used for this library."""


class GlobalStoreAlreadyRegisteredError(DataStoreException):
    """Raised when a global store for an item type is registered twice."""

    def __init__(self, store_type: type) -> None:
        super().__init__(
            f"A global store for type '{store_type.__qualname__}' has already been registered"
        )
        self.store_type = store_type


class GlobalStoreNotRegisteredError(DataStoreException):
    """Raised when resolving a global store that was never registered."""

    def __init__(self, store_type: type) -> None:
        super().__init__(
            f"No global store registered for type '{store_type.__qualname__}'"
        )
        self.store_type = store_type


class DuplicateItemError(DataStoreException):
    """Raised when an item equal to an existing item is added to a store."""


class InvalidRelationshipStateError(DataStoreException):
    """Raised when a relationship is used before a data source is selected."""


class PersistenceError(DataStoreException):
    """Raised when persisted data cannot be read back."""


class MultipleChildrenError(DataStoreException):
    """Raised when a one-to-one relation finds more than one child."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Expected at most one child for parent, but found {count}")
        self.count = count
