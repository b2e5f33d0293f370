"""
datastores provides typed, observable, optionally persisted in-memory
collections shared across an application.

Application code obtains stores through the `facade.DataStores` facade:
global stores are registered once per item type in a
`registry.GlobalStoreRegistry` at startup (see `registration` and
`bootstrap`), while local stores are independent copies for a single usage
scope.
"""

__all__ = [
    "store",
    "persistence",
    "registry",
    "factory",
    "facade",
    "relations",
    "registration",
    "bootstrap",
    "comparers",
    "entity",
    "diff",
    "sync",
    "paths",
    "config",
    "context",
    "exceptions",
    "task",
]
