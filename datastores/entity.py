"""Base types for items held in a data store.

Any object can be stored, but two optional building blocks are provided:

- `Entity` is a dataclass with a numeric `id` that the entity id comparer and
  the entity diff understand. An `id` of 0 means the entity was never persisted.
- `ObservableItem` is a capability for items that announce their own field
  changes, used by persisted stores to save on item edits and by the live
  relation service to re-index children.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any

from mashumaro import DataClassDictMixin

__all__ = [
    "Entity",
    "ObservableItem",
    "ObservableEntity",
    "ItemChangeListener",
]

_LOGGER = logging.getLogger(__name__)

ItemChangeListener = Callable[[Any, str], None]
"""Called with the changed item and the name of the changed field."""

_MISSING = object()


@dataclass(kw_only=True)
class Entity(DataClassDictMixin):
    """Base class for entities identified by a numeric id."""

    id: int = 0


class ObservableItem:
    """Capability for items that notify listeners when a field changes."""

    def add_change_listener(self, callback: ItemChangeListener) -> Callable[[], None]:
        """Register a callback for field changes.

        Returns a callable that can be called to remove the listener.
        """
        listeners = self._change_listeners()
        listeners.append(callback)

        def remove() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return remove

    def notify_changed(self, field_name: str) -> None:
        """Invoke all change listeners for the named field."""
        for cb in list(self._change_listeners()):
            try:
                cb(self, field_name)
            except Exception:
                _LOGGER.exception(
                    "Item change listener failed for %s.%s",
                    type(self).__name__,
                    field_name,
                )

    def _change_listeners(self) -> list[ItemChangeListener]:
        # Dataclass __init__ never calls a mixin __init__, so create lazily.
        return self.__dict__.setdefault("_item_change_listeners", [])


@dataclass(kw_only=True, eq=True)
class ObservableEntity(Entity, ObservableItem):
    """Entity that fires a change notification on every public field assignment."""

    def __setattr__(self, name: str, value: Any) -> None:
        old = self.__dict__.get(name, _MISSING)
        super().__setattr__(name, value)
        if name.startswith("_") or old is _MISSING:
            return
        if old != value:
            self.notify_changed(name)
