"""Live parent/child relations kept current from store change events.

Unlike ParentChildRelationship, which is refreshed on demand, the relation
service indexes a child store by key and updates the index on every store
change. Children that are ObservableItems are re-indexed when their key field
changes.
"""

import bisect
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import StrEnum
import logging
import threading
from typing import Any, Generic, TypeVar

from datastores.entity import ObservableItem
from datastores.exceptions import MultipleChildrenError
from datastores.store import ChangeEvent, ChangeType, Store

__all__ = [
    "RelationDefinition",
    "ParentChildRelationService",
    "ParentChildRelationView",
    "OneToOneRelationView",
    "MultipleChildrenPolicy",
]

_LOGGER = logging.getLogger(__name__)

P = TypeVar("P")
C = TypeVar("C")
K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class RelationDefinition(Generic[P, C, K]):
    """Describes how children are matched to their parent by key."""

    parent_key: Callable[[P], K]
    """Returns the key of a parent."""

    child_key: Callable[[C], K]
    """Returns the key of the parent a child belongs to."""

    sort_key: Callable[[C], Any] | None = None
    """Optional ordering of children, insertion order otherwise."""

    def is_match(self, parent: P, child: C) -> bool:
        """Return True if the child belongs to the parent."""
        return bool(self.parent_key(parent) == self.child_key(child))


class MultipleChildrenPolicy(StrEnum):
    """How a one-to-one view handles a parent with several children."""

    THROW_IF_MULTIPLE = "throw_if_multiple"
    TAKE_FIRST = "take_first"


@dataclass
class _Tracked(Generic[C, K]):
    child: C
    key: K
    remove_listener: Callable[[], None] | None


class ParentChildRelationService(Generic[P, C, K]):
    """Maintains the children of every parent key of a child store."""

    def __init__(
        self, child_store: Store[C], definition: RelationDefinition[P, C, K]
    ) -> None:
        """Initialize the service and index the current children."""
        if child_store is None:
            raise ValueError("child_store must not be None")
        if definition is None:
            raise ValueError("definition must not be None")
        self._child_store = child_store
        self._definition = definition
        self._lock = threading.RLock()
        self._children: dict[K, list[C]] = {}
        self._tracked: dict[int, _Tracked[C, K]] = {}
        self._views: dict[int, ParentChildRelationView[P, C]] = {}
        self._closed = False
        self._remove_store_listener = child_store.add_listener(self._on_store_changed)
        self._rebuild()

    @property
    def definition(self) -> RelationDefinition[P, C, K]:
        return self._definition

    def get_relation(self, parent: P) -> "ParentChildRelationView[P, C]":
        """Return the live view of a parent's children.

        The same view instance is returned for the same parent object.
        """
        if parent is None:
            raise ValueError("parent must not be None")
        with self._lock:
            if (view := self._views.get(id(parent))) is not None and view.parent is parent:
                return view
            view = ParentChildRelationView(
                self, parent, self._definition.parent_key(parent)
            )
            self._views[id(parent)] = view
            return view

    def get_one_to_one_relation(
        self,
        parent: P,
        policy: MultipleChildrenPolicy = MultipleChildrenPolicy.THROW_IF_MULTIPLE,
    ) -> "OneToOneRelationView[P, C]":
        """Return a view of a parent expected to have at most one child."""
        return OneToOneRelationView(self.get_relation(parent), policy)

    def get_children(self, parent: P) -> tuple[C, ...]:
        """Return the current children of a parent."""
        return self.get_relation(parent).children

    def children_for_key(self, key: K) -> tuple[C, ...]:
        with self._lock:
            return tuple(self._children.get(key, ()))

    def close(self) -> None:
        """Stop following the child store and its items."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._remove_store_listener()
            self._untrack_all()
            self._views.clear()

    def _on_store_changed(self, event: ChangeEvent[C]) -> None:
        with self._lock:
            if self._closed:
                return
            if event.change_type in (ChangeType.ADD, ChangeType.BULK_ADD):
                for child in event.items:
                    self._track(child)
            elif event.change_type == ChangeType.REMOVE:
                for child in event.items:
                    self._untrack(child)
            elif event.change_type == ChangeType.CLEAR:
                self._untrack_all()
            elif event.change_type == ChangeType.UPDATE:
                self._rebuild()

    def _rebuild(self) -> None:
        with self._lock:
            self._untrack_all()
            for child in self._child_store.items:
                self._track(child)
            _LOGGER.debug(
                "Indexed %d children under %d keys", len(self._tracked), len(self._children)
            )

    def _track(self, child: C) -> None:
        if id(child) in self._tracked:
            return
        key = self._definition.child_key(child)
        remove_listener = None
        if isinstance(child, ObservableItem):
            remove_listener = child.add_change_listener(self._on_child_changed)
        self._tracked[id(child)] = _Tracked(child, key, remove_listener)
        self._insert(key, child)

    def _untrack(self, child: C) -> None:
        if (tracked := self._tracked.pop(id(child), None)) is None:
            return
        if tracked.remove_listener is not None:
            tracked.remove_listener()
        self._discard(tracked.key, child)

    def _untrack_all(self) -> None:
        for tracked in self._tracked.values():
            if tracked.remove_listener is not None:
                tracked.remove_listener()
        self._tracked.clear()
        self._children.clear()

    def _on_child_changed(self, child: Any, field_name: str) -> None:
        with self._lock:
            if (tracked := self._tracked.get(id(child))) is None:
                return
            new_key = self._definition.child_key(child)
            if new_key == tracked.key:
                return
            _LOGGER.debug("Child moved from key %s to %s", tracked.key, new_key)
            self._discard(tracked.key, child)
            tracked.key = new_key
            self._insert(new_key, child)

    def _insert(self, key: K, child: C) -> None:
        children = self._children.setdefault(key, [])
        if self._definition.sort_key is None:
            children.append(child)
        else:
            bisect.insort(children, child, key=self._definition.sort_key)

    def _discard(self, key: K, child: C) -> None:
        children = self._children.get(key)
        if not children:
            return
        for index, existing in enumerate(children):
            if existing is child:
                del children[index]
                break
        if not children:
            del self._children[key]


class ParentChildRelationView(Generic[P, C]):
    """A parent and its always-current children."""

    def __init__(
        self, service: ParentChildRelationService[P, C, Any], parent: P, key: Any
    ) -> None:
        self._service = service
        self._parent = parent
        self._key = key

    @property
    def parent(self) -> P:
        return self._parent

    @property
    def children(self) -> tuple[C, ...]:
        return self._service.children_for_key(self._key)


class OneToOneRelationView(Generic[P, C]):
    """View of a relation where a parent is expected to have at most one child."""

    def __init__(
        self,
        relation: ParentChildRelationView[P, C],
        policy: MultipleChildrenPolicy = MultipleChildrenPolicy.THROW_IF_MULTIPLE,
    ) -> None:
        if relation is None:
            raise ValueError("relation must not be None")
        self._relation = relation
        self._policy = policy

    @property
    def parent(self) -> P:
        return self._relation.parent

    @property
    def child(self) -> C | None:
        """The single child, or None.

        Raises:
            MultipleChildrenError: If there are several children and the policy
                is THROW_IF_MULTIPLE.
        """
        children = self._relation.children
        if not children:
            return None
        if len(children) > 1 and self._policy == MultipleChildrenPolicy.THROW_IF_MULTIPLE:
            raise MultipleChildrenError(len(children))
        return children[0]

    @property
    def has_child(self) -> bool:
        return self.child is not None

    def try_get_child(self) -> C | None:
        """Return the child, or None when there is none or it is ambiguous."""
        try:
            return self.child
        except MultipleChildrenError:
            return None
