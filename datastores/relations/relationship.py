"""A parent entity and the subset of a child store that belongs to it."""

from collections.abc import Callable
import logging
from typing import Generic, TypeVar

from datastores.exceptions import InvalidRelationshipStateError
from datastores.facade import DataStores
from datastores.store import InMemoryStore, Store

__all__ = ["ParentChildRelationship"]

_LOGGER = logging.getLogger(__name__)

P = TypeVar("P")
C = TypeVar("C")

_UNBOUND_MESSAGE = (
    "Data source has not been set, call use_global_data_source() or "
    "use_snapshot_from_global() first"
)


class ParentChildRelationship(Generic[P, C]):
    """Derived view of the children of one parent.

    A relationship is unbound until a data source is chosen. `refresh` then
    replaces `childs` with the data source items matching the filter. The
    children are not kept in sync with the data source between refreshes.
    """

    def __init__(
        self,
        stores: DataStores,
        parent: P,
        child_type: type[C],
        filter: Callable[[P, C], bool],
    ) -> None:
        """Initialize the ParentChildRelationship.

        Args:
            stores: Facade used to resolve the child data source.
            parent: The parent entity, fixed for the life of the relationship.
            child_type: The item type of the child store.
            filter: Returns True when a child belongs to the parent.
        """
        if stores is None:
            raise ValueError("stores must not be None")
        if parent is None:
            raise ValueError("parent must not be None")
        if child_type is None:
            raise ValueError("child_type must not be None")
        if filter is None:
            raise ValueError("filter must not be None")
        self._stores = stores
        self._parent = parent
        self._child_type = child_type
        self._filter = filter
        self._data_source: Store[C] | None = None
        self._childs: InMemoryStore[C] = InMemoryStore(child_type)

    @property
    def parent(self) -> P:
        return self._parent

    @property
    def filter(self) -> Callable[[P, C], bool]:
        return self._filter

    @property
    def childs(self) -> InMemoryStore[C]:
        """The children matched by the last refresh."""
        return self._childs

    @property
    def is_bound(self) -> bool:
        return self._data_source is not None

    @property
    def data_source(self) -> Store[C]:
        """The store the children are read from on refresh.

        Raises:
            InvalidRelationshipStateError: If no data source has been chosen.
        """
        if self._data_source is None:
            raise InvalidRelationshipStateError(_UNBOUND_MESSAGE)
        return self._data_source

    def use_global_data_source(self) -> None:
        """Read children live from the global child store on every refresh."""
        self._data_source = self._stores.get_global(self._child_type)

    def use_snapshot_from_global(
        self, predicate: Callable[[C], bool] | None = None
    ) -> None:
        """Read children from a private copy of the global child store.

        Changes made to the global store after this call are not seen by later
        refreshes.
        """
        self._data_source = self._stores.create_local_snapshot_from_global(
            self._child_type, predicate
        )

    def refresh(self) -> None:
        """Replace the children with the data source items matching the filter.

        Raises:
            InvalidRelationshipStateError: If no data source has been chosen.
        """
        if self._data_source is None:
            raise InvalidRelationshipStateError(_UNBOUND_MESSAGE)
        matches = [
            child
            for child in self._data_source.items
            if self._filter(self._parent, child)
        ]
        self._childs.clear()
        self._childs.add_range(matches)
        _LOGGER.debug(
            "Refreshed %s children: %d matched", self._child_type.__qualname__, len(matches)
        )
