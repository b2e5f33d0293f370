"""Parent/child relations over data stores.

- ParentChildRelationship is refreshed on demand from a chosen data source.
- ParentChildRelationService keeps every parent's children current from store
  change events.
"""

from .relationship import ParentChildRelationship
from .service import (
    MultipleChildrenPolicy,
    OneToOneRelationView,
    ParentChildRelationService,
    ParentChildRelationView,
    RelationDefinition,
)

__all__ = [
    "ParentChildRelationship",
    "ParentChildRelationService",
    "ParentChildRelationView",
    "OneToOneRelationView",
    "MultipleChildrenPolicy",
    "RelationDefinition",
]
