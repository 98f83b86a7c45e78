"""Core domain models for hypermedia representation."""

from linkweave.core.document import HypermediaDocument
from linkweave.core.entity import EntityInstance
from linkweave.core.errors import (
    DuplicateTypeError,
    HypermediaError,
    InvalidPageError,
    MissingIdError,
    RegistryFrozenError,
    RelationFetchError,
    UnknownRelationError,
    UnknownTypeError,
)
from linkweave.core.pagination import CursorPage, OffsetPage, PageLinks, PaginationAdapter, paginate
from linkweave.core.registry import EntityDescriptor, Registry, RelationshipDescriptor
from linkweave.core.resolver import LinkResolver
from linkweave.core.schema import Cardinality, LinkFormat, RegistrySchema
from linkweave.core.store import DictEntity, InMemoryStore
from linkweave.core.walker import GraphWalker, InclusionSpec, RelationEdge, Traversal, TraversalNode

__all__ = [
    "HypermediaDocument",
    "EntityInstance",
    "HypermediaError",
    "UnknownTypeError",
    "DuplicateTypeError",
    "UnknownRelationError",
    "RegistryFrozenError",
    "MissingIdError",
    "RelationFetchError",
    "InvalidPageError",
    "CursorPage",
    "OffsetPage",
    "PageLinks",
    "PaginationAdapter",
    "paginate",
    "EntityDescriptor",
    "Registry",
    "RelationshipDescriptor",
    "LinkResolver",
    "Cardinality",
    "LinkFormat",
    "RegistrySchema",
    "DictEntity",
    "InMemoryStore",
    "GraphWalker",
    "InclusionSpec",
    "RelationEdge",
    "Traversal",
    "TraversalNode",
]
