"""
Linkweave - Hypermedia representations for domain entity graphs.

This package provides tools for:
- Declaring resource types, attributes and typed relationships
- Resolving canonical self, related and collection URLs
- Walking relationship graphs with cycle-safe, depth-bounded embedding
- Building HAL and JSON:API documents from the same traversal
- Computing pagination links for collection pages
"""

__version__ = "0.1.0"

from linkweave.core.registry import Registry, EntityDescriptor, RelationshipDescriptor
from linkweave.core.resolver import LinkResolver
from linkweave.core.walker import GraphWalker, InclusionSpec
from linkweave.engine import HypermediaEngine

__all__ = [
    "__version__",
    "Registry",
    "EntityDescriptor",
    "RelationshipDescriptor",
    "LinkResolver",
    "GraphWalker",
    "InclusionSpec",
    "HypermediaEngine",
]
