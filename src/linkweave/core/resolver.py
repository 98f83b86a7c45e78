"""Link resolution for hypermedia documents."""

from __future__ import annotations

from urllib.parse import quote

from linkweave.core.entity import EntityInstance, entity_id
from linkweave.core.registry import Registry
from linkweave.core.schema import Cardinality, LinkFormat
from linkweave.core.walker import Traversal, TraversalNode


class LinkResolver:
    """
    Resolves canonical URLs for entities and their relationships.

    Pure string templating over the registry's URL templates; no I/O.
    """

    def __init__(self, registry: Registry, base_url: str = "") -> None:
        self._registry = registry
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def resolve_self(self, instance: EntityInstance, type_name: str) -> str:
        """
        Build the canonical URL of an entity.

        Examples:
            resolver.resolve_self(order, "order")
            # Returns: /orders/123
        """
        descriptor = self._registry.resolve(type_name)
        value = quote(entity_id(instance, type_name), safe="")
        path = descriptor.url_template.format_map({"id": value, descriptor.id_field: value})
        return f"{self._base_url}{path}"

    def resolve_collection(self, type_name: str) -> str:
        """Build the collection URL of a type (e.g. /orders)."""
        descriptor = self._registry.resolve(type_name)
        return f"{self._base_url}{descriptor.collection_url}"

    def resolve_relationship(self, instance: EntityInstance, type_name: str, relation: str) -> str:
        """Build the relationship URL (/orders/123/relationships/items)."""
        self._registry.resolve(type_name).relationship(relation)
        return f"{self.resolve_self(instance, type_name)}/relationships/{relation}"

    def resolve_related(
        self,
        instance: EntityInstance,
        type_name: str,
        relation: str,
        fmt: LinkFormat = LinkFormat.JSONAPI,
        target: EntityInstance | None = None,
    ) -> str:
        """
        Build the related-resource URL for a relationship.

        To-many relationships resolve to a collection sub-resource in every
        format. To-one relationships resolve to the relationship URL for
        JSON:API and, for HAL, to the target's own URL when the target is
        known (otherwise to a sub-resource).
        """
        rel = self._registry.resolve(type_name).relationship(relation)
        fmt = LinkFormat(fmt)
        self_href = self.resolve_self(instance, type_name)

        if rel.cardinality == Cardinality.MANY:
            return f"{self_href}/{relation}"
        if fmt == LinkFormat.JSONAPI:
            return f"{self_href}/relationships/{relation}"
        if target is not None:
            return self.resolve_self(target, rel.target_type)
        return f"{self_href}/{relation}"

    def annotate(self, traversal: Traversal) -> Traversal:
        """
        Stamp self and related links on every node of a traversal.

        Related links are resolved for every output format so any builder
        can consume the same traversal.
        """
        seen: set[int] = set()
        pending = list(traversal.nodes)
        while pending:
            node = pending.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            self._annotate_node(node)
            for edge in node.edges:
                pending.extend(edge.targets)
        return traversal

    def _annotate_node(self, node: TraversalNode) -> None:
        node.self_href = self.resolve_self(node.instance, node.type_name)
        for edge in node.edges:
            edge.relationship_href = self.resolve_relationship(node.instance, node.type_name, edge.name)
            target = edge.targets[0].instance if len(edge.targets) == 1 else None
            for fmt in LinkFormat:
                edge.hrefs[fmt] = self.resolve_related(
                    node.instance, node.type_name, edge.name, fmt, target=target
                )
