"""JSON:API document assembly."""

from __future__ import annotations

from typing import Any, Sequence

from linkweave.builders.base import require_links
from linkweave.core.document import HypermediaDocument
from linkweave.core.pagination import PageLinks
from linkweave.core.schema import JSONAPI_MEDIA_TYPE, LinkFormat
from linkweave.core.walker import RelationEdge, TraversalNode

JSONAPI_VERSION = "1.1"


def identifier(node: TraversalNode) -> dict[str, str]:
    """Resource identifier object for a node."""
    return {"type": node.type_name, "id": node.id}


class JSONAPIBuilder:
    """
    Builds ``application/vnd.api+json`` documents.

    Primary data goes under ``data``; every embedded node of the traversal
    appears once under ``included``, keyed by ``(type, id)``, however many
    paths reach it. Relationship objects are always present and carry
    resource linkage only when every fetched target is embedded.
    """

    format = LinkFormat.JSONAPI
    media_type = JSONAPI_MEDIA_TYPE

    def build(self, root: TraversalNode, nodes: Sequence[TraversalNode] = ()) -> HypermediaDocument:
        body: dict[str, Any] = {
            "jsonapi": {"version": JSONAPI_VERSION},
            "links": {"self": root.self_href},
            "data": self._resource(root),
        }
        included = self._included(nodes, {root.key})
        if included:
            body["included"] = included
        return HypermediaDocument(self.media_type, body)

    def build_collection(
        self,
        roots: Sequence[TraversalNode],
        nodes: Sequence[TraversalNode] = (),
        links: PageLinks | None = None,
        collection_rel: str | None = None,
    ) -> HypermediaDocument:
        body: dict[str, Any] = {
            "jsonapi": {"version": JSONAPI_VERSION},
            "links": links.to_dict() if links else {},
            "meta": {"count": len(roots)},
            "data": [self._resource(node) for node in roots],
        }
        included = self._included(nodes, {node.key for node in roots})
        if included:
            body["included"] = included
        return HypermediaDocument(self.media_type, body)

    def _included(
        self, nodes: Sequence[TraversalNode], primary: set[tuple[str, str]]
    ) -> list[dict[str, Any]]:
        """Deduplicated resources for every embedded non-primary node."""
        included: dict[tuple[str, str], dict[str, Any]] = {}
        for node in nodes:
            if not node.embedded or node.key in primary:
                continue
            resource = self._resource(node)
            existing = included.get(node.key)
            if existing is None:
                included[node.key] = resource
            else:
                self._merge_linkage(existing, resource)
        return list(included.values())

    @staticmethod
    def _merge_linkage(existing: dict[str, Any], resource: dict[str, Any]) -> None:
        # A node reached by a deeper include path may carry linkage the
        # first occurrence lacks.
        relationships = existing.get("relationships", {})
        for name, rel in resource.get("relationships", {}).items():
            if "data" not in rel:
                continue
            current = relationships.get(name)
            if current is None or "data" not in current:
                relationships[name] = rel
            elif isinstance(current["data"], list):
                seen = {(i["type"], i["id"]) for i in current["data"]}
                current["data"].extend(i for i in rel["data"] if (i["type"], i["id"]) not in seen)

    def _resource(self, node: TraversalNode) -> dict[str, Any]:
        require_links(node)
        attributes = node.attributes()
        attributes.pop(node.descriptor.id_field, None)

        resource: dict[str, Any] = identifier(node)
        resource["attributes"] = attributes
        resource["relationships"] = {edge.name: self._relationship(edge) for edge in node.edges}
        resource["links"] = {"self": node.self_href}
        return resource

    def _relationship(self, edge: RelationEdge) -> dict[str, Any]:
        rel: dict[str, Any] = {
            "links": {
                "self": edge.relationship_href,
                "related": edge.href(self.format),
            }
        }
        if not edge.fetched or edge.linked_targets:
            # Targets cut off by a cycle would leave the linkage incomplete.
            return rel

        embedded = edge.embedded_targets
        if edge.relationship.is_many:
            if embedded or not edge.targets:
                rel["data"] = [identifier(t) for t in embedded]
        elif embedded:
            rel["data"] = identifier(embedded[0])
        elif not edge.targets:
            rel["data"] = None
        return rel
