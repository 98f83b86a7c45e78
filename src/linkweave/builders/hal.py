"""HAL document assembly."""

from __future__ import annotations

from typing import Any, Sequence

from linkweave.builders.base import require_links
from linkweave.core.document import HypermediaDocument
from linkweave.core.pagination import PageLinks
from linkweave.core.schema import HAL_MEDIA_TYPE, LinkFormat
from linkweave.core.walker import RelationEdge, TraversalNode


class HALBuilder:
    """
    Builds ``application/hal+json`` documents.

    Every resource carries a ``self`` link. Embedded relationships are
    nested under ``_embedded`` keyed by their link relation; relationships
    that are not fully embedded are linked under ``_links``.
    """

    format = LinkFormat.HAL
    media_type = HAL_MEDIA_TYPE

    def build(self, root: TraversalNode, nodes: Sequence[TraversalNode] = ()) -> HypermediaDocument:
        return HypermediaDocument(self.media_type, self._resource(root))

    def build_collection(
        self,
        roots: Sequence[TraversalNode],
        nodes: Sequence[TraversalNode] = (),
        links: PageLinks | None = None,
        collection_rel: str | None = None,
    ) -> HypermediaDocument:
        rel = collection_rel or (roots[0].type_name if roots else "items")
        body: dict[str, Any] = {
            "_links": {name: {"href": href} for name, href in (links.to_dict() if links else {}).items()},
            "count": len(roots),
            "_embedded": {rel: [self._resource(node) for node in roots]},
        }
        return HypermediaDocument(self.media_type, body)

    def _resource(self, node: TraversalNode) -> dict[str, Any]:
        require_links(node)
        links: dict[str, Any] = {"self": {"href": node.self_href}}
        embedded: dict[str, Any] = {}

        for edge in node.edges:
            rel = edge.relationship.rel
            if self._has_embedded(edge):
                targets = [self._resource(t) for t in edge.embedded_targets]
                embedded[rel] = targets if edge.relationship.is_many else targets[0]
            if not edge.fully_embedded:
                links[rel] = {"href": edge.href(self.format)}

        resource: dict[str, Any] = {"_links": links}
        resource.update(node.attributes())
        if embedded:
            resource["_embedded"] = embedded
        return resource

    @staticmethod
    def _has_embedded(edge: RelationEdge) -> bool:
        if edge.embedded_targets:
            return True
        # An embedded, empty to-many relationship renders as an empty array.
        return edge.relationship.is_many and edge.fetched and not edge.targets
