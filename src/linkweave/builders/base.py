"""Representation builder capability."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from linkweave.core.document import HypermediaDocument
from linkweave.core.pagination import PageLinks
from linkweave.core.schema import LinkFormat
from linkweave.core.walker import TraversalNode


@runtime_checkable
class RepresentationBuilder(Protocol):
    """
    Turns an annotated traversal into a wire-format document.

    Builders only assemble; traversal and link templating happen before
    they are called, so any builder can consume the same traversal.
    """

    format: LinkFormat
    media_type: str

    def build(
        self, root: TraversalNode, nodes: Sequence[TraversalNode] = ()
    ) -> HypermediaDocument: ...

    def build_collection(
        self,
        roots: Sequence[TraversalNode],
        nodes: Sequence[TraversalNode] = (),
        links: PageLinks | None = None,
        collection_rel: str | None = None,
    ) -> HypermediaDocument: ...


def require_links(node: TraversalNode) -> None:
    """Fail fast on nodes the link resolver has not annotated."""
    if not node.self_href:
        raise ValueError(f"{node!r} has no links; annotate the traversal before building")
