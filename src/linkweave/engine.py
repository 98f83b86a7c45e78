"""Engine wiring walker, resolver, builders and pagination together."""

from __future__ import annotations

from typing import Iterable

import structlog

from linkweave.builders import RepresentationBuilder, get_builder
from linkweave.core.document import HypermediaDocument
from linkweave.core.entity import EntityInstance
from linkweave.core.pagination import CursorPage, OffsetPage, PaginationAdapter
from linkweave.core.registry import Registry
from linkweave.core.resolver import LinkResolver
from linkweave.core.schema import LinkFormat
from linkweave.core.walker import GraphWalker, InclusionSpec, Traversal
from linkweave.settings import EngineSettings

logger = structlog.get_logger()

Include = InclusionSpec | str | Iterable[str] | None


class HypermediaEngine:
    """
    Renders entities as HAL or JSON:API documents.

    Holds only read-only collaborators, so one engine can serve
    concurrent requests. Each call walks, annotates and builds from
    scratch; a failure anywhere means no document is returned.
    """

    def __init__(self, registry: Registry, settings: EngineSettings | None = None) -> None:
        settings = settings or EngineSettings().merged_with(registry.settings)
        self._registry = registry
        self._settings = settings
        self._walker = GraphWalker(registry, max_depth=settings.max_depth)
        self._resolver = LinkResolver(registry, base_url=settings.base_url)
        self._paginator = PaginationAdapter(
            cursor_param=settings.cursor_param,
            after_param=settings.after_param,
            before_param=settings.before_param,
            last_param=settings.last_param,
            offset_param=settings.offset_param,
            limit_param=settings.limit_param,
        )

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def walker(self) -> GraphWalker:
        return self._walker

    @property
    def resolver(self) -> LinkResolver:
        return self._resolver

    @property
    def paginator(self) -> PaginationAdapter:
        return self._paginator

    def builder(self, fmt: LinkFormat | str | RepresentationBuilder | None = None) -> RepresentationBuilder:
        """Get a builder by format name, or pass a builder object through."""
        if fmt is None:
            return get_builder(self._settings.default_format)
        if isinstance(fmt, (LinkFormat, str)):
            return get_builder(fmt)
        return fmt

    def traverse(self, root: EntityInstance, type_name: str, include: Include = None) -> Traversal:
        """Walk and annotate a single root; the result is format-independent."""
        return self._resolver.annotate(self._walker.walk(root, type_name, include))

    def render(
        self,
        root: EntityInstance,
        type_name: str,
        include: Include = None,
        fmt: LinkFormat | str | RepresentationBuilder | None = None,
    ) -> HypermediaDocument:
        """Render a single entity."""
        builder = self.builder(fmt)
        traversal = self.traverse(root, type_name, include)
        logger.debug(
            "Rendering resource",
            type_name=type_name,
            format=builder.format.value,
            nodes=len(traversal),
            include=str(traversal.include),
            depth=traversal.depth,
        )
        return builder.build(traversal.root, traversal.nodes)

    async def render_async(
        self,
        root: EntityInstance,
        type_name: str,
        include: Include = None,
        fmt: LinkFormat | str | RepresentationBuilder | None = None,
    ) -> HypermediaDocument:
        """Render a single entity from an asynchronous data layer."""
        builder = self.builder(fmt)
        traversal = self._resolver.annotate(await self._walker.walk_async(root, type_name, include))
        return builder.build(traversal.root, traversal.nodes)

    def render_collection(
        self,
        page: CursorPage | OffsetPage,
        type_name: str,
        include: Include = None,
        fmt: LinkFormat | str | RepresentationBuilder | None = None,
        base_url: str | None = None,
    ) -> HypermediaDocument:
        """Render one page of a collection with pagination links."""
        builder = self.builder(fmt)
        base_url = base_url or self._resolver.resolve_collection(type_name)
        links = self._paginator.paginate(page, base_url)
        traversal = self._resolver.annotate(self._walker.walk_many(list(page.items), type_name, include))
        logger.debug(
            "Rendering collection",
            type_name=type_name,
            format=builder.format.value,
            items=len(page.items),
        )
        return builder.build_collection(traversal.roots, traversal.nodes, links, collection_rel=type_name)

    async def render_collection_async(
        self,
        page: CursorPage | OffsetPage,
        type_name: str,
        include: Include = None,
        fmt: LinkFormat | str | RepresentationBuilder | None = None,
        base_url: str | None = None,
    ) -> HypermediaDocument:
        """Render one page of a collection from an asynchronous data layer."""
        builder = self.builder(fmt)
        base_url = base_url or self._resolver.resolve_collection(type_name)
        links = self._paginator.paginate(page, base_url)
        traversal = self._resolver.annotate(
            await self._walker.walk_many_async(list(page.items), type_name, include)
        )
        return builder.build_collection(traversal.roots, traversal.nodes, links, collection_rel=type_name)
