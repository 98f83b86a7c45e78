"""Breadth-first relationship graph traversal."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import structlog

from linkweave.core.entity import EntityInstance, entity_key
from linkweave.core.errors import RelationFetchError
from linkweave.core.registry import EntityDescriptor, Registry, RelationshipDescriptor
from linkweave.core.schema import LinkFormat

logger = structlog.get_logger()

DEFAULT_MAX_DEPTH = 5


@dataclass(frozen=True)
class InclusionSpec:
    """
    Relationship paths to embed rather than link.

    A path embeds every prefix of itself: ``items.product`` also embeds
    ``items``.
    """

    paths: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def parse(cls, value: InclusionSpec | str | Iterable[str] | None) -> InclusionSpec:
        """Build from a comma-separated string or a sequence of dotted paths."""
        if value is None:
            return cls()
        if isinstance(value, InclusionSpec):
            return value
        if isinstance(value, str):
            value = value.split(",")

        paths: list[tuple[str, ...]] = []
        for raw in value:
            raw = raw.strip()
            if not raw:
                continue
            path = tuple(part.strip() for part in raw.split("."))
            if any(not part for part in path):
                raise ValueError(f"Invalid inclusion path: {raw!r}")
            if path not in paths:
                paths.append(path)
        return cls(tuple(paths))

    def includes(self, path: Sequence[str]) -> bool:
        """Check if a relationship path should be embedded."""
        path = tuple(path)
        return any(p[: len(path)] == path for p in self.paths)

    def validate(self, registry: Registry, type_name: str) -> None:
        """Check every path names declared relationships, starting at type_name."""
        for path in self.paths:
            descriptor = registry.resolve(type_name)
            for name in path:
                rel = descriptor.relationship(name)
                descriptor = registry.resolve(rel.target_type)

    def __bool__(self) -> bool:
        return bool(self.paths)

    def __str__(self) -> str:
        return ",".join(".".join(p) for p in self.paths)


@dataclass(eq=False)
class RelationEdge:
    """One relationship of a traversal node.

    ``fetched`` is true when the related entities were loaded from the data
    layer; ``targets`` then holds one node per related entity, embedded or
    not. ``hrefs`` (one related URL per format) and ``relationship_href``
    are filled in by the link resolver.
    """

    relationship: RelationshipDescriptor
    path: tuple[str, ...]
    fetched: bool = False
    targets: list[TraversalNode] = field(default_factory=list)
    hrefs: dict[LinkFormat, str] = field(default_factory=dict)
    relationship_href: str = ""

    @property
    def name(self) -> str:
        return self.relationship.name

    @property
    def embedded_targets(self) -> list[TraversalNode]:
        return [t for t in self.targets if t.embedded]

    @property
    def linked_targets(self) -> list[TraversalNode]:
        return [t for t in self.targets if not t.embedded]

    @property
    def fully_embedded(self) -> bool:
        """True when the edge was fetched and every target is embedded."""
        return self.fetched and all(t.embedded for t in self.targets)

    def href(self, fmt: LinkFormat) -> str:
        return self.hrefs[fmt]


@dataclass(eq=False)
class TraversalNode:
    """An entity reached during traversal.

    Embedded nodes carry their relationship edges; reference nodes
    (``embedded=False``, cut off by a cycle) carry none.
    """

    instance: EntityInstance
    descriptor: EntityDescriptor
    path: tuple[str, ...]
    embedded: bool
    depth: int
    key: tuple[str, str]
    ancestors: frozenset[tuple[str, str]] = frozenset()
    edges: list[RelationEdge] = field(default_factory=list)
    self_href: str = ""

    @property
    def type_name(self) -> str:
        return self.descriptor.type_name

    @property
    def id(self) -> str:
        return self.key[1]

    def attributes(self) -> dict[str, Any]:
        """Declared attributes of the instance, in declaration order."""
        values = self.instance.get_attributes()
        return {name: values[name] for name in self.descriptor.attributes if name in values}

    def __repr__(self) -> str:
        flag = "embedded" if self.embedded else "link"
        return f"TraversalNode({self.type_name}#{self.id}, path={'.'.join(self.path) or '<root>'}, {flag})"


@dataclass(frozen=True)
class Traversal:
    """Result of a walk: root nodes plus every embedded node in breadth-first order."""

    roots: tuple[TraversalNode, ...]
    nodes: tuple[TraversalNode, ...]
    include: InclusionSpec = InclusionSpec()

    @property
    def root(self) -> TraversalNode:
        return self.roots[0]

    @property
    def depth(self) -> int:
        """Deepest level at which a node was embedded."""
        return max((n.depth for n in self.nodes), default=0)

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


class GraphWalker:
    """
    Walks the relationship graph of a root entity breadth-first.

    Embedding stops at the first cycle on the current path and at
    ``max_depth``; in both cases the relationship is emitted link-only.
    The same entity may still be embedded in sibling branches.
    """

    def __init__(self, registry: Registry, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self._registry = registry
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def walk(
        self,
        root: EntityInstance,
        type_name: str,
        include: InclusionSpec | str | Iterable[str] | None = None,
    ) -> Traversal:
        """Traverse from a single root entity."""
        return self.walk_many([root], type_name, include)

    def walk_many(
        self,
        roots: Sequence[EntityInstance],
        type_name: str,
        include: InclusionSpec | str | Iterable[str] | None = None,
    ) -> Traversal:
        """Traverse from several roots of the same type (a collection)."""
        spec, level = self._start(roots, type_name, include)
        nodes = list(level)

        while level:
            requests = self._plan(level, spec)
            results = [self._fetch(node, edge) for node, edge in requests]
            level = self._expand(requests, results)
            nodes.extend(level)

        return Traversal(tuple(nodes[: len(roots)]), tuple(nodes), spec)

    async def walk_async(
        self,
        root: EntityInstance,
        type_name: str,
        include: InclusionSpec | str | Iterable[str] | None = None,
    ) -> Traversal:
        """Traverse from a single root, awaiting asynchronous fetches."""
        return await self.walk_many_async([root], type_name, include)

    async def walk_many_async(
        self,
        roots: Sequence[EntityInstance],
        type_name: str,
        include: InclusionSpec | str | Iterable[str] | None = None,
    ) -> Traversal:
        """
        Traverse several roots, fetching each breadth-first level concurrently.

        All fetches of a level are joined before the next level starts. If one
        fetch fails the remaining fetches of that level are cancelled and the
        error propagates; no partial traversal is returned.
        """
        spec, level = self._start(roots, type_name, include)
        nodes = list(level)

        while level:
            requests = self._plan(level, spec)
            tasks = [asyncio.ensure_future(self._fetch_async(node, edge)) for node, edge in requests]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            level = self._expand(requests, list(results))
            nodes.extend(level)

        return Traversal(tuple(nodes[: len(roots)]), tuple(nodes), spec)

    def _start(
        self,
        roots: Sequence[EntityInstance],
        type_name: str,
        include: InclusionSpec | str | Iterable[str] | None,
    ) -> tuple[InclusionSpec, list[TraversalNode]]:
        descriptor = self._registry.resolve(type_name)
        spec = InclusionSpec.parse(include)
        spec.validate(self._registry, type_name)

        level = []
        for instance in roots:
            key = entity_key(instance, type_name)
            level.append(
                TraversalNode(
                    instance=instance,
                    descriptor=descriptor,
                    path=(),
                    embedded=True,
                    depth=0,
                    key=key,
                    ancestors=frozenset([key]),
                )
            )
        return spec, level

    def _plan(
        self, level: list[TraversalNode], spec: InclusionSpec
    ) -> list[tuple[TraversalNode, RelationEdge]]:
        """Attach edges to every node of a level; return the ones to fetch."""
        requests = []
        for node in level:
            for rel in node.descriptor.relationships:
                path = node.path + (rel.name,)
                edge = RelationEdge(relationship=rel, path=path)
                node.edges.append(edge)

                if not spec.includes(path):
                    continue
                if not rel.embeddable:
                    logger.debug("Relationship not embeddable", path=".".join(path))
                    continue
                if node.depth + 1 > self._max_depth:
                    logger.debug(
                        "Embedding truncated",
                        path=".".join(path),
                        reason="max_depth",
                        max_depth=self._max_depth,
                    )
                    continue

                edge.fetched = True
                requests.append((node, edge))
        return requests

    def _fetch(self, node: TraversalNode, edge: RelationEdge) -> list[EntityInstance]:
        try:
            result = node.instance.get_related(edge.name)
        except RelationFetchError as e:
            raise self._locate(e, edge.path) from e

        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError(
                f"get_related('{edge.name}') on {node.type_name} is asynchronous; use walk_async"
            )
        return self._normalize(node, edge, result)

    async def _fetch_async(self, node: TraversalNode, edge: RelationEdge) -> list[EntityInstance]:
        try:
            result = node.instance.get_related(edge.name)
            if inspect.isawaitable(result):
                result = await result
        except RelationFetchError as e:
            raise self._locate(e, edge.path) from e
        return self._normalize(node, edge, result)

    @staticmethod
    def _locate(error: RelationFetchError, path: tuple[str, ...]) -> RelationFetchError:
        if error.path:
            return error
        return error.with_path(path)

    @staticmethod
    def _normalize(node: TraversalNode, edge: RelationEdge, result: Any) -> list[EntityInstance]:
        is_sequence = isinstance(result, (list, tuple))
        if edge.relationship.is_many:
            if result is None:
                return []
            if not is_sequence:
                raise RelationFetchError(
                    f"Expected a sequence for to-many relationship '{edge.name}' on {node.type_name}",
                    edge.path,
                )
            return list(result)

        if is_sequence:
            raise RelationFetchError(
                f"Expected a single entity for to-one relationship '{edge.name}' on {node.type_name}",
                edge.path,
            )
        return [] if result is None else [result]

    def _expand(
        self,
        requests: list[tuple[TraversalNode, RelationEdge]],
        results: list[list[EntityInstance]],
    ) -> list[TraversalNode]:
        """Turn fetched entities into child nodes; return the embedded ones."""
        next_level = []
        for (node, edge), instances in zip(requests, results):
            target = self._registry.resolve(edge.relationship.target_type)
            for instance in instances:
                key = entity_key(instance, target.type_name)
                on_path = key in node.ancestors
                if on_path:
                    logger.debug(
                        "Embedding truncated",
                        path=".".join(edge.path),
                        reason="cycle",
                        type_name=key[0],
                        id=key[1],
                    )

                child = TraversalNode(
                    instance=instance,
                    descriptor=target,
                    path=edge.path,
                    embedded=not on_path,
                    depth=node.depth + 1,
                    key=key,
                    ancestors=node.ancestors | {key},
                )
                edge.targets.append(child)
                if child.embedded:
                    next_level.append(child)
        return next_level
