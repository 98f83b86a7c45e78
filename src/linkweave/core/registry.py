"""Registry of resource type descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

import structlog
import yaml

from linkweave.core.errors import (
    DuplicateTypeError,
    RegistryFrozenError,
    UnknownRelationError,
    UnknownTypeError,
)
from linkweave.core.schema import Cardinality, RegistrySchema, SettingsSchema, template_fields

logger = structlog.get_logger()


@dataclass(frozen=True)
class RelationshipDescriptor:
    """A named, typed relationship from one resource type to another."""

    name: str
    target_type: str
    cardinality: Cardinality = Cardinality.ONE
    embeddable: bool = True
    rel: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "cardinality", Cardinality(self.cardinality))
        if not self.rel:
            object.__setattr__(self, "rel", self.name)

    @property
    def is_many(self) -> bool:
        return self.cardinality == Cardinality.MANY


@dataclass(frozen=True)
class EntityDescriptor:
    """
    Describes a resource type.

    ``url_template`` may reference ``{id}`` or ``{<id_field>}``; both are
    substituted with the instance id. ``collection_url`` defaults to the
    template with its trailing placeholder segment removed.
    """

    type_name: str
    id_field: str = "id"
    attributes: tuple[str, ...] = ()
    relationships: tuple[RelationshipDescriptor, ...] = ()
    url_template: str = ""
    collection_url: str = ""
    _relationship_index: dict[str, RelationshipDescriptor] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "relationships", tuple(self.relationships))
        if not self.url_template:
            object.__setattr__(self, "url_template", f"/{self.type_name}/{{id}}")

        unknown = template_fields(self.url_template) - {"id", self.id_field}
        if unknown:
            raise ValueError(
                f"URL template for '{self.type_name}' uses unknown fields: {sorted(unknown)}"
            )

        if not self.collection_url:
            head, sep, tail = self.url_template.rpartition("/")
            collection = head if sep and "{" in tail else self.url_template
            object.__setattr__(self, "collection_url", collection or "/")

        index: dict[str, RelationshipDescriptor] = {}
        for rel in self.relationships:
            if rel.name in index:
                raise ValueError(f"Duplicate relationship '{rel.name}' on '{self.type_name}'")
            index[rel.name] = rel
        object.__setattr__(self, "_relationship_index", index)

    def relationship(self, name: str) -> RelationshipDescriptor:
        """Get a relationship by name, raising if not declared."""
        rel = self._relationship_index.get(name)
        if rel is None:
            raise UnknownRelationError(self.type_name, name)
        return rel

    def has_relationship(self, name: str) -> bool:
        return name in self._relationship_index

    def __repr__(self) -> str:
        return f"EntityDescriptor({self.type_name}, {len(self.relationships)} relationships)"


class Registry:
    """
    Resource type registry.

    Populated once at process start, then frozen and shared read-only.
    Iteration order is registration order.
    """

    def __init__(self, descriptors: Iterable[EntityDescriptor] = ()) -> None:
        self._types: dict[str, EntityDescriptor] = {}
        self._frozen = False
        self._settings = SettingsSchema()
        descriptors = list(descriptors)
        if descriptors:
            self.register_all(descriptors)

    @classmethod
    def load(cls, path: str | Path) -> Registry:
        """Load registry from YAML file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) or {}

        registry = cls.from_dict(data)
        logger.debug("Registry loaded", path=str(path), types=len(registry))
        return registry

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Registry:
        """Create a frozen registry from a dictionary."""
        schema = RegistrySchema(**data)

        descriptors = []
        for type_name, entity in schema.types.items():
            relationships = tuple(
                RelationshipDescriptor(
                    name=rel.name,
                    target_type=rel.target,
                    cardinality=rel.cardinality,
                    embeddable=rel.embeddable,
                    rel=rel.rel or rel.name,
                )
                for rel in entity.relationships
            )
            descriptors.append(
                EntityDescriptor(
                    type_name=type_name,
                    id_field=entity.id_field,
                    attributes=tuple(entity.attributes),
                    relationships=relationships,
                    url_template=entity.url or "",
                    collection_url=entity.collection_url or "",
                )
            )

        registry = cls(descriptors)
        registry._settings = schema.settings
        registry.freeze()
        return registry

    def register(self, descriptor: EntityDescriptor) -> None:
        """Register a single descriptor.

        Relationship targets must already be registered (or be the
        descriptor itself).
        """
        self.register_all([descriptor])

    def register_all(self, descriptors: Iterable[EntityDescriptor]) -> None:
        """Register a batch of descriptors atomically.

        Relationship targets may refer to any type in the batch, which
        allows mutual relationships to be declared together.
        """
        if self._frozen:
            raise RegistryFrozenError("Registry is frozen; register types before freezing")

        batch: dict[str, EntityDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.type_name in self._types or descriptor.type_name in batch:
                raise DuplicateTypeError(descriptor.type_name)
            batch[descriptor.type_name] = descriptor

        for descriptor in batch.values():
            for rel in descriptor.relationships:
                if rel.target_type not in self._types and rel.target_type not in batch:
                    raise UnknownTypeError(rel.target_type)

        self._types.update(batch)
        for type_name in batch:
            logger.debug("Registered resource type", type_name=type_name)

    def resolve(self, type_name: str) -> EntityDescriptor:
        """Get descriptor by type name, raising if not registered."""
        descriptor = self._types.get(type_name)
        if descriptor is None:
            raise UnknownTypeError(type_name)
        return descriptor

    def get(self, type_name: str) -> EntityDescriptor | None:
        """Get descriptor by type name."""
        return self._types.get(type_name)

    def freeze(self) -> None:
        """Disallow further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def settings(self) -> SettingsSchema:
        """Settings declared in the bootstrap file (may be empty)."""
        return self._settings

    def type_names(self) -> list[str]:
        return list(self._types)

    def referencing(self, type_name: str) -> list[tuple[EntityDescriptor, RelationshipDescriptor]]:
        """Get all relationships that target a type."""
        return [
            (descriptor, rel)
            for descriptor in self._types.values()
            for rel in descriptor.relationships
            if rel.target_type == type_name
        ]

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[EntityDescriptor]:
        return iter(self._types.values())

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._types
