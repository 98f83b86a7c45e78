"""In-memory data layer backed by plain dictionaries."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping

import structlog
import yaml

from linkweave.core.errors import RelationFetchError, UnknownTypeError
from linkweave.core.registry import EntityDescriptor, Registry

logger = structlog.get_logger()


class DictEntity:
    """
    Entity backed by a dictionary.

    Relationship fields hold the id (or list of ids) of the related
    entities; every other field is an attribute.
    """

    def __init__(
        self,
        store: InMemoryStore,
        descriptor: EntityDescriptor,
        entity_id: str,
        data: Mapping[str, Any],
    ) -> None:
        self._store = store
        self._descriptor = descriptor
        self._id = entity_id
        self._data = dict(data)

    @property
    def type_name(self) -> str:
        return self._descriptor.type_name

    def get_id(self) -> str:
        return self._id

    def get_attributes(self) -> dict[str, Any]:
        attributes = {
            k: v for k, v in self._data.items() if not self._descriptor.has_relationship(k)
        }
        attributes.setdefault(self._descriptor.id_field, self._id)
        return attributes

    def get_related(self, name: str) -> DictEntity | list[DictEntity] | None:
        rel = self._descriptor.relationship(name)
        ref = self._data.get(name)

        if rel.is_many:
            refs = ref or []
            if not isinstance(refs, list):
                raise RelationFetchError(f"Expected a list of ids for {self.type_name}.{name}")
            return [self._store.fetch(rel.target_type, r) for r in refs]

        if ref is None:
            return None
        return self._store.fetch(rel.target_type, ref)

    def references(self) -> Iterator[tuple[str, str, str]]:
        """Yield (relation, target_type, target_id) for every stored reference."""
        for rel in self._descriptor.relationships:
            ref = self._data.get(rel.name)
            if ref is None:
                continue
            refs = ref if isinstance(ref, list) else [ref]
            for r in refs:
                yield rel.name, rel.target_type, str(r)

    def __repr__(self) -> str:
        return f"DictEntity({self.type_name}#{self._id})"


class InMemoryStore:
    """
    Entities keyed by type name and id.

    Loads from a YAML data file of the form ``{type: {id: {field: value}}}``.
    """

    def __init__(self, registry: Registry) -> None:
        self._registry = registry
        self._entities: dict[str, dict[str, DictEntity]] = {}

    @classmethod
    def load(cls, registry: Registry, path: str | Path) -> InMemoryStore:
        """Load entities from YAML file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) or {}

        store = cls.from_dict(registry, data)
        logger.debug("Data loaded", path=str(path), entities=len(store))
        return store

    @classmethod
    def from_dict(cls, registry: Registry, data: dict[str, Any]) -> InMemoryStore:
        """Create store from dictionary."""
        store = cls(registry)
        for type_name, entities in data.items():
            for entity_id, fields in (entities or {}).items():
                store.add(type_name, entity_id, fields or {})
        return store

    def add(self, type_name: str, entity_id: Any, data: Mapping[str, Any]) -> DictEntity:
        """Add an entity, replacing any previous one with the same id."""
        descriptor = self._registry.resolve(type_name)
        entity = DictEntity(self, descriptor, str(entity_id), data)
        self._entities.setdefault(type_name, {})[str(entity_id)] = entity
        return entity

    def get(self, type_name: str, entity_id: Any) -> DictEntity | None:
        """Get entity by type and id."""
        if type_name not in self._registry:
            raise UnknownTypeError(type_name)
        return self._entities.get(type_name, {}).get(str(entity_id))

    def fetch(self, type_name: str, entity_id: Any) -> DictEntity:
        """Get entity by type and id, raising RelationFetchError if missing."""
        entity = self.get(type_name, entity_id)
        if entity is None:
            raise RelationFetchError(f"Entity not found: {type_name}#{entity_id}")
        return entity

    def all(self, type_name: str) -> list[DictEntity]:
        """Get all entities of a type in insertion order."""
        if type_name not in self._registry:
            raise UnknownTypeError(type_name)
        return list(self._entities.get(type_name, {}).values())

    def validate(self) -> list[str]:
        """
        Validate all stored references resolve.

        Returns list of error messages (empty if all valid).
        """
        errors = []
        for entities in self._entities.values():
            for entity in entities.values():
                for relation, target_type, target_id in entity.references():
                    if self.get(target_type, target_id) is None:
                        errors.append(
                            f"{entity.type_name}#{entity.get_id()}.{relation}: "
                            f"missing {target_type}#{target_id}"
                        )
        return errors

    def __len__(self) -> int:
        return sum(len(entities) for entities in self._entities.values())
