"""Pydantic schemas for registry bootstrap files."""

from __future__ import annotations

import string
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class Cardinality(str, Enum):
    """How many entities a relationship points at."""

    ONE = "one"
    MANY = "many"


class LinkFormat(str, Enum):
    """Output formats supported by the engine."""

    HAL = "hal"
    JSONAPI = "jsonapi"


HAL_MEDIA_TYPE = "application/hal+json"
JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


def template_fields(template: str) -> set[str]:
    """Return the placeholder names used by a URL template."""
    return {name for _, name, _, _ in string.Formatter().parse(template) if name is not None}


class RelationshipSchema(BaseModel):
    """Relationship declaration on a resource type."""

    name: str
    target: str
    cardinality: Cardinality = Cardinality.ONE
    embeddable: bool = True
    rel: str | None = None  # HAL link relation, defaults to name


class EntitySchema(BaseModel):
    """
    Schema for a resource type in the registry file.

    The type name is the dictionary key, not a field in the schema.
    """

    id_field: str = "id"
    url: str | None = None  # e.g. /orders/{id}
    collection_url: str | None = None
    attributes: list[str] = Field(default_factory=list)
    relationships: list[RelationshipSchema] = Field(default_factory=list)

    @field_validator("relationships", mode="before")
    @classmethod
    def normalize_relationships(cls, v: Any) -> list[dict[str, Any]]:
        """Accept the mapping form {name: {target: ...}} as well as a list."""
        if isinstance(v, dict):
            return [{"name": name, **(spec or {})} for name, spec in v.items()]
        return v

    @model_validator(mode="after")
    def check_unique_relationships(self) -> EntitySchema:
        seen: set[str] = set()
        for rel in self.relationships:
            if rel.name in seen:
                raise ValueError(f"Duplicate relationship: {rel.name}")
            seen.add(rel.name)
        return self

    @model_validator(mode="after")
    def check_url_template(self) -> EntitySchema:
        if self.url is not None:
            unknown = template_fields(self.url) - {"id", self.id_field}
            if unknown:
                raise ValueError(f"Unknown URL template fields: {sorted(unknown)}")
        return self


class SettingsSchema(BaseModel):
    """Optional engine settings block in the registry file."""

    max_depth: int | None = Field(default=None, ge=0)
    base_url: str | None = None
    default_format: LinkFormat | None = None


class RegistrySchema(BaseModel):
    """
    Schema for the complete registry file.

    Types are keyed by name; declaration order is registration order.
    """

    types: dict[str, EntitySchema]
    settings: SettingsSchema = Field(default_factory=SettingsSchema)

    @model_validator(mode="after")
    def check_relationship_targets(self) -> RegistrySchema:
        for type_name, entity in self.types.items():
            for rel in entity.relationships:
                if rel.target not in self.types:
                    raise ValueError(
                        f"Relationship '{type_name}.{rel.name}' targets unknown type: {rel.target}"
                    )
        return self
