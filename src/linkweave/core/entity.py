"""Data access capability consumed by the engine."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union, runtime_checkable

from linkweave.core.errors import MissingIdError

Related = Union["EntityInstance", Sequence["EntityInstance"], None]


@runtime_checkable
class EntityInstance(Protocol):
    """
    A domain object as seen by the engine.

    Instances are owned by the data layer and never mutated here.
    ``get_related`` returns a single instance (or ``None``) for to-one
    relationships and a sequence for to-many ones. It may be a coroutine
    function when the data layer is asynchronous; such instances must be
    walked with ``GraphWalker.walk_async``.
    """

    def get_id(self) -> Any: ...

    def get_attributes(self) -> Mapping[str, Any]: ...

    def get_related(self, name: str) -> Related: ...


def entity_id(instance: EntityInstance, type_name: str) -> str:
    """Return the instance id as a string."""
    value = instance.get_id()
    if value is None or value == "":
        raise MissingIdError(type_name)
    return str(value)


def entity_key(instance: EntityInstance, type_name: str) -> tuple[str, str]:
    """Identity of an instance within one traversal."""
    return (type_name, entity_id(instance, type_name))
