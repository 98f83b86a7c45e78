"""Exception taxonomy for the representation engine."""

from __future__ import annotations


class HypermediaError(Exception):
    """Base class for all engine errors.

    ``http_status`` is a hint for the HTTP layer when mapping the error
    to a response.
    """

    http_status: int = 500


class UnknownTypeError(HypermediaError):
    """Raised when a resource type is not registered."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unknown resource type: {type_name}")
        self.type_name = type_name


class DuplicateTypeError(HypermediaError):
    """Raised when a resource type is registered twice."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Resource type already registered: {type_name}")
        self.type_name = type_name


class UnknownRelationError(HypermediaError):
    """Raised when a relationship name is not declared on a type."""

    def __init__(self, type_name: str, relation: str) -> None:
        super().__init__(f"Unknown relationship '{relation}' on type '{type_name}'")
        self.type_name = type_name
        self.relation = relation


class RegistryFrozenError(HypermediaError):
    """Raised when registering into a registry after initialisation."""

    pass


class MissingIdError(HypermediaError):
    """Raised when an entity instance has no identifier."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Entity of type '{type_name}' has no id")
        self.type_name = type_name


class RelationFetchError(HypermediaError):
    """Raised when the data layer fails to fetch a related entity.

    ``path`` is the relationship path (from the root) at which the fetch
    failed; it is empty when raised directly by a data layer.
    """

    http_status = 502

    def __init__(self, message: str, path: tuple[str, ...] = ()) -> None:
        self.message = message
        self.path = tuple(path)
        if self.path:
            message = f"{message} (at '{'.'.join(self.path)}')"
        super().__init__(message)

    def with_path(self, path: tuple[str, ...]) -> RelationFetchError:
        """Return a new error located at ``path``.

        Always a plain RelationFetchError: data-layer subclasses may take
        different constructor arguments. The original stays reachable as
        ``__cause__`` when re-raised with ``from``.
        """
        return RelationFetchError(self.message, path)


class InvalidPageError(HypermediaError):
    """Raised when a caller supplies a contradictory page."""

    http_status = 400
