"""Built hypermedia documents."""

from __future__ import annotations

import copy
import json
from typing import Any


class HypermediaDocument:
    """
    An immutable, format-specific document.

    The body is private; every accessor returns a copy so callers cannot
    alter a document after it has been built.
    """

    __slots__ = ("_media_type", "_body")

    def __init__(self, media_type: str, body: dict[str, Any]) -> None:
        self._media_type = media_type
        self._body = copy.deepcopy(body)

    @property
    def media_type(self) -> str:
        return self._media_type

    def to_dict(self) -> dict[str, Any]:
        """Return the document body as a new dictionary."""
        return copy.deepcopy(self._body)

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self._body, indent=indent, default=str)

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._body.get(key, default))

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._body[key])

    def __contains__(self, key: str) -> bool:
        return key in self._body

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HypermediaDocument):
            return NotImplemented
        return self._media_type == other._media_type and self._body == other._body

    def __hash__(self) -> int:
        return hash((self._media_type, self.to_json()))

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_body"):
            raise AttributeError("HypermediaDocument is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"HypermediaDocument({self._media_type}, keys={list(self._body)})"
