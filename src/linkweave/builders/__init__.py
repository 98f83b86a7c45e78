"""Representation builders for HAL and JSON:API."""

from linkweave.builders.base import RepresentationBuilder
from linkweave.builders.hal import HALBuilder
from linkweave.builders.jsonapi import JSONAPIBuilder
from linkweave.core.schema import LinkFormat

BUILDERS: dict[LinkFormat, type] = {
    LinkFormat.HAL: HALBuilder,
    LinkFormat.JSONAPI: JSONAPIBuilder,
}


def get_builder(fmt: LinkFormat | str) -> RepresentationBuilder:
    """Get a builder for an output format."""
    return BUILDERS[LinkFormat(fmt)]()


__all__ = [
    "RepresentationBuilder",
    "HALBuilder",
    "JSONAPIBuilder",
    "BUILDERS",
    "get_builder",
]
