"""Shared fixtures: a small order-management registry and data set."""

import pytest

from linkweave.core.registry import Registry
from linkweave.core.store import InMemoryStore


@pytest.fixture
def registry_data():
    """Registry declaration.

    Types are keyed by name; order and item reference each other so
    include paths such as items.order form a cycle.
    """
    return {
        "types": {
            "order": {
                "url": "/orders/{id}",
                "attributes": ["id", "status", "total"],
                "relationships": [
                    {"name": "items", "target": "item", "cardinality": "many", "rel": "orderItem"},
                    {"name": "customer", "target": "customer"},
                ],
            },
            "item": {
                "url": "/items/{id}",
                "attributes": ["id", "quantity"],
                "relationships": [
                    {"name": "order", "target": "order"},
                    {"name": "product", "target": "product"},
                ],
            },
            "product": {
                "url": "/products/{sku}",
                "id_field": "sku",
                "attributes": ["sku", "name"],
            },
            "customer": {
                "url": "/customers/{id}",
                "attributes": ["id", "name"],
                "relationships": [
                    {"name": "orders", "target": "order", "cardinality": "many"},
                    {"name": "cards", "target": "card", "cardinality": "many", "embeddable": False},
                ],
            },
            "card": {
                "url": "/cards/{id}",
                "attributes": ["id", "kind"],
            },
        }
    }


@pytest.fixture
def registry(registry_data):
    return Registry.from_dict(registry_data)


@pytest.fixture
def store(registry):
    """Order #123 with items #5 and #3 (both product A-100), customer #9."""
    return InMemoryStore.from_dict(registry, {
        "order": {
            "123": {"status": "open", "total": 42.5, "items": [5, 3], "customer": 9},
            "124": {"status": "shipped", "total": 12.0, "items": [7], "customer": 9},
        },
        "item": {
            "5": {"quantity": 2, "order": 123, "product": "A-100"},
            "3": {"quantity": 1, "order": 123, "product": "A-100"},
            "7": {"quantity": 1, "order": 124, "product": "B-200"},
        },
        "product": {
            "A-100": {"name": "Widget"},
            "B-200": {"name": "Gadget"},
        },
        "customer": {
            "9": {"name": "Ada", "orders": [123, 124], "cards": [1]},
        },
        "card": {
            "1": {"kind": "visa"},
        },
    })


@pytest.fixture
def order(store):
    return store.get("order", 123)
