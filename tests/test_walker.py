"""Tests for walker module."""

import asyncio

import pytest

from linkweave.core.errors import MissingIdError, RelationFetchError, UnknownRelationError
from linkweave.core.registry import Registry
from linkweave.core.walker import GraphWalker, InclusionSpec


class Node:
    """Entity with in-memory relationships."""

    def __init__(self, entity_id, **related):
        self._id = entity_id
        self.related = related

    def get_id(self):
        return self._id

    def get_attributes(self):
        return {"id": self._id}

    def get_related(self, name):
        value = self.related.get(name)
        if isinstance(value, Exception):
            raise value
        return value


class AsyncNode(Node):
    """Entity whose relationships are fetched asynchronously."""

    async def get_related(self, name):
        await asyncio.sleep(0)
        return Node.get_related(self, name)


@pytest.fixture
def chain_registry():
    """A self-referencing type: node.next -> node, node.children -> [node]."""
    return Registry.from_dict({
        "types": {
            "node": {
                "url": "/nodes/{id}",
                "attributes": ["id"],
                "relationships": [
                    {"name": "next", "target": "node"},
                    {"name": "children", "target": "node", "cardinality": "many"},
                ],
            }
        }
    })


class TestInclusionSpec:
    """Tests for InclusionSpec class."""

    def test_parse_string(self):
        """Test parsing a comma-separated include parameter."""
        spec = InclusionSpec.parse("items.product, customer")

        assert spec.paths == (("items", "product"), ("customer",))
        assert str(spec) == "items.product,customer"

    def test_parse_empty(self):
        """Test empty inputs produce a link-only spec."""
        assert not InclusionSpec.parse(None)
        assert not InclusionSpec.parse("")
        assert not InclusionSpec.parse([])

    def test_parse_deduplicates(self):
        """Test repeated paths are kept once."""
        assert InclusionSpec.parse(["items", "items"]).paths == (("items",),)

    def test_parse_invalid(self):
        """Test malformed paths."""
        with pytest.raises(ValueError):
            InclusionSpec.parse("items..product")

    def test_includes_prefixes(self):
        """Test a path embeds its prefixes."""
        spec = InclusionSpec.parse(["items.product"])

        assert spec.includes(("items",))
        assert spec.includes(("items", "product"))
        assert not spec.includes(("customer",))
        assert not spec.includes(("items", "order"))

    def test_validate(self, registry):
        """Test include paths are checked against the registry."""
        InclusionSpec.parse("items.product,customer.orders").validate(registry, "order")

        with pytest.raises(UnknownRelationError) as exc_info:
            InclusionSpec.parse("items.supplier").validate(registry, "order")
        assert "supplier" in str(exc_info.value)


class TestGraphWalker:
    """Tests for GraphWalker class."""

    def test_link_only(self, registry, order):
        """Test an empty inclusion spec fetches nothing."""
        traversal = GraphWalker(registry).walk(order, "order")

        assert len(traversal) == 1
        assert traversal.depth == 0
        assert [e.name for e in traversal.root.edges] == ["items", "customer"]
        assert not any(e.fetched for e in traversal.root.edges)

    def test_embed_many(self, registry, order):
        """Test embedding a to-many relationship."""
        traversal = GraphWalker(registry).walk(order, "order", ["items"])

        items = traversal.root.edges[0]
        assert items.fetched
        assert [t.key for t in items.targets] == [("item", "5"), ("item", "3")]
        assert all(t.embedded for t in items.targets)
        assert [t.path for t in items.targets] == [("items",), ("items",)]
        assert str(traversal.include) == "items"
        assert traversal.depth == 1

    def test_breadth_first_order(self, registry, order):
        """Test nodes are produced level by level."""
        traversal = GraphWalker(registry).walk(order, "order", "items.product,customer")

        keys = [n.key for n in traversal.nodes]
        assert keys == [
            ("order", "123"),
            ("item", "5"),
            ("item", "3"),
            ("customer", "9"),
            ("product", "A-100"),
            ("product", "A-100"),
        ]
        assert [n.depth for n in traversal.nodes] == [0, 1, 1, 1, 2, 2]

    def test_same_entity_in_sibling_branches(self, registry, order):
        """Test an entity reachable from two branches is embedded in both."""
        traversal = GraphWalker(registry).walk(order, "order", "items.product")

        products = [item.edges[1].targets[0] for item in traversal.root.edges[0].targets]
        assert [p.key for p in products] == [("product", "A-100"), ("product", "A-100")]
        assert all(p.embedded for p in products)

    def test_cycle_is_link_only(self, registry, order):
        """Test the edge back to an ancestor is never embedded."""
        traversal = GraphWalker(registry).walk(order, "order", "items.order.items")

        for item in traversal.root.edges[0].targets:
            back = item.edges[0]
            assert back.name == "order"
            assert back.fetched
            assert [t.key for t in back.targets] == [("order", "123")]
            assert not back.targets[0].embedded
            assert back.targets[0].edges == []
        assert traversal.depth == 1

    def test_mutual_cycle_terminates(self, registry, store):
        """Test customer -> orders -> customer terminates at the first cycle."""
        customer = store.get("customer", 9)
        traversal = GraphWalker(registry).walk(customer, "customer", "orders.customer.orders.customer")

        assert traversal.depth == 1
        for order in traversal.root.edges[0].targets:
            assert order.embedded
            assert not order.edges[1].targets[0].embedded

    def test_self_loop(self, chain_registry):
        """Test a node pointing at itself."""
        node = Node("a")
        node.related["next"] = node

        traversal = GraphWalker(chain_registry).walk(node, "node", "next.next.next")

        assert len(traversal) == 1
        assert not traversal.root.edges[0].targets[0].embedded

    def test_max_depth(self, chain_registry):
        """Test embedding stops at the depth cap without raising."""
        nodes = [Node(str(i)) for i in range(10)]
        for a, b in zip(nodes, nodes[1:]):
            a.related["next"] = b
        include = ".".join(["next"] * 9)

        traversal = GraphWalker(chain_registry, max_depth=3).walk(nodes[0], "node", include)

        assert traversal.depth == 3
        assert [n.id for n in traversal.nodes] == ["0", "1", "2", "3"]
        deepest = traversal.nodes[-1].edges[0]
        assert not deepest.fetched

    def test_default_max_depth(self, chain_registry):
        """Test the default depth cap is five."""
        nodes = [Node(str(i)) for i in range(10)]
        for a, b in zip(nodes, nodes[1:]):
            a.related["next"] = b

        traversal = GraphWalker(chain_registry).walk(nodes[0], "node", ".".join(["next"] * 9))

        assert traversal.depth == 5

    def test_negative_max_depth(self, registry):
        with pytest.raises(ValueError):
            GraphWalker(registry, max_depth=-1)

    def test_not_embeddable(self, registry, store):
        """Test non-embeddable relationships stay link-only even when included."""
        customer = store.get("customer", 9)
        traversal = GraphWalker(registry).walk(customer, "customer", ["cards"])

        cards = traversal.root.edges[1]
        assert cards.name == "cards"
        assert not cards.fetched
        assert len(traversal) == 1

    def test_unknown_include(self, registry, order):
        """Test unknown include paths fail before any fetch."""
        with pytest.raises(UnknownRelationError):
            GraphWalker(registry).walk(order, "order", "items,invoices")

    def test_fetch_error_carries_path(self, chain_registry):
        """Test data-layer failures propagate with their location."""
        root = Node("a", next=Node("b", children=RelationFetchError("store offline")))

        with pytest.raises(RelationFetchError) as exc_info:
            GraphWalker(chain_registry).walk(root, "node", "next.children")

        assert exc_info.value.path == ("next", "children")
        assert exc_info.value.message == "store offline"
        assert "next.children" in str(exc_info.value)

    def test_fetch_error_subclass(self, chain_registry):
        """Test data-layer error subclasses with their own constructor are located too."""

        class StoreOffline(RelationFetchError):
            def __init__(self, host):
                super().__init__(f"{host} is offline")
                self.host = host

        root = Node("a", next=StoreOffline("db1"))

        with pytest.raises(RelationFetchError) as exc_info:
            GraphWalker(chain_registry).walk(root, "node", "next")

        assert exc_info.value.path == ("next",)
        assert exc_info.value.message == "db1 is offline"
        assert isinstance(exc_info.value.__cause__, StoreOffline)

    def test_wrong_shape(self, chain_registry):
        """Test a data layer returning a list for a to-one relationship."""
        root = Node("a", next=[Node("b")])

        with pytest.raises(RelationFetchError) as exc_info:
            GraphWalker(chain_registry).walk(root, "node", "next")
        assert exc_info.value.path == ("next",)

    def test_missing_to_one(self, chain_registry):
        """Test an empty to-one relationship."""
        traversal = GraphWalker(chain_registry).walk(Node("a"), "node", "next,children")

        next_edge, children = traversal.root.edges
        assert next_edge.fetched and next_edge.targets == []
        assert children.fetched and children.targets == []

    def test_missing_id(self, chain_registry):
        """Test related entities without ids."""
        root = Node("a", next=Node(None))

        with pytest.raises(MissingIdError):
            GraphWalker(chain_registry).walk(root, "node", "next")

    def test_walk_many(self, registry, store):
        """Test traversal of a collection."""
        orders = store.all("order")
        traversal = GraphWalker(registry).walk_many(orders, "order", "customer")

        assert [r.key for r in traversal.roots] == [("order", "123"), ("order", "124")]
        customers = [r.edges[1].targets[0] for r in traversal.roots]
        assert all(c.embedded for c in customers)

    def test_sync_walk_rejects_async_entities(self, chain_registry):
        """Test coroutine fetches require walk_async."""
        with pytest.raises(TypeError):
            GraphWalker(chain_registry).walk(AsyncNode("a"), "node", "next")


class TestAsyncWalk:
    """Tests for asynchronous traversal."""

    def test_walk_async(self, chain_registry):
        """Test async traversal matches sync traversal."""
        root = AsyncNode("a", children=[AsyncNode("b"), AsyncNode("c", next=AsyncNode("d"))])

        traversal = asyncio.run(GraphWalker(chain_registry).walk_async(root, "node", "children.next"))

        assert [n.id for n in traversal.nodes] == ["a", "b", "c", "d"]
        assert traversal.depth == 2

    def test_walk_async_sync_entities(self, registry, order):
        """Test async traversal accepts synchronous data layers."""
        traversal = asyncio.run(GraphWalker(registry).walk_async(order, "order", "items"))

        assert [n.key for n in traversal.nodes] == [("order", "123"), ("item", "5"), ("item", "3")]

    def test_walk_async_cycle(self, chain_registry):
        """Test cycles are cut in async traversal too."""
        a = AsyncNode("a")
        b = AsyncNode("b", next=a)
        a.related["next"] = b

        traversal = asyncio.run(GraphWalker(chain_registry).walk_async(a, "node", "next.next.next"))

        assert [n.id for n in traversal.nodes] == ["a", "b"]

    def test_walk_async_error(self, chain_registry):
        """Test async failures propagate with their location."""
        root = AsyncNode("a", children=[AsyncNode("b", next=RelationFetchError("timeout")), AsyncNode("c")])

        with pytest.raises(RelationFetchError) as exc_info:
            asyncio.run(GraphWalker(chain_registry).walk_async(root, "node", "children.next"))
        assert exc_info.value.path == ("children", "next")

    def test_walk_async_cancels_siblings(self, chain_registry):
        """Test a failing fetch cancels the other fetches of its level."""
        state = {"cancelled": False}

        class Root(Node):
            async def get_related(self, name):
                if name == "children":
                    await asyncio.sleep(0)
                    raise RelationFetchError("timeout")
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    state["cancelled"] = True
                    raise
                return Node("b")

        async def run():
            with pytest.raises(RelationFetchError) as exc_info:
                await GraphWalker(chain_registry).walk_async(Root("a"), "node", "next,children")
            # Checked before the event loop shuts down.
            assert state["cancelled"]
            return exc_info.value

        error = asyncio.run(run())
        assert error.path == ("children",)
