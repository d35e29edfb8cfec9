"""Unit tests for the resource graph."""

from __future__ import annotations

import pytest

from staticsite.errors import GraphError
from staticsite.graph import Ref, ResourceGraph, ResourceNode, iter_refs
from staticsite.policy import identity_read_policy


def order_index(order: list[str]) -> dict[str, int]:
    return {name: i for i, name in enumerate(order)}


class TestRef:
    """Test references."""

    def test_str(self) -> None:
        """Test references render as ${node.attribute}."""
        assert str(Ref("bucket", "arn")) == "${bucket.arn}"

    def test_iter_refs_nested(self) -> None:
        """Test references are found inside dicts, lists and policy documents."""
        value = {
            "a": Ref("x", "id"),
            "b": [{"c": Ref("y", "arn")}, "plain"],
            "d": identity_read_policy("arn:aws:s3:::b", Ref("z", "iam_arn")),
        }
        assert {r.node for r in iter_refs(value)} == {"x", "y", "z"}

    def test_iter_refs_plain(self) -> None:
        """Test plain values carry no references."""
        assert list(iter_refs({"a": 1, "b": ["c"], "d": None})) == []


class TestResourceGraph:
    """Test graph construction and ordering."""

    def test_duplicate_name(self) -> None:
        """Test names must be unique."""
        graph = ResourceGraph()
        graph.add(ResourceNode("bucket", "bucket"))
        with pytest.raises(GraphError, match="duplicate"):
            graph.add(ResourceNode("bucket", "bucket"))

    def test_dependencies_combine_edges(self) -> None:
        """Test explicit edges, provider and references all count."""
        graph = ResourceGraph()
        graph.add(ResourceNode("provider", "provider"))
        graph.add(ResourceNode("bucket", "bucket", provider="provider"))
        graph.add(ResourceNode("block", "bucket-public-access-block"))
        graph.add(
            ResourceNode(
                "policy",
                "bucket-policy",
                inputs={"bucket": Ref("bucket", "id")},
                depends_on=("block",),
                provider="provider",
            )
        )
        assert graph.dependencies("policy") == {"provider", "bucket", "block"}

    def test_topological_order(self) -> None:
        """Test every node comes after its dependencies."""
        graph = ResourceGraph()
        graph.add(ResourceNode("object-b", "bucket-object", depends_on=("bucket",)))
        graph.add(ResourceNode("object-a", "bucket-object", inputs={"bucket": Ref("bucket", "id")}))
        graph.add(ResourceNode("bucket", "bucket", provider="provider"))
        graph.add(ResourceNode("provider", "provider"))

        order = graph.topological_order()
        idx = order_index(order)

        assert sorted(order) == ["bucket", "object-a", "object-b", "provider"]
        assert idx["provider"] < idx["bucket"] < idx["object-a"]
        assert idx["bucket"] < idx["object-b"]

    def test_unknown_dependency(self) -> None:
        """Test references to missing nodes are rejected."""
        graph = ResourceGraph()
        graph.add(ResourceNode("object", "bucket-object", inputs={"bucket": Ref("bucket", "id")}))
        with pytest.raises(GraphError, match="unknown"):
            graph.topological_order()

    def test_cycle(self) -> None:
        """Test cycles are rejected."""
        graph = ResourceGraph()
        graph.add(ResourceNode("a", "bucket", depends_on=("b",)))
        graph.add(ResourceNode("b", "bucket", depends_on=("a",)))
        with pytest.raises(GraphError, match="cycle"):
            graph.topological_order()

    def test_nodes_by_kind(self) -> None:
        """Test filtering nodes by kind."""
        graph = ResourceGraph()
        graph.add(ResourceNode("bucket", "bucket"))
        graph.add(ResourceNode("o1", "bucket-object"))
        graph.add(ResourceNode("o2", "bucket-object"))

        assert [n.name for n in graph.nodes("bucket-object")] == ["o1", "o2"]
        assert len(graph.nodes()) == 3
        assert "bucket" in graph
        assert len(graph) == 3
