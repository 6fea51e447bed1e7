"""
Test GraphTraversalEngine
=========================

Breadth-first traversal bounds, filters and path scoring.
"""

import pytest

from hybridrag.graph.memory import InMemoryGraphStore
from hybridrag.graph.models import GraphEdge, GraphNode, TraversalOptions
from hybridrag.graph.traversal import GraphTraversalEngine, compute_path_score


class TestTraversalOptions:
    """Test TraversalOptions validation."""

    def test_defaults(self):
        options = TraversalOptions()
        assert options.depth == 2
        assert options.max_nodes == 20
        assert options.min_weight == 0.0

    def test_negative_depth(self):
        with pytest.raises(ValueError, match="depth must be"):
            TraversalOptions(depth=-1)

    def test_negative_max_nodes(self):
        with pytest.raises(ValueError, match="max_nodes must be"):
            TraversalOptions(max_nodes=-1)


class TestTraverse:
    """Test the BFS walk."""

    @pytest.mark.asyncio
    async def test_depth_one(self, sample_graph):
        """Depth 1 from A reaches A and B only."""
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=1, max_nodes=10))

        assert [n.id for n in result.nodes] == ["A", "B"]
        assert result.paths["A"] == ["A"]
        assert result.paths["B"] == ["A", "B"]
        assert len(result.edges) == 1

    @pytest.mark.asyncio
    async def test_depth_two(self, sample_graph):
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=2, max_nodes=10))

        assert [n.id for n in result.nodes] == ["A", "B", "C"]
        assert result.paths["C"] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_depth_zero_returns_start_nodes_only(self, sample_graph):
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=0))

        assert [n.id for n in result.nodes] == ["A"]
        assert result.edges == []

    @pytest.mark.asyncio
    async def test_missing_start_node(self, sample_graph):
        """Unknown start ids are ignored, an empty result is not an error."""
        result = await sample_graph.traverse(["missing"], TraversalOptions())

        assert result.nodes == []
        assert result.edges == []
        assert result.paths == {}

    @pytest.mark.asyncio
    async def test_mixed_start_nodes(self, sample_graph):
        result = await sample_graph.traverse(["missing", "B"], TraversalOptions(depth=1))

        assert [n.id for n in result.nodes] == ["B", "C"]

    @pytest.mark.asyncio
    async def test_multi_source_keeps_shortest_path(self, sample_graph):
        """C is itself a start node: its path is [C], not [A, B, C]."""
        result = await sample_graph.traverse(["A", "C"], TraversalOptions(depth=2))

        assert result.paths["C"] == ["C"]
        assert sorted(n.id for n in result.nodes) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_max_nodes(self, sample_graph):
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=2, max_nodes=2))

        assert [n.id for n in result.nodes] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_node_type_filter_stops_expansion(self):
        """Excluded nodes are neither returned nor expanded."""
        graph = InMemoryGraphStore()
        await graph.add_nodes([
            GraphNode(id="A", type="concept"),
            GraphNode(id="B", type="document"),
            GraphNode(id="C", type="concept"),
        ])
        await graph.add_edges([
            GraphEdge("A", "B", type="relates_to", weight=0.9),
            GraphEdge("B", "C", type="relates_to", weight=0.9),
        ])

        result = await graph.traverse(["A"], TraversalOptions(depth=2, node_types=["concept"]))

        assert [n.id for n in result.nodes] == ["A"]

    @pytest.mark.asyncio
    async def test_edge_type_filter(self, sample_graph):
        await sample_graph.add_node(GraphNode(id="D", type="concept"))
        await sample_graph.add_edge(GraphEdge("A", "D", type="cites", weight=0.9))

        result = await sample_graph.traverse(
            ["A"], TraversalOptions(depth=1, edge_types=["relates_to"])
        )

        assert [n.id for n in result.nodes] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_min_weight(self, sample_graph):
        await sample_graph.add_node(GraphNode(id="D", type="concept"))
        await sample_graph.add_edge(GraphEdge("A", "D", type="relates_to", weight=0.3))

        result = await sample_graph.traverse(["A"], TraversalOptions(depth=1, min_weight=0.5))

        assert [n.id for n in result.nodes] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_cycle_visits_each_node_once(self):
        graph = InMemoryGraphStore()
        await graph.add_nodes([GraphNode(id="A"), GraphNode(id="B")])
        await graph.add_edges([GraphEdge("A", "B", weight=0.5), GraphEdge("B", "A", weight=0.5)])

        result = await graph.traverse(["A"], TraversalOptions(depth=5))

        assert [n.id for n in result.nodes] == ["A", "B"]
        assert result.paths["B"] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_edge_to_missing_node(self, sample_graph):
        """Dangling edges do not add nodes and do not fail."""
        await sample_graph.add_edge(GraphEdge("A", "ghost", weight=0.9))

        result = await sample_graph.traverse(["A"], TraversalOptions(depth=1))

        assert [n.id for n in result.nodes] == ["A", "B"]
        assert "ghost" not in result.paths

    @pytest.mark.asyncio
    async def test_node_loaded_once(self, sample_graph):
        """Nodes are looked up at most once per traversal."""
        calls = []

        async def load_node(node_id):
            calls.append(node_id)
            return await sample_graph.get_node(node_id)

        engine = GraphTraversalEngine(load_node, sample_graph.get_edges)
        await engine.traverse(["A", "A"], TraversalOptions(depth=2))

        assert sorted(calls) == ["A", "B", "C"]


class TestPathScore:
    """Test compute_path_score."""

    def test_start_node(self):
        assert compute_path_score(["A"], []) == 1.0
        assert compute_path_score([], []) == 1.0

    @pytest.mark.asyncio
    async def test_one_hop(self, sample_graph):
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=1))

        assert compute_path_score(result.paths["B"], result.edges) == pytest.approx(0.72)

    @pytest.mark.asyncio
    async def test_two_hops(self, sample_graph):
        result = await sample_graph.traverse(["A"], TraversalOptions(depth=2))

        assert compute_path_score(result.paths["C"], result.edges) == pytest.approx(0.4608)

    def test_zero_weight_uses_default(self):
        edges = [GraphEdge("A", "B", weight=0.0)]

        assert compute_path_score(["A", "B"], edges) == pytest.approx(0.4)

    def test_unknown_edge_uses_default(self):
        assert compute_path_score(["A", "B"], []) == pytest.approx(0.4)

    def test_score_decreases_with_hops(self):
        edges = [GraphEdge("A", "B", weight=1.0), GraphEdge("B", "C", weight=1.0)]

        one_hop = compute_path_score(["A", "B"], edges)
        two_hops = compute_path_score(["A", "B", "C"], edges)

        assert 1.0 > one_hop > two_hops > 0
