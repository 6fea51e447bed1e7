"""
In-memory knowledge graph.

Nodes are kept in a dict, edges in lists keyed by source node. A
re-entrant lock guards the dicts so the store can also be used from
executor threads.
"""

import threading
from typing import Dict, Iterable, List, Optional

from hybridrag.core.models import matches_filters
from hybridrag.graph.models import GraphEdge, GraphNode, TraversalOptions, TraversalResult
from hybridrag.graph.store import GraphStore
from hybridrag.graph.traversal import GraphTraversalEngine


class InMemoryGraphStore(GraphStore):
    """
    Dict-backed GraphStore.

    Example:
        >>> graph = InMemoryGraphStore("test-graph")
        >>> await graph.add_node(GraphNode(id="A", type="concept"))
        >>> await graph.add_node(GraphNode(id="B", type="concept"))
        >>> await graph.add_edge(GraphEdge("A", "B", type="relates_to", weight=0.9))
        >>> result = await graph.traverse(["A"], TraversalOptions(depth=1))
    """

    def __init__(self, name: str = "memory"):
        self._name = name
        self._lock = threading.RLock()
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: Dict[str, List[GraphEdge]] = {}
        self._engine = GraphTraversalEngine(self.get_node, self.get_edges)

    @property
    def name(self) -> str:
        return self._name

    @property
    def node_count(self) -> int:
        with self._lock:
            return len(self._nodes)

    @property
    def edge_count(self) -> int:
        with self._lock:
            return sum(len(edges) for edges in self._edges.values())

    async def get_node(self, node_id: str) -> Optional[GraphNode]:
        with self._lock:
            return self._nodes.get(node_id)

    async def get_edges(self, node_id: str) -> List[GraphEdge]:
        """Outgoing edges of a node, in insertion order."""
        with self._lock:
            return list(self._edges.get(node_id, []))

    async def traverse(
        self,
        start_ids: Iterable[str],
        options: TraversalOptions
    ) -> TraversalResult:
        return await self._engine.traverse(start_ids, options)

    async def find_nodes(
        self,
        node_type: str = "",
        filters: Optional[Dict[str, str]] = None
    ) -> List[GraphNode]:
        with self._lock:
            return [
                node for node in self._nodes.values()
                if (not node_type or node.type == node_type)
                and matches_filters(node.metadata, filters)
            ]

    async def add_node(self, node: GraphNode) -> None:
        with self._lock:
            self._nodes[node.id] = node

    async def upsert_node(self, node: GraphNode) -> None:
        await self.add_node(node)

    async def add_edge(self, edge: GraphEdge) -> None:
        with self._lock:
            self._edges.setdefault(edge.from_id, []).append(edge)

    async def upsert_edge(self, edge: GraphEdge) -> None:
        with self._lock:
            kept = [
                e for e in self._edges.get(edge.from_id, [])
                if e.to_id != edge.to_id or e.type != edge.type
            ]
            kept.append(edge)
            self._edges[edge.from_id] = kept

    async def delete_node(self, node_id: str) -> None:
        with self._lock:
            self._nodes.pop(node_id, None)
            self._edges.pop(node_id, None)
            for source, edges in self._edges.items():
                self._edges[source] = [e for e in edges if e.to_id != node_id]

    async def delete_edge(self, from_id: str, to_id: str, edge_type: str) -> None:
        with self._lock:
            self._edges[from_id] = [
                e for e in self._edges.get(from_id, [])
                if e.to_id != to_id or e.type != edge_type
            ]

    async def add_nodes(self, nodes: Iterable[GraphNode]) -> None:
        with self._lock:
            for node in nodes:
                self._nodes[node.id] = node

    async def add_edges(self, edges: Iterable[GraphEdge]) -> None:
        with self._lock:
            for edge in edges:
                self._edges.setdefault(edge.from_id, []).append(edge)
