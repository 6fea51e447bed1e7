"""
Graph Store Capability
======================

Abstract knowledge graph consumed by the GraphRetriever.

Implementations:
- InMemoryGraphStore: dict-backed, for tests and small graphs
- FalkorDBGraphStore: Cypher-backed, via FalkorDBClient
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from hybridrag.graph.models import GraphEdge, GraphNode, TraversalOptions, TraversalResult


class GraphStore(ABC):
    """
    Knowledge graph operations.

    Reads must be safe to call concurrently with the vector backend
    during a parallel hybrid retrieval.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this graph (reported as provenance backend)."""

    @abstractmethod
    async def traverse(
        self,
        start_ids: Iterable[str],
        options: TraversalOptions
    ) -> TraversalResult:
        """Breadth-first traversal from the given start nodes."""

    @abstractmethod
    async def find_nodes(
        self,
        node_type: str = "",
        filters: Optional[Dict[str, str]] = None
    ) -> List[GraphNode]:
        """Nodes of the given type (any type if empty) matching all filters."""

    @abstractmethod
    async def add_node(self, node: GraphNode) -> None:
        ...

    @abstractmethod
    async def upsert_node(self, node: GraphNode) -> None:
        ...

    @abstractmethod
    async def add_edge(self, edge: GraphEdge) -> None:
        ...

    @abstractmethod
    async def upsert_edge(self, edge: GraphEdge) -> None:
        """Insert an edge, replacing any edge with the same (from, to, type)."""

    @abstractmethod
    async def delete_node(self, node_id: str) -> None:
        """Remove a node together with its incoming and outgoing edges."""

    @abstractmethod
    async def delete_edge(self, from_id: str, to_id: str, edge_type: str) -> None:
        ...

    async def add_nodes(self, nodes: Iterable[GraphNode]) -> None:
        for node in nodes:
            await self.add_node(node)

    async def add_edges(self, edges: Iterable[GraphEdge]) -> None:
        for edge in edges:
            await self.add_edge(edge)
