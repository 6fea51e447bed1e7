"""
Graph Models
============

Nodes, edges and traversal structures of the knowledge graph.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class GraphNode:
    """
    Node of the knowledge graph.

    Attributes:
        id: Unique node identifier
        type: Node type (e.g. "concept", "document", "entity")
        content: Text content returned as retrieval context
        source: Where the node came from
        metadata: Free-form string metadata (used by find_nodes filters)
    """
    id: str
    type: str = ""
    content: str = ""
    source: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class GraphEdge:
    """
    Directed, weighted edge. An edge A->B does not imply B->A.

    Attributes:
        from_id: Source node id
        to_id: Target node id
        type: Relation type (e.g. "relates_to", "part_of")
        weight: Edge weight [0-1]
        metadata: Free-form string metadata
    """
    from_id: str
    to_id: str
    type: str = ""
    weight: float = 0.0
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.from_id}->{self.to_id}"


@dataclass
class TraversalOptions:
    """
    Bounds and filters of a traversal.

    Attributes:
        depth: Maximum number of hops from a start node
        edge_types: Edge types to follow (empty = all)
        node_types: Node types to include (empty = all)
        max_nodes: Stop once this many nodes have been accepted
        min_weight: Edges lighter than this are not followed
    """
    depth: int = 2
    edge_types: List[str] = field(default_factory=list)
    node_types: List[str] = field(default_factory=list)
    max_nodes: int = 20
    min_weight: float = 0.0

    def __post_init__(self):
        """Validate configuration values."""
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if self.max_nodes < 0:
            raise ValueError(f"max_nodes must be >= 0, got {self.max_nodes}")


@dataclass
class TraversalResult:
    """
    Outcome of a traversal.

    Every node in `nodes` has exactly one path in `paths`: the first one
    discovered, which for BFS is a shortest one.

    Attributes:
        nodes: Accepted nodes in discovery order
        edges: Edges actually traversed (target enqueued)
        paths: node id -> ordered node ids from a start node
    """
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    paths: Dict[str, List[str]] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"<TraversalResult(nodes={len(self.nodes)}, "
            f"edges={len(self.edges)})>"
        )
