"""
Graph Retrieval
===============

Knowledge graph model, traversal engine and graph-backed retriever.

Components:
- GraphTraversalEngine: multi-source BFS with decayed path scores
- GraphStore: abstract graph capability
- InMemoryGraphStore / FalkorDBGraphStore: concrete stores
- FalkorDBClient: async FalkorDB client
- GraphRetriever: Retriever over a GraphStore

Example:
    from hybridrag.graph import InMemoryGraphStore, GraphRetriever

    graph = InMemoryGraphStore("kg")
    retriever = GraphRetriever(graph)
"""

from hybridrag.graph.models import GraphNode, GraphEdge, TraversalOptions, TraversalResult
from hybridrag.graph.traversal import (
    GraphTraversalEngine,
    compute_path_score,
    DECAY_FACTOR,
    DEFAULT_EDGE_WEIGHT,
)
from hybridrag.graph.store import GraphStore
from hybridrag.graph.memory import InMemoryGraphStore
from hybridrag.graph.config import FalkorDBConfig
from hybridrag.graph.falkordb import FalkorDBClient, FalkorDBGraphStore
from hybridrag.graph.retriever import GraphRetriever, GraphRetrieverConfig

__all__ = [
    # Models
    "GraphNode",
    "GraphEdge",
    "TraversalOptions",
    "TraversalResult",
    # Traversal
    "GraphTraversalEngine",
    "compute_path_score",
    "DECAY_FACTOR",
    "DEFAULT_EDGE_WEIGHT",
    # Stores
    "GraphStore",
    "InMemoryGraphStore",
    "FalkorDBConfig",
    "FalkorDBClient",
    "FalkorDBGraphStore",
    # Retriever
    "GraphRetriever",
    "GraphRetrieverConfig",
]
