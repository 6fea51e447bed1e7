"""
hybridrag
=========

Hybrid retrieval for RAG pipelines: vector similarity search and
knowledge-graph traversal, fused into a single ranked context.

Components:
- core: query / result models and the Retriever, Reranker, Observer capabilities
- graph: BFS traversal engine, graph stores (in-memory, FalkorDB), GraphRetriever
- vector: vector index (in-memory), embedders, VectorRetriever
- hybrid: HybridRetriever (parallel, vector_then_graph, graph_then_vector)
- rerank: cross-encoder, heuristic and chained rerankers
- observe: tracing observer, span exporters, logging setup
- config: YAML retrieval settings

Example:
    from hybridrag import (
        HybridRetriever, HybridRetrieverConfig, Policy, Query, EntityHint,
        GraphRetriever, InMemoryGraphStore, VectorRetriever, InMemoryVectorIndex,
    )

    hybrid = HybridRetriever(HybridRetrieverConfig(
        vector=VectorRetriever(InMemoryVectorIndex("docs")),
        graph=GraphRetriever(InMemoryGraphStore("kg")),
        policy=Policy.PARALLEL,
    ))
    result = await hybrid.retrieve(Query(
        text="contract law",
        embedding=[...],
        entities=[EntityHint(id="art-1321")],
        top_k=10,
    ))
"""

__version__ = "0.1.0"

from hybridrag.core import (
    Mode,
    EntityHint,
    Query,
    Provenance,
    ContextItem,
    ResultMetadata,
    Result,
    Retriever,
    FunctionRetriever,
    Reranker,
    Observer,
)
from hybridrag.graph import (
    GraphNode,
    GraphEdge,
    TraversalOptions,
    TraversalResult,
    GraphTraversalEngine,
    GraphStore,
    InMemoryGraphStore,
    GraphRetriever,
    GraphRetrieverConfig,
)
from hybridrag.vector import (
    VectorNode,
    VectorIndex,
    Embedder,
    InMemoryVectorIndex,
    VectorRetriever,
    VectorRetrieverConfig,
)
from hybridrag.hybrid import (
    Policy,
    FusionWeights,
    HybridRetriever,
    HybridRetrieverConfig,
)
from hybridrag.rerank import (
    CrossEncoderReranker,
    HeuristicReranker,
    RerankerChain,
)
from hybridrag.observe import (
    TracingObserver,
    NoOpObserver,
    configure_logging,
)
from hybridrag.config import load_settings, build_reranker

__all__ = [
    "__version__",
    # Core
    "Mode",
    "EntityHint",
    "Query",
    "Provenance",
    "ContextItem",
    "ResultMetadata",
    "Result",
    "Retriever",
    "FunctionRetriever",
    "Reranker",
    "Observer",
    # Graph
    "GraphNode",
    "GraphEdge",
    "TraversalOptions",
    "TraversalResult",
    "GraphTraversalEngine",
    "GraphStore",
    "InMemoryGraphStore",
    "GraphRetriever",
    "GraphRetrieverConfig",
    # Vector
    "VectorNode",
    "VectorIndex",
    "Embedder",
    "InMemoryVectorIndex",
    "VectorRetriever",
    "VectorRetrieverConfig",
    # Hybrid
    "Policy",
    "FusionWeights",
    "HybridRetriever",
    "HybridRetrieverConfig",
    # Rerank
    "CrossEncoderReranker",
    "HeuristicReranker",
    "RerankerChain",
    # Observe
    "TracingObserver",
    "NoOpObserver",
    "configure_logging",
    # Config
    "load_settings",
    "build_reranker",
]
