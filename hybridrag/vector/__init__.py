"""
Vector Retrieval
================

Similarity-search capability, an in-memory index and the vector-backed
retriever.

Example:
    from hybridrag.vector import InMemoryVectorIndex, HashEmbedder, VectorRetriever

    retriever = VectorRetriever(InMemoryVectorIndex("docs"), HashEmbedder(128))
"""

from hybridrag.vector.models import DistanceMetric, VectorNode, SearchResult
from hybridrag.vector.index import VectorIndex, Embedder
from hybridrag.vector.memory import InMemoryVectorIndex, HashEmbedder, cosine_similarity, similarity
from hybridrag.vector.retriever import VectorRetriever, VectorRetrieverConfig

__all__ = [
    "DistanceMetric",
    "VectorNode",
    "SearchResult",
    "VectorIndex",
    "Embedder",
    "InMemoryVectorIndex",
    "HashEmbedder",
    "cosine_similarity",
    "similarity",
    "VectorRetriever",
    "VectorRetrieverConfig",
]
