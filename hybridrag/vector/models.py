"""
Vector Models
=============

Dataclasses for the vector-similarity backend.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class DistanceMetric(str, Enum):
    """Similarity function of an index."""
    COSINE = "cosine"
    DOT = "dot"
    EUCLIDEAN = "euclidean"


@dataclass
class VectorNode:
    """
    Entry of a vector index.

    Attributes:
        id: Unique identifier (shared with graph node ids when the same
            entity is indexed in both backends)
        content: Text content
        embedding: Embedding vector
        source: Where the entry came from
        metadata: String metadata, matched by query filters
    """
    id: str
    content: str = ""
    embedding: List[float] = field(default_factory=list)
    source: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class SearchResult:
    """Raw hit returned by VectorIndex.search(), before conversion to ContextItem."""
    node: VectorNode
    score: float

    def __repr__(self) -> str:
        return f"<SearchResult(id={self.node.id}, score={self.score:.3f})>"
