"""
Retrieval Models
================

Dataclasses shared by every retriever: the query, the retrieved context
items with their provenance, and the result envelope.

All objects are transient: they are created for a single query and
discarded once the caller has consumed the Result.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class Mode(str, Enum):
    """Retrieval strategy that produced (or was used for) a result."""
    VECTOR = "vector"
    GRAPH = "graph"
    HYBRID = "hybrid"


@dataclass
class EntityHint:
    """
    Hint used as a start node for graph traversal.

    Attributes:
        id: Identifier of the entity (graph node id)
        type: Entity type (e.g. "person", "concept", "document")
        name: Human-readable name
        confidence: Confidence of the hint [0-1]
    """
    id: str
    type: str = ""
    name: str = ""
    confidence: float = 0.0


@dataclass
class Query:
    """
    Retrieval request.

    A Query is treated as immutable: sub-queries are derived with
    `with_entities()`, which returns a copy.

    Attributes:
        text: Raw query text
        embedding: Optional precomputed embedding vector
        entities: Entity hints for graph traversal
        filters: Metadata filters (exact match)
        max_depth: Maximum traversal depth (0 = retriever default)
        top_k: Maximum number of results (0 = no cap / retriever default)
        min_score: Minimum relevance score threshold
        modes: Requested retrieval modes
        metadata: Free-form query metadata
    """
    text: str = ""
    embedding: Optional[List[float]] = None
    entities: List[EntityHint] = field(default_factory=list)
    filters: Dict[str, str] = field(default_factory=dict)
    max_depth: int = 0
    top_k: int = 0
    min_score: float = 0.0
    modes: List[Mode] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_entities(self, entities: List[EntityHint]) -> "Query":
        """Copy of this query with the entity hints replaced."""
        return replace(self, entities=list(entities))


@dataclass
class Provenance:
    """
    Retrieval path of a context item.

    Attributes:
        mode: Strategy that found the item
        backend: Name of the backend (index or graph)
        graph_path: Node ids from a start node to the item (graph items)
        similarity_score: Raw vector similarity, before fusion
        reranker_score: Score assigned by a reranker, if any
    """
    mode: Mode = Mode.VECTOR
    backend: str = ""
    graph_path: List[str] = field(default_factory=list)
    similarity_score: float = 0.0
    reranker_score: float = 0.0


@dataclass
class ContextItem:
    """
    Single piece of retrieved context.

    `id` is unique within a Result and is never modified; `score` and
    `provenance` may be rewritten by fusion and reranking.
    """
    id: str
    content: str = ""
    source: str = ""
    score: float = 0.0
    metadata: Dict[str, str] = field(default_factory=dict)
    provenance: Provenance = field(default_factory=Provenance)

    def copy(self) -> "ContextItem":
        """Copy that can be rescored without touching the original."""
        return replace(
            self,
            metadata=dict(self.metadata),
            provenance=replace(
                self.provenance,
                graph_path=list(self.provenance.graph_path)
            )
        )

    def __repr__(self) -> str:
        return (
            f"<ContextItem(id={self.id}, score={self.score:.3f}, "
            f"mode={self.provenance.mode.value})>"
        )


@dataclass
class ResultMetadata:
    """
    Metadata about a retrieval operation.

    Attributes:
        total_candidates: Candidates seen before filtering/reranking
        latency_ms: Total retrieval latency in milliseconds
        modes_used: Retrieval modes actually executed
        cache_hit: Whether the result came from a cache
    """
    total_candidates: int = 0
    latency_ms: int = 0
    modes_used: List[Mode] = field(default_factory=list)
    cache_hit: bool = False


@dataclass
class Result:
    """Retrieval response: items ordered by descending score."""
    items: List[ContextItem] = field(default_factory=list)
    query: Query = field(default_factory=Query)
    metadata: ResultMetadata = field(default_factory=ResultMetadata)

    @property
    def ids(self) -> List[str]:
        return [item.id for item in self.items]


def matches_filters(metadata: Dict[str, str], filters: Optional[Dict[str, str]]) -> bool:
    """True when every filter key is present in metadata with the same value."""
    for key, value in (filters or {}).items():
        if metadata.get(key) != value:
            return False
    return True
