"""
VectorRetriever
===============

Retriever over a similarity-search backend.

The index is expected to return scores already in [0, 1]; the retriever
only applies the top-k and min-score bounds and records provenance.
"""

import structlog
import time
from dataclasses import dataclass
from typing import Optional

from hybridrag.core.interfaces import Observer, Retriever
from hybridrag.core.models import ContextItem, Mode, Provenance, Query, Result, ResultMetadata
from hybridrag.core.notify import notify
from hybridrag.vector.index import Embedder, VectorIndex

log = structlog.get_logger()


@dataclass
class VectorRetrieverConfig:
    """
    Configuration for VectorRetriever.

    Attributes:
        default_top_k: Number of hits requested when the query sets no top_k
        min_score: Similarity threshold when the query sets none
    """
    default_top_k: int = 10
    min_score: float = 0.0

    def __post_init__(self):
        """Validate configuration values."""
        if self.default_top_k < 1:
            raise ValueError(f"default_top_k must be >= 1, got {self.default_top_k}")
        if not 0 <= self.min_score <= 1:
            raise ValueError(f"min_score must be in [0, 1], got {self.min_score}")


class VectorRetriever(Retriever):
    """
    Vector similarity retrieval.

    Example:
        >>> retriever = VectorRetriever(
        ...     index=InMemoryVectorIndex("docs"),
        ...     embedder=HashEmbedder(128)
        ... )
        >>> result = await retriever.retrieve(Query(text="neural networks", top_k=5))
    """

    def __init__(
        self,
        index: VectorIndex,
        embedder: Optional[Embedder] = None,
        config: Optional[VectorRetrieverConfig] = None,
        observer: Optional[Observer] = None
    ):
        self.index = index
        self.embedder = embedder
        self.config = config or VectorRetrieverConfig()
        self.observer = observer

        log.info(
            f"VectorRetriever initialized - index={index.name}, "
            f"embedder={embedder.model if embedder else None}, "
            f"top_k={self.config.default_top_k}"
        )

    async def retrieve(self, query: Query) -> Result:
        start = time.monotonic()

        embedding = query.embedding
        if not embedding and self.embedder is not None:
            embedding = await self.embedder.embed(query.text)

        top_k = query.top_k or self.config.default_top_k
        hits = await self.index.search(embedding or [], top_k, query.filters)

        min_score = query.min_score or self.config.min_score

        items = [
            ContextItem(
                id=hit.node.id,
                content=hit.node.content,
                source=hit.node.source,
                score=hit.score,
                metadata=dict(hit.node.metadata),
                provenance=Provenance(
                    mode=Mode.VECTOR,
                    backend=self.index.name,
                    similarity_score=hit.score,
                )
            )
            for hit in hits
            if hit.score >= min_score
        ]

        latency_ms = int((time.monotonic() - start) * 1000)
        notify(self.observer, "on_vector_search", self.index.name, top_k, len(items), latency_ms)

        log.debug(
            f"VectorRetriever - {len(hits)} hits, {len(items)} above "
            f"min_score={min_score} ({latency_ms}ms)"
        )

        return Result(
            items=items,
            query=query,
            metadata=ResultMetadata(
                total_candidates=len(hits),
                latency_ms=latency_ms,
                modes_used=[Mode.VECTOR],
            )
        )
