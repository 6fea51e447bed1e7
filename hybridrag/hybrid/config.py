"""
Hybrid Retriever Configuration
==============================

Policy and weights of the hybrid orchestrator.
"""

import structlog
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from hybridrag.core.interfaces import Observer, Reranker, Retriever

if TYPE_CHECKING:
    from hybridrag.config.settings import RetrievalSettings

log = structlog.get_logger()


class Policy(str, Enum):
    """How vector and graph retrieval are combined."""
    PARALLEL = "parallel"
    VECTOR_THEN_GRAPH = "vector_then_graph"
    GRAPH_THEN_VECTOR = "graph_then_vector"

    @classmethod
    def parse(cls, value) -> "Policy":
        """Policy from a string; empty or unknown values fall back to PARALLEL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            if value:
                log.warning(f"Unknown hybrid policy {value!r}, using parallel")
            return cls.PARALLEL


@dataclass
class FusionWeights:
    """
    Per-source weights applied before scores are summed.

    Attributes:
        vector: Weight of vector similarity scores [0-1]
        graph: Weight of graph path scores [0-1]
    """
    vector: float = 0.6
    graph: float = 0.4

    def __post_init__(self):
        """Validate configuration values."""
        if not 0 <= self.vector <= 1:
            raise ValueError(f"vector weight must be in [0, 1], got {self.vector}")
        if not 0 <= self.graph <= 1:
            raise ValueError(f"graph weight must be in [0, 1], got {self.graph}")

    @property
    def is_unset(self) -> bool:
        return self.vector == 0 and self.graph == 0


@dataclass
class HybridRetrieverConfig:
    """
    Configuration for HybridRetriever.

    Attributes:
        vector: Vector retriever (None = no vector contribution)
        graph: Graph retriever (None = no graph contribution)
        policy: Combination policy (default: parallel)
        weights: Fusion weights; all-zero weights are replaced by the
                 defaults (0.6 vector, 0.4 graph)
        reranker: Applied after merge and top-k (optional)
        dedup_by_id: Collapse duplicate ids after merge
        observer: Receives tracing events (optional)
    """
    vector: Optional[Retriever] = None
    graph: Optional[Retriever] = None
    policy: Policy = Policy.PARALLEL
    weights: FusionWeights = field(default_factory=FusionWeights)
    reranker: Optional[Reranker] = None
    dedup_by_id: bool = False
    observer: Optional[Observer] = None

    def __post_init__(self):
        self.policy = Policy.parse(self.policy)
        if self.weights.is_unset:
            self.weights = FusionWeights()

    @classmethod
    def from_settings(
        cls,
        settings: "RetrievalSettings",
        vector: Optional[Retriever] = None,
        graph: Optional[Retriever] = None,
        reranker: Optional[Reranker] = None,
        observer: Optional[Observer] = None
    ) -> "HybridRetrieverConfig":
        """
        Build a configuration from loaded settings.

        Example:
            >>> settings = load_settings()
            >>> config = HybridRetrieverConfig.from_settings(
            ...     settings, vector=vector_retriever, graph=graph_retriever
            ... )
        """
        return cls(
            vector=vector,
            graph=graph,
            policy=Policy.parse(settings.hybrid.policy),
            weights=FusionWeights(
                vector=settings.hybrid.weights.vector,
                graph=settings.hybrid.weights.graph,
            ),
            reranker=reranker,
            dedup_by_id=settings.hybrid.dedup_by_id,
            observer=observer,
        )
