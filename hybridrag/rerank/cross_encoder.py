"""
Cross-Encoder Reranking
=======================

Rescores (query, document) pairs with a cross-encoder model. The model
score replaces the retrieval score.
"""

import structlog
from abc import ABC, abstractmethod
from typing import List

from hybridrag.core.interfaces import Reranker
from hybridrag.core.models import ContextItem, Query

log = structlog.get_logger()


class CrossEncoderScorer(ABC):
    """Scores query-document pairs; one score per document, same order."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name."""
        ...

    @abstractmethod
    async def score(self, query: str, documents: List[str]) -> List[float]:
        ...


class CrossEncoderReranker(Reranker):
    """
    Reranker backed by a CrossEncoderScorer.

    Items without a corresponding score (the scorer returned fewer scores
    than documents) keep their original score.

    Example:
        >>> reranker = CrossEncoderReranker(scorer, top_k=5, min_score=0.2)
        >>> items = await reranker.rerank(query, items)
    """

    def __init__(self, scorer: CrossEncoderScorer, top_k: int = 0, min_score: float = 0.0):
        self.scorer = scorer
        self.top_k = top_k
        self.min_score = min_score

    async def rerank(self, query: Query, items: List[ContextItem]) -> List[ContextItem]:
        if not items:
            return items

        scores = await self.scorer.score(query.text, [item.content for item in items])

        result: List[ContextItem] = []
        for i, item in enumerate(items):
            item = item.copy()
            if i < len(scores):
                item.score = scores[i]
                item.provenance.reranker_score = scores[i]
            if item.score >= self.min_score:
                result.append(item)

        result.sort(key=lambda item: item.score, reverse=True)

        if self.top_k > 0:
            result = result[:self.top_k]

        log.debug(
            f"CrossEncoderReranker - model={self.scorer.model}, "
            f"input={len(items)}, output={len(result)}"
        )
        return result
