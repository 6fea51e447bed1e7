"""
Heuristic Reranking
===================

Cheap, model-free rescoring.

Strategies:
- linear: keep the retrieval score
- max: keep the retrieval score
- reciprocal: 1 / (rank + 60) + 0.5 * score (rank = input position)

Optionally multiplies the score of items whose content contains the
query text (case-insensitive) by `exact_match_boost`.
"""

from enum import Enum
from typing import List

from hybridrag.core.interfaces import Reranker
from hybridrag.core.models import ContextItem, Query

RRF_K = 60.0


class Strategy(str, Enum):
    """Heuristic scoring strategy."""
    RECIPROCAL = "reciprocal"
    LINEAR = "linear"
    MAX = "max"


def contains_exact_match(content: str, query: str) -> bool:
    return query.lower() in content.lower()


class HeuristicReranker(Reranker):
    """
    Rule-based reranker.

    Example:
        >>> reranker = HeuristicReranker(boost_exact_match=True)
        >>> items = await reranker.rerank(Query(text="contract"), items)
    """

    def __init__(
        self,
        strategy: Strategy = Strategy.LINEAR,
        top_k: int = 0,
        min_score: float = 0.0,
        boost_exact_match: bool = False,
        exact_match_boost: float = 1.5
    ):
        self.strategy = Strategy(strategy) if strategy else Strategy.LINEAR
        self.top_k = top_k
        self.min_score = min_score
        self.boost_exact_match = boost_exact_match
        self.exact_match_boost = exact_match_boost or 1.5

    async def rerank(self, query: Query, items: List[ContextItem]) -> List[ContextItem]:
        if not items:
            return items

        result: List[ContextItem] = []
        for rank, item in enumerate(items):
            item = item.copy()

            if self.strategy == Strategy.RECIPROCAL:
                score = 1.0 / (rank + RRF_K) + item.score * 0.5
            else:
                score = item.score

            if self.boost_exact_match and contains_exact_match(item.content, query.text):
                score *= self.exact_match_boost

            item.score = score
            item.provenance.reranker_score = score
            result.append(item)

        result.sort(key=lambda item: item.score, reverse=True)

        if self.min_score > 0:
            result = [item for item in result if item.score >= self.min_score]

        if self.top_k > 0:
            result = result[:self.top_k]

        return result
