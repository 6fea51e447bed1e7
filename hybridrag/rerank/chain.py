"""Sequential composition of rerankers."""

from typing import List

from hybridrag.core.interfaces import Reranker
from hybridrag.core.models import ContextItem, Query


class RerankerChain(Reranker):
    """
    Applies rerankers in order, each one receiving the previous output.
    The first error aborts the chain.

    Example:
        >>> chain = RerankerChain(HeuristicReranker(boost_exact_match=True),
        ...                       CrossEncoderReranker(scorer, top_k=5))
    """

    def __init__(self, *rerankers: Reranker):
        self.rerankers = list(rerankers)

    async def rerank(self, query: Query, items: List[ContextItem]) -> List[ContextItem]:
        for reranker in self.rerankers:
            items = await reranker.rerank(query, items)
        return items
