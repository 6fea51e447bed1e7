"""
Reranking
=========

Post-retrieval rescoring of context items.

Example:
    from hybridrag.rerank import HeuristicReranker, Strategy

    reranker = HeuristicReranker(strategy=Strategy.RECIPROCAL, top_k=10)
"""

from hybridrag.rerank.cross_encoder import CrossEncoderScorer, CrossEncoderReranker
from hybridrag.rerank.heuristic import Strategy, HeuristicReranker, contains_exact_match
from hybridrag.rerank.chain import RerankerChain

__all__ = [
    "CrossEncoderScorer",
    "CrossEncoderReranker",
    "Strategy",
    "HeuristicReranker",
    "contains_exact_match",
    "RerankerChain",
]
