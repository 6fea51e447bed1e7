"""
Hybrid Retrieval
================

Combines vector similarity search and graph traversal.

Example:
    from hybridrag.hybrid import HybridRetriever, HybridRetrieverConfig, Policy

    hybrid = HybridRetriever(HybridRetrieverConfig(
        vector=vector_retriever,
        graph=graph_retriever,
        policy=Policy.VECTOR_THEN_GRAPH,
    ))
"""

from hybridrag.hybrid.config import Policy, FusionWeights, HybridRetrieverConfig
from hybridrag.hybrid.fusion import merge_results, deduplicate, rank
from hybridrag.hybrid.orchestrator import HybridRetriever

__all__ = [
    "Policy",
    "FusionWeights",
    "HybridRetrieverConfig",
    "merge_results",
    "deduplicate",
    "rank",
    "HybridRetriever",
]
