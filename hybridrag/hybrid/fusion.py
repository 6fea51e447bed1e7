"""
Score Fusion
============

Merging and deduplication of vector and graph results.

Fusion formula for an item found by both retrievers:
    score = s_vector * w_vector + s_graph * w_graph

An item found by both sources therefore accumulates both contributions
and can outrank items found by a single source.
"""

from typing import Dict, List, TYPE_CHECKING

from hybridrag.core.models import ContextItem, Mode

if TYPE_CHECKING:
    from hybridrag.hybrid.config import FusionWeights


def merge_results(
    vector_items: List[ContextItem],
    graph_items: List[ContextItem],
    weights: "FusionWeights"
) -> List[ContextItem]:
    """
    Weighted additive fusion keyed by item id.

    Vector items are inserted first with `score * weights.vector`; graph
    items add `score * weights.graph` to an existing entry (taking over its
    graph path when they carry one) or are inserted. Every merged item is
    marked as hybrid. Input items are copied, never modified.

    Args:
        vector_items: Items from the vector retriever
        graph_items: Items from the graph retriever
        weights: Per-source weights

    Returns:
        Merged items in first-seen order (not sorted)

    Example:
        >>> merged = merge_results(
        ...     [ContextItem(id="x", score=0.8)],
        ...     [ContextItem(id="x", score=0.6), ContextItem(id="y", score=0.5)],
        ...     FusionWeights(vector=0.6, graph=0.4)
        ... )
        >>> [(i.id, round(i.score, 2)) for i in merged]
        [('x', 0.72), ('y', 0.2)]
    """
    merged: Dict[str, ContextItem] = {}

    for item in vector_items:
        weighted = item.score * weights.vector
        if item.id in merged:
            merged[item.id].score += weighted
        else:
            copy = item.copy()
            copy.score = weighted
            merged[item.id] = copy

    for item in graph_items:
        weighted = item.score * weights.graph
        if item.id in merged:
            existing = merged[item.id]
            existing.score += weighted
            if item.provenance.graph_path:
                existing.provenance.graph_path = list(item.provenance.graph_path)
        else:
            copy = item.copy()
            copy.score = weighted
            merged[item.id] = copy

    for item in merged.values():
        item.provenance.mode = Mode.HYBRID

    return list(merged.values())


def deduplicate(items: List[ContextItem]) -> List[ContextItem]:
    """
    Keep one item per id: the first occurrence, replaced in place by any
    later occurrence with a strictly higher score.
    """
    positions: Dict[str, int] = {}
    result: List[ContextItem] = []

    for item in items:
        if item.id in positions:
            index = positions[item.id]
            if item.score > result[index].score:
                result[index] = item
        else:
            positions[item.id] = len(result)
            result.append(item)

    return result


def rank(items: List[ContextItem], top_k: int = 0) -> List[ContextItem]:
    """
    Sort by descending score and cut to top_k (when positive).

    Ties are broken by id so that equal scores give a stable order.
    """
    ranked = sorted(items, key=lambda item: (-item.score, item.id))
    if top_k > 0:
        ranked = ranked[:top_k]
    return ranked
