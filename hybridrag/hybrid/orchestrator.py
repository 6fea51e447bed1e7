"""
HybridRetriever
===============

Orchestrates a vector retriever and a graph retriever into a single
ranked result set.

Policies:
    parallel            vector ─┐
                                ├─ gather ─> merge
                        graph  ─┘

    vector_then_graph   vector ─> ids as entity hints ─> graph ─> merge

    graph_then_vector   graph ─> vector (original query) ─> merge

Post-processing (all policies):
    merge ─> [dedup] ─> sort desc ─> top-k ─> [rerank] ─> Result

Failure handling is fail-fast: any retriever or reranker error aborts
the call and is raised unchanged. There are no retries and no partial
results.
"""

import asyncio
import structlog
import time
from dataclasses import dataclass, field
from typing import List, Optional

from hybridrag.core.interfaces import Retriever
from hybridrag.core.models import ContextItem, EntityHint, Mode, Query, Result, ResultMetadata
from hybridrag.core.notify import notify
from hybridrag.hybrid.config import HybridRetrieverConfig, Policy
from hybridrag.hybrid.fusion import deduplicate, merge_results, rank

log = structlog.get_logger()


@dataclass
class _Combined:
    """Merged items of one policy run, before post-processing."""
    items: List[ContextItem] = field(default_factory=list)
    modes_used: List[Mode] = field(default_factory=lambda: [Mode.HYBRID])
    total_candidates: int = 0


class HybridRetriever(Retriever):
    """
    Hybrid vector + graph retrieval.

    Example:
        >>> hybrid = HybridRetriever(HybridRetrieverConfig(
        ...     vector=vector_retriever,
        ...     graph=graph_retriever,
        ...     policy=Policy.PARALLEL,
        ...     dedup_by_id=True
        ... ))
        >>> result = await hybrid.retrieve(Query(
        ...     text="machine learning",
        ...     entities=[EntityHint(id="g1")],
        ...     top_k=10
        ... ))
        >>> result.metadata.modes_used
        [<Mode.HYBRID: 'hybrid'>, <Mode.VECTOR: 'vector'>, <Mode.GRAPH: 'graph'>]
    """

    def __init__(self, config: Optional[HybridRetrieverConfig] = None):
        self.config = config or HybridRetrieverConfig()

        log.info(
            f"HybridRetriever initialized - "
            f"policy={self.config.policy.value}, "
            f"weights=({self.config.weights.vector}, {self.config.weights.graph}), "
            f"vector={self.config.vector is not None}, "
            f"graph={self.config.graph is not None}, "
            f"dedup={self.config.dedup_by_id}"
        )

    async def retrieve(self, query: Query) -> Result:
        """
        Run the configured policy and post-process the merged items.

        Args:
            query: Retrieval request

        Returns:
            Result with items sorted by descending fused score

        Raises:
            Any exception raised by a retriever or by the reranker
        """
        observer = self.config.observer
        notify(observer, "on_retrieve_start", query)

        try:
            result = await self._retrieve(query)
        except BaseException as e:
            notify(observer, "on_retrieve_end", None, e)
            raise

        notify(observer, "on_retrieve_end", result, None)
        return result

    async def _retrieve(self, query: Query) -> Result:
        start = time.monotonic()
        policy = self.config.policy

        if policy == Policy.VECTOR_THEN_GRAPH:
            combined = await self._retrieve_vector_then_graph(query)
        elif policy == Policy.GRAPH_THEN_VECTOR:
            combined = await self._retrieve_graph_then_vector(query)
        else:
            combined = await self._retrieve_parallel(query)

        items = combined.items
        if self.config.dedup_by_id:
            items = deduplicate(items)

        items = rank(items, query.top_k)

        if self.config.reranker is not None:
            rerank_start = time.monotonic()
            input_count = len(items)
            items = await self.config.reranker.rerank(query, items)
            notify(
                self.config.observer,
                "on_rerank",
                type(self.config.reranker).__name__,
                input_count,
                len(items),
                int((time.monotonic() - rerank_start) * 1000)
            )

        latency_ms = int((time.monotonic() - start) * 1000)

        log.debug(
            f"HybridRetriever - policy={policy.value}, "
            f"candidates={combined.total_candidates}, returned={len(items)}, "
            f"modes={[m.value for m in combined.modes_used]} ({latency_ms}ms)"
        )

        return Result(
            items=items,
            query=query,
            metadata=ResultMetadata(
                total_candidates=combined.total_candidates,
                latency_ms=latency_ms,
                modes_used=combined.modes_used,
            )
        )

    async def _retrieve_parallel(self, query: Query) -> _Combined:
        """
        Fan-out/fan-in: both retrievers run concurrently and the merge
        starts only after both have finished. The vector error wins when
        both fail.
        """
        vector_result, graph_result = await asyncio.gather(
            self._run(self.config.vector, query),
            self._run(self.config.graph, query),
            return_exceptions=True
        )

        if isinstance(vector_result, BaseException):
            raise vector_result
        if isinstance(graph_result, BaseException):
            raise graph_result

        combined = _Combined()
        combined.items = merge_results(vector_result.items, graph_result.items, self.config.weights)
        if vector_result.items:
            combined.modes_used.append(Mode.VECTOR)
        if graph_result.items:
            combined.modes_used.append(Mode.GRAPH)
        combined.total_candidates = (
            vector_result.metadata.total_candidates + graph_result.metadata.total_candidates
        )
        return combined

    async def _retrieve_vector_then_graph(self, query: Query) -> _Combined:
        """Vector first; its item ids seed the graph traversal."""
        combined = _Combined()

        vector_items: List[ContextItem] = []
        if self.config.vector is not None:
            result = await self.config.vector.retrieve(query)
            vector_items = result.items
            combined.total_candidates += result.metadata.total_candidates
            combined.modes_used.append(Mode.VECTOR)

        graph_items: List[ContextItem] = []
        if self.config.graph is not None and vector_items:
            hints = [EntityHint(id=item.id, name=item.id) for item in vector_items]
            result = await self.config.graph.retrieve(query.with_entities(hints))
            graph_items = result.items
            combined.total_candidates += result.metadata.total_candidates
            combined.modes_used.append(Mode.GRAPH)

        combined.items = merge_results(vector_items, graph_items, self.config.weights)
        return combined

    async def _retrieve_graph_then_vector(self, query: Query) -> _Combined:
        """
        Graph first, then vector with the original query.

        The graph items do not shape the vector query; both result sets
        only meet in the merge.
        """
        combined = _Combined()

        graph_items: List[ContextItem] = []
        if self.config.graph is not None:
            result = await self.config.graph.retrieve(query)
            graph_items = result.items
            combined.total_candidates += result.metadata.total_candidates
            combined.modes_used.append(Mode.GRAPH)

        vector_items: List[ContextItem] = []
        if self.config.vector is not None:
            result = await self.config.vector.retrieve(query)
            vector_items = result.items
            combined.total_candidates += result.metadata.total_candidates
            combined.modes_used.append(Mode.VECTOR)

        combined.items = merge_results(vector_items, graph_items, self.config.weights)
        return combined

    @staticmethod
    async def _run(retriever: Optional[Retriever], query: Query) -> Result:
        """A missing retriever contributes an empty result."""
        if retriever is None:
            return Result(items=[], query=query)
        return await retriever.retrieve(query)
