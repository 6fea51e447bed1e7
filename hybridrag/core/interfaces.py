"""
Retrieval Capabilities
======================

Abstract capabilities consumed by the orchestrator.

The HybridRetriever only depends on these classes, never on a concrete
backend:

    Retriever   -> retrieve(query) -> Result
    Reranker    -> rerank(query, items) -> items
    Observer    -> side-channel notifications (tracing, metrics)
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from hybridrag.core.models import ContextItem, Query, Result


class Retriever(ABC):
    """Base class for every retrieval strategy (vector, graph, hybrid)."""

    @abstractmethod
    async def retrieve(self, query: Query) -> Result:
        """
        Execute a retrieval query.

        Errors raised by the backend propagate unchanged. An empty result
        is a legitimate answer, not an error.
        """


class FunctionRetriever(Retriever):
    """
    Adapts a coroutine function to the Retriever capability.

    Example:
        >>> async def lookup(query):
        ...     return Result(items=[ContextItem(id="a", score=0.9)], query=query)
        >>> retriever = FunctionRetriever(lookup)
    """

    def __init__(self, func: Callable[[Query], Awaitable[Result]]):
        self.func = func

    async def retrieve(self, query: Query) -> Result:
        return await self.func(query)


class Reranker(ABC):
    """Reorders and rescores retrieved items. May also drop items."""

    @abstractmethod
    async def rerank(self, query: Query, items: List[ContextItem]) -> List[ContextItem]:
        ...


class Observer(ABC):
    """
    Receives retrieval events.

    Callers guard every notification: an exception raised by an observer
    never fails the retrieval itself.
    """

    def on_retrieve_start(self, query: Query) -> None:
        """A retrieval operation begins."""

    def on_retrieve_end(self, result: Optional[Result], error: Optional[BaseException]) -> None:
        """A retrieval operation completed (successfully or not)."""

    @abstractmethod
    def on_vector_search(self, backend: str, top_k: int, result_count: int, latency_ms: int) -> None:
        ...

    @abstractmethod
    def on_graph_traverse(self, backend: str, depth: int, node_count: int, latency_ms: int) -> None:
        ...

    @abstractmethod
    def on_rerank(self, model: str, input_count: int, output_count: int, latency_ms: int) -> None:
        ...
