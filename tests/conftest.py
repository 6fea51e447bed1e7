"""
hybridrag Test Configuration
============================

Shared fixtures for all tests.
"""

import asyncio
import pytest
import pytest_asyncio
from typing import List, Optional

from hybridrag.core.interfaces import Observer, Reranker, Retriever
from hybridrag.core.models import ContextItem, Mode, Provenance, Query, Result, ResultMetadata
from hybridrag.graph.models import GraphEdge, GraphNode
from hybridrag.graph.memory import InMemoryGraphStore


class StubRetriever(Retriever):
    """Returns canned items (or raises) and records every query it receives."""

    def __init__(
        self,
        items: Optional[List[ContextItem]] = None,
        error: Optional[Exception] = None,
        mode: Mode = Mode.VECTOR,
        delay: float = 0.0
    ):
        self.items = items or []
        self.error = error
        self.mode = mode
        self.delay = delay
        self.queries: List[Query] = []

    async def retrieve(self, query: Query) -> Result:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return Result(
            items=[item.copy() for item in self.items],
            query=query,
            metadata=ResultMetadata(
                total_candidates=len(self.items),
                modes_used=[self.mode],
            )
        )


class RecordingObserver(Observer):
    """Keeps every event as (name, args)."""

    def __init__(self):
        self.events = []

    def on_retrieve_start(self, query):
        self.events.append(("retrieve_start", (query,)))

    def on_retrieve_end(self, result, error):
        self.events.append(("retrieve_end", (result, error)))

    def on_vector_search(self, backend, top_k, result_count, latency_ms):
        self.events.append(("vector_search", (backend, top_k, result_count)))

    def on_graph_traverse(self, backend, depth, node_count, latency_ms):
        self.events.append(("graph_traverse", (backend, depth, node_count)))

    def on_rerank(self, model, input_count, output_count, latency_ms):
        self.events.append(("rerank", (model, input_count, output_count)))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]


class FailingObserver(RecordingObserver):
    """Raises on every event."""

    def on_retrieve_start(self, query):
        raise RuntimeError("observer down")

    def on_retrieve_end(self, result, error):
        raise RuntimeError("observer down")

    def on_vector_search(self, backend, top_k, result_count, latency_ms):
        raise RuntimeError("observer down")

    def on_graph_traverse(self, backend, depth, node_count, latency_ms):
        raise RuntimeError("observer down")

    def on_rerank(self, model, input_count, output_count, latency_ms):
        raise RuntimeError("observer down")


class ReplaceReranker(Reranker):
    """Replaces the item list with a fixed one."""

    def __init__(self, items: List[ContextItem]):
        self.items = items
        self.received: List[List[ContextItem]] = []

    async def rerank(self, query, items):
        self.received.append(list(items))
        return list(self.items)


def item(item_id: str, score: float, mode: Mode = Mode.VECTOR, path=None, content: str = "") -> ContextItem:
    return ContextItem(
        id=item_id,
        content=content or f"content of {item_id}",
        source="test",
        score=score,
        provenance=Provenance(mode=mode, graph_path=list(path or [])),
    )


@pytest.fixture
def stub_retriever():
    """StubRetriever class, for building retrievers with canned items."""
    return StubRetriever


@pytest.fixture
def recording_observer():
    return RecordingObserver()


@pytest.fixture
def failing_observer():
    return FailingObserver()


@pytest.fixture
def replace_reranker():
    return ReplaceReranker


@pytest.fixture
def make_item():
    """Factory for ContextItem with a given id, score and mode."""
    return item


@pytest_asyncio.fixture
async def sample_graph():
    """
    Small directed graph:

        A --0.9--> B --0.8--> C
    """
    graph = InMemoryGraphStore("test-graph")
    await graph.add_nodes([
        GraphNode(id="A", type="concept", content="Machine learning", source="kb", metadata={"lang": "en"}),
        GraphNode(id="B", type="concept", content="Neural networks", source="kb", metadata={"lang": "en"}),
        GraphNode(id="C", type="concept", content="Backpropagation", source="kb", metadata={"lang": "it"}),
    ])
    await graph.add_edges([
        GraphEdge("A", "B", type="relates_to", weight=0.9),
        GraphEdge("B", "C", type="relates_to", weight=0.8),
    ])
    return graph


# Mock FalkorDB client for unit tests
@pytest.fixture
def mock_falkordb():
    """Mock FalkorDB client for unit tests."""
    from unittest.mock import AsyncMock, MagicMock
    from hybridrag.graph.config import FalkorDBConfig

    client = MagicMock()
    client.config = FalkorDBConfig(graph_name="test-kg", node_label="Entity", edge_label="RELATES")
    client.connect = AsyncMock()
    client.close = AsyncMock()
    client.query = AsyncMock(return_value=[])
    return client
