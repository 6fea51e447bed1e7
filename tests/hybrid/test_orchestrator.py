"""
Test HybridRetriever
====================

Policies, fusion, post-processing and failure handling of the
orchestrator. Vector and graph retrievers are stubs returning canned
items.
"""

import asyncio
import pytest

from hybridrag.core.interfaces import Retriever
from hybridrag.core.models import EntityHint, Mode, Query, Result
from hybridrag.hybrid.config import FusionWeights, HybridRetrieverConfig, Policy
from hybridrag.hybrid.orchestrator import HybridRetriever


class VectorDown(Exception):
    pass


class GraphDown(Exception):
    pass


@pytest.fixture
def vector(stub_retriever, make_item):
    return stub_retriever([make_item("x", 0.8)], mode=Mode.VECTOR)


@pytest.fixture
def graph(stub_retriever, make_item):
    return stub_retriever(
        [make_item("x", 0.6, Mode.GRAPH, path=["s", "x"]), make_item("y", 0.5, Mode.GRAPH)],
        mode=Mode.GRAPH
    )


class TestHybridRetrieverConfig:

    def test_defaults(self):
        config = HybridRetrieverConfig()

        assert config.policy == Policy.PARALLEL
        assert (config.weights.vector, config.weights.graph) == (0.6, 0.4)
        assert config.dedup_by_id is False

    def test_zero_weights_replaced_by_defaults(self):
        config = HybridRetrieverConfig(weights=FusionWeights(vector=0.0, graph=0.0))

        assert (config.weights.vector, config.weights.graph) == (0.6, 0.4)

    def test_single_zero_weight_kept(self):
        config = HybridRetrieverConfig(weights=FusionWeights(vector=1.0, graph=0.0))

        assert (config.weights.vector, config.weights.graph) == (1.0, 0.0)

    def test_policy_from_string(self):
        assert HybridRetrieverConfig(policy="graph_then_vector").policy == Policy.GRAPH_THEN_VECTOR

    def test_unknown_policy_falls_back_to_parallel(self):
        assert HybridRetrieverConfig(policy="sideways").policy == Policy.PARALLEL
        assert HybridRetrieverConfig(policy="").policy == Policy.PARALLEL


class TestParallel:

    @pytest.mark.asyncio
    async def test_merge(self, vector, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph))

        result = await hybrid.retrieve(Query(text="q", top_k=10))

        assert result.ids == ["x", "y"]
        assert result.items[0].score == pytest.approx(0.72)
        assert result.items[1].score == pytest.approx(0.2)
        assert result.items[0].provenance.graph_path == ["s", "x"]
        assert all(item.provenance.mode == Mode.HYBRID for item in result.items)
        assert result.metadata.modes_used == [Mode.HYBRID, Mode.VECTOR, Mode.GRAPH]
        assert result.metadata.total_candidates == 3
        assert result.metadata.latency_ms >= 0

    @pytest.mark.asyncio
    async def test_both_receive_original_query(self, vector, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph))
        query = Query(text="q", entities=[EntityHint(id="s")])

        await hybrid.retrieve(query)

        assert vector.queries == [query]
        assert graph.queries == [query]

    @pytest.mark.asyncio
    async def test_top_k(self, vector, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph))

        result = await hybrid.retrieve(Query(text="q", top_k=1))

        assert result.ids == ["x"]

    @pytest.mark.asyncio
    async def test_no_retrievers(self):
        hybrid = HybridRetriever(HybridRetrieverConfig())

        result = await hybrid.retrieve(Query(text="q"))

        assert result.items == []
        assert result.metadata.modes_used == [Mode.HYBRID]
        assert result.metadata.total_candidates == 0

    @pytest.mark.asyncio
    async def test_modes_only_for_sources_with_items(self, stub_retriever, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=stub_retriever([]), graph=graph))

        result = await hybrid.retrieve(Query(text="q"))

        assert result.metadata.modes_used == [Mode.HYBRID, Mode.GRAPH]

    @pytest.mark.asyncio
    async def test_retrievers_run_concurrently(self, make_item):
        """Each side waits for the other to start; run one after the other it would time out."""
        vector_started = asyncio.Event()
        graph_started = asyncio.Event()

        class Rendezvous(Retriever):
            def __init__(self, mine, other, items):
                self.mine = mine
                self.other = other
                self.items = items

            async def retrieve(self, query):
                self.mine.set()
                await asyncio.wait_for(self.other.wait(), timeout=1.0)
                return Result(items=list(self.items), query=query)

        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=Rendezvous(vector_started, graph_started, [make_item("x", 0.8)]),
            graph=Rendezvous(graph_started, vector_started, [make_item("y", 0.5, Mode.GRAPH)]),
        ))

        result = await hybrid.retrieve(Query(text="q"))

        assert result.ids == ["x", "y"]

    @pytest.mark.asyncio
    async def test_vector_error_wins(self, stub_retriever):
        vector = stub_retriever(error=VectorDown("vector"))
        graph = stub_retriever(error=GraphDown("graph"), delay=0.01)
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph))

        with pytest.raises(VectorDown):
            await hybrid.retrieve(Query(text="q"))

        # both branches ran to completion before the failure was raised
        assert len(graph.queries) == 1

    @pytest.mark.asyncio
    async def test_graph_error(self, vector, stub_retriever):
        graph = stub_retriever(error=GraphDown("graph"))
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph))

        with pytest.raises(GraphDown, match="graph"):
            await hybrid.retrieve(Query(text="q"))


class TestVectorThenGraph:

    @pytest.mark.asyncio
    async def test_vector_ids_become_entity_hints(self, stub_retriever, make_item, graph):
        vector = stub_retriever([make_item("a", 0.9), make_item("b", 0.5)])
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=vector, graph=graph, policy=Policy.VECTOR_THEN_GRAPH
        ))
        query = Query(text="q", entities=[EntityHint(id="ignored")])

        result = await hybrid.retrieve(query)

        assert graph.queries[0].entities == [EntityHint(id="a", name="a"), EntityHint(id="b", name="b")]
        assert graph.queries[0].text == "q"
        assert query.entities == [EntityHint(id="ignored")]
        assert result.metadata.modes_used == [Mode.HYBRID, Mode.VECTOR, Mode.GRAPH]
        assert result.metadata.total_candidates == 4

    @pytest.mark.asyncio
    async def test_graph_skipped_without_vector_items(self, stub_retriever, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=stub_retriever([]), graph=graph, policy=Policy.VECTOR_THEN_GRAPH
        ))

        result = await hybrid.retrieve(Query(text="q"))

        assert graph.queries == []
        assert result.items == []
        assert result.metadata.modes_used == [Mode.HYBRID, Mode.VECTOR]

    @pytest.mark.asyncio
    async def test_without_vector_retriever(self, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(graph=graph, policy=Policy.VECTOR_THEN_GRAPH))

        result = await hybrid.retrieve(Query(text="q"))

        assert graph.queries == []
        assert result.metadata.modes_used == [Mode.HYBRID]

    @pytest.mark.asyncio
    async def test_vector_error_stops_pipeline(self, stub_retriever, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=stub_retriever(error=VectorDown("vector")),
            graph=graph,
            policy=Policy.VECTOR_THEN_GRAPH
        ))

        with pytest.raises(VectorDown):
            await hybrid.retrieve(Query(text="q"))

        assert graph.queries == []


class TestGraphThenVector:

    @pytest.mark.asyncio
    async def test_vector_gets_original_query(self, vector, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=vector, graph=graph, policy=Policy.GRAPH_THEN_VECTOR
        ))
        query = Query(text="q", entities=[EntityHint(id="s")])

        result = await hybrid.retrieve(query)

        assert vector.queries == [query]
        assert graph.queries == [query]
        assert result.ids == ["x", "y"]
        assert result.metadata.modes_used == [Mode.HYBRID, Mode.GRAPH, Mode.VECTOR]

    @pytest.mark.asyncio
    async def test_graph_error_stops_pipeline(self, vector, stub_retriever):
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=vector,
            graph=stub_retriever(error=GraphDown("graph")),
            policy=Policy.GRAPH_THEN_VECTOR
        ))

        with pytest.raises(GraphDown):
            await hybrid.retrieve(Query(text="q"))

        assert vector.queries == []


class TestPostProcessing:

    @pytest.mark.asyncio
    async def test_dedup_keeps_merged_items(self, vector, graph):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph, dedup_by_id=True))

        result = await hybrid.retrieve(Query(text="q"))

        assert result.ids == ["x", "y"]

    @pytest.mark.asyncio
    async def test_reranker_output_used_verbatim(self, vector, graph, replace_reranker, make_item):
        reranker = replace_reranker([make_item("z", 0.01)])
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph, reranker=reranker))

        result = await hybrid.retrieve(Query(text="q", top_k=1))

        assert [i.id for i in reranker.received[0]] == ["x"]
        assert result.ids == ["z"]
        assert result.items[0].score == 0.01

    @pytest.mark.asyncio
    async def test_reranker_error_propagates(self, vector, graph):
        class BrokenReranker:
            async def rerank(self, query, items):
                raise RuntimeError("reranker down")

        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph, reranker=BrokenReranker()))

        with pytest.raises(RuntimeError, match="reranker down"):
            await hybrid.retrieve(Query(text="q"))


class TestObserver:

    @pytest.mark.asyncio
    async def test_events(self, vector, graph, replace_reranker, make_item, recording_observer):
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=vector,
            graph=graph,
            reranker=replace_reranker([make_item("z", 0.5)]),
            observer=recording_observer
        ))

        result = await hybrid.retrieve(Query(text="q"))

        assert recording_observer.names == ["retrieve_start", "rerank", "retrieve_end"]
        assert recording_observer.events[1][1] == ("ReplaceReranker", 2, 1)
        assert recording_observer.events[2][1] == (result, None)

    @pytest.mark.asyncio
    async def test_error_reported(self, stub_retriever, recording_observer):
        error = VectorDown("vector")
        hybrid = HybridRetriever(HybridRetrieverConfig(
            vector=stub_retriever(error=error), observer=recording_observer
        ))

        with pytest.raises(VectorDown):
            await hybrid.retrieve(Query(text="q"))

        assert recording_observer.events[-1] == ("retrieve_end", (None, error))

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_fail_retrieval(self, vector, graph, failing_observer):
        hybrid = HybridRetriever(HybridRetrieverConfig(vector=vector, graph=graph, observer=failing_observer))

        result = await hybrid.retrieve(Query(text="q"))

        assert result.ids == ["x", "y"]
