"""
Test Score Fusion
=================

merge_results, deduplicate and rank.
"""

import pytest

from hybridrag.core.models import ContextItem, Mode, Provenance
from hybridrag.hybrid.config import FusionWeights
from hybridrag.hybrid.fusion import deduplicate, merge_results, rank


def _item(item_id, score, mode=Mode.VECTOR, path=None):
    return ContextItem(
        id=item_id,
        content=item_id,
        score=score,
        provenance=Provenance(mode=mode, graph_path=list(path or [])),
    )


class TestMergeResults:

    def test_weighted_additive_merge(self):
        """x found by both sources accumulates both contributions."""
        merged = merge_results(
            [_item("x", 0.8)],
            [_item("x", 0.6, Mode.GRAPH), _item("y", 0.5, Mode.GRAPH)],
            FusionWeights(vector=0.6, graph=0.4)
        )

        scores = {item.id: item.score for item in merged}
        assert scores["x"] == pytest.approx(0.72)
        assert scores["y"] == pytest.approx(0.2)
        assert [item.id for item in merged] == ["x", "y"]

    def test_all_items_marked_hybrid(self):
        merged = merge_results(
            [_item("a", 0.5)],
            [_item("b", 0.5, Mode.GRAPH)],
            FusionWeights()
        )

        assert {item.provenance.mode for item in merged} == {Mode.HYBRID}

    def test_graph_path_taken_from_graph_item(self):
        merged = merge_results(
            [_item("x", 0.8)],
            [_item("x", 0.6, Mode.GRAPH, path=["s", "x"])],
            FusionWeights()
        )

        assert merged[0].provenance.graph_path == ["s", "x"]

    def test_inputs_not_modified(self):
        vector = [_item("x", 0.8)]
        graph = [_item("x", 0.6, Mode.GRAPH, path=["s", "x"])]

        merge_results(vector, graph, FusionWeights())

        assert vector[0].score == 0.8
        assert vector[0].provenance.mode == Mode.VECTOR
        assert vector[0].provenance.graph_path == []
        assert graph[0].score == 0.6

    def test_repeated_vector_id_accumulates(self):
        merged = merge_results([_item("x", 0.5), _item("x", 0.5)], [], FusionWeights(vector=1.0, graph=0.0))

        assert len(merged) == 1
        assert merged[0].score == pytest.approx(1.0)

    def test_empty(self):
        assert merge_results([], [], FusionWeights()) == []


class TestDeduplicate:

    def test_first_occurrence_kept(self):
        items = deduplicate([_item("x", 0.5), _item("y", 0.4), _item("x", 0.5)])

        assert [(i.id, i.score) for i in items] == [("x", 0.5), ("y", 0.4)]

    def test_higher_score_replaces_in_place(self):
        items = deduplicate([_item("x", 0.3), _item("y", 0.4), _item("x", 0.9)])

        assert [(i.id, i.score) for i in items] == [("x", 0.9), ("y", 0.4)]


class TestRank:

    def test_sorted_descending(self):
        ranked = rank([_item("a", 0.1), _item("b", 0.9), _item("c", 0.5)])

        assert [i.id for i in ranked] == ["b", "c", "a"]

    def test_top_k(self):
        ranked = rank([_item("a", 0.1), _item("b", 0.9), _item("c", 0.5)], top_k=2)

        assert [i.id for i in ranked] == ["b", "c"]

    def test_ties_ordered_by_id(self):
        ranked = rank([_item("b", 0.5), _item("a", 0.5)])

        assert [i.id for i in ranked] == ["a", "b"]


class TestFusionWeights:

    def test_defaults(self):
        weights = FusionWeights()
        assert (weights.vector, weights.graph) == (0.6, 0.4)

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="vector weight must be"):
            FusionWeights(vector=1.5)
        with pytest.raises(ValueError, match="graph weight must be"):
            FusionWeights(graph=-0.1)
