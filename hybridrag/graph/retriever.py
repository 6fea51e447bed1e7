"""
GraphRetriever
==============

Retriever that answers a Query by walking the knowledge graph.

Flow:
    Query.entities (ids) ──┐
                           ├─> start nodes ─> GraphStore.traverse()
    find_nodes(filters) ───┘                          │
                                                      v
                                   path score per reached node
                                                      │
                                                      v
                                          ContextItem (mode=graph)
"""

import structlog
import time
from dataclasses import dataclass, field
from typing import List, Optional

from hybridrag.core.interfaces import Observer, Retriever
from hybridrag.core.models import ContextItem, Mode, Provenance, Query, Result, ResultMetadata
from hybridrag.core.notify import notify
from hybridrag.graph.models import TraversalOptions
from hybridrag.graph.store import GraphStore
from hybridrag.graph.traversal import compute_path_score

log = structlog.get_logger()


@dataclass
class GraphRetrieverConfig:
    """
    Configuration for GraphRetriever.

    Attributes:
        default_depth: Traversal depth when the query sets none
        default_max_nodes: Node cap when the query sets no top_k
        edge_types: Edge types followed by default (empty = all)
        node_types: Node types included by default (empty = all)
    """
    default_depth: int = 2
    default_max_nodes: int = 20
    edge_types: List[str] = field(default_factory=list)
    node_types: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate configuration values."""
        if self.default_depth < 1:
            raise ValueError(f"default_depth must be >= 1, got {self.default_depth}")
        if self.default_max_nodes < 1:
            raise ValueError(f"default_max_nodes must be >= 1, got {self.default_max_nodes}")


class GraphRetriever(Retriever):
    """
    Graph traversal retrieval.

    Example:
        >>> retriever = GraphRetriever(graph=InMemoryGraphStore("kg"))
        >>> result = await retriever.retrieve(
        ...     Query(entities=[EntityHint(id="A")], max_depth=2)
        ... )
    """

    def __init__(
        self,
        graph: GraphStore,
        config: Optional[GraphRetrieverConfig] = None,
        observer: Optional[Observer] = None
    ):
        self.graph = graph
        self.config = config or GraphRetrieverConfig()
        self.observer = observer

        log.info(
            f"GraphRetriever initialized - graph={graph.name}, "
            f"depth={self.config.default_depth}, "
            f"max_nodes={self.config.default_max_nodes}"
        )

    async def retrieve(self, query: Query) -> Result:
        start = time.monotonic()

        start_ids = [hint.id for hint in query.entities if hint.id]

        if not start_ids:
            nodes = await self.graph.find_nodes("", query.filters)
            start_ids = [node.id for node in nodes]

        if not start_ids:
            log.debug("GraphRetriever - no start nodes, returning empty result")
            return Result(
                items=[],
                query=query,
                metadata=ResultMetadata(modes_used=[Mode.GRAPH])
            )

        # Negative bounds are not errors: depth < 0 keeps the start nodes
        # unexpanded, max_nodes < 0 accepts nothing.
        depth = max(query.max_depth or self.config.default_depth, 0)
        options = TraversalOptions(
            depth=depth,
            edge_types=list(self.config.edge_types),
            node_types=list(self.config.node_types),
            max_nodes=max(query.top_k or self.config.default_max_nodes, 0),
            min_weight=query.min_score,
        )

        traversal = await self.graph.traverse(start_ids, options)

        items = []
        for node in traversal.nodes:
            path = traversal.paths.get(node.id, [])
            score = compute_path_score(path, traversal.edges)

            if query.min_score > 0 and score < query.min_score:
                continue

            items.append(ContextItem(
                id=node.id,
                content=node.content,
                source=node.source,
                score=score,
                metadata=dict(node.metadata),
                provenance=Provenance(
                    mode=Mode.GRAPH,
                    backend=self.graph.name,
                    graph_path=list(path),
                )
            ))

        latency_ms = int((time.monotonic() - start) * 1000)
        notify(self.observer, "on_graph_traverse", self.graph.name, depth, len(items), latency_ms)

        log.debug(
            f"GraphRetriever - {len(start_ids)} start nodes -> "
            f"{len(items)} items ({latency_ms}ms)"
        )

        return Result(
            items=items,
            query=query,
            metadata=ResultMetadata(
                total_candidates=len(traversal.nodes),
                latency_ms=latency_ms,
                modes_used=[Mode.GRAPH],
            )
        )
