"""
Graph Traversal Engine
======================

Multi-source breadth-first walk over a directed, weighted graph.

Algorithm:
1. Seed the queue with every existing start node (depth 0, path [id])
2. Pop from the front; skip nodes already visited (first path wins)
3. Apply the node-type filter: excluded nodes are dropped and not expanded
4. Stop expanding at the configured depth
5. Follow outgoing edges allowed by the edge-type and min-weight filters
6. Stop once max_nodes nodes have been accepted

Path score:
    score(path) = prod((weight(e_i) or 0.5) * 0.8)   over the hops of path

A start node scores 1.0, direct neighbours score weight * 0.8, and the
score keeps shrinking with every additional hop.

The engine does not know where the graph lives: it is given two async
loaders, one for nodes and one for outgoing edges, so the in-memory and
the FalkorDB stores share the same walk.
"""

import structlog
from collections import deque
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from hybridrag.graph.models import GraphEdge, GraphNode, TraversalOptions, TraversalResult

log = structlog.get_logger()

DECAY_FACTOR = 0.8
DEFAULT_EDGE_WEIGHT = 0.5

NodeLoader = Callable[[str], Awaitable[Optional[GraphNode]]]
EdgeLoader = Callable[[str], Awaitable[List[GraphEdge]]]


class GraphTraversalEngine:
    """
    Breadth-first traversal bounded by depth, node count and filters.

    Example:
        >>> engine = GraphTraversalEngine(store.get_node, store.get_edges)
        >>> result = await engine.traverse(["A"], TraversalOptions(depth=1))
        >>> result.paths["B"]
        ['A', 'B']
    """

    def __init__(self, load_node: NodeLoader, load_edges: EdgeLoader):
        self.load_node = load_node
        self.load_edges = load_edges

    async def traverse(
        self,
        start_ids: Iterable[str],
        options: TraversalOptions
    ) -> TraversalResult:
        """
        Walk the graph from all start nodes at once.

        Args:
            start_ids: Start node ids; unknown ids are ignored
            options: Depth, filters and node cap

        Returns:
            TraversalResult (empty when no start node exists)
        """
        result = TraversalResult()
        nodes: Dict[str, Optional[GraphNode]] = {}
        visited = set()
        queue = deque()

        for node_id in start_ids:
            node = await self._node(node_id, nodes)
            if node is not None:
                queue.append((node_id, [node_id], 0))

        if not queue:
            log.debug("traverse() - no start node found")
            return result

        while queue and len(result.nodes) < options.max_nodes:
            node_id, path, depth = queue.popleft()

            if node_id in visited:
                continue
            visited.add(node_id)

            node = await self._node(node_id, nodes)
            if node is not None:
                if options.node_types and node.type not in options.node_types:
                    continue
                result.nodes.append(node)
                result.paths[node_id] = path

            if depth >= options.depth:
                continue

            for edge in await self.load_edges(node_id):
                if options.edge_types and edge.type not in options.edge_types:
                    continue
                if edge.weight < options.min_weight:
                    continue
                if edge.to_id not in visited:
                    queue.append((edge.to_id, path + [edge.to_id], depth + 1))
                    result.edges.append(edge)

        log.debug(
            f"traverse() - {len(result.nodes)} nodes, "
            f"{len(result.edges)} edges (depth={options.depth}, "
            f"max_nodes={options.max_nodes})"
        )
        return result

    async def _node(
        self,
        node_id: str,
        cache: Dict[str, Optional[GraphNode]]
    ) -> Optional[GraphNode]:
        if node_id not in cache:
            cache[node_id] = await self.load_node(node_id)
        return cache[node_id]


def compute_path_score(path: List[str], edges: List[GraphEdge]) -> float:
    """
    Score a traversal path by hop count and edge weights.

    Args:
        path: Node ids from the start node to the scored node
        edges: Edges traversed during the walk (weight lookup)

    Returns:
        1.0 for a start node, otherwise prod((w or 0.5) * 0.8)

    Example:
        >>> edges = [GraphEdge("A", "B", weight=0.9), GraphEdge("B", "C", weight=0.8)]
        >>> round(compute_path_score(["A", "B", "C"], edges), 4)
        0.4608
    """
    if len(path) <= 1:
        return 1.0

    weights = {edge.key: edge.weight for edge in edges}

    score = 1.0
    for source, target in zip(path, path[1:]):
        weight = weights.get(f"{source}->{target}", 0.0)
        if weight == 0:
            weight = DEFAULT_EDGE_WEIGHT
        score *= weight * DECAY_FACTOR

    return score
