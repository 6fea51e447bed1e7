"""
FalkorDB Graph Store
====================

Async client for FalkorDB and a GraphStore built on top of it.

FalkorDB speaks the Redis protocol and supports Cypher. The falkordb-py
driver is synchronous, so every query runs in the default executor.

Schema:
    (:Entity {id, type, content, source, metadata})
    (:Entity)-[:RELATES {type, weight, metadata}]->(:Entity)

`metadata` is stored as a JSON string. The relation type lives in a
property so that edge-type filters stay query parameters.

The traversal itself is the shared GraphTraversalEngine: the store only
provides node and outgoing-edge lookups.
"""

import asyncio
import json
import structlog
from typing import Any, Dict, Iterable, List, Optional

from falkordb import FalkorDB, Graph

from hybridrag.core.models import matches_filters
from hybridrag.graph.config import FalkorDBConfig
from hybridrag.graph.models import GraphEdge, GraphNode, TraversalOptions, TraversalResult
from hybridrag.graph.store import GraphStore
from hybridrag.graph.traversal import GraphTraversalEngine

log = structlog.get_logger()


class FalkorDBClient:
    """
    Async client for FalkorDB.

    The connection is checked with a PING at connect time, so a wrong
    host or password fails in connect() rather than on the first query.

    Example:
        async with FalkorDBClient(config) as client:
            rows = await client.query(
                "MATCH (n:Entity {id: $id}) RETURN n.content AS content",
                {"id": "A"}
            )
    """

    def __init__(self, config: Optional[FalkorDBConfig] = None):
        self.config = config or FalkorDBConfig()
        self._db: Optional[FalkorDB] = None
        self._graph: Optional[Graph] = None

    @property
    def connected(self) -> bool:
        return self._graph is not None

    async def connect(self) -> None:
        """Open the connection and select the configured graph."""
        if self.connected:
            return

        db = await asyncio.get_running_loop().run_in_executor(None, self._open)
        self._db = db
        self._graph = db.select_graph(self.config.graph_name)

        log.info(
            "FalkorDB graph store connected",
            address=f"{self.config.host}:{self.config.port}",
            graph=self.config.graph_name,
            node_label=self.config.node_label,
            edge_label=self.config.edge_label
        )

    def _open(self) -> FalkorDB:
        db = FalkorDB(
            host=self.config.host,
            port=self.config.port,
            password=self.config.password,
        )
        db.connection.ping()
        return db

    async def close(self) -> None:
        """Release the driver's redis connection pool."""
        db, self._db, self._graph = self._db, None, None
        if db is None:
            return

        await asyncio.get_running_loop().run_in_executor(None, db.connection.close)
        log.info("FalkorDB graph store disconnected", graph=self.config.graph_name)

    async def __aenter__(self) -> "FalkorDBClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def query(
        self,
        cypher: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a Cypher query.

        Args:
            cypher: Cypher query string
            params: Query parameters

        Returns:
            List of records as dicts keyed by column alias

        Raises:
            RuntimeError: if connect() was not called
        """
        if not self.connected:
            raise RuntimeError("Not connected to FalkorDB. Call connect() first.")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._query_sync,
            cypher,
            params or {}
        )

    def _query_sync(self, cypher: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            result = self._graph.query(cypher, params)
        except Exception as e:
            log.error(f"Query failed: {cypher[:100]}... Error: {e}")
            raise

        records = []
        if result.result_set:
            # Header format is [[type, alias], ...]
            aliases = [
                header[1] if len(header) > 1 else f"col_{i}"
                for i, header in enumerate(result.header)
            ]
            for row in result.result_set:
                records.append(dict(zip(aliases, row)))

        log.debug(
            f"Query executed: {cypher[:100]}... "
            f"(params={list(params.keys())}) -> {len(records)} records"
        )
        return records

    async def health_check(self) -> bool:
        """True if FalkorDB answers a trivial query."""
        try:
            if not self.connected:
                await self.connect()
            await self.query("RETURN 1")
            return True
        except Exception as e:
            log.error(f"Health check failed: {e}")
            return False


def _dump_metadata(metadata: Dict[str, str]) -> str:
    return json.dumps(metadata or {}, sort_keys=True)


def _load_metadata(raw: Any) -> Dict[str, str]:
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    return json.loads(raw)


class FalkorDBGraphStore(GraphStore):
    """
    GraphStore persisted in FalkorDB.

    Example:
        >>> client = FalkorDBClient(FalkorDBConfig(graph_name="knowledge"))
        >>> await client.connect()
        >>> store = FalkorDBGraphStore(client)
        >>> await store.create_indexes()
        >>> result = await store.traverse(["A"], TraversalOptions(depth=2))
    """

    def __init__(self, client: FalkorDBClient):
        self.client = client
        node = client.config.node_label
        edge = client.config.edge_label

        self.cypher = {
            "create_index": f"CREATE INDEX FOR (n:{node}) ON (n.id)",
            "node_by_id": f"""
                MATCH (n:{node} {{id: $id}})
                RETURN n.id AS id, n.type AS type, n.content AS content,
                       n.source AS source, n.metadata AS metadata
                LIMIT 1
            """,
            "outgoing_edges": f"""
                MATCH (a:{node} {{id: $id}})-[r:{edge}]->(b:{node})
                RETURN a.id AS from_id, b.id AS to_id, r.type AS type,
                       r.weight AS weight, r.metadata AS metadata
                ORDER BY id(r)
            """,
            "find_nodes": f"""
                MATCH (n:{node})
                WHERE $type = '' OR n.type = $type
                RETURN n.id AS id, n.type AS type, n.content AS content,
                       n.source AS source, n.metadata AS metadata
            """,
            "create_node": f"""
                CREATE (:{node} {{id: $id, type: $type, content: $content,
                                  source: $source, metadata: $metadata}})
            """,
            "merge_node": f"""
                MERGE (n:{node} {{id: $id}})
                SET n.type = $type, n.content = $content,
                    n.source = $source, n.metadata = $metadata
            """,
            "create_edge": f"""
                MATCH (a:{node} {{id: $from_id}}), (b:{node} {{id: $to_id}})
                CREATE (a)-[:{edge} {{type: $type, weight: $weight, metadata: $metadata}}]->(b)
            """,
            "merge_edge": f"""
                MATCH (a:{node} {{id: $from_id}}), (b:{node} {{id: $to_id}})
                MERGE (a)-[r:{edge} {{type: $type}}]->(b)
                SET r.weight = $weight, r.metadata = $metadata
            """,
            "delete_node": f"MATCH (n:{node} {{id: $id}}) DETACH DELETE n",
            "delete_edge": f"""
                MATCH (a:{node} {{id: $from_id}})-[r:{edge} {{type: $type}}]->(b:{node} {{id: $to_id}})
                DELETE r
            """,
        }
        self._engine = GraphTraversalEngine(self.get_node, self.get_edges)

    @property
    def name(self) -> str:
        return self.client.config.graph_name

    async def create_indexes(self) -> None:
        await self.client.query(self.cypher["create_index"])

    async def get_node(self, node_id: str) -> Optional[GraphNode]:
        rows = await self.client.query(self.cypher["node_by_id"], {"id": node_id})
        if not rows:
            return None
        return self._to_node(rows[0])

    async def get_edges(self, node_id: str) -> List[GraphEdge]:
        rows = await self.client.query(self.cypher["outgoing_edges"], {"id": node_id})
        return [
            GraphEdge(
                from_id=row["from_id"],
                to_id=row["to_id"],
                type=row.get("type") or "",
                weight=float(row.get("weight") or 0.0),
                metadata=_load_metadata(row.get("metadata")),
            )
            for row in rows
        ]

    async def traverse(
        self,
        start_ids: Iterable[str],
        options: TraversalOptions
    ) -> TraversalResult:
        return await self._engine.traverse(start_ids, options)

    async def find_nodes(
        self,
        node_type: str = "",
        filters: Optional[Dict[str, str]] = None
    ) -> List[GraphNode]:
        rows = await self.client.query(self.cypher["find_nodes"], {"type": node_type})
        nodes = [self._to_node(row) for row in rows]
        # metadata is a JSON string in the graph, filter after decoding
        return [node for node in nodes if matches_filters(node.metadata, filters)]

    async def add_node(self, node: GraphNode) -> None:
        await self.client.query(self.cypher["create_node"], self._node_params(node))

    async def upsert_node(self, node: GraphNode) -> None:
        await self.client.query(self.cypher["merge_node"], self._node_params(node))

    async def add_edge(self, edge: GraphEdge) -> None:
        await self.client.query(self.cypher["create_edge"], self._edge_params(edge))

    async def upsert_edge(self, edge: GraphEdge) -> None:
        await self.client.query(self.cypher["merge_edge"], self._edge_params(edge))

    async def delete_node(self, node_id: str) -> None:
        await self.client.query(self.cypher["delete_node"], {"id": node_id})

    async def delete_edge(self, from_id: str, to_id: str, edge_type: str) -> None:
        await self.client.query(
            self.cypher["delete_edge"],
            {"from_id": from_id, "to_id": to_id, "type": edge_type}
        )

    @staticmethod
    def _to_node(row: Dict[str, Any]) -> GraphNode:
        return GraphNode(
            id=row["id"],
            type=row.get("type") or "",
            content=row.get("content") or "",
            source=row.get("source") or "",
            metadata=_load_metadata(row.get("metadata")),
        )

    @staticmethod
    def _node_params(node: GraphNode) -> Dict[str, Any]:
        return {
            "id": node.id,
            "type": node.type,
            "content": node.content,
            "source": node.source,
            "metadata": _dump_metadata(node.metadata),
        }

    @staticmethod
    def _edge_params(edge: GraphEdge) -> Dict[str, Any]:
        return {
            "from_id": edge.from_id,
            "to_id": edge.to_id,
            "type": edge.type,
            "weight": edge.weight,
            "metadata": _dump_metadata(edge.metadata),
        }
