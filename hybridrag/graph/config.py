"""
FalkorDB Configuration
======================

Connection settings for the FalkorDB-backed graph store.

Every field can be overridden through environment variables.

Usage:
    from hybridrag.graph import FalkorDBConfig

    # Defaults (env vars or built-in values)
    config = FalkorDBConfig()

    # Explicit override
    config = FalkorDBConfig(host="localhost", port=6380, graph_name="knowledge_prod")

Environment Variables:
    FALKORDB_HOST: Server host (default: localhost)
    FALKORDB_PORT: Server port (default: 6380)
    FALKORDB_GRAPH_NAME: Graph name (default: hybridrag)
    FALKORDB_PASSWORD: Password (default: empty)
    FALKORDB_NODE_LABEL: Label of knowledge nodes (default: Entity)
    FALKORDB_EDGE_LABEL: Label of knowledge edges (default: RELATES)
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _get_env_str(key: str, default: str) -> str:
    return os.environ.get(key, default)


def _get_env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


@dataclass
class FalkorDBConfig:
    """
    FalkorDB connection settings.

    Attributes:
        host: FalkorDB host
        port: FalkorDB port (6380 for the FalkorDB container)
        graph_name: Graph to select
        password: Authentication password (optional)
        node_label: Label carried by every knowledge node
        edge_label: Relationship label of knowledge edges; the edge type
                    is stored as a property so queries stay parametric
    """
    host: str = field(default_factory=lambda: _get_env_str("FALKORDB_HOST", "localhost"))
    port: int = field(default_factory=lambda: _get_env_int("FALKORDB_PORT", 6380))
    graph_name: str = field(default_factory=lambda: _get_env_str("FALKORDB_GRAPH_NAME", "hybridrag"))
    password: Optional[str] = field(default_factory=lambda: _get_env_str("FALKORDB_PASSWORD", "") or None)
    node_label: str = field(default_factory=lambda: _get_env_str("FALKORDB_NODE_LABEL", "Entity"))
    edge_label: str = field(default_factory=lambda: _get_env_str("FALKORDB_EDGE_LABEL", "RELATES"))

    def __post_init__(self):
        """Labels are interpolated into Cypher, so only identifiers are allowed."""
        for label in (self.node_label, self.edge_label):
            if not label.isidentifier():
                raise ValueError(f"label must be a plain identifier, got {label!r}")
