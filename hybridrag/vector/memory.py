"""
In-memory vector index (brute-force search) and a deterministic
hash embedder.

HashEmbedder is meant for tests and local development only: vectors
are derived from a hash of the text and carry no semantics.
"""

import hashlib
import threading
from typing import Dict, Iterable, List, Optional

import numpy as np

from hybridrag.core.models import matches_filters
from hybridrag.vector.index import Embedder, VectorIndex
from hybridrag.vector.models import DistanceMetric, SearchResult, VectorNode


def cosine_similarity(a: List[float], b: List[float]) -> float:
    """Cosine similarity; 0.0 for empty, mismatched or zero vectors."""
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def similarity(a: List[float], b: List[float], metric: DistanceMetric) -> float:
    """
    Similarity of two vectors under the given metric.

    Euclidean distance d is mapped to 1 / (1 + d) so that, like the other
    metrics, higher means more similar.
    """
    if metric == DistanceMetric.COSINE:
        return cosine_similarity(a, b)
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if metric == DistanceMetric.DOT:
        return float(np.dot(a, b))
    return float(1.0 / (1.0 + np.linalg.norm(a - b)))


class InMemoryVectorIndex(VectorIndex):
    """
    Exact nearest-neighbour search over a dict of VectorNode.

    Example:
        >>> index = InMemoryVectorIndex("docs")
        >>> await index.insert(VectorNode(id="d1", content="...", embedding=[1.0, 0.0]))
        >>> hits = await index.search([1.0, 0.0], k=5)
    """

    def __init__(self, name: str = "memory", metric: DistanceMetric = DistanceMetric.COSINE):
        self._name = name
        self.metric = DistanceMetric(metric)
        self._lock = threading.RLock()
        self._nodes: Dict[str, VectorNode] = {}

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    async def search(
        self,
        embedding: List[float],
        k: int,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        with self._lock:
            candidates = [
                SearchResult(node=node, score=similarity(embedding, node.embedding, self.metric))
                for node in self._nodes.values()
                if matches_filters(node.metadata, filters)
            ]

        candidates.sort(key=lambda r: r.score, reverse=True)
        return candidates[:max(k, 0)]

    async def insert(self, node: VectorNode) -> None:
        with self._lock:
            self._nodes[node.id] = node

    async def upsert(self, node: VectorNode) -> None:
        await self.insert(node)

    async def delete(self, node_id: str) -> None:
        with self._lock:
            self._nodes.pop(node_id, None)

    async def insert_batch(self, nodes: Iterable[VectorNode]) -> None:
        with self._lock:
            for node in nodes:
                self._nodes[node.id] = node

    async def delete_batch(self, node_ids: Iterable[str]) -> None:
        with self._lock:
            for node_id in node_ids:
                self._nodes.pop(node_id, None)


class HashEmbedder(Embedder):
    """Deterministic, unit-norm embeddings seeded by a hash of the text."""

    def __init__(self, dimensions: int = 384):
        if dimensions <= 0:
            dimensions = 384
        self.dimensions = dimensions

    @property
    def model(self) -> str:
        return "hash-embedder"

    async def embed(self, text: str) -> List[float]:
        seed = int.from_bytes(hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest(), "big")
        rng = np.random.default_rng(seed)
        vector = rng.uniform(-1.0, 1.0, self.dimensions)
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.tolist()
