"""
Vector Index Capabilities
=========================

Abstract similarity-search backend and embedder.

The index itself (exact or ANN search, persistence) lives outside this
package; the VectorRetriever only needs `search()` and `name`.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from hybridrag.vector.models import SearchResult, VectorNode


class VectorIndex(ABC):
    """Similarity search over VectorNode entries."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this index (reported as provenance backend)."""

    @abstractmethod
    async def search(
        self,
        embedding: List[float],
        k: int,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        """The k most similar entries matching all filters, best first."""

    @abstractmethod
    async def insert(self, node: VectorNode) -> None:
        ...

    @abstractmethod
    async def upsert(self, node: VectorNode) -> None:
        ...

    @abstractmethod
    async def delete(self, node_id: str) -> None:
        ...

    async def insert_batch(self, nodes: Iterable[VectorNode]) -> None:
        for node in nodes:
            await self.insert(node)

    async def delete_batch(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            await self.delete(node_id)


class Embedder(ABC):
    """Turns text into embedding vectors."""

    @property
    @abstractmethod
    def model(self) -> str:
        ...

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        ...

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        return [await self.embed(text) for text in texts]
