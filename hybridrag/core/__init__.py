"""
Core retrieval types and capabilities.
"""

from hybridrag.core.models import (
    Mode,
    EntityHint,
    Query,
    Provenance,
    ContextItem,
    ResultMetadata,
    Result,
    matches_filters,
)
from hybridrag.core.interfaces import (
    Retriever,
    FunctionRetriever,
    Reranker,
    Observer,
)
from hybridrag.core.notify import notify

__all__ = [
    # Models
    "Mode",
    "EntityHint",
    "Query",
    "Provenance",
    "ContextItem",
    "ResultMetadata",
    "Result",
    "matches_filters",
    # Capabilities
    "Retriever",
    "FunctionRetriever",
    "Reranker",
    "Observer",
    "notify",
]
