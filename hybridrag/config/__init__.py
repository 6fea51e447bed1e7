"""
Retrieval settings loaded from YAML.
"""

from hybridrag.config.settings import (
    WeightSettings,
    HybridSettings,
    GraphSettings,
    VectorSettings,
    RerankSettings,
    RetrievalSettings,
    default_config_path,
    load_settings,
    build_reranker,
)

__all__ = [
    "WeightSettings",
    "HybridSettings",
    "GraphSettings",
    "VectorSettings",
    "RerankSettings",
    "RetrievalSettings",
    "default_config_path",
    "load_settings",
    "build_reranker",
]
