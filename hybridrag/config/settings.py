"""
Retrieval Settings
==================

Pydantic models for the retrieval defaults, loaded from YAML.

Loading priority:
1. `path` argument
2. HYBRIDRAG_CONFIG environment variable
3. hybridrag/config/retrieval.yaml (shipped with the package)

HYBRIDRAG_POLICY, when set, overrides `hybrid.policy`.

A missing or unparsable file falls back to the built-in defaults with a
warning; values that fail validation raise.

Example:
    >>> settings = load_settings()
    >>> settings.hybrid.weights.vector
    0.6
    >>> config = HybridRetrieverConfig.from_settings(
    ...     settings,
    ...     vector=VectorRetriever(index, embedder, config=settings.vector.to_config()),
    ...     graph=GraphRetriever(store, config=settings.graph.to_config()),
    ...     reranker=build_reranker(settings),
    ... )
"""

import os
import structlog
import yaml
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union

from hybridrag.core.interfaces import Reranker
from hybridrag.graph.retriever import GraphRetrieverConfig
from hybridrag.hybrid.config import Policy
from hybridrag.rerank.heuristic import HeuristicReranker, Strategy
from hybridrag.vector.retriever import VectorRetrieverConfig

log = structlog.get_logger()

CONFIG_ENV_VAR = "HYBRIDRAG_CONFIG"
POLICY_ENV_VAR = "HYBRIDRAG_POLICY"


class WeightSettings(BaseModel):
    """Fusion weights (both 0 = use the defaults)."""
    vector: float = Field(default=0.6, ge=0.0, le=1.0)
    graph: float = Field(default=0.4, ge=0.0, le=1.0)


class HybridSettings(BaseModel):
    """
    Orchestrator settings.

    Attributes:
        policy: parallel | vector_then_graph | graph_then_vector
        weights: Per-source fusion weights
        dedup_by_id: Collapse duplicate ids after merge
    """
    policy: str = Field(default=Policy.PARALLEL.value)
    weights: WeightSettings = Field(default_factory=WeightSettings)
    dedup_by_id: bool = False

    @field_validator("policy")
    @classmethod
    def normalize_policy(cls, v: str) -> str:
        return Policy.parse(v.strip().lower() if v else v).value


class GraphSettings(BaseModel):
    default_depth: int = Field(default=2, ge=1)
    default_max_nodes: int = Field(default=20, ge=1)
    edge_types: List[str] = Field(default_factory=list)
    node_types: List[str] = Field(default_factory=list)

    def to_config(self) -> GraphRetrieverConfig:
        return GraphRetrieverConfig(
            default_depth=self.default_depth,
            default_max_nodes=self.default_max_nodes,
            edge_types=list(self.edge_types),
            node_types=list(self.node_types),
        )


class VectorSettings(BaseModel):
    default_top_k: int = Field(default=10, ge=1)
    min_score: float = Field(default=0.0, ge=0.0, le=1.0)

    def to_config(self) -> VectorRetrieverConfig:
        return VectorRetrieverConfig(
            default_top_k=self.default_top_k,
            min_score=self.min_score,
        )


class RerankSettings(BaseModel):
    """
    Heuristic reranker settings.

    Cross-encoder reranking needs a model-backed scorer and is wired in
    code, not from YAML.
    """
    enabled: bool = False
    strategy: Strategy = Strategy.LINEAR
    top_k: int = Field(default=0, ge=0)
    min_score: float = Field(default=0.0, ge=0.0)
    boost_exact_match: bool = False
    exact_match_boost: float = Field(default=1.5, gt=0.0)


class RetrievalSettings(BaseModel):
    """Complete retrieval configuration."""
    version: str = "1.0"
    hybrid: HybridSettings = Field(default_factory=HybridSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)
    vector: VectorSettings = Field(default_factory=VectorSettings)
    rerank: RerankSettings = Field(default_factory=RerankSettings)


def default_config_path() -> Path:
    return Path(__file__).parent / "retrieval.yaml"


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        log.warning("Retrieval settings not found, using defaults", path=str(path))
        return {}
    except yaml.YAMLError as e:
        log.error("Error parsing retrieval settings, using defaults", path=str(path), error=str(e))
        return {}

    if not isinstance(data, dict):
        log.error(
            "Retrieval settings must be a mapping, using defaults",
            path=str(path),
            found=type(data).__name__
        )
        return {}

    log.debug("Loaded retrieval settings from YAML", path=str(path))
    # an empty section (`hybrid:`) means that section's defaults
    return {key: value for key, value in data.items() if value is not None}


def load_settings(path: Optional[Union[str, Path]] = None) -> RetrievalSettings:
    """
    Load RetrievalSettings from YAML.

    Args:
        path: YAML file; None = HYBRIDRAG_CONFIG or the packaged default

    Returns:
        Validated settings

    Raises:
        pydantic.ValidationError: when the file contains invalid values
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or default_config_path()

    data = _read_yaml(Path(path))

    policy = os.getenv(POLICY_ENV_VAR)
    if policy:
        hybrid = data.get("hybrid", {})
        if isinstance(hybrid, dict):
            data["hybrid"] = {**hybrid, "policy": policy}

    settings = RetrievalSettings.model_validate(data)

    log.info(
        "Retrieval settings loaded",
        path=str(path),
        policy=settings.hybrid.policy,
        rerank=settings.rerank.enabled
    )
    return settings


def build_reranker(settings: RetrievalSettings) -> Optional[Reranker]:
    """Heuristic reranker from settings, or None when reranking is disabled."""
    rerank = settings.rerank
    if not rerank.enabled:
        return None

    return HeuristicReranker(
        strategy=rerank.strategy,
        top_k=rerank.top_k,
        min_score=rerank.min_score,
        boost_exact_match=rerank.boost_exact_match,
        exact_match_boost=rerank.exact_match_boost,
    )
