"""
Semantic preparation configuration for citegap.

This module provides a type-safe, validated configuration for automatic
semantic clustering and citation-gap cache warm-up, with support for
environment variables and explicit keyword arguments.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Cluster colors, assigned cyclically by cluster index
DEFAULT_CLUSTER_PALETTE: tuple[str, ...] = (
    "#6366f1",  # Indigo
    "#22c55e",  # Green
    "#f59e0b",  # Amber
    "#ec4899",  # Pink
    "#06b6d4",  # Cyan
    "#8b5cf6",  # Violet
    "#f97316",  # Orange
    "#14b8a6",  # Teal
    "#ef4444",  # Red
    "#84cc16",  # Lime
    "#a855f7",  # Purple
    "#3b82f6",  # Blue
)

# Cache lifetimes (seconds)
LONG_TTL = 600
SHORT_TTL = 60


class SemanticConfig(BaseSettings):
    """
    Configuration for automatic semantic preparation of a project.

    Configuration Sources (in order of precedence):
    1. Keyword arguments
    2. Environment variables (CITEGAP_SEMANTIC_*)
    3. Default values

    Environment Variables:
        CITEGAP_SEMANTIC_NUM_CLUSTERS=5
        CITEGAP_SEMANTIC_MIN_CLUSTER_SIZE=3
        CITEGAP_SEMANTIC_GAP_THRESHOLD=0.7
        CITEGAP_SEMANTIC_RANDOM_SEED=42
    """

    model_config = SettingsConfigDict(
        env_prefix="CITEGAP_SEMANTIC_",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
        frozen=True,
    )

    # Clustering
    num_clusters: int = Field(
        default=5,
        ge=2,
        le=20,
        description="Requested number of clusters (reduced for small corpora)",
    )

    min_cluster_size: int = Field(
        default=3,
        ge=2,
        le=50,
        description="Clusters with fewer members are discarded",
    )

    similarity_threshold: float = Field(
        default=0.6,
        ge=0.3,
        le=0.95,
        description="Minimum similarity to a centroid for cluster assignment",
    )

    max_iterations: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Upper bound on k-means assignment/update iterations",
    )

    cluster_palette: tuple[str, ...] = Field(
        default=DEFAULT_CLUSTER_PALETTE,
        min_length=1,
        description="Colors assigned to clusters by index modulo palette size",
    )

    cluster_name_local: str = Field(
        default="Кластер {index}",
        description="Localized cluster name template",
    )

    cluster_name_en: str = Field(
        default="Cluster {index}",
        description="English cluster name template",
    )

    random_seed: int | None = Field(
        default=None,
        description="Seed for cluster seeding; None uses fresh OS entropy",
    )

    # Gap analysis
    gap_threshold: float = Field(
        default=0.7,
        ge=0.5,
        le=0.95,
        description="Minimum similarity for a pair to be reported as a gap",
    )

    gap_limit: int = Field(
        default=50,
        ge=1,
        le=200,
        description="Maximum number of gaps kept per analysis",
    )

    gap_year_from: int | None = Field(default=None, ge=1900, le=2100)
    gap_year_to: int | None = Field(default=None, ge=1900, le=2100)

    gap_cache_ttl: int = Field(
        default=LONG_TTL,
        ge=1,
        description="Cache lifetime for computed gap results (seconds)",
    )

    gap_not_ready_ttl: int = Field(
        default=SHORT_TTL,
        ge=1,
        description=(
            "Cache lifetime for empty results cached while embeddings are "
            "not yet available (seconds)"
        ),
    )

    # Semantic neighbors
    neighbor_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    neighbor_limit: int = Field(default=20, ge=1, le=100)

    @field_validator("cluster_palette")
    def validate_palette(cls, value: tuple[str, ...]) -> tuple[str, ...]:  # noqa: N805
        """Reject blank palette entries."""
        cleaned = tuple(color.strip() for color in value)
        if any(not color for color in cleaned):
            raise ValueError("cluster_palette entries must be non-empty")
        return cleaned

    @model_validator(mode="after")
    def validate_year_range(self) -> "SemanticConfig":
        if (
            self.gap_year_from is not None
            and self.gap_year_to is not None
            and self.gap_year_from > self.gap_year_to
        ):
            raise ValueError(
                f"gap_year_from ({self.gap_year_from}) must not exceed "
                f"gap_year_to ({self.gap_year_to})"
            )
        return self

    def cluster_names(self, index: int) -> tuple[str, str]:
        """Return (local, english) display names for the 1-based cluster index."""
        return (
            self.cluster_name_local.format(index=index),
            self.cluster_name_en.format(index=index),
        )

    def gap_defaults(self) -> dict[str, Any]:
        """Keyword arguments for the automatic gap warm-up."""
        return {
            "threshold": self.gap_threshold,
            "limit": self.gap_limit,
            "year_from": self.gap_year_from,
            "year_to": self.gap_year_to,
        }
