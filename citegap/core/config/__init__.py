"""Configuration package."""

from .semantic_config import DEFAULT_CLUSTER_PALETTE, LONG_TTL, SHORT_TTL, SemanticConfig

__all__ = [
    "DEFAULT_CLUSTER_PALETTE",
    "LONG_TTL",
    "SHORT_TTL",
    "SemanticConfig",
]
