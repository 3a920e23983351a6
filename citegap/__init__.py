"""citegap: semantic clustering and citation-gap detection for literature reviews."""

from citegap.core.cache_keys import build_gap_analysis_cache_key
from citegap.core.config import SemanticConfig
from citegap.services.semantic_preparation_service import (
    PreparationReport,
    SemanticPreparationService,
)

__version__ = "0.1.0"

__all__ = [
    "PreparationReport",
    "SemanticConfig",
    "SemanticPreparationService",
    "build_gap_analysis_cache_key",
]
