"""Semantic clustering and citation-gap services."""

from .cluster_summarizer import ClusterSummarizer, extract_keywords, find_central_article
from .clustering_service import ClusteringService
from .corpus_loader import CorpusLoader
from .gap_detection_service import GapDetectionService, generate_gap_reason
from .semantic_neighbors import find_semantic_neighbors
from .semantic_preparation_service import PreparationReport, SemanticPreparationService

__all__ = [
    "ClusterSummarizer",
    "ClusteringService",
    "CorpusLoader",
    "GapDetectionService",
    "PreparationReport",
    "SemanticPreparationService",
    "extract_keywords",
    "find_central_article",
    "find_semantic_neighbors",
    "generate_gap_reason",
]
