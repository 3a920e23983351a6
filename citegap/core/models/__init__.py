"""Data models shared across citegap services."""

from .article import ArticleRecord, GraphArticle, StoredArticle
from .cluster import Cluster, ClusterMemberRow, ClusterRow, ClusterSummary
from .gap import ArticleRef, GapAnalysisResult, GapPair, SemanticNeighbor, to_percent

__all__ = [
    "ArticleRecord",
    "ArticleRef",
    "Cluster",
    "ClusterMemberRow",
    "ClusterRow",
    "ClusterSummary",
    "GapAnalysisResult",
    "GapPair",
    "GraphArticle",
    "SemanticNeighbor",
    "StoredArticle",
    "to_percent",
]
