"""Data models for semantic clusters.

Key concepts:
- Cluster: members of one centroid after k-means assignment (in-run only)
- ClusterSummary: color, keywords and central article derived from a Cluster
- ClusterRow / ClusterMemberRow: persisted form of a summarized cluster
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from citegap.core.models.article import ArticleRecord


@dataclass(eq=False)
class Cluster:
    """Articles assigned to one centroid.

    Members of clusters from the same run are disjoint.
    """

    centroid: np.ndarray
    members: list[ArticleRecord]
    avg_internal_similarity: float  # Mean pairwise cosine over members

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def member_ids(self) -> list[str]:
        return [member.id for member in self.members]


@dataclass
class ClusterSummary:
    """Presentation attributes derived from a cluster."""

    color: str
    keywords: list[str]  # At most 5
    central_article_id: str | None
    similarity_to_center: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ClusterRow:
    """One persisted cluster."""

    project_id: str
    name_local: str
    name_en: str
    color: str
    keywords: list[str]
    central_article_id: str | None
    avg_internal_similarity: float


@dataclass(frozen=True)
class ClusterMemberRow:
    """One persisted cluster membership, unique on (cluster_id, article_id)."""

    cluster_id: str
    article_id: str
    similarity_to_center: float
