"""Data models for citation-gap analysis.

Key concepts:
- GapPair: two similar articles with no citation edge between them
- GapAnalysisResult: ordered gaps plus the parameters that produced them,
  serialized to a JSON-compatible payload for caching
- SemanticNeighbor: nearest articles to a single target article
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def to_percent(similarity: float) -> int:
    """Round a [0, 1] similarity to a whole percentage, halves rounding up."""
    return int(math.floor(similarity * 100 + 0.5))


@dataclass(frozen=True)
class ArticleRef:
    """Lightweight article reference carried in gap results."""

    id: str
    title: str | None
    year: int | None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "year": self.year}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArticleRef:
        return cls(id=data["id"], title=data.get("title"), year=data.get("year"))


@dataclass(frozen=True)
class GapPair:
    """Semantically similar article pair without a citation relationship."""

    article1: ArticleRef
    article2: ArticleRef
    similarity: float  # Cosine similarity, >= the analysis threshold
    reason: str  # Human-readable explanation

    @property
    def similarity_percent(self) -> int:
        return to_percent(self.similarity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "article1": self.article1.to_dict(),
            "article2": self.article2.to_dict(),
            "similarity": self.similarity,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GapPair:
        return cls(
            article1=ArticleRef.from_dict(data["article1"]),
            article2=ArticleRef.from_dict(data["article2"]),
            similarity=float(data["similarity"]),
            reason=data["reason"],
        )


@dataclass(frozen=True)
class GapAnalysisResult:
    """Gap pairs sorted by descending similarity.

    Immutable once cached; ``to_dict`` produces the cache payload.
    """

    gaps: tuple[GapPair, ...]
    threshold: float
    total_gaps: int

    @classmethod
    def empty(cls, threshold: float) -> GapAnalysisResult:
        return cls(gaps=(), threshold=threshold, total_gaps=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gaps": [gap.to_dict() for gap in self.gaps],
            "threshold": self.threshold,
            "totalGaps": self.total_gaps,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GapAnalysisResult:
        gaps = tuple(GapPair.from_dict(item) for item in data.get("gaps", []))
        return cls(
            gaps=gaps,
            threshold=float(data["threshold"]),
            total_gaps=int(data.get("totalGaps", len(gaps))),
        )


@dataclass(frozen=True)
class SemanticNeighbor:
    """Article similar to a target article."""

    article_id: str
    title: str | None
    year: int | None
    similarity: float
    has_direct_citation: bool
