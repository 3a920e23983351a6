"""Article models used during one clustering or gap-analysis run."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class StoredArticle:
    """Article metadata as handed over by the corpus source.

    ``external_id`` is the identifier used inside citation lists (e.g. a
    PMID); ``reference_ids`` and ``cited_by_ids`` hold such identifiers.
    """

    id: str
    external_id: str | None = None
    title: str = ""
    abstract: str = ""
    year: int | None = None
    reference_ids: frozenset[str] = field(default_factory=frozenset)
    cited_by_ids: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, eq=False)
class ArticleRecord:
    """Article with its embedding, created fresh for each run."""

    id: str
    title: str
    abstract: str
    embedding: np.ndarray


@dataclass(frozen=True, eq=False)
class GraphArticle(ArticleRecord):
    """Article record tagged with its citation relationships."""

    external_id: str | None = None
    year: int | None = None
    reference_ids: frozenset[str] = field(default_factory=frozenset)
    cited_by_ids: frozenset[str] = field(default_factory=frozenset)

    def cites_or_cited_by(self, other: GraphArticle) -> bool:
        """True when a citation edge links the two articles in either direction."""
        if other.external_id is not None and (
            other.external_id in self.reference_ids
            or other.external_id in self.cited_by_ids
        ):
            return True
        if self.external_id is not None and (
            self.external_id in other.reference_ids
            or self.external_id in other.cited_by_ids
        ):
            return True
        return False
