"""Nearest semantic neighbors of a single article within its citation graph."""

from collections.abc import Sequence

from citegap.core.models.article import GraphArticle
from citegap.core.models.gap import SemanticNeighbor
from citegap.core.utils.vector_utils import cross_cosine_matrix

DEFAULT_NEIGHBOR_THRESHOLD = 0.6
DEFAULT_NEIGHBOR_LIMIT = 20


def has_direct_citation(source: GraphArticle, other: GraphArticle) -> bool:
    """True when either article lists the other among its references."""
    if other.external_id is not None and other.external_id in source.reference_ids:
        return True
    if source.external_id is not None and source.external_id in other.reference_ids:
        return True
    return False


def find_semantic_neighbors(
    target: GraphArticle,
    candidates: Sequence[GraphArticle],
    threshold: float = DEFAULT_NEIGHBOR_THRESHOLD,
    limit: int = DEFAULT_NEIGHBOR_LIMIT,
) -> list[SemanticNeighbor]:
    """Articles at least ``threshold`` similar to ``target``, most similar first.

    The target itself is skipped; ties keep candidate order.
    """
    others = [article for article in candidates if article.id != target.id]
    if not others or limit < 1:
        return []

    scores = cross_cosine_matrix([target.embedding], [a.embedding for a in others])[0]

    ranked = sorted(
        (
            (float(score), article)
            for score, article in zip(scores, others)
            if score >= threshold
        ),
        key=lambda item: item[0],
        reverse=True,
    )

    return [
        SemanticNeighbor(
            article_id=article.id,
            title=article.title or None,
            year=article.year,
            similarity=score,
            has_direct_citation=has_direct_citation(target, article),
        )
        for score, article in ranked[:limit]
    ]
