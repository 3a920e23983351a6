"""Citation gap detection for a project's citation graph.

A gap is a pair of articles whose embeddings are highly similar although
neither cites the other, which usually points at missed related work.

Pipeline for ``warm_gap_analysis_cache``:
1. Return the cached result for (project, threshold, limit, year range)
2. If embeddings are not available yet, cache an empty "not ready" result
3. Load the project articles plus their one-hop citation neighborhood
4. Score every unordered pair, dropping pairs linked by a citation
5. Apply the year filter, sort by similarity, truncate, explain each pair
6. Cache the result

Key Invariants:
- A reported pair never has a citation edge in either direction
- A cache hit performs no source calls
"""

from collections.abc import Sequence

import numpy as np
from loguru import logger

from citegap.core.cache_keys import (
    DEFAULT_GAP_LIMIT,
    DEFAULT_GAP_THRESHOLD,
    build_gap_analysis_cache_key,
    normalize_gap_parameters,
)
from citegap.core.cancellation import CancellationToken, check_cancelled
from citegap.core.config.semantic_config import SemanticConfig
from citegap.core.models.article import GraphArticle
from citegap.core.models.gap import ArticleRef, GapAnalysisResult, GapPair, to_percent
from citegap.core.utils.vector_utils import cross_cosine_matrix
from citegap.interfaces.cache_provider import CacheProvider
from citegap.services.corpus_loader import CorpusLoader

# Year differences (inclusive) for the reason buckets
CONTEMPORARY_YEAR_GAP = 2
RECENT_YEAR_GAP = 5

# Rows scored per similarity block; bounds memory to block x n floats
GAP_SCAN_BLOCK_SIZE = 256


def generate_gap_reason(
    similarity: float, year1: int | None, year2: int | None
) -> str:
    """Explain a gap pair from its similarity and publication years."""
    percent = to_percent(similarity)

    if year1 is not None and year2 is not None:
        year_diff = abs(year1 - year2)
        if year_diff <= CONTEMPORARY_YEAR_GAP:
            return (
                f"High similarity ({percent}%) between contemporary works - "
                "possibly independent duplication of effort, the authors may "
                "not know each other's work"
            )
        if year_diff <= RECENT_YEAR_GAP:
            return (
                f"Similar topics ({percent}%) with a small time gap - "
                "check citations, might be a missed reference"
            )
        return f"Thematic connection ({percent}%) between works from different periods"

    return f"Semantic similarity {percent}% without direct citation"


def year_in_range(
    year: int | None, year_from: int | None, year_to: int | None
) -> bool:
    """Inclusive range check; unknown years always pass."""
    if year is None:
        return True
    if year_from is not None and year < year_from:
        return False
    if year_to is not None and year > year_to:
        return False
    return True


class GapDetectionService:
    """Service for detecting and caching citation gaps."""

    def __init__(
        self,
        loader: CorpusLoader,
        cache: CacheProvider,
        config: SemanticConfig | None = None,
    ):
        """Initialize gap detection service.

        Args:
            loader: Corpus loader for the project's citation graph
            cache: Cache receiving analysis results
            config: Semantic configuration (TTLs)
        """
        self._loader = loader
        self._cache = cache
        self._config = config or SemanticConfig()

    def detect_gaps(
        self,
        articles: Sequence[GraphArticle],
        threshold: float,
        limit: int,
        year_from: int | None = None,
        year_to: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> GapAnalysisResult:
        """Find similar article pairs without a citation relationship.

        Args:
            articles: Graph articles (project + neighborhood) with embeddings
            threshold: Minimum similarity for a reported pair
            limit: Maximum number of pairs returned
            year_from: Inclusive lower bound for known publication years
            year_to: Inclusive upper bound for known publication years
            cancellation: Optional token checked before each block of rows

        Returns:
            Result with gaps sorted by descending similarity

        Raises:
            OperationCancelledError: If the cancellation token is triggered
        """
        scored = [article for article in articles if len(article.embedding) > 0]
        if len(scored) < 2 or limit < 1:
            return GapAnalysisResult.empty(threshold)

        eligible = [
            year_in_range(article.year, year_from, year_to) for article in scored
        ]
        embeddings = [article.embedding for article in scored]

        candidates: list[tuple[float, int, int]] = []
        # Similarities are computed one block of rows at a time
        for start in range(0, len(scored), GAP_SCAN_BLOCK_SIZE):
            check_cancelled(cancellation, "gap detection")
            stop = min(start + GAP_SCAN_BLOCK_SIZE, len(scored))
            block = cross_cosine_matrix(embeddings[start:stop], embeddings)

            for i in range(start, stop):
                if not eligible[i]:
                    continue

                row = block[i - start]
                for j in np.flatnonzero(row[i + 1 :] >= threshold) + i + 1:
                    j = int(j)
                    if not eligible[j]:
                        continue
                    if scored[i].cites_or_cited_by(scored[j]):
                        continue
                    candidates.append((float(row[j]), i, j))

        # Stable sort keeps corpus order among equal similarities
        candidates.sort(key=lambda item: item[0], reverse=True)
        selected = candidates[:limit]

        gaps = tuple(
            self._build_gap(scored[i], scored[j], similarity)
            for similarity, i, j in selected
        )

        logger.debug(
            f"Gap scan: {len(scored)} articles, {len(candidates)} uncited pairs "
            f">= {threshold}, kept {len(gaps)}"
        )

        return GapAnalysisResult(gaps=gaps, threshold=threshold, total_gaps=len(gaps))

    async def warm_gap_analysis_cache(
        self,
        project_id: str,
        threshold: float = DEFAULT_GAP_THRESHOLD,
        limit: int = DEFAULT_GAP_LIMIT,
        year_from: int | None = None,
        year_to: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> GapAnalysisResult:
        """Return the cached gap analysis, computing and caching it on a miss.

        Threshold and limit are normalized the same way the cache key is, so
        the cached result always matches the key it is stored under.
        """
        threshold, limit = normalize_gap_parameters(threshold, limit)
        cache_key = build_gap_analysis_cache_key(
            project_id, threshold, limit, year_from, year_to
        )

        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Gap analysis cache hit: {cache_key}")
            return GapAnalysisResult.from_dict(cached)

        if not await self._loader.embeddings_available(project_id):
            logger.info(
                f"Embeddings not available for project {project_id}, "
                "caching empty gap analysis"
            )
            empty = GapAnalysisResult.empty(threshold)
            await self._cache.set(
                cache_key, empty.to_dict(), self._config.gap_not_ready_ttl
            )
            return empty

        articles = await self._loader.load_graph_corpus(project_id)
        result = self.detect_gaps(
            articles,
            threshold,
            limit,
            year_from=year_from,
            year_to=year_to,
            cancellation=cancellation,
        )

        await self._cache.set(cache_key, result.to_dict(), self._config.gap_cache_ttl)

        logger.info(
            f"Gap analysis for project {project_id}: {result.total_gaps} gaps "
            f"among {len(articles)} graph articles (threshold {threshold})"
        )
        return result

    @staticmethod
    def _build_gap(
        first: GraphArticle, second: GraphArticle, similarity: float
    ) -> GapPair:
        return GapPair(
            article1=ArticleRef(id=first.id, title=first.title or None, year=first.year),
            article2=ArticleRef(
                id=second.id, title=second.title or None, year=second.year
            ),
            similarity=similarity,
            reason=generate_gap_reason(similarity, first.year, second.year),
        )
