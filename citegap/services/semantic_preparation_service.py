"""Automatic semantic preparation of a project.

Runs two independent best-effort tasks for a project:
1. Recompute and persist semantic clusters (clusterer + summarizer)
2. Warm the citation-gap analysis cache with default parameters

A failure in one task is logged and reported as a Failure outcome; it
never prevents the other task from running and never propagates.
"""

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger

from citegap.core.cancellation import CancellationToken
from citegap.core.config.semantic_config import SemanticConfig
from citegap.core.exceptions import ArticleEmbeddingNotFoundError
from citegap.core.models.cluster import ClusterMemberRow, ClusterRow
from citegap.core.models.gap import GapAnalysisResult, SemanticNeighbor
from citegap.core.outcome import Failure, Outcome, run_best_effort, value_or
from citegap.interfaces.cache_provider import CacheProvider
from citegap.interfaces.cluster_store import ClusterStore
from citegap.interfaces.corpus_source import CorpusSource
from citegap.services.cluster_summarizer import ClusterSummarizer
from citegap.services.clustering_service import ClusteringService
from citegap.services.corpus_loader import CorpusLoader
from citegap.services.gap_detection_service import GapDetectionService
from citegap.services.semantic_neighbors import find_semantic_neighbors


class _Unset:
    """Marker type for arguments the caller did not pass."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass(frozen=True)
class PreparationReport:
    """Result of one automatic preparation run."""

    project_id: str
    clusters_outcome: "Outcome[int]"
    gaps_outcome: "Outcome[GapAnalysisResult]"

    @property
    def clusters_created(self) -> int:
        return value_or(self.clusters_outcome, 0)

    @property
    def gaps_warmed(self) -> int:
        result = value_or(self.gaps_outcome, None)
        return result.total_gaps if result is not None else 0

    @property
    def failures(self) -> list[Failure]:
        return [
            outcome
            for outcome in (self.clusters_outcome, self.gaps_outcome)
            if isinstance(outcome, Failure)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "clustersCreated": self.clusters_created,
            "gapsWarmed": self.gaps_warmed,
        }


class SemanticPreparationService:
    """Orchestrates clustering and gap cache warm-up for projects."""

    def __init__(
        self,
        source: CorpusSource,
        cluster_store: ClusterStore,
        cache: CacheProvider,
        config: SemanticConfig | None = None,
        clustering_service: ClusteringService | None = None,
        summarizer: ClusterSummarizer | None = None,
    ):
        """Initialize semantic preparation service.

        Args:
            source: Articles, citation lists and embeddings
            cluster_store: Sink for persisted clusters
            cache: Cache for gap analysis results
            config: Semantic configuration
            clustering_service: Clusterer (defaults to one seeded from config)
            summarizer: Summarizer (defaults to the configured palette)
        """
        self._config = config or SemanticConfig()
        self._loader = CorpusLoader(source)
        self._cluster_store = cluster_store
        self._clustering = clustering_service or ClusteringService(
            seed=self._config.random_seed
        )
        self._summarizer = summarizer or ClusterSummarizer(self._config.cluster_palette)
        self._gap_service = GapDetectionService(self._loader, cache, self._config)
        self._project_locks: dict[str, asyncio.Lock] = {}
        # Holders plus waiters per project lock
        self._lock_users: Counter[str] = Counter()

    @property
    def gap_service(self) -> GapDetectionService:
        return self._gap_service

    async def run_auto_semantic_preparation(
        self,
        project_id: str,
        cancellation: CancellationToken | None = None,
    ) -> PreparationReport:
        """Recompute clusters and warm the gap cache; never raises.

        Concurrent calls for the same project are serialized.
        """
        async with self._project_lock(project_id):
            clusters_outcome = await run_best_effort(
                "Auto semantic clusters preparation",
                project_id,
                lambda: self.create_semantic_clusters(project_id, cancellation),
            )
            gaps_outcome = await run_best_effort(
                "Auto gap warmup",
                project_id,
                lambda: self.warm_gap_analysis_cache(
                    project_id, cancellation=cancellation
                ),
            )

        report = PreparationReport(
            project_id=project_id,
            clusters_outcome=clusters_outcome,
            gaps_outcome=gaps_outcome,
        )
        logger.info(
            f"Auto semantic preparation completed for project {project_id}: "
            f"{report.clusters_created} clusters created, "
            f"{report.gaps_warmed} gaps warmed"
        )
        return report

    @asynccontextmanager
    async def _project_lock(self, project_id: str) -> AsyncIterator[None]:
        """Hold the project's lock; the entry is dropped once nobody uses it."""
        lock = self._project_locks.setdefault(project_id, asyncio.Lock())
        self._lock_users[project_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[project_id] -= 1
            if self._lock_users[project_id] == 0:
                del self._lock_users[project_id]
                del self._project_locks[project_id]

    async def create_semantic_clusters(
        self,
        project_id: str,
        cancellation: CancellationToken | None = None,
    ) -> int:
        """Replace the project's persisted clusters; returns how many were stored."""
        min_size = self._config.min_cluster_size

        if not await self._loader.embeddings_available(project_id):
            logger.info(f"No embeddings for project {project_id}, skipping clusters")
            return 0

        corpus = await self._loader.load_corpus(project_id)
        if len(corpus) < min_size * 2:
            logger.info(
                f"Project {project_id} has {len(corpus)} embedded articles, "
                f"need at least {min_size * 2} for clustering"
            )
            return 0

        num_clusters = min(self._config.num_clusters, len(corpus) // min_size)
        if num_clusters < 2:
            return 0

        clusters = self._clustering.cluster(
            corpus,
            num_clusters,
            self._config.similarity_threshold,
            max_iterations=self._config.max_iterations,
            cancellation=cancellation,
        )
        valid_clusters = [cluster for cluster in clusters if cluster.size >= min_size]
        logger.debug(
            f"Project {project_id}: {len(valid_clusters)}/{len(clusters)} clusters "
            f"have at least {min_size} members"
        )

        await self._cluster_store.delete_project_clusters(project_id)

        for i, cluster in enumerate(valid_clusters):
            summary = self._summarizer.summarize(cluster, i)
            name_local, name_en = self._config.cluster_names(i + 1)

            cluster_id = await self._cluster_store.insert_cluster(
                ClusterRow(
                    project_id=project_id,
                    name_local=name_local,
                    name_en=name_en,
                    color=summary.color,
                    keywords=summary.keywords,
                    central_article_id=summary.central_article_id,
                    avg_internal_similarity=cluster.avg_internal_similarity,
                )
            )

            for member in cluster.members:
                await self._cluster_store.upsert_cluster_member(
                    ClusterMemberRow(
                        cluster_id=cluster_id,
                        article_id=member.id,
                        similarity_to_center=summary.similarity_to_center[member.id],
                    )
                )

        return len(valid_clusters)

    async def warm_gap_analysis_cache(
        self,
        project_id: str,
        threshold: float | None = None,
        limit: int | None = None,
        year_from: int | None | _Unset = UNSET,
        year_to: int | None | _Unset = UNSET,
        cancellation: CancellationToken | None = None,
    ) -> GapAnalysisResult:
        """Warm (or read) the gap analysis cache.

        Omitted arguments use the configured defaults. An explicit None year
        bound means "any year", even when a default range is configured.
        """
        params = self._config.gap_defaults()
        if threshold is not None:
            params["threshold"] = threshold
        if limit is not None:
            params["limit"] = limit
        if not isinstance(year_from, _Unset):
            params["year_from"] = year_from
        if not isinstance(year_to, _Unset):
            params["year_to"] = year_to

        return await self._gap_service.warm_gap_analysis_cache(
            project_id, cancellation=cancellation, **params
        )

    async def get_semantic_neighbors(
        self,
        project_id: str,
        article_id: str,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[SemanticNeighbor]:
        """Most similar graph articles to ``article_id``.

        Raises:
            ArticleEmbeddingNotFoundError: If the article has no embedding
                in the project's citation graph
        """
        articles = await self._loader.load_graph_corpus(project_id)
        target = next((a for a in articles if a.id == article_id), None)
        if target is None:
            raise ArticleEmbeddingNotFoundError(article_id)

        return find_semantic_neighbors(
            target,
            articles,
            threshold=self._config.neighbor_threshold if threshold is None else threshold,
            limit=self._config.neighbor_limit if limit is None else limit,
        )
