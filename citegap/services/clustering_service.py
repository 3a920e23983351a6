"""Clustering service for grouping articles by embedding similarity.

Uses k-means with cosine similarity as the distance basis, k-means++ style
seeding and a similarity floor: articles not close enough to any centroid
stay unassigned (label -1) instead of being forced into a cluster.
"""

from collections.abc import Sequence

import numpy as np
from loguru import logger

from citegap.core.cancellation import CancellationToken, check_cancelled
from citegap.core.models.article import ArticleRecord
from citegap.core.models.cluster import Cluster
from citegap.core.utils.vector_utils import (
    cross_cosine_matrix,
    is_finite_vector,
    mean_vector,
    pairwise_cosine_matrix,
)

# Label for articles not assigned to any centroid
NOISE_LABEL = -1

DEFAULT_MAX_ITERATIONS = 50


def average_pairwise_similarity(members: Sequence[ArticleRecord]) -> float:
    """Mean cosine similarity over all unordered member pairs (0 if < 2)."""
    if len(members) < 2:
        return 0.0
    matrix = pairwise_cosine_matrix([member.embedding for member in members])
    upper = np.triu_indices(len(members), k=1)
    return float(matrix[upper].mean())


class ClusteringService:
    """Service for clustering articles using seeded cosine k-means."""

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        """Initialize clustering service.

        Args:
            rng: Random source used for centroid seeding
            seed: Seed for a fresh generator when ``rng`` is not given
        """
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    def cluster(
        self,
        corpus: Sequence[ArticleRecord],
        k: int,
        min_similarity: float,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        cancellation: CancellationToken | None = None,
    ) -> list[Cluster]:
        """Partition the corpus into at most k clusters.

        Args:
            corpus: Articles with embeddings
            k: Requested number of centroids
            min_similarity: Minimum centroid similarity for assignment
            max_iterations: Upper bound on assignment/update rounds
            cancellation: Optional token checked once per round

        Returns:
            Non-empty clusters in centroid order. Degenerate input (empty
            corpus, k <= 0) yields an empty list.

        Raises:
            OperationCancelledError: If the cancellation token is triggered
        """
        if not corpus or k <= 0:
            return []

        embeddings = [np.asarray(article.embedding, dtype=float) for article in corpus]

        logger.info(
            f"K-means clustering {len(corpus)} articles into up to {k} clusters "
            f"(min similarity {min_similarity})"
        )

        centroids = self._seed_centroids(embeddings, k, cancellation)
        if len(centroids) < k:
            logger.debug(
                f"Seeding stopped early with {len(centroids)}/{k} centroids"
            )

        assignments = np.full(len(corpus), NOISE_LABEL, dtype=int)
        iterations = 0

        for _ in range(max_iterations):
            check_cancelled(cancellation, "clustering")
            iterations += 1

            new_assignments = self._assign(embeddings, centroids, min_similarity)
            if np.array_equal(new_assignments, assignments):
                break
            assignments = new_assignments

            centroids = self._update_centroids(embeddings, centroids, assignments)

        clusters: list[Cluster] = []
        for c, centroid in enumerate(centroids):
            members = [
                article
                for article, label in zip(corpus, assignments)
                if label == c
            ]
            if not members:
                continue

            cluster = Cluster(
                centroid=centroid,
                members=members,
                avg_internal_similarity=average_pairwise_similarity(members),
            )
            clusters.append(cluster)

            logger.debug(
                f"Cluster {c}: {cluster.size} articles, "
                f"avg similarity {cluster.avg_internal_similarity:.3f}"
            )

        num_noise = int(np.sum(assignments == NOISE_LABEL))
        logger.info(
            f"K-means complete after {iterations} iterations: "
            f"{len(clusters)} clusters, {num_noise} unassigned"
        )

        return clusters

    def _seed_centroids(
        self,
        embeddings: list[np.ndarray],
        k: int,
        cancellation: CancellationToken | None,
    ) -> list[np.ndarray]:
        """Pick initial centroids, favouring articles far from those already chosen.

        The first centroid is uniform; each next one is sampled with weight
        ``1 - max similarity to existing centroids``. Seeding stops early once
        every remaining article coincides with a centroid.
        """
        n = len(embeddings)
        first = int(self._rng.integers(n))
        centroids = [embeddings[first].copy()]
        # Vectors with NaN/inf are never picked after the first draw
        used = np.array([not is_finite_vector(e) for e in embeddings], dtype=bool)
        used[first] = True

        while len(centroids) < k:
            check_cancelled(cancellation, "cluster seeding")

            similarities = cross_cosine_matrix(embeddings, centroids)
            distances = np.clip(1.0 - similarities.max(axis=1), 0.0, None)
            distances[used] = 0.0

            total = float(distances.sum())
            if total == 0:
                break

            candidates = np.flatnonzero(distances > 0)
            chosen = int(
                self._rng.choice(candidates, p=distances[candidates] / total)
            )
            centroids.append(embeddings[chosen].copy())
            used[chosen] = True

        return centroids

    @staticmethod
    def _assign(
        embeddings: list[np.ndarray],
        centroids: list[np.ndarray],
        min_similarity: float,
    ) -> np.ndarray:
        """Label each article with its most similar centroid, or NOISE_LABEL."""
        similarities = cross_cosine_matrix(embeddings, centroids)
        best = similarities.argmax(axis=1)
        best_sim = similarities[np.arange(len(embeddings)), best]
        return np.where(best_sim >= min_similarity, best, NOISE_LABEL)

    @staticmethod
    def _update_centroids(
        embeddings: list[np.ndarray],
        centroids: list[np.ndarray],
        assignments: np.ndarray,
    ) -> list[np.ndarray]:
        """Move each centroid to the mean of its members; empty ones stay put."""
        updated: list[np.ndarray] = []
        for c, centroid in enumerate(centroids):
            members = [
                embeddings[i]
                for i in np.flatnonzero(assignments == c)
                if len(embeddings[i]) == len(centroid)
                and is_finite_vector(embeddings[i])
            ]
            if not members:
                updated.append(centroid)
                continue
            updated.append(mean_vector(members))
        return updated
