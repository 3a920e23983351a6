"""Tests for citation gap detection and the gap analysis cache warm-up."""

import unittest

import pytest

from citegap.core.cache_keys import build_gap_analysis_cache_key
from citegap.core.cancellation import CancellationToken
from citegap.core.config.semantic_config import SemanticConfig
from citegap.core.exceptions import OperationCancelledError
from citegap.core.models.article import StoredArticle
from citegap.core.models.gap import GapAnalysisResult
from citegap.core.utils.vector_utils import cross_cosine_matrix
from citegap.services import gap_detection_service
from citegap.services.corpus_loader import CorpusLoader
from citegap.services.gap_detection_service import (
    GapDetectionService,
    generate_gap_reason,
    year_in_range,
)
from citegap.tests.fakes import (
    FakeCorpusSource,
    RecordingCache,
    graph_article,
    vector_with_similarity,
)


def _detector() -> GapDetectionService:
    source = FakeCorpusSource([], {}, {})
    return GapDetectionService(CorpusLoader(source), RecordingCache())


class TestGenerateGapReason:
    def test_contemporary_works(self):
        reason = generate_gap_reason(0.85, 2023, 2023)
        assert "85%" in reason
        assert "duplication" in reason

    def test_small_year_gap(self):
        reason = generate_gap_reason(0.9, 2010, 2014)
        assert "90%" in reason
        assert "missed reference" in reason

    def test_large_year_gap(self):
        assert "different periods" in generate_gap_reason(0.75, 1990, 2020)

    def test_unknown_year(self):
        reason = generate_gap_reason(0.71, None, 2020)
        assert reason == "Semantic similarity 71% without direct citation"


class TestYearInRange:
    def test_unknown_year_passes(self):
        assert year_in_range(None, 2015, 2020)

    def test_bounds_are_inclusive(self):
        assert year_in_range(2015, 2015, 2020)
        assert year_in_range(2020, 2015, 2020)
        assert not year_in_range(2014, 2015, 2020)
        assert not year_in_range(2021, 2015, 2020)

    def test_open_bounds(self):
        assert year_in_range(1950, None, 2020)
        assert year_in_range(2050, 2015, None)


class TestDetectGaps:
    def test_similar_uncited_pair_is_reported(self):
        articles = [
            graph_article("a", [1.0, 0.0], year=2023),
            graph_article("b", vector_with_similarity(0.85), year=2023),
        ]

        result = _detector().detect_gaps(articles, threshold=0.7, limit=50)

        assert result.total_gaps == 1
        gap = result.gaps[0]
        assert (gap.article1.id, gap.article2.id) == ("a", "b")
        assert gap.similarity == pytest.approx(0.85)
        assert gap.similarity_percent == 85
        assert "duplication" in gap.reason
        assert "85%" in gap.reason

    @pytest.mark.parametrize(
        "first_kwargs, second_kwargs",
        [
            ({"reference_ids": ["pmid-b"]}, {}),
            ({}, {"reference_ids": ["pmid-a"]}),
            ({"cited_by_ids": ["pmid-b"]}, {}),
            ({}, {"cited_by_ids": ["pmid-a"]}),
        ],
    )
    def test_cited_pairs_are_excluded(self, first_kwargs, second_kwargs):
        articles = [
            graph_article("a", [1.0, 0.0], year=2023, **first_kwargs),
            graph_article("b", vector_with_similarity(0.85), year=2023, **second_kwargs),
        ]

        result = _detector().detect_gaps(articles, threshold=0.7, limit=50)

        assert result.gaps == ()
        assert result.total_gaps == 0

    def test_below_threshold_is_ignored(self):
        articles = [
            graph_article("a", [1.0, 0.0]),
            graph_article("b", vector_with_similarity(0.6)),
        ]
        assert _detector().detect_gaps(articles, 0.7, 50).total_gaps == 0

    def test_sorted_descending_and_limited(self):
        articles = [
            graph_article("a", [1.0, 0.0]),
            graph_article("b", vector_with_similarity(0.8)),
            graph_article("c", vector_with_similarity(0.95)),
            graph_article("d", vector_with_similarity(0.9)),
        ]

        result = _detector().detect_gaps(articles, threshold=0.75, limit=2)

        assert result.total_gaps == 2
        similarities = [gap.similarity for gap in result.gaps]
        assert similarities == sorted(similarities, reverse=True)
        assert result.gaps[0].similarity > 0.99  # c/d are nearly parallel

    def test_year_filter(self):
        articles = [
            graph_article("old", [1.0, 0.0], year=2005),
            graph_article("new", vector_with_similarity(0.9), year=2018),
            graph_article("unknown", vector_with_similarity(0.88), year=None),
        ]

        result = _detector().detect_gaps(
            articles, threshold=0.7, limit=50, year_from=2015, year_to=2020
        )

        pairs = {(g.article1.id, g.article2.id) for g in result.gaps}
        assert pairs == {("new", "unknown")}

    def test_articles_without_embeddings_are_skipped(self):
        articles = [
            graph_article("a", [1.0, 0.0]),
            graph_article("empty", []),
        ]
        assert _detector().detect_gaps(articles, 0.0, 50).total_gaps == 0

    def test_cancellation(self):
        token = CancellationToken()
        token.cancel()
        articles = [graph_article("a", [1.0, 0.0]), graph_article("b", [1.0, 0.1])]

        with pytest.raises(OperationCancelledError):
            _detector().detect_gaps(articles, 0.7, 50, cancellation=token)

    def test_cancellation_between_scan_blocks(self, monkeypatch):
        token = CancellationToken()
        blocks_scored = []

        def score_block_then_cancel(rows, cols):
            blocks_scored.append(len(rows))
            token.cancel("shutdown")
            return cross_cosine_matrix(rows, cols)

        monkeypatch.setattr(gap_detection_service, "GAP_SCAN_BLOCK_SIZE", 2)
        monkeypatch.setattr(
            gap_detection_service, "cross_cosine_matrix", score_block_then_cancel
        )
        articles = [
            graph_article(str(i), vector_with_similarity(0.9 + i / 100))
            for i in range(6)
        ]

        with pytest.raises(OperationCancelledError, match="shutdown"):
            _detector().detect_gaps(articles, 0.7, 50, cancellation=token)

        assert blocks_scored == [2]

    def test_block_scan_matches_single_block(self, monkeypatch):
        articles = [
            graph_article(str(i), vector_with_similarity(0.75 + i / 50), year=2020)
            for i in range(7)
        ]
        single = _detector().detect_gaps(articles, 0.7, 50)

        monkeypatch.setattr(gap_detection_service, "GAP_SCAN_BLOCK_SIZE", 3)
        blocked = _detector().detect_gaps(articles, 0.7, 50)

        assert blocked.total_gaps == single.total_gaps == 21
        assert {(g.article1.id, g.article2.id) for g in blocked.gaps} == {
            (g.article1.id, g.article2.id) for g in single.gaps
        }
        assert [g.similarity for g in blocked.gaps] == pytest.approx(
            [g.similarity for g in single.gaps]
        )

    def test_non_finite_embedding_never_forms_a_gap(self):
        articles = [
            graph_article("a", [1.0, 0.0]),
            graph_article("b", vector_with_similarity(0.9)),
            graph_article("broken", [float("nan"), 1.0]),
        ]

        result = _detector().detect_gaps(articles, 0.5, 50)

        assert {(g.article1.id, g.article2.id) for g in result.gaps} == {("a", "b")}


def _stored(article_id: str, year: int, refs=(), cited_by=()) -> StoredArticle:
    return StoredArticle(
        id=article_id,
        external_id=f"pmid-{article_id}",
        title=f"Title {article_id}",
        year=year,
        reference_ids=frozenset(refs),
        cited_by_ids=frozenset(cited_by),
    )


class GapCacheWarmupTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        articles = [
            _stored("a", 2023, cited_by=["pmid-c"]),
            _stored("b", 2022),
            _stored("c", 2010, refs=["pmid-a"]),
        ]
        self.source = FakeCorpusSource(
            articles,
            {"p1": ["a", "b"]},
            {
                "a": "[1.0, 0.0]",
                "b": vector_with_similarity(0.85),
                "c": vector_with_similarity(0.9),
            },
        )
        self.cache = RecordingCache()
        self.config = SemanticConfig(gap_cache_ttl=900, gap_not_ready_ttl=30)
        self.service = GapDetectionService(
            CorpusLoader(self.source), self.cache, self.config
        )

    async def test_computes_then_serves_from_cache(self) -> None:
        first = await self.service.warm_gap_analysis_cache("p1", 0.7, 50)
        calls_after_first = self.source.total_calls

        second = await self.service.warm_gap_analysis_cache("p1", 0.7, 50)

        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(self.source.total_calls, calls_after_first)
        self.assertEqual(
            self.cache.writes,
            [(build_gap_analysis_cache_key("p1", 0.7, 50), 900)],
        )

    async def test_neighborhood_is_scanned(self) -> None:
        result = await self.service.warm_gap_analysis_cache("p1", 0.7, 50)

        pairs = {(g.article1.id, g.article2.id) for g in result.gaps}
        # c cites a, so only a-b and b-c remain
        self.assertEqual(pairs, {("a", "b"), ("b", "c")})
        self.assertEqual(result.total_gaps, 2)
        self.assertEqual(result.threshold, 0.7)

    async def test_unavailable_embeddings_cache_not_ready_result(self) -> None:
        source = FakeCorpusSource([], {}, {}, available=False)
        service = GapDetectionService(CorpusLoader(source), self.cache, self.config)

        result = await service.warm_gap_analysis_cache("p2", 0.7, 50)

        self.assertEqual(result, GapAnalysisResult.empty(0.7))
        self.assertEqual(
            self.cache.writes, [(build_gap_analysis_cache_key("p2", 0.7, 50), 30)]
        )
        self.assertEqual(source.calls["list_project_articles"], 0)

    async def test_different_parameters_use_different_keys(self) -> None:
        await self.service.warm_gap_analysis_cache("p1", 0.7, 50)
        await self.service.warm_gap_analysis_cache("p1", 0.7, 50, 2015, 2020)

        keys = [key for key, _ in self.cache.writes]
        self.assertEqual(len(set(keys)), 2)
        self.assertTrue(keys[1].endswith(":2015:2020"))

    async def test_limit_is_normalized_like_the_cache_key(self) -> None:
        first = await self.service.warm_gap_analysis_cache("p1", 0.7, 0)
        second = await self.service.warm_gap_analysis_cache("p1", 0.7, 1)

        self.assertEqual(first.total_gaps, 1)
        self.assertEqual(second, first)
        self.assertEqual(
            [g.article1.id + g.article2.id for g in first.gaps], ["bc"]
        )
        self.assertEqual(len(self.cache.writes), 1)

    async def test_threshold_is_normalized_like_the_cache_key(self) -> None:
        result = await self.service.warm_gap_analysis_cache("p1", 0.70049, 50)

        self.assertEqual(result.threshold, 0.7)
        self.assertEqual(
            self.cache.writes[0][0], build_gap_analysis_cache_key("p1", 0.7, 50)
        )
