"""Tests for cluster summaries: keywords, central article and colors."""

import numpy as np
import pytest

from citegap.core.models.article import ArticleRecord
from citegap.core.models.cluster import Cluster
from citegap.services.cluster_summarizer import (
    MAX_KEYWORDS,
    STOP_WORDS,
    ClusterSummarizer,
    extract_keywords,
    find_central_article,
)


def _record(article_id: str, embedding, title: str = "") -> ArticleRecord:
    return ArticleRecord(
        id=article_id,
        title=title,
        abstract="",
        embedding=np.asarray(embedding, dtype=float),
    )


class TestExtractKeywords:
    def test_counts_and_orders_by_frequency(self):
        titles = [
            "Deep learning for protein folding",
            "Protein folding with graph networks",
            "Graph networks for protein design",
        ]
        assert extract_keywords(titles) == [
            "protein",
            "folding",
            "graph",
            "networks",
            "deep",
        ]

    def test_drops_stop_words_and_short_tokens(self):
        titles = ["The study of results: analysis and review of new RNA data"]
        assert extract_keywords(titles) == []

    def test_strips_punctuation_and_digits(self):
        assert extract_keywords(["COVID-19: vaccine, vaccine!"]) == ["vaccine", "covid"]

    def test_cyrillic_titles(self):
        titles = [
            "Исследование влияния вакцинации на иммунитет",
            "Вакцинации и иммунитет у детей",
        ]
        keywords = extract_keywords(titles)
        assert keywords[:2] == ["вакцинации", "иммунитет"]
        assert "исследование" not in keywords

    def test_never_more_than_five(self):
        titles = ["alpha bravo charlie delta echoes foxtrot golfer hotel"]
        keywords = extract_keywords(titles)
        assert len(keywords) == MAX_KEYWORDS
        assert all(len(k) > 3 and k not in STOP_WORDS for k in keywords)

    def test_empty_titles(self):
        assert extract_keywords(["", ""]) == []


class TestFindCentralArticle:
    def test_empty(self):
        assert find_central_article([]) is None

    def test_picks_most_connected_member(self):
        members = [
            _record("edge", [1.0, 0.0]),
            _record("middle", [1.0, 1.0]),
            _record("other-edge", [0.0, 1.0]),
        ]
        assert find_central_article(members).id == "middle"

    def test_ties_go_to_first_member(self):
        members = [_record("first", [1.0, 0.0]), _record("second", [1.0, 0.0])]
        assert find_central_article(members).id == "first"


class TestClusterSummarizer:
    def _cluster(self) -> Cluster:
        members = [
            _record("a", [1.0, 0.0], "Citation gap detection"),
            _record("b", [1.0, 0.1], "Gap detection in citation graphs"),
            _record("c", [1.0, 0.2], "Graphs of citation"),
        ]
        return Cluster(
            centroid=np.array([1.0, 0.1]),
            members=members,
            avg_internal_similarity=0.99,
        )

    def test_summary_fields(self):
        summary = ClusterSummarizer(("#111111", "#222222")).summarize(self._cluster(), 0)

        assert summary.color == "#111111"
        assert summary.central_article_id == "b"
        assert summary.keywords[0] == "citation"
        assert summary.similarity_to_center["b"] == pytest.approx(1.0)
        assert set(summary.similarity_to_center) == {"a", "b", "c"}

    def test_palette_cycles(self):
        summarizer = ClusterSummarizer(("#111111", "#222222"))
        assert summarizer.summarize(self._cluster(), 1).color == "#222222"
        assert summarizer.summarize(self._cluster(), 2).color == "#111111"

    def test_empty_cluster(self):
        cluster = Cluster(centroid=np.zeros(2), members=[], avg_internal_similarity=0.0)
        summary = ClusterSummarizer().summarize(cluster)

        assert summary.central_article_id is None
        assert summary.keywords == []
        assert summary.similarity_to_center == {}

    def test_rejects_empty_palette(self):
        with pytest.raises(ValueError):
            ClusterSummarizer(())
