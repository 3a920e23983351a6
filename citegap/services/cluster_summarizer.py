"""Cluster summaries: central article, title keywords and display color."""

import re
from collections import Counter
from collections.abc import Iterable, Sequence

import numpy as np

from citegap.core.config.semantic_config import DEFAULT_CLUSTER_PALETTE
from citegap.core.models.article import ArticleRecord
from citegap.core.models.cluster import Cluster, ClusterSummary
from citegap.core.utils.vector_utils import cosine_similarity, pairwise_cosine_matrix

MAX_KEYWORDS = 5

# Tokens of this length or shorter are never keywords
MIN_KEYWORD_LENGTH = 4

# Everything except Latin/Cyrillic letters and whitespace is dropped
_NON_LETTER_RE = re.compile(r"[^a-zA-Zа-яА-ЯёЁ\s]")

STOP_WORDS = frozenset(
    {
        # English function words
        "a", "an", "the", "and", "or", "of", "to", "in", "for", "with", "on",
        "at", "by", "from", "as", "is", "are", "was", "were", "be", "been",
        "being", "have", "has", "had", "that", "this", "these", "those",
        "into", "than", "their", "which", "between", "among", "during",
        "after", "before", "about", "through", "within", "without",
        # English generic research terms
        "study", "studies", "analysis", "review", "patients", "results",
        "effect", "effects", "using", "based", "new", "trial", "data",
        # Russian function words
        "и", "в", "во", "на", "с", "со", "по", "к", "ко", "о", "об", "от",
        "из", "за", "для", "при", "под", "над", "без", "или", "как", "что",
        "это", "этот", "эти", "также", "между", "после", "перед", "через",
        "среди", "которые", "который", "была", "были", "было",
        # Russian generic research terms
        "исследование", "исследования", "анализ", "обзор", "пациентов",
        "пациенты", "результаты", "влияние", "эффект", "оценка", "данные",
        "новый", "новые", "основе",
    }
)


def tokenize_title(title: str) -> list[str]:
    """Case-fold, strip punctuation and digits, split on whitespace."""
    return _NON_LETTER_RE.sub("", title.lower()).split()


def extract_keywords(titles: Iterable[str], max_keywords: int = MAX_KEYWORDS) -> list[str]:
    """Most frequent meaningful title words, ties kept in first-seen order.

    Examples:
        >>> extract_keywords(["Graph neural networks", "Neural graph models"])
        ['graph', 'neural', 'networks', 'models']
    """
    counts: Counter[str] = Counter()
    for title in titles:
        if not title:
            continue
        counts.update(
            word
            for word in tokenize_title(title)
            if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
        )

    # Counter.most_common is stable on insertion order for equal counts
    return [word for word, _ in counts.most_common(max_keywords)]


def find_central_article(members: Sequence[ArticleRecord]) -> ArticleRecord | None:
    """Member with the highest total similarity to the other members.

    The first member wins ties; None for an empty list.
    """
    if not members:
        return None

    matrix = pairwise_cosine_matrix([member.embedding for member in members])
    np.fill_diagonal(matrix, 0.0)
    scores = matrix.sum(axis=1)
    # argmax returns the first index among equal maxima
    return members[int(np.argmax(scores))]


class ClusterSummarizer:
    """Derives ClusterSummary values using a fixed color palette."""

    def __init__(self, palette: Sequence[str] = DEFAULT_CLUSTER_PALETTE):
        if not palette:
            raise ValueError("palette must contain at least one color")
        self._palette = tuple(palette)

    @property
    def palette(self) -> tuple[str, ...]:
        return self._palette

    def color_for(self, index: int) -> str:
        return self._palette[index % len(self._palette)]

    def summarize(self, cluster: Cluster, index: int = 0) -> ClusterSummary:
        """Summarize the cluster at position ``index`` of a run's output."""
        central = find_central_article(cluster.members)
        keywords = extract_keywords(member.title for member in cluster.members)

        similarity_to_center = {
            member.id: (
                cosine_similarity(member.embedding, central.embedding)
                if central is not None
                else 0.0
            )
            for member in cluster.members
        }

        return ClusterSummary(
            color=self.color_for(index),
            keywords=keywords,
            central_article_id=central.id if central is not None else None,
            similarity_to_center=similarity_to_center,
        )
