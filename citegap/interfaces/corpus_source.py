"""Corpus source interface: articles, citation lists and stored embeddings."""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from citegap.core.models.article import StoredArticle

# Stored embedding representation: pgvector text or a plain float sequence
RawEmbedding = str | Sequence[float]


@runtime_checkable
class CorpusSource(Protocol):
    """Read access to a project's articles and their embeddings.

    Implementations typically sit on top of a relational store. The core
    never assumes a query engine; it only needs these look-ups.
    """

    async def embeddings_available(self, project_id: str) -> bool:
        """Whether embedding data exists at all (e.g. the table is populated)."""
        ...

    async def list_project_articles(self, project_id: str) -> list[StoredArticle]:
        """Articles that belong to the project, excluding deleted ones."""
        ...

    async def find_articles_by_external_ids(
        self, external_ids: Iterable[str]
    ) -> list[StoredArticle]:
        """Articles whose external identifier is in ``external_ids``."""
        ...

    async def fetch_embeddings(
        self, article_ids: Sequence[str]
    ) -> dict[str, RawEmbedding]:
        """Stored embeddings keyed by article id; articles without one are omitted."""
        ...
