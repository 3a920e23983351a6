"""Corpus loading for semantic clustering and gap analysis.

Resolves a project's one-hop citation neighborhood (its own articles, the
articles they reference and the articles citing them) and turns the stored
embeddings into in-memory records for a single run.
"""

from loguru import logger

from citegap.core.models.article import ArticleRecord, GraphArticle, StoredArticle
from citegap.core.utils.vector_utils import parse_embedding
from citegap.interfaces.corpus_source import CorpusSource


def merge_neighborhood(*groups: list[StoredArticle]) -> list[StoredArticle]:
    """Union article groups by id, keeping the first occurrence and its order."""
    seen: set[str] = set()
    merged: list[StoredArticle] = []
    for group in groups:
        for article in group:
            if article.id in seen:
                continue
            seen.add(article.id)
            merged.append(article)
    return merged


class CorpusLoader:
    """Adapter from a CorpusSource to per-run article records."""

    def __init__(self, source: CorpusSource):
        self._source = source

    async def embeddings_available(self, project_id: str) -> bool:
        return await self._source.embeddings_available(project_id)

    async def resolve_graph_neighborhood(self, project_id: str) -> list[StoredArticle]:
        """Project articles plus their referenced and citing articles."""
        project_articles = await self._source.list_project_articles(project_id)

        reference_ids: set[str] = set()
        citing_ids: set[str] = set()
        for article in project_articles:
            reference_ids.update(article.reference_ids)
            citing_ids.update(article.cited_by_ids)

        referenced = (
            await self._source.find_articles_by_external_ids(sorted(reference_ids))
            if reference_ids
            else []
        )
        citing = (
            await self._source.find_articles_by_external_ids(sorted(citing_ids))
            if citing_ids
            else []
        )

        neighborhood = merge_neighborhood(project_articles, referenced, citing)
        logger.debug(
            f"Project {project_id} graph: {len(project_articles)} own, "
            f"{len(referenced)} referenced, {len(citing)} citing, "
            f"{len(neighborhood)} unique"
        )
        return neighborhood

    async def load_graph_corpus(self, project_id: str) -> list[GraphArticle]:
        """Neighborhood articles that have a non-empty embedding."""
        neighborhood = await self.resolve_graph_neighborhood(project_id)
        if not neighborhood:
            return []

        raw_embeddings = await self._source.fetch_embeddings(
            [article.id for article in neighborhood]
        )

        corpus: list[GraphArticle] = []
        for article in neighborhood:
            raw = raw_embeddings.get(article.id)
            if raw is None:
                continue
            embedding = parse_embedding(raw)
            if embedding.size == 0:
                continue
            corpus.append(
                GraphArticle(
                    id=str(article.id),
                    title=article.title or "",
                    abstract=article.abstract or "",
                    embedding=embedding,
                    external_id=article.external_id,
                    year=article.year,
                    reference_ids=frozenset(article.reference_ids),
                    cited_by_ids=frozenset(article.cited_by_ids),
                )
            )

        logger.debug(
            f"Loaded {len(corpus)}/{len(neighborhood)} articles with embeddings "
            f"for project {project_id}"
        )
        return corpus

    async def load_corpus(self, project_id: str) -> list[ArticleRecord]:
        """Plain {id, title, abstract, embedding} records for clustering."""
        return [
            ArticleRecord(
                id=article.id,
                title=article.title,
                abstract=article.abstract,
                embedding=article.embedding,
            )
            for article in await self.load_graph_corpus(project_id)
        ]
