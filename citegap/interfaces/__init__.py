"""Interfaces for collaborators the semantic services depend on."""

from .cache_provider import CacheProvider
from .cluster_store import ClusterStore
from .corpus_source import CorpusSource, RawEmbedding

__all__ = ["CacheProvider", "ClusterStore", "CorpusSource", "RawEmbedding"]
