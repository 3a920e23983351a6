"""Core utilities package."""

from .vector_utils import (
    cosine_similarity,
    cross_cosine_matrix,
    is_finite_vector,
    mean_vector,
    pairwise_cosine_matrix,
    parse_embedding,
)

__all__ = [
    "cosine_similarity",
    "cross_cosine_matrix",
    "is_finite_vector",
    "mean_vector",
    "pairwise_cosine_matrix",
    "parse_embedding",
]
