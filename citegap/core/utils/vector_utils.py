"""Vector helpers for embedding similarity."""

from collections.abc import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _sk_cosine_similarity


def parse_embedding(raw: str | Sequence[float] | np.ndarray | None) -> np.ndarray:
    """Parse a stored embedding into a float vector.

    Accepts the pgvector text form (``"[0.1,0.2,0.3]"``), any sequence of
    numbers, or None. Blank input, and vectors containing NaN or infinity,
    yield an empty vector.

    Examples:
        >>> parse_embedding("[1, 2.5]").tolist()
        [1.0, 2.5]

        >>> parse_embedding("[]").size
        0

        >>> parse_embedding("[nan, 1]").size
        0
    """
    if raw is None:
        return np.zeros(0, dtype=float)
    if isinstance(raw, str):
        cleaned = raw.replace("[", "").replace("]", "")
        if not cleaned.strip():
            return np.zeros(0, dtype=float)
        vector = np.array([float(part.strip()) for part in cleaned.split(",")], dtype=float)
    else:
        vector = np.asarray(raw, dtype=float).ravel()

    if not is_finite_vector(vector):
        return np.zeros(0, dtype=float)
    return vector


def is_finite_vector(vector: Sequence[float] | np.ndarray) -> bool:
    """True when every coordinate is a finite number."""
    return bool(np.all(np.isfinite(np.asarray(vector, dtype=float))))


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Cosine of the angle between two vectors.

    Vectors of different length, empty vectors, zero vectors and vectors
    with non-finite coordinates all give 0.
    """
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape or va.size == 0:
        return 0.0
    if not (is_finite_vector(va) and is_finite_vector(vb)):
        return 0.0

    denominator = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denominator == 0:
        return 0.0
    return float(np.dot(va, vb) / denominator)


def mean_vector(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """Coordinate-wise mean of equally sized vectors."""
    return np.mean(np.vstack(vectors), axis=0)


def _group_by_dimension(vectors: Sequence[np.ndarray]) -> dict[int, list[int]]:
    groups: dict[int, list[int]] = {}
    for idx, vector in enumerate(vectors):
        # sklearn rejects NaN/inf, such vectors score 0 like empty ones
        if len(vector) == 0 or not is_finite_vector(vector):
            continue
        groups.setdefault(len(vector), []).append(idx)
    return groups


def cross_cosine_matrix(
    rows: Sequence[np.ndarray], cols: Sequence[np.ndarray]
) -> np.ndarray:
    """Cosine similarity of every row vector against every column vector.

    Vectors are grouped by dimension and each group is scored in one batch;
    pairs across different dimensions (and pairs with an empty or non-finite
    vector) are 0.
    Zero vectors score 0 against everything, themselves included.
    """
    matrix = np.zeros((len(rows), len(cols)), dtype=float)
    col_groups = _group_by_dimension(cols)

    for dim, row_indices in _group_by_dimension(rows).items():
        col_indices = col_groups.get(dim)
        if not col_indices:
            continue
        row_block = np.vstack([rows[i] for i in row_indices])
        col_block = np.vstack([cols[j] for j in col_indices])
        # sklearn normalizes zero rows to zero, so they score 0 everywhere
        matrix[np.ix_(row_indices, col_indices)] = _sk_cosine_similarity(
            row_block, col_block
        )

    return matrix


def pairwise_cosine_matrix(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """Compute the full n x n cosine similarity matrix."""
    return cross_cosine_matrix(vectors, vectors)
