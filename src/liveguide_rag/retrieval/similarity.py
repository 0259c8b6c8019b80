"""Cosine similarity ranking over an in-memory corpus."""

from typing import Sequence

import numpy as np

from ..errors import ValidationError
from ..models import EmbeddedChunk, SimilarityResult

DEFAULT_TOP_K = 5
DEFAULT_THRESHOLD = 0.7


def _as_vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).ravel()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors.

    A zero vector has no direction; its similarity to anything is 0.0.

    Raises:
        ValidationError: If the vectors have different lengths.
    """
    va = _as_vector(a)
    vb = _as_vector(b)
    if va.shape != vb.shape:
        raise ValidationError(
            f"Vectors must have the same length ({va.size} != {vb.size})"
        )
    return _cosine(va, vb)


def _cosine(va: np.ndarray, vb: np.ndarray) -> float:
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def find_similar(
    query_vector: Sequence[float],
    corpus: Sequence[EmbeddedChunk],
    top_k: int = DEFAULT_TOP_K,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[SimilarityResult]:
    """Rank corpus chunks by cosine similarity to a query vector.

    Chunks scoring below ``threshold`` are dropped, the rest are sorted
    descending (equal scores keep corpus order) and cut to ``top_k``.

    Args:
        query_vector: Embedding of the query.
        corpus: Embedded chunks to rank; all must match the query dimension.
        top_k: Maximum number of results.
        threshold: Minimum similarity, in [-1, 1].

    Returns:
        Matching results, best first. Empty when nothing clears the threshold.

    Raises:
        ValidationError: On a bad ``top_k``/``threshold`` or a dimension mismatch.
    """
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
        raise ValidationError(f"top_k must be a positive integer, got {top_k!r}")
    if not -1.0 <= threshold <= 1.0:
        raise ValidationError(f"threshold must be within [-1, 1], got {threshold!r}")

    query = _as_vector(query_vector)
    scored: list[SimilarityResult] = []

    for chunk in corpus:
        vector = _as_vector(chunk.embedding)
        if vector.shape != query.shape:
            raise ValidationError(
                f"Chunk {chunk.id} has dimension {vector.size}, "
                f"query has dimension {query.size}"
            )
        similarity = _cosine(query, vector)
        if similarity >= threshold:
            scored.append(
                SimilarityResult(
                    id=chunk.id,
                    text=chunk.text,
                    similarity=similarity,
                    metadata=dict(chunk.metadata),
                )
            )

    scored.sort(key=lambda result: result.similarity, reverse=True)
    return scored[:top_k]
