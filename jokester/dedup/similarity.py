"""
Cosine similarity and duplicate threshold decisions.

Scores are in [-1, 1]. Mismatched dimensionality or a zero vector is not an
error: the score is defined as 0.0.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from jokester.infra.config import DEFAULT_SIMILARITY_THRESHOLD

logger = logging.getLogger("jokester")

T = TypeVar("T")


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two embedding vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        float: dot(a, b) / (|a| * |b|), or 0.0 when lengths differ,
        either vector is empty, or either norm is zero
    """
    if len(vec_a) != len(vec_b) or len(vec_a) == 0:
        return 0.0

    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(a, b) / (norm_a * norm_b))
    # Clamp float noise so identical vectors score exactly 1.0
    return max(-1.0, min(1.0, score))


def is_similar(score: float, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> bool:
    """
    Decide whether a similarity score counts as a duplicate.

    Strictly greater than: a score exactly at the threshold is NOT a duplicate.
    """
    return score > threshold


def find_first_similar(
    embedding: Sequence[float],
    candidates: Iterable[Tuple[T, Sequence[float]]],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> Tuple[Optional[T], float]:
    """
    Scan candidates for the first one above threshold.

    Args:
        embedding: Query vector
        candidates: (item, vector) pairs
        threshold: Duplicate threshold

    Returns:
        (matching item, its score) if found, otherwise (None, best score seen)
    """
    best_score = 0.0
    for item, vector in candidates:
        score = cosine_similarity(embedding, vector)
        if is_similar(score, threshold):
            return item, score
        best_score = max(best_score, score)
    return None, best_score


def rank_by_similarity(
    embedding: Sequence[float],
    candidates: Iterable[Tuple[T, Sequence[float]]],
    limit: int = 5
) -> List[Tuple[T, float]]:
    """
    Rank candidates by similarity to the query, highest first.

    Args:
        embedding: Query vector
        candidates: (item, vector) pairs
        limit: Maximum results to return

    Returns:
        Up to `limit` (item, score) tuples sorted by score descending
    """
    if limit <= 0:
        return []

    scored = [(item, cosine_similarity(embedding, vector)) for item, vector in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[:limit]
