"""
Deduplication module - joke fingerprints, similarity and the dedup controller.

Two signals decide whether a joke was already told:
1. Exact content hash (case/whitespace-insensitive)
2. Embedding cosine similarity above a configured threshold
"""

from .embedder import GeminiEmbedder
from .fingerprint import (
    EmbeddingService,
    Fingerprinter,
    content_hash,
    fallback_embedding,
)
from .joke_dedup import JokeDedupController, JokeDedupResult
from .similarity import (
    cosine_similarity,
    find_first_similar,
    is_similar,
    rank_by_similarity,
)

__all__ = [
    # Embedder
    "GeminiEmbedder",
    # Fingerprint
    "EmbeddingService",
    "Fingerprinter",
    "content_hash",
    "fallback_embedding",
    # Dedup controller
    "JokeDedupController",
    "JokeDedupResult",
    # Similarity
    "cosine_similarity",
    "find_first_similar",
    "is_similar",
    "rank_by_similarity",
]
