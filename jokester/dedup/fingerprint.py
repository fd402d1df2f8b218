"""
Joke fingerprint computation.

A fingerprint is the pair (content hash, embedding):
- content hash: MD5 of the lower-cased, trimmed text. Trivially reformatted
  duplicates ("Foo " vs "foo") collide.
- embedding: vector from the embedding service, or a deterministic
  hash-derived fallback when the service is unavailable.

The fallback is non-semantic. It only keeps the similarity check from
failing during an outage; similarity judgments made on it are low quality.
"""

import hashlib
import logging
from typing import List, Optional, Protocol

from jokester.infra.config import DEFAULT_EMBEDDING_DIMENSIONS

logger = logging.getLogger("jokester")

# Byte value used once the digest runs out: (0x00 - 128) / 128
FALLBACK_PAD_VALUE = -1.0


class EmbeddingService(Protocol):
    """Anything that can turn text into a vector (GeminiEmbedder, test fakes)."""

    async def embed_content(self, text: str) -> List[float]:
        ...


def content_hash(text: str) -> str:
    """
    Compute the exact-match hash of a joke.

    Args:
        text: Joke text

    Returns:
        MD5 hex digest (32 characters) of text.lower().strip()

    Example:
        >>> content_hash("  Why did the chicken... ") == content_hash("why did the chicken...")
        True
    """
    return hashlib.md5(text.lower().strip().encode("utf-8")).hexdigest()


def fallback_embedding(text: str, dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS) -> List[float]:
    """
    Derive a deterministic pseudo-embedding from the SHA-256 of the text.

    Walks the hex digest two characters at a time (index 0, 2, 4, ... below
    dimensions) and maps each byte b to (b - 128) / 128. Once the 64-char
    digest is exhausted every remaining slot is the 0x00 value (-1.0).

    Args:
        text: Text to fingerprint
        dimensions: Nominal embedding dimensionality

    Returns:
        List of dimensions // 2 floats in [-1.0, ~0.99]
    """
    digest = hashlib.sha256(text.lower().encode("utf-8")).hexdigest()

    values = []
    for i in range(0, dimensions, 2):
        hex_pair = digest[i:i + 2]
        if hex_pair:
            values.append((int(hex_pair, 16) - 128) / 128)
        else:
            values.append(FALLBACK_PAD_VALUE)
    return values


class Fingerprinter:
    """
    Computes fingerprints, calling the embedding service when needed.

    Embedding failures never escape: any exception from the service is
    logged and replaced with fallback_embedding().
    """

    def __init__(
        self,
        embedding_service: Optional[EmbeddingService],
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    ):
        self.embedding_service = embedding_service
        self.dimensions = dimensions
        self.fallback_count = 0

    def hash(self, text: str) -> str:
        return content_hash(text)

    async def embed(self, text: str) -> List[float]:
        """
        Embed text via the service, falling back on any failure.

        Args:
            text: Text to embed

        Returns:
            Service vector on success, fallback vector otherwise
        """
        if self.embedding_service is None:
            logger.debug("[Fingerprint] No embedding service configured - using fallback")
            self.fallback_count += 1
            return fallback_embedding(text, self.dimensions)

        try:
            return await self.embedding_service.embed_content(text)
        except Exception as e:
            logger.warning(f"[Fingerprint] Embedding service failed, using hash fallback: {e}")
            self.fallback_count += 1
            return fallback_embedding(text, self.dimensions)
