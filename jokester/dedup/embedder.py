"""
Embedding generation via the Gemini embedding API.

Uses the google-genai async client. Failures are raised as
EmbeddingServiceError; the caller (Fingerprinter) owns the fallback policy.
"""

import logging
from typing import List, Optional

from jokester.errors import EmbeddingServiceError, ProviderConfigError
from jokester.infra.config import DEFAULT_EMBED_MODEL, DEFAULT_EMBEDDING_DIMENSIONS

logger = logging.getLogger("jokester")


class GeminiEmbedder:
    """
    Embedding service backed by Gemini embedding models.

    Any embedding model reachable through google-genai works; the vector
    length is pinned with output_dimensionality so stored jokes stay
    comparable.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_EMBED_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        client=None,
    ):
        """
        Initialize the embedder.

        Args:
            api_key: Google AI API key
            model: Embedding model name
            dimensions: Requested output dimensionality
            client: Pre-built genai.Client (tests inject a mock)
        """
        if client is None:
            if not api_key:
                raise ProviderConfigError(
                    "GEMINI_API_KEY environment variable is required for Gemini embeddings. "
                    "Set it in .env or environment."
                )
            from google import genai
            client = genai.Client(api_key=api_key)

        self._client = client
        self.model = model
        self.dimensions = dimensions
        self._dimension: Optional[int] = None

    async def embed_content(self, text: str) -> List[float]:
        """
        Get embedding vector for text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector exactly as returned by the service

        Raises:
            EmbeddingServiceError: On any service failure or empty response
        """
        if not text or not text.strip():
            raise EmbeddingServiceError("Empty text provided")

        from google.genai import types

        try:
            response = await self._client.aio.models.embed_content(
                model=self.model,
                contents=text,
                config=types.EmbedContentConfig(output_dimensionality=self.dimensions),
            )
        except Exception as e:
            raise EmbeddingServiceError(f"Gemini embedding request failed: {e}") from e

        embeddings = getattr(response, "embeddings", None)
        if not embeddings or not embeddings[0].values:
            raise EmbeddingServiceError(f"No embedding in response from {self.model}")

        values = list(embeddings[0].values)
        self._dimension = len(values)
        logger.debug(f"[Embedder] Generated embedding: dim={self._dimension}")
        return values

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimension detected from the last successful call."""
        return self._dimension
