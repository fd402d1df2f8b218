"""
JokeMemory - the application-facing joke memory service.

Wires the store, fingerprinter, dedup controller and generator together.
One instance is constructed at process startup (HTTP lifespan or CLI) and
passed to whoever needs it; there is no module-level singleton.

Operations:
- add_joke / is_joke_similar
- find_similar_jokes / get_recent_jokes / get_joke_stats
- clear_old_jokes / get_embedding_dimensions
- generate_joke_with_memory (retry-until-novel)
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from jokester.dedup.embedder import GeminiEmbedder
from jokester.dedup.fingerprint import EmbeddingService, Fingerprinter
from jokester.dedup.joke_dedup import JokeDedupController, JokeDedupResult
from jokester.dedup.similarity import rank_by_similarity
from jokester.generation.model_provider import get_provider
from jokester.generation.novel_joke import (
    JokeGenerator,
    NovelJokeResult,
    ProviderJokeGenerator,
    generate_novel,
)
from jokester.infra.config import JokeMemoryConfig
from jokester.registry.joke_store import MS_PER_DAY, JokeEntry, JokeStore, now_ms

logger = logging.getLogger("jokester")


class JokeMemory:
    """
    Joke memory service.

    Mutating operations are serialized behind an asyncio.Lock so an await
    on the embedding/generation service cannot interleave a second insert
    between a duplicate check and its accept.
    """

    def __init__(
        self,
        config: JokeMemoryConfig,
        store: Optional[JokeStore] = None,
        embedding_service: Optional[EmbeddingService] = None,
        generator: Optional[JokeGenerator] = None,
    ):
        """
        Args:
            config: Resolved configuration
            store: Joke store (default: loaded from config.memory_path)
            embedding_service: Embedding service (default: GeminiEmbedder when
                a key is configured, otherwise fallback embeddings only)
            generator: Candidate source (default: built lazily from config.model_spec)
        """
        self.config = config
        self.store = store if store is not None else JokeStore(config.memory_path)

        if embedding_service is None and config.gemini_api_key:
            embedding_service = GeminiEmbedder(
                api_key=config.gemini_api_key,
                model=config.embed_model,
                dimensions=config.embedding_dimensions,
            )
        if embedding_service is None:
            logger.warning("[JokeMemory] No embedding service configured - using hash fallback embeddings")

        self.fingerprinter = Fingerprinter(embedding_service, dimensions=config.embedding_dimensions)
        self.controller = JokeDedupController(
            self.store,
            self.fingerprinter,
            threshold=config.similarity_threshold,
        )
        self._generator = generator
        self._lock = asyncio.Lock()

        logger.info(
            f"[JokeMemory] Initialized: {len(self.store)} jokes loaded from {self.store.path} "
            f"(threshold={config.similarity_threshold})"
        )

    @property
    def generator(self) -> JokeGenerator:
        """Candidate source; the provider is only built when first needed."""
        if self._generator is None:
            provider = get_provider(None, self.config)
            self._generator = ProviderJokeGenerator(provider, store=self.store)
        return self._generator

    # =========================================================================
    # Dedup operations
    # =========================================================================

    async def add_joke(self, text: str) -> JokeEntry:
        """
        Remember a joke unconditionally (hash-deduplicated).

        Returns:
            The stored entry (the existing one for an exact duplicate)
        """
        async with self._lock:
            return await self.controller.accept(text)

    async def check_joke(self, text: str) -> JokeDedupResult:
        """Full duplicate check result for a joke."""
        return await self.controller.check(text)

    async def is_joke_similar(self, text: str) -> bool:
        """True if the joke duplicates (exactly or semantically) a remembered one."""
        return (await self.check_joke(text)).is_duplicate

    async def generate_joke_with_memory(
        self,
        context: str,
        max_attempts: Optional[int] = None
    ) -> NovelJokeResult:
        """
        Generate a joke about the context that has not been told before.

        Args:
            context: Description of the captured content
            max_attempts: Attempt budget (default: config.max_attempts)

        Returns:
            NovelJokeResult
        """
        attempts = max_attempts if max_attempts is not None else self.config.max_attempts
        async with self._lock:
            return await generate_novel(context, self.controller, self.generator, attempts)

    # =========================================================================
    # Listing / maintenance
    # =========================================================================

    async def find_similar_jokes(self, query: str, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Rank every remembered joke by similarity to the query.

        Returns:
            Up to `limit` dicts {"joke": JokeEntry, "similarity": float}, highest first
        """
        embedding = await self.fingerprinter.embed(query)
        ranked = rank_by_similarity(
            embedding,
            ((joke, joke.embedding) for joke in self.store.scan_all()),
            limit=limit,
        )
        return [{"joke": joke, "similarity": score} for joke, score in ranked]

    def get_joke_stats(self) -> Dict[str, int]:
        """Total jokes and jokes added in the last 24 hours."""
        one_day_ago = now_ms() - MS_PER_DAY
        return {
            "total": len(self.store),
            "recent": self.store.count_since(one_day_ago),
        }

    def get_recent_jokes(self, limit: int = 10) -> List[JokeEntry]:
        """Most recent jokes first."""
        return self.store.recent(limit)

    async def clear_old_jokes(self, days_old: Optional[int] = None) -> int:
        """
        Remove jokes older than days_old days (default: config.retention_days).

        Returns:
            int: Number of jokes removed

        Raises:
            ValueError: If days_old is negative
        """
        days = days_old if days_old is not None else self.config.retention_days
        if days < 0:
            raise ValueError(f"days_old must be >= 0, got {days}")
        cutoff = now_ms() - days * MS_PER_DAY
        async with self._lock:
            removed = self.store.purge_older_than(cutoff)
        logger.info(f"[JokeMemory] Cleared {removed} jokes older than {days} days")
        return removed

    def get_embedding_dimensions(self) -> int:
        """Dimensionality of stored embeddings, or the configured default if empty."""
        dims = self.store.embedding_dimensions()
        return dims if dims is not None else self.config.embedding_dimensions
