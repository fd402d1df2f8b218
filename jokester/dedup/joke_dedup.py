"""
Joke Deduplication Check

Decides whether a joke candidate duplicates something already remembered,
and commits novel jokes to the store.

Check order:
1. Exact hash match (no embedding call is made)
2. Embedding similarity against every stored joke (linear scan)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jokester.infra.config import DEFAULT_SIMILARITY_THRESHOLD
from jokester.registry.joke_store import JokeEntry, JokeStore, generate_joke_id, now_ms

from .fingerprint import Fingerprinter
from .similarity import find_first_similar

logger = logging.getLogger("jokester")

REASON_EXACT = "exact"
REASON_SIMILAR = "similar"
REASON_UNIQUE = "unique"


@dataclass
class JokeDedupResult:
    """
    Result of a joke deduplication check.

    Attributes:
        text: The candidate text that was checked
        content_hash: Exact-match hash of the candidate
        is_duplicate: Whether a duplicate was found
        reason: "exact", "similar" or "unique"
        similarity_score: Score of the match (or best score seen if unique)
        matching_joke_id: ID of the stored joke that matched
        embedding: Candidate embedding, cached for accept(); None after an exact match
    """
    text: str
    content_hash: str
    is_duplicate: bool = False
    reason: str = REASON_UNIQUE
    similarity_score: float = 0.0
    matching_joke_id: Optional[str] = None
    embedding: Optional[List[float]] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "content_hash": self.content_hash,
            "is_duplicate": self.is_duplicate,
            "reason": self.reason,
            "similarity_score": round(self.similarity_score, 4),
            "matching_joke_id": self.matching_joke_id,
        }


class JokeDedupController:
    """
    Duplicate check and accept path for joke candidates.

    The store, fingerprinter and threshold are injected; the controller
    owns no global state.
    """

    def __init__(
        self,
        store: JokeStore,
        fingerprinter: Fingerprinter,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    ):
        self.store = store
        self.fingerprinter = fingerprinter
        self.threshold = threshold

    async def check(self, candidate: str) -> JokeDedupResult:
        """
        Check a candidate against every remembered joke.

        Args:
            candidate: Joke text

        Returns:
            JokeDedupResult with the decision and the cached embedding
        """
        candidate_hash = self.fingerprinter.hash(candidate)
        result = JokeDedupResult(text=candidate, content_hash=candidate_hash)

        existing = self.store.find_by_hash(candidate_hash)
        if existing is not None:
            result.is_duplicate = True
            result.reason = REASON_EXACT
            result.similarity_score = 1.0
            result.matching_joke_id = existing.id
            logger.info(f"[JokeDedup] EXACT DUPLICATE: \"{candidate[:50]}\" (existing={existing.id})")
            return result

        embedding = await self.fingerprinter.embed(candidate)
        result.embedding = embedding

        match, score = find_first_similar(
            embedding,
            ((joke, joke.embedding) for joke in self.store.scan_all()),
            threshold=self.threshold,
        )
        result.similarity_score = score

        if match is not None:
            result.is_duplicate = True
            result.reason = REASON_SIMILAR
            result.matching_joke_id = match.id
            logger.info(
                f"[JokeDedup] SIMILAR JOKE ({score:.1%} > {self.threshold:.1%}): "
                f"new=\"{candidate[:50]}\" existing=\"{match.text[:50]}\""
            )
        else:
            logger.info(f"[JokeDedup] Unique: best={score:.4f}, threshold={self.threshold}")

        return result

    async def is_duplicate(self, candidate: str) -> bool:
        """Convenience wrapper returning only the decision."""
        return (await self.check(candidate)).is_duplicate

    async def accept(
        self,
        candidate: str,
        dedup_result: Optional[JokeDedupResult] = None
    ) -> JokeEntry:
        """
        Commit a joke to memory.

        Reuses the hash and embedding cached in dedup_result when it was
        computed for the same text, so no second embedding call is made.

        Args:
            candidate: Joke text
            dedup_result: Result of a prior check() on the same text

        Returns:
            The stored JokeEntry (the existing one if the hash was already present)
        """
        candidate_hash = self.fingerprinter.hash(candidate)

        existing = self.store.find_by_hash(candidate_hash)
        if existing is not None:
            logger.info(f"[JokeDedup] Already remembered, not re-inserting: {existing.id}")
            return existing

        if (
            dedup_result is not None
            and dedup_result.content_hash == candidate_hash
            and dedup_result.embedding is not None
        ):
            embedding = dedup_result.embedding
        else:
            embedding = await self.fingerprinter.embed(candidate)

        entry = JokeEntry(
            id=generate_joke_id(),
            text=candidate,
            embedding=list(embedding),
            timestamp=now_ms(),
            content_hash=candidate_hash,
        )
        self.store.insert(entry)
        return entry
