"""
Joke memory schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from jokester.registry.joke_store import JokeEntry


class JokeItem(BaseModel):
    """A remembered joke (embedding omitted)."""

    id: str
    joke: str
    timestamp: int = Field(..., description="Creation time, ms since epoch")
    hash: str
    dimensions: int

    @classmethod
    def from_entry(cls, entry: JokeEntry) -> "JokeItem":
        return cls(
            id=entry.id,
            joke=entry.text,
            timestamp=entry.timestamp,
            hash=entry.content_hash,
            dimensions=entry.dimensions,
        )


class JokeTextRequest(BaseModel):
    """Request carrying a single joke text."""

    joke: str = Field(..., description="Joke text")


class JokeCheckResponse(BaseModel):
    """Duplicate check result."""

    is_similar: bool
    reason: str = Field(..., description="exact, similar or unique")
    similarity_score: float
    matching_joke_id: Optional[str] = None


class SimilarJoke(BaseModel):
    """A joke ranked by similarity to a query."""

    joke: JokeItem
    similarity: float


class SimilarJokesResponse(BaseModel):
    query: str
    results: List[SimilarJoke] = []


class JokeStatsResponse(BaseModel):
    total: int
    recent: int = Field(..., description="Jokes added in the last 24 hours")


class RecentJokesResponse(BaseModel):
    jokes: List[JokeItem] = []


class ClearOldJokesResponse(BaseModel):
    removed: int
    days_old: int
    remaining: int


class EmbeddingDimensionsResponse(BaseModel):
    dimensions: int


class GenerateJokeRequest(BaseModel):
    """Request to generate a novel joke."""

    context: str = Field(..., description="Description of the captured screen/audio content")
    max_attempts: Optional[int] = Field(default=None, ge=1, le=10, description="Attempt budget")


class GenerateJokeResponse(BaseModel):
    joke: str
    state: str = Field(..., description="ACCEPTED or EXHAUSTED")
    attempts: int
    joke_id: Optional[str] = None
    rejected: List[str] = []
    failures: int = 0
    is_fallback: bool = False
