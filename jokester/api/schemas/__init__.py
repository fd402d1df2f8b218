"""
API Schemas package.

Pydantic models for request/response validation.
"""

from .jokes import (
    ClearOldJokesResponse,
    EmbeddingDimensionsResponse,
    GenerateJokeRequest,
    GenerateJokeResponse,
    JokeCheckResponse,
    JokeItem,
    JokeStatsResponse,
    JokeTextRequest,
    RecentJokesResponse,
    SimilarJoke,
    SimilarJokesResponse,
)

__all__ = [
    "ClearOldJokesResponse",
    "EmbeddingDimensionsResponse",
    "GenerateJokeRequest",
    "GenerateJokeResponse",
    "JokeCheckResponse",
    "JokeItem",
    "JokeStatsResponse",
    "JokeTextRequest",
    "RecentJokesResponse",
    "SimilarJoke",
    "SimilarJokesResponse",
]
