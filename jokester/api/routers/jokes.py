"""
Joke memory router.

Endpoints:
- POST /jokes - Remember a joke
- POST /jokes/similar/check - Is this joke a duplicate?
- GET /jokes/similar - Rank remembered jokes by similarity to a query
- GET /jokes/stats - Total and last-24h counts
- GET /jokes/recent - Most recent jokes
- DELETE /jokes/old - Prune jokes older than N days
- GET /jokes/embedding-dimensions - Stored embedding dimensionality
- POST /jokes/generate - Generate a joke not told before
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from jokester.errors import ProviderConfigError
from jokester.joke_memory import JokeMemory

from ..dependencies import get_joke_memory
from ..schemas.jokes import (
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

logger = logging.getLogger("jokester")

router = APIRouter()


def _require_text(text: str, field: str = "joke") -> None:
    if not text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} must not be empty")


@router.post("", response_model=JokeItem)
async def add_joke(request: JokeTextRequest, memory: JokeMemory = Depends(get_joke_memory)):
    """Remember a joke. Exact duplicates return the existing entry."""
    _require_text(request.joke)
    entry = await memory.add_joke(request.joke)
    return JokeItem.from_entry(entry)


@router.post("/similar/check", response_model=JokeCheckResponse)
async def check_joke(request: JokeTextRequest, memory: JokeMemory = Depends(get_joke_memory)):
    """Check whether a joke duplicates (exactly or semantically) a remembered one."""
    _require_text(request.joke)
    result = await memory.check_joke(request.joke)
    return JokeCheckResponse(
        is_similar=result.is_duplicate,
        reason=result.reason,
        similarity_score=result.similarity_score,
        matching_joke_id=result.matching_joke_id,
    )


@router.get("/similar", response_model=SimilarJokesResponse)
async def find_similar_jokes(
    query: str = Query(..., min_length=1, description="Text to compare against"),
    limit: int = Query(default=5, ge=1, le=100, description="Maximum jokes to return"),
    memory: JokeMemory = Depends(get_joke_memory),
):
    """Rank remembered jokes by similarity to the query, highest first."""
    _require_text(query, "query")
    results = await memory.find_similar_jokes(query, limit=limit)
    return SimilarJokesResponse(
        query=query,
        results=[
            SimilarJoke(joke=JokeItem.from_entry(r["joke"]), similarity=r["similarity"])
            for r in results
        ],
    )


@router.get("/stats", response_model=JokeStatsResponse)
async def get_joke_stats(memory: JokeMemory = Depends(get_joke_memory)):
    return JokeStatsResponse(**memory.get_joke_stats())


@router.get("/recent", response_model=RecentJokesResponse)
async def get_recent_jokes(
    limit: int = Query(default=10, ge=1, le=500, description="Maximum jokes to return"),
    memory: JokeMemory = Depends(get_joke_memory),
):
    return RecentJokesResponse(jokes=[JokeItem.from_entry(j) for j in memory.get_recent_jokes(limit)])


@router.delete("/old", response_model=ClearOldJokesResponse)
async def clear_old_jokes(
    days_old: int = Query(default=30, ge=0, description="Remove jokes older than this many days"),
    memory: JokeMemory = Depends(get_joke_memory),
):
    removed = await memory.clear_old_jokes(days_old)
    return ClearOldJokesResponse(removed=removed, days_old=days_old, remaining=len(memory.store))


@router.get("/embedding-dimensions", response_model=EmbeddingDimensionsResponse)
async def get_embedding_dimensions(memory: JokeMemory = Depends(get_joke_memory)):
    return EmbeddingDimensionsResponse(dimensions=memory.get_embedding_dimensions())


@router.post("/generate", response_model=GenerateJokeResponse)
async def generate_joke(request: GenerateJokeRequest, memory: JokeMemory = Depends(get_joke_memory)):
    """
    Generate a joke that has not been told before.

    Never fails on generation/embedding outages: after the attempt budget
    is spent the fixed fallback joke is returned (is_fallback=true).
    """
    try:
        result = await memory.generate_joke_with_memory(request.context, max_attempts=request.max_attempts)
    except ProviderConfigError as e:
        logger.error(f"[API] Generation provider not configured: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return GenerateJokeResponse(**result.to_dict())
