"""
Registry module - persistent storage for accepted jokes.
"""

from .joke_store import (
    JokeEntry,
    JokeStore,
    MS_PER_DAY,
    generate_joke_id,
    now_ms,
)

__all__ = [
    "JokeEntry",
    "JokeStore",
    "MS_PER_DAY",
    "generate_joke_id",
    "now_ms",
]
