"""
API Dependencies package.

Cross-cutting concerns: authentication and access to the JokeMemory instance.
"""

from .auth import verify_api_key
from .memory import get_joke_memory

__all__ = ["verify_api_key", "get_joke_memory"]
