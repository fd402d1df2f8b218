"""
JokeMemory dependency.

The instance is created in the application lifespan and kept on app.state.
"""

from fastapi import HTTPException, Request, status

from jokester.joke_memory import JokeMemory


def get_joke_memory(request: Request) -> JokeMemory:
    memory = getattr(request.app.state, "joke_memory", None)
    if memory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Joke memory is not initialized",
        )
    return memory
