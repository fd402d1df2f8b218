"""
FastAPI application entry point.

Local-only server exposing the joke memory operations to the desktop shell.
The JokeMemory instance is created at startup and lives on app.state.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from jokester import __version__
from jokester.infra.config import load_config
from jokester.infra.logging_config import setup_logging
from jokester.joke_memory import JokeMemory

from .dependencies.auth import verify_api_key
from .routers import jokes

logger = logging.getLogger("jokester")


def build_joke_memory() -> JokeMemory:
    """Create the JokeMemory from environment configuration and set up logging."""
    config = load_config()
    setup_logging(config.log_level, log_dir="logs" if config.log_to_file else None)
    return JokeMemory(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup loads the joke memory (unless one was already attached, e.g.
    by tests); shutdown flushes it to disk.
    """
    created = False
    if getattr(app.state, "joke_memory", None) is None:
        app.state.joke_memory = build_joke_memory()
        created = True
    logger.info(f"[API] Joke memory ready: {len(app.state.joke_memory.store)} jokes")

    yield

    memory = app.state.joke_memory
    if memory is not None:
        memory.store.save()
    if created:
        app.state.joke_memory = None


tags_metadata = [
    {
        "name": "jokes",
        "description": "Joke memory - remember, deduplicate, list, prune and generate novel jokes",
    },
]

app = FastAPI(
    title="Jokester Joke Memory API",
    lifespan=lifespan,
    description="""
## Jokester Joke Memory API

Local-only API for the joke memory engine.

### Authentication
When `API_AUTH_ENABLED=true`, all endpoints except `/health` require
an `X-API-Key` header matching the `API_KEY` environment variable.

### Usage
```bash
uvicorn jokester.api.main:app --host 127.0.0.1 --port 8000

curl -X POST http://localhost:8000/jokes/generate \\
  -H "Content-Type: application/json" \\
  -d '{"context": "Quarterly roadmap slide with 14 arrows"}'
```
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)


@app.get("/health")
async def health_check():
    """Health check endpoint. Not authenticated."""
    return {"status": "ok", "version": __version__}


app.include_router(
    jokes.router, prefix="/jokes", tags=["jokes"], dependencies=[Depends(verify_api_key)]
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
