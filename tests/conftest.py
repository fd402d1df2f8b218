"""
Pytest configuration and shared fixtures.

The fakes below stand in for the Gemini embedding and generation services
so no test touches the network.
"""

import os
from typing import Dict, List, Optional, Sequence, Union

import pytest

from jokester.dedup.fingerprint import Fingerprinter, content_hash
from jokester.dedup.joke_dedup import JokeDedupController
from jokester.infra.config import JokeMemoryConfig
from jokester.registry.joke_store import JokeEntry, JokeStore, generate_joke_id

FAKE_DIMENSIONS = 16


class FakeEmbedder:
    """
    Embedding service fake.

    Texts listed in `vectors` get that vector; every other text gets its own
    one-hot vector, so unrelated texts score 0.0 against each other.
    """

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, fail: bool = False):
        self.vectors = dict(vectors or {})
        self.fail = fail
        self.calls: List[str] = []
        self._assigned: Dict[str, List[float]] = {}

    async def embed_content(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("embedding service down")
        if text in self.vectors:
            return list(self.vectors[text])
        if text not in self._assigned:
            vec = [0.0] * FAKE_DIMENSIONS
            vec[len(self._assigned) % FAKE_DIMENSIONS] = 1.0
            self._assigned[text] = vec
        return list(self._assigned[text])


class FakeGenerator:
    """Joke generator fake returning scripted outputs (an Exception entry is raised)."""

    def __init__(self, outputs: Sequence[Union[str, Exception]]):
        self.outputs = list(outputs)
        self.calls: List[Dict] = []

    async def generate_joke(self, context: str, attempt: int, rejected: Sequence[str]) -> str:
        self.calls.append({"context": context, "attempt": attempt, "rejected": list(rejected)})
        output = self.outputs[min(len(self.calls) - 1, len(self.outputs) - 1)]
        if isinstance(output, Exception):
            raise output
        return output


def make_entry(text: str, timestamp: int, embedding: Optional[List[float]] = None) -> JokeEntry:
    """Build a stored joke without going through the controller."""
    return JokeEntry(
        id=generate_joke_id(),
        text=text,
        embedding=embedding if embedding is not None else [1.0, 0.0, 0.0],
        timestamp=timestamp,
        content_hash=content_hash(text),
    )


@pytest.fixture(autouse=True, scope="function")
def reset_auth_env():
    """
    Run every test with API_AUTH_ENABLED=false unless it sets otherwise,
    and restore the original auth environment afterwards.
    """
    original_auth_enabled = os.environ.get("API_AUTH_ENABLED")
    original_api_key = os.environ.get("API_KEY")

    os.environ["API_AUTH_ENABLED"] = "false"

    yield

    if original_auth_enabled is not None:
        os.environ["API_AUTH_ENABLED"] = original_auth_enabled
    elif "API_AUTH_ENABLED" in os.environ:
        del os.environ["API_AUTH_ENABLED"]

    if original_api_key is not None:
        os.environ["API_KEY"] = original_api_key
    elif "API_KEY" in os.environ:
        del os.environ["API_KEY"]


@pytest.fixture
def memory_path(tmp_path):
    return tmp_path / "joke_memory.json"


@pytest.fixture
def store(memory_path):
    return JokeStore(memory_path)


@pytest.fixture
def make_embedder():
    """Factory for embedding fakes: make_embedder(vectors=..., fail=...)."""
    return FakeEmbedder


@pytest.fixture
def make_generator():
    """Factory for generator fakes: make_generator(outputs)."""
    return FakeGenerator


@pytest.fixture
def make_joke():
    """Factory for stored jokes: make_joke(text, timestamp, embedding=None)."""
    return make_entry


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def fingerprinter(embedder):
    return Fingerprinter(embedder, dimensions=FAKE_DIMENSIONS)


@pytest.fixture
def controller(store, fingerprinter):
    return JokeDedupController(store, fingerprinter, threshold=0.85)


@pytest.fixture
def config(memory_path):
    return JokeMemoryConfig(
        gemini_api_key=None,
        anthropic_api_key=None,
        embedding_dimensions=FAKE_DIMENSIONS,
        similarity_threshold=0.85,
        max_attempts=3,
        memory_path=memory_path,
        log_to_file=False,
    )
