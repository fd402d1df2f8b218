"""
Environment configuration for the joke memory engine.

All settings come from environment variables (optionally loaded from .env).

Environment Variables:
- GEMINI_API_KEY: Google AI key (generation + embeddings)
- ANTHROPIC_API_KEY: Anthropic key (only for claude-* models)
- JOKE_MODEL: Generation model spec (default: gemini:gemini-2.0-flash)
- GEMINI_EMBED_MODEL: Embedding model (default: text-embedding-004)
- JOKE_EMBEDDING_DIMENSIONS: Embedding dimensionality (default: 768)
- JOKE_SIMILARITY_THRESHOLD: Cosine score above which jokes are duplicates (default: 0.85)
- JOKE_MAX_ATTEMPTS: Generation attempts before the fallback joke (default: 3)
- JOKE_MEMORY_PATH: Memory snapshot file (default: ./joke_memory.json)
- JOKE_RETENTION_DAYS: Age cutoff for pruning (default: 30)
- JOKE_TEMPERATURE: Generation temperature (default: 0.9)
- LOG_LEVEL: Logging level (default: INFO)
- JOKE_LOG_TO_FILE: Also write daily log files under ./logs (default: true)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger("jokester")

DEFAULT_MODEL_SPEC = "gemini:gemini-2.0-flash"
DEFAULT_EMBED_MODEL = "text-embedding-004"
DEFAULT_EMBEDDING_DIMENSIONS = 768
# Observed values ranged from 0.5 to 0.85; 0.85 only rejects close paraphrases.
DEFAULT_SIMILARITY_THRESHOLD = 0.85
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MEMORY_FILENAME = "joke_memory.json"
DEFAULT_RETENTION_DAYS = 30


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    val = os.getenv(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    elif val in ("false", "0", "no", "off"):
        return False
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    val = os.getenv(key)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"[Config] Invalid integer for {key}: {val}, using default: {default}")
    return default


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    val = os.getenv(key)
    if val is not None:
        try:
            return float(val)
        except ValueError:
            logger.warning(f"[Config] Invalid float for {key}: {val}, using default: {default}")
    return default


def get_default_memory_path() -> Path:
    """Memory snapshot lives in the current working directory."""
    return Path.cwd() / DEFAULT_MEMORY_FILENAME


@dataclass
class JokeMemoryConfig:
    """Resolved configuration for the joke memory engine."""
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    model_spec: str = DEFAULT_MODEL_SPEC
    embed_model: str = DEFAULT_EMBED_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    memory_path: Optional[Path] = None
    retention_days: int = DEFAULT_RETENTION_DAYS
    temperature: float = 0.9
    log_level: str = "INFO"
    log_to_file: bool = True

    def __post_init__(self):
        if self.memory_path is None:
            self.memory_path = get_default_memory_path()
        else:
            self.memory_path = Path(self.memory_path)


def load_config(env_file: Optional[str] = None) -> JokeMemoryConfig:
    """
    Load configuration from environment (and .env if present).

    Args:
        env_file: Optional explicit .env path

    Returns:
        JokeMemoryConfig with all values resolved
    """
    load_dotenv(env_file)

    memory_path = os.getenv("JOKE_MEMORY_PATH")

    threshold = _get_env_float("JOKE_SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD)
    if not -1.0 <= threshold <= 1.0:
        logger.warning(
            f"[Config] JOKE_SIMILARITY_THRESHOLD out of range: {threshold}, "
            f"using default: {DEFAULT_SIMILARITY_THRESHOLD}"
        )
        threshold = DEFAULT_SIMILARITY_THRESHOLD

    max_attempts = _get_env_int("JOKE_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)
    if max_attempts < 1:
        logger.warning(f"[Config] JOKE_MAX_ATTEMPTS must be >= 1, using default: {DEFAULT_MAX_ATTEMPTS}")
        max_attempts = DEFAULT_MAX_ATTEMPTS

    config = JokeMemoryConfig(
        gemini_api_key=os.getenv("GEMINI_API_KEY"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        model_spec=os.getenv("JOKE_MODEL", DEFAULT_MODEL_SPEC),
        embed_model=os.getenv("GEMINI_EMBED_MODEL", DEFAULT_EMBED_MODEL),
        embedding_dimensions=_get_env_int("JOKE_EMBEDDING_DIMENSIONS", DEFAULT_EMBEDDING_DIMENSIONS),
        similarity_threshold=threshold,
        max_attempts=max_attempts,
        memory_path=Path(memory_path) if memory_path else None,
        retention_days=_get_env_int("JOKE_RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        temperature=_get_env_float("JOKE_TEMPERATURE", 0.9),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_to_file=_get_env_bool("JOKE_LOG_TO_FILE", True),
    )

    logger.debug(
        f"[Config] model={config.model_spec}, embed={config.embed_model}, "
        f"threshold={config.similarity_threshold}, memory={config.memory_path}"
    )
    return config
