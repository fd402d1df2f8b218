"""
Jokester exceptions.

Remote-service errors are recovered locally by the dedup engine:
- EmbeddingServiceError: replaced by the deterministic fallback embedding
- GenerationError: consumes one retry attempt
"""


class JokeMemoryError(Exception):
    """Base exception for all joke memory errors."""
    pass


class EmbeddingServiceError(JokeMemoryError):
    """Raised when the embedding service fails or returns no vector."""
    pass


class GenerationError(JokeMemoryError):
    """Raised when the generation service fails to produce a candidate."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} generation failed: {message}")


class ProviderConfigError(JokeMemoryError):
    """
    Raised when a provider cannot be constructed.

    Examples:
    - Missing GEMINI_API_KEY / ANTHROPIC_API_KEY
    - Unknown model specification prefix
    """
    pass
