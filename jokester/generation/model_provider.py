"""
Model provider abstraction for joke generation.

Supports multiple LLM backends:
- Gemini (Google AI) - default
- Claude (Anthropic)

Usage:
    provider = get_provider("gemini:gemini-2.0-flash", config)
    result = await provider.generate(system_prompt, user_prompt)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from jokester.errors import GenerationError, ProviderConfigError
from jokester.infra.config import DEFAULT_MODEL_SPEC, JokeMemoryConfig

logger = logging.getLogger("jokester")

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_MAX_TOKENS = 256


@dataclass
class ModelInfo:
    """Model identification information."""
    provider: str  # "gemini", "anthropic"
    model_name: str  # e.g., "gemini-2.0-flash", "claude-sonnet-4-5-20250929"
    full_spec: str  # e.g., "gemini:gemini-2.0-flash"


@dataclass
class GenerationResult:
    """Result from text generation."""
    text: str
    usage: Optional[Dict[str, int]]
    provider: str
    model: str


def parse_model_spec(model_spec: Optional[str]) -> ModelInfo:
    """
    Parse model specification string into provider and model name.

    Formats:
    - "gemini" -> provider="gemini", model="gemini-2.0-flash"
    - "gemini:gemini-1.5-pro" -> provider="gemini", model="gemini-1.5-pro"
    - "claude-sonnet-4-5-20250929" -> provider="anthropic"
    - None -> DEFAULT_MODEL_SPEC

    Args:
        model_spec: Model specification string or None for default

    Returns:
        ModelInfo with provider and model name

    Raises:
        ProviderConfigError: If the spec matches no known provider
    """
    spec = model_spec or DEFAULT_MODEL_SPEC

    if spec.startswith("gemini"):
        if ":" in spec:
            model_name = spec.split(":", 1)[1]
        elif spec == "gemini":
            model_name = DEFAULT_GEMINI_MODEL
        else:
            # Bare model name such as "gemini-1.5-flash"
            model_name = spec
        return ModelInfo(provider="gemini", model_name=model_name, full_spec=f"gemini:{model_name}")

    if spec.startswith("claude"):
        return ModelInfo(provider="anthropic", model_name=spec, full_spec=spec)

    raise ProviderConfigError(f"Unknown model spec: {spec!r} (expected 'gemini[:model]' or 'claude-*')")


class ModelProvider(ABC):
    """Abstract base class for model providers."""

    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        """
        Generate text using the model.

        Args:
            system_prompt: System prompt text
            user_prompt: User prompt text

        Returns:
            GenerationResult with generated text and metadata

        Raises:
            GenerationError: On any provider failure
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider name for metadata."""
        pass


class GeminiProvider(ModelProvider):
    """Gemini (Google AI) model provider."""

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str],
        temperature: float = 0.9,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client=None,
    ):
        if client is None:
            if not api_key:
                raise ProviderConfigError(
                    "GEMINI_API_KEY environment variable is required for Gemini provider. "
                    "Set it in .env or environment."
                )
            from google import genai
            client = genai.Client(api_key=api_key)

        self._client = client
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def provider_name(self) -> str:
        return "gemini"

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        """Generate using the Gemini API."""
        from google.genai import types

        logger.info(f"[GeminiProvider] Generating with {self.model_name}")

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=self.temperature,
                    max_output_tokens=self.max_tokens,
                ),
            )
        except Exception as e:
            logger.error(f"[GeminiProvider] Generation failed: {e}")
            raise GenerationError(self.provider_name, str(e)) from e

        text = response.text or ""

        usage = None
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata is not None:
            try:
                usage = {
                    "input_tokens": usage_metadata.prompt_token_count or 0,
                    "output_tokens": usage_metadata.candidates_token_count or 0,
                    "total_tokens": usage_metadata.total_token_count or 0,
                }
            except AttributeError:
                usage = None

        logger.info(f"[GeminiProvider] Generated {len(text)} chars")

        return GenerationResult(
            text=text,
            usage=usage,
            provider=self.provider_name,
            model=self.model_name
        )


class ClaudeProvider(ModelProvider):
    """Claude (Anthropic) model provider."""

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str],
        temperature: float = 0.9,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client=None,
    ):
        if client is None:
            if not api_key:
                raise ProviderConfigError(
                    "ANTHROPIC_API_KEY environment variable is required for Claude provider. "
                    "Set it in .env or environment."
                )
            import anthropic
            client = anthropic.AsyncAnthropic(api_key=api_key)

        self._client = client
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def provider_name(self) -> str:
        return "anthropic"

    async def generate(self, system_prompt: str, user_prompt: str) -> GenerationResult:
        """Generate using the Claude API."""
        logger.info(f"[ClaudeProvider] Generating with {self.model_name}")

        try:
            message = await self._client.messages.create(
                model=self.model_name,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}]
            )
            text = message.content[0].text
        except Exception as e:
            logger.error(f"[ClaudeProvider] Generation failed: {e}")
            raise GenerationError(self.provider_name, str(e)) from e

        usage = None
        if hasattr(message, "usage") and message.usage:
            try:
                usage = {
                    "input_tokens": message.usage.input_tokens,
                    "output_tokens": message.usage.output_tokens,
                    "total_tokens": message.usage.input_tokens + message.usage.output_tokens
                }
            except (AttributeError, TypeError):
                pass

        logger.info(f"[ClaudeProvider] Generated {len(text)} chars")

        return GenerationResult(
            text=text,
            usage=usage,
            provider=self.provider_name,
            model=self.model_name
        )


def get_provider(model_spec: Optional[str], config: JokeMemoryConfig) -> ModelProvider:
    """
    Get appropriate model provider for the given model specification.

    Args:
        model_spec: Model specification (e.g., "gemini", "claude-sonnet-4-5-20250929");
                    None uses config.model_spec
        config: Resolved configuration (API keys, temperature)

    Returns:
        ModelProvider instance
    """
    info = parse_model_spec(model_spec or config.model_spec)

    if info.provider == "anthropic":
        return ClaudeProvider(info.model_name, config.anthropic_api_key, temperature=config.temperature)
    return GeminiProvider(info.model_name, config.gemini_api_key, temperature=config.temperature)
