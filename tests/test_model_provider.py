"""Tests for model_provider module."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from jokester.errors import GenerationError, ProviderConfigError
from jokester.generation.model_provider import (
    DEFAULT_GEMINI_MODEL,
    ClaudeProvider,
    GeminiProvider,
    GenerationResult,
    ModelInfo,
    get_provider,
    parse_model_spec,
)
from jokester.infra.config import JokeMemoryConfig


def make_gemini_client(response=None, error=None):
    """Mock google-genai client exposing client.aio.models.generate_content."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return client


def make_claude_client(message=None, error=None):
    """Mock AsyncAnthropic client exposing client.messages.create."""
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=message, side_effect=error)
    return client


class TestParseModelSpec:
    """Tests for parse_model_spec function."""

    def test_none_uses_default_gemini(self):
        info = parse_model_spec(None)
        assert info.provider == "gemini"
        assert info.model_name == DEFAULT_GEMINI_MODEL

    def test_bare_gemini(self):
        info = parse_model_spec("gemini")
        assert info == ModelInfo("gemini", DEFAULT_GEMINI_MODEL, f"gemini:{DEFAULT_GEMINI_MODEL}")

    def test_gemini_with_model(self):
        info = parse_model_spec("gemini:gemini-1.5-pro")
        assert info.provider == "gemini"
        assert info.model_name == "gemini-1.5-pro"
        assert info.full_spec == "gemini:gemini-1.5-pro"

    def test_bare_gemini_model_name(self):
        info = parse_model_spec("gemini-1.5-flash")
        assert info.model_name == "gemini-1.5-flash"

    def test_claude_model(self):
        info = parse_model_spec("claude-sonnet-4-5-20250929")
        assert info.provider == "anthropic"
        assert info.model_name == "claude-sonnet-4-5-20250929"

    def test_unknown_spec(self):
        with pytest.raises(ProviderConfigError):
            parse_model_spec("ollama:llama3")


class TestGetProvider:
    """Tests for get_provider factory."""

    def test_missing_gemini_key(self, tmp_path):
        config = JokeMemoryConfig(memory_path=tmp_path / "m.json")
        with pytest.raises(ProviderConfigError):
            get_provider("gemini", config)

    def test_missing_anthropic_key(self, tmp_path):
        config = JokeMemoryConfig(memory_path=tmp_path / "m.json")
        with pytest.raises(ProviderConfigError):
            get_provider("claude-sonnet-4-5-20250929", config)

    def test_claude_provider_built(self, tmp_path):
        config = JokeMemoryConfig(anthropic_api_key="sk-test", memory_path=tmp_path / "m.json")
        provider = get_provider("claude-sonnet-4-5-20250929", config)
        assert isinstance(provider, ClaudeProvider)
        assert provider.provider_name == "anthropic"

    def test_config_model_spec_used_by_default(self, tmp_path):
        config = JokeMemoryConfig(
            anthropic_api_key="sk-test",
            model_spec="claude-haiku",
            memory_path=tmp_path / "m.json",
        )
        provider = get_provider(None, config)
        assert isinstance(provider, ClaudeProvider)
        assert provider.model_name == "claude-haiku"


class TestGeminiProvider:
    """Tests for GeminiProvider with a mocked client."""

    async def test_generate_success(self):
        response = SimpleNamespace(
            text="Someone's excited about pie charts.",
            usage_metadata=SimpleNamespace(
                prompt_token_count=12,
                candidates_token_count=8,
                total_token_count=20,
            ),
        )
        client = make_gemini_client(response=response)
        provider = GeminiProvider("gemini-2.0-flash", api_key=None, temperature=0.5, client=client)

        result = await provider.generate("system", "user")

        assert isinstance(result, GenerationResult)
        assert result.text == "Someone's excited about pie charts."
        assert result.usage == {"input_tokens": 12, "output_tokens": 8, "total_tokens": 20}
        assert result.provider == "gemini"

        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["contents"] == "user"
        assert kwargs["config"].system_instruction == "system"
        assert kwargs["config"].temperature == 0.5

    async def test_generate_without_usage(self):
        client = make_gemini_client(response=SimpleNamespace(text="joke", usage_metadata=None))
        provider = GeminiProvider("gemini-2.0-flash", api_key=None, client=client)

        result = await provider.generate("s", "u")
        assert result.usage is None

    async def test_generate_failure_wrapped(self):
        client = make_gemini_client(error=RuntimeError("429 quota"))
        provider = GeminiProvider("gemini-2.0-flash", api_key=None, client=client)

        with pytest.raises(GenerationError) as exc_info:
            await provider.generate("s", "u")
        assert exc_info.value.provider == "gemini"
        assert "429 quota" in str(exc_info.value)


class TestClaudeProvider:
    """Tests for ClaudeProvider with a mocked client."""

    async def test_generate_success(self):
        message = SimpleNamespace(
            content=[SimpleNamespace(text="Another synergy slide. Thrilling.")],
            usage=SimpleNamespace(input_tokens=30, output_tokens=10),
        )
        client = make_claude_client(message=message)
        provider = ClaudeProvider("claude-sonnet-4-5-20250929", api_key=None, client=client)

        result = await provider.generate("system", "user")

        assert result.text == "Another synergy slide. Thrilling."
        assert result.usage == {"input_tokens": 30, "output_tokens": 10, "total_tokens": 40}
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]

    async def test_generate_failure_wrapped(self):
        client = make_claude_client(error=RuntimeError("overloaded"))
        provider = ClaudeProvider("claude-sonnet-4-5-20250929", api_key=None, client=client)

        with pytest.raises(GenerationError) as exc_info:
            await provider.generate("s", "u")
        assert exc_info.value.provider == "anthropic"
