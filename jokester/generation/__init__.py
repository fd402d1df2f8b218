"""
Generation module - LLM providers, prompts and the retry-until-novel loop.
"""

from .model_provider import (
    ClaudeProvider,
    GeminiProvider,
    GenerationResult,
    ModelInfo,
    ModelProvider,
    get_provider,
    parse_model_spec,
)
from .novel_joke import (
    FALLBACK_JOKE,
    JokeGenerator,
    NovelJokeResult,
    NovelJokeState,
    ProviderJokeGenerator,
    generate_novel,
)
from .prompt_builder import build_system_prompt, build_user_prompt, clean_joke_response

__all__ = [
    # model_provider
    "ClaudeProvider",
    "GeminiProvider",
    "GenerationResult",
    "ModelInfo",
    "ModelProvider",
    "get_provider",
    "parse_model_spec",
    # novel_joke
    "FALLBACK_JOKE",
    "JokeGenerator",
    "NovelJokeResult",
    "NovelJokeState",
    "ProviderJokeGenerator",
    "generate_novel",
    # prompt_builder
    "build_system_prompt",
    "build_user_prompt",
    "clean_joke_response",
]
