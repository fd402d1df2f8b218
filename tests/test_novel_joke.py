"""
Tests for the retry-until-novel generation loop.
"""

from unittest.mock import AsyncMock

import pytest

from jokester.errors import GenerationError
from jokester.generation.model_provider import GenerationResult
from jokester.generation.novel_joke import (
    FALLBACK_JOKE,
    NovelJokeState,
    ProviderJokeGenerator,
    generate_novel,
)


class TestGenerateNovel:
    """Tests for generate_novel loop termination and acceptance."""

    async def test_first_candidate_accepted(self, controller, store, make_generator):
        generator = make_generator(["A perfectly fresh joke"])

        result = await generate_novel("a meeting", controller, generator, max_attempts=3)

        assert result.state == NovelJokeState.ACCEPTED
        assert result.text == "A perfectly fresh joke"
        assert result.attempts == 1
        assert result.is_fallback is False
        assert len(generator.calls) == 1
        assert len(store) == 1
        assert result.entry.text == "A perfectly fresh joke"

    async def test_always_duplicate_exhausts_to_fallback(self, controller, store, make_generator):
        """Three duplicates -> fallback returned, store grows by exactly one."""
        await controller.accept("the only joke I know")
        size_before = len(store)
        generator = make_generator(["The only joke I know"])

        result = await generate_novel("a meeting", controller, generator, max_attempts=3)

        assert result.state == NovelJokeState.EXHAUSTED
        assert result.text == FALLBACK_JOKE
        assert result.is_fallback is True
        assert result.attempts == 3
        assert len(generator.calls) == 3
        assert result.rejected == ["The only joke I know"] * 3
        assert len(store) == size_before + 1
        assert store.contains_hash(result.entry.content_hash)

    async def test_duplicate_then_novel(self, controller, store, make_generator):
        """Duplicate first, novel second -> 2 attempts, second candidate kept."""
        await controller.accept("old joke")
        generator = make_generator(["old joke", "new joke"])

        result = await generate_novel("ctx", controller, generator, max_attempts=3)

        assert result.state == NovelJokeState.ACCEPTED
        assert result.attempts == 2
        assert result.text == "new joke"
        assert len(generator.calls) == 2
        assert [j.text for j in store.scan_all()] == ["old joke", "new joke"]

    async def test_rejected_candidates_fed_back(self, controller, make_generator):
        await controller.accept("old joke")
        generator = make_generator(["old joke", "new joke"])

        await generate_novel("ctx", controller, generator, max_attempts=3)

        assert generator.calls[0]["rejected"] == []
        assert generator.calls[1]["rejected"] == ["old joke"]
        assert [c["attempt"] for c in generator.calls] == [1, 2]

    async def test_generation_failure_consumes_attempt(self, controller, make_generator):
        generator = make_generator([GenerationError("gemini", "boom"), "recovered joke"])

        result = await generate_novel("ctx", controller, generator, max_attempts=3)

        assert result.state == NovelJokeState.ACCEPTED
        assert result.attempts == 2
        assert result.failures == 1
        assert result.text == "recovered joke"

    async def test_all_failures_return_fallback(self, controller, store, make_generator):
        """Generation outage never propagates."""
        generator = make_generator([RuntimeError("network down")])

        result = await generate_novel("ctx", controller, generator, max_attempts=2)

        assert result.state == NovelJokeState.EXHAUSTED
        assert result.text == FALLBACK_JOKE
        assert result.failures == 2
        assert len(store) == 1

    async def test_empty_candidate_counts_as_failure(self, controller, make_generator):
        generator = make_generator(["   ", "finally a joke"])

        result = await generate_novel("ctx", controller, generator, max_attempts=3)

        assert result.failures == 1
        assert result.text == "finally a joke"

    async def test_repeated_fallback_not_reinserted(self, controller, store, make_generator):
        """The fallback joke is hash-deduplicated like any other joke."""
        generator = make_generator([RuntimeError("down")])

        first = await generate_novel("ctx", controller, generator, max_attempts=1)
        second = await generate_novel("ctx", controller, generator, max_attempts=1)

        assert first.text == second.text == FALLBACK_JOKE
        assert second.entry.id == first.entry.id
        assert len(store) == 1

    async def test_invalid_max_attempts(self, controller, make_generator):
        with pytest.raises(ValueError):
            await generate_novel("ctx", controller, make_generator(["x"]), max_attempts=0)

    async def test_to_dict(self, controller, make_generator):
        result = await generate_novel("ctx", controller, make_generator(["dict joke"]))
        data = result.to_dict()

        assert data["joke"] == "dict joke"
        assert data["state"] == "ACCEPTED"
        assert data["joke_id"] == result.entry.id
        assert data["is_fallback"] is False


class TestProviderJokeGenerator:
    """Tests for the provider-backed candidate source."""

    async def test_cleans_provider_output(self):
        provider = AsyncMock()
        provider.generate.return_value = GenerationResult(
            text='```\n- "Someone loves pie charts."\n```',
            usage=None,
            provider="gemini",
            model="gemini-2.0-flash",
        )
        generator = ProviderJokeGenerator(provider)

        joke = await generator.generate_joke("pie charts", 1, [])

        assert joke == "Someone loves pie charts."

    async def test_prompt_includes_rejected_and_recent(self, store, make_joke):
        store.insert(make_joke("a recent joke", 10))
        provider = AsyncMock()
        provider.generate.return_value = GenerationResult("ok", None, "gemini", "m")
        generator = ProviderJokeGenerator(provider, store=store)

        await generator.generate_joke("ctx", 2, ["a rejected joke"])

        system_prompt, user_prompt = provider.generate.call_args.args
        assert "sarcastic" in system_prompt
        assert "a rejected joke" in user_prompt
        assert "a recent joke" in user_prompt
        assert "different angle" in user_prompt

    async def test_provider_error_propagates_to_loop(self, controller):
        """GenerationError from the provider is absorbed by generate_novel."""
        provider = AsyncMock()
        provider.generate.side_effect = GenerationError("gemini", "quota")
        generator = ProviderJokeGenerator(provider)

        result = await generate_novel("ctx", controller, generator, max_attempts=2)

        assert result.is_fallback is True
        assert result.failures == 2
