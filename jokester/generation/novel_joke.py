"""
Retry-until-novel joke generation.

State machine: ATTEMPTING -> ACCEPTED | EXHAUSTED

Policy:
- Each attempt asks the generator for one candidate
- A failed request is logged and the loop moves to the next attempt
- A novel candidate is accepted into memory and returned immediately
- Duplicate candidates are fed back to the generator as "avoid these"
- When all attempts are used up, FALLBACK_JOKE is accepted and returned
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from jokester.dedup.joke_dedup import JokeDedupController
from jokester.infra.config import DEFAULT_MAX_ATTEMPTS
from jokester.registry.joke_store import JokeEntry, JokeStore

from .model_provider import ModelProvider
from .prompt_builder import build_system_prompt, build_user_prompt, clean_joke_response

logger = logging.getLogger("jokester")

FALLBACK_JOKE = "I'd tell you a new joke, but apparently I've already used all my best material."

# Recently accepted jokes included in the prompt
RECENT_JOKES_IN_PROMPT = 5


class NovelJokeState(str, Enum):
    """Retry loop states."""
    ATTEMPTING = "ATTEMPTING"
    ACCEPTED = "ACCEPTED"
    EXHAUSTED = "EXHAUSTED"


class JokeGenerator(Protocol):
    """Produces one joke candidate per call (ProviderJokeGenerator, test fakes)."""

    async def generate_joke(self, context: str, attempt: int, rejected: Sequence[str]) -> str:
        ...


@dataclass
class NovelJokeResult:
    """
    Outcome of one generate_novel() call.

    Attributes:
        text: Joke returned to the caller (accepted candidate or FALLBACK_JOKE)
        state: ACCEPTED or EXHAUSTED
        attempts: Generation requests made (including failed ones)
        entry: Memory entry for the returned text
        rejected: Candidates rejected as duplicates, in order
        failures: Number of generation requests that failed
    """
    text: str
    state: NovelJokeState
    attempts: int
    entry: Optional[JokeEntry] = None
    rejected: List[str] = field(default_factory=list)
    failures: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.state == NovelJokeState.EXHAUSTED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON responses."""
        return {
            "joke": self.text,
            "state": self.state.value,
            "attempts": self.attempts,
            "joke_id": self.entry.id if self.entry else None,
            "rejected": list(self.rejected),
            "failures": self.failures,
            "is_fallback": self.is_fallback,
        }


class ProviderJokeGenerator:
    """JokeGenerator backed by a ModelProvider (Gemini / Claude)."""

    def __init__(self, provider: ModelProvider, store: Optional[JokeStore] = None):
        """
        Args:
            provider: LLM provider used for each attempt
            store: Optional joke store; its most recent jokes are listed in
                the prompt as material to avoid
        """
        self.provider = provider
        self.store = store

    async def generate_joke(self, context: str, attempt: int, rejected: Sequence[str]) -> str:
        recent = []
        if self.store is not None:
            recent = [j.text for j in self.store.recent(RECENT_JOKES_IN_PROMPT)]

        result = await self.provider.generate(
            build_system_prompt(),
            build_user_prompt(context, attempt=attempt, rejected=rejected, recent=recent),
        )
        return clean_joke_response(result.text)


async def generate_novel(
    context: str,
    controller: JokeDedupController,
    generator: JokeGenerator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
) -> NovelJokeResult:
    """
    Generate a joke that is not a duplicate of anything in memory.

    Exactly one generate_joke() call per attempt; stops at the first novel
    candidate. Generation failures never propagate.

    Args:
        context: Description of the captured content
        controller: Dedup controller (owns the store)
        generator: Candidate source
        max_attempts: Attempt budget (>= 1)

    Returns:
        NovelJokeResult (ACCEPTED with the novel joke, or EXHAUSTED with FALLBACK_JOKE)

    Raises:
        ValueError: If max_attempts < 1
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    rejected: List[str] = []
    failures = 0
    state = NovelJokeState.ATTEMPTING

    logger.info(f"[NovelJoke] Start: max_attempts={max_attempts}, memory={len(controller.store)} jokes")

    for attempt in range(1, max_attempts + 1):
        logger.info(f"[NovelJoke] Attempt {attempt}/{max_attempts} (state={state.value})")

        try:
            candidate = await generator.generate_joke(context, attempt, list(rejected))
        except Exception as e:
            failures += 1
            logger.warning(f"[NovelJoke] Generation failed on attempt {attempt}: {e}")
            continue

        candidate = (candidate or "").strip()
        if not candidate:
            failures += 1
            logger.warning(f"[NovelJoke] Empty candidate on attempt {attempt}")
            continue

        dedup_result = await controller.check(candidate)
        if dedup_result.is_duplicate:
            rejected.append(candidate)
            logger.info(
                f"[NovelJoke] Decision=RETRY, reason={dedup_result.reason}, "
                f"score={dedup_result.similarity_score:.4f}"
            )
            continue

        entry = await controller.accept(candidate, dedup_result)
        state = NovelJokeState.ACCEPTED
        logger.info(f"[NovelJoke] Decision=ACCEPT on attempt {attempt}: \"{candidate[:60]}\"")
        return NovelJokeResult(
            text=candidate,
            state=state,
            attempts=attempt,
            entry=entry,
            rejected=rejected,
            failures=failures,
        )

    state = NovelJokeState.EXHAUSTED
    logger.info(
        f"[NovelJoke] Decision=FALLBACK, Reason=AllAttemptsExhausted "
        f"(duplicates={len(rejected)}, failures={failures})"
    )
    entry = await controller.accept(FALLBACK_JOKE)

    return NovelJokeResult(
        text=FALLBACK_JOKE,
        state=state,
        attempts=max_attempts,
        entry=entry,
        rejected=rejected,
        failures=failures,
    )
