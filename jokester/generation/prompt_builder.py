"""
Prompt Builder - system/user prompt construction and response cleanup.

The generator is asked for exactly one short joke per call. On retries the
candidates already rejected as duplicates are listed so the model steers
away from them.
"""

import logging
import re
from typing import Optional, Sequence

logger = logging.getLogger("jokester")

SYSTEM_PROMPT = (
    "You are that sarcastic friend who always has the perfect witty comeback. "
    "Focus ONLY on what's happening in the main content - ignore sidebars, menus, "
    "or UI elements. Make SHORT, snappy comments like a friend would whisper during "
    "a meeting. Think: \"Oh great, another synergy slide\" or \"Someone's really "
    "excited about pie charts today.\" Keep jokes under 15 words when possible - "
    "quick, clever remarks that are easy to deliver. Edgy is fine, hateful is not."
)

# Recent jokes shown to the model as "already used"
MAX_AVOID_EXAMPLES = 10

_CODE_FENCE_START = re.compile(r"^```(?:\w+)?\s*\n?")
_CODE_FENCE_END = re.compile(r"\n?```\s*$")
_BULLET_PREFIX = re.compile(r"^\s*(?:[*\-•]|\d+[.)])\s+")


def _format_avoid_section(rejected: Sequence[str], recent: Sequence[str]) -> str:
    """
    Format the list of jokes the model must not repeat.

    Args:
        rejected: Candidates rejected as duplicates in this generation
        recent: Recently accepted jokes from memory

    Returns:
        Formatted prompt section, or "" when there is nothing to avoid
    """
    avoid = list(rejected) + [j for j in recent if j not in rejected]
    avoid = avoid[:MAX_AVOID_EXAMPLES]
    if not avoid:
        return ""

    lines = ["", "Do NOT repeat or paraphrase any of these jokes:"]
    for joke in avoid:
        lines.append(f"- {joke}")
    return "\n".join(lines)


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(
    context: str,
    attempt: int = 1,
    rejected: Optional[Sequence[str]] = None,
    recent: Optional[Sequence[str]] = None
) -> str:
    """
    Build the user prompt for one generation attempt.

    Args:
        context: Description of the captured content
        attempt: 1-based attempt number
        rejected: Candidates already rejected as duplicates
        recent: Recently accepted jokes to steer away from

    Returns:
        str: Prompt text
    """
    parts = [
        "Here is what's on screen / being said right now:",
        context.strip() or "(nothing specific - riff on a boring meeting)",
        "",
        "Write exactly ONE short, funny joke about it.",
        "Return ONLY the joke text: no bullet, no quotes, no JSON, no commentary.",
    ]

    if attempt > 1:
        parts.append("")
        parts.append("Your previous attempt was too similar to a joke already told. "
                     "Take a completely different angle this time.")

    avoid_section = _format_avoid_section(rejected or [], recent or [])
    if avoid_section:
        parts.append(avoid_section)

    prompt = "\n".join(parts)
    logger.debug(f"[PromptBuilder] Built prompt for attempt {attempt} ({len(prompt)} chars)")
    return prompt


def clean_joke_response(text: Optional[str]) -> str:
    """
    Reduce a raw model response to a single joke line.

    Strips markdown code fences, bullet prefixes and wrapping quotes, and
    keeps the first non-empty line.

    Args:
        text: Raw response text

    Returns:
        str: Cleaned joke, "" when nothing usable remains
    """
    if not text:
        return ""

    cleaned = _CODE_FENCE_START.sub("", text.strip())
    cleaned = _CODE_FENCE_END.sub("", cleaned).strip()

    for line in cleaned.splitlines():
        line = _BULLET_PREFIX.sub("", line).strip()
        if len(line) >= 2 and line[0] == line[-1] and line[0] in "\"'":
            line = line[1:-1].strip()
        if line:
            return line
    return ""
