"""Heuristic story identity from named-entity and event hints.

A story key is only produced when several entities corroborate each other, so
a ``None`` result is the common case and callers fall back to weaker signals.
"""

from __future__ import annotations

from topic_radar.intel.similarity import token_set

ENTITY_HINTS = (
    "anthropic", "openai", "claude", "codex", "gemini", "mistral", "meta", "microsoft",
    "google", "pentagon", "trump", "white", "house", "eu", "senate", "fcc", "ftc",
)

# Stems, matched by substring against tokens
EVENT_HINTS = (
    "pressure", "pressur", "ban", "designat", "risk", "lawsuit", "sue", "fund", "valuation",
    "acquire", "launch", "release", "outage", "breach", "exploit", "vulnerab", "attack",
    "policy", "safety", "military", "classifi", "contract",
)

GOVERNMENT_CONFLICT_KEY = "story:anthropic-us-government-conflict"
_GOVERNMENT_CONFLICT_TERMS = ("military", "classifi", "designat", "ban")


def pick_hints(tokens: set[str], hints: tuple[str, ...]) -> list[str]:
    """Sorted hints that contain, or are contained in, any token."""
    matches = {
        hint
        for token in tokens
        for hint in hints
        if token in hint or hint in token
    }
    return sorted(matches)


def _is_government_conflict(tokens: set[str]) -> bool:
    if "anthropic" not in tokens:
        return False
    has_trump = "trump" in tokens
    has_pentagon = "pentagon" in tokens
    has_conflict = any(term in tokens for term in _GOVERNMENT_CONFLICT_TERMS)
    return (has_trump and has_pentagon) or ((has_trump or has_pentagon) and has_conflict)


def derive_story_key(title: str, summary: str = "", keyword: str = "") -> str | None:
    tokens = token_set(f"{title} {summary} {keyword}")

    if _is_government_conflict(tokens):
        return GOVERNMENT_CONFLICT_KEY

    entities = pick_hints(tokens, ENTITY_HINTS)
    events = pick_hints(tokens, EVENT_HINTS)

    if len(entities) >= 2 and events:
        return f"ent:{'+'.join(entities[:4])}|evt:{'+'.join(events[:3])}"
    if len(entities) >= 3:
        return f"ent:{'+'.join(entities[:4])}"
    return None
