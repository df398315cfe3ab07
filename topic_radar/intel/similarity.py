"""Token and character-level similarity for short topic texts.

Two independent signals:

- token sets: lower-cased, alphanumeric-only words with a cheap suffix stemmer
  and a stop list; compared with Jaccard and containment thresholds.
- whole text: substring containment for long strings, otherwise the Dice
  coefficient over character trigrams of the whitespace-stripped text.
"""

from __future__ import annotations

import re

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in", "into", "is",
    "it", "of", "on", "or", "that", "the", "to", "with", "will", "after", "amid",
    "this", "these", "those", "over", "under", "its", "their", "than",
})

MIN_TOKEN_LENGTH = 3
TEXT_CONTAINMENT_MIN_LENGTH = 24
TRIGRAM_DICE_THRESHOLD = 0.72

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case, replace non-alphanumerics with spaces, collapse whitespace."""
    lowered = _NON_ALNUM.sub(" ", (text or "").lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def stem_token(token: str) -> str:
    """Strip one of ing/ed/es/s from tokens longer than four characters."""
    if len(token) <= 4:
        return token
    for suffix in ("ing", "ed", "es", "s"):
        if token.endswith(suffix):
            return token[: -len(suffix)]
    return token


def token_set(text: str) -> set[str]:
    """Stemmed content tokens of ``text`` (order and frequency discarded)."""
    tokens = set()
    for raw in normalize_text(text).split(" "):
        token = stem_token(raw)
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS:
            tokens.add(token)
    return tokens


def intersection_size(a: set[str], b: set[str]) -> int:
    small, large = (a, b) if len(a) <= len(b) else (b, a)
    return sum(1 for token in small if token in large)


def is_similar_topic(a: set[str], b: set[str]) -> bool:
    """Token-set match: three shared tokens with moderate overlap, or two with high containment."""
    if not a or not b:
        return False

    shared = intersection_size(a, b)
    union = len(a) + len(b) - shared
    jaccard = shared / union if union else 0.0
    containment = shared / min(len(a), len(b))

    if shared >= 3 and (jaccard >= 0.28 or containment >= 0.55):
        return True
    return shared >= 2 and containment >= 0.72


def char_trigrams(text: str) -> set[str]:
    compact = _WHITESPACE.sub("", text)
    if len(compact) < 3:
        return set()
    return {compact[i : i + 3] for i in range(len(compact) - 2)}


def trigram_dice(a: str, b: str) -> float:
    """Dice coefficient over character trigrams; 0.0 when either side is too short."""
    a_tri = char_trigrams(a)
    b_tri = char_trigrams(b)
    if not a_tri or not b_tri:
        return 0.0
    return 2 * len(a_tri & b_tri) / (len(a_tri) + len(b_tri))


def is_similar_text(a_text: str, b_text: str) -> bool:
    """Whole-text match on normalized strings."""
    a = normalize_text(a_text)
    b = normalize_text(b_text)
    if not a or not b:
        return False

    if len(a) >= TEXT_CONTAINMENT_MIN_LENGTH and len(b) >= TEXT_CONTAINMENT_MIN_LENGTH and (a in b or b in a):
        return True
    return trigram_dice(a, b) >= TRIGRAM_DICE_THRESHOLD
