"""Greedy document-frequency signature clustering.

Both the same-day thread merge and the cross-day trend merge run through
:class:`SignatureClusterer`. Each item is compared against the existing
clusters in creation order and joins the *first* one that matches; a new
cluster is opened otherwise. The scan is first-fit and therefore not
transitive: an item may be close to two clusters that are not close to each
other, and the one created earlier wins it. Swapping this for a union-find
or a best-match scan changes which rows merge.

A cluster matches an item when any of these holds:

1. they share a story key;
2. their rarity signatures overlap in at least three tokens;
3. signatures overlap in two tokens and the token sets are similar;
4. the token sets are similar;
5. the accumulated match text is similar to the item's text.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, TypeVar

from topic_radar.intel.similarity import is_similar_text, is_similar_topic, token_set
from topic_radar.utils.logger import get_logger

logger = get_logger()

T = TypeVar("T")
P = TypeVar("P")

SIGNATURE_SIZE = 8
UNSEEN_DOC_FREQ = 9999


def build_doc_freq(texts: Iterable[str]) -> Counter:
    """Number of texts each token appears in (once per text)."""
    doc_freq: Counter = Counter()
    for text in texts:
        doc_freq.update(token_set(text))
    return doc_freq


def build_signature(tokens: set[str], doc_freq: Counter, size: int = SIGNATURE_SIZE) -> set[str]:
    """The ``size`` rarest tokens, ties broken alphabetically."""
    ranked = sorted(tokens, key=lambda token: (doc_freq.get(token, UNSEEN_DOC_FREQ), token))
    return set(ranked[:size])


def signature_overlap(a: set[str], b: set[str]) -> int:
    return len(a & b)


@dataclass
class Cluster(Generic[P]):
    """Accumulated evidence for one group plus the merged output payload."""

    payload: P
    tokens: set[str]
    signature: set[str]
    match_text: str
    story_keys: set[str] = field(default_factory=set)
    size: int = 1

    def matches(self, tokens: set[str], signature: set[str], text: str, story_key: str | None) -> bool:
        if story_key and story_key in self.story_keys:
            return True
        overlap = signature_overlap(self.signature, signature)
        if overlap >= 3:
            return True
        similar_tokens = is_similar_topic(self.tokens, tokens)
        if overlap >= 2 and similar_tokens:
            return True
        if similar_tokens:
            return True
        return is_similar_text(self.match_text, text)

    def absorb(self, tokens: set[str], signature: set[str], text: str, story_key: str | None, max_text: int) -> None:
        self.tokens |= tokens
        self.signature |= signature
        if story_key:
            self.story_keys.add(story_key)
        self.match_text = f"{self.match_text} {text}"[:max_text]
        self.size += 1


class SignatureClusterer(Generic[T, P]):
    """First-fit clusterer parameterized over item shape and merge payload.

    Args:
        text_of: text used for tokens, signatures and whole-text matching.
        story_key_of: story key for an item, or ``None``.
        make_payload: builds the output payload for a cluster's first item.
        merge_payload: folds an item into an existing payload and returns the
            (possibly new) payload.
        max_match_text: cap on the accumulated match text; the oldest text is kept.
    """

    def __init__(
        self,
        text_of: Callable[[T], str],
        story_key_of: Callable[[T], str | None],
        make_payload: Callable[[T], P],
        merge_payload: Callable[[P, T], P],
        max_match_text: int = 1200,
    ):
        self.text_of = text_of
        self.story_key_of = story_key_of
        self.make_payload = make_payload
        self.merge_payload = merge_payload
        self.max_match_text = max_match_text

    def cluster(self, items: list[T]) -> list[Cluster[P]]:
        """Cluster ``items`` in input order; returns clusters in creation order."""
        texts = [self.text_of(item) for item in items]
        doc_freq = build_doc_freq(texts)
        clusters: list[Cluster[P]] = []

        for item, text in zip(items, texts):
            tokens = token_set(text)
            signature = build_signature(tokens, doc_freq)
            story_key = self.story_key_of(item)

            match = next(
                (c for c in clusters if c.matches(tokens, signature, text, story_key)),
                None,
            )
            if match is None:
                clusters.append(Cluster(
                    payload=self.make_payload(item),
                    tokens=set(tokens),
                    signature=set(signature),
                    match_text=text[: self.max_match_text],
                    story_keys={story_key} if story_key else set(),
                ))
                continue

            match.payload = self.merge_payload(match.payload, item)
            match.absorb(tokens, signature, text, story_key, self.max_match_text)

        logger.debug("Clustered %d items into %d groups", len(items), len(clusters))
        return clusters

    def merge(self, items: list[T]) -> list[P]:
        """Cluster and return only the merged payloads."""
        return [c.payload for c in self.cluster(items)]
