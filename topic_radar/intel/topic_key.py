"""Stable identity for "same topic, same keyword, same category" rows."""

from __future__ import annotations

from topic_radar.intel.similarity import normalize_text

KEY_SEPARATOR = "::"


def build_topic_key(category: str, keyword: str, topic_title: str) -> str:
    """``category::keyword::normalized title``, case- and whitespace-insensitive.

    Only the title is punctuation-collapsed; category and keyword are lower-cased as given.
    """
    return KEY_SEPARATOR.join([
        (category or "").lower(),
        (keyword or "").lower(),
        normalize_text(topic_title),
    ])


def topic_key_for(record) -> str:
    """Key for a record, preferring the one already stored with it."""
    if record.topic_key and record.topic_key.strip():
        return record.topic_key
    return build_topic_key(record.category, record.keyword, record.topic_title)
