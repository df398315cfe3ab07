"""Tests for the word-cloud model."""

import pytest

from topic_radar.intel.cloud import MIN_WEIGHT, build_cloud_words, cloud_event_label, url_label
from topic_radar.intel.models import TrendState, TrendTopic


def _topic(key, title, keyword, score, state=TrendState.STEADY, urls=()):
    return TrendTopic(
        key=key, title=title, keyword=keyword, category="ecosystem",
        score=score, trend_state=state, urls=list(urls),
    )


def test_label_skips_keyword_words():
    assert cloud_event_label("Claude Code ships new sandbox mode", "claude code") == "Ships New"


def test_label_falls_back_to_first_words():
    """When fewer than two words remain, the first two title words are used."""
    assert cloud_event_label("Claude Code", "claude code") == "Claude Code"
    assert cloud_event_label("Claude Code rocks", "claude code") == "Claude Code"


def test_label_drops_short_words():
    assert cloud_event_label("AI is on a roll with robots", "") == "Roll With"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.reddit.com/r/x", "Reddit thread"),
        ("https://news.ycombinator.com/item?id=1", "HN thread"),
        ("https://twitter.com/a/status/1", "Twitter thread"),
        ("https://x.com/a/status/1", "Twitter thread"),
        ("https://example.org/post", "Read article"),
        ("http://[::1", "Read article"),
    ],
)
def test_url_label(url, expected):
    assert url_label(url) == expected


def test_weights_are_relative_to_top_score():
    words = build_cloud_words([
        _topic("a", "Robotics arm benchmark", "robotics", 8.0),
        _topic("b", "Rust compiler speedups", "rust", 4.0),
        _topic("c", "Quantum sensor funding", "quantum", -2.0),
    ])
    weights = {w.key: w.weight for w in words}
    assert weights == {"a": 1.0, "b": 0.5, "c": MIN_WEIGHT}


def test_small_scores_are_not_inflated():
    """A top score under one does not scale everything up."""
    [word] = build_cloud_words([_topic("a", "Robotics arm benchmark", "robotics", 0.5)])
    assert word.weight == 0.5


def test_shared_label_merges():
    """Topics sharing a label keep the max weight, union URLs, and the stronger state."""
    words = build_cloud_words([
        _topic("a", "Claude Code ships new sandbox", "claude code", 8.0, TrendState.FADING, ["u1"]),
        _topic("b", "Claude Code ships new plugins", "claude code", 2.0, TrendState.NEW, ["u2", "u1"]),
    ])
    assert len(words) == 1
    word = words[0]
    assert word.label == "Ships New"
    assert word.weight == 1.0
    assert word.state == TrendState.NEW
    assert word.key == "b"
    assert word.urls == ["u1", "u2"]
    assert word.to_dict()["state"] == "new"


def test_empty():
    assert build_cloud_words([]) == []
