"""Word-cloud model: short event labels weighted by trend momentum."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse

from topic_radar.intel.models import TrendState, TrendTopic
from topic_radar.intel.similarity import normalize_text

MIN_WEIGHT = 0.25

STATE_STRENGTH = {
    TrendState.NEW: 4,
    TrendState.RISING: 3,
    TrendState.STEADY: 2,
    TrendState.FADING: 1,
}


@dataclass
class CloudWord:
    key: str
    label: str
    weight: float
    state: TrendState
    urls: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "weight": self.weight,
            "state": self.state.value,
            "urls": list(self.urls),
        }


def cloud_event_label(title: str, keyword: str) -> str:
    """Two capitalized title words that are not part of the keyword."""
    words = normalize_text(title).split()
    keyword_words = set(normalize_text(keyword).split())
    filtered = [w for w in words if len(w) > 2 and w not in keyword_words]
    chosen = filtered[:2] if len(filtered) >= 2 else words[:2]
    return " ".join(w[:1].upper() + w[1:] for w in chosen)


def url_label(url: str) -> str:
    try:
        host = (urlparse(url).hostname or "").replace("www.", "", 1)
    except ValueError:
        return "Read article"
    if "reddit.com" in host:
        return "Reddit thread"
    if "ycombinator.com" in host:
        return "HN thread"
    if "twitter.com" in host or "x.com" in host:
        return "Twitter thread"
    return "Read article"


def build_cloud_words(topics: list[TrendTopic]) -> list[CloudWord]:
    """One word per distinct label; heavier and stronger-state topics win a shared label."""
    max_score = max([1.0, *(t.score for t in topics)])
    by_label: dict[str, CloudWord] = {}

    for topic in topics:
        label = cloud_event_label(topic.title, topic.keyword)
        weight = max(MIN_WEIGHT, topic.score / max_score)
        word = by_label.get(label)
        if word is None:
            by_label[label] = CloudWord(
                key=topic.key,
                label=label,
                weight=weight,
                state=topic.trend_state,
                urls=list(topic.urls),
            )
            continue

        word.weight = max(word.weight, weight)
        word.urls = list(dict.fromkeys([*word.urls, *topic.urls]))
        if STATE_STRENGTH[topic.trend_state] > STATE_STRENGTH[word.state]:
            word.state = topic.trend_state
            word.key = topic.key

    return list(by_label.values())
