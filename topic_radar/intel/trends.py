"""Cross-day trend model: per-key daily series, near-duplicate merge, and ranks.

Everything here is computed from the records passed in and an explicit
``today`` (``YYYY-MM-DD`` in the collector's local zone); nothing reads the clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from topic_radar.intel.clustering import SignatureClusterer
from topic_radar.intel.models import DailyPoint, RawTopicRecord, TrendState, TrendTopic
from topic_radar.intel.story_key import derive_story_key
from topic_radar.intel.topic_key import topic_key_for
from topic_radar.utils.dates import date_offset, days_between
from topic_radar.utils.logger import get_logger

logger = get_logger()

TREND_MATCH_TEXT_LIMIT = 800


def momentum_score(today: int, yesterday: int, two_days_ago: int) -> float:
    """Short-horizon momentum; negative when the day before yesterday dominates."""
    return today + 0.5 * yesterday - 0.5 * two_days_ago


def classify_trend(today: int, yesterday: int, is_new_today: bool) -> TrendState:
    """new > rising > fading, everything else steady.

    Steady covers both a plateau (today == yesterday > 0) and two quiet days
    after earlier activity (today == yesterday == 0).
    """
    if is_new_today:
        return TrendState.NEW
    if today > yesterday:
        return TrendState.RISING
    if today < yesterday and yesterday > 0:
        return TrendState.FADING
    return TrendState.STEADY


def recompute_derived_fields(topic: TrendTopic, today: str) -> TrendTopic:
    """Rebuild every field derived from ``topic.data`` (expects the series sorted by date)."""
    active_dates = [point.date for point in topic.data if point.posts > 0]
    first_seen = active_dates[0] if active_dates else today
    last_seen = active_dates[-1] if active_dates else today

    today_count = topic.posts_on(today)
    yesterday_count = topic.posts_on(date_offset(today, -1))
    two_days_ago_count = topic.posts_on(date_offset(today, -2))
    is_new_today = first_seen == today

    return replace(
        topic,
        first_seen=first_seen,
        last_seen=last_seen,
        today_count=today_count,
        yesterday_count=yesterday_count,
        two_days_ago_count=two_days_ago_count,
        total_count=sum(point.posts for point in topic.data),
        score=momentum_score(today_count, yesterday_count, two_days_ago_count),
        is_new_today=is_new_today,
        ongoing_days=days_between(first_seen, today),
        trend_state=classify_trend(today_count, yesterday_count, is_new_today),
    )


@dataclass
class _KeyAccumulator:
    title: str
    keyword: str
    posts_by_date: dict[str, int] = field(default_factory=dict)
    urls_by_date: dict[str, list[str]] = field(default_factory=dict)
    urls: dict[str, None] = field(default_factory=dict)  # insertion-ordered set

    def add(self, record: RawTopicRecord, today: str) -> None:
        # The latest phrasing wins once a record reaches today
        if record.date >= today:
            self.title = record.topic_title
            self.keyword = record.keyword
        self.posts_by_date[record.date] = self.posts_by_date.get(record.date, 0) + record.post_count
        if record.sample_urls:
            self.urls_by_date.setdefault(record.date, []).extend(record.sample_urls)
        for url in record.sample_urls:
            self.urls.setdefault(url, None)

    def primary_url(self, today: str, active_dates: list[str]) -> str | None:
        for day in [today, date_offset(today, -1), *reversed(active_dates)]:
            urls = self.urls_by_date.get(day)
            if urls:
                return urls[0]
        return None


def _group_by_key(records: list[RawTopicRecord], category: str, today: str) -> dict[str, _KeyAccumulator]:
    by_key: dict[str, _KeyAccumulator] = {}
    for record in records:
        if record.category != category:
            continue
        key = topic_key_for(record)
        entry = by_key.get(key)
        if entry is None:
            entry = by_key[key] = _KeyAccumulator(title=record.topic_title, keyword=record.keyword)
        entry.add(record, today)
    return by_key


def _materialize(key: str, entry: _KeyAccumulator, category: str, all_dates: list[str], today: str) -> TrendTopic:
    active_dates = [d for d in all_dates if entry.posts_by_date.get(d, 0) > 0]
    topic = TrendTopic(
        key=key,
        title=entry.title,
        keyword=entry.keyword,
        category=category,
        primary_url=entry.primary_url(today, active_dates),
        data=[DailyPoint(date=d, posts=entry.posts_by_date.get(d, 0)) for d in all_dates],
        urls=list(entry.urls),
    )
    return recompute_derived_fields(topic, today)


def _merge_trend_topics(today: str):
    def merge(existing: TrendTopic, candidate: TrendTopic) -> TrendTopic:
        posts_by_date: dict[str, int] = {}
        for point in [*existing.data, *candidate.data]:
            posts_by_date[point.date] = posts_by_date.get(point.date, 0) + point.posts

        keep_candidate = candidate.today_count > existing.today_count
        primary_url = (
            existing.primary_url
            or candidate.primary_url
            or (existing.urls[0] if existing.urls else None)
            or (candidate.urls[0] if candidate.urls else None)
        )
        merged = replace(
            existing,
            key=candidate.key if keep_candidate else existing.key,
            title=candidate.title if keep_candidate else existing.title,
            primary_url=primary_url,
            data=[DailyPoint(date=d, posts=posts_by_date[d]) for d in sorted(posts_by_date)],
            urls=list(dict.fromkeys([*existing.urls, *candidate.urls])),
        )
        return recompute_derived_fields(merged, today)

    return merge


def merge_near_duplicate_trends(topics: list[TrendTopic], today: str) -> list[TrendTopic]:
    """Collapse per-key topics that describe the same story, summing their series."""
    clusterer: SignatureClusterer[TrendTopic, TrendTopic] = SignatureClusterer(
        text_of=lambda t: t.title,
        story_key_of=lambda t: derive_story_key(t.title, "", t.keyword),
        make_payload=lambda t: t,
        merge_payload=_merge_trend_topics(today),
        max_match_text=TREND_MATCH_TEXT_LIMIT,
    )
    return clusterer.merge(topics)


def assign_ranks(topics: list[TrendTopic]) -> list[TrendTopic]:
    """Fill ``today_rank`` and ``yesterday_rank`` in place; unranked topics get ``None``."""
    for topic in topics:
        topic.today_rank = None
        topic.yesterday_rank = None

    today_ranked = sorted(
        (t for t in topics if t.today_count > 0),
        key=lambda t: (-t.today_count, -t.score),
    )
    for rank, topic in enumerate(today_ranked, start=1):
        topic.today_rank = rank

    yesterday_ranked = sorted(
        (t for t in topics if t.yesterday_count > 0),
        key=lambda t: (-t.yesterday_count, -t.total_count),
    )
    for rank, topic in enumerate(yesterday_ranked, start=1):
        topic.yesterday_rank = rank
    return topics


def build_trend_topics(records: list[RawTopicRecord], category: str, today: str) -> list[TrendTopic]:
    """Build ranked, deduplicated trend topics for one category over the records' window.

    Every topic's series spans all distinct dates present in ``records``
    (any category), zero-filled where the topic had no posts.
    """
    all_dates = sorted({record.date for record in records})
    by_key = _group_by_key(records, category, today)
    topics = [_materialize(key, entry, category, all_dates, today) for key, entry in by_key.items()]

    deduped = merge_near_duplicate_trends(topics, today)
    logger.debug("%s: %d keys merged into %d trend topics", category, len(topics), len(deduped))
    return assign_ranks(deduped)


def get_new_today_top(topics: list[TrendTopic], top_n: int) -> list[TrendTopic]:
    """Topics first seen today, busiest first."""
    fresh = [t for t in topics if t.is_new_today and t.today_count > 0]
    fresh.sort(key=lambda t: (-t.today_count, -t.score))
    return fresh[:top_n]


def get_trending_overall_top(topics: list[TrendTopic], top_n: int) -> list[TrendTopic]:
    """Topics with any volume in the window, by momentum."""
    active = [t for t in topics if t.total_count > 0]
    active.sort(key=lambda t: (-t.score, -t.total_count))
    return active[:top_n]
