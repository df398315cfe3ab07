"""Tests for the cross-day trend model."""

import pytest

from topic_radar.intel.models import RawTopicRecord, TrendState, TrendTopic
from topic_radar.intel.trends import (
    assign_ranks,
    build_trend_topics,
    classify_trend,
    get_new_today_top,
    get_trending_overall_top,
    momentum_score,
)

TODAY = "2026-03-05"
D1 = "2026-03-04"
D2 = "2026-03-03"
D3 = "2026-03-02"
D5 = "2026-02-28"


def _row(date, title, posts, keyword="robotics", category="ecosystem", urls=(), topic_key=None):
    return RawTopicRecord(
        date=date,
        platform="reddit",
        keyword=keyword,
        category=category,
        topic_title=title,
        post_count=posts,
        sample_urls=tuple(urls),
        topic_key=topic_key,
    )


def _only(records, today=TODAY, category="ecosystem") -> TrendTopic:
    topics = build_trend_topics(records, category, today)
    assert len(topics) == 1
    return topics[0]


# =============================================================================
# Score and state
# =============================================================================


def test_score_formula():
    """today + half of yesterday - half of the day before."""
    topic = _only([
        _row(TODAY, "Robotics arm benchmark", 10),
        _row(D1, "Robotics arm benchmark", 4),
        _row(D2, "Robotics arm benchmark", 6),
    ])
    assert (topic.today_count, topic.yesterday_count, topic.two_days_ago_count) == (10, 4, 6)
    assert topic.score == pytest.approx(9.0)
    assert topic.total_count == 20
    assert topic.first_seen == D2
    assert topic.last_seen == TODAY
    assert topic.ongoing_days == 3
    assert topic.trend_state == TrendState.RISING


def test_momentum_can_be_negative():
    assert momentum_score(0, 0, 4) == pytest.approx(-2.0)


def test_steady_plateau():
    """Same volume today and yesterday is steady."""
    topic = _only([_row(TODAY, "Robotics arm benchmark", 5), _row(D1, "Robotics arm benchmark", 5)])
    assert not topic.is_new_today
    assert topic.trend_state == TrendState.STEADY


def test_steady_after_two_quiet_days():
    """No posts today or yesterday after earlier activity is also steady."""
    topic = _only([_row(D3, "Robotics arm benchmark", 4)])
    assert (topic.today_count, topic.yesterday_count) == (0, 0)
    assert topic.trend_state == TrendState.STEADY
    assert topic.first_seen == D3
    assert topic.ongoing_days == 4
    assert topic.score == 0


def test_fading():
    """Less today than yesterday is fading."""
    topic = _only([_row(TODAY, "Robotics arm benchmark", 3), _row(D1, "Robotics arm benchmark", 7)])
    assert topic.trend_state == TrendState.FADING


def test_new_today():
    """First seen today is new, whatever the counts."""
    topic = _only([_row(TODAY, "Robotics arm benchmark", 2)])
    assert topic.is_new_today
    assert topic.trend_state == TrendState.NEW
    assert topic.ongoing_days == 1


def test_classify_trend_order():
    """new wins over rising, fading needs yesterday volume."""
    assert classify_trend(3, 0, True) == TrendState.NEW
    assert classify_trend(3, 1, False) == TrendState.RISING
    assert classify_trend(3, 7, False) == TrendState.FADING
    assert classify_trend(5, 5, False) == TrendState.STEADY
    assert classify_trend(0, 0, False) == TrendState.STEADY


# =============================================================================
# Series, titles, URLs
# =============================================================================


def test_dense_series_covers_every_date_in_window():
    """Each topic's series spans all dates in the input, zero-filled."""
    topics = build_trend_topics([
        _row(D2, "Rust compiler speedups", 3, keyword="rust"),
        _row(TODAY, "Quantum sensor startup funding", 4, keyword="quantum"),
        _row(D1, "Unrelated enterprise item", 9, category="enterprise"),
    ], "ecosystem", TODAY)
    assert len(topics) == 2
    for topic in topics:
        assert [p.date for p in topic.data] == [D2, D1, TODAY]
    rust = next(t for t in topics if t.keyword == "rust")
    assert [p.posts for p in rust.data] == [3, 0, 0]


def test_title_follows_latest_phrasing():
    """A row dated today replaces the title for its key."""
    topic = _only([
        _row(D1, "Old phrasing of the story", 2, topic_key="k1"),
        _row(TODAY, "Fresh phrasing of the story", 1, topic_key="k1"),
    ])
    assert topic.key == "k1"
    assert topic.title == "Fresh phrasing of the story"


def test_title_without_today_keeps_first_seen_row():
    """Without a row for today the first row read supplies the title."""
    topic = _only([
        _row(D1, "Latest older phrasing", 2, topic_key="k1"),
        _row(D2, "Oldest phrasing", 1, topic_key="k1"),
    ])
    assert topic.title == "Latest older phrasing"


def test_primary_url_prefers_recent_dates():
    """Today, then yesterday, then the newest active date."""
    topic = _only([
        _row(D3, "Robotics arm benchmark", 1, urls=["https://a.example/1"]),
        _row(D1, "Robotics arm benchmark", 1, urls=["https://b.example/1", "https://c.example/1"]),
    ])
    assert topic.primary_url == "https://b.example/1"
    assert topic.urls == ["https://a.example/1", "https://b.example/1", "https://c.example/1"]


def test_primary_url_falls_back_to_newest_active_date():
    topic = _only([
        _row(D5, "Robotics arm benchmark", 1, urls=["https://z.example/1"]),
        _row(D3, "Robotics arm benchmark", 1, urls=["https://a.example/1"]),
    ])
    assert topic.primary_url == "https://a.example/1"


def test_primary_url_none_without_urls():
    assert _only([_row(TODAY, "Robotics arm benchmark", 1)]).primary_url is None


# =============================================================================
# Near-duplicate merge
# =============================================================================


def test_near_duplicate_keys_merge():
    """Different keys for the same story merge and sum their series."""
    topic = _only([
        _row(TODAY, "OpenAI launches GPT-6", 4, keyword="openai"),
        _row(D1, "GPT-6 launch: OpenAI", 6, keyword="chatgpt"),
    ])
    assert topic.title == "OpenAI launches GPT-6"
    assert topic.key == "ecosystem::openai::openai launches gpt 6"
    assert (topic.today_count, topic.yesterday_count, topic.total_count) == (4, 6, 10)
    assert topic.first_seen == D1
    assert not topic.is_new_today
    assert topic.trend_state == TrendState.FADING


def test_merge_keeps_title_of_busier_today_member():
    """The member with more posts today supplies title and key."""
    topic = _only([
        _row(D1, "GPT-6 launch: OpenAI", 6, keyword="chatgpt"),
        _row(TODAY, "OpenAI launches GPT-6", 4, keyword="openai"),
    ])
    assert topic.title == "OpenAI launches GPT-6"
    assert topic.key == "ecosystem::openai::openai launches gpt 6"


def test_merge_unions_urls_and_keeps_existing_primary():
    topic = _only([
        _row(D1, "GPT-6 launch: OpenAI", 6, keyword="chatgpt", urls=["https://a.example/1"]),
        _row(TODAY, "OpenAI launches GPT-6", 4, keyword="openai", urls=["https://b.example/1", "https://a.example/1"]),
    ])
    assert topic.primary_url == "https://a.example/1"
    assert topic.urls == ["https://a.example/1", "https://b.example/1"]


# =============================================================================
# Ranks and views
# =============================================================================


def _topic(key, today=0, score=0.0, yesterday=0, total=0, new=False) -> TrendTopic:
    return TrendTopic(
        key=key, title=key, keyword="", category="ecosystem",
        today_count=today, score=score, yesterday_count=yesterday,
        total_count=total, is_new_today=new,
    )


def test_today_rank_breaks_ties_by_score():
    """Equal counts are ordered by score."""
    a, b, c = _topic("A", 10, 5), _topic("B", 10, 7), _topic("C", 4, 9)
    assign_ranks([a, b, c])
    assert sorted([a, b, c], key=lambda t: t.today_rank) == [b, a, c]
    assert (a.today_rank, b.today_rank, c.today_rank) == (2, 1, 3)


def test_yesterday_rank_and_unranked():
    """Only topics with volume get a rank; ties broken by total."""
    a = _topic("A", yesterday=3, total=5)
    b = _topic("B", yesterday=3, total=9)
    c = _topic("C")
    assign_ranks([a, b, c])
    assert (a.yesterday_rank, b.yesterday_rank, c.yesterday_rank) == (2, 1, None)
    assert c.today_rank is None


def test_empty_input():
    """No records, no topics, no errors."""
    assert build_trend_topics([], "ecosystem", TODAY) == []
    assert assign_ranks([]) == []
    assert get_new_today_top([], 5) == []
    assert get_trending_overall_top([], 5) == []


def test_build_assigns_ranks():
    topics = build_trend_topics([
        _row(TODAY, "Rust compiler speedups", 3, keyword="rust"),
        _row(TODAY, "Quantum sensor startup funding", 8, keyword="quantum"),
        _row(D1, "Quantum sensor startup funding", 2, keyword="quantum"),
    ], "ecosystem", TODAY)
    ranks = {t.keyword: (t.today_rank, t.yesterday_rank) for t in topics}
    assert ranks == {"quantum": (1, 1), "rust": (2, None)}


def test_new_today_top():
    """Only topics new today with posts, busiest first."""
    topics = [
        _topic("A", today=3, score=3, new=True),
        _topic("B", today=9, score=9, new=True),
        _topic("C", today=20, score=20),
        _topic("D", today=0, new=True),
    ]
    assert [t.key for t in get_new_today_top(topics, 5)] == ["B", "A"]
    assert [t.key for t in get_new_today_top(topics, 1)] == ["B"]


def test_trending_overall_top():
    """Any topic with volume, by score then total."""
    topics = [
        _topic("A", score=2, total=4),
        _topic("B", score=5, total=5),
        _topic("C", score=2, total=10),
        _topic("D", score=9, total=0),
    ]
    assert [t.key for t in get_trending_overall_top(topics, 3)] == ["B", "C", "A"]


def test_to_dict_field_names():
    """Serialized topics carry the dashboard's field names and nullability."""
    topic = _only([_row(TODAY, "Robotics arm benchmark", 2)])
    data = topic.to_dict()
    assert set(data) == {
        "key", "title", "keyword", "category", "primaryUrl", "todayCount", "yesterdayCount",
        "twoDaysAgoCount", "todayRank", "yesterdayRank", "totalCount", "score", "firstSeen",
        "lastSeen", "ongoingDays", "isNewToday", "trendState", "data", "urls",
    }
    assert data["trendState"] == "new"
    assert data["primaryUrl"] is None
    assert data["todayRank"] == 1
    assert data["yesterdayRank"] is None
    assert data["data"] == [{"date": TODAY, "posts": 2}]
