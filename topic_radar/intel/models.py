"""Topic data models: raw collector rows and the merged/trend views built from them."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum


class TrendState(str, Enum):
    NEW = "new"
    RISING = "rising"
    STEADY = "steady"
    FADING = "fading"


def _url_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return [str(u) for u in value if u]


@dataclass(frozen=True)
class RawTopicRecord:
    """One topic observed on one platform for one keyword on one local calendar day."""

    date: str  # YYYY-MM-DD, local zone
    platform: str  # 'hackernews', 'reddit', 'twitter', ...
    keyword: str
    category: str  # 'ecosystem', 'enterprise'
    topic_title: str
    summary: str = ""
    post_count: int = 0
    sample_urls: tuple[str, ...] = ()
    topic_key: str | None = None  # assigned by the store; authoritative once set

    def to_db_dict(self) -> dict:
        return {
            "date": self.date,
            "platform": self.platform,
            "keyword": self.keyword,
            "category": self.category,
            "topic_key": self.topic_key,
            "topic_title": self.topic_title,
            "summary": self.summary,
            "post_count": self.post_count,
            "sample_urls": json.dumps(list(self.sample_urls)),
        }

    @classmethod
    def from_db_row(cls, row) -> RawTopicRecord:
        data = dict(row)
        return cls(
            date=str(data["date"]),
            platform=data["platform"],
            keyword=data["keyword"],
            category=data["category"],
            topic_title=data["topic_title"],
            summary=data.get("summary") or "",
            post_count=int(data.get("post_count") or 0),
            sample_urls=tuple(_url_list(data.get("sample_urls"))),
            topic_key=data.get("topic_key") or None,
        )

    @classmethod
    def from_dict(cls, data: dict) -> RawTopicRecord:
        """Build from a JSON feed row (same field names as the store)."""
        missing = [k for k in ("date", "platform", "keyword", "topic_title") if not data.get(k)]
        if missing:
            raise ValueError(f"Topic row missing required field(s): {', '.join(missing)}")
        return cls.from_db_row({**data, "category": data.get("category") or "ecosystem"})


@dataclass
class TopicLink:
    url: str
    platform: str

    def to_dict(self) -> dict:
        return {"url": self.url, "platform": self.platform}


@dataclass
class MergedTopic:
    """A same-day thread: several raw rows describing one story."""

    topic_title: str
    summary: str
    category: str
    post_count: int
    links: list[TopicLink] = field(default_factory=list)
    platforms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "topicTitle": self.topic_title,
            "summary": self.summary,
            "category": self.category,
            "postCount": self.post_count,
            "links": [link.to_dict() for link in self.links],
            "platforms": list(self.platforms),
        }


@dataclass
class DailyPoint:
    date: str
    posts: int

    def to_dict(self) -> dict:
        return {"date": self.date, "posts": self.posts}


@dataclass
class TrendTopic:
    """A deduplicated story with its dense daily series and derived momentum fields."""

    key: str
    title: str
    keyword: str
    category: str
    primary_url: str | None = None
    data: list[DailyPoint] = field(default_factory=list)
    today_count: int = 0
    yesterday_count: int = 0
    two_days_ago_count: int = 0
    total_count: int = 0
    score: float = 0.0
    first_seen: str = ""
    last_seen: str = ""
    ongoing_days: int = 1
    is_new_today: bool = False
    trend_state: TrendState = TrendState.STEADY
    today_rank: int | None = None
    yesterday_rank: int | None = None
    urls: list[str] = field(default_factory=list)

    def posts_on(self, day: str) -> int:
        for point in self.data:
            if point.date == day:
                return point.posts
        return 0

    def to_dict(self) -> dict:
        """Serialize with the camelCase field names the dashboard consumes."""
        return {
            "key": self.key,
            "title": self.title,
            "keyword": self.keyword,
            "category": self.category,
            "primaryUrl": self.primary_url,
            "todayCount": self.today_count,
            "yesterdayCount": self.yesterday_count,
            "twoDaysAgoCount": self.two_days_ago_count,
            "todayRank": self.today_rank,
            "yesterdayRank": self.yesterday_rank,
            "totalCount": self.total_count,
            "score": self.score,
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
            "ongoingDays": self.ongoing_days,
            "isNewToday": self.is_new_today,
            "trendState": self.trend_state.value,
            "data": [point.to_dict() for point in self.data],
            "urls": list(self.urls),
        }
