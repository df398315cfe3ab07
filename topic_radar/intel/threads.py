"""Same-day thread merge: collapse one day's raw rows into display threads."""

from __future__ import annotations

from urllib.parse import urlparse

from topic_radar.intel.clustering import SignatureClusterer
from topic_radar.intel.models import MergedTopic, RawTopicRecord, TopicLink
from topic_radar.intel.story_key import derive_story_key
from topic_radar.utils.logger import get_logger

logger = get_logger()

SUMMARY_MATCH_CHARS = 220
THREAD_MATCH_TEXT_LIMIT = 1200
DEFAULT_MAX_TOPICS = 20

PLATFORM_LABELS = {"hackernews": "HN", "reddit": "Reddit", "twitter": "X"}

SOURCE_PRIORITY = [
    ("bbc.com", "BBC"),
    ("cnbc.com", "CNBC"),
    ("cnn.com", "CNN"),
    ("techcrunch.com", "TechCrunch"),
    ("reuters.com", "Reuters"),
    ("wired.com", "Wired"),
    ("cnet.com", "CNET"),
    ("theverge.com", "The Verge"),
    ("news.ycombinator.com", "Hacker News"),
    ("ycombinator.com", "Hacker News"),
]
FALLBACK_SOURCE = ("Source", 999)


def platform_label(platform: str) -> str:
    return PLATFORM_LABELS.get((platform or "").lower(), platform)


def source_info(url: str) -> tuple[str, int]:
    """Publisher label and display priority (lower first) for a link."""
    try:
        host = (urlparse(url).hostname or "").replace("www.", "", 1)
    except ValueError:
        return FALLBACK_SOURCE
    if not host:
        return FALLBACK_SOURCE

    for index, (domain, label) in enumerate(SOURCE_PRIORITY):
        if domain in host:
            return label, index
    if "reddit.com" in host:
        return "Reddit", 100
    if "twitter.com" in host or "x.com" in host:
        return "X", 101

    parts = host.split(".")
    if len(parts) >= 2:
        return parts[-2].upper(), 999
    return host.upper(), 999


def sorted_links(links: list[TopicLink]) -> list[TopicLink]:
    """Distinct links ordered by publisher priority, label, then platform label."""
    unique: dict[str, TopicLink] = {}
    for link in links:
        if link.url and link.url not in unique:
            unique[link.url] = link

    def sort_key(link: TopicLink):
        label, priority = source_info(link.url)
        return priority, label, platform_label(link.platform)

    return sorted(unique.values(), key=sort_key)


def _thread_text(record: RawTopicRecord) -> str:
    return f"{record.topic_title} {record.summary[:SUMMARY_MATCH_CHARS]}"


def _links_of(record: RawTopicRecord) -> list[TopicLink]:
    return [TopicLink(url=url, platform=record.platform) for url in record.sample_urls if url]


def _new_thread(record: RawTopicRecord) -> MergedTopic:
    links: list[TopicLink] = []
    _add_links(links, _links_of(record))
    return MergedTopic(
        topic_title=record.topic_title,
        summary=record.summary,
        category=record.category,
        post_count=record.post_count,
        links=links,
        platforms=[platform_label(record.platform)],
    )


def _add_links(existing: list[TopicLink], new: list[TopicLink]) -> None:
    seen = {link.url for link in existing}
    for link in new:
        if link.url not in seen:
            seen.add(link.url)
            existing.append(link)


def _merge_thread(thread: MergedTopic, record: RawTopicRecord) -> MergedTopic:
    thread.post_count += record.post_count
    if len(record.summary) > len(thread.summary):
        thread.summary = record.summary
    label = platform_label(record.platform)
    if label not in thread.platforms:
        thread.platforms.append(label)
    _add_links(thread.links, _links_of(record))
    return thread


thread_clusterer: SignatureClusterer[RawTopicRecord, MergedTopic] = SignatureClusterer(
    text_of=_thread_text,
    story_key_of=lambda r: derive_story_key(r.topic_title, r.summary, r.keyword),
    make_payload=_new_thread,
    merge_payload=_merge_thread,
    max_match_text=THREAD_MATCH_TEXT_LIMIT,
)


def merge_topic_threads(
    records: list[RawTopicRecord],
    category: str,
    *,
    date: str | None = None,
    limit: int | None = None,
) -> list[MergedTopic]:
    """Merge one category's rows into threads, busiest first.

    Pass ``date`` for the daily thread view. Without it every row of the
    category is merged regardless of day, which is how a whole lookback
    window is rolled up into threads. Rows are seeded highest-volume first
    so the busiest row of a group supplies its title.
    """
    rows = [
        r for r in records
        if r.category == category and (date is None or r.date == date)
    ]
    rows.sort(key=lambda r: r.post_count, reverse=True)

    threads = thread_clusterer.merge(rows)
    threads.sort(key=lambda t: t.post_count, reverse=True)
    logger.debug("Merged %d %s rows into %d threads", len(rows), category, len(threads))
    return threads[:limit] if limit is not None else threads
