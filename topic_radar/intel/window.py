"""Window selection over stored rows before they reach the trend model."""

from __future__ import annotations

from collections import Counter

from topic_radar.intel.models import RawTopicRecord
from topic_radar.intel.topic_key import topic_key_for
from topic_radar.utils.dates import date_offset

DEFAULT_TOP_KEYS = 20


def window_start(today: str, days: int) -> str:
    """First date of a ``days``-long lookback ending at ``today``."""
    return date_offset(today, -days)


def select_active_records(
    records: list[RawTopicRecord],
    today: str,
    top_keys: int = DEFAULT_TOP_KEYS,
) -> list[RawTopicRecord]:
    """Rows for keys seen today or yesterday, plus the ``top_keys`` busiest keys.

    Kept keys return their rows for the whole window so their sparklines stay complete.
    """
    yesterday = date_offset(today, -1)
    active: set[str] = set()
    totals: Counter = Counter()

    for record in records:
        key = topic_key_for(record)
        totals[key] += record.post_count
        if record.date in (today, yesterday):
            active.add(key)

    # most_common keeps first-seen order among equal totals
    active.update(key for key, _ in totals.most_common(top_keys))
    return [r for r in records if topic_key_for(r) in active]
