"""Tests for database module."""

import tempfile
from pathlib import Path

import pytest

from topic_radar.db import Database
from topic_radar.intel.models import RawTopicRecord


@pytest.fixture
def db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield Database(db_path)


def _record(**overrides) -> RawTopicRecord:
    data = {
        "date": "2026-03-05",
        "platform": "reddit",
        "keyword": "openai",
        "category": "ecosystem",
        "topic_title": "OpenAI launches GPT-6",
        "summary": "Launch thread",
        "post_count": 10,
        "sample_urls": ("https://example.org/a",),
    }
    data.update(overrides)
    return RawTopicRecord(**data)


def test_schema_creation(db):
    """Database creates all tables on init."""
    tables = db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    table_names = {row["name"] for row in tables}
    assert {"emerging_topics", "run_log", "schema_version"}.issubset(table_names)


def test_reopen_is_idempotent(db):
    """Opening the same file twice keeps one schema version row."""
    Database(db.db_path)
    rows = db.execute("SELECT version FROM schema_version")
    assert len(rows) == 1


def test_upsert_and_get_topic(db):
    """Insert and read back a topic row with its computed key."""
    key = db.upsert_topic(_record())
    assert key == "ecosystem::openai::openai launches gpt 6"

    [row] = db.get_topics("2026-03-05")
    assert row.topic_key == key
    assert row.post_count == 10
    assert row.sample_urls == ("https://example.org/a",)
    assert row.summary == "Launch thread"


def test_upsert_replaces_same_day_row(db):
    """Re-collecting the same topic on the same day overwrites counts and URLs."""
    db.upsert_topic(_record())
    db.upsert_topic(_record(post_count=25, sample_urls=("https://example.org/b",), topic_title="OpenAI Launches GPT-6!"))
    rows = db.get_topics("2026-03-05")
    assert len(rows) == 1
    assert rows[0].post_count == 25
    assert rows[0].sample_urls == ("https://example.org/b",)
    assert rows[0].topic_title == "OpenAI Launches GPT-6!"
    assert db.count_topics() == 1


def test_upsert_keeps_distinct_platforms_and_days(db):
    count = db.upsert_topics([
        _record(),
        _record(platform="hackernews"),
        _record(date="2026-03-04"),
        _record(category="enterprise"),
    ])
    assert count == 4
    assert db.count_topics() == 4


def test_stored_key_is_kept(db):
    """A record carrying a key is stored under that key."""
    db.upsert_topic(_record(topic_key="legacy::key"))
    [row] = db.get_topics("2026-03-01")
    assert row.topic_key == "legacy::key"


def test_get_topics_filters(db):
    """Date range and category filters, newest day first."""
    db.upsert_topics([
        _record(date="2026-03-01"),
        _record(date="2026-03-03", category="enterprise"),
        _record(date="2026-03-05"),
    ])
    assert [r.date for r in db.get_topics("2026-03-02")] == ["2026-03-05", "2026-03-03"]
    assert [r.date for r in db.get_topics("2026-03-01", category="ecosystem")] == ["2026-03-05", "2026-03-01"]
    assert [r.date for r in db.get_topics("2026-03-01", until="2026-03-03")] == ["2026-03-03", "2026-03-01"]
    assert [r.category for r in db.get_topics_for_date("2026-03-03")] == ["enterprise"]


def test_run_log(db):
    """Runs are recorded and completed with a summary."""
    run_id = db.start_run("ingest")
    db.complete_run(run_id, "completed", summary={"rows": 3})
    [run] = db.get_recent_runs(limit=1)
    assert run["run_type"] == "ingest"
    assert run["status"] == "completed"
    assert run["summary"] == '{"rows": 3}'
    assert run["completed_at"] is not None
