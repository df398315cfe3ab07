"""SQLite database manager: schema creation and topic/run-log queries."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from topic_radar.intel.models import RawTopicRecord
from topic_radar.intel.topic_key import topic_key_for
from topic_radar.utils.logger import get_logger

logger = get_logger()

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- One row per (day, platform, category, topic) from the collectors
CREATE TABLE IF NOT EXISTS emerging_topics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL,
    platform TEXT NOT NULL,
    keyword TEXT NOT NULL,
    topic_key TEXT NOT NULL,
    topic_title TEXT NOT NULL,
    summary TEXT NOT NULL DEFAULT '',
    post_count INTEGER NOT NULL DEFAULT 0,
    sample_urls TEXT,
    category TEXT NOT NULL DEFAULT 'ecosystem',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE UNIQUE INDEX IF NOT EXISTS uq_emerging_topics_daily_topic
    ON emerging_topics (date, platform, category, topic_key);

CREATE INDEX IF NOT EXISTS idx_emerging_topics_topic_key
    ON emerging_topics (topic_key);

-- Ingest/fetch run log for auditing
CREATE TABLE IF NOT EXISTS run_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_type TEXT NOT NULL,
    started_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    completed_at TIMESTAMP,
    status TEXT,
    summary TEXT,
    error TEXT
);

-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);
"""

UPSERT_TOPIC_SQL = """
INSERT INTO emerging_topics
    (date, platform, keyword, topic_key, topic_title, summary, post_count, sample_urls, category)
VALUES (:date, :platform, :keyword, :topic_key, :topic_title, :summary, :post_count, :sample_urls, :category)
ON CONFLICT (date, platform, category, topic_key) DO UPDATE SET
    keyword = excluded.keyword,
    topic_title = excluded.topic_title,
    summary = excluded.summary,
    post_count = excluded.post_count,
    sample_urls = excluded.sample_urls
"""


class Database:
    """SQLite store for collected topic rows."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(SCHEMA_SQL)
            cur = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            if cur.fetchone() is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            logger.debug("Database initialized at %s", self.db_path)

    # --- Generic helpers ---

    def execute(self, sql: str, params: tuple | dict = ()) -> list[sqlite3.Row]:
        with self.connection() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchall()

    def execute_one(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        rows = self.execute(sql, params)
        return rows[0] if rows else None

    # --- Topics ---

    def upsert_topic(self, record: RawTopicRecord) -> str:
        """Insert or refresh a collector row; returns its topic key.

        A re-run of the collector on the same day replaces the counts and URLs
        rather than adding to them.
        """
        self.upsert_topics([record])
        return topic_key_for(record)

    def upsert_topics(self, records: list[RawTopicRecord]) -> int:
        rows = [{**record.to_db_dict(), "topic_key": topic_key_for(record)} for record in records]
        with self.connection() as conn:
            conn.executemany(UPSERT_TOPIC_SQL, rows)
        logger.info("Upserted %d topic rows", len(rows))
        return len(rows)

    def get_topics(self, since: str, category: str | None = None, until: str | None = None) -> list[RawTopicRecord]:
        """Rows dated on or after ``since`` (and on or before ``until``), newest first."""
        sql = "SELECT * FROM emerging_topics WHERE date >= ?"
        params: list = [since]
        if until:
            sql += " AND date <= ?"
            params.append(until)
        if category:
            sql += " AND category = ?"
            params.append(category)
        sql += " ORDER BY date DESC, id ASC"
        return [RawTopicRecord.from_db_row(row) for row in self.execute(sql, tuple(params))]

    def get_topics_for_date(self, date: str, category: str | None = None) -> list[RawTopicRecord]:
        return self.get_topics(date, category=category, until=date)

    def count_topics(self) -> int:
        row = self.execute_one("SELECT COUNT(*) as cnt FROM emerging_topics")
        return row["cnt"] if row else 0

    # --- Run Log ---

    def start_run(self, run_type: str) -> int:
        with self.connection() as conn:
            cur = conn.execute("INSERT INTO run_log (run_type) VALUES (?)", (run_type,))
            return cur.lastrowid

    def complete_run(self, run_id: int, status: str, summary: dict[str, Any] | None = None, error: str | None = None) -> None:
        with self.connection() as conn:
            conn.execute(
                "UPDATE run_log SET completed_at = CURRENT_TIMESTAMP, status = ?, summary = ?, error = ? WHERE id = ?",
                (status, json.dumps(summary) if summary else None, error, run_id),
            )

    def get_recent_runs(self, limit: int = 10) -> list[sqlite3.Row]:
        return self.execute("SELECT * FROM run_log ORDER BY started_at DESC, id DESC LIMIT ?", (limit,))
