"""Read collector topic rows from a JSON/YAML file or a remote JSON feed."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import yaml

from topic_radar.intel.models import RawTopicRecord
from topic_radar.utils.logger import get_logger
from topic_radar.utils.retry import with_retry

logger = get_logger()

YAML_EXTENSIONS = {".yaml", ".yml"}


def _rows_of(payload) -> list[dict]:
    """Accept a bare list of rows or ``{"topics": [...]}``."""
    if isinstance(payload, dict):
        payload = payload.get("topics", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of topic rows, got {type(payload).__name__}")
    return [row for row in payload if isinstance(row, dict)]


def parse_records(payload) -> list[RawTopicRecord]:
    rows = _rows_of(payload)
    records = [RawTopicRecord.from_dict(row) for row in rows]
    logger.debug("Parsed %d topic rows", len(records))
    return records


class FeedReader:
    """Load RawTopicRecord lists from disk or over HTTP."""

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def read_file(self, file_path: str | Path) -> list[RawTopicRecord]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Topic file not found: {path}")

        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in YAML_EXTENSIONS:
            payload = yaml.safe_load(text) or []
        else:
            payload = json.loads(text)
        records = parse_records(payload)
        logger.info("Read %d topic rows from %s", len(records), path)
        return records

    @with_retry(max_attempts=3)
    def _fetch(self, url: str, params: dict | None = None) -> list | dict:
        response = httpx.get(url, params=params, timeout=self.timeout, follow_redirects=True)
        response.raise_for_status()
        return response.json()

    def read_url(self, url: str, days: int | None = None) -> list[RawTopicRecord]:
        """Fetch rows from a topics endpoint (``?days=N`` is passed through when given)."""
        params = {"days": days} if days else None
        records = parse_records(self._fetch(url, params))
        logger.info("Fetched %d topic rows from %s", len(records), url[:80])
        return records

    def read(self, source: str, days: int | None = None) -> list[RawTopicRecord]:
        if source.startswith(("http://", "https://")):
            return self.read_url(source, days=days)
        return self.read_file(source)
