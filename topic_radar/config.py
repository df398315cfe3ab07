"""YAML config loader with validation and defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click
import yaml
from dotenv import load_dotenv


def get_app_dir() -> Path:
    """Get the platform-specific application config directory.

    - macOS: ~/Library/Application Support/topic-radar/
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\topic-radar\\
    - Linux: ~/.config/topic-radar/
    """
    return Path(click.get_app_dir("topic-radar"))


CONFIG_VERSION = 1

_DEFAULT_CONFIG = {
    "config_version": CONFIG_VERSION,
    "categories": ["ecosystem", "enterprise"],
    # Calendar days are cut in this zone, not UTC
    "timezone": "Australia/Sydney",
    "window": {"days": 7, "active_only": False, "top_keys": 20},
    "threads": {"max_topics": 20},
    "trends": {"top_n": 5},
    "cloud": {"top_n": 8},
    "feed": {"url": None, "timeout": 30},
    "database": {"path": "data/topic_radar.db"},
    "logging": {"level": "INFO", "file": "data/logs/topic_radar.log", "max_size_mb": 10, "backup_count": 5},
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Config:
    """Application configuration loaded from YAML with env var support."""

    def __init__(self, data: dict[str, Any], project_root: Path):
        self._data = data
        self.project_root = project_root

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load config from YAML file, merging with defaults.

        Resolution order:
        1. Explicit config_path argument (--config flag)
        2. CWD ./config/config.yaml (development mode)
        3. APP_DIR/config.yaml (installed mode)
        """
        if config_path is not None:
            config_path = Path(config_path)
            project_root = config_path.parent.parent if config_path.parent.name == "config" else config_path.parent
        else:
            cwd_config = Path.cwd() / "config" / "config.yaml"
            app_dir_config = get_app_dir() / "config.yaml"

            if cwd_config.exists():
                config_path = cwd_config
                project_root = Path.cwd()
            elif app_dir_config.exists():
                config_path = app_dir_config
                project_root = get_app_dir()
            else:
                config_path = cwd_config
                project_root = Path.cwd()

        env_path = project_root / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        user_config: dict = {}
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}

        data = _deep_merge(_DEFAULT_CONFIG, user_config)
        return cls(data, project_root)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a nested config value using dot-separated keys or varargs."""
        if len(keys) == 1 and "." in keys[0]:
            keys = tuple(keys[0].split("."))

        current = self._data
        for key in keys:
            if isinstance(current, dict):
                current = current.get(key)
                if current is None:
                    return default
            else:
                return default
        return current

    @property
    def db_path(self) -> Path:
        return self.project_root / self.get("database.path", default="data/topic_radar.db")

    @property
    def log_file(self) -> Path | None:
        log = self.get("logging.file")
        return self.project_root / log if log else None

    @property
    def categories(self) -> list[str]:
        return list(self._data.get("categories") or [])

    @property
    def timezone(self) -> str:
        return self._data.get("timezone") or "Australia/Sydney"

    @property
    def window_days(self) -> int:
        return int(self.get("window.days", default=7))

    @property
    def feed_url(self) -> str | None:
        """Feed URL from config, overridable with TOPIC_RADAR_FEED_URL."""
        return self.env("TOPIC_RADAR_FEED_URL") or self.get("feed.url")

    def env(self, key: str, default: str | None = None) -> str | None:
        """Get an environment variable."""
        return os.environ.get(key, default)

    def validate(self) -> list[str]:
        """Return a list of validation warnings."""
        warnings = []

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            warnings.append(f"Unknown timezone '{self.timezone}', dates will fall back to UTC")

        if not self.categories:
            warnings.append("No categories configured; threads and trends will be empty")

        if self.window_days < 1:
            warnings.append(f"window.days must be at least 1 (got {self.window_days})")

        for key in ("threads.max_topics", "trends.top_n", "cloud.top_n", "window.top_keys"):
            value = self.get(key)
            if not isinstance(value, int) or value < 1:
                warnings.append(f"{key} should be a positive integer (got {value!r})")
        return warnings
