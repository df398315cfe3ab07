"""Topic Radar: cross-platform topic deduplication and day-over-day trend tracking."""

try:
    from importlib.metadata import version

    __version__ = version("topic-radar")
except Exception:
    __version__ = "0.1.0"
