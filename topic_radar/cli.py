"""Click CLI entry point for topic-radar."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from topic_radar.config import Config, get_app_dir
from topic_radar.db import Database
from topic_radar.intel.cloud import build_cloud_words, url_label
from topic_radar.intel.models import RawTopicRecord, TrendState, TrendTopic
from topic_radar.intel.threads import merge_topic_threads, source_info, sorted_links
from topic_radar.intel.trends import build_trend_topics, get_new_today_top, get_trending_overall_top
from topic_radar.intel.window import select_active_records, window_start
from topic_radar.sources.feed_reader import FeedReader
from topic_radar.utils.dates import local_today
from topic_radar.utils.logger import setup_logger

console = Console()

STATE_STYLES = {
    TrendState.NEW: "cyan",
    TrendState.RISING: "green",
    TrendState.STEADY: "dim",
    TrendState.FADING: "red",
}


def _init(ctx: click.Context) -> tuple[Config, Database]:
    """Initialize config, logging, and database."""
    config = Config.load(ctx.obj.get("config_path"))
    setup_logger(
        level=config.get("logging.level", default="INFO"),
        log_file=str(config.log_file) if config.log_file else None,
        max_size_mb=config.get("logging.max_size_mb", default=10),
        backup_count=config.get("logging.backup_count", default=5),
        verbose=ctx.obj.get("verbose", False),
    )
    db = Database(config.db_path)
    return config, db


def _categories(config: Config, category: str | None) -> list[str]:
    return [category] if category else config.categories


def _load_window(config: Config, db: Database, today: str, days: int | None, active: bool | None) -> list[RawTopicRecord]:
    """Stored rows for the lookback window ending today, optionally narrowed to active keys."""
    days = days or config.window_days
    records = db.get_topics(window_start(today, days), until=today)
    if active is None:
        active = bool(config.get("window.active_only", default=False))
    if active:
        records = select_active_records(records, today, config.get("window.top_keys", default=20))
    return records


def _rank_label(rank: int | None) -> str:
    return f"#{rank}" if rank else "-"


def _sparkline(topic: TrendTopic) -> str:
    bars = " ▁▂▃▄▅▆▇█"
    peak = max((p.posts for p in topic.data), default=0)
    if peak <= 0:
        return ""
    return "".join(bars[round(p.posts / peak * (len(bars) - 1))] for p in topic.data)


def _trend_table(title: str, topics: list[TrendTopic]) -> Table:
    table = Table(title=title)
    table.add_column("Today", justify="right")
    table.add_column("Yday", justify="right")
    table.add_column("Topic", style="white")
    table.add_column("Posts", justify="right", style="green")
    table.add_column("Score", justify="right")
    table.add_column("State")
    table.add_column("Days", justify="right")
    table.add_column("Series", style="cyan")
    for t in topics:
        style = STATE_STYLES.get(t.trend_state, "white")
        table.add_row(
            _rank_label(t.today_rank),
            _rank_label(t.yesterday_rank),
            t.title[:70],
            f"{t.today_count} / {t.total_count}",
            f"{t.score:.1f}",
            f"[{style}]{t.trend_state.value}[/{style}]",
            str(t.ongoing_days),
            _sparkline(t),
        )
    return table


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config_path: str | None, verbose: bool):
    """Topic Radar: merge duplicate topic chatter and track how stories trend."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# =============================================================================
# config
# =============================================================================

@cli.command("config")
@click.option("--show", is_flag=True, help="Show the effective settings")
@click.pass_context
def config_cmd(ctx, show: bool):
    """Show configuration paths and settings."""
    config_path = ctx.obj.get("config_path")
    cwd_config = Path.cwd() / "config" / "config.yaml"
    app_config = get_app_dir() / "config.yaml"

    console.print(Panel("[bold]Configuration Paths[/bold]", border_style="cyan"))
    console.print(f"  App directory:     [cyan]{get_app_dir()}[/cyan]")
    console.print(f"  CWD config:        {'[green]exists' if cwd_config.exists() else '[dim]not found'}[/] {cwd_config}")
    console.print(f"  App dir config:    {'[green]exists' if app_config.exists() else '[dim]not found'}[/] {app_config}")
    if config_path:
        console.print(f"  [bold]Active config:[/bold] [green]{config_path}[/green] (--config flag)")

    config, _ = _init(ctx)
    for warning in config.validate():
        console.print(f"  [yellow]Warning:[/yellow] {warning}")

    if show:
        console.print(f"\n  [bold]Categories:[/bold] {', '.join(config.categories)}")
        console.print(f"  [bold]Timezone:[/bold] {config.timezone} (today is {local_today(config.timezone)})")
        console.print(f"  [bold]Window:[/bold] {config.window_days} days")
        console.print(f"  [bold]Database:[/bold] {config.db_path}")
        console.print(f"  [bold]Feed URL:[/bold] {config.feed_url or '-'}")


# =============================================================================
# ingest / fetch
# =============================================================================

@cli.command("ingest")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def ingest(ctx, path: str):
    """Store topic rows from a JSON or YAML file."""
    config, db = _init(ctx)
    run_id = db.start_run("ingest")
    try:
        records = FeedReader(timeout=config.get("feed.timeout", default=30)).read_file(path)
        count = db.upsert_topics(records)
        db.complete_run(run_id, "success", {"rows": count, "source": path})
        console.print(f"[green]Stored {count} topic rows from {path}[/green]")
    except Exception as e:
        db.complete_run(run_id, "failed", error=str(e))
        console.print(f"[red]Error ingesting {path}: {e}[/red]")
        raise click.Abort()


@cli.command("fetch")
@click.option("--url", default=None, help="Topics endpoint (defaults to feed.url)")
@click.option("--days", type=int, default=None, help="Days of history to request")
@click.pass_context
def fetch(ctx, url: str | None, days: int | None):
    """Pull topic rows from a remote feed into the local store."""
    config, db = _init(ctx)
    url = url or config.feed_url
    if not url:
        console.print("[red]No feed URL: pass --url or set feed.url[/red]")
        raise click.Abort()

    run_id = db.start_run("fetch")
    try:
        records = FeedReader(timeout=config.get("feed.timeout", default=30)).read_url(url, days=days or config.window_days)
        count = db.upsert_topics(records)
        db.complete_run(run_id, "success", {"rows": count, "source": url})
        console.print(f"[green]Stored {count} topic rows from feed[/green]")
    except Exception as e:
        db.complete_run(run_id, "failed", error=str(e))
        console.print(f"[red]Error fetching feed: {e}[/red]")
        raise click.Abort()


# =============================================================================
# threads
# =============================================================================

@cli.command("threads")
@click.option("--date", "day", default=None, help="Day to show (YYYY-MM-DD, default today)")
@click.option("--category", default=None, help="Restrict to one category")
@click.option("--limit", type=int, default=None, help="Threads per category")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
@click.pass_context
def threads(ctx, day: str | None, category: str | None, limit: int | None, as_json: bool):
    """Merge a day's rows into de-duplicated threads."""
    config, db = _init(ctx)
    day = day or local_today(config.timezone)
    limit = limit or config.get("threads.max_topics", default=20)
    records = db.get_topics_for_date(day)

    result = {cat: merge_topic_threads(records, cat, date=day, limit=limit) for cat in _categories(config, category)}

    if as_json:
        click.echo(json.dumps({cat: [t.to_dict() for t in items] for cat, items in result.items()}, indent=2))
        return

    if not any(result.values()):
        console.print(f"[dim]No topics for {day} - ingest or fetch some first[/dim]")
        return

    for cat, items in result.items():
        table = Table(title=f"{cat.title()} threads ({day})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Topic", style="white")
        table.add_column("Platforms", style="cyan")
        table.add_column("Posts", justify="right", style="green")
        table.add_column("Sources", style="dim")
        for rank, t in enumerate(items, start=1):
            labels = dict.fromkeys(source_info(link.url)[0] for link in sorted_links(t.links))
            table.add_row(str(rank), t.topic_title[:80], ", ".join(t.platforms), str(t.post_count), ", ".join(list(labels)[:4]))
        console.print(table)


# =============================================================================
# trends
# =============================================================================

@cli.command("trends")
@click.option("--date", "day", default=None, help="Reference day (YYYY-MM-DD, default today)")
@click.option("--days", type=int, default=None, help="Lookback window in days")
@click.option("--category", default=None, help="Restrict to one category")
@click.option("--top", "top_n", type=int, default=None, help="Topics per view")
@click.option("--active/--all", "active", default=None, help="Only keys active today/yesterday plus the busiest")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
@click.pass_context
def trends(ctx, day: str | None, days: int | None, category: str | None, top_n: int | None, active: bool | None, as_json: bool):
    """Rank stories by day-over-day momentum."""
    config, db = _init(ctx)
    day = day or local_today(config.timezone)
    top_n = top_n or config.get("trends.top_n", default=5)
    records = _load_window(config, db, day, days, active)

    views = {}
    for cat in _categories(config, category):
        topics = build_trend_topics(records, cat, day)
        views[cat] = {
            "newToday": get_new_today_top(topics, top_n),
            "trendingOverall": get_trending_overall_top(topics, top_n),
        }

    if as_json:
        click.echo(json.dumps(
            {cat: {name: [t.to_dict() for t in items] for name, items in v.items()} for cat, v in views.items()},
            indent=2,
        ))
        return

    if not any(items for v in views.values() for items in v.values()):
        console.print(f"[dim]No trend data in the window ending {day}[/dim]")
        return

    for cat, v in views.items():
        console.print(_trend_table(f"{cat.title()}: top {top_n} new today ({day})", v["newToday"]))
        console.print(_trend_table(f"{cat.title()}: top {top_n} trending overall", v["trendingOverall"]))


# =============================================================================
# cloud
# =============================================================================

@cli.command("cloud")
@click.option("--date", "day", default=None, help="Reference day (YYYY-MM-DD, default today)")
@click.option("--category", default=None, help="Restrict to one category")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
@click.pass_context
def cloud(ctx, day: str | None, category: str | None, as_json: bool):
    """Two-word event labels for the top trending stories."""
    config, db = _init(ctx)
    day = day or local_today(config.timezone)
    records = _load_window(config, db, day, None, None)
    top_n = config.get("cloud.top_n", default=8)

    words = {
        cat: build_cloud_words(get_trending_overall_top(build_trend_topics(records, cat, day), top_n))
        for cat in _categories(config, category)
    }

    if as_json:
        click.echo(json.dumps({cat: [w.to_dict() for w in items] for cat, items in words.items()}, indent=2))
        return

    for cat, items in words.items():
        table = Table(title=f"{cat.title()} word cloud ({day})")
        table.add_column("Label", style="white")
        table.add_column("Weight", justify="right")
        table.add_column("State")
        table.add_column("Link", style="dim")
        for w in sorted(items, key=lambda w: -w.weight):
            style = STATE_STYLES.get(w.state, "white")
            link = url_label(w.urls[0]) if w.urls else "No source URL"
            table.add_row(w.label, f"{w.weight:.2f}", f"[{style}]{w.state.value}[/{style}]", link)
        console.print(table)


# =============================================================================
# export
# =============================================================================

@cli.command("export")
@click.option("--date", "day", default=None, help="Reference day (YYYY-MM-DD, default today)")
@click.option("--days", type=int, default=None, help="Lookback window in days")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write to file instead of stdout")
@click.pass_context
def export(ctx, day: str | None, days: int | None, output: str | None):
    """Export threads and full ranked trend topics as JSON."""
    config, db = _init(ctx)
    day = day or local_today(config.timezone)
    records = _load_window(config, db, day, days, None)
    limit = config.get("threads.max_topics", default=20)

    payload = {"date": day, "categories": {}}
    for cat in config.categories:
        payload["categories"][cat] = {
            "threads": [t.to_dict() for t in merge_topic_threads(records, cat, date=day, limit=limit)],
            "trends": [t.to_dict() for t in build_trend_topics(records, cat, day)],
        }

    text = json.dumps(payload, indent=2)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Exported topics for {day} to {output}[/green]")
    else:
        click.echo(text)


if __name__ == "__main__":
    cli()
