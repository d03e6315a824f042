"""
TV command - delete fully watched, fully aired TV seasons
"""

import logging
from datetime import datetime, timedelta, timezone

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from prunarr.cleaner import CleanupReport, SeasonCleaner
from prunarr.config import Config
from prunarr.errors import ConfigError
from prunarr.models import Tag
from prunarr.reporting import summary_table
from prunarr.retention import decide, get_matcher, watched_keys
from prunarr.sonarr import SonarrClient
from prunarr.utils import format_duration, format_size
from prunarr.watch_tracker import WatchTracker

logger = logging.getLogger(__name__)
console = Console()


def resolve_exemption_tag(sonarr: SonarrClient, tag_name: str | None) -> Tag | None:
    """Look up the configured exemption tag in Sonarr"""
    if not tag_name:
        return None

    tags = sonarr.fetch_tags()
    tag = tags.get(tag_name)
    if tag is None:
        raise ConfigError(
            f"Tag {tag_name!r} not found in Sonarr (known tags: {', '.join(sorted(tags)) or 'none'})"
        )
    return tag


def tv_command(
    config: Config,
    sonarr: SonarrClient,
    watch_tracker: WatchTracker,
    delete_files: bool = False,
    retain_for: timedelta | None = None,
    now: datetime | None = None,
) -> CleanupReport:
    """
    Find fully watched seasons past their retention period and delete them

    Args:
        config: Configuration object
        sonarr: Sonarr client
        watch_tracker: Plex or Jellyfin client
        delete_files: If False, only report what would be deleted
        retain_for: Overrides the configured retention duration
        now: Decision instant, defaults to the current time

    Returns:
        CleanupReport describing every season processed
    """
    retain_duration = retain_for if retain_for is not None else config.retain_duration
    now = now or datetime.now(timezone.utc)
    matcher = get_matcher(config.match_titles)

    exemption_tag = resolve_exemption_tag(sonarr, config.retain_tag)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(
            f"Fetching watched seasons from {watch_tracker.name}...", total=None
        )
        watched = watched_keys(watch_tracker.all_tv_seasons(), matcher)
        progress.update(task, description="Fetching series from Sonarr...")
        serieses = sonarr.fetch_all_series()
        progress.update(task, completed=True)

    logger.info(
        f"{len(watched)} fully watched seasons, {len(serieses)} series in Sonarr, "
        f"retention {format_duration(retain_duration)}"
    )

    decision = decide(serieses, watched, exemption_tag, retain_duration, now, matcher)

    if not decision:
        console.print("[yellow]No seasons eligible for deletion[/yellow]")
        return CleanupReport()

    report = SeasonCleaner(sonarr, dry_run=not delete_files, console=console).clean(
        decision
    )

    console.print(summary_table(report, dry_run=not delete_files))
    console.print(
        f"\n[bold cyan]Total:[/bold cyan] {report.total_files} files, "
        f"{format_size(report.total_size)}"
    )
    for title, error in report.failed_series.items():
        console.print(f"[red]✗ {title}:[/red] {error}")

    if not delete_files:
        console.print(
            "\n[yellow]DRY RUN mode - nothing deleted, use --delete-files to delete[/yellow]"
        )

    return report
