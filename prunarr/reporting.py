"""
Reporting - what was (or would be) deleted
"""

from typing import TYPE_CHECKING, Sequence

from rich.table import Table

from .models import EpisodeFile, Season, Series
from .utils import format_season_info, format_size

if TYPE_CHECKING:
    from .cleaner import CleanupReport


def season_summary(series: Series, season: Season, files: Sequence[EpisodeFile]) -> str:
    """One line describing a season's deletion, e.g. "delete 10 files: Show S01: 4.66 GiB" """
    return (
        f"delete {len(files)} files: "
        f"{format_season_info(series.title, season.season_number)}: "
        f"{format_size(season.statistics.size_on_disk)}"
    )


def summary_table(report: "CleanupReport", dry_run: bool) -> Table:
    """Table of every season in a cleanup run"""
    title = "Seasons to delete (dry run)" if dry_run else "Deleted seasons"
    table = Table(title=f"{title} ({len(report.seasons)})")
    table.add_column("Series", style="green")
    table.add_column("Season", style="cyan", justify="right")
    table.add_column("Files", style="blue", justify="right")
    table.add_column("Size", style="cyan", justify="right")
    if not dry_run:
        table.add_column("Status")

    for result in report.seasons:
        row = [
            result.series.title,
            f"S{result.season.season_number:02d}",
            str(len(result.files)),
            format_size(result.size),
        ]
        if not dry_run:
            if result.errors:
                row.append(f"[red]✗ {len(result.errors)} error(s)[/red]")
            else:
                row.append(f"[green]✓ {result.deleted} deleted[/green]")
        table.add_row(*row)

    return table
