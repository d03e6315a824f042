"""
Season cleaner - unmonitor and delete the seasons a retention decision selected
"""

import logging
from dataclasses import dataclass, field
from typing import List

from rich.console import Console

from .models import EpisodeFile, RetentionDecision, Season, Series
from .reporting import season_summary
from .sonarr import SonarrClient
from .utils import format_season_info

logger = logging.getLogger(__name__)
console = Console()


@dataclass
class SeasonResult:
    """Outcome for one eligible season"""

    series: Series
    season: Season
    files: List[EpisodeFile]
    unmonitored: bool = False
    deleted: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.season.statistics.size_on_disk


@dataclass
class CleanupReport:
    """Outcome of a whole cleanup run"""

    seasons: List[SeasonResult] = field(default_factory=list)
    failed_series: dict[str, str] = field(default_factory=dict)

    @property
    def total_size(self) -> int:
        return sum(result.size for result in self.seasons)

    @property
    def total_files(self) -> int:
        return sum(len(result.files) for result in self.seasons)

    @property
    def failed(self) -> bool:
        return bool(self.failed_series) or any(r.errors for r in self.seasons)


class SeasonCleaner:
    """Deletes eligible seasons through Sonarr, or only reports them in dry-run mode"""

    def __init__(
        self,
        sonarr: SonarrClient,
        dry_run: bool = True,
        console: Console = console,
    ):
        self.sonarr = sonarr
        self.dry_run = dry_run
        self.console = console

    def clean(self, decision: RetentionDecision) -> CleanupReport:
        """Process every series of the decision; failures are recorded, not raised"""
        report = CleanupReport()

        for series, seasons in decision.items():
            try:
                series_files = self.sonarr.fetch_episode_files(series.id)
            except Exception as e:
                logger.error(f"Fetching files for {series.title} failed: {e}")
                self.console.print(
                    f"[red]✗ Could not fetch files for {series.title}:[/red] {e}"
                )
                report.failed_series[series.title] = str(e)
                continue

            for season in seasons:
                season_files = [
                    f for f in series_files if f.season_number == season.season_number
                ]
                result = SeasonResult(series=series, season=season, files=season_files)
                report.seasons.append(result)
                self._clean_season(result)

        return report

    def _clean_season(self, result: SeasonResult) -> None:
        series, season = result.series, result.season
        summary = season_summary(series, season, result.files)
        logger.info(summary)

        if self.dry_run:
            self.console.print(f"[yellow]DRY RUN:[/yellow] would {summary}")
            return

        self.console.print(f"[bold cyan]Cleaning:[/bold cyan] {summary}")
        label = format_season_info(series.title, season.season_number)

        try:
            self.sonarr.unmonitor_season(series.id, season.season_number)
            result.unmonitored = True
        except Exception as e:
            logger.error(f"Unmonitoring {label} failed, keeping its files: {e}")
            result.errors.append(f"unmonitor: {e}")
            self.console.print(f"[red]✗ Could not unmonitor {label}:[/red] {e}")
            return

        for episode_file in result.files:
            logger.info(f"Deleting {episode_file.path} ({label})")
            try:
                self.sonarr.delete_episode_file(episode_file)
                result.deleted += 1
            except Exception as e:
                logger.error(f"Deleting {episode_file.path} failed: {e}")
                result.errors.append(f"{episode_file.path}: {e}")
                self.console.print(
                    f"[red]✗ Could not delete {episode_file.path}:[/red] {e}"
                )
