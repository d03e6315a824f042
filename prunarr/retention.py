"""
Retention policy - decide which watched TV seasons can be deleted

The decision is a pure function of the Sonarr inventory, the set of fully
watched seasons, the exemption tag, the retention duration and the current
time. Nothing here talks to the network or reads the clock.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from .errors import InventoryError
from .models import RetentionDecision, Season, Series, Tag, WatchedSeason
from .utils import format_duration, season_label

logger = logging.getLogger(__name__)

WatchedKey = tuple[str, str]


class SeasonMatcher:
    """
    Builds the keys pairing Sonarr seasons with media server seasons

    Sonarr and the media server are separate systems that only share the
    series title and the season label, so a series renamed in one of them
    shows up as unwatched.
    """

    name = ""

    def normalize_title(self, title: str) -> str:
        return title

    def key_for_season(self, series: Series, season: Season) -> WatchedKey:
        return (
            self.normalize_title(series.title),
            season_label(season.season_number),
        )

    def key_for_watched(self, watched: WatchedSeason) -> WatchedKey:
        return (self.normalize_title(watched.series_title), watched.season_label)


class ExactTitleMatcher(SeasonMatcher):
    """Match by exact title and label"""

    name = "exact"


class NormalizedTitleMatcher(SeasonMatcher):
    """Match titles ignoring case, punctuation and repeated whitespace"""

    name = "normalized"

    _punctuation = re.compile(r"[^\w\s]")
    _whitespace = re.compile(r"\s+")

    def normalize_title(self, title: str) -> str:
        title = self._punctuation.sub(" ", title.casefold())
        return self._whitespace.sub(" ", title).strip()

    def key_for_watched(self, watched: WatchedSeason) -> WatchedKey:
        label = self._whitespace.sub(" ", watched.season_label).strip()
        return (self.normalize_title(watched.series_title), label)


MATCHERS = {
    ExactTitleMatcher.name: ExactTitleMatcher,
    NormalizedTitleMatcher.name: NormalizedTitleMatcher,
}

DEFAULT_MATCHER = ExactTitleMatcher()


def get_matcher(name: str) -> SeasonMatcher:
    """Look up a title matching policy by name"""
    try:
        return MATCHERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown title matching policy {name!r} "
            f"(choose from {', '.join(sorted(MATCHERS))})"
        ) from None


def watched_keys(
    seasons: Iterable[WatchedSeason], matcher: SeasonMatcher = DEFAULT_MATCHER
) -> set[WatchedKey]:
    """Keys of all fully watched seasons"""
    return {matcher.key_for_watched(s) for s in seasons if s.fully_watched}


def _check_season(series: Series, season: Season) -> None:
    stats = season.statistics
    where = f"{series.title!r} (id {series.id}) season {season.season_number}"

    if stats.size_on_disk < 0:
        raise InventoryError(f"{where}: negative size on disk {stats.size_on_disk}")
    for name in ("episode_file_count", "episode_count", "total_episode_count"):
        if getattr(stats, name) < 0:
            raise InventoryError(f"{where}: negative {name}")
    for name in ("next_airing", "previous_airing"):
        value = getattr(stats, name)
        if value is not None and value.tzinfo is None:
            raise InventoryError(f"{where}: {name} has no timezone")


def _eligible_seasons(
    series: Series,
    watched: set[WatchedKey],
    retain_duration: timedelta,
    now: datetime,
    matcher: SeasonMatcher,
) -> list[Season]:
    eligible = []

    for season in series.seasons:
        stats = season.statistics
        name = f"{series.title} - Season {season.season_number}"

        if matcher.key_for_season(series, season) not in watched:
            logger.debug(f"Skipping {name} because unwatched")
            continue

        if stats.next_airing is not None:
            if stats.previous_airing is not None:
                logger.info(f"Skipping {name} because still airing")
            continue

        if stats.previous_airing is None:
            continue

        deadline = stats.previous_airing + retain_duration
        if not deadline < now:
            logger.info(
                f"Skipping {name} because retained for another "
                f"{format_duration(deadline - now)} "
                f"(retention: {format_duration(retain_duration)})"
            )
            continue

        if stats.size_on_disk == 0:
            logger.debug(f"Skipping {name} because nothing is on disk")
            continue

        eligible.append(season)

    return eligible


def decide(
    serieses: Sequence[Series],
    watched: set[WatchedKey],
    exemption_tag: Tag | None,
    retain_duration: timedelta,
    now: datetime,
    matcher: SeasonMatcher = DEFAULT_MATCHER,
) -> RetentionDecision:
    """
    Compute the seasons eligible for deletion

    A season is eligible when its series doesn't carry the exemption tag, it
    is fully watched, nothing more is scheduled to air, its last episode aired
    more than retain_duration before now, and it takes up space on disk.

    Args:
        serieses: Full Sonarr inventory
        watched: Keys of fully watched seasons (see watched_keys)
        exemption_tag: Tag protecting a whole series, or None
        retain_duration: How long to keep a season after its last airing
        now: Timezone-aware decision instant
        matcher: Policy building the watched keys for Sonarr seasons

    Returns:
        Series mapped to their eligible seasons, in inventory order. Series
        without an eligible season are left out.

    Raises:
        ValueError: on a negative duration or a naive "now"
        InventoryError: if a season's data is malformed
    """
    if retain_duration < timedelta(0):
        raise ValueError(f"Retention duration must not be negative: {retain_duration}")
    if now.tzinfo is None:
        raise ValueError("The decision time must be timezone-aware")

    # Validate everything up front so a bad record never yields a partial answer
    for series in serieses:
        for season in series.seasons:
            _check_season(series, season)

    decision: RetentionDecision = {}
    for series in serieses:
        if exemption_tag is not None and exemption_tag.id in series.tags:
            logger.debug(f"Skipping {series.title} because tagged {exemption_tag.label!r}")
            continue

        seasons = _eligible_seasons(series, watched, retain_duration, now, matcher)
        if seasons:
            decision[series] = seasons

    return decision
