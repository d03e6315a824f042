"""
Data models for PrunArr
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Protocol


class HasId(Protocol):
    """Anything carrying a Sonarr API object ID"""

    id: int


@dataclass
class Tag:
    """Represents a tag in Sonarr"""

    id: int
    label: str


@dataclass
class SeasonStatistics:
    """Statistics Sonarr keeps for a season"""

    episode_file_count: int = 0
    episode_count: int = 0
    total_episode_count: int = 0
    next_airing: datetime | None = None
    previous_airing: datetime | None = None
    size_on_disk: int = 0


@dataclass
class Season:
    """Represents a season in Sonarr"""

    season_number: int
    monitored: bool
    statistics: SeasonStatistics = field(default_factory=SeasonStatistics)


@dataclass
class Series:
    """Represents a series in Sonarr"""

    id: int
    title: str
    seasons: List[Season] = field(default_factory=list)
    tags: List[int] = field(default_factory=list)
    monitored: bool = True
    path: str | None = None

    # Series are unique per Sonarr instance, which lets them key a decision
    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class EpisodeFile:
    """A file on disk belonging to one episode"""

    id: int
    series_id: int
    season_number: int
    path: str
    size: int = 0


@dataclass
class WatchedSeason:
    """A season as seen by the media server (Plex or Jellyfin)"""

    series_title: str
    season_label: str
    fully_watched: bool


# Series -> eligible seasons, in inventory order
RetentionDecision = Dict[Series, List[Season]]
