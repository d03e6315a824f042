"""
Plex Media Server API client for watched states
"""

import logging
from typing import Any, List

from .base_client import DEFAULT_TIMEOUT, BaseClient
from .models import WatchedSeason
from .watch_tracker import WatchTracker

logger = logging.getLogger(__name__)


def _container_items(data: dict, *keys: str) -> list[dict]:
    """Items of a Plex MediaContainer, which uses either Directory or Metadata"""
    container = data.get("MediaContainer", {})
    for key in keys:
        if container.get(key):
            return container[key]
    return []


class PlexClient(BaseClient, WatchTracker):
    """Client to interact with Plex API"""

    name = "Plex"

    def __init__(self, url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize Plex client

        Args:
            url: Plex server URL (e.g., http://localhost:32400)
            token: Plex auth token (X-Plex-Token)
            timeout: Seconds to wait for each request
        """
        super().__init__(
            url,
            {"X-Plex-Token": token, "Accept": "application/json"},
            timeout=timeout,
        )

    def _libraries(self) -> list[dict]:
        data = self._get("library/sections")
        return _container_items(data, "Directory")

    def _list_shows(self, library: dict) -> list[dict]:
        data = self._get(f"library/sections/{library['key']}/all")
        return _container_items(data, "Metadata", "Directory")

    def _list_seasons(self, show: dict) -> list[dict]:
        # A show's "key" already points at its children listing
        endpoint = show.get("key") or f"library/metadata/{show['ratingKey']}/children"
        data = self._get(endpoint)
        return _container_items(data, "Metadata", "Directory")

    def all_tv_seasons(self) -> List[WatchedSeason]:
        """Fetch all TV seasons in all TV libraries known to Plex"""
        seasons = []
        for library in self._libraries():
            if library.get("type") != "show":
                continue
            logger.debug(f"Listing Plex TV library {library.get('title')!r}")
            for show in self._list_shows(library):
                for item in self._list_seasons(show):
                    # Skips the "All episodes" pseudo-season
                    if item.get("type") != "season":
                        continue
                    seasons.append(self.parse_season(item, show))
        return seasons

    @staticmethod
    def parse_season(item: dict[str, Any], show: dict[str, Any]) -> WatchedSeason:
        leaf_count = item.get("leafCount", 0)
        viewed = item.get("viewedLeafCount", 0)
        return WatchedSeason(
            series_title=item.get("parentTitle") or show.get("title", ""),
            season_label=item.get("title", ""),
            fully_watched=viewed == leaf_count,
        )

    def test_connection(self) -> bool:
        """Test connection to Plex server"""
        try:
            data = self._get("identity")
            version = data.get("MediaContainer", {}).get("version", "Unknown")
            logger.info(f"Connected to Plex server (version {version})")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to Plex: {e}")
            return False
