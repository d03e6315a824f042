"""
Jellyfin (and Emby) API client for watched states
"""

import logging
from typing import List

from .base_client import DEFAULT_TIMEOUT, BaseClient
from .errors import ConfigError, InventoryError
from .models import WatchedSeason
from .watch_tracker import WatchTracker

logger = logging.getLogger(__name__)


class JellyfinClient(BaseClient, WatchTracker):
    """Client to interact with Jellyfin API"""

    name = "Jellyfin"

    def __init__(
        self, url: str, api_key: str, user: str, timeout: float = DEFAULT_TIMEOUT
    ):
        """
        Initialize Jellyfin client

        Args:
            url: Jellyfin server URL (e.g., http://localhost:8096)
            api_key: Jellyfin API key/token
            user: Name of the user whose watched states count
            timeout: Seconds to wait for each request
        """
        super().__init__(
            url,
            {"X-Emby-Token": api_key, "Content-Type": "application/json"},
            timeout=timeout,
        )
        self.user = user
        self._user_id: str | None = None

    def get_user_id(self) -> str:
        """Resolve the configured user name to a Jellyfin user ID"""
        if self._user_id is not None:
            return self._user_id

        users = self._get("Users")
        for user in users:
            if user.get("Name") == self.user:
                self._user_id = user["Id"]
                return self._user_id

        raise ConfigError(f"Jellyfin user {self.user!r} not found")

    def all_tv_seasons(self) -> List[WatchedSeason]:
        """Fetch all TV seasons visible to the user, with their watched state"""
        data = self._get(
            f"Users/{self.get_user_id()}/Items",
            params={"Recursive": "true", "IncludeItemTypes": "Season"},
        )
        return [self.parse_season(item) for item in data.get("Items", [])]

    @staticmethod
    def parse_season(item: dict) -> WatchedSeason:
        series_title = item.get("SeriesName", "")
        label = item.get("Name", "")
        try:
            unplayed = int(item["UserData"]["UnplayedItemCount"])
        except (KeyError, TypeError, ValueError) as e:
            raise InventoryError(
                f"Jellyfin season {series_title!r} {label!r} has no unplayed count"
            ) from e

        # Fully watched means nothing is left unplayed for this user
        return WatchedSeason(
            series_title=series_title,
            season_label=label,
            fully_watched=unplayed == 0,
        )

    def test_connection(self) -> bool:
        """
        Test connection to Jellyfin server

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            data = self._get("System/Info")
            logger.info(
                f"Connected to Jellyfin server: {data.get('ServerName', 'Unknown')} "
                f"(version {data.get('Version', 'Unknown')})"
            )
            self.get_user_id()
            return True
        except Exception as e:
            logger.error(f"Failed to connect to Jellyfin: {e}")
            return False
