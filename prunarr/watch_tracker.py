"""
Watch-tracker interface: the media server that knows what has been watched
"""

from abc import ABC, abstractmethod
from typing import List

from .models import WatchedSeason


class WatchTracker(ABC):
    """A media server (Plex, Jellyfin) that reports watched TV seasons"""

    name = "media server"
    url: str

    @abstractmethod
    def all_tv_seasons(self) -> List[WatchedSeason]:
        """Fetch every TV season the server knows, with its watched state"""
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Test the connection to the media server"""
        pass


def build_watch_tracker(config) -> WatchTracker:
    """Create the watch-tracker client selected by the configuration"""
    # Imported here: both modules import WatchTracker from this one
    from .jellyfin import JellyfinClient
    from .plex import PlexClient

    if config.viewer == "jellyfin":
        return JellyfinClient(
            config.jellyfin_url,
            config.jellyfin_api_key,
            config.jellyfin_user,
            timeout=config.request_timeout,
        )
    return PlexClient(
        config.plex_url, config.plex_token, timeout=config.request_timeout
    )
