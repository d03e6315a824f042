"""
Sonarr API Client
"""

import logging
import time
from typing import List

import requests

from .base_client import DEFAULT_TIMEOUT, BaseClient
from .errors import DeleteRetriesExhausted, InventoryError
from .models import EpisodeFile, HasId, Season, SeasonStatistics, Series, Tag
from .utils import parse_timestamp

logger = logging.getLogger(__name__)


def _parse_statistics(data: dict) -> SeasonStatistics:
    return SeasonStatistics(
        episode_file_count=data.get("episodeFileCount", 0),
        episode_count=data.get("episodeCount", 0),
        total_episode_count=data.get("totalEpisodeCount", 0),
        next_airing=parse_timestamp(data.get("nextAiring")),
        previous_airing=parse_timestamp(data.get("previousAiring")),
        size_on_disk=int(data.get("sizeOnDisk", 0)),
    )


def parse_series(item: dict) -> Series:
    """Build a Series from a Sonarr series record"""
    try:
        seasons = [
            Season(
                season_number=s["seasonNumber"],
                monitored=s.get("monitored", False),
                statistics=_parse_statistics(s.get("statistics") or {}),
            )
            for s in item.get("seasons", [])
        ]
        return Series(
            id=item["id"],
            title=item["title"],
            seasons=seasons,
            tags=list(item.get("tags", [])),
            monitored=item.get("monitored", True),
            path=item.get("path"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InventoryError(
            f"Malformed Sonarr series record {item.get('title', item.get('id'))!r}: {e}"
        ) from e


class SonarrClient(BaseClient):
    """Client to interact with Sonarr API"""

    api_prefix = "api/v3"

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        delete_max_retries: int = 8,
        delete_retry_delay: float = 0.2,
    ):
        super().__init__(
            url,
            {"X-Api-Key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
        )
        self.delete_max_retries = delete_max_retries
        self.delete_retry_delay = delete_retry_delay

    def fetch_tags(self) -> dict[str, Tag]:
        """Fetch all tags and return a mapping of tag_label -> Tag"""
        data = self._get("tag")
        return {tag["label"]: Tag(id=tag["id"], label=tag["label"]) for tag in data}

    def fetch_all_series(self) -> List[Series]:
        """Fetch all series"""
        data = self._get("series")
        return [parse_series(item) for item in data]

    def fetch_episode_files(self, series_id: int) -> List[EpisodeFile]:
        """Fetch every episode file Sonarr has on disk for a series"""
        data = self._get("episodefile", params={"seriesId": series_id})
        return [
            EpisodeFile(
                id=item["id"],
                series_id=item["seriesId"],
                season_number=item["seasonNumber"],
                path=item.get("path", ""),
                size=int(item.get("size", 0)),
            )
            for item in data
        ]

    def unmonitor_season(self, series_id: int, season_number: int) -> bool:
        """
        Mark a season as unmonitored so Sonarr stops fetching it again

        Only the season's "monitored" flag is changed; every other field of
        the series record is sent back exactly as Sonarr returned it.

        Returns:
            True if Sonarr was updated, False if there was nothing to change
        """
        record = self._get(f"series/{series_id}")
        for season in record.get("seasons", []):
            if season.get("seasonNumber") != season_number:
                continue
            if not season.get("monitored", False):
                logger.debug(
                    f"Season {season_number} of series {series_id} already unmonitored"
                )
                return False
            season["monitored"] = False
            logger.info(f"Unmonitoring season {season_number} of series {series_id}")
            self._put(f"series/{series_id}", record)
            return True

        logger.warning(f"Series {series_id} has no season {season_number}")
        return False

    def delete_episode_file(self, episode_file: HasId) -> None:
        """
        Delete an episode file from disk through Sonarr

        A file that is already gone (404) counts as deleted. Server errors and
        connection failures are retried with exponential backoff, up to
        delete_max_retries retries.

        Raises:
            DeleteRetriesExhausted: if transient failures outlast the retries
            requests.HTTPError: on any other client error
        """
        endpoint = f"episodefile/{episode_file.id}"
        delay = self.delete_retry_delay
        attempts = 0

        while True:
            attempts += 1
            try:
                response = self._request("DELETE", endpoint)
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error: Exception = e
            else:
                status = response.status_code
                if 200 <= status < 300:
                    return
                if status == 404:
                    logger.debug(f"Episode file {episode_file.id} already gone")
                    return
                if status < 500:
                    self._raise_for_status(response)
                    raise requests.HTTPError(
                        f"Unexpected status {status} for url: {response.url}",
                        response=response,
                    )
                last_error = requests.HTTPError(
                    f"{response.status_code} Server Error for url: {response.url}",
                    response=response,
                )

            if attempts > self.delete_max_retries:
                raise DeleteRetriesExhausted(episode_file.id, attempts, last_error)

            logger.info(f"HTTP DELETE failed with {last_error}. Retrying in {delay:.1f}s...")
            time.sleep(delay)
            delay *= 2

    def test_connection(self) -> bool:
        """Test the connection to Sonarr"""
        try:
            self._get("system/status")
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False
