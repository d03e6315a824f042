import json
from datetime import datetime, timedelta, timezone

import pytest
import requests

from prunarr.models import Season, SeasonStatistics, Series, WatchedSeason

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_season(
    number: int = 1,
    aired_days_ago: float | None = 70,
    next_airing: datetime | None = None,
    size: int = 5_000_000_000,
    files: int = 10,
    monitored: bool = True,
) -> Season:
    previous = None if aired_days_ago is None else NOW - timedelta(days=aired_days_ago)
    return Season(
        season_number=number,
        monitored=monitored,
        statistics=SeasonStatistics(
            episode_file_count=files,
            episode_count=files,
            total_episode_count=files,
            next_airing=next_airing,
            previous_airing=previous,
            size_on_disk=size,
        ),
    )


def make_series(
    title: str = "Show X", seasons=None, tags=None, series_id: int = 1
) -> Series:
    return Series(
        id=series_id,
        title=title,
        seasons=seasons if seasons is not None else [make_season()],
        tags=tags or [],
    )


def watched(*pairs: tuple[str, int]) -> list[WatchedSeason]:
    return [WatchedSeason(title, f"Season {n}", True) for title, n in pairs]


def make_response(
    status_code: int,
    data=None,
    url: str = "http://sonarr.test/api/v3/",
    headers: dict | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = b"" if data is None else json.dumps(data).encode()
    response.headers["Content-Type"] = "application/json"
    response.headers.update(headers or {})
    return response


class FakeSession:
    """Stands in for requests.Session.request, replaying canned responses"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    def __call__(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff delays instead of sleeping"""
    from prunarr import sonarr

    delays: list[float] = []
    monkeypatch.setattr(sonarr.time, "sleep", lambda seconds: delays.append(seconds))
    return delays
