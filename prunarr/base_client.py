"""
Base HTTP client shared by the Sonarr, Plex and Jellyfin clients
"""

import logging
from typing import Any
from urllib.parse import unquote, urlsplit, urlunsplit

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def split_credentials(url: str) -> tuple[str, tuple[str, str] | None]:
    """
    Strip "user:password@" from a URL

    Returns:
        The URL without user-info, and the (user, password) pair if both
        were present
    """
    parts = urlsplit(url)
    if parts.username is None or parts.password is None:
        return url, None

    netloc = parts.hostname or ""
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    clean = urlunsplit(
        (parts.scheme, netloc, parts.path, parts.query, parts.fragment)
    )
    return clean, (unquote(parts.username), unquote(parts.password))


class BaseClient:
    """Base client for the HTTP APIs PrunArr talks to"""

    # Path prefix for every endpoint, e.g. "api/v3"
    api_prefix = ""

    def __init__(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float = DEFAULT_TIMEOUT,
    ):
        url, credentials = split_credentials(url)
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(headers)
        if credentials:
            self.session.auth = credentials

    def _endpoint(self, endpoint: str) -> str:
        path = endpoint.lstrip("/")
        if self.api_prefix:
            path = f"{self.api_prefix}/{path}"
        return f"{self.url}/{path}"

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Send a request; redirects are refused, they mean a wrong base URL"""
        url = self._endpoint(endpoint)
        logger.debug(f"{method} {url}")
        return self.session.request(
            method, url, timeout=self.timeout, allow_redirects=False, **kwargs
        )

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.is_redirect:
            raise requests.HTTPError(
                f"Unexpected redirect to {response.headers.get('Location')} "
                f"from {response.url}, check the configured URL",
                response=response,
            )
        response.raise_for_status()

    def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Perform a GET request to the API"""
        response = self._request("GET", endpoint, params=params)
        self._raise_for_status(response)
        return response.json()

    def _put(self, endpoint: str, data: dict) -> Any:
        """Perform a PUT request to the API"""
        response = self._request("PUT", endpoint, json=data)
        self._raise_for_status(response)
        return response.json()
