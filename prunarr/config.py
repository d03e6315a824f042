"""
Configuration management
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .retention import MATCHERS
from .utils import parse_duration

CONFIG_FILE = "config.yaml"

VIEWERS = ("plex", "jellyfin")

# Environment variable -> config key
ENV_OVERRIDES = {
    "SONARR_URL": "sonarr_url",
    "SONARR_API_KEY": "sonarr_api_key",
    "VIEWER": "viewer",
    "PLEX_URL": "plex_url",
    "PLEX_TOKEN": "plex_token",
    "JELLYFIN_URL": "jellyfin_url",
    "JELLYFIN_API_KEY": "jellyfin_api_key",
    "JELLYFIN_USER": "jellyfin_user",
    "RETAIN_TAG": "retain_tag",
    "RETAIN_DURATION": "retain_duration",
}


def default_config_paths() -> list[Path]:
    """Places searched for a config file when none is given"""
    return [
        Path(CONFIG_FILE),
        Path.home() / ".config" / "prunarr" / CONFIG_FILE,
    ]


@dataclass
class Config:
    """Application configuration"""

    sonarr_url: str
    sonarr_api_key: str = field(repr=False)
    # Media server that tracks watched states: "plex" or "jellyfin"
    viewer: str = "plex"
    plex_url: str | None = None
    plex_token: str | None = field(default=None, repr=False)
    jellyfin_url: str | None = None
    jellyfin_api_key: str | None = field(default=None, repr=False)
    jellyfin_user: str | None = None
    # Retention policy
    retain_tag: str | None = None
    retain_duration: timedelta = timedelta(0)
    match_titles: str = "exact"
    # HTTP behaviour
    request_timeout: float = 30.0
    delete_max_retries: int = 8
    delete_retry_delay: float = 0.2
    log_level: str = "INFO"
    schedule_interval: int = 1
    schedule_unit: str = "days"

    def __post_init__(self):
        if not self.sonarr_url or not self.sonarr_api_key:
            raise ConfigError("Sonarr URL and API key are required")

        try:
            self.retain_duration = parse_duration(self.retain_duration)
        except ValueError as e:
            raise ConfigError(f"Invalid retain_duration: {e}") from e

        self.viewer = (self.viewer or "plex").lower()
        if self.viewer not in VIEWERS:
            raise ConfigError(
                f"Unknown viewer {self.viewer!r} (choose from {', '.join(VIEWERS)})"
            )
        if self.viewer == "plex" and not (self.plex_url and self.plex_token):
            raise ConfigError("Plex URL and token are required when viewer is plex")
        if self.viewer == "jellyfin" and not (
            self.jellyfin_url and self.jellyfin_api_key and self.jellyfin_user
        ):
            raise ConfigError(
                "Jellyfin URL, API key and user are required when viewer is jellyfin"
            )

        if self.match_titles not in MATCHERS:
            raise ConfigError(
                f"Unknown match_titles {self.match_titles!r} "
                f"(choose from {', '.join(sorted(MATCHERS))})"
            )
        if self.delete_max_retries < 0:
            raise ConfigError("delete_max_retries must not be negative")
        if self.delete_retry_delay < 0:
            raise ConfigError("delete_retry_delay must not be negative")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a YAML file"""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        return cls.from_dict(_read_yaml(config_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a configuration, reporting unknown keys as errors"""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        if "sonarr_url" not in data or "sonarr_api_key" not in data:
            raise ConfigError(
                "Incomplete configuration. Sonarr URL and API Key are required. "
                "Use a config file or environment variables."
            )
        return cls(**data)

    @classmethod
    def from_env_and_file(
        cls, config_path: Path | None = None, overrides: dict[str, Any] | None = None
    ) -> "Config":
        """
        Load configuration from file and/or environment variables

        Precedence: explicit overrides (CLI), then environment, then file.
        """
        config_data: dict[str, Any] = {}

        # Load from file if specified
        if config_path and config_path.exists():
            config_data = _read_yaml(config_path)

        # Environment variables take priority
        for env_var, key in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                config_data[key] = value

        for key, value in (overrides or {}).items():
            if value is not None:
                config_data[key] = value

        return cls.from_dict(config_data)


def _read_yaml(config_path: Path) -> dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping of settings")
    return data
