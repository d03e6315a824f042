"""
CLI configuration handler
"""

import sys
from pathlib import Path

from rich.console import Console

from .config import Config, default_config_paths
from .sonarr import SonarrClient
from .watch_tracker import WatchTracker, build_watch_tracker

console = Console()


def load_config_from_args(
    config_file: str | None,
    sonarr_url: str | None,
    sonarr_api_key: str | None,
    log_level: str | None,
) -> Config:
    """
    Load configuration from CLI arguments, environment and files

    Args:
        config_file: Path to config file
        sonarr_url: Sonarr URL from CLI
        sonarr_api_key: Sonarr API key from CLI
        log_level: Log level from CLI

    Returns:
        Config object

    Raises:
        SystemExit if configuration is invalid
    """
    overrides = {
        "sonarr_url": sonarr_url,
        "sonarr_api_key": sonarr_api_key,
        "log_level": log_level,
    }

    try:
        if config_file:
            path: Path | None = Path(config_file)
        else:
            path = next((p for p in default_config_paths() if p.exists()), None)
        cfg = Config.from_env_and_file(path, overrides=overrides)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        if not config_file:
            console.print("\nExample:")
            console.print(
                "  python prunarr.py --config config.yaml tv --retain-for '14 days'"
            )
            console.print(
                "\nOr create a config.yaml file (see config.example.yaml)"
            )
        sys.exit(1)

    return cfg


def create_sonarr_client(config: Config) -> SonarrClient:
    """
    Build the Sonarr client from configuration

    Raises:
        SystemExit if the client can't be created
    """
    try:
        return SonarrClient(
            config.sonarr_url,
            config.sonarr_api_key,
            timeout=config.request_timeout,
            delete_max_retries=config.delete_max_retries,
            delete_retry_delay=config.delete_retry_delay,
        )
    except Exception as e:
        console.print(f"[red]Could not set up Sonarr client:[/red] {e}")
        sys.exit(1)


def create_watch_tracker(config: Config) -> WatchTracker:
    """
    Build the Plex or Jellyfin client from configuration

    Raises:
        SystemExit if the client can't be created
    """
    try:
        return build_watch_tracker(config)
    except Exception as e:
        console.print(f"[red]Could not set up {config.viewer} client:[/red] {e}")
        sys.exit(1)


def setup_context(config: Config) -> dict:
    """
    Setup CLI context with config, Sonarr client and watch-tracker

    Args:
        config: Configuration object

    Returns:
        Dictionary with context objects
    """
    return {
        "config": config,
        "sonarr": create_sonarr_client(config),
        "watch_tracker": create_watch_tracker(config),
    }
