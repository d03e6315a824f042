from datetime import timedelta

import pytest

from prunarr.config import Config
from prunarr.errors import ConfigError

BASE = {
    "sonarr_url": "http://sonarr.test",
    "sonarr_api_key": "key",
    "plex_url": "http://plex.test",
    "plex_token": "token",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "SONARR_URL",
        "SONARR_API_KEY",
        "VIEWER",
        "PLEX_URL",
        "PLEX_TOKEN",
        "JELLYFIN_URL",
        "JELLYFIN_API_KEY",
        "JELLYFIN_USER",
        "RETAIN_TAG",
        "RETAIN_DURATION",
    ):
        monkeypatch.delenv(var, raising=False)


def test_from_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sonarr_url: http://sonarr.test\n"
        "sonarr_api_key: key\n"
        "plex_url: http://plex.test\n"
        "plex_token: token\n"
        "retain_tag: retain\n"
        "retain_duration: 12 days\n",
        encoding="utf-8",
    )

    config = Config.from_file(path)

    assert config.retain_tag == "retain"
    assert config.retain_duration == timedelta(days=12)
    assert config.viewer == "plex"


def test_defaults():
    config = Config(**BASE)
    assert config.retain_duration == timedelta(0)
    assert config.retain_tag is None
    assert config.match_titles == "exact"


def test_api_keys_not_in_repr():
    assert "token" not in repr(Config(**BASE))
    assert "'key'" not in repr(Config(**BASE))


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("sonarr_url: http://file.test\nsonarr_api_key: key\n", encoding="utf-8")
    monkeypatch.setenv("SONARR_URL", "http://env.test")
    monkeypatch.setenv("PLEX_URL", "http://plex.test")
    monkeypatch.setenv("PLEX_TOKEN", "token")
    monkeypatch.setenv("RETAIN_DURATION", "3w")

    config = Config.from_env_and_file(path, overrides={"log_level": "DEBUG", "sonarr_api_key": None})

    assert config.sonarr_url == "http://env.test"
    assert config.sonarr_api_key == "key"
    assert config.retain_duration == timedelta(weeks=3)
    assert config.log_level == "DEBUG"


def test_missing_sonarr_settings():
    with pytest.raises(ConfigError, match="Sonarr"):
        Config.from_env_and_file(None)


def test_invalid_duration():
    with pytest.raises(ConfigError, match="retain_duration"):
        Config(**BASE, retain_duration="soon")


def test_unknown_keys_are_rejected():
    with pytest.raises(ConfigError, match="retian_tag"):
        Config.from_dict({**BASE, "retian_tag": "keep"})


def test_viewer_credentials_required():
    with pytest.raises(ConfigError, match="Plex"):
        Config(sonarr_url="http://sonarr.test", sonarr_api_key="key")
    with pytest.raises(ConfigError, match="Jellyfin"):
        Config(**BASE, viewer="jellyfin")
    with pytest.raises(ConfigError, match="viewer"):
        Config(**BASE, viewer="kodi")


def test_jellyfin_viewer():
    config = Config(
        sonarr_url="http://sonarr.test",
        sonarr_api_key="key",
        viewer="Jellyfin",
        jellyfin_url="http://jf.test",
        jellyfin_api_key="jf",
        jellyfin_user="alice",
    )
    assert config.viewer == "jellyfin"


def test_unknown_title_matching():
    with pytest.raises(ConfigError, match="match_titles"):
        Config(**BASE, match_titles="fuzzy")


def test_negative_retry_delay():
    with pytest.raises(ConfigError, match="delete_retry_delay"):
        Config(**BASE, delete_retry_delay=-1)
