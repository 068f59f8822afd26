"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings

CONFIG_ENV_VARS = (
    "PORT",
    "REDIS_CACHE_KEY",
    "OMDB_API_KEY",
    "OMDB_API_URL",
    "ENRICHMENT_BATCH_SIZE",
    "ENRICHMENT_BATCH_DELAY",
    "ENRICHMENT_CACHE_SIZE",
    "ENRICHMENT_CACHE_TTL",
    "DEFAULT_PAGE_SIZE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_documented_values() -> None:
    """Settings should fall back to the documented defaults."""

    settings = Settings(_env_file=None)

    assert settings.redis_cache_key == "media_radar_cache"
    assert settings.server_port == 5000
    assert settings.enrichment_batch_size == 5
    assert settings.enrichment_batch_delay_seconds == pytest.approx(0.1)
    assert settings.enrichment_cache_size == 5000
    assert settings.enrichment_cache_ttl_seconds is None
    assert settings.default_page_size == 20
    assert str(settings.omdb_api_url).startswith("http://www.omdbapi.com")


def test_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables should populate the aliased fields."""

    monkeypatch.setenv("REDIS_CACHE_KEY", "custom_cache")
    monkeypatch.setenv("OMDB_API_KEY", "abc123")
    monkeypatch.setenv("ENRICHMENT_BATCH_SIZE", "3")
    monkeypatch.setenv("ENRICHMENT_CACHE_TTL", "3600")

    settings = Settings(_env_file=None)

    assert settings.redis_cache_key == "custom_cache"
    assert settings.omdb_api_key == "abc123"
    assert settings.enrichment_batch_size == 3
    assert settings.enrichment_cache_ttl_seconds == 3600


@pytest.mark.parametrize("value", ["", "0", "none", "None"])
def test_cache_ttl_can_be_disabled(value: str) -> None:
    """Blank or zero TTL values should disable expiry."""

    settings = Settings(_env_file=None, ENRICHMENT_CACHE_TTL=value)

    assert settings.enrichment_cache_ttl_seconds is None


def test_blank_api_keys_become_none() -> None:
    """Whitespace-only credentials should count as missing."""

    settings = Settings(_env_file=None, OMDB_API_KEY="  ", TMDB_ACCESS_TOKEN="")

    assert settings.omdb_api_key is None
    assert settings.tmdb_access_token is None


def test_log_level_is_case_insensitive() -> None:
    """Log levels should be normalised to upper case."""

    assert Settings(_env_file=None, LOG_LEVEL="debug").log_level == "DEBUG"


def test_invalid_log_level_raises() -> None:
    """Unknown log levels should raise a validation error."""

    with pytest.raises(ValueError, match="standard logging level"):
        Settings(_env_file=None, LOG_LEVEL="chatty")


@pytest.mark.parametrize("size", [0, 101])
def test_page_size_bounds(size: int) -> None:
    """Default page sizes outside 1-100 should be rejected."""

    with pytest.raises(ValueError):
        Settings(_env_file=None, DEFAULT_PAGE_SIZE=size)


def test_default_poster_depends_on_media_kind() -> None:
    """Placeholder posters should differ for movies and TV shows."""

    settings = Settings(
        _env_file=None,
        DEFAULT_MOVIES_POSTER="https://img/movie.png",
        DEFAULT_TVSHOWS_POSTER="https://img/tv.png",
    )

    assert settings.default_poster("movie") == "https://img/movie.png"
    assert settings.default_poster("tvshow") == "https://img/tv.png"
