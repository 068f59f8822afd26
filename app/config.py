"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MediaRadar", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=5000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_cache_key: str = Field(default="media_radar_cache", alias="REDIS_CACHE_KEY")

    omdb_api_key: str | None = Field(default=None, alias="OMDB_API_KEY")
    omdb_api_url: HttpUrl = Field(
        default="http://www.omdbapi.com/", alias="OMDB_API_URL"
    )
    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_access_token: str | None = Field(default=None, alias="TMDB_ACCESS_TOKEN")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_image_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w500", alias="TMDB_IMAGE_BASE_URL"
    )
    metadata_timeout_seconds: float = Field(
        default=5.0, alias="METADATA_TIMEOUT", gt=0, le=60
    )

    enrichment_batch_size: int = Field(
        default=5, alias="ENRICHMENT_BATCH_SIZE", ge=1, le=50
    )
    enrichment_batch_delay_seconds: float = Field(
        default=0.1, alias="ENRICHMENT_BATCH_DELAY", ge=0, le=10
    )
    enrichment_cache_size: int = Field(
        default=5_000, alias="ENRICHMENT_CACHE_SIZE", ge=1
    )
    enrichment_cache_ttl_seconds: int | None = Field(
        default=None, alias="ENRICHMENT_CACHE_TTL", ge=1
    )

    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE", ge=1, le=100)
    default_movies_poster: str = Field(
        default="https://via.placeholder.com/300x450/2a2a2a/ffffff?text=🎬",
        alias="DEFAULT_MOVIES_POSTER",
    )
    default_tvshows_poster: str = Field(
        default="https://via.placeholder.com/300x450/2a2a2a/ffffff?text=📺",
        alias="DEFAULT_TVSHOWS_POSTER",
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        """Accept log levels in any case."""

        if value is None:
            return "INFO"
        level = str(value).strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return level

    @field_validator(
        "omdb_api_key", "tmdb_api_key", "tmdb_access_token", mode="before"
    )
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("enrichment_cache_ttl_seconds", mode="before")
    @classmethod
    def _parse_optional_ttl(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in {"", "0", "none"}:
            return None
        return value

    def default_poster(self, media_kind: str) -> str:
        """Return the placeholder poster for a media kind."""

        if media_kind == "tvshow":
            return self.default_tvshows_poster
        return self.default_movies_poster

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
