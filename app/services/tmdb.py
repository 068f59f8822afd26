"""Utilities for resolving metadata from The Movie Database (TMDB)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import Settings
from ..models import MediaDetails, MediaKind

logger = logging.getLogger(__name__)

MISSING = "N/A"
CREATOR_JOBS = {"Executive Producer", "Creator"}


@dataclass(slots=True)
class TMDBSearchResult:
    """Normalized view of a TMDB search result."""

    tmdb_id: int
    title: str
    year: int | None


class TMDBClient:
    """Client that searches TMDB and fetches full details for the top hit."""

    source = "tmdb"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def enabled(self) -> bool:
        return bool(self._settings.tmdb_api_key or self._settings.tmdb_access_token)

    async def resolve(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> MediaDetails | None:
        """Search for ``title`` and format the details of the first result."""

        result = await self.search_by_title_year(title, year, media_kind)
        if result is None:
            return None
        details = await self.get_details(result.tmdb_id, media_kind)
        if details is None:
            return None
        if media_kind == "movie":
            return self.format_movie(details, requested_title=title)
        return self.format_show(details)

    async def search_by_title_year(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> TMDBSearchResult | None:
        """Return the first search result for the supplied title."""

        endpoint = "/search/movie" if media_kind == "movie" else "/search/tv"
        params: dict[str, Any] = {"query": title, "include_adult": "false"}
        if year:
            if media_kind == "movie":
                params["year"] = year
            else:
                params["first_air_date_year"] = year

        data = await self._get(endpoint, params)
        if not data:
            return None
        results = data.get("results") or []
        if not results or not isinstance(results[0], dict):
            return None

        top = results[0]
        return TMDBSearchResult(
            tmdb_id=int(top["id"]),
            title=top.get("title") or top.get("name") or title,
            year=self._extract_year(top, media_kind),
        )

    async def get_details(
        self, tmdb_id: int, media_kind: MediaKind
    ) -> dict[str, Any] | None:
        endpoint = f"/{'movie' if media_kind == 'movie' else 'tv'}/{tmdb_id}"
        return await self._get(endpoint, {"append_to_response": "credits,videos"})

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any] | None:
        if not self.enabled:
            return None
        headers: dict[str, str] = {}
        if self._settings.tmdb_api_key:
            params = {**params, "api_key": self._settings.tmdb_api_key}
        if self._settings.tmdb_access_token:
            headers["Authorization"] = f"Bearer {self._settings.tmdb_access_token}"

        try:
            response = await self._client.get(endpoint, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request to %s failed: %s", endpoint, exc)
            return None
        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s failed: %s", endpoint, response.text
            )
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("TMDB returned invalid JSON for %s", endpoint)
            return None
        return payload if isinstance(payload, dict) else None

    def format_movie(
        self, details: dict[str, Any], *, requested_title: str | None = None
    ) -> MediaDetails:
        credits = details.get("credits") or {}
        directors = [
            person.get("name")
            for person in credits.get("crew") or []
            if person.get("job") == "Director"
        ][:3]
        tmdb_title = details.get("title") or details.get("original_title")
        backdrop = None
        # Only trust the backdrop when TMDB agrees with the scraped title.
        if requested_title is None or requested_title == details.get("title"):
            backdrop = self._build_image_url(details.get("backdrop_path"))
        runtime = details.get("runtime")
        rating = self._format_rating(details.get("vote_average"))

        return MediaDetails(
            title=requested_title or tmdb_title or "",
            tagline=details.get("tagline") or "",
            year=self._extract_year(details, "movie"),
            release_date=details.get("release_date") or None,
            poster=self._build_image_url(details.get("poster_path"))
            or self._settings.default_poster("movie"),
            backdrop=backdrop,
            plot=details.get("overview") or "No plot available.",
            genre=self._join_names(details.get("genres")) or "Unknown",
            director=", ".join(filter(None, directors)) or MISSING,
            actors=self._top_cast(credits),
            country=self._join_names(details.get("production_countries")) or MISSING,
            language=details.get("original_language") or MISSING,
            runtime=f"{runtime} min" if runtime else None,
            tmdb_rating=rating,
            rating=rating,
            tmdb_id=details.get("id"),
            has_real_poster=bool(details.get("poster_path")),
            data_source="tmdb",
            type="movie",
        )

    def format_show(self, details: dict[str, Any]) -> MediaDetails:
        credits = details.get("credits") or {}
        creators = [
            person.get("name")
            for person in credits.get("crew") or []
            if person.get("job") in CREATOR_JOBS
        ][:3]
        rating = self._format_rating(details.get("vote_average"))

        return MediaDetails(
            title=details.get("name") or details.get("original_name") or "",
            tagline=details.get("tagline") or "",
            year=self._extract_year(details, "tvshow"),
            release_date=details.get("first_air_date") or None,
            end_date=details.get("last_air_date") or None,
            poster=self._build_image_url(details.get("poster_path"))
            or self._settings.default_poster("tvshow"),
            backdrop=self._build_image_url(details.get("backdrop_path")),
            plot=details.get("overview") or "No plot available.",
            genre=self._join_names(details.get("genres")) or "Unknown",
            director=", ".join(filter(None, creators)) or MISSING,
            actors=self._top_cast(credits),
            country=", ".join(details.get("origin_country") or []) or MISSING,
            language=details.get("original_language") or MISSING,
            seasons=details.get("number_of_seasons") or 0,
            episodes=details.get("number_of_episodes") or 0,
            status=details.get("status") or "Unknown",
            networks=self._join_names(details.get("networks")) or MISSING,
            tmdb_rating=rating,
            rating=rating,
            tmdb_id=details.get("id"),
            has_real_poster=bool(details.get("poster_path")),
            data_source="tmdb",
            type="tvshow",
        )

    @staticmethod
    def _top_cast(credits: dict[str, Any]) -> str:
        names = [actor.get("name") for actor in (credits.get("cast") or [])[:5]]
        return ", ".join(filter(None, names)) or MISSING

    @staticmethod
    def _join_names(values: Any) -> str:
        if not isinstance(values, list):
            return ""
        return ", ".join(
            str(value["name"]) for value in values if isinstance(value, dict) and value.get("name")
        )

    @staticmethod
    def _format_rating(value: Any) -> str | None:
        if not value:
            return None
        try:
            return f"{float(value):.1f}"
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _extract_year(result: dict[str, Any], media_kind: str) -> int | None:
        date_key = "release_date" if media_kind == "movie" else "first_air_date"
        date_value = result.get(date_key)
        if not isinstance(date_value, str) or len(date_value) < 4:
            return None
        try:
            return int(date_value[:4])
        except ValueError:
            return None

    def _build_image_url(self, path: str | None) -> str | None:
        if not path:
            return None
        if path.startswith("http"):
            return path
        return f"{self._settings.tmdb_image_base_url}{path}"
