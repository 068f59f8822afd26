"""Client for the Open Movie Database (OMDb)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..models import MediaDetails, MediaKind

logger = logging.getLogger(__name__)

MISSING = "N/A"
OMDB_TYPES: dict[str, str] = {"movie": "movie", "tvshow": "series"}


class OMDbClient:
    """Looks up titles on OMDb by exact title, year and type."""

    source = "omdb"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def enabled(self) -> bool:
        return bool(self._settings.omdb_api_key)

    async def search_by_title_year(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> dict[str, Any] | None:
        """Return the raw OMDb payload for an exact match, if any."""

        if not self.enabled:
            return None
        params: dict[str, Any] = {
            "apikey": self._settings.omdb_api_key,
            "t": title,
            "type": OMDB_TYPES[media_kind],
            "plot": "full",
        }
        if year:
            params["y"] = year

        try:
            response = await self._client.get(
                str(self._settings.omdb_api_url), params=params
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("OMDb lookup failed for %s (%s): %s", title, year, exc)
            return None

        if not isinstance(payload, dict) or payload.get("Response") != "True":
            logger.debug(
                "OMDb has no %s match for %s (%s): %s",
                media_kind,
                title,
                year,
                payload.get("Error") if isinstance(payload, dict) else payload,
            )
            return None
        return payload

    async def resolve(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> MediaDetails | None:
        payload = await self.search_by_title_year(title, year, media_kind)
        if payload is None:
            return None
        return self.format_details(payload, media_kind)

    def format_details(self, payload: dict[str, Any], media_kind: MediaKind) -> MediaDetails:
        """Map an OMDb payload onto :class:`MediaDetails`."""

        poster = self._present(payload.get("Poster"))
        imdb_rating = self._present(payload.get("imdbRating"))
        details: dict[str, Any] = {
            "title": payload.get("Title") or "",
            "year": self._parse_year(payload.get("Year")),
            "type": media_kind,
            "data_source": "omdb",
            "tagline": "",
            "release_date": self._present(payload.get("Released")),
            "poster": poster or self._settings.default_poster(media_kind),
            "has_real_poster": poster is not None,
            "plot": self._present(payload.get("Plot")) or "No plot available.",
            "genre": self._present(payload.get("Genre")) or "Unknown",
            "director": self._present(payload.get("Director")) or MISSING,
            "actors": self._present(payload.get("Actors")) or MISSING,
            "country": self._present(payload.get("Country")) or MISSING,
            "language": self._present(payload.get("Language")) or MISSING,
            "runtime": self._present(payload.get("Runtime")),
            "imdb_rating": imdb_rating,
            "rating": imdb_rating,
            "imdb_id": self._present(payload.get("imdbID")),
        }
        if media_kind == "tvshow":
            details["seasons"] = self._parse_int(payload.get("totalSeasons"))
        return MediaDetails(**details)

    @staticmethod
    def _present(value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text or text == MISSING:
            return None
        return text

    @staticmethod
    def _parse_year(value: Any) -> int | None:
        # Series years look like "2008–2013"; keep the first one.
        if not value:
            return None
        text = str(value).strip()[:4]
        return int(text) if text.isdigit() else None

    @staticmethod
    def _parse_int(value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0
