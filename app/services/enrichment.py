"""Resolve catalog keys to metadata through an ordered chain of sources."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from datetime import datetime
from typing import Any, Mapping, Protocol, Sequence

from ..config import Settings
from ..downloads import process_download_data
from ..errors import EnrichmentSourceError
from ..models import CatalogRecord, MediaDetails, MediaKind
from ..normalizer import CatalogEntry
from ..utils import analyze_genre_from_title, parse_catalog_key

logger = logging.getLogger(__name__)

CacheKey = tuple[str, int | None, str]


class Resolver(Protocol):
    """A metadata source tried as one step of the enrichment chain."""

    source: str

    async def resolve(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> MediaDetails | None:
        ...


class EnrichmentCache:
    """Bounded LRU map of resolved metadata with an optional expiry.

    Reads and writes never await, so on a single event loop each operation is
    atomic. Two requests missing the same key may both resolve it; the later
    write wins.
    """

    def __init__(self, max_entries: int = 5_000, ttl_seconds: float | None = None):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._entries: OrderedDict[CacheKey, tuple[float, MediaDetails]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> MediaDetails | None:
        item = self._entries.get(key)
        if item is None:
            return None
        stored_at, details = item
        if self._ttl_seconds is not None and time.monotonic() - stored_at > self._ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return details

    def set(self, key: CacheKey, details: MediaDetails) -> None:
        self._entries[key] = (time.monotonic(), details)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()


class LocalResolver:
    """Last resort that builds a minimal record from the title alone."""

    source = "local"

    def __init__(self, settings: Settings):
        self._settings = settings

    def build(self, title: str, year: int | None, media_kind: MediaKind) -> MediaDetails:
        return MediaDetails(
            title=title,
            year=year,
            type=media_kind,
            data_source="local",
            poster=self._settings.default_poster(media_kind),
            genre=analyze_genre_from_title(title),
            plot="No plot available.",
            has_real_poster=False,
        )

    async def resolve(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> MediaDetails | None:
        return self.build(title, year, media_kind)


class MediaEnricher:
    """Resolve metadata for catalog entries and compose final records.

    Sources in ``resolvers`` are tried in order and the first non-empty answer
    wins. Failures inside a source are logged and treated as "no answer", and
    whatever is resolved (including the local fallback) is cached per
    ``(title, year, media_kind)``.
    """

    def __init__(
        self,
        settings: Settings,
        resolvers: Sequence[Resolver],
        cache: EnrichmentCache | None = None,
        *,
        batch_size: int | None = None,
        batch_delay: float | None = None,
        resolver_timeout: float | None = None,
    ):
        self._settings = settings
        self._fallback = LocalResolver(settings)
        self._resolvers: tuple[Resolver, ...] = tuple(resolvers)
        self._cache = cache if cache is not None else EnrichmentCache(
            settings.enrichment_cache_size, settings.enrichment_cache_ttl_seconds
        )
        self._batch_size = batch_size or settings.enrichment_batch_size
        self._batch_delay = (
            settings.enrichment_batch_delay_seconds if batch_delay is None else batch_delay
        )
        self._resolver_timeout = (
            settings.metadata_timeout_seconds * 3
            if resolver_timeout is None
            else resolver_timeout
        )

    @property
    def cache(self) -> EnrichmentCache:
        return self._cache

    @property
    def resolvers(self) -> tuple[Resolver, ...]:
        return self._resolvers

    async def enrich(
        self, title: str, year: int | None, media_kind: MediaKind
    ) -> MediaDetails:
        """Return metadata for the triple. Never raises."""

        key: CacheKey = (title, year, media_kind)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        details: MediaDetails | None = None
        for resolver in self._resolvers:
            details = await self._try_resolver(resolver, title, year, media_kind)
            if details is not None:
                logger.debug("Resolved %s (%s) via %s", title, year, resolver.source)
                break

        if details is None:
            details = self._fallback.build(title, year, media_kind)
        self._cache.set(key, details)
        return details

    async def _try_resolver(
        self,
        resolver: Resolver,
        title: str,
        year: int | None,
        media_kind: MediaKind,
    ) -> MediaDetails | None:
        try:
            return await asyncio.wait_for(
                resolver.resolve(title, year, media_kind),
                timeout=self._resolver_timeout,
            )
        except Exception as exc:
            error = EnrichmentSourceError(resolver.source, str(exc) or type(exc).__name__)
            logger.warning("Skipping metadata source for %s (%s): %s", title, year, error)
            return None

    async def enrich_entries(
        self,
        entries: Sequence[CatalogEntry],
        start_index: int = 0,
        media_kind: MediaKind = "movie",
    ) -> list[CatalogRecord]:
        """Build catalog records for ``entries`` in rate-limited batches.

        Each batch runs concurrently; a short pause separates batches to stay
        under upstream rate limits. Record ids continue from ``start_index``.
        """

        records: list[CatalogRecord] = []
        for batch_start in range(0, len(entries), self._batch_size):
            batch = entries[batch_start : batch_start + self._batch_size]
            results = await asyncio.gather(
                *(
                    self._build_record(
                        key,
                        quality_map,
                        start_index + batch_start + offset + 1,
                        media_kind,
                    )
                    for offset, (key, quality_map) in enumerate(batch)
                )
            )
            records.extend(results)
            if batch_start + self._batch_size < len(entries) and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)
        return records

    async def _build_record(
        self,
        key: str,
        quality_map: Mapping[str, Any],
        media_id: int,
        media_kind: MediaKind,
    ) -> CatalogRecord:
        try:
            title, year = parse_catalog_key(key)
            details = await self.enrich(title, year, media_kind)
            listing = process_download_data(quality_map, media_kind)
            return CatalogRecord.compose(media_id, key, details, listing)
        except Exception as exc:
            logger.exception("Failed to build catalog record for %s", key)
            return CatalogRecord(
                id=media_id,
                title=key,
                year=datetime.now().year,
                type=media_kind,
                data_source="error",
                poster=self._settings.default_poster(media_kind),
                genre="Unknown",
                has_real_poster=False,
                error=str(exc),
                original_key=key,
            )
