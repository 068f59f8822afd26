"""Compose the cached blob, filters and enrichment into catalog pages."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Sequence

from ..analysis import analyze_structure, summarize_languages
from ..classifier import DEFAULT_CLASSIFIER, Classifier
from ..config import Settings
from ..errors import CatalogStoreError, MalformedCatalogError, NoCatalogDataError
from ..models import (
    CATALOG_TYPE_BY_KIND,
    CatalogMetadata,
    CatalogPage,
    CatalogRecord,
    LanguageFacets,
    MediaKind,
    StoreStatus,
    StructureReport,
)
from ..normalizer import CatalogEntry, NormalizedCatalog, normalize
from ..pagination import (
    filter_by_language,
    filter_by_quality,
    find_by_id,
    paginate,
    search_by_title,
)
from .enrichment import MediaEnricher
from .store import CatalogStore

logger = logging.getLogger(__name__)

EntryFilter = Callable[[Sequence[CatalogEntry]], list[CatalogEntry]]


class CatalogService:
    """Serve paginated, enriched movie and TV show listings."""

    def __init__(
        self,
        settings: Settings,
        store: CatalogStore,
        enricher: MediaEnricher,
        classifier: Classifier = DEFAULT_CLASSIFIER,
    ):
        self._settings = settings
        self._store = store
        self._enricher = enricher
        self._classifier = classifier

    async def load_raw(self) -> str | bytes:
        cache_key = self._settings.redis_cache_key
        raw = await self._store.get(cache_key)
        if raw is None or raw == b"" or raw == "":
            raise NoCatalogDataError(cache_key)
        return raw

    async def load_blob(self, raw: str | bytes | None = None) -> Any:
        """Fetch and decode the cached catalog blob."""

        if raw is None:
            raw = await self.load_raw()
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedCatalogError(f"Cached catalog is not valid JSON: {exc}") from exc

    async def load_entries(self, media_kind: MediaKind) -> NormalizedCatalog:
        blob = await self.load_blob()
        return normalize(blob, CATALOG_TYPE_BY_KIND[media_kind], self._classifier)

    async def list_media(
        self, media_kind: MediaKind, page: int = 1, limit: int | None = None
    ) -> CatalogPage:
        return await self._build_page(media_kind, page, limit)

    async def list_by_quality(
        self, media_kind: MediaKind, quality: str, page: int = 1, limit: int | None = None
    ) -> CatalogPage:
        result = await self._build_page(
            media_kind,
            page,
            limit,
            entry_filter=lambda entries: filter_by_quality(entries, quality),
        )
        result.filter = {"quality": quality, "totalFound": result.pagination.total_items}
        return result

    async def list_by_language(
        self, media_kind: MediaKind, language: str, page: int = 1, limit: int | None = None
    ) -> CatalogPage:
        result = await self._build_page(
            media_kind,
            page,
            limit,
            entry_filter=lambda entries: filter_by_language(entries, language),
        )
        result.filter = {"language": language, "totalFound": result.pagination.total_items}
        return result

    async def search_media(
        self, media_kind: MediaKind, query: str, page: int = 1, limit: int | None = None
    ) -> CatalogPage:
        result = await self._build_page(
            media_kind,
            page,
            limit,
            entry_filter=lambda entries: search_by_title(entries, query),
        )
        result.search = {"query": query, "totalFound": result.pagination.total_items}
        return result

    async def get_media(self, media_kind: MediaKind, media_id: int) -> CatalogRecord:
        """Return the record at 1-based position ``media_id`` of the listing."""

        catalog = await self.load_entries(media_kind)
        entry = find_by_id(
            catalog.entries, media_id, catalog_type=CATALOG_TYPE_BY_KIND[media_kind]
        )
        records = await self._enricher.enrich_entries([entry], media_id - 1, media_kind)
        return records[0]

    async def available_languages(self, media_kind: MediaKind) -> LanguageFacets:
        """Count files per language and quality for one media type."""

        catalog = await self.load_entries(media_kind)
        return summarize_languages(catalog.entries)

    async def analyze_structure(self) -> StructureReport:
        raw = await self.load_raw()
        blob = await self.load_blob(raw)
        return analyze_structure(blob, len(raw), self._classifier)

    async def store_status(self) -> StoreStatus:
        cache_key = self._settings.redis_cache_key
        connected = await self._store.ping()
        has_key = False
        if connected:
            try:
                has_key = await self._store.exists(cache_key)
            except CatalogStoreError:
                connected = False
        return StoreStatus(connected=connected, cache_key=cache_key, has_cache_key=has_key)

    async def _build_page(
        self,
        media_kind: MediaKind,
        page: int,
        limit: int | None,
        *,
        entry_filter: EntryFilter | None = None,
    ) -> CatalogPage:
        started = time.perf_counter()
        page_size = limit if limit is not None else self._settings.default_page_size

        catalog = await self.load_entries(media_kind)
        entries = catalog.entries
        if entry_filter is not None:
            entries = entry_filter(entries)

        page_slice = paginate(entries, page, page_size)
        records = await self._enricher.enrich_entries(
            page_slice.items, page_slice.offset, media_kind
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Served %d %s records for page %d in %dms",
            len(records),
            media_kind,
            page,
            elapsed_ms,
        )

        return CatalogPage(
            items=records,
            pagination=page_slice.pagination,
            metadata=CatalogMetadata(
                data_structure=catalog.data_structure,
                total_in_cache=catalog.total_in_source,
                filtered_count=len(entries),
                processing_time_ms=elapsed_ms,
            ),
        )
