"""Entry point for the FastAPI-powered media catalog service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Any, NoReturn

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .errors import (
    CatalogError,
    CatalogStoreError,
    InvalidPaginationError,
    MalformedCatalogError,
    NoCatalogDataError,
    NotFoundError,
)
from .models import CatalogPage, MediaKind
from .services.catalog_service import CatalogService
from .services.enrichment import EnrichmentCache, LocalResolver, MediaEnricher
from .services.omdb import OMDbClient
from .services.store import RedisCatalogStore
from .services.tmdb import TMDBClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app: FastAPI


@dataclass(frozen=True)
class MediaRoute:
    """Naming used by one media listing in URLs and response payloads."""

    kind: MediaKind
    prefix: str
    list_key: str
    total_key: str
    per_page_key: str
    label: str


MEDIA_ROUTES: tuple[MediaRoute, ...] = (
    MediaRoute(
        kind="movie",
        prefix="/api/movies",
        list_key="movies",
        total_key="totalMovies",
        per_page_key="moviesPerPage",
        label="Movie",
    ),
    MediaRoute(
        kind="tvshow",
        prefix="/api/tvshows",
        list_key="tvShows",
        total_key="totalTVShows",
        per_page_key="tvShowsPerPage",
        label="TV show",
    ),
)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    timeout = httpx.Timeout(settings.metadata_timeout_seconds, connect=5.0)
    omdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(timeout=timeout)
    )
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(base_url=str(settings.tmdb_api_url), timeout=timeout)
    )
    store = RedisCatalogStore.from_url(settings.redis_url)
    exit_stack.push_async_callback(store.close)

    enricher = MediaEnricher(
        settings,
        [
            OMDbClient(settings, omdb_http_client),
            TMDBClient(settings, tmdb_http_client),
            LocalResolver(settings),
        ],
        EnrichmentCache(
            settings.enrichment_cache_size, settings.enrichment_cache_ttl_seconds
        ),
    )
    fastapi_app.state.catalog_service = CatalogService(settings, store, enricher)

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Paginated, enriched movie and TV show download catalog",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_catalog_service(app: FastAPI) -> CatalogService:
    service = getattr(app.state, "catalog_service", None)
    if not isinstance(service, CatalogService):
        raise RuntimeError("Catalog service not initialised")
    return service


def _raise_http_error(exc: CatalogError, label: str = "Media") -> NoReturn:
    """Translate pipeline failures into HTTP errors."""

    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=f"{label} not found") from exc
    if isinstance(exc, InvalidPaginationError):
        raise HTTPException(status_code=400, detail=exc.message) from exc
    if isinstance(exc, (NoCatalogDataError, CatalogStoreError)):
        raise HTTPException(
            status_code=503,
            detail={"error": "Catalog data unavailable", "details": exc.message},
        ) from exc
    if isinstance(exc, MalformedCatalogError):
        raise HTTPException(
            status_code=502,
            detail={"error": "Catalog data is malformed", "details": exc.message},
        ) from exc
    raise exc


def _page_payload(result: CatalogPage, route: MediaRoute) -> dict[str, Any]:
    payload = result.to_payload()
    pagination = payload["pagination"]
    pagination[route.total_key] = pagination["totalItems"]
    pagination[route.per_page_key] = pagination["itemsPerPage"]
    body: dict[str, Any] = {
        route.list_key: payload["items"],
        "pagination": pagination,
        "metadata": payload["metadata"],
    }
    for section in ("filter", "search"):
        if section in payload:
            body[section] = payload[section]
    return body


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/health")
    async def store_health() -> dict[str, Any]:
        status = await get_catalog_service(fastapi_app).store_status()
        return {
            "status": "ok" if status.connected else "degraded",
            "store": status.to_payload(),
        }

    @fastapi_app.get("/api/analyze/structure")
    async def analyze_structure() -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            report = await service.analyze_structure()
        except CatalogError as exc:
            _raise_http_error(exc)
        return report.to_payload()

    for route in MEDIA_ROUTES:
        _register_media_routes(fastapi_app, route)


def _register_media_routes(fastapi_app: FastAPI, route: MediaRoute) -> None:
    @fastapi_app.get(route.prefix, name=f"list_{route.list_key}")
    async def list_media(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        logger.info("%s listing request - page %d, limit %d", route.label, page, limit)
        try:
            result = await service.list_media(route.kind, page, limit)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return _page_payload(result, route)

    @fastapi_app.get(f"{route.prefix}/search", name=f"search_{route.list_key}")
    async def search_media(
        q: str = "",
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            result = await service.search_media(route.kind, q, page, limit)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return _page_payload(result, route)

    @fastapi_app.get(
        f"{route.prefix}/by-quality/{{quality}}", name=f"{route.list_key}_by_quality"
    )
    async def media_by_quality(
        quality: str,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            result = await service.list_by_quality(route.kind, quality, page, limit)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return _page_payload(result, route)

    @fastapi_app.get(
        f"{route.prefix}/by-language/{{language}}", name=f"{route.list_key}_by_language"
    )
    async def media_by_language(
        language: str,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    ) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            result = await service.list_by_language(route.kind, language, page, limit)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return _page_payload(result, route)

    @fastapi_app.get(f"{route.prefix}/languages", name=f"{route.list_key}_languages")
    async def available_languages() -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            facets = await service.available_languages(route.kind)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return facets.to_payload()

    @fastapi_app.get(f"{route.prefix}/{{media_id}}", name=f"get_{route.kind}")
    async def get_media(media_id: int) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            record = await service.get_media(route.kind, media_id)
        except CatalogError as exc:
            _raise_http_error(exc, route.label)
        return record.to_payload()


app = create_app()
