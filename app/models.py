"""Pydantic models describing catalog records and pages."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MediaKind = Literal["movie", "tvshow"]
CatalogType = Literal["movies", "tvshows"]
DataSource = Literal["omdb", "tmdb", "local", "error"]
SizeSource = Literal["redis_metadata", "filename_extraction"]

CATALOG_TYPE_BY_KIND: dict[str, CatalogType] = {"movie": "movies", "tvshow": "tvshows"}
KIND_BY_CATALOG_TYPE: dict[str, MediaKind] = {
    catalog_type: kind for kind, catalog_type in CATALOG_TYPE_BY_KIND.items()
}


class CamelModel(BaseModel):
    """Base model accepting snake_case names and emitting camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EpisodeRange(BaseModel):
    start: int
    end: int


class ProcessedFile(CamelModel):
    """A scraped file record projected into display-ready fields."""

    filename: str
    original_filename: str | None = Field(default=None, alias="originalFilename")
    href: str = "#"
    size: str
    size_source: SizeSource = Field(alias="sizeSource")
    magnet_link: str | None = Field(default=None, alias="magnetLink")
    language: str | None = None
    release_year: int | None = Field(default=None, alias="releaseYear")
    season: int | None = None
    episode: int | None = None
    episode_range: EpisodeRange | None = Field(default=None, alias="episodeRange")


class DownloadLanguages(BaseModel):
    available: list[str] = Field(default_factory=list)


class DownloadListing(BaseModel):
    """Per-quality download options for one catalog entry."""

    download_options: dict[str, list[ProcessedFile]] = Field(default_factory=dict)
    download_languages: DownloadLanguages = Field(default_factory=DownloadLanguages)
    total_files: int = 0
    poster_url: str | None = None


class MediaDetails(CamelModel):
    """Metadata resolved for one ``(title, year, kind)`` triple."""

    title: str
    year: int | None = None
    type: MediaKind
    data_source: DataSource = Field(alias="dataSource")
    poster: str | None = None
    backdrop: str | None = None
    plot: str = "No plot available."
    genre: str = "Unknown"
    tagline: str | None = None
    release_date: str | None = Field(default=None, alias="releaseDate")
    end_date: str | None = Field(default=None, alias="endDate")
    director: str | None = None
    actors: str | None = None
    country: str | None = None
    language: str | None = None
    runtime: str | None = None
    rating: str | None = None
    imdb_rating: str | None = Field(default=None, alias="imdbRating")
    tmdb_rating: str | None = Field(default=None, alias="tmdbRating")
    imdb_id: str | None = Field(default=None, alias="imdbId")
    tmdb_id: int | None = Field(default=None, alias="tmdbId")
    seasons: int | None = None
    episodes: int | None = None
    status: str | None = None
    networks: str | None = None
    has_real_poster: bool = Field(default=False, alias="hasRealPoster")
    error: str | None = None


class CatalogRecord(MediaDetails):
    """A fully enriched catalog entry returned to callers."""

    id: int
    original_key: str | None = Field(default=None, alias="originalKey")
    download_options: dict[str, list[ProcessedFile]] = Field(
        default_factory=dict, alias="downloadOptions"
    )
    download_languages: DownloadLanguages | None = Field(
        default=None, alias="downloadLanguages"
    )
    total_files: int = Field(default=0, alias="totalFiles")

    @classmethod
    def compose(
        cls,
        media_id: int,
        key: str,
        details: MediaDetails,
        listing: DownloadListing,
    ) -> "CatalogRecord":
        """Merge enrichment metadata with the entry's download listing."""

        payload = details.model_dump()
        # Scraped posters beat whatever the metadata sources suggested.
        payload["poster"] = listing.poster_url or details.poster
        return cls(
            **payload,
            id=media_id,
            original_key=key,
            download_options=listing.download_options,
            download_languages=listing.download_languages,
            total_files=listing.total_files,
        )


class Pagination(CamelModel):
    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_items: int = Field(alias="totalItems")
    items_per_page: int = Field(alias="itemsPerPage")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")


class CatalogMetadata(CamelModel):
    data_structure: str = Field(alias="dataStructure")
    total_in_cache: int = Field(alias="totalInCache")
    filtered_count: int = Field(alias="filteredCount")
    processing_time_ms: int | None = Field(default=None, alias="processingTimeMs")


class CatalogPage(CamelModel):
    """One page of enriched records plus its pagination and source facts."""

    items: list[CatalogRecord] = Field(default_factory=list)
    pagination: Pagination
    metadata: CatalogMetadata
    filter: dict[str, Any] | None = None
    search: dict[str, Any] | None = None


class LanguageCount(BaseModel):
    language: str
    count: int


class QualityCount(BaseModel):
    quality: str
    count: int


class LanguageFacets(CamelModel):
    """File counts per language and per quality across one media type."""

    languages: list[LanguageCount] = Field(default_factory=list)
    qualities: list[QualityCount] = Field(default_factory=list)
    total_files_with_metadata: int = Field(default=0, alias="totalFilesWithMetadata")
    most_common_language: str | None = Field(default=None, alias="mostCommonLanguage")


class EntrySample(CamelModel):
    key: str
    qualities: list[str] = Field(default_factory=list)
    file_count: int = Field(default=0, alias="fileCount")


class StructureReport(CamelModel):
    """Shape and field statistics of the cached catalog blob."""

    data_type: str = Field(alias="dataType")
    data_structure: str = Field(alias="dataStructure")
    total_size: int = Field(alias="totalSize")
    entry_count: int = Field(default=0, alias="entryCount")
    movie_count: int = Field(default=0, alias="movieCount")
    tvshow_count: int = Field(default=0, alias="tvShowCount")
    entries_with_downloads: int = Field(default=0, alias="entriesWithDownloads")
    quality_distribution: dict[str, int] = Field(
        default_factory=dict, alias="qualityDistribution"
    )
    detected_fields: list[str] = Field(default_factory=list, alias="detectedFields")
    file_formats: dict[str, int] = Field(default_factory=dict, alias="fileFormats")
    average_files_per_entry: float = Field(default=0.0, alias="averageFilesPerEntry")
    largest_entry_files: int = Field(default=0, alias="largestEntryFiles")
    has_domain_prefixes: bool = Field(default=False, alias="hasDomainPrefixes")
    has_size_metadata: bool = Field(default=False, alias="hasSizeMetadata")
    samples: list[EntrySample] = Field(default_factory=list)


class StoreStatus(CamelModel):
    connected: bool
    cache_key: str = Field(alias="cacheKey")
    has_cache_key: bool = Field(default=False, alias="hasCacheKey")
