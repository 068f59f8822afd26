"""Exceptions raised by the catalog pipeline."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog pipeline failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CatalogStoreError(CatalogError):
    """The cache store could not be reached."""


class NoCatalogDataError(CatalogError):
    """The cache store holds no value for the catalog key."""

    def __init__(self, cache_key: str):
        self.cache_key = cache_key
        super().__init__(f"No media data found in cache under '{cache_key}'")


class MalformedCatalogError(CatalogError):
    """The cached blob does not match any recognised shape."""


class NotFoundError(CatalogError):
    """A positional lookup fell outside the current catalog bounds."""

    def __init__(self, catalog_type: str, media_id: int):
        self.catalog_type = catalog_type
        self.media_id = media_id
        super().__init__(f"{catalog_type} #{media_id} not found")


class InvalidPaginationError(CatalogError, ValueError):
    """Page numbers or page sizes outside their valid ranges."""


class EnrichmentSourceError(CatalogError):
    """A metadata source call failed. Never escapes the enrichment layer."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")
