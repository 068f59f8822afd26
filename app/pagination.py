"""Filtering, positional lookup and page slicing over normalised entries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .errors import InvalidPaginationError, NotFoundError
from .models import Pagination
from .normalizer import CatalogEntry
from .utils import normalize_language


@dataclass(slots=True)
class PageSlice:
    items: list[CatalogEntry]
    pagination: Pagination

    @property
    def offset(self) -> int:
        return (self.pagination.current_page - 1) * self.pagination.items_per_page


def build_pagination(total_items: int, page: int, page_size: int) -> Pagination:
    """Derive pagination metadata, rejecting pages that cannot exist."""

    if page_size <= 0:
        raise InvalidPaginationError(f"Page size must be positive, got {page_size}")
    if page < 1:
        raise InvalidPaginationError(f"Page must be 1 or greater, got {page}")
    total_pages = math.ceil(total_items / page_size)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=page_size,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def paginate(entries: Sequence[CatalogEntry], page: int, page_size: int) -> PageSlice:
    pagination = build_pagination(len(entries), page, page_size)
    offset = (page - 1) * page_size
    return PageSlice(items=list(entries[offset : offset + page_size]), pagination=pagination)


def filter_by_quality(entries: Sequence[CatalogEntry], quality: str) -> list[CatalogEntry]:
    """Keep entries offering at least one file in ``quality``."""

    return [
        (key, quality_map)
        for key, quality_map in entries
        if isinstance(quality_map.get(quality), list) and quality_map[quality]
    ]


def _language_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(filter(None, (normalize_language(item) for item in value)))
    return normalize_language(value) or ""


def _has_language(quality_map: Mapping[str, Any], language: str) -> bool:
    for files in quality_map.values():
        if not isinstance(files, list):
            continue
        for record in files:
            if not isinstance(record, dict):
                continue
            if language in _language_text(record.get("language")).casefold():
                return True
    return False


def filter_by_language(entries: Sequence[CatalogEntry], language: str) -> list[CatalogEntry]:
    """Keep entries where any file's language contains ``language``."""

    needle = language.casefold()
    return [
        (key, quality_map)
        for key, quality_map in entries
        if _has_language(quality_map, needle)
    ]


def search_by_title(entries: Sequence[CatalogEntry], query: str) -> list[CatalogEntry]:
    """Keep entries whose catalog key contains ``query``, ignoring case."""

    needle = (query or "").strip().casefold()
    if not needle:
        return list(entries)
    return [(key, quality_map) for key, quality_map in entries if needle in key.casefold()]


def find_by_id(
    entries: Sequence[CatalogEntry], media_id: int, *, catalog_type: str = "media"
) -> CatalogEntry:
    """Return the entry at 1-based position ``media_id``.

    Ids are offsets into the current entry order, so they shift whenever the
    cached blob changes.
    """

    if 1 <= media_id <= len(entries):
        return entries[media_id - 1]
    raise NotFoundError(catalog_type, media_id)
