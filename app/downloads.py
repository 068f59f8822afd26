"""Turn raw file records into per-quality download options."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .models import DownloadLanguages, DownloadListing, EpisodeRange, MediaKind, ProcessedFile
from .utils import (
    clean_filename,
    extract_episode_markers,
    extract_release_year,
    extract_size_from_filename,
    format_file_size,
    normalize_language,
)

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    return str(value)


def process_file(record: Mapping[str, Any], media_kind: MediaKind) -> ProcessedFile:
    """Project one scraped file record into a :class:`ProcessedFile`."""

    original = record.get("filename") or record.get("name")
    if original is not None:
        original = str(original)
    raw_size = record.get("size")
    if raw_size and not isinstance(raw_size, bool):
        size = format_file_size(raw_size)
        size_source = "redis_metadata"
    else:
        size = extract_size_from_filename(original or "")
        size_source = "filename_extraction"

    data: dict[str, Any] = {
        "filename": clean_filename(original) or "Unknown",
        "original_filename": original,
        "href": _text(record.get("href") or record.get("url")) or "#",
        "size": size,
        "size_source": size_source,
        "magnet_link": _text(record.get("magnetLink")),
        "language": normalize_language(record.get("language")),
        "release_year": extract_release_year(original),
    }

    if media_kind == "tvshow" and original:
        markers = extract_episode_markers(original)
        data["season"] = markers.season
        data["episode"] = markers.episode
        if markers.episode_range:
            start, end = markers.episode_range
            data["episode_range"] = EpisodeRange(start=start, end=end)

    return ProcessedFile(**data)


def process_download_data(
    quality_map: Mapping[str, Any], media_kind: MediaKind = "movie"
) -> DownloadListing:
    """Build the download listing for one catalog entry.

    The first file carrying a ``posterUrl`` supplies the entry's poster, and
    languages are collected in the order they are first seen.
    """

    listing = DownloadListing()
    languages: list[str] = []

    for quality, files in quality_map.items():
        if not isinstance(files, list) or not files:
            continue
        processed: list[ProcessedFile] = []
        for record in files:
            if not isinstance(record, Mapping):
                logger.debug("Skipping non-object file record under %s", quality)
                continue
            poster_url = record.get("posterUrl")
            if poster_url and not listing.poster_url:
                listing.poster_url = str(poster_url)
            processed_file = process_file(record, media_kind)
            if processed_file.language and processed_file.language not in languages:
                languages.append(processed_file.language)
            processed.append(processed_file)
        if processed:
            listing.download_options[quality] = processed

    listing.download_languages = DownloadLanguages(available=languages)
    listing.total_files = sum(len(files) for files in listing.download_options.values())
    return listing
