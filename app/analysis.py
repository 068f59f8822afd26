"""Facet counts and structure statistics over the cached catalog."""

from __future__ import annotations

from collections import Counter
from typing import Any, Mapping, Sequence

from .classifier import DEFAULT_CLASSIFIER, Classifier
from .models import (
    EntrySample,
    LanguageCount,
    LanguageFacets,
    QualityCount,
    StructureReport,
)
from .normalizer import CatalogEntry, detect_media_object, normalize
from .utils import normalize_language

SAMPLE_SIZE = 5


def _file_records(quality_map: Mapping[str, Any]):
    for quality, files in quality_map.items():
        if not isinstance(files, list):
            continue
        for record in files:
            if isinstance(record, Mapping):
                yield quality, record


def summarize_languages(entries: Sequence[CatalogEntry]) -> LanguageFacets:
    """Count files per language and per quality, most frequent first.

    Ties keep the order in which a language or quality was first seen.
    """

    languages: Counter[str] = Counter()
    qualities: Counter[str] = Counter()
    with_language = 0

    for _, quality_map in entries:
        for quality, files in quality_map.items():
            if isinstance(files, list):
                qualities[quality] += len(files)
        for _, record in _file_records(quality_map):
            language = normalize_language(record.get("language"))
            if language:
                languages[language] += 1
                with_language += 1

    ranked_languages = languages.most_common()
    return LanguageFacets(
        languages=[
            LanguageCount(language=language, count=count)
            for language, count in ranked_languages
        ],
        qualities=[
            QualityCount(quality=quality, count=count)
            for quality, count in qualities.most_common()
        ],
        total_files_with_metadata=with_language,
        most_common_language=ranked_languages[0][0] if ranked_languages else None,
    )


def _data_type(blob: Any) -> str:
    if isinstance(blob, list):
        return "array"
    if isinstance(blob, dict):
        return "object"
    return type(blob).__name__


def analyze_structure(
    blob: Any, total_size: int, classifier: Classifier = DEFAULT_CLASSIFIER
) -> StructureReport:
    """Describe the blob's shape, qualities and the fields its files carry."""

    media_object, data_structure = detect_media_object(blob, "movies")
    objects: list[Mapping[str, Any]] = [media_object]
    if data_structure == "split_object" and isinstance(blob.get("tvshows"), Mapping):
        objects.append(blob["tvshows"])

    report = StructureReport(
        data_type=_data_type(blob),
        data_structure=data_structure,
        total_size=total_size,
        movie_count=len(normalize(blob, "movies", classifier).entries),
        tvshow_count=len(normalize(blob, "tvshows", classifier).entries),
    )

    fields: dict[str, None] = {}
    formats: Counter[str] = Counter()
    distribution: Counter[str] = Counter()
    total_files = 0

    for entries in objects:
        for key, quality_map in entries.items():
            report.entry_count += 1
            if not isinstance(quality_map, Mapping):
                continue
            file_count = 0
            for quality, files in quality_map.items():
                if isinstance(files, list) and files:
                    distribution[quality] += 1
                    file_count += len(files)
            for _, record in _file_records(quality_map):
                fields.update(dict.fromkeys(record))
                filename = record.get("filename")
                if isinstance(filename, str) and filename:
                    if "." in filename:
                        formats[filename.rsplit(".", 1)[1].lower()] += 1
                    if "www." in filename:
                        report.has_domain_prefixes = True
                if record.get("size"):
                    report.has_size_metadata = True

            total_files += file_count
            if file_count:
                report.entries_with_downloads += 1
            report.largest_entry_files = max(report.largest_entry_files, file_count)
            if len(report.samples) < SAMPLE_SIZE:
                report.samples.append(
                    EntrySample(key=key, qualities=list(quality_map), file_count=file_count)
                )

    report.quality_distribution = dict(distribution.most_common())
    report.detected_fields = list(fields)
    report.file_formats = dict(formats.most_common())
    if report.entry_count:
        report.average_files_per_entry = round(total_files / report.entry_count, 2)
    return report
