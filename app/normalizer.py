"""Detect the shape of the cached catalog blob and flatten it into entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from .classifier import DEFAULT_CLASSIFIER, Classifier, classify_entry
from .errors import MalformedCatalogError
from .models import CatalogType, KIND_BY_CATALOG_TYPE

logger = logging.getLogger(__name__)

DataStructure = Literal["array_wrapped", "nested_object", "split_object", "mixed_object"]
CatalogEntry = tuple[str, Mapping[str, Any]]

SPLIT_KEYS = ("movies", "tvshows")


@dataclass(slots=True)
class NormalizedCatalog:
    """Ordered entries of one media type plus facts about the source blob."""

    entries: list[CatalogEntry] = field(default_factory=list)
    data_structure: DataStructure = "mixed_object"
    total_in_source: int = 0


def count_files(quality_map: Any) -> int:
    """Return the number of file records across every quality of an entry."""

    if not isinstance(quality_map, Mapping):
        return 0
    return sum(len(files) for files in quality_map.values() if isinstance(files, list))


def detect_media_object(
    blob: Any, requested_type: CatalogType
) -> tuple[Mapping[str, Any], DataStructure]:
    """Return the mapping holding the requested entries and the blob's shape."""

    if isinstance(blob, list):
        if blob and isinstance(blob[0], dict):
            return blob[0], "array_wrapped"
        raise MalformedCatalogError("Invalid array structure in cached catalog data")

    if not isinstance(blob, dict):
        raise MalformedCatalogError(
            f"Invalid data type in cached catalog: {type(blob).__name__}"
        )

    is_split = all(isinstance(blob.get(key), dict) for key in SPLIT_KEYS)
    media_object = blob.get(requested_type)
    if isinstance(media_object, dict):
        return media_object, "split_object" if is_split else "nested_object"
    if all(key in blob for key in SPLIT_KEYS):
        return {}, "split_object"
    return blob, "mixed_object"


def normalize(
    blob: Any,
    requested_type: CatalogType,
    classifier: Classifier = DEFAULT_CLASSIFIER,
) -> NormalizedCatalog:
    """Flatten ``blob`` into the ordered entries of ``requested_type``.

    Only the ``mixed_object`` shape needs classification; the other shapes
    already separate media types (or, for ``array_wrapped``, never did). Entries
    without a single file are dropped. The blob itself is never modified.
    """

    if requested_type not in KIND_BY_CATALOG_TYPE:
        raise ValueError(f"Unsupported catalog type: {requested_type}")

    media_object, data_structure = detect_media_object(blob, requested_type)
    candidates: list[CatalogEntry] = list(media_object.items())

    if data_structure == "mixed_object":
        wanted_kind = KIND_BY_CATALOG_TYPE[requested_type]
        candidates = [
            (key, quality_map)
            for key, quality_map in candidates
            if classify_entry(key, quality_map, classifier) == wanted_kind
        ]

    entries = [
        (key, quality_map)
        for key, quality_map in candidates
        if count_files(quality_map) > 0
    ]
    logger.debug(
        "Normalised %s catalog (%s): %d of %d entries kept",
        requested_type,
        data_structure,
        len(entries),
        len(media_object),
    )
    return NormalizedCatalog(
        entries=entries,
        data_structure=data_structure,
        total_in_source=len(media_object),
    )
