"""Detection of cached blob shapes and flattening into entries."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from app.errors import MalformedCatalogError
from app.normalizer import count_files, detect_media_object, normalize


def _files(*names: str) -> list[dict[str, Any]]:
    return [{"filename": name, "size": 1024} for name in names]


MOVIE_MAP = {"1080p": _files("Inception.2010.1080p.mkv")}
SHOW_MAP = {"720p": _files("Dark.S01E01.mkv", "Dark.S01E02.mkv")}

# Hand-labelled blobs for each supported shape.
SHAPES: list[tuple[str, Any, str, list[str], list[str]]] = [
    (
        "mixed",
        {"Inception (2010)": MOVIE_MAP, "Dark (2017)": SHOW_MAP},
        "mixed_object",
        ["Inception (2010)"],
        ["Dark (2017)"],
    ),
    (
        "split",
        {"movies": {"Inception (2010)": MOVIE_MAP}, "tvshows": {"Dark (2017)": SHOW_MAP}},
        "split_object",
        ["Inception (2010)"],
        ["Dark (2017)"],
    ),
    (
        "array",
        [{"Inception (2010)": MOVIE_MAP, "Dark (2017)": SHOW_MAP}],
        "array_wrapped",
        ["Inception (2010)", "Dark (2017)"],
        ["Inception (2010)", "Dark (2017)"],
    ),
]


@pytest.mark.parametrize(
    ("blob", "structure", "movies", "tvshows"),
    [shape[1:] for shape in SHAPES],
    ids=[shape[0] for shape in SHAPES],
)
def test_normalize_detects_shape_and_selects_entries(
    blob: Any, structure: str, movies: list[str], tvshows: list[str]
) -> None:
    movie_catalog = normalize(blob, "movies")
    show_catalog = normalize(blob, "tvshows")

    assert movie_catalog.data_structure == structure
    assert show_catalog.data_structure == structure
    assert [key for key, _ in movie_catalog.entries] == movies
    assert [key for key, _ in show_catalog.entries] == tvshows


def test_nested_object_returns_requested_mapping_only() -> None:
    blob = {"movies": {"Inception (2010)": MOVIE_MAP}, "updatedAt": "2024-01-01"}

    catalog = normalize(blob, "movies")

    assert catalog.data_structure == "nested_object"
    assert catalog.entries == [("Inception (2010)", MOVIE_MAP)]
    assert catalog.total_in_source == 1


def test_split_blob_with_non_mapping_value_yields_no_entries() -> None:
    blob = {"movies": {"Inception (2010)": MOVIE_MAP}, "tvshows": None}

    media_object, structure = detect_media_object(blob, "tvshows")

    assert media_object == {}
    assert structure == "split_object"
    assert normalize(blob, "tvshows").entries == []


@pytest.mark.parametrize("blob", [[], ["not-a-dict"], "text", 42, None])
def test_malformed_blobs_raise(blob: Any) -> None:
    with pytest.raises(MalformedCatalogError):
        normalize(blob, "movies")


def test_unknown_catalog_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported catalog type"):
        normalize({}, "music")  # type: ignore[arg-type]


def test_entries_without_files_are_dropped() -> None:
    blob = {
        "Inception (2010)": MOVIE_MAP,
        "Empty (2001)": {"1080p": [], "720p": []},
        "Broken (2002)": "not-a-map",
    }

    catalog = normalize(blob, "movies")

    assert [key for key, _ in catalog.entries] == ["Inception (2010)"]
    assert catalog.total_in_source == 3


def test_normalize_preserves_source_order_and_does_not_mutate() -> None:
    blob = {
        "Zodiac (2007)": MOVIE_MAP,
        "Arrival (2016)": MOVIE_MAP,
        "Dark (2017)": SHOW_MAP,
        "Memento (2000)": MOVIE_MAP,
    }
    snapshot = copy.deepcopy(blob)

    catalog = normalize(blob, "movies")

    assert [key for key, _ in catalog.entries] == [
        "Zodiac (2007)",
        "Arrival (2016)",
        "Memento (2000)",
    ]
    assert blob == snapshot


def test_count_files_ignores_non_list_values() -> None:
    assert count_files(SHOW_MAP) == 2
    assert count_files({"1080p": "x", "720p": _files("a")}) == 1
    assert count_files(None) == 0
