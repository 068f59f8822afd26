"""Movie versus TV show classification."""

from __future__ import annotations

import re

import pytest

from app.classifier import (
    DEFAULT_CLASSIFIER,
    Classifier,
    classify_entry,
    collect_file_names,
)


@pytest.mark.parametrize(
    ("key", "file_names", "expected"),
    [
        ("Inception (2010)", ["Inception.2010.1080p.mkv"], "movie"),
        ("Breaking Bad (2008)", ["Breaking.Bad.S01E01.mkv"], "tvshow"),
        ("The Office Season 2 (2006)", [], "tvshow"),
        ("Planet Earth Complete Series (2006)", [], "tvshow"),
        ("Some Title (2020)", ["Some.Title.Episode.1.mkv"], "tvshow"),
        ("Crime TV Show (2019)", [], "tvshow"),
        ("Sully (2016)", ["Sully.2016.720p.mkv"], "movie"),
    ],
)
def test_default_classifier_uses_tv_indicators(
    key: str, file_names: list[str], expected: str
) -> None:
    assert DEFAULT_CLASSIFIER.classify(key, file_names) == expected


def test_classification_ignores_file_order() -> None:
    names = ["Show.2021.1080p.mkv", "Show.S01E02.mkv", "Show.extras.mkv"]

    first = DEFAULT_CLASSIFIER.classify("Show (2021)", names)
    second = DEFAULT_CLASSIFIER.classify("Show (2021)", list(reversed(names)))

    assert first == second == "tvshow"


def test_custom_patterns_replace_the_defaults() -> None:
    classifier = Classifier(patterns=(re.compile(r"\bminiseries\b", re.IGNORECASE),))

    assert classifier.classify("Chernobyl Miniseries (2019)", []) == "tvshow"
    assert classifier.classify("Breaking Bad S01 (2008)", []) == "movie"


def test_predicate_strategy_delegates_decision() -> None:
    calls: list[tuple[str, list[str]]] = []

    def predicate(key: str, names: list[str]) -> str:
        calls.append((key, list(names)))
        return "tvshow" if key.startswith("TV:") else "movie"

    classifier = Classifier(strategy="predicate", predicate=predicate)

    assert classifier.classify("TV: Anything (2020)", iter(["a.mkv"])) == "tvshow"
    assert classifier.classify("Breaking Bad S01 (2008)", []) == "movie"
    assert calls[0] == ("TV: Anything (2020)", ["a.mkv"])


def test_predicate_strategy_requires_callable() -> None:
    with pytest.raises(ValueError, match="requires a predicate"):
        Classifier(strategy="predicate")


def test_collect_file_names_walks_every_quality() -> None:
    quality_map = {
        "1080p": [{"filename": "A.S01E01.mkv"}, {"filename": None}],
        "720p": [{"filename": "A.S01E02.mkv"}, "not-a-record"],
        "notes": "ignored",
    }

    assert collect_file_names(quality_map) == ["A.S01E01.mkv", "", "A.S01E02.mkv"]
    assert collect_file_names(None) == []


def test_classify_entry_reads_filenames_from_quality_map() -> None:
    quality_map = {"720p": [{"filename": "Mystery.S03E01.mkv"}]}

    assert classify_entry("Mystery (2022)", quality_map) == "tvshow"
    assert classify_entry("Mystery (2022)", {"720p": [{"filename": "m.mkv"}]}) == "movie"


def _reorderings(quality_map: dict[str, list[dict[str, str]]]) -> list[dict]:
    keys = list(quality_map)
    return [
        quality_map,
        {key: quality_map[key] for key in reversed(keys)},
        {key: list(reversed(quality_map[key])) for key in keys},
        {key: list(reversed(quality_map[key])) for key in reversed(keys)},
    ]


@pytest.mark.parametrize(
    ("key", "quality_map", "expected"),
    [
        (
            "Arrival (2016)",
            {
                "720p": [{"filename": "Arrival.2016.720p.mkv"}, {"filename": "Arrival.extras.mkv"}],
                "1080p": [{"filename": "Arrival.2016.1080p.mkv"}],
            },
            "movie",
        ),
        (
            "Dark (2017)",
            {
                "720p": [{"filename": "Dark.2017.720p.mkv"}, {"filename": "Dark.S01E03.720p.mkv"}],
                "1080p": [{"filename": "Dark.2017.1080p.mkv"}],
                "4K": [{"filename": "Dark.2017.2160p.mkv"}],
            },
            "tvshow",
        ),
    ],
)
def test_classify_entry_ignores_quality_and_file_order(
    key: str, quality_map: dict, expected: str
) -> None:
    kinds = {classify_entry(key, variant) for variant in _reorderings(quality_map)}

    assert kinds == {expected}
