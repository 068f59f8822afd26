"""Movie/TV show classification for catalog entries of unknown type."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence

from .models import MediaKind

ClassifierStrategy = Literal["patterns", "predicate"]

TV_INDICATOR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bS\d+", re.IGNORECASE),
    re.compile(r"\bSeason\s+\d+", re.IGNORECASE),
    re.compile(r"\bEpisode", re.IGNORECASE),
    re.compile(r"\bTV\s+Show", re.IGNORECASE),
    re.compile(r"\bSeries", re.IGNORECASE),
    re.compile(r"\bComplete\s+Series", re.IGNORECASE),
)


@dataclass(frozen=True)
class Classifier:
    """Decides whether a catalog key and its filenames describe a TV show.

    ``strategy`` selects how the decision is made: ``"patterns"`` matches the
    key and every filename against ``patterns``; ``"predicate"`` delegates to
    an arbitrary callable, which lets a trained model stand in without the
    callers changing.
    """

    strategy: ClassifierStrategy = "patterns"
    patterns: tuple[re.Pattern[str], ...] = TV_INDICATOR_PATTERNS
    predicate: Callable[[str, Sequence[str]], MediaKind] | None = field(
        default=None, compare=False
    )

    def __post_init__(self) -> None:
        if self.strategy == "predicate" and self.predicate is None:
            raise ValueError("A predicate classifier requires a predicate callable")

    def classify(self, key: str, file_names: Iterable[str]) -> MediaKind:
        names = list(file_names)
        if self.strategy == "predicate" and self.predicate is not None:
            return self.predicate(key, names)
        if self._matches(key) or any(self._matches(name) for name in names):
            return "tvshow"
        return "movie"

    def _matches(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.patterns)


DEFAULT_CLASSIFIER = Classifier()


def collect_file_names(quality_map: Mapping[str, Any] | None) -> list[str]:
    """Return every filename listed under any quality of an entry."""

    names: list[str] = []
    if not isinstance(quality_map, Mapping):
        return names
    for files in quality_map.values():
        if not isinstance(files, list):
            continue
        for record in files:
            if isinstance(record, Mapping):
                names.append(str(record.get("filename") or ""))
    return names


def classify_entry(
    key: str,
    quality_map: Mapping[str, Any] | None,
    classifier: Classifier = DEFAULT_CLASSIFIER,
) -> MediaKind:
    return classifier.classify(key, collect_file_names(quality_map))
