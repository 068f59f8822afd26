"""Heuristics for pulling structured facts out of scraped filenames and keys."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(TB|GB|MB)(?!ps)", re.IGNORECASE)
KB_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*KB(?!ps)", re.IGNORECASE)
VALID_SIZE_RE = re.compile(r"^\d+(?:\.\d+)?\s*(?:B|KB|MB|GB|TB)$", re.IGNORECASE)
SIZE_UNIT_SUFFIX_RE = re.compile(r"([a-z]+)$", re.IGNORECASE)

# Anything below this many KB is more likely an audio bitrate than a file.
KB_SIZE_THRESHOLD = 10_000
UNIT_RANK = {"TB": 4, "GB": 3, "MB": 2, "KB": 1}
BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")

DOMAIN_PREFIXES = (
    re.compile(r"^www\.1TamilMV\.tube\s*-\s*", re.IGNORECASE),
    re.compile(r"^www\.1TamilMV\.com\s*-\s*", re.IGNORECASE),
    re.compile(r"^www\.TamilMV\.com\s*-\s*", re.IGNORECASE),
    re.compile(r"^1TamilMV\.tube\s*-\s*", re.IGNORECASE),
    re.compile(r"^1TamilMV\.com\s*-\s*", re.IGNORECASE),
    re.compile(r"^TamilMV\.com\s*-\s*", re.IGNORECASE),
    re.compile(r"^www\.\w+\.\w+\s*-\s*", re.IGNORECASE),
)
TORRENT_SUFFIX_RE = re.compile(r"\.torrent$", re.IGNORECASE)

CATALOG_KEY_RE = re.compile(r"^(.+?)\s*\((\d{4})\)$")
RELEASE_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
SEASON_RE = re.compile(r"[Ss](\d+)")
EPISODE_RE = re.compile(r"[Ee](\d+)")
EPISODE_RANGE_RE = re.compile(r"[Ee](\d+)-[Ee](\d+)")

GENRE_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("comali", "comedy"), "Comedy"),
    (("bombay", "drama"), "Drama"),
    (("flask", "thriller"), "Thriller"),
    (("stitch", "animation"), "Animation, Family"),
    (("peacemaker", "action"), "Action, Adventure"),
)

UNKNOWN_SIZE = "Unknown"
UNKNOWN_GENRE = "Unknown"


@dataclass(frozen=True, slots=True)
class EpisodeMarkers:
    """Season and episode numbers found in a filename."""

    season: int | None = None
    episode: int | None = None
    episode_range: tuple[int, int] | None = None


def extract_size_from_filename(filename: str | None) -> str:
    """Return the most plausible file size mentioned in ``filename``.

    Larger units win over smaller ones and, within a unit, the larger value
    wins. KB figures only count when they are large enough to be a file size
    rather than a bitrate such as ``192Kbps``.
    """

    if not filename:
        return UNKNOWN_SIZE

    candidates: list[tuple[int, float, str]] = []
    for match in SIZE_RE.finditer(filename):
        unit = match.group(2).upper()
        candidates.append((UNIT_RANK[unit], float(match.group(1)), match.group(0)))
    for match in KB_SIZE_RE.finditer(filename):
        value = float(match.group(1))
        if value > KB_SIZE_THRESHOLD:
            candidates.append((UNIT_RANK["KB"], value, match.group(0)))

    if not candidates:
        logger.debug("No file size found in filename: %s", filename)
        return UNKNOWN_SIZE

    candidates.sort(key=lambda candidate: (-candidate[0], -candidate[1]))
    return candidates[0][2]


def clean_filename(filename: str | None) -> str | None:
    """Strip tracker domain prefixes and a trailing ``.torrent`` suffix."""

    if not filename:
        return filename
    cleaned = filename
    for prefix in DOMAIN_PREFIXES:
        cleaned = prefix.sub("", cleaned)
    return TORRENT_SUFFIX_RE.sub("", cleaned).strip()


def format_bytes(size: float) -> str:
    """Render a byte count with 1024-based units and at most two decimals."""

    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(BYTE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {BYTE_UNITS[index]}"


def format_file_size(size_data: Any) -> str:
    """Normalise a size field that may be a byte count or a display string."""

    if size_data is None or size_data == "" or isinstance(size_data, bool):
        return UNKNOWN_SIZE

    if isinstance(size_data, str):
        if size_data == UNKNOWN_SIZE:
            return size_data
        cleaned = " ".join(size_data.split())
        if VALID_SIZE_RE.match(cleaned):
            return SIZE_UNIT_SUFFIX_RE.sub(lambda match: match.group(1).upper(), cleaned)
        logger.debug("Unrecognised size format %r, keeping as-is", size_data)
        return cleaned

    if isinstance(size_data, (int, float)):
        return format_bytes(size_data)

    logger.debug("Unknown size data type %s: %r", type(size_data).__name__, size_data)
    return UNKNOWN_SIZE


def normalize_language(language_data: Any) -> str | None:
    """Reduce the many shapes scrapers use for ``language`` to one string."""

    if language_data is None or isinstance(language_data, bool):
        return None
    if isinstance(language_data, str):
        return language_data.strip() or None
    if isinstance(language_data, (list, tuple)):
        return normalize_language(language_data[0]) if language_data else None
    if isinstance(language_data, dict):
        for field in ("name", "value", "label"):
            if language_data.get(field):
                return normalize_language(language_data[field])
        return None
    if isinstance(language_data, (int, float)):
        return normalize_language(str(language_data)) if language_data else None

    logger.warning(
        "Unexpected language data type %s: %r",
        type(language_data).__name__,
        language_data,
    )
    return None


def analyze_genre_from_title(title: str) -> str:
    """Guess a genre from keywords in the title when no source knows it."""

    lowered = title.lower()
    for keywords, genre in GENRE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return genre
    return UNKNOWN_GENRE


def parse_catalog_key(key: str) -> tuple[str, int]:
    """Split a ``"Title (Year)"`` catalog key into its title and year."""

    match = CATALOG_KEY_RE.match(key)
    if match:
        return match.group(1).strip(), int(match.group(2))
    return key.strip(), datetime.now().year


def extract_release_year(filename: str | None) -> int | None:
    if not filename:
        return None
    match = RELEASE_YEAR_RE.search(filename)
    return int(match.group(0)) if match else None


def extract_episode_markers(filename: str | None) -> EpisodeMarkers:
    """Return the first season/episode markers and any ``E01-E06`` range."""

    if not filename:
        return EpisodeMarkers()
    season = SEASON_RE.search(filename)
    episode = EPISODE_RE.search(filename)
    episode_range = EPISODE_RANGE_RE.search(filename)
    return EpisodeMarkers(
        season=int(season.group(1)) if season else None,
        episode=int(episode.group(1)) if episode else None,
        episode_range=(
            (int(episode_range.group(1)), int(episode_range.group(2)))
            if episode_range
            else None
        ),
    )
