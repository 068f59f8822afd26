"""Download option processing for catalog entries."""

from __future__ import annotations

from app.downloads import process_download_data, process_file


def test_size_field_beats_filename_extraction() -> None:
    processed = process_file(
        {"filename": "Movie.2024.1.5GB.mkv", "size": 2147483648}, "movie"
    )

    assert processed.size == "2 GB"
    assert processed.size_source == "redis_metadata"


def test_size_falls_back_to_filename() -> None:
    processed = process_file({"filename": "Movie.2024.1.5GB.mkv", "size": ""}, "movie")

    assert processed.size == "1.5GB"
    assert processed.size_source == "filename_extraction"


def test_process_file_cleans_names_and_keeps_original() -> None:
    processed = process_file(
        {
            "filename": "www.1TamilMV.tube - Movie (2024) 720p.mkv.torrent",
            "url": "https://example.org/movie.torrent",
            "magnetLink": "magnet:?xt=urn:btih:abc",
            "language": ["Tamil", "Telugu"],
        },
        "movie",
    )

    assert processed.filename == "Movie (2024) 720p.mkv"
    assert processed.original_filename == "www.1TamilMV.tube - Movie (2024) 720p.mkv.torrent"
    assert processed.href == "https://example.org/movie.torrent"
    assert processed.magnet_link == "magnet:?xt=urn:btih:abc"
    assert processed.language == "Tamil"
    assert processed.release_year == 2024
    assert processed.season is None


def test_href_defaults_to_placeholder() -> None:
    assert process_file({"filename": "a.mkv"}, "movie").href == "#"
    assert process_file({"filename": "a.mkv", "href": "/x"}, "movie").href == "/x"


def test_tv_files_carry_episode_markers() -> None:
    single = process_file({"filename": "Show.S02E05.720p.mkv"}, "tvshow")
    ranged = process_file({"filename": "Show.S01E01-E06.720p.mkv"}, "tvshow")

    assert (single.season, single.episode) == (2, 5)
    assert single.episode_range is None
    assert ranged.episode_range is not None
    assert (ranged.episode_range.start, ranged.episode_range.end) == (1, 6)
    assert ranged.to_payload()["episodeRange"] == {"start": 1, "end": 6}


def test_movie_files_skip_episode_markers() -> None:
    processed = process_file({"filename": "Show.S02E05.720p.mkv"}, "movie")

    assert processed.season is None
    assert processed.episode is None


def test_process_download_data_collects_posters_and_languages() -> None:
    quality_map = {
        "1080p": [
            {"filename": "A.1080p.mkv", "language": "Tamil", "posterUrl": "https://img/first.jpg"},
            {"filename": "B.1080p.mkv", "language": "English", "posterUrl": "https://img/second.jpg"},
        ],
        "720p": [
            {"filename": "A.720p.mkv", "language": "tamil"},
            {"filename": "C.720p.mkv", "language": "Tamil"},
        ],
        "480p": [],
    }

    listing = process_download_data(quality_map, "movie")

    assert listing.poster_url == "https://img/first.jpg"
    assert listing.download_languages.available == ["Tamil", "English", "tamil"]
    assert list(listing.download_options) == ["1080p", "720p"]
    assert listing.total_files == 4


def test_process_download_data_skips_non_record_files() -> None:
    listing = process_download_data({"1080p": ["junk", {"filename": "a.mkv"}]}, "movie")

    assert listing.total_files == 1
    assert listing.download_options["1080p"][0].filename == "a.mkv"
    assert listing.poster_url is None


def test_non_string_links_are_coerced_to_text() -> None:
    processed = process_file(
        {"filename": "A.2020.mkv", "href": 12345, "magnetLink": 678}, "movie"
    )
    fallback = process_file({"filename": "A.2020.mkv", "url": 42}, "movie")

    assert processed.href == "12345"
    assert processed.magnet_link == "678"
    assert fallback.href == "42"


def test_numeric_href_keeps_the_whole_listing() -> None:
    listing = process_download_data(
        {"1080p": [{"filename": "A.2020.mkv", "href": 12345}]}, "movie"
    )

    assert listing.total_files == 1
    assert listing.download_options["1080p"][0].href == "12345"
