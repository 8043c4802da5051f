"""Tests for the catalog property mapping."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from backend.catalog_sync.errors import CatalogError
from backend.catalog_sync.media import MediaType
from backend.catalog_sync.schemas import CanonicalMetadata
from backend.catalog_sync.writer import ReconciliationWriter, build_properties
from backend.tests.stubs import StubCatalog

FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def _metadata(**overrides: Any) -> CanonicalMetadata:
    values: dict[str, Any] = {
        "external_id": "372058",
        "catalog_id": "page-1",
        "media_type": MediaType.MOVIE,
        "categories": ["Romance", "Animation"],
        "original_title": "君の名は。",
        "title": "Your Name",
        "synopsis": "Two strangers swap bodies.",
        "year": 2016,
        "directors": ["Makoto Shinkai"],
        "poster": "/poster.jpg",
        "trailer": "https://www.youtube.com/watch?v=abc",
        "language": "Japanese",
        "runtime": 106,
    }
    values.update(overrides)
    return CanonicalMetadata(**values)


def _build(metadata: CanonicalMetadata, **kwargs: Any) -> dict[str, Any]:
    return build_properties(metadata, now=lambda: FIXED_NOW, **kwargs)


def _walk(value: Any):
    if isinstance(value, dict):
        for item in value.values():
            yield item
            yield from _walk(item)
    elif isinstance(value, list):
        for item in value:
            yield item
            yield from _walk(item)


def test_full_payload_matches_catalog_columns() -> None:
    properties = _build(_metadata())

    assert properties == {
        "Original Title": {
            "rich_text": [{"type": "text", "text": {"content": "君の名は。 (Your Name)"}}]
        },
        "Synopsis": {
            "rich_text": [{"type": "text", "text": {"content": "Two strangers swap bodies."}}]
        },
        "Year": {"number": 2016},
        "Category": {"multi_select": [{"name": "Romance"}, {"name": "Animation"}]},
        "Director": {"rich_text": [{"type": "text", "text": {"content": "Makoto Shinkai"}}]},
        "Poster": {
            "files": [
                {
                    "type": "external",
                    "name": "Your Name",
                    "external": {"url": "https://image.tmdb.org/t/p/w200/poster.jpg"},
                }
            ]
        },
        "Last Metadata Sync": {"date": {"start": "2024-05-01T12:30:00+00:00"}},
        "Trailer": {"url": "https://www.youtube.com/watch?v=abc"},
        "Language": {"select": {"name": "Japanese"}},
        "Type": {"select": {"name": "Full-length"}},
        "TMDB Link": {"url": "https://themoviedb.org/movie/372058"},
    }


@pytest.mark.parametrize(
    ("runtime", "expected"),
    [(30, "Shorts"), (31, "Full-length"), (0, "Shorts"), (106, "Full-length")],
)
def test_runtime_classification(runtime: int, expected: str) -> None:
    assert _build(_metadata(runtime=runtime))["Type"] == {"select": {"name": expected}}


def test_missing_runtime_omits_type() -> None:
    assert "Type" not in _build(_metadata(runtime=None))


def test_threshold_is_configurable() -> None:
    properties = _build(_metadata(runtime=45), short_film_threshold=60)

    assert properties["Type"] == {"select": {"name": "Shorts"}}


def test_matching_titles_write_single_original_title() -> None:
    properties = _build(_metadata(original_title="Spirited Away", title="Spirited Away"))

    assert properties["Original Title"]["rich_text"][0]["text"]["content"] == "Spirited Away"


def test_diverging_titles_are_composed() -> None:
    properties = _build(_metadata(original_title="千と千尋の神隠し", title="Spirited Away"))

    assert (
        properties["Original Title"]["rich_text"][0]["text"]["content"]
        == "千と千尋の神隠し (Spirited Away)"
    )


def test_title_written_only_when_corrected() -> None:
    assert "Title" not in _build(_metadata())

    properties = _build(_metadata(corrected_title="Kimi no Na wa"))

    assert properties["Title"] == {
        "title": [{"type": "text", "text": {"content": "Kimi no Na wa"}}]
    }


def test_absent_values_are_omitted() -> None:
    properties = _build(
        _metadata(poster=None, trailer=None, language=None, runtime=None, year=None, synopsis=None)
    )

    for name in ("Poster", "Trailer", "Language", "Type", "Year", "Synopsis", "Title"):
        assert name not in properties
    assert None not in list(_walk(properties))
    assert "Last Metadata Sync" in properties


def test_excluded_fields_never_appear() -> None:
    excluded = {"Synopsis", "Poster", "Title", "TMDB Link", "Last Metadata Sync"}

    properties = _build(_metadata(corrected_title="Other"), excluded_fields=excluded)

    assert excluded.isdisjoint(properties)
    assert "Original Title" in properties


def test_series_link_uses_tv_path() -> None:
    properties = _build(_metadata(external_id="1429", media_type=MediaType.SERIES, runtime=None))

    assert properties["TMDB Link"] == {"url": "https://themoviedb.org/tv/1429"}


def test_long_synopsis_is_split_into_chunks() -> None:
    properties = _build(_metadata(synopsis="x" * 4500))

    chunks = properties["Synopsis"]["rich_text"]
    assert [len(chunk["text"]["content"]) for chunk in chunks] == [2000, 2000, 500]


def test_directors_are_newline_separated() -> None:
    properties = _build(_metadata(directors=["Lana Wachowski", "Lilly Wachowski"]))

    assert properties["Director"]["rich_text"][0]["text"]["content"] == (
        "Lana Wachowski\nLilly Wachowski"
    )


def test_writer_applies_single_update_with_exclusions() -> None:
    catalog = StubCatalog()
    writer = ReconciliationWriter(
        catalog, excluded_fields=["Trailer"], image_base_url="https://img.example/w500"
    )

    writer.apply(_metadata())

    assert list(catalog.updates) == ["page-1"]
    sent = catalog.updates["page-1"]
    assert "Trailer" not in sent
    assert sent["Poster"]["files"][0]["external"]["url"] == "https://img.example/w500/poster.jpg"


def test_writer_call_level_exclusions_override_defaults() -> None:
    catalog = StubCatalog()
    writer = ReconciliationWriter(catalog, excluded_fields=["Trailer"])

    writer.apply(_metadata(), excluded_fields={"Language"})

    assert "Trailer" in catalog.updates["page-1"]
    assert "Language" not in catalog.updates["page-1"]


def test_writer_propagates_catalog_errors() -> None:
    writer = ReconciliationWriter(StubCatalog(reject=["page-1"]))

    with pytest.raises(CatalogError):
        writer.apply(_metadata())
