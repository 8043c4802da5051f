"""Map canonical metadata onto catalog property updates."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Protocol

from .schemas import CanonicalMetadata

logger = logging.getLogger(__name__)

TITLE = "Title"
ORIGINAL_TITLE = "Original Title"
SYNOPSIS = "Synopsis"
YEAR = "Year"
CATEGORY = "Category"
DIRECTOR = "Director"
POSTER = "Poster"
LAST_SYNC = "Last Metadata Sync"
TRAILER = "Trailer"
LANGUAGE = "Language"
TYPE = "Type"
TMDB_LINK = "TMDB Link"

FULL_LENGTH = "Full-length"
SHORTS = "Shorts"
DEFAULT_IMAGE_URL = "https://image.tmdb.org/t/p/w200"
DEFAULT_SHORT_FILM_THRESHOLD = 30
TEXT_CHUNK_SIZE = 2000


class CatalogWriter(Protocol):
    def update(self, page_id: str, properties: dict[str, Any]) -> None: ...


def text_property(content: str, kind: str = "rich_text") -> dict[str, Any]:
    """Rich text value, split into text objects of at most 2000 characters."""

    chunks = [content[i:i + TEXT_CHUNK_SIZE] for i in range(0, len(content), TEXT_CHUNK_SIZE)] or [""]
    return {kind: [{"type": "text", "text": {"content": chunk}} for chunk in chunks]}


def classify_runtime(runtime: int, threshold: int = DEFAULT_SHORT_FILM_THRESHOLD) -> str:
    return FULL_LENGTH if runtime > threshold else SHORTS


def build_properties(
    metadata: CanonicalMetadata,
    *,
    excluded_fields: Iterable[str] = (),
    image_base_url: str = DEFAULT_IMAGE_URL,
    short_film_threshold: int = DEFAULT_SHORT_FILM_THRESHOLD,
    now: Callable[[], datetime] | None = None,
) -> dict[str, Any]:
    """Build the property payload for one catalog page.

    Fields without a value are left out entirely, as are ``excluded_fields``.
    """

    timestamp = (now or (lambda: datetime.now(timezone.utc)))()
    properties: dict[str, Any] = {
        ORIGINAL_TITLE: text_property(metadata.full_title),
        CATEGORY: {"multi_select": [{"name": name} for name in metadata.categories]},
        DIRECTOR: text_property("\n".join(metadata.directors)),
        LAST_SYNC: {"date": {"start": timestamp.isoformat()}},
        TMDB_LINK: {"url": metadata.media_type.web_url(metadata.external_id)},
    }

    if metadata.corrected_title is not None:
        properties[TITLE] = text_property(metadata.corrected_title, "title")
    if metadata.synopsis is not None:
        properties[SYNOPSIS] = text_property(metadata.synopsis)
    if metadata.year is not None:
        properties[YEAR] = {"number": metadata.year}
    if metadata.poster is not None:
        properties[POSTER] = {
            "files": [
                {
                    "type": "external",
                    "name": metadata.title,
                    "external": {"url": f"{image_base_url}{metadata.poster}"},
                }
            ]
        }
    if metadata.trailer is not None:
        properties[TRAILER] = {"url": metadata.trailer}
    if metadata.language is not None:
        properties[LANGUAGE] = {"select": {"name": metadata.language}}
    if metadata.runtime is not None:
        properties[TYPE] = {"select": {"name": classify_runtime(metadata.runtime, short_film_threshold)}}

    excluded = set(excluded_fields)
    return {name: value for name, value in properties.items() if name not in excluded}


class ReconciliationWriter:
    """Writes canonical metadata back to the catalog, one update per entry."""

    def __init__(
        self,
        catalog: CatalogWriter,
        *,
        excluded_fields: Iterable[str] = (),
        image_base_url: str = DEFAULT_IMAGE_URL,
        short_film_threshold: int = DEFAULT_SHORT_FILM_THRESHOLD,
    ) -> None:
        self._catalog = catalog
        self._excluded_fields = frozenset(excluded_fields)
        self._image_base_url = image_base_url
        self._short_film_threshold = short_film_threshold

    def properties(
        self, metadata: CanonicalMetadata, excluded_fields: Iterable[str] | None = None
    ) -> dict[str, Any]:
        return build_properties(
            metadata,
            excluded_fields=self._excluded_fields if excluded_fields is None else excluded_fields,
            image_base_url=self._image_base_url,
            short_film_threshold=self._short_film_threshold,
        )

    def apply(
        self, metadata: CanonicalMetadata, excluded_fields: Iterable[str] | None = None
    ) -> dict[str, Any]:
        """Send the update; errors from the catalog propagate unchanged."""

        properties = self.properties(metadata, excluded_fields)
        self._catalog.update(metadata.catalog_id, properties)
        logger.info("Updated %s [%s]", metadata.full_title, metadata.year)
        return properties
