"""
TMDB metadata fetcher and record normalizer.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from .errors import MetadataError
from .media import MediaType
from .reference import ReferenceData
from .schemas import CanonicalMetadata, ResolvedMatch

logger = logging.getLogger(__name__)

YOUTUBE_WATCH = "https://www.youtube.com/watch?v="


class DetailClient(Protocol):
    def get_detail(
        self, path: str, *, include_videos: bool = True, include_credits: bool = True
    ) -> Dict[str, Any]: ...


def extract_year(date_str: Optional[str]) -> Optional[int]:
    if not date_str:
        return None
    try:
        return date.fromisoformat(date_str[:10]).year
    except ValueError:
        logger.debug("Unparseable release date %r", date_str)
        return None


def pick_trailer(videos: List[Dict[str, Any]]) -> Optional[str]:
    """First Trailer, else first Teaser, else the first video of any type."""

    if not videos:
        return None
    chosen = (
        next((video for video in videos if video.get("type") == "Trailer"), None)
        or next((video for video in videos if video.get("type") == "Teaser"), None)
        or videos[0]
    )
    key = chosen.get("key")
    return f"{YOUTUBE_WATCH}{key}" if key else None


def extract_directors(record: Dict[str, Any], media_type: MediaType) -> List[str]:
    if media_type is MediaType.SERIES:
        people = record.get("created_by") or []
    else:
        crew = (record.get("credits") or {}).get("crew") or []
        people = [member for member in crew if member.get("job") == "Director"]
    return [person["name"] for person in people if person.get("name")]


def normalize_record(
    record: Dict[str, Any],
    media_type: MediaType,
    reference: ReferenceData,
    *,
    catalog_id: str,
    corrected_title: Optional[str] = None,
) -> CanonicalMetadata:
    """Convert a movie- or series-shaped detail record into CanonicalMetadata."""

    title = record.get("title") or record.get("name")
    original_title = record.get("original_title") or record.get("original_name")
    if not title and not original_title:
        raise MetadataError(f"TMDB record {record.get('id')} has no title")

    runtime = record.get("runtime")
    videos = (record.get("videos") or {}).get("results") or []

    return CanonicalMetadata(
        external_id=str(record["id"]),
        catalog_id=catalog_id,
        media_type=media_type,
        categories=[genre["name"] for genre in record.get("genres") or [] if genre.get("name")],
        original_title=original_title or title,
        title=title or original_title,
        synopsis=record.get("overview") or None,
        year=extract_year(record.get("release_date") or record.get("first_air_date")),
        directors=extract_directors(record, media_type),
        poster=record.get("poster_path") or None,
        trailer=pick_trailer(videos),
        language=reference.language(record.get("original_language")),
        runtime=int(runtime) if runtime is not None else None,
        corrected_title=corrected_title,
    )


class MetadataFetcher:
    """Fetches a resolved TMDB record and normalizes it."""

    def __init__(self, client: DetailClient, reference: ReferenceData) -> None:
        self._client = client
        self._reference = reference

    def fetch(self, match: ResolvedMatch, *, catalog_id: str) -> CanonicalMetadata:
        record = self._client.get_detail(
            match.media_type.detail_path(match.external_id),
            include_videos=True,
            include_credits=True,
        )
        metadata = normalize_record(
            record,
            match.media_type,
            self._reference,
            catalog_id=catalog_id,
            corrected_title=match.corrected_title,
        )
        logger.debug("Fetched %s [%s] as TMDB %s", metadata.full_title, metadata.year, metadata.external_id)
        return metadata
