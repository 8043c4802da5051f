"""Movie and series variants of the TMDB record schema."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class MediaSchema:
    """Paths and field names that differ between movie and series records."""

    search_path: str
    detail_path: str
    year_param: str
    title_key: str
    original_title_key: str
    date_key: str
    web_path: str


MOVIE_SCHEMA = MediaSchema(
    search_path="search/movie",
    detail_path="movie/{id}",
    year_param="year",
    title_key="title",
    original_title_key="original_title",
    date_key="release_date",
    web_path="movie",
)

SERIES_SCHEMA = MediaSchema(
    search_path="search/tv",
    detail_path="tv/{id}",
    year_param="first_air_date_year",
    title_key="name",
    original_title_key="original_name",
    date_key="first_air_date",
    web_path="tv",
)


class MediaType(str, Enum):
    """Kind of catalog entry, as labelled in the catalog's Type column."""

    MOVIE = "Movie"
    SERIES = "Series"

    @classmethod
    def from_catalog(cls, label: str | None) -> "MediaType":
        """Map a catalog Type label; only "Series" entries are looked up as TV."""

        if label == cls.SERIES.value:
            return cls.SERIES
        return cls.MOVIE

    @property
    def schema(self) -> MediaSchema:
        return SERIES_SCHEMA if self is MediaType.SERIES else MOVIE_SCHEMA

    def detail_path(self, external_id: str | int) -> str:
        return self.schema.detail_path.format(id=external_id)

    def web_url(self, external_id: str | int) -> str:
        """Public TMDB page for a record of this type."""

        return f"https://themoviedb.org/{self.schema.web_path}/{external_id}"
