"""Pydantic models shared across the sync pipeline."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .media import MediaType


class CatalogEntry(BaseModel):
    """A catalog row waiting for enrichment."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog page identifier.")
    title: str
    year: int | None = None
    media_type: MediaType = MediaType.MOVIE


class SearchQuery(BaseModel):
    """One search attempt against TMDB."""

    model_config = ConfigDict(frozen=True)

    title: str
    year: int | None = None
    media_type: MediaType = MediaType.MOVIE

    def describe(self) -> str:
        return f"{self.title} ({self.year})" if self.year else self.title


class Candidate(BaseModel):
    """A TMDB search result that has not been confirmed as the match."""

    id: str
    title: str
    original_title: str | None = None
    release_date: str | None = None
    original_language: str | None = None
    genre_ids: list[int] = Field(default_factory=list)
    media_type: MediaType = MediaType.MOVIE

    @classmethod
    def from_raw(cls, raw: dict[str, Any], media_type: MediaType) -> "Candidate":
        schema = media_type.schema
        return cls(
            id=str(raw["id"]),
            title=raw.get(schema.title_key) or raw.get(schema.original_title_key) or "",
            original_title=raw.get(schema.original_title_key),
            release_date=raw.get(schema.date_key) or None,
            original_language=raw.get("original_language"),
            genre_ids=list(raw.get("genre_ids") or []),
            media_type=media_type,
        )


class ResolvedMatch(BaseModel):
    """The single TMDB identifier a query was narrowed down to."""

    external_id: str
    media_type: MediaType
    corrected_title: str | None = Field(
        default=None,
        description="Title to write back when the catalog title needed a retry to resolve.",
    )


class CanonicalMetadata(BaseModel):
    """Media-type independent metadata ready to be written to the catalog."""

    external_id: str
    catalog_id: str
    media_type: MediaType
    categories: list[str] = Field(default_factory=list)
    original_title: str
    title: str
    synopsis: str | None = None
    year: int | None = None
    directors: list[str] = Field(default_factory=list)
    poster: str | None = Field(default=None, description="TMDB poster path fragment.")
    trailer: str | None = None
    language: str | None = None
    runtime: int | None = Field(default=None, description="Runtime in minutes.")
    corrected_title: str | None = None

    @property
    def full_title(self) -> str:
        if self.original_title != self.title:
            return f"{self.original_title} ({self.title})"
        return self.title


OutcomeStatus = Literal["updated", "skipped", "failed", "previewed"]


class EntryOutcome(BaseModel):
    """Result of processing one catalog entry in a session."""

    catalog_id: str
    title: str
    status: OutcomeStatus
    external_id: str | None = None
    message: str | None = None


class SyncReport(BaseModel):
    """Summary returned once a session finishes or is cancelled."""

    run_id: str | None = None
    cancelled: bool = False
    outcomes: list[EntryOutcome] = Field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def failures(self) -> list[EntryOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == "failed"]


RunStatus = Literal["running", "completed", "cancelled", "failed"]


class SyncRunModel(BaseModel):
    """Represents a persisted sync session."""

    id: str
    catalog_type: str | None = None
    status: RunStatus
    dry_run: bool = False
    total_entries: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    previewed_count: int = 0
    failed_count: int = 0
    created_at: datetime
    finished_at: datetime | None = None
    error_message: str | None = None


class SyncEntryModel(EntryOutcome):
    """Represents a persisted per-entry outcome."""

    id: int
    run_id: str
    created_at: datetime
