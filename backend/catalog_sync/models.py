"""Database models for the sync journal."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncRunRecord(SQLModel, table=True):
    """One interactive sync session."""

    __tablename__ = "sync_runs"

    id: str = Field(primary_key=True, index=True)
    catalog_type: str | None = Field(default=None)
    status: str = Field(default="running", index=True)
    dry_run: bool = Field(default=False)
    total_entries: int = Field(default=0)
    updated_count: int = Field(default=0)
    skipped_count: int = Field(default=0)
    previewed_count: int = Field(default=0)
    failed_count: int = Field(default=0)
    error_message: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)
    finished_at: datetime | None = Field(default=None)


class SyncEntryRecord(SQLModel, table=True):
    """Outcome of a single catalog entry within a run."""

    __tablename__ = "sync_entries"

    id: int | None = Field(default=None, primary_key=True)
    run_id: str = Field(index=True)
    catalog_id: str = Field(index=True)
    title: str
    status: str = Field(index=True)
    external_id: str | None = Field(default=None)
    message: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
