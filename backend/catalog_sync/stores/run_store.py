"""Database-backed journal of sync runs and their per-entry outcomes."""
from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Iterable
from uuid import uuid4

from sqlmodel import Session, select

from ..models import SyncEntryRecord, SyncRunRecord
from ..schemas import EntryOutcome, SyncEntryModel, SyncRunModel


class RunStore:
    """Thread-safe recorder for sync sessions."""

    def __init__(self, engine) -> None:
        self._engine = engine
        self._lock = Lock()

    def start(self, catalog_type: str | None, *, dry_run: bool = False) -> SyncRunModel:
        """Create a running session entry."""

        record = SyncRunRecord(
            id=uuid4().hex,
            catalog_type=catalog_type,
            status="running",
            dry_run=dry_run,
        )
        with self._lock, Session(self._engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            return _to_run_model(record)

    def record(self, run_id: str, outcome: EntryOutcome) -> SyncEntryModel:
        """Persist one entry outcome and bump the run counters."""

        entry = SyncEntryRecord(
            run_id=run_id,
            catalog_id=outcome.catalog_id,
            title=outcome.title,
            status=outcome.status,
            external_id=outcome.external_id,
            message=outcome.message,
        )
        with self._lock, Session(self._engine) as session:
            run = session.get(SyncRunRecord, run_id)
            if run is None:
                raise RuntimeError(f"Sync run {run_id} not found")
            if outcome.status == "failed":
                run.failed_count += 1
            elif outcome.status == "skipped":
                run.skipped_count += 1
            elif outcome.status == "previewed":
                run.previewed_count += 1
            else:
                run.updated_count += 1
            session.add(run)
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return _to_entry_model(entry)

    def finish(
        self,
        run_id: str,
        *,
        status: str,
        total_entries: int | None = None,
        error_message: str | None = None,
    ) -> SyncRunModel:
        """Mark a run as completed, cancelled or failed."""

        with self._lock, Session(self._engine) as session:
            record = session.get(SyncRunRecord, run_id)
            if record is None:
                raise RuntimeError(f"Sync run {run_id} not found")
            record.status = status
            record.finished_at = datetime.now(timezone.utc)
            if total_entries is not None:
                record.total_entries = total_entries
            if error_message is not None:
                record.error_message = error_message
            session.add(record)
            session.commit()
            session.refresh(record)
            return _to_run_model(record)

    def list(self, *, limit: int = 20) -> list[SyncRunModel]:
        """Return the most recent runs first."""

        statement = select(SyncRunRecord).order_by(SyncRunRecord.created_at.desc()).limit(limit)
        with Session(self._engine) as session:
            records: Iterable[SyncRunRecord] = session.exec(statement)
            return [_to_run_model(record) for record in records]

    def get(self, run_id: str) -> SyncRunModel | None:
        with Session(self._engine) as session:
            record = session.get(SyncRunRecord, run_id)
            return _to_run_model(record) if record else None

    def entries(self, run_id: str) -> list[SyncEntryModel]:
        statement = (
            select(SyncEntryRecord)
            .where(SyncEntryRecord.run_id == run_id)
            .order_by(SyncEntryRecord.created_at.asc(), SyncEntryRecord.id.asc())
        )
        with Session(self._engine) as session:
            records: Iterable[SyncEntryRecord] = session.exec(statement)
            return [_to_entry_model(record) for record in records]


def _to_run_model(record: SyncRunRecord) -> SyncRunModel:
    return SyncRunModel(
        id=record.id,
        catalog_type=record.catalog_type,
        status=record.status,
        dry_run=record.dry_run,
        total_entries=record.total_entries,
        updated_count=record.updated_count,
        skipped_count=record.skipped_count,
        previewed_count=record.previewed_count,
        failed_count=record.failed_count,
        created_at=record.created_at,
        finished_at=record.finished_at,
        error_message=record.error_message,
    )


def _to_entry_model(record: SyncEntryRecord) -> SyncEntryModel:
    return SyncEntryModel(
        id=record.id,
        run_id=record.run_id,
        catalog_id=record.catalog_id,
        title=record.title,
        status=record.status,
        external_id=record.external_id,
        message=record.message,
        created_at=record.created_at,
    )
