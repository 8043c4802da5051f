"""Interactive sync session: read, resolve, confirm, write."""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Protocol, Sequence

import typer

from .errors import CatalogSyncError
from .metadata_fetcher import MetadataFetcher
from .prompts import Prompter
from .resolver import CandidateResolver
from .schemas import CanonicalMetadata, CatalogEntry, EntryOutcome, SearchQuery, SyncReport
from .stores.run_store import RunStore
from .writer import ReconciliationWriter

logger = logging.getLogger(__name__)


class CatalogReader(Protocol):
    def query(
        self, catalog_type: str | None, *, page_size: int = 100, limit: int = 100
    ) -> list[CatalogEntry]: ...


class SyncSession:
    """Drives one batch of catalog entries through the enrichment pipeline.

    Resolution and fetching run strictly one entry at a time because they may
    need the user's input. Only the final write phase runs in parallel.
    """

    def __init__(
        self,
        catalog: CatalogReader,
        resolver: CandidateResolver,
        fetcher: MetadataFetcher,
        writer: ReconciliationWriter,
        prompter: Prompter,
        *,
        catalog_type: str | None = None,
        page_size: int = 100,
        limit: int = 100,
        concurrency: int = 4,
        dry_run: bool = False,
        run_store: RunStore | None = None,
        echo: Callable[..., Any] = typer.echo,
    ) -> None:
        self._catalog = catalog
        self._resolver = resolver
        self._fetcher = fetcher
        self._writer = writer
        self._prompter = prompter
        self._catalog_type = catalog_type or None
        self._page_size = page_size
        self._limit = limit
        self._concurrency = concurrency
        self._dry_run = dry_run
        self._run_store = run_store
        self._echo = echo

    def run(self) -> SyncReport:
        run_id = None
        if self._run_store is not None:
            run_id = self._run_store.start(self._catalog_type, dry_run=self._dry_run).id
        report = SyncReport(run_id=run_id)

        try:
            total = self._process(report)
        except Exception as exc:
            if run_id is not None:
                self._record(report)
                self._run_store.finish(run_id, status="failed", error_message=str(exc))
            raise
        return self._finish(report, total=total)

    def _process(self, report: SyncReport) -> int:
        self._echo("⏳  Fetching database from Notion")
        entries = self._catalog.query(
            self._catalog_type, page_size=self._page_size, limit=self._limit
        )
        logger.info("Read %d catalog entries", len(entries))
        self._echo("🎬  Fetched the following entries:")
        self._echo("\n".join(f"    - {entry.title}" for entry in entries) or "    (none)")
        self._echo()

        if not entries or not self._prompter.confirm("Are you sure you want to continue?"):
            report.cancelled = bool(entries)
            return len(entries)
        self._echo()

        self._echo("⏳  Fetching metadata from TMDB")
        metadata, outcomes = self.collect_metadata(entries)
        report.outcomes.extend(outcomes)
        self._echo(
            "\n".join(
                f"    🎥  {item.title} ({item.original_title}) [{item.year}]" for item in metadata
            )
        )
        self._echo()

        if not metadata or not self._prompter.confirm("Are you sure you want to continue?"):
            report.cancelled = bool(metadata)
            return len(entries)
        self._echo()

        logger.info("Writing %d entries (dry_run=%s)", len(metadata), self._dry_run)
        self._echo("⏳  Updating entries in Notion")
        report.outcomes.extend(self.write_all(metadata))
        order = {entry.id: index for index, entry in enumerate(entries)}
        report.outcomes.sort(key=lambda outcome: order.get(outcome.catalog_id, len(order)))
        return len(entries)

    def collect_metadata(
        self, entries: Sequence[CatalogEntry]
    ) -> tuple[list[CanonicalMetadata], list[EntryOutcome]]:
        """Resolve and fetch each entry in order; skipped or failed entries yield no metadata."""

        metadata: list[CanonicalMetadata] = []
        outcomes: list[EntryOutcome] = []
        for entry in entries:
            query = SearchQuery(title=entry.title, year=entry.year, media_type=entry.media_type)
            try:
                match = self._resolver.resolve(query)
                if match is None:
                    outcomes.append(
                        EntryOutcome(catalog_id=entry.id, title=entry.title, status="skipped")
                    )
                    continue
                metadata.append(self._fetcher.fetch(match, catalog_id=entry.id))
            except CatalogSyncError as exc:
                logger.exception("Failed to fetch metadata for %r", entry.title)
                self._echo(f"    ❌  {entry.title}: {exc}", err=True)
                outcomes.append(
                    EntryOutcome(
                        catalog_id=entry.id, title=entry.title, status="failed", message=str(exc)
                    )
                )
        return metadata, outcomes

    def write_all(self, metadata: Sequence[CanonicalMetadata]) -> list[EntryOutcome]:
        """Write every entry; a rejected write is reported without stopping the others."""

        if self._dry_run:
            return [self._preview(item) for item in metadata]

        outcomes: list[EntryOutcome] = []
        with ThreadPoolExecutor(max_workers=self._concurrency) as pool:
            futures = {pool.submit(self._writer.apply, item): item for item in metadata}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    future.result()
                except Exception as exc:
                    logger.exception("Failed to update %s", item.full_title)
                    self._echo(f"    ❌  Failed {item.full_title}: {exc}", err=True)
                    outcomes.append(_outcome(item, "failed", message=str(exc)))
                else:
                    self._echo(f"    ✅  Updated {item.full_title} [{item.year}]")
                    outcomes.append(_outcome(item, "updated"))
        return outcomes

    def _preview(self, item: CanonicalMetadata) -> EntryOutcome:
        properties = self._writer.properties(item)
        self._echo(f"    📝  {item.full_title} [{item.year}]")
        self._echo(json.dumps(properties, indent=2, ensure_ascii=False))
        return _outcome(item, "previewed")

    def _finish(self, report: SyncReport, *, total: int) -> SyncReport:
        if report.cancelled:
            self._echo("Cancelled, nothing was written.")
        else:
            self._echo(
                f"Done: {report.count('updated')} updated, {report.count('previewed')} previewed, "
                f"{report.count('skipped')} skipped, {report.count('failed')} failed"
            )
        if report.run_id is not None:
            self._record(report)
            self._run_store.finish(
                report.run_id,
                status="cancelled" if report.cancelled else "completed",
                total_entries=total,
            )
        return report

    def _record(self, report: SyncReport) -> None:
        for outcome in report.outcomes:
            self._run_store.record(report.run_id, outcome)


def _outcome(item: CanonicalMetadata, status: str, *, message: str | None = None) -> EntryOutcome:
    return EntryOutcome(
        catalog_id=item.catalog_id,
        title=item.corrected_title or item.title,
        status=status,
        external_id=item.external_id,
        message=message,
    )
