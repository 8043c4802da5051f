"""Wiring of clients, reference data and stores for one CLI invocation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.engine import Engine

from .clients import NotionCatalog, TmdbClient, create_client
from .db import create_engine_from_settings, init_database
from .metadata_fetcher import MetadataFetcher
from .prompts import Prompter, TyperPrompter
from .reference import ReferenceData, load_reference_data
from .resolver import CandidateResolver
from .session import SyncSession
from .settings import SyncSettings
from .stores.run_store import RunStore
from .writer import ReconciliationWriter


@dataclass(slots=True)
class SyncState:
    """Encapsulates the collaborators shared by CLI commands."""

    settings: SyncSettings
    reference: ReferenceData
    prompter: Prompter = field(default_factory=TyperPrompter)
    _engine: Engine | None = None

    @classmethod
    def from_settings(cls, settings: SyncSettings, prompter: Prompter | None = None) -> "SyncState":
        return cls(
            settings=settings,
            reference=load_reference_data(settings.reference_dir),
            prompter=prompter or TyperPrompter(),
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine_from_settings(self.settings)
            init_database(self._engine)
        return self._engine

    def run_store(self) -> RunStore:
        return RunStore(self.engine)

    def tmdb_client(self) -> TmdbClient:
        return TmdbClient(
            self.settings.tmdb_api_key or "",
            base_url=self.settings.tmdb_api_url,
            timeout=self.settings.http_timeout,
        )

    def catalog(self) -> NotionCatalog:
        client = create_client(
            self.settings.notion_api_key or "",
            base_url=self.settings.notion_api_url,
            version=self.settings.notion_version,
            timeout=self.settings.http_timeout,
        )
        return NotionCatalog(client, self.settings.notion_movie_db or "")

    def resolver(self, tmdb: TmdbClient) -> CandidateResolver:
        return CandidateResolver(
            tmdb,
            self.prompter,
            self.reference,
            page_size=self.settings.choice_page_size,
        )

    def fetcher(self, tmdb: TmdbClient) -> MetadataFetcher:
        return MetadataFetcher(tmdb, self.reference)

    def session(
        self,
        catalog: NotionCatalog,
        tmdb: TmdbClient,
        *,
        catalog_type: str | None,
        limit: int,
        excluded_fields: Iterable[str],
        dry_run: bool,
        journal: bool,
    ) -> SyncSession:
        writer = ReconciliationWriter(
            catalog,
            excluded_fields=excluded_fields,
            image_base_url=self.settings.tmdb_image_url,
            short_film_threshold=self.settings.short_film_threshold,
        )
        return SyncSession(
            catalog,
            self.resolver(tmdb),
            self.fetcher(tmdb),
            writer,
            self.prompter,
            catalog_type=catalog_type,
            page_size=self.settings.page_size,
            limit=limit,
            concurrency=self.settings.write_concurrency,
            dry_run=dry_run,
            run_store=self.run_store() if journal else None,
        )

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
