"""Command line interface for catalog-sync."""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import typer

from backend.catalog_sync.errors import CatalogSyncError
from backend.catalog_sync.media import MediaType
from backend.catalog_sync.schemas import SearchQuery
from backend.catalog_sync.settings import SyncSettings
from backend.catalog_sync.state import SyncState

app = typer.Typer(help="Enrich a Notion movie catalog with TMDB metadata.")
history_app = typer.Typer(help="Inspect previous sync sessions.")
app.add_typer(history_app, name="history")


def create_state() -> SyncState:
    """Build collaborators from the environment. Replaced in tests."""

    return SyncState.from_settings(SyncSettings())


def _dump(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _require(settings: SyncSettings, names: list[str]) -> None:
    missing = [name for name in settings.missing_credentials() if name in names]
    if missing:
        typer.echo(f"Missing configuration: {', '.join(missing)}", err=True)
        raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        for noisy in ("httpx", "urllib3"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


@app.command()
def sync(
    catalog_type: Optional[str] = typer.Option(
        None,
        "--type",
        help="Catalog Type value to sync. Defaults to the CATALOG_TYPE setting.",
    ),
    limit: Optional[int] = typer.Option(
        None, min=1, help="Maximum number of catalog entries to read."
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude",
        "-x",
        help="Catalog field never written (repeat the flag). Adds to SKIP_COLUMNS.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run/--no-dry-run",
        help="Print the computed updates instead of writing them.",
        show_default=True,
    ),
    journal: bool = typer.Option(
        True,
        "--journal/--no-journal",
        help="Record the session in the sync journal.",
        show_default=True,
    ),
) -> None:
    """Resolve catalog entries against TMDB and write the metadata back."""

    state = create_state()
    settings = state.settings
    _require(settings, ["NOTION_API_KEY", "NOTION_MOVIE_DB", "TMDB_API_KEY"])

    excluded = [*settings.skip_columns, *(exclude or [])]
    try:
        with state.catalog() as catalog, state.tmdb_client() as tmdb:
            session = state.session(
                catalog,
                tmdb,
                catalog_type=settings.catalog_type if catalog_type is None else catalog_type,
                limit=limit or settings.catalog_limit,
                excluded_fields=excluded,
                dry_run=dry_run,
                journal=journal,
            )
            report = session.run()
    except CatalogSyncError as exc:
        typer.echo(f"Sync failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        state.dispose()

    if report.failures:
        typer.echo(f"{len(report.failures)} entr{'y' if len(report.failures) == 1 else 'ies'} failed:", err=True)
        for outcome in report.failures:
            typer.echo(f"    - {outcome.title}: {outcome.message}", err=True)
        raise typer.Exit(code=1)


@app.command()
def lookup(
    title: str = typer.Argument(..., help="Title to search for."),
    year: Optional[int] = typer.Option(None, min=1800, max=3000, help="Release year hint."),
    series: bool = typer.Option(False, "--series/--movie", help="Search TV series instead of movies."),
) -> None:
    """Resolve a single title and print its canonical metadata."""

    state = create_state()
    _require(state.settings, ["TMDB_API_KEY"])

    query = SearchQuery(
        title=title,
        year=year,
        media_type=MediaType.SERIES if series else MediaType.MOVIE,
    )
    try:
        with state.tmdb_client() as tmdb:
            match = state.resolver(tmdb).resolve(query)
            if match is None:
                typer.echo("Skipped.")
                return
            metadata = state.fetcher(tmdb).fetch(match, catalog_id="")
    except CatalogSyncError as exc:
        typer.echo(f"Lookup failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _dump(metadata.model_dump(mode="json", exclude={"catalog_id"}))


@history_app.command("list")
def list_runs(
    limit: int = typer.Option(10, min=1, max=100, help="Number of recent sessions to display."),
) -> None:
    """Display recent sync sessions."""

    state = create_state()
    try:
        runs = state.run_store().list(limit=limit)
    finally:
        state.dispose()
    _dump([run.model_dump(mode="json") for run in runs])


@history_app.command("show")
def show_run(
    run_id: str = typer.Argument(..., help="Identifier of the session to display."),
) -> None:
    """Display a sync session and its per-entry outcomes."""

    state = create_state()
    try:
        store = state.run_store()
        run = store.get(run_id)
        if run is None:
            typer.echo("Run not found", err=True)
            raise typer.Exit(code=1)
        entries = store.entries(run_id)
    finally:
        state.dispose()

    payload = run.model_dump(mode="json")
    payload["entries"] = [entry.model_dump(mode="json") for entry in entries]
    _dump(payload)
