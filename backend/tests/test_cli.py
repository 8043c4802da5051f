"""Tests for the Typer-based catalog-sync CLI."""
from __future__ import annotations

import importlib
import json
from typing import Any

import pytest
from typer.testing import CliRunner

from backend.catalog_sync.errors import CatalogError
from backend.catalog_sync.media import MediaType
from backend.catalog_sync.prompts import Choice, TyperPrompter
from backend.catalog_sync.reference import ReferenceData
from backend.catalog_sync.schemas import CatalogEntry, EntryOutcome
from backend.catalog_sync.settings import SyncSettings
from backend.catalog_sync.state import SyncState
from backend.tests.stubs import StubCatalog, StubTmdb, your_name_record, your_name_search_row

cli_app_module = importlib.import_module("backend.sync_cli.app")

YOUR_NAME = CatalogEntry(id="page-1", title="Your Name", year=2016, media_type=MediaType.MOVIE)


class StubState(SyncState):
    """SyncState whose remote clients are in-memory doubles."""

    def __init__(
        self,
        settings: SyncSettings,
        reference: ReferenceData,
        *,
        catalog: StubCatalog | None = None,
        tmdb: StubTmdb | None = None,
    ) -> None:
        super().__init__(settings=settings, reference=reference, prompter=TyperPrompter())
        self.stub_catalog = catalog or StubCatalog()
        self.stub_tmdb = tmdb or StubTmdb()

    def catalog(self) -> StubCatalog:  # type: ignore[override]
        return self.stub_catalog

    def tmdb_client(self) -> StubTmdb:  # type: ignore[override]
        return self.stub_tmdb


class FailingCatalog(StubCatalog):
    def query(self, catalog_type: str | None, *, page_size: int = 100, limit: int = 100):
        raise CatalogError("Catalog responded with HTTP 401: unauthorized", status_code=401)


def _dune_record() -> dict[str, Any]:
    return {
        "id": 841,
        "title": "Dune",
        "original_title": "Dune",
        "release_date": "1984-12-14",
        "original_language": "en",
        "runtime": 137,
        "genres": [{"id": 878, "name": "Science Fiction"}],
        "videos": {"results": []},
        "credits": {"crew": [{"name": "David Lynch", "job": "Director"}]},
    }


def _tmdb() -> StubTmdb:
    return StubTmdb(
        searches={"Your Name": [your_name_search_row()]},
        details={"movie/372058": your_name_record(), "movie/841": _dune_record()},
    )


def _json(output: str) -> Any:
    start = min(index for index in (output.find("{"), output.find("[")) if index >= 0)
    payload, _ = json.JSONDecoder().raw_decode(output[start:])
    return payload


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def install_state(monkeypatch: pytest.MonkeyPatch):
    def install(state: SyncState) -> SyncState:
        monkeypatch.setattr(cli_app_module, "create_state", lambda: state)
        return state

    return install


def test_cli_sync_resolves_and_writes(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    catalog = StubCatalog([YOUR_NAME])
    state = install_state(StubState(settings, reference, catalog=catalog, tmdb=_tmdb()))

    result = runner.invoke(cli_app_module.app, ["sync"], input="y\ny\n")

    assert result.exit_code == 0, result.output
    assert catalog.query_calls == [("Movie", 100, 100)]
    assert catalog.updates["page-1"]["Year"] == {"number": 2016}
    assert "Your Name" in result.output
    assert "Done: 1 updated, 0 previewed, 0 skipped, 0 failed" in result.output

    runs = state.run_store().list()
    assert [(run.status, run.updated_count) for run in runs] == [("completed", 1)]


def test_cli_sync_options_override_settings(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    catalog = StubCatalog([YOUR_NAME])
    configured = settings.model_copy(update={"skip_columns": ["Trailer"]})
    state = install_state(StubState(configured, reference, catalog=catalog, tmdb=_tmdb()))

    result = runner.invoke(
        cli_app_module.app,
        ["sync", "--type", "Series", "--limit", "5", "-x", "Synopsis", "--no-journal"],
        input="y\ny\n",
    )

    assert result.exit_code == 0, result.output
    assert catalog.query_calls == [("Series", 100, 5)]
    sent = catalog.updates["page-1"]
    assert "Trailer" not in sent
    assert "Synopsis" not in sent
    assert state.run_store().list() == []


def test_cli_sync_cancel_writes_nothing(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    catalog = StubCatalog([YOUR_NAME])
    tmdb = _tmdb()
    install_state(StubState(settings, reference, catalog=catalog, tmdb=tmdb))

    result = runner.invoke(cli_app_module.app, ["sync"], input="n\n")

    assert result.exit_code == 0, result.output
    assert "Cancelled, nothing was written." in result.output
    assert tmdb.search_calls == []
    assert catalog.updates == {}


def test_cli_sync_dry_run_prints_payload(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    catalog = StubCatalog([YOUR_NAME])
    install_state(StubState(settings, reference, catalog=catalog, tmdb=_tmdb()))

    result = runner.invoke(cli_app_module.app, ["sync", "--dry-run"], input="y\ny\n")

    assert result.exit_code == 0, result.output
    assert catalog.updates == {}
    assert '"Last Metadata Sync"' in result.output
    assert "1 previewed" in result.output


def test_cli_sync_reports_failed_entries(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    catalog = StubCatalog([YOUR_NAME], reject=["page-1"])
    install_state(StubState(settings, reference, catalog=catalog, tmdb=_tmdb()))

    result = runner.invoke(cli_app_module.app, ["sync"], input="y\ny\n")

    assert result.exit_code == 1
    assert "1 entry failed:" in result.output
    assert "validation_error" in result.output


def test_cli_sync_handles_catalog_errors(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    state = install_state(StubState(settings, reference, catalog=FailingCatalog(), tmdb=_tmdb()))

    result = runner.invoke(cli_app_module.app, ["sync"])

    assert result.exit_code == 1
    assert "Sync failed: Catalog responded with HTTP 401" in result.output
    runs = state.run_store().list()
    assert runs[0].status == "failed"
    assert "HTTP 401" in (runs[0].error_message or "")


def test_cli_sync_requires_credentials(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    unconfigured = settings.model_copy(update={"tmdb_api_key": None, "notion_movie_db": ""})
    install_state(StubState(unconfigured, reference))

    result = runner.invoke(cli_app_module.app, ["sync"])

    assert result.exit_code == 1
    assert "Missing configuration: NOTION_MOVIE_DB, TMDB_API_KEY" in result.output


def test_cli_lookup_prints_metadata(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    install_state(StubState(settings, reference, tmdb=_tmdb()))

    result = runner.invoke(cli_app_module.app, ["lookup", "Your Name", "--year", "2016"])

    assert result.exit_code == 0, result.output
    payload = _json(result.output)
    assert payload["external_id"] == "372058"
    assert payload["media_type"] == "Movie"
    assert payload["language"] == "Japanese"
    assert "catalog_id" not in payload


def test_cli_lookup_skip(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    tmdb = _tmdb()
    tmdb.searches["Dune"] = [
        {"id": 841, "title": "Dune", "release_date": "1984-12-14", "original_language": "en"},
        {"id": 438631, "title": "Dune", "release_date": "2021-09-15", "original_language": "en"},
    ]
    install_state(StubState(settings, reference, tmdb=tmdb))

    result = runner.invoke(cli_app_module.app, ["lookup", "Dune"], input="3\n")

    assert result.exit_code == 0, result.output
    assert "Multiple results found for Dune" in result.output
    assert "Skipped." in result.output
    assert tmdb.detail_calls == []


def test_cli_lookup_pages_choices_and_accepts_manual_id(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    tmdb = _tmdb()
    tmdb.searches[("Dune", 2021)] = [
        {"id": 1, "title": "Dune", "release_date": "2021-01-01", "original_language": "en"},
        {"id": 2, "title": "Dune", "release_date": "2021-02-01", "original_language": "en"},
    ]
    paged = settings.model_copy(update={"choice_page_size": 2})
    install_state(StubState(paged, reference, tmdb=tmdb))

    result = runner.invoke(
        cli_app_module.app,
        ["lookup", "Dune", "--year", "2021"],
        input="n\nbogus\n4\n841\n",
    )

    assert result.exit_code == 0, result.output
    assert "n/p for page 1/3" in result.output
    assert "   3) ⏩  Skip" in result.output
    assert "Invalid selection: 'bogus'" in result.output
    assert tmdb.detail_calls == [("movie/841", True, True)]
    payload = _json(result.output[result.output.index("Enter TMDB ID manually"):])
    assert payload["directors"] == ["David Lynch"]
    assert payload["corrected_title"] is None


def test_cli_history_list_and_show(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    state = install_state(StubState(settings, reference))
    store = state.run_store()
    run = store.start("Movie")
    store.record(run.id, EntryOutcome(catalog_id="page-1", title="Your Name", status="updated"))
    store.finish(run.id, status="completed", total_entries=1)

    listed = runner.invoke(cli_app_module.app, ["history", "list"])
    assert listed.exit_code == 0, listed.output
    runs = _json(listed.output)
    assert [item["id"] for item in runs] == [run.id]
    assert runs[0]["updated_count"] == 1

    shown = runner.invoke(cli_app_module.app, ["history", "show", run.id])
    assert shown.exit_code == 0, shown.output
    payload = _json(shown.output)
    assert payload["status"] == "completed"
    assert [entry["catalog_id"] for entry in payload["entries"]] == ["page-1"]


def test_cli_history_show_missing_run(
    runner: CliRunner, settings: SyncSettings, reference: ReferenceData, install_state
) -> None:
    install_state(StubState(settings, reference))

    result = runner.invoke(cli_app_module.app, ["history", "show", "unknown"])

    assert result.exit_code == 1
    assert "Run not found" in result.output


def test_typer_prompter_rejects_empty_choice_list() -> None:
    with pytest.raises(ValueError):
        TyperPrompter().choose("Pick one", [])


def test_choice_is_immutable() -> None:
    choice = Choice(label="⏩  Skip", value="skip")

    with pytest.raises(AttributeError):
        choice.label = "other"  # type: ignore[misc]
