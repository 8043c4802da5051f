"""Shared fixtures for the catalog-sync test suite."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.catalog_sync.db import create_engine_from_settings, init_database  # noqa: E402
from backend.catalog_sync.reference import ReferenceData, load_reference_data  # noqa: E402
from backend.catalog_sync.settings import SyncSettings  # noqa: E402
from backend.catalog_sync.stores.run_store import RunStore  # noqa: E402


@pytest.fixture()
def reference() -> ReferenceData:
    return load_reference_data()


@pytest.fixture()
def settings(tmp_path: Path) -> SyncSettings:
    """Settings with fake credentials and an isolated SQLite journal."""

    return SyncSettings(
        _env_file=None,
        notion_api_key="secret_notion",
        notion_movie_db="db-123",
        tmdb_api_key="tmdb-key",
        catalog_type="Movie",
        database_url=f"sqlite:///{tmp_path / 'sync.db'}",
    )


@pytest.fixture()
def run_store(settings: SyncSettings):
    engine = create_engine_from_settings(settings)
    init_database(engine)
    yield RunStore(engine)
    engine.dispose()
