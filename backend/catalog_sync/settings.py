"""Runtime configuration for catalog-sync."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Environment-aware settings for a catalog sync session."""

    notion_api_key: str | None = Field(
        default=None, description="Integration token used to read and update the catalog."
    )
    notion_movie_db: str | None = Field(
        default=None, description="Identifier of the catalog database."
    )
    notion_api_url: str = Field(
        default="https://api.notion.com/v1", description="Base URL for the catalog API."
    )
    notion_version: str = Field(
        default="2022-06-28", description="API version header sent to the catalog."
    )
    tmdb_api_key: str | None = Field(
        default=None, description="TMDB API key used for search and detail lookups."
    )
    tmdb_api_url: str = Field(
        default="https://api.themoviedb.org/3", description="Base URL for the TMDB API."
    )
    tmdb_image_url: str = Field(
        default="https://image.tmdb.org/t/p/w200",
        description="Image host prefix joined with poster paths.",
    )
    catalog_type: str | None = Field(
        default="Series",
        description="Type select value entries must match to be synced. Empty disables the filter.",
    )
    page_size: int = Field(default=100, ge=1, le=100, description="Catalog query page size.")
    catalog_limit: int = Field(
        default=100, ge=1, description="Maximum number of catalog entries read per session."
    )
    skip_columns: list[str] = Field(
        default_factory=list,
        description="Destination fields never written, regardless of their computed value.",
    )
    short_film_threshold: int = Field(
        default=30, description="Runtimes above this many minutes are classified as full-length."
    )
    choice_page_size: int = Field(
        default=20, ge=1, description="Number of candidates shown per page in selection lists."
    )
    write_concurrency: int = Field(
        default=4, ge=1, description="Number of catalog updates issued in parallel."
    )
    http_timeout: float = Field(default=20.0, description="Timeout in seconds for HTTP calls.")
    reference_dir: str | None = Field(
        default=None,
        description="Optional directory holding genres.json and languages.json overrides.",
    )
    database_url: str = Field(
        default="sqlite:///./data/catalog-sync.db",
        description="Connection URL for the sync journal database.",
    )
    database_echo: bool = Field(
        default=False, description="Enable SQL echo for debugging queries."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def missing_credentials(self) -> list[str]:
        """Return the environment names of unset credentials."""

        missing: list[str] = []
        if not self.notion_api_key:
            missing.append("NOTION_API_KEY")
        if not self.notion_movie_db:
            missing.append("NOTION_MOVIE_DB")
        if not self.tmdb_api_key:
            missing.append("TMDB_API_KEY")
        return missing
