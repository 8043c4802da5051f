"""Exception hierarchy for catalog-sync."""
from __future__ import annotations


class CatalogSyncError(RuntimeError):
    """Base class for errors raised by the sync library."""


class MetadataProviderError(CatalogSyncError):
    """Raised when TMDB cannot be reached or returns an unusable response."""


class CatalogError(CatalogSyncError):
    """Raised when the catalog rejects a query or an update."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MetadataError(CatalogSyncError):
    """Raised when a provider record cannot be normalized."""
