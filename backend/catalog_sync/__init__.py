"""
Catalog sync library.

Reconciles a Notion movie/series catalog with TMDB metadata: resolve each
entry to one TMDB record, normalize it and write the enriched fields back.
"""

from .errors import CatalogError, CatalogSyncError, MetadataError, MetadataProviderError
from .media import MediaType
from .metadata_fetcher import MetadataFetcher, normalize_record
from .reference import ReferenceData, load_reference_data
from .resolver import CandidateResolver
from .schemas import CanonicalMetadata, CatalogEntry, ResolvedMatch, SearchQuery, SyncReport
from .session import SyncSession
from .settings import SyncSettings
from .writer import ReconciliationWriter, build_properties

__all__ = [
    "CandidateResolver",
    "CanonicalMetadata",
    "CatalogEntry",
    "CatalogError",
    "CatalogSyncError",
    "MediaType",
    "MetadataError",
    "MetadataFetcher",
    "MetadataProviderError",
    "ReconciliationWriter",
    "ReferenceData",
    "ResolvedMatch",
    "SearchQuery",
    "SyncReport",
    "SyncSession",
    "SyncSettings",
    "build_properties",
    "load_reference_data",
    "normalize_record",
]
