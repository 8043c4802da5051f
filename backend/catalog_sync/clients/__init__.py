"""HTTP clients for the catalog and the metadata provider."""

from .notion import NotionCatalog, create_client
from .tmdb import TmdbClient

__all__ = ["NotionCatalog", "TmdbClient", "create_client"]
