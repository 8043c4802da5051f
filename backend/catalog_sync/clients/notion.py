"""Notion database client used as the sync catalog."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import CatalogError
from ..media import MediaType
from ..schemas import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.notion.com/v1"
DEFAULT_VERSION = "2022-06-28"


def create_client(
    api_key: str,
    *,
    base_url: str = DEFAULT_API_URL,
    version: str = DEFAULT_VERSION,
    timeout: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Instantiate an HTTPX client authenticated against the Notion API."""

    return httpx.Client(
        base_url=base_url.rstrip("/") + "/",
        timeout=timeout,
        transport=transport,
        headers={
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": version,
            "Content-Type": "application/json",
        },
    )


def build_filter(catalog_type: str | None) -> dict[str, Any]:
    """Filter for entries of the configured Type that have a title."""

    conditions: list[dict[str, Any]] = []
    if catalog_type:
        conditions.append({"property": "Type", "select": {"equals": catalog_type}})
    conditions.append({"property": "Title", "title": {"is_not_empty": True}})
    return {"and": conditions}


def parse_row(row: dict[str, Any]) -> CatalogEntry:
    """Convert a database query row into a catalog entry."""

    properties = row.get("properties") or {}
    title_parts = (properties.get("Title") or {}).get("title") or []
    year = (properties.get("Year") or {}).get("number")
    type_select = (properties.get("Type") or {}).get("select") or {}

    return CatalogEntry(
        id=row["id"],
        title="".join(part.get("plain_text", "") for part in title_parts).strip(),
        year=int(year) if year is not None else None,
        media_type=MediaType.from_catalog(type_select.get("name")),
    )


class NotionCatalog:
    """Reads entries from and writes property updates to one Notion database."""

    def __init__(self, client: httpx.Client, database_id: str) -> None:
        self._client = client
        self._database_id = database_id

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("%s %s", method, path)
        try:
            response = self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_message(exc.response)
            raise CatalogError(
                f"Catalog responded with HTTP {exc.response.status_code}: {detail}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogError(f"Failed to contact catalog: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise CatalogError("Catalog returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise CatalogError("Catalog response must be an object")
        return body

    def query(
        self,
        catalog_type: str | None,
        *,
        page_size: int = 100,
        limit: int = 100,
    ) -> list[CatalogEntry]:
        """Return up to ``limit`` entries matching the catalog filter, in database order."""

        entries: list[CatalogEntry] = []
        payload: dict[str, Any] = {
            "filter": build_filter(catalog_type),
            "page_size": min(page_size, limit),
        }
        while True:
            body = self._request("POST", f"databases/{self._database_id}/query", payload)
            for row in body.get("results") or []:
                entries.append(parse_row(row))
                if len(entries) >= limit:
                    return entries
            cursor = body.get("next_cursor")
            if not body.get("has_more") or not cursor:
                return entries
            payload["start_cursor"] = cursor

    def update(self, page_id: str, properties: dict[str, Any]) -> None:
        """Apply a partial property update to one catalog page."""

        self._request("PATCH", f"pages/{page_id}", {"properties": properties})

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NotionCatalog":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text
