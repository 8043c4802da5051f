"""
TMDB API client.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import MetadataProviderError

logger = logging.getLogger(__name__)


class TmdbClient:
    TMDB_ENDPOINT = "https://api.themoviedb.org/3"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or self.TMDB_ENDPOINT).rstrip("/")
        self.timeout = timeout
        self.session = session or self._build_session()

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        retries = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET"]),
        )
        session.mount("https://", HTTPAdapter(max_retries=retries))
        return session

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = {"api_key": self.api_key}
        query.update({key: value for key, value in (params or {}).items() if value is not None})
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s %s", url, {k: v for k, v in query.items() if k != "api_key"})
        try:
            resp = self.session.get(url, params=query, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            raise MetadataProviderError(f"TMDB responded with HTTP {status} for {path}") from exc
        except requests.RequestException as exc:
            raise MetadataProviderError(f"Failed to contact TMDB: {exc}") from exc
        except ValueError as exc:
            raise MetadataProviderError(f"TMDB returned invalid JSON for {path}") from exc

        if not isinstance(payload, dict):
            raise MetadataProviderError(f"TMDB response for {path} must be an object")
        return payload

    def search(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run a search and return the raw result rows in API order."""

        return list(self.get(path, params).get("results") or [])

    def get_detail(
        self,
        path: str,
        *,
        include_videos: bool = True,
        include_credits: bool = True,
    ) -> Dict[str, Any]:
        """Fetch a detail record with its sub-resources appended in one request."""

        appended = [
            name
            for name, enabled in (("videos", include_videos), ("credits", include_credits))
            if enabled
        ]
        params = {"append_to_response": ",".join(appended)} if appended else None
        return self.get(path, params)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "TmdbClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
