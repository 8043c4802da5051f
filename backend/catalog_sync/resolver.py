"""Narrow a free-text title down to exactly one TMDB identifier."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from .prompts import Choice, Prompter
from .reference import ReferenceData
from .schemas import Candidate, ResolvedMatch, SearchQuery

logger = logging.getLogger(__name__)

SKIP = "skip"
ENTER_ID = "enter-id"
SEARCH_WITHOUT_YEAR = "search"


class SearchClient(Protocol):
    def search(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]: ...


def search_params(query: SearchQuery) -> dict[str, Any]:
    """Search parameters for the query's media type; series use first_air_date_year."""

    params: dict[str, Any] = {"query": query.title}
    if query.year is not None:
        params[query.media_type.schema.year_param] = query.year
    return params


def _parse_year(raw: str) -> int | None:
    raw = raw.strip()
    if not raw:
        return None
    if raw.isdigit():
        return int(raw)
    logger.warning("Ignoring non-numeric year %r", raw)
    return None


class CandidateResolver:
    """Resolves search queries, asking the user whenever the answer is not unique.

    Each retry replaces the current query; the loop only ends on a resolved
    identifier or an explicit skip (``None``).
    """

    def __init__(
        self,
        client: SearchClient,
        prompter: Prompter,
        reference: ReferenceData,
        *,
        page_size: int = 20,
    ) -> None:
        self._client = client
        self._prompter = prompter
        self._reference = reference
        self._page_size = page_size

    def search(self, query: SearchQuery) -> list[Candidate]:
        rows = self._client.search(query.media_type.schema.search_path, search_params(query))
        logger.debug("Search %r returned %d result(s)", query.describe(), len(rows))
        return [Candidate.from_raw(row, query.media_type) for row in rows]

    def resolve(self, query: SearchQuery) -> ResolvedMatch | None:
        """Return the selected match, or ``None`` when the user skips the entry."""

        original_title = query.title
        corrected_title: str | None = None

        while True:
            candidates = self.search(query)

            if not candidates:
                retry = self._ask_new_search(query)
                if retry is None:
                    logger.info("Skipped %r after an empty search", original_title)
                    return None
                query = retry
                corrected_title = original_title
                continue

            if len(candidates) == 1:
                return self._match(candidates[0].id, query, corrected_title)

            selection = self._prompter.choose(
                f"Multiple results found for {query.describe()}",
                self._choices(query, candidates),
                page_size=self._page_size,
                prefix="⚠️  ",
            )

            if selection == SKIP:
                logger.info("Skipped %r", original_title)
                return None
            if selection == SEARCH_WITHOUT_YEAR:
                query = query.model_copy(update={"year": None})
                corrected_title = original_title
                continue
            if selection == ENTER_ID:
                entered_id = self._prompter.text("Enter TMDB ID manually: ", prefix="🎬 ")
                if not entered_id:
                    logger.info("Skipped %r, no TMDB ID entered", original_title)
                    return None
                return self._match(entered_id, query, corrected_title)

            return self._match(candidates[selection].id, query, corrected_title)

    def _ask_new_search(self, query: SearchQuery) -> SearchQuery | None:
        new_title = self._prompter.text(
            f"No results found for {query.describe()}\nNew Search (enter to skip): ",
            prefix="🛑 ",
        )
        if not new_title:
            return None
        new_year = _parse_year(self._prompter.text("New Year (optional): "))
        return SearchQuery(title=new_title, year=new_year, media_type=query.media_type)

    def _choices(self, query: SearchQuery, candidates: list[Candidate]) -> list[Choice]:
        choices = [
            Choice(label=self.describe_candidate(candidate), value=index)
            for index, candidate in enumerate(candidates)
        ]
        choices.append(Choice(label="⏩  Skip", value=SKIP))
        choices.append(Choice(label="🎬  Enter TMDB ID", value=ENTER_ID))
        if query.year is not None:
            choices.append(Choice(label="🔎  Search without year", value=SEARCH_WITHOUT_YEAR))
        return choices

    def describe_candidate(self, candidate: Candidate) -> str:
        flag = self._reference.flag(candidate.original_language)
        genres = ", ".join(self._reference.genre_names(candidate.genre_ids))
        link = candidate.media_type.web_url(candidate.id)
        return f"{flag}   {candidate.title} [{candidate.release_date or '?'}] - {genres} ({link})"

    @staticmethod
    def _match(external_id: str, query: SearchQuery, corrected_title: str | None) -> ResolvedMatch:
        return ResolvedMatch(
            external_id=external_id,
            media_type=query.media_type,
            corrected_title=corrected_title,
        )
