"""
Static genre and language tables used for display and normalization.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

DATA_DIR = Path(__file__).resolve().parent / "data"
FALLBACK_FLAG = "🏳️‍🌈"


@dataclass(frozen=True, slots=True)
class LanguageInfo:
    name: str
    flag: str


@dataclass(frozen=True, slots=True)
class ReferenceData:
    """Immutable lookup tables loaded once at startup."""

    genres: Mapping[int, str]
    languages: Mapping[str, LanguageInfo]

    def flag(self, code: Optional[str]) -> str:
        info = self.languages.get(code or "")
        return info.flag if info else FALLBACK_FLAG

    def language(self, code: Optional[str]) -> Optional[str]:
        info = self.languages.get(code or "")
        return info.name if info else None

    def genre_names(self, genre_ids: Iterable[int]) -> list[str]:
        return [self.genres[genre_id] for genre_id in genre_ids if genre_id in self.genres]


def _read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def load_reference_data(directory: Optional[Path | str] = None) -> ReferenceData:
    """Load genres.json and languages.json from ``directory`` or the bundled copies."""

    base = Path(directory) if directory else DATA_DIR
    genres = {int(key): str(name) for key, name in _read_json(base / "genres.json").items()}
    languages = {
        code: LanguageInfo(name=entry["name"], flag=entry["flag"])
        for code, entry in _read_json(base / "languages.json").items()
    }
    return ReferenceData(
        genres=MappingProxyType(genres),
        languages=MappingProxyType(languages),
    )
