"""Interactive prompts used while resolving and confirming a sync session."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import typer


@dataclass(frozen=True, slots=True)
class Choice:
    """One selectable line in a choice list."""

    label: str
    value: Any


class Prompter(Protocol):
    """Human input collaborator. Every call blocks until the user answers."""

    def text(self, message: str, *, prefix: str = "") -> str: ...

    def choose(
        self,
        message: str,
        choices: Sequence[Choice],
        *,
        page_size: int = 20,
        prefix: str = "",
    ) -> Any: ...

    def confirm(self, message: str, *, default: bool = True) -> bool: ...


class TyperPrompter:
    """Terminal prompts rendered with Typer."""

    def text(self, message: str, *, prefix: str = "") -> str:
        value = typer.prompt(f"{prefix}{message}", default="", show_default=False)
        return value.strip()

    def confirm(self, message: str, *, default: bool = True) -> bool:
        return typer.confirm(message, default=default)

    def choose(
        self,
        message: str,
        choices: Sequence[Choice],
        *,
        page_size: int = 20,
        prefix: str = "",
    ) -> Any:
        if not choices:
            raise ValueError("choose() needs at least one choice")

        page_count = (len(choices) + page_size - 1) // page_size
        page = 0
        typer.echo(f"{prefix}{message}")
        while True:
            start = page * page_size
            for number, choice in enumerate(choices[start:start + page_size], start=start + 1):
                typer.echo(f"  {number:>2}) {choice.label}")

            hint = f"1-{len(choices)}"
            if page_count > 1:
                hint += f", n/p for page {page + 1}/{page_count}"
            answer = typer.prompt(f"Select [{hint}]").strip().lower()

            if answer == "n" and page_count > 1:
                page = (page + 1) % page_count
                continue
            if answer == "p" and page_count > 1:
                page = (page - 1) % page_count
                continue
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1].value
            typer.echo(f"Invalid selection: {answer!r}", err=True)
