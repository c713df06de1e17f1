"""Data models for the affiliate injector module."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .tokens import Token

SKU_NOT_FOUND = "SKU not found"
NO_USABLE_URL = "no usable URL (row has neither base nor full URL)"


class RenderKind(str, Enum):
    """What a resolved token was rendered as."""
    URL = "url"
    MARKDOWN_LINK = "markdown-link"
    HTML_BUTTON = "html-button"
    HTML_CARD = "html-card"


@dataclass(frozen=True)
class TokenOutcome:
    """Resolution of one token: replacement text or a miss."""
    token: Token
    replacement: str
    resolved: bool
    url: str = ""
    rendered: RenderKind | None = None
    reason: str = ""

    @property
    def empty_url(self) -> bool:
        return self.resolved and not self.url


# --- Manifest (JSON) ---


class FileEntry(BaseModel):
    file: str
    changed: bool


class ReplacedEntry(BaseModel):
    token: str
    url: str
    file: str
    rendered: str


class MissingEntry(BaseModel):
    token: str
    reason: str
    file: str


class InjectionManifest(BaseModel):
    """Append-only record of one injection run, written once at the end."""
    files: list[FileEntry] = Field(default_factory=list)
    replaced: list[ReplacedEntry] = Field(default_factory=list)
    missing: list[MissingEntry] = Field(default_factory=list)
    # Resolved tokens whose row produced no URL; the token is still replaced
    empty: list[MissingEntry] = Field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return sum(1 for f in self.files if f.changed)

    def record(self, file: str, outcomes: list[TokenOutcome], changed: bool) -> None:
        """Append the outcomes of one document."""
        self.files.append(FileEntry(file=file, changed=changed))
        for outcome in outcomes:
            if not outcome.resolved:
                self.missing.append(
                    MissingEntry(token=outcome.token.text, reason=outcome.reason, file=file)
                )
                continue
            self.replaced.append(
                ReplacedEntry(
                    token=outcome.token.text,
                    url=outcome.url,
                    file=file,
                    rendered=outcome.rendered.value if outcome.rendered else RenderKind.URL.value,
                )
            )
            if outcome.empty_url:
                self.empty.append(
                    MissingEntry(token=outcome.token.text, reason=NO_USABLE_URL, file=file)
                )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, ensure_ascii=False, indent=2)
