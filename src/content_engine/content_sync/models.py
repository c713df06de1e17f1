"""Data models for the content sync module."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class SkipReason(str, Enum):
    """Why a Posts row was not materialized (publish mode and shared checks)."""
    MISSING_TITLE = "missing title"
    NOT_PUBLISHED = "publish flag not set"
    SCHEDULED = "publish date in the future"


@dataclass(frozen=True)
class Inclusion:
    """Outcome of the inclusion filter for one row.

    In status mode a skipped row carries its normalized ``status``; otherwise
    it carries a ``reason``.
    """
    included: bool
    status: Optional[str] = None
    reason: Optional[SkipReason] = None
    published: Optional[datetime] = None
    draft: bool = False


@dataclass
class MaterializedPost:
    """A post ready to be written: target path, front matter and body."""
    path: Path
    slug: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    body: str = ""


# --- Manifest (JSON) ---


class WrittenEntry(BaseModel):
    file: str
    slug: str


class SkippedEntry(BaseModel):
    id: str
    status: Optional[str] = None
    reason: Optional[str] = None


class SyncManifest(BaseModel):
    """Record of one content sync run, written once at the end."""
    wrote: list[WrittenEntry] = Field(default_factory=list)
    skipped: list[SkippedEntry] = Field(default_factory=list)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(exclude_none=True), f, ensure_ascii=False, indent=2)
