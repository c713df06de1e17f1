"""Data models for the Airtable reader module."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.content_engine.field_resolver import get_field, get_first_of


class CellFormat(str, Enum):
    """How Airtable renders cell values."""
    STRING = "string"  # linked records/lookups arrive as display text
    RAW = "raw"  # attachments keep their structure (no cellFormat parameter)


@dataclass(frozen=True)
class Row:
    """A fetched Airtable record: remote id plus column → value mapping."""
    id: str
    fields: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Any:
        """Relaxed column lookup (see field_resolver.get_field)."""
        return get_field(self.fields, name)

    def first_of(self, candidates: Iterable[str]) -> Any:
        """First non-empty value among candidate column names."""
        return get_first_of(self.fields, candidates)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Row:
        return cls(id=str(record.get("id", "")), fields=dict(record.get("fields") or {}))
