"""Relaxed column lookup and value coercion for Airtable rows.

Column headers in a shared base drift (trailing spaces, NBSP pasted from a
spreadsheet, different casing), so lookups fall back to a normalized key
comparison. SKU normalization is the join key between posts, affiliate rows
and products and must be used everywhere a SKU is compared or stored.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
# Attachments rendered with cellFormat=string: "photo.jpg (https://...)"
_RENDERED_ATTACHMENT_RE = re.compile(r"\((https?://[^)\s]+)\)")

TRUTHY_VALUES = {"true", "1", "yes", "y", "checked", "x", "on"}


def normalize_text(value: Any) -> str:
    """Coerce a cell value to a stripped string (lists are comma-joined)."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(normalize_text(v) for v in value if normalize_text(v))
    return str(value).strip()


def normalize_sku(value: Any) -> str:
    """Uppercase and replace whitespace runs with single underscores.

    >>> normalize_sku(" sku 123 ")
    'SKU_123'
    """
    return _WHITESPACE_RE.sub("_", normalize_text(value).upper())


def _normalize_key(name: Any) -> str:
    return _WHITESPACE_RE.sub(" ", str(name).replace("\u00a0", " ")).strip().casefold()


def get_field(row: Mapping[str, Any], name: str) -> Any:
    """Look up ``name`` exactly, then by case/whitespace-insensitive header.

    Returns None when no column matches.
    """
    if name in row:
        return row[name]
    wanted = _normalize_key(name)
    for key, value in row.items():
        if _normalize_key(key) == wanted:
            return value
    return None


def get_first_of(row: Mapping[str, Any], candidates: Iterable[str]) -> Any:
    """Return the first non-empty value among candidate column names."""
    for candidate in candidates:
        value = get_field(row, candidate)
        if normalize_text(value):
            return value
    return None


def as_list(value: Any) -> list[str]:
    """Multi-select/linked values as a list; comma-separated text is split."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [normalize_text(v) for v in value if normalize_text(v)]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def first_attachment_url(value: Any) -> str:
    """URL of the first attachment, or the value itself when it is a URL."""
    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        first = value[0]
        if isinstance(first, Mapping) and first.get("url"):
            return str(first["url"])
        if isinstance(first, str) and _URL_RE.match(first.strip()):
            return first.strip()
        return ""
    if isinstance(value, str):
        text = value.strip()
        if _URL_RE.match(text) and " " not in text:
            return text
        rendered = _RENDERED_ATTACHMENT_RE.search(text)
        if rendered:
            return rendered.group(1)
    return ""


def is_truthy(value: Any) -> bool:
    """Interpret checkbox cells (bool, or their string renderings)."""
    if isinstance(value, bool):
        return value
    return normalize_text(value).lower() in TRUTHY_VALUES


def slugify(value: Any) -> str:
    """Lowercase, strip accents, collapse non-alphanumeric runs to hyphens."""
    text = unicodedata.normalize("NFKD", normalize_text(value))
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).lower()
    return _NON_ALNUM_RE.sub("-", text).strip("-")
