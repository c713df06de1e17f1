"""Affiliate token grammars and scanning.

Two grammars are recognised in Markdown bodies:

    [AffiliateLink_SKU]                          bare: always a raw URL
    {{aff:SKU|as=card|text=Buy|country=DK}}      parametrized

Scanning is pure: it yields Token objects in document order and never
touches the text, so the same scanner serves the injector and the verifier.
Each grammar is matched on its own; a bare token inside a parametrized
token's options is reported as well.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from src.content_engine.field_resolver import normalize_sku

TOKEN_SKU_RE = re.compile(r"[A-Za-z0-9_\-]+")
BARE_TOKEN_RE = re.compile(r"\[AffiliateLink_([A-Za-z0-9_\-]+)\]")
PARAM_TOKEN_RE = re.compile(r"\{\{\s*aff\s*:\s*([A-Za-z0-9_\-]+)\s*(\|[^}]+)?\s*\}\}")


class TokenKind(str, Enum):
    BARE = "bare"
    PARAMETRIZED = "parametrized"


@dataclass(frozen=True)
class Token:
    """A placeholder found in a document body."""
    kind: TokenKind
    raw_sku: str
    text: str
    start: int
    end: int
    options: dict[str, str] = field(default_factory=dict)

    @property
    def sku(self) -> str:
        return normalize_sku(self.raw_sku)

    def option(self, name: str, default: str = "") -> str:
        return self.options.get(name, default)


def parse_options(chunk: str | None) -> dict[str, str]:
    """Parse ``|key=value|key=value`` segments.

    The first ``=`` splits key from value; segments without ``=`` are ignored.
    Later duplicates win.
    """
    options: dict[str, str] = {}
    if not chunk:
        return options
    for segment in chunk.split("|"):
        segment = segment.strip()
        if "=" not in segment:
            continue
        key, value = segment.split("=", 1)
        options[key.strip()] = value.strip()
    return options


def scan_tokens(text: str, kind: Optional[TokenKind] = None) -> Iterator[Token]:
    """Yield tokens in ``text`` ordered by position.

    With ``kind`` only that grammar is scanned; otherwise both are, and
    overlapping matches (a bare token nested in a parametrized one) are
    all yielded.
    """
    found: list[Token] = []
    if kind in (None, TokenKind.BARE):
        found.extend(
            Token(
                kind=TokenKind.BARE,
                raw_sku=m.group(1),
                text=m.group(0),
                start=m.start(),
                end=m.end(),
            )
            for m in BARE_TOKEN_RE.finditer(text)
        )
    if kind in (None, TokenKind.PARAMETRIZED):
        found.extend(
            Token(
                kind=TokenKind.PARAMETRIZED,
                raw_sku=m.group(1),
                text=m.group(0),
                start=m.start(),
                end=m.end(),
                options=parse_options(m.group(2)),
            )
            for m in PARAM_TOKEN_RE.finditer(text)
        )
    found.sort(key=lambda t: (t.start, -t.end))
    yield from found


def line_number(text: str, offset: int) -> int:
    """1-based line number of ``offset`` in ``text``."""
    return text.count("\n", 0, offset) + 1
