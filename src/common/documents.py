"""Markdown documents with YAML front matter.

Parsing keeps the original front matter block verbatim so that rewriting a
body never reformats the metadata written by the content sync.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ContentError

MARKDOWN_SUFFIXES = (".md", ".mdx", ".markdown")

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dataclass(frozen=True)
class Document:
    """A content file split into front matter and body."""
    front_matter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    raw_front_matter: str = ""

    def with_body(self, body: str) -> Document:
        return replace(self, body=body)

    def dumps(self) -> str:
        """Serialize back to text, reusing the original front matter block."""
        if self.raw_front_matter:
            return self.raw_front_matter + self.body
        if self.front_matter:
            return dump_document(self.front_matter, self.body)
        return self.body


def parse_document(text: str) -> Document:
    """Split ``text`` into front matter and body.

    Text without a leading ``---`` block is all body.
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return Document(body=text)
    data = yaml.safe_load(match.group("yaml")) or {}
    if not isinstance(data, dict):
        data = {}
    return Document(
        front_matter=data,
        body=text[match.end():],
        raw_front_matter=match.group(0),
    )


def dump_document(front_matter: dict[str, Any], body: str) -> str:
    """Render front matter and body as a Markdown document."""
    meta = yaml.safe_dump(
        front_matter,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    if body and not body.endswith("\n"):
        body += "\n"
    return f"---\n{meta}---\n{body}"


def read_document(path: Path) -> Document:
    """Read and parse ``path``; broken front matter raises ContentError naming the file."""
    try:
        return parse_document(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ContentError(str(path), f"invalid front matter ({exc})") from exc


def write_document(path: Path, document: Document) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document.dumps(), encoding="utf-8")


def iter_markdown_files(root: Path) -> Iterator[Path]:
    """Yield Markdown files under ``root`` in a stable (sorted) order."""
    if not root.exists():
        return
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in MARKDOWN_SUFFIXES:
            yield path
