"""Content Materializer — Airtable Posts rows to Markdown documents.

Each included row becomes ``<content_dir>/<type dir>/<slug>.md`` with YAML
front matter for the blog's content collection. When enabled, one affiliate
card token per linked SKU is appended to the body so the affiliate injector
can render product cards on the next stage.

Files for rows that are later excluded are never deleted.

Usage:
    manifest = run_sync(settings)
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.common.config import Settings
from src.common.documents import Document, write_document
from src.common.errors import ConfigurationError
from src.common.logging import setup_logging
from src.content_engine.affiliate_injector.tokens import TOKEN_SKU_RE
from src.content_engine.airtable_reader import AirtableClient, CellFormat, Row
from src.content_engine.field_resolver import (
    as_list,
    first_attachment_url,
    is_truthy,
    normalize_sku,
    normalize_text,
    slugify,
)

from .models import (
    Inclusion,
    MaterializedPost,
    SkippedEntry,
    SkipReason,
    SyncManifest,
    WrittenEntry,
)

logger = setup_logging(module_name="content_sync")

# Prefix of the lowercased post type -> subdirectory of the content root
TYPE_DIRECTORIES = (
    ("roundup", "roundups"),
    ("review", "reviews"),
    ("guide", "guides"),
)

AUTO_CARDS_MARKER = "<!-- Auto: affiliate cards from SKUs -->"

BOILERPLATE_BODY = "\n".join([
    "> (Auto-generated draft, update the introduction.)",
    "",
    "## Why trust us?",
    "- Experience, hands-on testing and objective assessment.",
    "",
    "## Our recommendations",
    "",
])

# Airtable string renderings of date fields (day first, da-DK and similar locales)
_DAY_FIRST_FORMATS = (
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y %H.%M",
    "%d.%m.%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
    "%d-%m-%Y %H:%M",
    "%d-%m-%Y",
)


def load_timezone(name: str) -> tzinfo:
    """ZoneInfo for ``AFF_TIMEZONE``; an unknown name is a configuration error."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown AFF_TIMEZONE {name!r}") from exc


def parse_publish_date(value: Any, default_tz: tzinfo) -> Optional[datetime]:
    """Parse an ISO-8601 or day-first date string to an aware datetime.

    Naive values are interpreted in ``default_tz``. Returns None for empty
    values and raises ValueError for text in no known format.
    """
    text = normalize_text(value)
    if not text:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _DAY_FIRST_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        raise ValueError(f"Unrecognised date {text!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with milliseconds and ``Z``, e.g. 2024-05-01T08:00:00.000Z."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def directory_for_type(value: Any) -> str:
    """Subdirectory for a post type by prefix; empty for the content root."""
    kind = normalize_text(value).lower()
    for prefix, directory in TYPE_DIRECTORIES:
        if kind.startswith(prefix):
            return directory
    return ""


class ContentMaterializer:
    """Turns Posts rows into Markdown documents under the content root."""

    def __init__(self, settings: Settings, now: Optional[datetime] = None):
        self.settings = settings
        self.fields = settings.post_fields
        self.rules = settings.publishing
        self.tz = load_timezone(settings.airtable.timezone)
        self.now = now or datetime.now(timezone.utc)

    # --- Inclusion ---

    def publish_date(self, row: Row) -> Optional[datetime]:
        if not self.fields.publish_at:
            return None
        raw = row.get(self.fields.publish_at)
        try:
            return parse_publish_date(raw, self.tz)
        except ValueError:
            logger.warning("Row %s: cannot parse publish date %r, treating as absent", row.id, raw)
            return None

    def inclusion(self, row: Row) -> Inclusion:
        """Apply the status allow-list, or the publish flag and date check."""
        published = self.publish_date(row)
        future = published is not None and published > self.now

        if self.fields.status:
            status = normalize_text(row.get(self.fields.status)).lower()
            if status not in self.rules.allowed_statuses:
                return Inclusion(included=False, status=status)
            return Inclusion(included=True, status=status, published=published, draft=future)

        if self.fields.publish_flag and not is_truthy(row.get(self.fields.publish_flag)):
            return Inclusion(included=False, reason=SkipReason.NOT_PUBLISHED)
        if future and self.rules.exclude_future:
            return Inclusion(included=False, reason=SkipReason.SCHEDULED, published=published)
        return Inclusion(included=True, published=published, draft=future)

    # --- Document parts ---

    def slug_for(self, row: Row) -> str:
        """Explicit slug, else derived from the title, else the record id."""
        slug = slugify(row.get(self.fields.slug)) or slugify(row.get(self.fields.title))
        return slug or slugify(row.id) or row.id

    def front_matter(self, row: Row, slug: str, inclusion: Inclusion) -> dict[str, Any]:
        fields = self.fields
        published = inclusion.published or self.now

        front_matter: dict[str, Any] = {
            "title": normalize_text(row.get(fields.title)),
            "description": normalize_text(row.first_of(fields.excerpt_candidates)),
            "pubDatetime": format_timestamp(published),
            "modDatetime": None,
            "draft": inclusion.draft,
            "tags": as_list(row.get(fields.tags)),
            "slug": slug,
        }
        optional = {
            "country": normalize_text(row.get(fields.country)),
            "lang": normalize_text(row.get(fields.language)),
            "category": normalize_text(row.get(fields.type)).lower(),
            "ogImage": first_attachment_url(row.get(fields.hero)) if fields.hero else "",
        }
        front_matter.update({key: value for key, value in optional.items() if value})
        return front_matter

    def linked_skus(self, row: Row) -> list[str]:
        """Distinct normalized SKUs from the linked-SKUs column, in order."""
        skus: list[str] = []
        for value in as_list(row.get(self.fields.skus)):
            sku = normalize_sku(value)
            if not TOKEN_SKU_RE.fullmatch(sku):
                logger.warning("Row %s: SKU %r cannot be written as a token, skipped", row.id, value)
                continue
            if sku not in skus:
                skus.append(sku)
        return skus

    def body(self, row: Row) -> str:
        """Explicit Markdown body (or boilerplate) plus auto-inserted card tokens."""
        content = normalize_text(row.first_of(self.fields.body_candidates)) or BOILERPLATE_BODY

        skus = self.linked_skus(row) if self.rules.auto_insert_tokens else []
        if not skus:
            return content

        country = normalize_text(row.get(self.fields.country))
        country_option = f"|country={country}" if country else ""
        lines = [content, "", AUTO_CARDS_MARKER, ""]
        for sku in skus:
            lines.append(f"{{{{aff:{sku}|as=card{country_option}|text={self.rules.card_text}}}}}")
            lines.append("")
        return "\n".join(lines)

    def materialize(self, row: Row, inclusion: Inclusion, content_dir: Path) -> MaterializedPost:
        slug = self.slug_for(row)
        directory = directory_for_type(row.get(self.fields.type))
        path = content_dir / directory / f"{slug}.md" if directory else content_dir / f"{slug}.md"
        return MaterializedPost(
            path=path,
            slug=slug,
            front_matter=self.front_matter(row, slug, inclusion),
            body=self.body(row),
        )

    # --- Run ---

    def run(self, rows: list[Row], content_dir: Optional[Path] = None) -> SyncManifest:
        """Write every included row, overwriting existing files."""
        root = content_dir or self.settings.paths.content_dir
        manifest = SyncManifest()
        written: set[Path] = set()

        for row in rows:
            inclusion = self.inclusion(row)
            if not inclusion.included:
                manifest.skipped.append(
                    SkippedEntry(
                        id=row.id,
                        status=inclusion.status,
                        reason=inclusion.reason.value if inclusion.reason else None,
                    )
                )
                logger.debug("Skipped %s (%s)", row.id, inclusion.status or inclusion.reason)
                continue

            if not normalize_text(row.get(self.fields.title)):
                manifest.skipped.append(
                    SkippedEntry(id=row.id, reason=SkipReason.MISSING_TITLE.value)
                )
                continue

            post = self.materialize(row, inclusion, root)
            if post.path in written:
                logger.warning("Slug %r written twice in one run, last row wins", post.slug)
            write_document(post.path, Document(front_matter=post.front_matter, body=post.body))
            written.add(post.path)
            manifest.wrote.append(WrittenEntry(file=str(post.path), slug=post.slug))

        return manifest


def run_sync(
    settings: Settings,
    client: Optional[AirtableClient] = None,
    now: Optional[datetime] = None,
) -> SyncManifest:
    """Fetch the Posts table, write Markdown files and the sync manifest.

    Raises:
        ConfigurationError: Credentials or posts table id missing
        RemoteFetchError: Airtable request failed (nothing is written)
    """
    settings.require_sync()
    materializer = ContentMaterializer(settings, now=now)
    tables = settings.tables

    if client is None:
        with AirtableClient.from_settings(settings) as owned:
            rows = owned.fetch_rows(
                tables.posts_table_id,
                view_id=tables.posts_view_id or None,
                cell_format=CellFormat.STRING,
            )
    else:
        rows = client.fetch_rows(
            tables.posts_table_id,
            view_id=tables.posts_view_id or None,
            cell_format=CellFormat.STRING,
        )

    manifest = materializer.run(rows)
    manifest.save(settings.paths.sync_manifest)
    logger.info(
        "Content sync finished. Wrote %d file(s), skipped %d.",
        len(manifest.wrote),
        len(manifest.skipped),
    )
    return manifest
