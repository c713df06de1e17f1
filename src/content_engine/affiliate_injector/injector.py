"""Affiliate Injector — replace affiliate tokens in Markdown posts.

Tokens supported:
    [AffiliateLink_SKU]                          -> plain URL
    {{aff:SKU|as=link|text=...|country=DK}}      -> Markdown link
    {{aff:SKU|as=button|text=...}}               -> HTML <a> button
    {{aff:SKU|as=card|text=...}}                 -> product card (image + optional title + CTA)

Each document body is folded twice: bare tokens first, then parametrized
tokens on the result. Every fold yields the rewritten body and a list of
outcomes. Outcomes feed the manifest; unknown SKUs leave the token text untouched.

Usage:
    manifest = run_injection(settings)
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from src.common.config import Settings
from src.common.documents import Document, iter_markdown_files, read_document, write_document
from src.common.logging import setup_logging
from src.content_engine.airtable_reader import AirtableClient, CellFormat
from src.content_engine.field_resolver import normalize_text
from src.content_engine.link_builder import (
    AffiliateCatalog,
    LinkBuilder,
    LinkContext,
    ProductCatalog,
)

from .models import SKU_NOT_FOUND, InjectionManifest, RenderKind, TokenOutcome
from .renderer import TokenRenderer
from .tokens import Token, TokenKind, scan_tokens

logger = setup_logging(module_name="affiliate_injector")

_RENDER_KINDS = {
    "link": RenderKind.MARKDOWN_LINK,
    "button": RenderKind.HTML_BUTTON,
    "card": RenderKind.HTML_CARD,
}


class AffiliateInjector:
    """Resolves affiliate tokens against fetched Airtable rows.

    Resolution is deterministic for a given token, row set and document
    context; the only time-dependent input is the fallback date for
    documents without ``pubDatetime``.
    """

    def __init__(
        self,
        settings: Settings,
        affiliates: AffiliateCatalog,
        products: Optional[ProductCatalog] = None,
        renderer: Optional[TokenRenderer] = None,
        now: Optional[datetime] = None,
    ):
        self.settings = settings
        self.affiliates = affiliates
        self.products = products or ProductCatalog()
        self.renderer = renderer or TokenRenderer(settings.styles)
        self.link_builder = LinkBuilder(settings.affiliate_fields, settings.utm)
        self.now = now or datetime.now(timezone.utc)

    # --- Per-document context ---

    def document_context(self, path: Path, document: Document) -> LinkContext:
        """Post slug (front matter, else file stem) and publish date."""
        slug = normalize_text(document.front_matter.get("slug")) or path.stem
        published = _coerce_date(document.front_matter.get("pubDatetime"))
        if published is None:
            published = self.now.date()
        return LinkContext(post_slug=slug, date=published.isoformat())

    # --- Token resolution ---

    def resolve(self, token: Token, context: LinkContext) -> TokenOutcome:
        """Resolve one token to its replacement text (pure)."""
        country = token.option("country") or None
        if token.kind is TokenKind.BARE:
            row = self.affiliates.select(token.sku)
        else:
            row = self.affiliates.select(token.sku, country)

        if row is None:
            return TokenOutcome(
                token=token, replacement=token.text, resolved=False, reason=SKU_NOT_FOUND
            )

        if token.kind is TokenKind.BARE:
            link = self.link_builder.build(row, context)
            return TokenOutcome(
                token=token, replacement=link.url, resolved=True,
                url=link.url, rendered=RenderKind.URL,
            )

        link = self.link_builder.build(row, context, token.options)
        kind = _RENDER_KINDS.get(token.option("as").lower(), RenderKind.URL)

        if kind is RenderKind.MARKDOWN_LINK:
            replacement = self.renderer.markdown_link(token, link)
        elif kind is RenderKind.HTML_BUTTON:
            replacement = self.renderer.button(token, link, context.post_slug)
        elif kind is RenderKind.HTML_CARD:
            replacement = self.renderer.card(
                token, link, context.post_slug, self.products.get(token.sku)
            )
        else:
            replacement = link.url

        return TokenOutcome(
            token=token, replacement=replacement, resolved=True,
            url=link.url, rendered=kind,
        )

    def rewrite_body(
        self, body: str, context: LinkContext
    ) -> tuple[str, list[TokenOutcome]]:
        """Rewrite bare tokens across the body, then parametrized tokens.

        Bare tokens go first so one nested in a parametrized token's options
        (e.g. ``text=[AffiliateLink_X]``) is resolved before that token renders.
        """
        body, outcomes = self._fold(body, context, TokenKind.BARE)
        body, parametrized = self._fold(body, context, TokenKind.PARAMETRIZED)
        return body, outcomes + parametrized

    def _fold(
        self, body: str, context: LinkContext, kind: TokenKind
    ) -> tuple[str, list[TokenOutcome]]:
        pieces: list[str] = []
        outcomes: list[TokenOutcome] = []
        cursor = 0
        for token in scan_tokens(body, kind):
            outcome = self.resolve(token, context)
            pieces.append(body[cursor:token.start])
            pieces.append(outcome.replacement)
            cursor = token.end
            outcomes.append(outcome)
        pieces.append(body[cursor:])
        return "".join(pieces), outcomes

    # --- Files ---

    def process_file(self, path: Path, manifest: InjectionManifest) -> bool:
        """Rewrite one document in place. Returns True if it was written.

        Files where no token resolved are left untouched on disk.
        """
        document = read_document(path)
        context = self.document_context(path, document)
        new_body, outcomes = self.rewrite_body(document.body, context)
        changed = any(o.resolved for o in outcomes)

        if changed:
            write_document(path, document.with_body(new_body))
        manifest.record(str(path), outcomes, changed)

        for outcome in outcomes:
            if not outcome.resolved:
                logger.warning("%s: %s (%s)", path, outcome.token.text, outcome.reason)
            elif outcome.empty_url:
                logger.warning("%s: %s resolved to an empty URL", path, outcome.token.text)
        return changed

    def run(self, content_dir: Optional[Path] = None) -> InjectionManifest:
        """Process every Markdown file under the content root."""
        root = content_dir or self.settings.paths.content_dir
        manifest = InjectionManifest()
        for path in iter_markdown_files(root):
            self.process_file(path, manifest)
        return manifest


def load_catalogs(
    settings: Settings, client: AirtableClient
) -> tuple[AffiliateCatalog, ProductCatalog]:
    """Fetch Affiliate Links (string cells) and, if configured, Products (raw cells)."""
    tables = settings.tables
    affiliate_rows = client.fetch_rows(
        tables.affiliates_table_id,
        view_id=tables.affiliates_view_id or None,
        cell_format=CellFormat.STRING,
    )
    affiliates = AffiliateCatalog(affiliate_rows, settings.affiliate_fields)

    products = ProductCatalog(fields=settings.product_fields)
    if tables.products_table_id:
        product_rows = client.fetch_rows(
            tables.products_table_id,
            view_id=tables.products_view_id or None,
            cell_format=CellFormat.RAW,
        )
        products = ProductCatalog(product_rows, settings.product_fields)
        if product_rows:
            logger.debug("First product row keys: %s", list(product_rows[0].fields))

    logger.debug("Fetched affiliate rows: %d", len(affiliates))
    logger.debug("Detected SKUs: %s", affiliates.skus)
    logger.debug("Products in catalog: %d (first 10: %s)", len(products), products.skus[:10])
    debug_sku = settings.runtime.debug_sku
    if debug_sku:
        logger.debug(
            "Lookup %r: affiliate=%s product=%s",
            debug_sku,
            debug_sku in affiliates,
            products.get(debug_sku),
        )
    return affiliates, products


def run_injection(
    settings: Settings,
    client: Optional[AirtableClient] = None,
    now: Optional[datetime] = None,
) -> InjectionManifest:
    """Fetch rows, inject every document and write the manifest.

    Raises:
        ConfigurationError: Credentials or affiliate table id missing
        RemoteFetchError: Airtable request failed (nothing is written)
    """
    settings.require_injection()
    if client is None:
        with AirtableClient.from_settings(settings) as owned:
            affiliates, products = load_catalogs(settings, owned)
    else:
        affiliates, products = load_catalogs(settings, client)

    injector = AffiliateInjector(settings, affiliates, products, now=now)
    manifest = injector.run()
    manifest.save(settings.paths.injection_manifest)

    logger.info(
        "Affiliate injection finished. Updated %d/%d files.",
        manifest.changed_count,
        len(manifest.files),
    )
    if manifest.missing:
        logger.warning("Missing: %d unresolved token(s)", len(manifest.missing))
    return manifest


def _coerce_date(value: object) -> Optional[date]:
    """Publish date from a front matter value (datetime, date or ISO text), in UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable pubDatetime %r, using run date", text)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()
