"""Link Builder — tracked outbound URLs for affiliate rows.

A row either carries a full URL template (used verbatim after placeholder
substitution) or a base URL to which UTM and subid parameters are appended
in a fixed order: utm_source, utm_medium, utm_campaign, subid.

Usage:
    builder = LinkBuilder(settings.affiliate_fields, settings.utm)
    link = builder.build(row, LinkContext("best-tents", "2025-05-01"))
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode

from src.common.config import AffiliateFields, UTMDefaults
from src.content_engine.airtable_reader import Row
from src.content_engine.field_resolver import normalize_text

from .models import BuiltLink, LinkContext, ResolvedUTM


class LinkBuilder:
    """Builds the final URL for a resolved affiliate row."""

    def __init__(self, fields: AffiliateFields, defaults: UTMDefaults):
        self.fields = fields
        self.defaults = defaults

    def resolve_utm(
        self,
        row: Row,
        overrides: Mapping[str, str] | None = None,
    ) -> ResolvedUTM:
        """Resolve UTM values: token override > row field > default > empty."""
        overrides = overrides or {}

        def pick(option: str, column: str, default: str) -> str:
            return (
                normalize_text(overrides.get(option))
                or normalize_text(row.get(column))
                or default
            )

        return ResolvedUTM(
            source=pick("source", self.fields.utm_source, self.defaults.source),
            medium=pick("medium", self.fields.utm_medium, self.defaults.medium),
            campaign=pick("campaign", self.fields.utm_campaign, self.defaults.campaign),
            country=pick("country", self.fields.country, self.defaults.country),
        )

    def build(
        self,
        row: Row,
        context: LinkContext,
        overrides: Mapping[str, str] | None = None,
    ) -> BuiltLink:
        """Build the outbound URL for ``row`` in the given document context.

        Args:
            row: Affiliate Links row
            context: Post slug and date for template placeholders
            overrides: Token options (source/medium/campaign/country)

        Returns:
            BuiltLink; url is empty when the row has neither a full URL
            template nor a base URL
        """
        utm = self.resolve_utm(row, overrides)

        full = normalize_text(row.get(self.fields.full_url))
        if full:
            return BuiltLink(url=context.render(full), utm=utm)

        base = normalize_text(row.get(self.fields.url_base))
        if not base:
            return BuiltLink(url="", utm=utm)

        subid_template = normalize_text(row.get(self.fields.subid_template))
        subid = context.render(subid_template) if subid_template else ""

        params = [
            ("utm_source", utm.source),
            ("utm_medium", utm.medium),
            ("utm_campaign", utm.campaign),
            ("subid", subid),
        ]
        query = urlencode([(k, v) for k, v in params if v])
        if not query:
            return BuiltLink(url=base, utm=utm)

        separator = "&" if "?" in base else "?"
        return BuiltLink(url=f"{base}{separator}{query}", utm=utm)
