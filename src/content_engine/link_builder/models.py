"""Data models for the link builder module."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LinkContext:
    """Per-document values substituted into URL and subid templates.

    Computed once per document before any token is resolved.
    """
    post_slug: str
    date: str  # YYYY-MM-DD

    def render(self, template: str) -> str:
        """Substitute ``{{postSlug}}`` and ``{{date}}`` placeholders."""
        return template.replace("{{postSlug}}", self.post_slug).replace("{{date}}", self.date)


@dataclass(frozen=True)
class ResolvedUTM:
    """Tracking values after override > row > default precedence."""
    source: str = ""
    medium: str = ""
    campaign: str = ""
    country: str = ""


@dataclass(frozen=True)
class BuiltLink:
    """Result of building an outbound URL. An empty url means no link is possible."""
    url: str
    utm: ResolvedUTM


@dataclass(frozen=True)
class Product:
    """Display data for a product card."""
    sku: str
    name: str = ""
    image: str = ""
