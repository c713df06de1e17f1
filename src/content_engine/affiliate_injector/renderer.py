"""
Token Renderer for affiliate placeholders.
Renders Markdown links and the HTML button/card snippets (Jinja2 templates).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from src.common.config import StyleDefaults
from src.common.logging import setup_logging
from src.content_engine.link_builder import BuiltLink, Product

from .tokens import Token

logger = setup_logging(module_name="token_renderer")

NO_IMAGE_MODIFIER = "aff-card--noimg"


class TokenRenderer:
    """
    Renders resolved tokens. Token options override the configured styles.

    Usage:
        renderer = TokenRenderer(settings.styles)
        html = renderer.button(token, link, post_slug="best-tents")
    """

    def __init__(self, styles: StyleDefaults, templates_dir: Optional[Path] = None):
        """
        Initialize the token renderer.

        Args:
            styles: Default texts and CSS classes.
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.styles = styles
        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=True,
        )

    def markdown_link(self, token: Token, link: BuiltLink) -> str:
        text = token.option("text") or self.styles.link_text
        return f"[{text}]({link.url})"

    def button(self, token: Token, link: BuiltLink, post_slug: str) -> str:
        """Render an anchor-style button with tracking data attributes."""
        context = self._cta_context(token, link, post_slug)
        context["css_class"] = token.option("class") or self.styles.button_class
        return self.env.get_template("button.jinja2").render(**context)

    def card(
        self,
        token: Token,
        link: BuiltLink,
        post_slug: str,
        product: Optional[Product] = None,
    ) -> str:
        """
        Render a product card: optional image, optional title, CTA anchor.

        The title comes from the ``title`` option or the product name and is
        left out entirely (never replaced by the SKU) when ``notitle=true``
        or no name is known.
        """
        styles = self.styles
        product = product or Product(sku=token.sku)

        if "title" in token.options:
            title = token.option("title")
        else:
            title = product.name
        show_title = bool(title) and token.option("notitle").lower() != "true"

        image_url = token.option("image") or product.image
        card_class = token.option("cardClass") or styles.card_class
        container_class = card_class if image_url else f"{card_class} {NO_IMAGE_MODIFIER}"

        context = self._cta_context(token, link, post_slug)
        context.update(
            css_class=token.option("ctaClass") or styles.card_cta_class,
            container_class=container_class,
            image_url=image_url,
            img_class=token.option("imgClass") or styles.card_img_class,
            img_width=self._image_width(token),
            alt=title or token.sku,
            body_class=token.option("bodyClass") or styles.card_body_class,
            title_class=token.option("titleClass") or styles.card_title_class,
            title=title,
            show_title=show_title,
        )
        return self.env.get_template("card.jinja2").render(**context)

    def _cta_context(self, token: Token, link: BuiltLink, post_slug: str) -> dict:
        return {
            "url": link.url,
            "utm": link.utm,
            "sku": token.sku,
            "post_slug": post_slug,
            "text": token.option("text") or self.styles.button_text,
            "target": token.option("target") or self.styles.button_target,
            "rel": token.option("rel") or self.styles.button_rel,
        }

    def _image_width(self, token: Token) -> str:
        width = (token.option("imgWidth") or self.styles.card_img_width).strip()
        if width and not width.isdigit():
            logger.warning("Ignoring non-numeric image width %r for %s", width, token.text)
            return ""
        return width
