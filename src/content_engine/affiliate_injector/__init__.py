# Affiliate Injector — token replacement in Markdown posts
"""
Affiliate Injector module: replaces [AffiliateLink_SKU] and {{aff:SKU|...}}
tokens with tracked URLs, Markdown links, HTML buttons or product cards,
and records every replacement and miss in a JSON manifest.
"""

from .injector import AffiliateInjector, load_catalogs, run_injection
from .models import InjectionManifest, RenderKind, TokenOutcome
from .renderer import TokenRenderer
from .tokens import TOKEN_SKU_RE, Token, TokenKind, line_number, parse_options, scan_tokens

__all__ = [
    "AffiliateInjector",
    "load_catalogs",
    "run_injection",
    "InjectionManifest",
    "RenderKind",
    "TokenOutcome",
    "TokenRenderer",
    "TOKEN_SKU_RE",
    "Token",
    "TokenKind",
    "line_number",
    "parse_options",
    "scan_tokens",
]
