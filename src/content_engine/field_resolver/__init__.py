# Field Resolver — relaxed column lookup and value coercion
"""
Field Resolver module for reading Airtable rows whose headers vary between
bases. All SKU comparisons go through normalize_sku.
"""

from .resolver import (
    as_list,
    first_attachment_url,
    get_field,
    get_first_of,
    is_truthy,
    normalize_sku,
    normalize_text,
    slugify,
)

__all__ = [
    "as_list",
    "first_attachment_url",
    "get_field",
    "get_first_of",
    "is_truthy",
    "normalize_sku",
    "normalize_text",
    "slugify",
]
