# Link Builder — affiliate row selection and tracked URLs
"""
Link Builder module: picks the affiliate row for a SKU (country-aware) and
builds outbound URLs with UTM and subid parameters.
"""

from .builder import LinkBuilder
from .catalog import AffiliateCatalog, ProductCatalog
from .models import BuiltLink, LinkContext, Product, ResolvedUTM

__all__ = [
    "LinkBuilder",
    "AffiliateCatalog",
    "ProductCatalog",
    "BuiltLink",
    "LinkContext",
    "Product",
    "ResolvedUTM",
]
