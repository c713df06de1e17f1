"""In-memory lookups over fetched Affiliate Links and Products rows."""

from __future__ import annotations

from collections.abc import Iterable

from src.common.config import AffiliateFields, ProductFields
from src.common.logging import setup_logging
from src.content_engine.airtable_reader import Row
from src.content_engine.field_resolver import (
    first_attachment_url,
    normalize_sku,
    normalize_text,
)

from .models import Product

logger = setup_logging(module_name="link_builder")


class AffiliateCatalog:
    """Affiliate rows grouped by normalized SKU, in fetch order.

    Several rows may share a SKU, one per country; a row without a country
    is the fallback for that SKU.
    """

    def __init__(self, rows: Iterable[Row], fields: AffiliateFields):
        self.fields = fields
        self._by_sku: dict[str, list[Row]] = {}
        self._row_count = 0
        for row in rows:
            self._row_count += 1
            sku = normalize_sku(row.get(fields.sku))
            if not sku:
                logger.debug("Affiliate row %s has no SKU, ignored", row.id)
                continue
            self._by_sku.setdefault(sku, []).append(row)

    def __len__(self) -> int:
        return self._row_count

    def __contains__(self, sku: str) -> bool:
        return normalize_sku(sku) in self._by_sku

    @property
    def skus(self) -> list[str]:
        return list(self._by_sku)

    def select(self, sku: str, country: str | None = None) -> Row | None:
        """Pick the row for ``sku``.

        Without a country the first fetched row wins. With a country, an exact
        (case-insensitive) country match is preferred, falling back to the
        first row for the SKU.
        """
        candidates = self._by_sku.get(normalize_sku(sku))
        if not candidates:
            return None
        wanted = normalize_text(country).upper()
        if wanted:
            for row in candidates:
                if normalize_text(row.get(self.fields.country)).upper() == wanted:
                    return row
        return candidates[0]


class ProductCatalog:
    """SKU → Product (name, image) built from the optional Products table."""

    def __init__(self, rows: Iterable[Row] = (), fields: ProductFields | None = None):
        self.fields = fields or ProductFields()
        self._products: dict[str, Product] = {}
        for row in rows:
            sku = normalize_sku(row.first_of(self.fields.sku_candidates))
            if not sku:
                continue
            self._products[sku] = Product(
                sku=sku,
                name=normalize_text(row.first_of(self.fields.name_candidates)),
                image=first_attachment_url(row.first_of(self.fields.image_candidates)),
            )

    def __len__(self) -> int:
        return len(self._products)

    @property
    def skus(self) -> list[str]:
        return list(self._products)

    def get(self, sku: str) -> Product | None:
        return self._products.get(normalize_sku(sku))
