"""Catalog protocols."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class CatalogItem:
    """Snapshot of an external catalog product.

    Prices are tax-exclusive. ``tax_rate_percent`` is a percentage
    (21 means 21%), 0 for untaxed items.
    """

    id: int
    name: str
    unit_price_excl_tax: Decimal
    currency: str
    tax_rate_percent: Decimal = Decimal("0")


@runtime_checkable
class CatalogBackend(Protocol):
    """Interface for the external product catalog."""

    def fetch_product(self, id: int) -> CatalogItem:
        """Return catalog item by id. Raises CatalogError("NOT_FOUND")."""
        ...

    def fetch_all_products(self, filter: str | None = None) -> list[CatalogItem]:
        """Return catalog items, optionally filtered by a search term."""
        ...

    def create_product(self, spec: dict) -> CatalogItem:
        """Create a catalog item (admin path only)."""
        ...
