"""CatalogBackend implementation backed by the local CatalogEntry table."""

from decimal import Decimal, InvalidOperation

from quoteman.exceptions import CatalogError
from quoteman.protocols import CatalogBackend, CatalogItem


class LocalCatalogBackend:
    """
    CatalogBackend implementation using Quoteman's CatalogEntry model.

    Default backend: prices are maintained in the Django admin.
    """

    def fetch_product(self, id: int) -> CatalogItem:
        """Return catalog item by id."""
        from quoteman.models import CatalogEntry

        entry = CatalogEntry.objects.active().filter(pk=id).first()
        if entry is None:
            raise CatalogError("NOT_FOUND", catalog_item_id=id)
        return entry.to_catalog_item()

    def fetch_all_products(self, filter: str | None = None) -> list[CatalogItem]:
        """Return active items, optionally matching name, code or keyword."""
        from quoteman.models import CatalogEntry

        qs = CatalogEntry.objects.active()
        if filter:
            qs = qs.search(filter)
        return [entry.to_catalog_item() for entry in qs.order_by("pk")]

    def create_product(self, spec: dict) -> CatalogItem:
        """
        Create a catalog entry.

        Args:
            spec: {"name", "unit_price_excl_tax", "currency"?, "tax_rate_percent"?,
                   "code"?, "keywords"?, "id"?}

        Raises:
            CatalogError: INVALID_CATALOG_ITEM if name or price is missing/invalid.
        """
        from quoteman.models import CatalogEntry

        name = (spec.get("name") or "").strip()
        try:
            price = Decimal(str(spec["unit_price_excl_tax"]))
            tax_rate = Decimal(str(spec.get("tax_rate_percent", "0")))
        except (KeyError, InvalidOperation) as e:
            raise CatalogError("INVALID_CATALOG_ITEM", name=name) from e
        if not name or price < 0 or tax_rate < 0:
            raise CatalogError("INVALID_CATALOG_ITEM", name=name)

        entry = CatalogEntry.objects.create(
            pk=spec.get("id"),
            name=name,
            code=spec.get("code", ""),
            unit_price_excl_tax=price,
            currency=spec.get("currency", "GBP").upper(),
            tax_rate_percent=tax_rate,
        )
        if spec.get("keywords"):
            entry.keywords.add(*spec["keywords"])
        return entry.to_catalog_item()


# Verify implementation at import time
if not isinstance(LocalCatalogBackend(), CatalogBackend):
    raise TypeError("LocalCatalogBackend does not implement CatalogBackend protocol")
