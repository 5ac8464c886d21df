"""
In-memory backends.

Dictionary-backed implementations of the catalog and store protocols,
for tests and for embedding the pricing core without a database.

Usage:
    from quoteman.conf import set_backend
    from quoteman.adapters.memory import InMemoryQuoteStore

    set_backend("QUOTE_STORE", InMemoryQuoteStore())
"""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal

from quoteman.configuration import ProductConfiguration
from quoteman.exceptions import CatalogError
from quoteman.protocols import CatalogBackend, CatalogItem, ConfigurationStore, QuoteStore
from quoteman.quotes import Quote, QuoteStatus


class InMemoryCatalogBackend:
    """CatalogBackend over a dict of CatalogItem keyed by id."""

    def __init__(self, items: list[CatalogItem] | None = None):
        self._items = {item.id: item for item in items or []}
        self._lock = threading.Lock()

    def fetch_product(self, id: int) -> CatalogItem:
        item = self._items.get(id)
        if item is None:
            raise CatalogError("NOT_FOUND", catalog_item_id=id)
        return item

    def fetch_all_products(self, filter: str | None = None) -> list[CatalogItem]:
        items = sorted(self._items.values(), key=lambda item: item.id)
        if filter:
            items = [item for item in items if filter.lower() in item.name.lower()]
        return items

    def create_product(self, spec: dict) -> CatalogItem:
        with self._lock:
            item_id = spec.get("id") or max(self._items, default=0) + 1
            item = CatalogItem(
                id=item_id,
                name=spec["name"],
                unit_price_excl_tax=Decimal(str(spec["unit_price_excl_tax"])),
                currency=spec.get("currency", "GBP").upper(),
                tax_rate_percent=Decimal(str(spec.get("tax_rate_percent", "0"))),
            )
            self._items[item.id] = item
        return item


class InMemoryQuoteStore:
    """QuoteStore over a dict. Quotes are immutable, so a put is atomic."""

    def __init__(self):
        self._quotes: dict[str, Quote] = {}
        self._lock = threading.Lock()

    def get(self, id: str) -> Quote | None:
        return self._quotes.get(id)

    def put(self, quote: Quote) -> None:
        with self._lock:
            self._quotes[quote.id] = quote

    def all(self) -> list[Quote]:
        return list(self._quotes.values())

    def overdue(self, now: datetime) -> list[Quote]:
        return [
            quote
            for quote in self._quotes.values()
            if quote.status == QuoteStatus.SENT and quote.valid_until < now
        ]


class InMemoryConfigurationStore:
    """ConfigurationStore over a dict."""

    def __init__(self, configs: list[ProductConfiguration] | None = None):
        self._configs = {config.product_id: config for config in configs or []}
        self._lock = threading.Lock()

    def get(self, product_id: str) -> ProductConfiguration | None:
        return self._configs.get(product_id)

    def put(self, config: ProductConfiguration) -> None:
        with self._lock:
            self._configs[config.product_id] = config


# Verify protocol compliance at import time.
if not isinstance(InMemoryCatalogBackend(), CatalogBackend):
    raise TypeError("InMemoryCatalogBackend does not implement CatalogBackend protocol")
if not isinstance(InMemoryQuoteStore(), QuoteStore):
    raise TypeError("InMemoryQuoteStore does not implement QuoteStore protocol")
if not isinstance(InMemoryConfigurationStore(), ConfigurationStore):
    raise TypeError("InMemoryConfigurationStore does not implement ConfigurationStore protocol")
