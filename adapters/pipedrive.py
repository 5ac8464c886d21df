"""
Pipedrive CatalogBackend.

Reads products from the Pipedrive product catalog (REST API v1).

Usage in settings.py:
    QUOTEMAN = {
        "CATALOG_BACKEND": "quoteman.adapters.pipedrive.PipedriveCatalogBackend",
        "PIPEDRIVE_API_TOKEN": "...",
        "PIPEDRIVE_COMPANY_DOMAIN": "saunamo",
    }

Pipedrive product payloads are mapped once, in to_catalog_item(), with a
fixed set of keys: ``id``, ``name``, ``prices[].price``,
``prices[].currency`` and ``tax`` (percent).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import requests

from quoteman.exceptions import CatalogError
from quoteman.protocols import CatalogBackend, CatalogItem

logger = logging.getLogger(__name__)

PAGE_SIZE = 500


def _decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def to_catalog_item(product: dict, currency: str | None = None) -> CatalogItem:
    """
    Map a Pipedrive product payload to a CatalogItem.

    The price entry in ``currency`` is used when present, otherwise the
    first price entry.

    Raises:
        CatalogError: INVALID_CATALOG_ITEM when id, name or price is unusable.
    """
    product_id = product.get("id")
    name = product.get("name") or ""
    prices = product.get("prices") or []

    entry = None
    if currency:
        entry = next(
            (p for p in prices if (p.get("currency") or "").upper() == currency.upper()),
            None,
        )
    if entry is None and prices:
        entry = prices[0]

    price = _decimal(entry.get("price")) if entry else None
    entry_currency = (entry.get("currency") or "").upper() if entry else ""
    tax = _decimal(product.get("tax"))
    if tax is None:
        tax = Decimal("0")

    if product_id is None or not name or price is None or not entry_currency:
        raise CatalogError("INVALID_CATALOG_ITEM", catalog_item_id=product_id, name=name)
    if price < 0 or tax < 0:
        raise CatalogError("INVALID_CATALOG_ITEM", catalog_item_id=product_id, name=name)

    return CatalogItem(
        id=int(product_id),
        name=name,
        unit_price_excl_tax=price,
        currency=entry_currency,
        tax_rate_percent=tax,
    )


class PipedriveCatalogBackend:
    """CatalogBackend over the Pipedrive products API."""

    def __init__(
        self,
        api_token: str | None = None,
        company_domain: str | None = None,
        currency: str | None = None,
        timeout: int | None = None,
    ):
        from quoteman.conf import quoteman_settings

        self.api_token = api_token or quoteman_settings.PIPEDRIVE_API_TOKEN
        self.company_domain = company_domain or quoteman_settings.PIPEDRIVE_COMPANY_DOMAIN
        self.currency = currency or quoteman_settings.DEFAULT_CURRENCY
        self.timeout = timeout or quoteman_settings.PIPEDRIVE_TIMEOUT
        self.base_url = f"https://{self.company_domain}.pipedrive.com/api/v1"

        if not self.api_token:
            logger.warning("Pipedrive API token not configured; catalog requests will fail")

    def _request(self, method: str, endpoint: str, params: dict | None = None, json: dict | None = None) -> dict:
        if not self.api_token:
            raise CatalogError("CATALOG_UNAVAILABLE", message="PIPEDRIVE_API_TOKEN is not configured")

        query = {"api_token": self.api_token, **(params or {})}
        try:
            response = requests.request(
                method=method,
                url=f"{self.base_url}{endpoint}",
                params=query,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Pipedrive request %s %s failed: %s", method, endpoint, e)
            raise CatalogError("CATALOG_UNAVAILABLE", endpoint=endpoint) from e

        if response.status_code == 404:
            raise CatalogError("NOT_FOUND", endpoint=endpoint)
        if response.status_code not in (200, 201):
            logger.error("Pipedrive API error: %s - %s", response.status_code, response.text)
            raise CatalogError("CATALOG_UNAVAILABLE", endpoint=endpoint, status=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Pipedrive returned a non-JSON body for %s %s", method, endpoint)
            raise CatalogError("CATALOG_UNAVAILABLE", endpoint=endpoint) from e
        if body.get("success") is False:
            logger.error("Pipedrive API error: %s", body.get("error"))
            raise CatalogError("CATALOG_UNAVAILABLE", endpoint=endpoint, error=body.get("error"))
        return body

    def fetch_product(self, id: int) -> CatalogItem:
        """Return catalog item by Pipedrive product id."""
        body = self._request("GET", f"/products/{int(id)}")
        data = body.get("data")
        if not data:
            raise CatalogError("NOT_FOUND", catalog_item_id=id)
        return to_catalog_item(data, self.currency)

    def fetch_all_products(self, filter: str | None = None) -> list[CatalogItem]:
        """Page through all products; ``filter`` matches name or code."""
        items: list[CatalogItem] = []
        start = 0
        term = (filter or "").lower()
        while True:
            body = self._request("GET", "/products", params={"start": start, "limit": PAGE_SIZE})
            for product in body.get("data") or []:
                if term and term not in (product.get("name") or "").lower() and term not in (
                    product.get("code") or ""
                ).lower():
                    continue
                try:
                    items.append(to_catalog_item(product, self.currency))
                except CatalogError:
                    logger.warning("Skipping Pipedrive product %s without usable price", product.get("id"))

            pagination = (body.get("additional_data") or {}).get("pagination") or {}
            if not pagination.get("more_items_in_collection"):
                break
            start = pagination.get("next_start", start + PAGE_SIZE)
        return items

    def create_product(self, spec: dict) -> CatalogItem:
        """Create a Pipedrive product from {"name", "unit_price_excl_tax", "currency"?, "tax_rate_percent"?, "code"?}."""
        price = _decimal(spec.get("unit_price_excl_tax"))
        if not spec.get("name") or price is None:
            raise CatalogError("INVALID_CATALOG_ITEM", name=spec.get("name"))
        payload = {
            "name": spec["name"],
            "code": spec.get("code", ""),
            "tax": float(_decimal(spec.get("tax_rate_percent")) or 0),
            "prices": [
                {
                    "price": float(price),
                    "currency": (spec.get("currency") or self.currency).upper(),
                }
            ],
        }
        body = self._request("POST", "/products", json=payload)
        return to_catalog_item(body.get("data") or {}, self.currency)


# Verify implementation at import time
if not isinstance(PipedriveCatalogBackend(api_token="-", company_domain="-", currency="GBP", timeout=1), CatalogBackend):
    raise TypeError("PipedriveCatalogBackend does not implement CatalogBackend protocol")
