"""
Store protocols.

The pricing core never touches storage directly. Apps that own
persistence implement these two interfaces; Quoteman ships Django
and in-memory implementations in ``quoteman.adapters``.

Usage in settings.py:
    QUOTEMAN = {
        "QUOTE_STORE": "quoteman.adapters.stores.DjangoQuoteStore",
        "CONFIGURATION_STORE": "quoteman.adapters.stores.DjangoConfigurationStore",
    }
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from quoteman.configuration import ProductConfiguration
    from quoteman.quotes import Quote


@runtime_checkable
class QuoteStore(Protocol):
    """Durable key-value persistence for quotes, plus the overdue listing."""

    def get(self, id: str) -> "Quote | None":
        """Return the quote or None if absent."""
        ...

    def put(self, quote: "Quote") -> None:
        """
        Persist a quote atomically.

        Raises:
            StoreError: On I/O failure. Nothing is written in that case.
        """
        ...

    def overdue(self, now: "datetime") -> "list[Quote]":
        """Return sent quotes whose valid_until is before ``now``."""
        ...


@runtime_checkable
class ConfigurationStore(Protocol):
    """Durable key-value persistence for product configurations."""

    def get(self, product_id: str) -> "ProductConfiguration | None":
        """Return the configuration or None if absent."""
        ...

    def put(self, config: "ProductConfiguration") -> None:
        """Persist a configuration atomically (steps and options included)."""
        ...
