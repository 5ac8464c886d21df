"""Quoteman protocols."""

from quoteman.protocols.catalog import CatalogBackend, CatalogItem
from quoteman.protocols.store import ConfigurationStore, QuoteStore

__all__ = [
    "CatalogBackend",
    "CatalogItem",
    "ConfigurationStore",
    "QuoteStore",
]
