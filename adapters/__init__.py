"""Quoteman adapters."""

from quoteman.adapters.catalog_backend import LocalCatalogBackend
from quoteman.adapters.memory import (
    InMemoryCatalogBackend,
    InMemoryConfigurationStore,
    InMemoryQuoteStore,
)
from quoteman.adapters.pipedrive import PipedriveCatalogBackend
from quoteman.adapters.stores import DjangoConfigurationStore, DjangoQuoteStore

__all__ = [
    "DjangoConfigurationStore",
    "DjangoQuoteStore",
    "InMemoryCatalogBackend",
    "InMemoryConfigurationStore",
    "InMemoryQuoteStore",
    "LocalCatalogBackend",
    "PipedriveCatalogBackend",
]
