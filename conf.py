"""
Quoteman configuration.

Usage in settings.py:
    QUOTEMAN = {
        "QUOTE_VALIDITY_DAYS": 30,
        "DEFAULT_CURRENCY": "GBP",
        "CATALOG_BACKEND": "quoteman.adapters.pipedrive.PipedriveCatalogBackend",
        "PIPEDRIVE_API_TOKEN": env("PIPEDRIVE_API_TOKEN"),
    }
"""

import importlib
import threading
from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class QuotemanSettings:
    """Quoteman configuration settings."""

    QUOTE_VALIDITY_DAYS: int = 30
    DEFAULT_CURRENCY: str = "GBP"
    QUOTE_ID_PREFIX: str = "quote"

    CATALOG_BACKEND: str = "quoteman.adapters.catalog_backend.LocalCatalogBackend"
    QUOTE_STORE: str = "quoteman.adapters.stores.DjangoQuoteStore"
    CONFIGURATION_STORE: str = "quoteman.adapters.stores.DjangoConfigurationStore"

    PIPEDRIVE_API_TOKEN: str | None = None
    PIPEDRIVE_COMPANY_DOMAIN: str = "saunamo"
    PIPEDRIVE_TIMEOUT: int = 30

    DEFAULT_NOTES: str = ""

    # Apply every matching discount campaign instead of only the first.
    STACK_DISCOUNTS: bool = False


def get_quoteman_settings() -> QuotemanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "QUOTEMAN", {})
    return QuotemanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_quoteman_settings(), name)


quoteman_settings = _LazySettings()


# Backend singletons, keyed by setting name
BACKEND_SETTINGS = ("CATALOG_BACKEND", "QUOTE_STORE", "CONFIGURATION_STORE")

_backend_lock = threading.Lock()
_backend_instances: dict[str, Any] = {}


def get_backend(name: str):
    """
    Return the configured backend instance for ``name``.

    ``name`` is one of BACKEND_SETTINGS. Loads the class from the dotted
    path in QUOTEMAN[name]. Instances set with set_backend() (e.g. in
    tests) are returned as-is.
    """
    if name not in BACKEND_SETTINGS:
        raise KeyError(f"Unknown Quoteman backend setting: {name}")
    instance = _backend_instances.get(name)
    if instance is not None:
        return instance
    with _backend_lock:
        if name not in _backend_instances:
            module_path, cls_name = getattr(quoteman_settings, name).rsplit(".", 1)
            module = importlib.import_module(module_path)
            _backend_instances[name] = getattr(module, cls_name)()
    return _backend_instances[name]


def set_backend(name: str, instance) -> None:
    """Install a backend instance directly (tests, custom wiring)."""
    if name not in BACKEND_SETTINGS:
        raise KeyError(f"Unknown Quoteman backend setting: {name}")
    with _backend_lock:
        _backend_instances[name] = instance


def reset_backends() -> None:
    """Reset backend singletons (for tests)."""
    with _backend_lock:
        _backend_instances.clear()
