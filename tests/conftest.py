"""Pytest fixtures for Quoteman tests."""

from decimal import Decimal

import pytest
from django.conf import settings


def pytest_configure():
    if settings.configured:
        return
    settings.configure(
        DEBUG=False,
        USE_TZ=True,
        TIME_ZONE="UTC",
        SECRET_KEY="quoteman-tests",
        DATABASES={"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}},
        INSTALLED_APPS=[
            "django.contrib.admin",
            "django.contrib.auth",
            "django.contrib.contenttypes",
            "django.contrib.messages",
            "django.contrib.sessions",
            "taggit",
            "simple_history",
            "quoteman",
        ],
        TEMPLATES=[
            {
                "BACKEND": "django.template.backends.django.DjangoTemplates",
                "APP_DIRS": True,
                "OPTIONS": {
                    "context_processors": [
                        "django.contrib.auth.context_processors.auth",
                        "django.contrib.messages.context_processors.messages",
                        "django.template.context_processors.request",
                    ]
                },
            }
        ],
        DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
        QUOTEMAN={},
    )


from quoteman.configuration import Option, ProductConfiguration, Step  # noqa: E402
from quoteman.protocols import CatalogItem  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_backends():
    """Backend singletons must not leak between tests."""
    from quoteman.conf import reset_backends

    reset_backends()
    yield
    reset_backends()


@pytest.fixture
def heater_item():
    """Catalog snapshot for the Aava heater (500.00 EUR, 21%)."""
    return CatalogItem(
        id=101,
        name="Aava 4.7kW",
        unit_price_excl_tax=Decimal("500.00"),
        currency="EUR",
        tax_rate_percent=Decimal("21"),
    )


@pytest.fixture
def sauna_config():
    """Two-step sauna: required heater, optional multi-select lighting."""
    return ProductConfiguration(
        product_id="skuare",
        name="Skuare Sauna",
        currency="EUR",
        steps=(
            Step(
                id="heater",
                name="Heater",
                required=True,
                options=(
                    Option(id="h1", label="Aava 4.7kW", catalog_item_id=101, is_default=True),
                    Option(
                        id="h2",
                        label="Huum Drop 6kW",
                        price_override_excl_tax=Decimal("650.00"),
                        tax_rate_percent=Decimal("21"),
                    ),
                ),
            ),
            Step(
                id="lighting",
                name="Lighting",
                allow_multiple=True,
                options=(
                    Option(
                        id="led-bench",
                        label="LED under bench",
                        price_override_excl_tax=Decimal("120.00"),
                        tax_rate_percent=Decimal("21"),
                    ),
                    Option(
                        id="led-back",
                        label="LED backrest",
                        price_override_excl_tax=Decimal("80.00"),
                        tax_rate_percent=Decimal("21"),
                        quantity=Decimal("2"),
                    ),
                ),
            ),
        ),
    )


@pytest.fixture
def snapshots(heater_item):
    return {heater_item.id: heater_item}


@pytest.fixture
def catalog_entry(db):
    """Locally managed heater entry."""
    from quoteman.models import CatalogEntry

    entry = CatalogEntry.objects.create(
        name="Aava 4.7kW",
        code="AAVA-47",
        unit_price_excl_tax=Decimal("500.00"),
        currency="EUR",
        tax_rate_percent=Decimal("21"),
    )
    entry.keywords.add("heater", "electric")
    return entry


@pytest.fixture
def stored_config(db, catalog_entry):
    """Configuration persisted through the Django store, linked to catalog_entry."""
    from quoteman.adapters.stores import DjangoConfigurationStore

    config = ProductConfiguration(
        product_id="skuare",
        name="Skuare Sauna",
        currency="EUR",
        steps=(
            Step(
                id="heater",
                name="Heater",
                required=True,
                options=(Option(id="h1", label="Aava 4.7kW", catalog_item_id=catalog_entry.pk),),
            ),
            Step(
                id="lighting",
                name="Lighting",
                allow_multiple=True,
                options=(
                    Option(
                        id="led-bench",
                        label="LED under bench",
                        price_override_excl_tax=Decimal("120.00"),
                        tax_rate_percent=Decimal("21"),
                    ),
                ),
            ),
        ),
    )
    DjangoConfigurationStore().put(config)
    return config
