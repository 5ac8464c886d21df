"""Tests for Quoteman service (QuoteService API)."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from quoteman.adapters.memory import (
    InMemoryCatalogBackend,
    InMemoryConfigurationStore,
    InMemoryQuoteStore,
)
from quoteman.conf import set_backend
from quoteman.configuration import Option, ProductConfiguration, Step
from quoteman.exceptions import CatalogError, ConfigurationError, StoreError, ValidationError
from quoteman.models import ConfiguredProduct, DiscountCampaign, QuoteRecord
from quoteman.quotes import Customer, QuoteStatus
from quoteman.service import QuoteService
from quoteman.signals import configuration_saved, quote_created, quote_status_changed


pytestmark = pytest.mark.django_db


@pytest.fixture
def received():
    """Collect signal kwargs sent during a test."""
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    for signal in (configuration_saved, quote_created, quote_status_changed):
        signal.connect(handler, weak=False, dispatch_uid="quoteman-tests")
    yield calls
    for signal in (configuration_saved, quote_created, quote_status_changed):
        signal.disconnect(dispatch_uid="quoteman-tests")


# ═══════════════════════════════════════════════════════════════════
# Configurations
# ═══════════════════════════════════════════════════════════════════


class TestConfigurations:
    """Tests for get_configuration() / save_configuration()."""

    def test_get_configuration(self, stored_config):
        result = QuoteService.get_configuration("skuare")
        assert result.ok
        assert result.value == stored_config

    def test_get_missing_configuration(self):
        result = QuoteService.get_configuration("nope")
        assert isinstance(result.error, ConfigurationError)
        assert result.error.code == "CONFIGURATION_NOT_FOUND"

    def test_save_valid_configuration(self, sauna_config, received):
        result = QuoteService.save_configuration(sauna_config)

        assert result.ok
        assert ConfiguredProduct.objects.get(product_id="skuare").steps.count() == 2
        assert received == [{"signal": configuration_saved, "config": sauna_config, "product_id": "skuare"}]

    def test_save_invalid_configuration(self, received):
        config = ProductConfiguration(
            product_id="broken",
            steps=(Step(id="heater", name="Heater", required=True),),
        )
        result = QuoteService.save_configuration(config)

        assert result.error.code == "REQUIRED_STEP_WITH_NO_OPTIONS"
        assert not ConfiguredProduct.objects.filter(product_id="broken").exists()
        assert received == []


# ═══════════════════════════════════════════════════════════════════
# Preview
# ═══════════════════════════════════════════════════════════════════


class TestPreview:
    """Tests for preview()."""

    def test_preview(self, stored_config):
        breakdown = QuoteService.preview("skuare", {"heater": ["h1"]}).unwrap()

        assert breakdown.subtotal_excl_tax == Decimal("500.00")
        assert breakdown.total_tax == Decimal("105.00")
        assert breakdown.total_incl_tax == Decimal("605.00")

    def test_preview_creates_nothing(self, stored_config):
        QuoteService.preview("skuare", {"heater": ["h1"]})
        assert QuoteRecord.objects.count() == 0

    def test_preview_applies_campaigns(self, stored_config):
        DiscountCampaign.objects.create(
            code="spring",
            name="Spring sale",
            discount_type="fixed",
            discount_value=Decimal("50.00"),
        )
        breakdown = QuoteService.preview("skuare", {"heater": ["h1"]}).unwrap()

        assert breakdown.total_discount == Decimal("50.00")
        assert breakdown.total_incl_tax == Decimal("555.00")

    def test_preview_applies_first_campaign_only(self, stored_config):
        DiscountCampaign.objects.create(
            code="spring",
            name="Spring sale",
            discount_type="fixed",
            discount_value=Decimal("50.00"),
        )
        DiscountCampaign.objects.create(
            code="vip", name="VIP", discount_value=Decimal("20"), priority=5
        )
        breakdown = QuoteService.preview("skuare", {"heater": ["h1"]}).unwrap()

        assert [(d.campaign_id, d.name) for d in breakdown.applied_discounts] == [("vip", "VIP")]
        assert breakdown.total_discount == Decimal("100.00")
        assert breakdown.total_incl_tax == Decimal("505.00")

    def test_preview_stacks_campaigns_when_enabled(self, stored_config, settings):
        settings.QUOTEMAN = {"STACK_DISCOUNTS": True}
        DiscountCampaign.objects.create(
            code="spring",
            name="Spring sale",
            discount_type="fixed",
            discount_value=Decimal("50.00"),
        )
        DiscountCampaign.objects.create(
            code="vip", name="VIP", discount_value=Decimal("20"), priority=5
        )
        breakdown = QuoteService.preview("skuare", {"heater": ["h1"]}).unwrap()

        assert [d.campaign_id for d in breakdown.applied_discounts] == ["vip", "spring"]
        assert breakdown.total_discount == Decimal("150.00")
        assert breakdown.total_incl_tax == Decimal("455.00")

    def test_preview_ignores_other_products_campaigns(self, stored_config):
        DiscountCampaign.objects.create(
            code="barrel",
            name="Barrel week",
            discount_value=Decimal("10"),
            applies_to="specific",
            product_ids=["barrel"],
        )
        breakdown = QuoteService.preview("skuare", {"heater": ["h1"]}).unwrap()
        assert breakdown.applied_discounts == ()

    def test_preview_invalid_selection(self, stored_config):
        result = QuoteService.preview("skuare", {"lighting": ["led-bench"]})
        assert isinstance(result.error, ValidationError)
        assert result.error.code == "MISSING_REQUIRED_STEP"

    def test_preview_catalog_item_gone(self, stored_config, catalog_entry):
        catalog_entry.is_active = False
        catalog_entry.save()

        result = QuoteService.preview("skuare", {"heater": ["h1"]})
        assert isinstance(result.error, CatalogError)
        assert result.error.code == "NOT_FOUND"

    def test_preview_currency_mismatch(self, stored_config):
        result = QuoteService.preview("skuare", {"heater": ["h1"]}, currency="GBP")
        assert result.error.code == "CURRENCY_MISMATCH"


# ═══════════════════════════════════════════════════════════════════
# Quotes
# ═══════════════════════════════════════════════════════════════════


class TestCreateQuote:
    """Tests for create_quote()."""

    def test_create_quote(self, stored_config, received):
        customer = Customer(email="buyer@example.com", name="Ann Buyer")
        result = QuoteService.create_quote(
            "skuare",
            {"heater": ["h1"], "lighting": ["led-bench"]},
            customer=customer,
        )

        assert result.ok
        quote = result.value
        assert quote.status == QuoteStatus.DRAFT
        assert quote.total_incl_tax == Decimal("750.20")

        record = QuoteRecord.objects.get(quote_id=quote.id)
        assert record.customer_email == "buyer@example.com"
        assert record.total_incl_tax == Decimal("750.20")
        assert record.currency == "EUR"
        assert record.to_quote() == quote
        assert [c["quote_id"] for c in received] == [quote.id]

    def test_create_quote_uses_settings(self, stored_config, settings):
        settings.QUOTEMAN = {
            "QUOTE_VALIDITY_DAYS": 7,
            "QUOTE_ID_PREFIX": "SQ",
            "DEFAULT_NOTES": "Delivery 6-8 weeks",
        }
        now = timezone.now()
        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}, now=now).unwrap()

        assert quote.id.startswith("SQ-")
        assert quote.valid_until == now + timedelta(days=7)
        assert quote.notes == "Delivery 6-8 weeks"

    def test_invalid_selection_persists_nothing(self, stored_config, received):
        result = QuoteService.create_quote("skuare", {"heater": ["h1"], "lighting": ["ghost"]})

        assert result.error.code == "UNKNOWN_OPTION"
        assert QuoteRecord.objects.count() == 0
        assert received == []

    def test_unknown_product(self):
        result = QuoteService.create_quote("nope", {})
        assert result.error.code == "CONFIGURATION_NOT_FOUND"

    def test_get_quote(self, stored_config):
        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()
        assert QuoteService.get_quote(quote.id).value == quote

    def test_get_missing_quote(self):
        result = QuoteService.get_quote("quote-0-none")
        assert isinstance(result.error, StoreError)
        assert result.error.code == "QUOTE_NOT_FOUND"


class TestSetStatus:
    """Tests for set_status()."""

    def test_send_then_accept(self, stored_config, received):
        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()
        received.clear()

        QuoteService.set_status(quote.id, QuoteStatus.SENT).unwrap()
        accepted = QuoteService.set_status(quote.id, "accepted").unwrap()

        assert accepted.status == QuoteStatus.ACCEPTED
        assert QuoteRecord.objects.get(quote_id=quote.id).status == "accepted"
        assert [(c["old_status"], c["new_status"]) for c in received] == [
            ("draft", "sent"),
            ("sent", "accepted"),
        ]

    def test_status_change_keeps_pricing(self, stored_config):
        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()
        sent = QuoteService.set_status(quote.id, QuoteStatus.SENT).unwrap()
        assert sent.breakdown == quote.breakdown

    def test_illegal_transition(self, stored_config):
        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()
        result = QuoteService.set_status(quote.id, QuoteStatus.ACCEPTED)

        assert result.error.code == "INVALID_STATUS_TRANSITION"
        assert QuoteRecord.objects.get(quote_id=quote.id).status == "draft"

    def test_missing_quote(self):
        result = QuoteService.set_status("quote-0-none", QuoteStatus.SENT)
        assert result.error.code == "QUOTE_NOT_FOUND"


class TestExpireOverdue:
    """Tests for expire_overdue()."""

    def test_expires_sent_quotes_past_validity(self, stored_config):
        old = timezone.now() - timedelta(days=40)
        overdue = QuoteService.create_quote("skuare", {"heater": ["h1"]}, now=old).unwrap()
        QuoteService.set_status(overdue.id, QuoteStatus.SENT)
        draft = QuoteService.create_quote("skuare", {"heater": ["h1"]}, now=old).unwrap()
        fresh = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()
        QuoteService.set_status(fresh.id, QuoteStatus.SENT)

        expired = QuoteService.expire_overdue()

        assert expired == [overdue.id]
        assert QuoteRecord.objects.get(quote_id=overdue.id).status == "expired"
        assert QuoteRecord.objects.get(quote_id=draft.id).status == "draft"
        assert QuoteRecord.objects.get(quote_id=fresh.id).status == "sent"

    def test_goes_through_quote_store(self, sauna_config, heater_item):
        quotes = InMemoryQuoteStore()
        set_backend("CONFIGURATION_STORE", InMemoryConfigurationStore([sauna_config]))
        set_backend("CATALOG_BACKEND", InMemoryCatalogBackend([heater_item]))
        set_backend("QUOTE_STORE", quotes)

        old = timezone.now() - timedelta(days=40)
        overdue = QuoteService.create_quote("skuare", {"heater": ["h1"]}, now=old).unwrap()
        QuoteService.set_status(overdue.id, QuoteStatus.SENT).unwrap()
        draft = QuoteService.create_quote("skuare", {"heater": ["h1"]}, now=old).unwrap()

        assert QuoteService.expire_overdue() == [overdue.id]
        assert quotes.get(overdue.id).status == QuoteStatus.EXPIRED
        assert quotes.get(draft.id).status == QuoteStatus.DRAFT
        assert QuoteRecord.objects.count() == 0


# ═══════════════════════════════════════════════════════════════════
# Backend wiring
# ═══════════════════════════════════════════════════════════════════


class TestInMemoryBackends:
    """QuoteService over in-memory stores and catalog."""

    def test_create_quote_in_memory(self, sauna_config, heater_item):
        quotes = InMemoryQuoteStore()
        set_backend("CONFIGURATION_STORE", InMemoryConfigurationStore([sauna_config]))
        set_backend("CATALOG_BACKEND", InMemoryCatalogBackend([heater_item]))
        set_backend("QUOTE_STORE", quotes)

        quote = QuoteService.create_quote("skuare", {"heater": ["h1"]}).unwrap()

        assert quotes.all() == [quote]
        assert quote.total_incl_tax == Decimal("605.00")
        assert QuoteRecord.objects.count() == 0

    def test_snapshot_skips_fully_overridden_options(self, heater_item):
        config = ProductConfiguration(
            product_id="p",
            currency="EUR",
            steps=(
                Step(
                    id="heater",
                    name="Heater",
                    allow_multiple=True,
                    options=(
                        Option(id="h1", label="Aava", catalog_item_id=101),
                        Option(
                            id="h2",
                            label="Custom",
                            catalog_item_id=999,
                            price_override_excl_tax=Decimal("10"),
                            tax_rate_percent=Decimal("0"),
                        ),
                    ),
                ),
            ),
        )
        set_backend("CATALOG_BACKEND", InMemoryCatalogBackend([heater_item]))

        snapshots = QuoteService.snapshot(config).unwrap()
        assert list(snapshots) == [101]

    def test_snapshot_reports_catalog_error(self, sauna_config):
        set_backend("CATALOG_BACKEND", InMemoryCatalogBackend([]))
        result = QuoteService.snapshot(sauna_config)
        assert result.error.code == "NOT_FOUND"
        assert result.error.data == {"catalog_item_id": 101}
