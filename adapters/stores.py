"""
Django-backed QuoteStore and ConfigurationStore.

Each put() runs inside ``transaction.atomic()`` so a quote, or a
configuration with all of its steps and options, is written entirely
or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import DatabaseError, transaction

from quoteman.configuration import ProductConfiguration
from quoteman.exceptions import StoreError
from quoteman.protocols import ConfigurationStore, QuoteStore
from quoteman.quotes import Quote, QuoteStatus

logger = logging.getLogger(__name__)


class DjangoQuoteStore:
    """QuoteStore persisting to QuoteRecord."""

    def get(self, id: str) -> Quote | None:
        from quoteman.models import QuoteRecord

        try:
            record = QuoteRecord.objects.filter(quote_id=id).first()
        except DatabaseError as e:
            logger.error("Failed to read quote %s: %s", id, e)
            raise StoreError("STORE_READ_FAILED", quote_id=id) from e
        return record.to_quote() if record else None

    def put(self, quote: Quote) -> None:
        from quoteman.models import QuoteRecord

        try:
            with transaction.atomic():
                QuoteRecord.objects.update_or_create(
                    quote_id=quote.id,
                    defaults=QuoteRecord.fields_from_quote(quote),
                )
        except DatabaseError as e:
            logger.error("Failed to write quote %s: %s", quote.id, e)
            raise StoreError("STORE_WRITE_FAILED", quote_id=quote.id) from e

    def overdue(self, now: datetime) -> list[Quote]:
        from quoteman.models import QuoteRecord

        try:
            records = list(
                QuoteRecord.objects.filter(status=QuoteStatus.SENT.value, valid_until__lt=now).order_by("created_at")
            )
        except DatabaseError as e:
            logger.error("Failed to list overdue quotes: %s", e)
            raise StoreError("STORE_READ_FAILED") from e
        return [record.to_quote() for record in records]


class DjangoConfigurationStore:
    """ConfigurationStore persisting to ConfiguredProduct / WizardStep / StepOption."""

    def get(self, product_id: str) -> ProductConfiguration | None:
        from quoteman.models import ConfiguredProduct

        try:
            product = ConfiguredProduct.objects.filter(product_id=product_id).first()
            return product.to_configuration() if product else None
        except DatabaseError as e:
            logger.error("Failed to read configuration %s: %s", product_id, e)
            raise StoreError("STORE_READ_FAILED", product_id=product_id) from e

    def put(self, config: ProductConfiguration) -> None:
        from quoteman.models import ConfiguredProduct, StepOption, WizardStep

        try:
            with transaction.atomic():
                product, _ = ConfiguredProduct.objects.update_or_create(
                    product_id=config.product_id,
                    defaults={
                        "name": config.name or config.product_id,
                        "currency": config.currency.upper(),
                    },
                )
                # Steps are replaced wholesale; positions follow declared order.
                product.steps.all().delete()
                for step_position, step in enumerate(config.steps):
                    wizard_step = WizardStep.objects.create(
                        product=product,
                        step_id=step.id,
                        name=step.name,
                        description=step.description,
                        required=step.required,
                        allow_multiple=step.allow_multiple,
                        position=step_position,
                    )
                    for option_position, option in enumerate(step.options):
                        StepOption.objects.create(
                            step=wizard_step,
                            option_id=option.id,
                            label=option.label,
                            description=option.description,
                            catalog_item_id=option.catalog_item_id,
                            price_override_excl_tax=option.price_override_excl_tax,
                            tax_rate_percent=option.tax_rate_percent,
                            quantity=option.quantity,
                            is_default=option.is_default,
                            position=option_position,
                        )
        except DatabaseError as e:
            logger.error("Failed to write configuration %s: %s", config.product_id, e)
            raise StoreError("STORE_WRITE_FAILED", product_id=config.product_id) from e


# Verify implementation at import time
if not isinstance(DjangoQuoteStore(), QuoteStore):
    raise TypeError("DjangoQuoteStore does not implement QuoteStore protocol")
if not isinstance(DjangoConfigurationStore(), ConfigurationStore):
    raise TypeError("DjangoConfigurationStore does not implement ConfigurationStore protocol")
