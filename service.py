"""
Quoteman public API.

CORE (pure, no I/O):
    configuration.ensure_valid(config)     - Structural checks
    selection.normalize(config, raw)       - Canonical selection
    pricing.price(config, selection, ...)  - Price breakdown
    quotes.build(...)                      - Draft quote

SERVICE (stores, catalog, campaigns, signals):
    QuoteService.get_configuration(product_id)
    QuoteService.save_configuration(config)
    QuoteService.snapshot(config, selection)
    QuoteService.preview(product_id, raw_selection)
    QuoteService.create_quote(product_id, raw_selection, customer=...)
    QuoteService.get_quote(quote_id)
    QuoteService.set_status(quote_id, status)
    QuoteService.expire_overdue()

Every operation returns a Result; errors carry a code from
quoteman.exceptions.ERROR_MESSAGES.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from quoteman.conf import get_backend
from quoteman.configuration import ProductConfiguration, ensure_valid
from quoteman.exceptions import CatalogError, ConfigurationError, StoreError
from quoteman.pricing import DiscountRule, PriceBreakdown, price
from quoteman.protocols import CatalogItem
from quoteman.quotes import Customer, Quote, QuoteSettings, QuoteStatus, build, transition
from quoteman.result import Result
from quoteman.selection import RawSelection, Selection, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Priced:
    config: ProductConfiguration
    selection: Selection
    breakdown: PriceBreakdown


class QuoteService:
    """
    Quoteman public API.

    Uses @classmethod for extensibility: subclass and override
    ``_discount_rules`` or ``_settings`` to change where campaigns or
    quote defaults come from.
    """

    # ======================================================================
    # CONFIGURATIONS
    # ======================================================================

    @classmethod
    def get_configuration(cls, product_id: str) -> Result[ProductConfiguration]:
        try:
            config = get_backend("CONFIGURATION_STORE").get(product_id)
        except StoreError as e:
            return Result.failure(e)
        if config is None:
            return Result.failure(ConfigurationError("CONFIGURATION_NOT_FOUND", product_id=product_id))
        return Result.success(config)

    @classmethod
    def save_configuration(cls, config: ProductConfiguration) -> Result[ProductConfiguration]:
        """Validate and persist a configuration."""
        checked = ensure_valid(config)
        if not checked.ok:
            logger.warning(
                "Rejected configuration %s: %s", config.product_id, checked.error.code
            )
            return checked
        try:
            get_backend("CONFIGURATION_STORE").put(config)
        except StoreError as e:
            return Result.failure(e)

        from quoteman.signals import configuration_saved

        configuration_saved.send(sender=cls, config=config, product_id=config.product_id)
        logger.info("Saved configuration %s (%d steps)", config.product_id, len(config.steps))
        return Result.success(config)

    # ======================================================================
    # PRICING
    # ======================================================================

    @classmethod
    def snapshot(
        cls,
        config: ProductConfiguration,
        selection: Selection | None = None,
    ) -> Result[dict[int, CatalogItem]]:
        """
        Fetch catalog snapshots needed to price ``selection``.

        Without a selection, every catalog item referenced by the
        configuration is fetched. Options with both a price override and
        an explicit tax rate need no snapshot.
        """
        ids: list[int] = []
        for step in config.steps:
            picked = selection.options_for(step.id) if selection is not None else step.option_ids
            for option in step.options:
                if option.id not in picked or option.catalog_item_id is None:
                    continue
                if option.price_override_excl_tax is not None and option.tax_rate_percent is not None:
                    continue
                if option.catalog_item_id not in ids:
                    ids.append(option.catalog_item_id)

        catalog = get_backend("CATALOG_BACKEND")
        snapshots: dict[int, CatalogItem] = {}
        for catalog_item_id in ids:
            try:
                snapshots[catalog_item_id] = catalog.fetch_product(catalog_item_id)
            except CatalogError as e:
                logger.error("Catalog item %s unavailable: %s", catalog_item_id, e.code)
                return Result.failure(e)
        return Result.success(snapshots)

    @classmethod
    def _discount_rules(cls, product_id: str, at: datetime) -> list[DiscountRule]:
        from quoteman.models import DiscountCampaign

        return DiscountCampaign.objects.rules_for(product_id, at)

    @classmethod
    def _settings(cls) -> QuoteSettings:
        return QuoteSettings.from_settings()

    @classmethod
    def _price(
        cls,
        product_id: str,
        raw_selection: RawSelection,
        currency: str | None,
        at: datetime,
    ) -> Result[_Priced]:
        loaded = cls.get_configuration(product_id)
        if not loaded.ok:
            return Result.failure(loaded.error)
        config = loaded.value

        checked = ensure_valid(config)
        if not checked.ok:
            logger.error("Configuration %s is invalid: %s", product_id, checked.error.code)
            return Result.failure(checked.error)

        normalized = normalize(config, raw_selection)
        if not normalized.ok:
            logger.warning(
                "Invalid selection for %s: %s %s",
                product_id,
                normalized.error.code,
                normalized.error.data,
            )
            return Result.failure(normalized.error)
        selection = normalized.value

        snapshots = cls.snapshot(config, selection)
        if not snapshots.ok:
            return Result.failure(snapshots.error)

        priced = price(
            config,
            selection,
            cls._discount_rules(product_id, at),
            currency or config.currency,
            snapshots.value,
        )
        if not priced.ok:
            logger.error("Pricing failed for %s: %s %s", product_id, priced.error.code, priced.error.data)
            return Result.failure(priced.error)

        return Result.success(_Priced(config, selection, priced.value))

    @classmethod
    def preview(
        cls,
        product_id: str,
        raw_selection: RawSelection,
        currency: str | None = None,
        at: datetime | None = None,
    ) -> Result[PriceBreakdown]:
        """Price a selection without creating a quote."""
        priced = cls._price(product_id, raw_selection, currency, at or timezone.now())
        if not priced.ok:
            return Result.failure(priced.error)
        return Result.success(priced.value.breakdown)

    # ======================================================================
    # QUOTES
    # ======================================================================

    @classmethod
    def create_quote(
        cls,
        product_id: str,
        raw_selection: RawSelection,
        customer: Customer | None = None,
        notes: str | None = None,
        currency: str | None = None,
        now: datetime | None = None,
    ) -> Result[Quote]:
        """
        Price a selection and persist it as a draft quote.

        Returns:
            Result with the stored Quote, or the first error from the
            configuration, selection, catalog, pricing or store layer.
        """
        now = now or timezone.now()
        priced = cls._price(product_id, raw_selection, currency, now)
        if not priced.ok:
            return Result.failure(priced.error)

        built = build(
            product_id,
            priced.value.selection,
            priced.value.breakdown,
            customer=customer,
            settings=cls._settings(),
            now=now,
            notes=notes,
        )
        if not built.ok:
            return built
        quote = built.value

        try:
            get_backend("QUOTE_STORE").put(quote)
        except StoreError as e:
            return Result.failure(e)

        from quoteman.signals import quote_created

        quote_created.send(sender=cls, quote=quote, quote_id=quote.id)
        logger.info(
            "Created quote %s for %s: %s %s",
            quote.id,
            product_id,
            quote.total_incl_tax,
            quote.currency,
        )
        return Result.success(quote)

    @classmethod
    def get_quote(cls, quote_id: str) -> Result[Quote]:
        try:
            quote = get_backend("QUOTE_STORE").get(quote_id)
        except StoreError as e:
            return Result.failure(e)
        if quote is None:
            return Result.failure(StoreError("QUOTE_NOT_FOUND", quote_id=quote_id))
        return Result.success(quote)

    @classmethod
    def set_status(cls, quote_id: str, status: QuoteStatus | str) -> Result[Quote]:
        """Move a stored quote along draft -> sent -> accepted/expired."""
        loaded = cls.get_quote(quote_id)
        if not loaded.ok:
            return loaded
        old_status = loaded.value.status

        moved = transition(loaded.value, status)
        if not moved.ok:
            logger.warning("Rejected status change for %s: %s", quote_id, moved.error.data)
            return moved
        quote = moved.value

        try:
            get_backend("QUOTE_STORE").put(quote)
        except StoreError as e:
            return Result.failure(e)

        from quoteman.signals import quote_status_changed

        quote_status_changed.send(
            sender=cls,
            quote=quote,
            quote_id=quote.id,
            old_status=old_status.value,
            new_status=quote.status.value,
        )
        logger.info("Quote %s: %s -> %s", quote.id, old_status.value, quote.status.value)
        return Result.success(quote)

    @classmethod
    def expire_overdue(cls, now: datetime | None = None) -> list[str]:
        """
        Expire sent quotes past their validity date.

        Meant to be called by an external scheduler; nothing here runs
        on its own. Returns the ids that were expired.

        Raises:
            StoreError: If the quote store cannot list overdue quotes.
        """
        now = now or timezone.now()
        overdue = get_backend("QUOTE_STORE").overdue(now)

        expired = []
        for quote_id in [quote.id for quote in overdue]:
            result = cls.set_status(quote_id, QuoteStatus.EXPIRED)
            if result.ok:
                expired.append(quote_id)
        return expired
