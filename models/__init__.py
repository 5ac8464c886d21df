"""Quoteman models."""

from quoteman.models.catalog_entry import CatalogEntry
from quoteman.models.configured_product import ConfiguredProduct, StepOption, WizardStep
from quoteman.models.discount_campaign import AppliesTo, DiscountCampaign, DiscountType
from quoteman.models.quote_record import QuoteRecord

__all__ = [
    "AppliesTo",
    "CatalogEntry",
    "ConfiguredProduct",
    "DiscountCampaign",
    "DiscountType",
    "QuoteRecord",
    "StepOption",
    "WizardStep",
]
