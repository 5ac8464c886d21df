"""Quoteman admin."""

from quoteman.admin.campaign import CatalogEntryAdmin, DiscountCampaignAdmin
from quoteman.admin.configured_product import (
    ConfiguredProductAdmin,
    StepOptionInline,
    WizardStepAdmin,
    WizardStepInline,
)
from quoteman.admin.quote import QuoteRecordAdmin

__all__ = [
    "CatalogEntryAdmin",
    "ConfiguredProductAdmin",
    "DiscountCampaignAdmin",
    "QuoteRecordAdmin",
    "StepOptionInline",
    "WizardStepAdmin",
    "WizardStepInline",
]
