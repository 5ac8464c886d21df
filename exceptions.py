"""Quoteman exceptions."""

from typing import Any


ERROR_MESSAGES = {
    # Configuration
    "DUPLICATE_STEP_ID": "Step id is used more than once",
    "DUPLICATE_OPTION_ID": "Option id is used more than once in a step",
    "REQUIRED_STEP_WITH_NO_OPTIONS": "Required step has no options",
    "OPTION_MISSING_PRICE_SOURCE": "Option has neither a catalog item nor a price override",
    "INVALID_QUANTITY": "Option quantity must be positive",
    "CONFIGURATION_NOT_FOUND": "Product configuration not found",
    # Selection
    "MISSING_REQUIRED_STEP": "Required step has no selection",
    "TOO_MANY_OPTIONS_SELECTED": "Step accepts a single option",
    "UNKNOWN_OPTION": "Option does not exist in step",
    "PRODUCT_MISMATCH": "Selection belongs to another product",
    "INVALID_STATUS_TRANSITION": "Quote status transition not allowed",
    # Pricing
    "CURRENCY_MISMATCH": "Option is priced in another currency",
    "NEGATIVE_PRICE": "Resolved unit price is negative",
    "INVALID_TAX_RATE": "Resolved tax rate is negative",
    "MISSING_CATALOG_SNAPSHOT": "No price available for option",
    "INVALID_DISCOUNT": "Invalid discount rule",
    # Store
    "STORE_WRITE_FAILED": "Could not persist record",
    "STORE_READ_FAILED": "Could not read record",
    "QUOTE_NOT_FOUND": "Quote not found",
    # Catalog
    "NOT_FOUND": "Catalog item not found",
    "INVALID_CATALOG_ITEM": "Catalog item has no usable price",
    "CATALOG_UNAVAILABLE": "Catalog service unavailable",
}


class QuotemanError(Exception):
    """
    Structured exception for configurator and quoting operations.

    Usage:
        result = QuoteService.create_quote("skuare", {"heater": ["h1"]})
        if not result.ok:
            if result.error.code == "MISSING_REQUIRED_STEP":
                prompt_step(result.error.step_id)
    """

    def __init__(self, code: str, message: str = "", **data: Any) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    @property
    def step_id(self) -> str | None:
        return self.data.get("step_id")

    @property
    def option_id(self) -> str | None:
        return self.data.get("option_id")

    def __eq__(self, other):
        if not isinstance(other, QuotemanError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.code == other.code
            and self.data == other.data
        )

    def __hash__(self):
        return hash((type(self), self.code))

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class ConfigurationError(QuotemanError):
    """Malformed product configuration. Needs admin correction."""


class ValidationError(QuotemanError):
    """Incomplete or invalid selection. The wizard can prompt the user."""


class PricingError(QuotemanError):
    """Data-integrity or currency problem while pricing."""


class StoreError(QuotemanError):
    """Persistence failure. Retrying is the caller's decision."""


class CatalogError(QuotemanError):
    """Failure reported by a catalog backend."""
