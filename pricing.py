"""
Pricing engine.

price() turns a normalized Selection into a PriceBreakdown:

    line_total_excl_tax = round(unit_price_excl_tax * quantity, 2)
    line_tax            = round(line_total_excl_tax * tax_rate_percent / 100, 2)
    subtotal_excl_tax   = sum(line_total_excl_tax)
    total_tax           = sum(line_tax)
    subtotal_after_discount = subtotal_excl_tax - sum(applied discounts)
    total_incl_tax      = subtotal_after_discount + total_tax

Rounding is ROUND_HALF_UP at 2 places, per line. Tax is computed on list
price: discounts reduce the tax-exclusive subtotal only and tax is not
recomputed afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from quoteman.configuration import Option, ProductConfiguration
from quoteman.exceptions import PricingError
from quoteman.protocols.catalog import CatalogItem
from quoteman.result import Result
from quoteman.selection import Selection

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Decimal) -> Decimal:
    """Round to currency minor units, half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DiscountRule:
    """
    A discount applied after tax has been computed.

    kind:
        "percentage" - ``value`` percent of the running tax-exclusive subtotal
        "fixed"      - ``value`` in the breakdown currency
    """

    campaign_id: str
    kind: str
    value: Decimal
    name: str = ""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class AppliedDiscount:
    campaign_id: str
    amount: Decimal
    name: str = ""


@dataclass(frozen=True)
class LineItem:
    step_id: str
    option_id: str
    label: str
    quantity: Decimal
    unit_price_excl_tax: Decimal
    tax_rate_percent: Decimal
    line_total_excl_tax: Decimal
    line_tax: Decimal

    @property
    def line_total_incl_tax(self) -> Decimal:
        return self.line_total_excl_tax + self.line_tax


@dataclass(frozen=True)
class PriceBreakdown:
    line_items: tuple[LineItem, ...]
    subtotal_excl_tax: Decimal
    total_tax: Decimal
    total_incl_tax: Decimal
    currency: str
    applied_discounts: tuple[AppliedDiscount, ...] = ()

    @property
    def total_discount(self) -> Decimal:
        return sum((d.amount for d in self.applied_discounts), ZERO)

    @property
    def subtotal_after_discount(self) -> Decimal:
        return self.subtotal_excl_tax - self.total_discount

    @classmethod
    def empty(cls, currency: str) -> "PriceBreakdown":
        return cls(
            line_items=(),
            subtotal_excl_tax=ZERO,
            total_tax=ZERO,
            total_incl_tax=ZERO,
            currency=currency,
        )


@dataclass(frozen=True)
class _ResolvedPrice:
    unit_price_excl_tax: Decimal
    tax_rate_percent: Decimal
    currency: str


def _resolve(
    config: ProductConfiguration,
    step_id: str,
    option: Option,
    snapshots: Mapping[int, CatalogItem],
) -> Result[_ResolvedPrice]:
    snapshot = None
    if option.catalog_item_id is not None:
        snapshot = snapshots.get(option.catalog_item_id)

    if option.price_override_excl_tax is not None:
        unit_price = Decimal(option.price_override_excl_tax)
        currency = config.currency
    elif snapshot is not None:
        unit_price = Decimal(snapshot.unit_price_excl_tax)
        currency = snapshot.currency
    else:
        return Result.failure(
            PricingError(
                "MISSING_CATALOG_SNAPSHOT",
                step_id=step_id,
                option_id=option.id,
                catalog_item_id=option.catalog_item_id,
            )
        )

    if option.tax_rate_percent is not None:
        tax_rate = Decimal(option.tax_rate_percent)
    elif snapshot is not None:
        tax_rate = Decimal(snapshot.tax_rate_percent)
    elif option.catalog_item_id is not None:
        # Overridden price, tax rate still comes from the catalog item.
        return Result.failure(
            PricingError(
                "MISSING_CATALOG_SNAPSHOT",
                step_id=step_id,
                option_id=option.id,
                catalog_item_id=option.catalog_item_id,
            )
        )
    else:
        tax_rate = Decimal("0")

    if unit_price < 0:
        return Result.failure(
            PricingError("NEGATIVE_PRICE", step_id=step_id, option_id=option.id, unit_price=str(unit_price))
        )
    if tax_rate < 0:
        return Result.failure(
            PricingError(
                "INVALID_TAX_RATE",
                step_id=step_id,
                option_id=option.id,
                tax_rate_percent=str(tax_rate),
            )
        )

    return Result.success(_ResolvedPrice(unit_price, tax_rate, currency.upper()))


def _discount_amount(rule: DiscountRule, running_subtotal: Decimal) -> Result[Decimal]:
    value = Decimal(rule.value)
    if value < 0:
        return Result.failure(
            PricingError("INVALID_DISCOUNT", campaign_id=rule.campaign_id, value=str(value))
        )
    if rule.kind == DiscountRule.PERCENTAGE:
        if value > 100:
            return Result.failure(
                PricingError("INVALID_DISCOUNT", campaign_id=rule.campaign_id, value=str(value))
            )
        amount = round_money(running_subtotal * value / 100)
    elif rule.kind == DiscountRule.FIXED:
        amount = round_money(value)
    else:
        return Result.failure(
            PricingError("INVALID_DISCOUNT", campaign_id=rule.campaign_id, kind=rule.kind)
        )
    # Never discount below zero.
    return Result.success(min(amount, running_subtotal))


def price(
    config: ProductConfiguration,
    selection: Selection,
    discount_rules: Sequence[DiscountRule] = (),
    target_currency: str | None = None,
    snapshots: Mapping[int, CatalogItem] | None = None,
) -> Result[PriceBreakdown]:
    """
    Price a normalized selection.

    Args:
        config: Product configuration (read only).
        selection: Output of ``normalize()`` for the same configuration.
        discount_rules: Applied in the given order.
        target_currency: Currency every line must be priced in.
            Defaults to the configuration currency.
        snapshots: Catalog items already fetched, keyed by catalog id.

    Returns:
        Result with a frozen PriceBreakdown, or a PricingError:
        CURRENCY_MISMATCH, NEGATIVE_PRICE, INVALID_TAX_RATE, INVALID_QUANTITY,
        MISSING_CATALOG_SNAPSHOT, INVALID_DISCOUNT.
    """
    currency = (target_currency or config.currency).upper()
    snapshots = snapshots or {}

    lines: list[LineItem] = []
    for step in config.steps:
        picked = selection.options_for(step.id)
        if not picked:
            continue
        for option in step.options:
            if option.id not in picked:
                continue

            resolved = _resolve(config, step.id, option, snapshots)
            if not resolved.ok:
                return Result.failure(resolved.error)
            unit = resolved.value

            if unit.currency != currency:
                return Result.failure(
                    PricingError(
                        "CURRENCY_MISMATCH",
                        step_id=step.id,
                        option_id=option.id,
                        expected=currency,
                        found=unit.currency,
                    )
                )

            quantity = Decimal(option.quantity)
            if quantity <= 0:
                return Result.failure(
                    PricingError(
                        "INVALID_QUANTITY", step_id=step.id, option_id=option.id, quantity=str(quantity)
                    )
                )
            line_total = round_money(unit.unit_price_excl_tax * quantity)
            lines.append(
                LineItem(
                    step_id=step.id,
                    option_id=option.id,
                    label=option.label,
                    quantity=quantity,
                    unit_price_excl_tax=round_money(unit.unit_price_excl_tax),
                    tax_rate_percent=unit.tax_rate_percent,
                    line_total_excl_tax=line_total,
                    line_tax=round_money(line_total * unit.tax_rate_percent / 100),
                )
            )

    subtotal = sum((line.line_total_excl_tax for line in lines), ZERO)
    total_tax = sum((line.line_tax for line in lines), ZERO)

    applied: list[AppliedDiscount] = []
    running = subtotal
    for rule in discount_rules:
        amount = _discount_amount(rule, running)
        if not amount.ok:
            return Result.failure(amount.error)
        applied.append(AppliedDiscount(campaign_id=rule.campaign_id, amount=amount.value, name=rule.name))
        running -= amount.value

    return Result.success(
        PriceBreakdown(
            line_items=tuple(lines),
            subtotal_excl_tax=subtotal,
            total_tax=total_tax,
            total_incl_tax=running + total_tax,
            currency=currency,
            applied_discounts=tuple(applied),
        )
    )


def select_discount_rules(
    campaigns: Iterable[Mapping],
    product_id: str,
    at: datetime,
    stack: bool = False,
) -> list[DiscountRule]:
    """
    Pick the campaigns that apply to ``product_id`` at ``at``.

    Each campaign is a mapping with the keys used by admin-managed
    campaigns: id, name, discount_type, discount_value, applies_to
    ("all" | "specific"), product_ids, starts_at, ends_at, is_active,
    priority. Higher priority first, then input order.

    Only the first matching campaign is returned unless ``stack`` is set,
    in which case every matching campaign is, in that order.
    """
    picked = []
    for position, campaign in enumerate(campaigns):
        if not campaign.get("is_active", True):
            continue
        starts_at = campaign.get("starts_at")
        ends_at = campaign.get("ends_at")
        if starts_at and starts_at > at:
            continue
        if ends_at and ends_at < at:
            continue
        if campaign.get("applies_to", "all") == "specific" and product_id not in (
            campaign.get("product_ids") or []
        ):
            continue
        picked.append((-int(campaign.get("priority", 0)), position, campaign))

    picked.sort(key=lambda entry: (entry[0], entry[1]))
    if not stack:
        picked = picked[:1]
    return [
        DiscountRule(
            campaign_id=str(campaign["id"]),
            kind=campaign.get("discount_type", DiscountRule.PERCENTAGE),
            value=Decimal(str(campaign["discount_value"])),
            name=campaign.get("name", ""),
        )
        for _, _, campaign in picked
    ]
