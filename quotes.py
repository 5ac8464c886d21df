"""
Quote builder.

A Quote freezes one priced selection together with customer and validity
metadata. Pricing fields never change after build(); only ``status``
moves, through transition():

    draft -> sent -> accepted
                  -> expired
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from quoteman.exceptions import ValidationError
from quoteman.pricing import AppliedDiscount, LineItem, PriceBreakdown
from quoteman.result import Result
from quoteman.selection import Selection


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


ALLOWED_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT}),
    QuoteStatus.SENT: frozenset({QuoteStatus.ACCEPTED, QuoteStatus.EXPIRED}),
    QuoteStatus.ACCEPTED: frozenset(),
    QuoteStatus.EXPIRED: frozenset(),
}


@dataclass(frozen=True)
class Customer:
    email: str = ""
    name: str = ""
    phone: str = ""
    company: str = ""
    delivery_location: str = ""


@dataclass(frozen=True)
class QuoteSettings:
    """Quote defaults, usually read from ``QUOTEMAN`` via from_settings()."""

    quote_validity_days: int = 30
    id_prefix: str = "quote"
    notes: str = ""

    @classmethod
    def from_settings(cls) -> "QuoteSettings":
        from quoteman.conf import quoteman_settings

        return cls(
            quote_validity_days=quoteman_settings.QUOTE_VALIDITY_DAYS,
            id_prefix=quoteman_settings.QUOTE_ID_PREFIX,
            notes=quoteman_settings.DEFAULT_NOTES,
        )


@dataclass(frozen=True)
class Quote:
    id: str
    product_id: str
    selection: Selection
    breakdown: PriceBreakdown
    created_at: datetime
    valid_until: datetime
    customer: Customer | None = None
    status: QuoteStatus = QuoteStatus.DRAFT
    notes: str = ""

    @property
    def currency(self) -> str:
        return self.breakdown.currency

    @property
    def total_incl_tax(self) -> Decimal:
        return self.breakdown.total_incl_tax


def generate_quote_id(prefix: str, now: datetime) -> str:
    """Time-ordered, collision-resistant id: ``<prefix>-<epoch ms>-<random>``."""
    epoch_ms = int(now.timestamp() * 1000)
    return f"{prefix}-{epoch_ms:013d}-{secrets.token_hex(5)}"


def build(
    product_id: str,
    selection: Selection,
    breakdown: PriceBreakdown,
    customer: Customer | None = None,
    settings: QuoteSettings | None = None,
    now: datetime | None = None,
    notes: str | None = None,
) -> Result[Quote]:
    """Assemble a draft Quote. Nothing is persisted here."""
    if selection.product_id != product_id:
        return Result.failure(
            ValidationError(
                "PRODUCT_MISMATCH",
                product_id=product_id,
                selection_product_id=selection.product_id,
            )
        )

    settings = settings or QuoteSettings()
    created_at = now or datetime.now(timezone.utc)
    return Result.success(
        Quote(
            id=generate_quote_id(settings.id_prefix, created_at),
            product_id=product_id,
            selection=selection,
            breakdown=breakdown,
            customer=customer,
            created_at=created_at,
            valid_until=created_at + timedelta(days=settings.quote_validity_days),
            status=QuoteStatus.DRAFT,
            notes=settings.notes if notes is None else notes,
        )
    )


def can_transition(current: QuoteStatus, target: QuoteStatus) -> bool:
    return QuoteStatus(target) in ALLOWED_TRANSITIONS[QuoteStatus(current)]


def transition(quote: Quote, status: QuoteStatus | str) -> Result[Quote]:
    """Return a copy of ``quote`` with the new status, if the move is legal."""
    try:
        target = QuoteStatus(status)
    except ValueError:
        return Result.failure(
            ValidationError(
                "INVALID_STATUS_TRANSITION",
                quote_id=quote.id,
                current=quote.status.value,
                target=str(status),
            )
        )
    if not can_transition(quote.status, target):
        return Result.failure(
            ValidationError(
                "INVALID_STATUS_TRANSITION",
                quote_id=quote.id,
                current=quote.status.value,
                target=target.value,
            )
        )
    return Result.success(replace(quote, status=target))


def is_expired(quote: Quote, now: datetime | None = None) -> bool:
    """True once the validity window has passed (status is not consulted)."""
    now = now or datetime.now(timezone.utc)
    return now > quote.valid_until


# ----------------------------------------------------------------------
# JSON shape
# ----------------------------------------------------------------------


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def quote_to_dict(quote: Quote) -> dict[str, Any]:
    """Serialize for storage and for the quote portal.

    Amounts are fixed-point strings, timestamps ISO-8601.
    """
    breakdown = quote.breakdown
    return {
        "id": quote.id,
        "productId": quote.product_id,
        "status": quote.status.value,
        "createdAt": quote.created_at.isoformat(),
        "validUntil": quote.valid_until.isoformat(),
        "notes": quote.notes,
        "customer": None
        if quote.customer is None
        else {
            "email": quote.customer.email,
            "name": quote.customer.name,
            "phone": quote.customer.phone,
            "company": quote.customer.company,
            "deliveryLocation": quote.customer.delivery_location,
        },
        "selection": {
            "productId": quote.selection.product_id,
            "chosen": {step_id: list(ids) for step_id, ids in quote.selection.chosen.items()},
        },
        "breakdown": {
            "currency": breakdown.currency,
            "lineItems": [
                {
                    "stepId": line.step_id,
                    "optionId": line.option_id,
                    "label": line.label,
                    "quantity": str(line.quantity),
                    "unitPriceExclTax": _money(line.unit_price_excl_tax),
                    "taxRatePercent": str(line.tax_rate_percent),
                    "lineTotalExclTax": _money(line.line_total_excl_tax),
                    "lineTax": _money(line.line_tax),
                }
                for line in breakdown.line_items
            ],
            "subtotalExclTax": _money(breakdown.subtotal_excl_tax),
            "appliedDiscounts": [
                {"campaignId": d.campaign_id, "name": d.name, "amount": _money(d.amount)}
                for d in breakdown.applied_discounts
            ],
            "totalDiscount": _money(breakdown.total_discount),
            "subtotalAfterDiscount": _money(breakdown.subtotal_after_discount),
            "totalTax": _money(breakdown.total_tax),
            "totalInclTax": _money(breakdown.total_incl_tax),
        },
    }


def quote_from_dict(data: dict[str, Any]) -> Quote:
    """Inverse of quote_to_dict()."""
    raw = data["breakdown"]
    breakdown = PriceBreakdown(
        line_items=tuple(
            LineItem(
                step_id=line["stepId"],
                option_id=line["optionId"],
                label=line["label"],
                quantity=Decimal(line["quantity"]),
                unit_price_excl_tax=Decimal(line["unitPriceExclTax"]),
                tax_rate_percent=Decimal(line["taxRatePercent"]),
                line_total_excl_tax=Decimal(line["lineTotalExclTax"]),
                line_tax=Decimal(line["lineTax"]),
            )
            for line in raw["lineItems"]
        ),
        subtotal_excl_tax=Decimal(raw["subtotalExclTax"]),
        total_tax=Decimal(raw["totalTax"]),
        total_incl_tax=Decimal(raw["totalInclTax"]),
        currency=raw["currency"],
        applied_discounts=tuple(
            AppliedDiscount(campaign_id=d["campaignId"], amount=Decimal(d["amount"]), name=d.get("name", ""))
            for d in raw["appliedDiscounts"]
        ),
    )
    customer = data.get("customer")
    return Quote(
        id=data["id"],
        product_id=data["productId"],
        selection=Selection(
            product_id=data["selection"]["productId"],
            chosen={k: tuple(v) for k, v in data["selection"]["chosen"].items()},
        ),
        breakdown=breakdown,
        created_at=datetime.fromisoformat(data["createdAt"]),
        valid_until=datetime.fromisoformat(data["validUntil"]),
        customer=None
        if customer is None
        else Customer(
            email=customer.get("email", ""),
            name=customer.get("name", ""),
            phone=customer.get("phone", ""),
            company=customer.get("company", ""),
            delivery_location=customer.get("deliveryLocation", ""),
        ),
        status=QuoteStatus(data["status"]),
        notes=data.get("notes", ""),
    )
