"""
Product configuration model.

A ProductConfiguration is the ordered list of wizard steps for one
sellable product. Step order is wizard order and drives line-item order
in every breakdown priced from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from quoteman.exceptions import ConfigurationError
from quoteman.result import Result


class ViolationKind(str, Enum):
    DUPLICATE_STEP_ID = "DUPLICATE_STEP_ID"
    DUPLICATE_OPTION_ID = "DUPLICATE_OPTION_ID"
    REQUIRED_STEP_WITH_NO_OPTIONS = "REQUIRED_STEP_WITH_NO_OPTIONS"
    OPTION_MISSING_PRICE_SOURCE = "OPTION_MISSING_PRICE_SOURCE"
    INVALID_QUANTITY = "INVALID_QUANTITY"


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    step_id: str
    option_id: str | None = None


@dataclass(frozen=True)
class Option:
    """One choice within a step.

    Price source: ``price_override_excl_tax`` wins over the linked
    catalog item. Tax rate: ``tax_rate_percent`` wins over the catalog
    snapshot's rate; 0 when neither is known.
    """

    id: str
    label: str
    catalog_item_id: int | None = None
    price_override_excl_tax: Decimal | None = None
    is_default: bool = False
    quantity: Decimal = Decimal("1")
    tax_rate_percent: Decimal | None = None
    description: str = ""

    @property
    def has_price_source(self) -> bool:
        return self.catalog_item_id is not None or self.price_override_excl_tax is not None


@dataclass(frozen=True)
class Step:
    id: str
    name: str
    options: tuple[Option, ...] = ()
    required: bool = False
    allow_multiple: bool = False
    description: str = ""

    def option(self, option_id: str) -> Option | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    @property
    def option_ids(self) -> tuple[str, ...]:
        return tuple(opt.id for opt in self.options)


@dataclass(frozen=True)
class ProductConfiguration:
    product_id: str
    steps: tuple[Step, ...] = ()
    name: str = ""
    currency: str = "GBP"

    def step(self, step_id: str) -> Step | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def option(self, step_id: str, option_id: str) -> Option | None:
        step = self.step(step_id)
        return step.option(option_id) if step else None

    @property
    def step_ids(self) -> tuple[str, ...]:
        return tuple(step.id for step in self.steps)

    def catalog_item_ids(self) -> list[int]:
        """Catalog ids referenced by options, first occurrence order."""
        ids: list[int] = []
        for step in self.steps:
            for opt in step.options:
                if opt.catalog_item_id is not None and opt.catalog_item_id not in ids:
                    ids.append(opt.catalog_item_id)
        return ids

    def default_selection(self) -> dict[str, tuple[str, ...]]:
        """Options flagged as default, keyed by step, for pre-filling the wizard."""
        chosen = {}
        for step in self.steps:
            defaults = tuple(opt.id for opt in step.options if opt.is_default)
            if not step.allow_multiple:
                defaults = defaults[:1]
            if defaults:
                chosen[step.id] = defaults
        return chosen

    def validate(self) -> list[Violation]:
        """Return structural problems; empty list means usable for pricing."""
        violations: list[Violation] = []
        seen_steps: set[str] = set()

        for step in self.steps:
            if step.id in seen_steps:
                violations.append(Violation(ViolationKind.DUPLICATE_STEP_ID, step.id))
            seen_steps.add(step.id)

            if step.required and not step.options:
                violations.append(
                    Violation(ViolationKind.REQUIRED_STEP_WITH_NO_OPTIONS, step.id)
                )

            seen_options: set[str] = set()
            for opt in step.options:
                if opt.id in seen_options:
                    violations.append(
                        Violation(ViolationKind.DUPLICATE_OPTION_ID, step.id, opt.id)
                    )
                seen_options.add(opt.id)
                if not opt.has_price_source:
                    violations.append(
                        Violation(ViolationKind.OPTION_MISSING_PRICE_SOURCE, step.id, opt.id)
                    )
                if Decimal(opt.quantity) <= 0:
                    violations.append(
                        Violation(ViolationKind.INVALID_QUANTITY, step.id, opt.id)
                    )

        return violations


def ensure_valid(config: ProductConfiguration) -> Result[ProductConfiguration]:
    """Wrap ``config.validate()`` into a Result carrying a ConfigurationError."""
    violations = config.validate()
    if not violations:
        return Result.success(config)

    first = violations[0]
    data = {"product_id": config.product_id, "step_id": first.step_id}
    if first.option_id is not None:
        data["option_id"] = first.option_id
    data["violations"] = [
        {"kind": v.kind.value, "step_id": v.step_id, "option_id": v.option_id}
        for v in violations
    ]
    return Result.failure(ConfigurationError(first.kind.value, **data))
