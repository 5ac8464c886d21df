"""
Selection validator.

normalize() turns whatever the wizard posted into a canonical Selection:
only known steps, in configuration order, options deduplicated and in
the order they are declared within their step.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from quoteman.configuration import ProductConfiguration
from quoteman.exceptions import ValidationError
from quoteman.result import Result


@dataclass(frozen=True)
class Selection:
    product_id: str
    chosen: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view so the selection stays hashable.
        object.__setattr__(
            self, "chosen", MappingProxyType({step_id: tuple(ids) for step_id, ids in self.chosen.items()})
        )

    def __hash__(self):
        return hash((self.product_id, tuple(self.chosen.items())))

    def options_for(self, step_id: str) -> tuple[str, ...]:
        return self.chosen.get(step_id, ())

    @property
    def is_empty(self) -> bool:
        return not any(self.chosen.values())


RawSelection = Selection | Mapping[str, Iterable[str]]


def _as_mapping(raw: RawSelection) -> Mapping[str, Iterable[str]]:
    if isinstance(raw, Selection):
        return raw.chosen
    return raw or {}


def _dedupe(option_ids: Iterable[str] | str | None) -> list[str]:
    if option_ids is None:
        return []
    if isinstance(option_ids, str):
        option_ids = [option_ids]
    seen: list[str] = []
    for option_id in option_ids:
        if option_id not in seen:
            seen.append(option_id)
    return seen


def normalize(config: ProductConfiguration, raw_selection: RawSelection) -> Result[Selection]:
    """
    Validate and canonicalize a selection against a configuration.

    Args:
        config: Product configuration the selection was made for.
        raw_selection: Selection, or mapping step_id -> option ids.

    Returns:
        Result with the canonical Selection, or a ValidationError:
        UNKNOWN_OPTION, TOO_MANY_OPTIONS_SELECTED, MISSING_REQUIRED_STEP
        or PRODUCT_MISMATCH.
    """
    if isinstance(raw_selection, Selection) and raw_selection.product_id != config.product_id:
        return Result.failure(
            ValidationError(
                "PRODUCT_MISMATCH",
                product_id=config.product_id,
                selection_product_id=raw_selection.product_id,
            )
        )

    raw = {step_id: _dedupe(option_ids) for step_id, option_ids in _as_mapping(raw_selection).items()}

    # Options on steps the configuration does not know about.
    for step_id, option_ids in raw.items():
        if config.step(step_id) is None and option_ids:
            return Result.failure(
                ValidationError("UNKNOWN_OPTION", step_id=step_id, option_id=option_ids[0])
            )

    chosen: dict[str, tuple[str, ...]] = {}
    for step in config.steps:
        picked = raw.get(step.id, [])

        for option_id in picked:
            if step.option(option_id) is None:
                return Result.failure(
                    ValidationError("UNKNOWN_OPTION", step_id=step.id, option_id=option_id)
                )

        if not step.allow_multiple and len(picked) > 1:
            return Result.failure(
                ValidationError(
                    "TOO_MANY_OPTIONS_SELECTED",
                    step_id=step.id,
                    option_ids=list(picked),
                )
            )

        if step.required and not picked:
            return Result.failure(ValidationError("MISSING_REQUIRED_STEP", step_id=step.id))

        if picked:
            chosen[step.id] = tuple(oid for oid in step.option_ids if oid in picked)

    return Result.success(Selection(product_id=config.product_id, chosen=chosen))
