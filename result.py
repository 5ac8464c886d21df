"""Tagged success/error result returned by the pricing core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from quoteman.exceptions import QuotemanError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a core operation.

    Exactly one of ``value`` / ``error`` is meaningful. Callers branch on
    ``ok`` and read ``error.code`` to decide what to show the user:

        result = normalize(config, {"heater": ["h1"]})
        if not result.ok:
            return {"error": result.error.as_dict()}
        selection = result.value
    """

    value: T | None = None
    error: QuotemanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: QuotemanError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value
