"""Price value object attached to every task."""

import random
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from image_service.errors import InvalidArgument

MIN_PRICE = Decimal("5")
MAX_PRICE = Decimal("50")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Price:
    """Immutable amount in [MIN_PRICE, MAX_PRICE] with two-decimal precision."""

    value: Decimal

    @classmethod
    def random(cls) -> "Price":
        """Generate a random price within the allowed range."""
        raw = Decimal(str(random.uniform(float(MIN_PRICE), float(MAX_PRICE))))
        value = raw.quantize(_CENTS, rounding=ROUND_HALF_UP)
        # quantizing can push a value just above the upper bound
        return cls(min(max(value, MIN_PRICE), MAX_PRICE))

    @classmethod
    def from_value(cls, value: Decimal | float | int | str) -> "Price":
        """Rebuild a price from a persisted value, re-validating the range."""
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidArgument(f"Invalid price value: {value!r}") from exc
        if not amount.is_finite() or amount < MIN_PRICE or amount > MAX_PRICE:
            raise InvalidArgument(f"Price must be between {MIN_PRICE} and {MAX_PRICE}")
        return cls(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        return str(self.value)
