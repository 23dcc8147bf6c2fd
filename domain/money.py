"""
Domain: Monetary and percentage primitives (pure).

Contract excerpts implemented here:
- Money is an exact decimal with scale 2, rounded half-up at every computation boundary.
- Money is never built from binary floating point.
- Percentages live in the inclusive range [0, 100] and fail at construction otherwise.
- A discount is clamped so it never exceeds the amount it discounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

from .errors import InvalidDiscountValue

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
ONE_HUNDRED = Decimal("100")

MoneyInput = Union[Decimal, int, str]


def round_half_up(amount: Decimal) -> Decimal:
    """
    Round to cents using half-up (e.g. 0.005 -> 0.01).

    Raises ValueError when the amount has too many digits to be held in cents.
    """

    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount out of range: {amount}") from exc


def money(value: MoneyInput) -> Decimal:
    """
    Build a monetary amount rounded to cents.

    Accepts Decimal, int or a decimal string. Floats are rejected so binary
    rounding drift can never enter a total.
    """

    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Money cannot be built from {type(value).__name__}: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Money must be finite, got {value!r}")
    return round_half_up(amount)


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum amounts, starting from 0.00 so empty inputs keep the money scale."""

    result = ZERO
    for amount in amounts:
        result += amount
    return round_half_up(result)


def multiply_by_quantity(unit_price: Decimal, quantity: int) -> Decimal:
    return round_half_up(unit_price * quantity)


def clamp_non_negative(amount: Decimal) -> Decimal:
    return amount if amount > ZERO else ZERO


def clamp_to(amount: Decimal, ceiling: Decimal) -> Decimal:
    """Clamp a discount into [0, ceiling]."""

    return min(clamp_non_negative(amount), clamp_non_negative(ceiling))


@dataclass(frozen=True, slots=True)
class Percentage:
    """
    Percentage value object in [0, 100].

    Raises InvalidDiscountValue when out of range.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.value, (bool, float)) or not isinstance(self.value, (Decimal, int, str)):
            raise InvalidDiscountValue(f"Percentage must be a Decimal, got {self.value!r}")
        try:
            value = Decimal(str(self.value).strip()) if isinstance(self.value, str) else Decimal(self.value)
        except InvalidOperation as exc:
            raise InvalidDiscountValue(f"Percentage is not a decimal: {self.value!r}") from exc
        if not value.is_finite() or value < 0 or value > ONE_HUNDRED:
            raise InvalidDiscountValue(f"Percentage must be between 0 and 100. Received: {self.value}")
        object.__setattr__(self, "value", value)

    def of(self, amount: Decimal) -> Decimal:
        """value% of amount, rounded half-up to cents."""

        return round_half_up(amount * self.value / ONE_HUNDRED)

    def __str__(self) -> str:
        return f"{self.value}%"


def percentage_of(amount: Decimal, percentage: Percentage) -> Decimal:
    return percentage.of(amount)


__all__ = [
    "CENTS",
    "ZERO",
    "ONE_HUNDRED",
    "Percentage",
    "money",
    "total",
    "round_half_up",
    "multiply_by_quantity",
    "percentage_of",
    "clamp_non_negative",
    "clamp_to",
]
