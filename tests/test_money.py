"""
Tests for `domain/money.py`.

Covers contract rules:
- Money has scale 2 and rounds half-up.
- Money is never built from floats.
- Amounts too large to be held in cents are rejected with ValueError.
- Percentages live in [0, 100].
- Discounts are clamped to the amount they discount.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.errors import InvalidDiscountValue
from domain.money import ZERO, Percentage, clamp_to, money, multiply_by_quantity, total


def test_money_rounds_half_up_to_cents() -> None:
    """Verify half-up rounding at the cent boundary."""

    assert money("0.005") == Decimal("0.01")
    assert money("0.004") == Decimal("0.00")
    assert money(Decimal("10.125")) == Decimal("10.13")
    assert money(7) == Decimal("7.00")


def test_money_rejects_floats_and_bools() -> None:
    """Verify binary floating point can never become money."""

    with pytest.raises(TypeError):
        money(0.1)

    with pytest.raises(TypeError):
        money(True)

    with pytest.raises(ValueError):
        money("ten")


def test_total_of_empty_input_is_zero_with_money_scale() -> None:
    """Verify sums start at 0.00."""

    assert total([]) == ZERO
    assert str(total([])) == "0.00"
    assert total([Decimal("1.10"), Decimal("2.20")]) == Decimal("3.30")


def test_multiply_by_quantity_keeps_cents() -> None:
    """Verify unit price x quantity."""

    assert multiply_by_quantity(Decimal("333.33"), 3) == Decimal("999.99")


def test_percentage_range_is_enforced() -> None:
    """Verify percentages outside [0, 100] fail at construction."""

    assert Percentage(Decimal("0")).value == Decimal("0")
    assert Percentage(100).value == Decimal("100")
    assert Percentage("12.5").value == Decimal("12.5")

    with pytest.raises(InvalidDiscountValue):
        Percentage(Decimal("100.01"))

    with pytest.raises(InvalidDiscountValue):
        Percentage(Decimal("-1"))

    with pytest.raises(InvalidDiscountValue):
        Percentage("abc")

    with pytest.raises(InvalidDiscountValue):
        Percentage(15.0)


def test_percentage_of_amount_rounds_half_up() -> None:
    """Verify percentage application."""

    assert Percentage(Decimal("10")).of(Decimal("1200.00")) == Decimal("120.00")
    assert Percentage(Decimal("15")).of(Decimal("0.10")) == Decimal("0.02")
    assert Percentage(Decimal("33.33")).of(Decimal("100.00")) == Decimal("33.33")


def test_clamp_to_bounds_discount_between_zero_and_ceiling() -> None:
    """Verify a discount never exceeds its base nor goes negative."""

    assert clamp_to(Decimal("5000.00"), Decimal("1200.00")) == Decimal("1200.00")
    assert clamp_to(Decimal("-5.00"), Decimal("1200.00")) == ZERO
    assert clamp_to(Decimal("50.00"), Decimal("-10.00")) == ZERO
    assert clamp_to(Decimal("50.00"), Decimal("1200.00")) == Decimal("50.00")


def test_money_rejects_amounts_too_large_for_cents() -> None:
    """Verify an amount beyond the decimal precision is a ValueError, not a crash."""

    with pytest.raises(ValueError):
        money(Decimal("1E+30"))

    with pytest.raises(ValueError):
        multiply_by_quantity(Decimal("1E+24"), 10_000)
