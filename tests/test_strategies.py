"""
Tests for `domain/strategies.py`.

Covers contract rules:
- DirectDiscount: percentage of the target subtotal, or a fixed amount capped at it.
- FixedQuantity (NxM): per complete group of N units, the cheapest N-M are free.
- ConditionalCombo: trigger units unlock a percentage off the targets; without
  TRIGGER scope entries the percentage applies directly.
- Quantities are handled per line item, never expanded unit by unit.
- FixedPricePerQuantity: N target units sold together at a pack price.
- Every outcome is capped at the target subtotal; extras never count.
- Invalid parameters fail at construction.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from domain.discount import DiscountMode
from domain.errors import InvalidPromotionConfiguration, PricingComputationError
from domain.order import LineItemExtra
from domain.scope import ScopeMatch
from domain.strategies import (
    ConditionalCombo,
    DirectDiscount,
    FixedPricePerQuantity,
    FixedQuantity,
    apply_strategy,
    require_strategy,
)


def test_two_for_one_on_two_units_gives_one_free(make_item) -> None:
    """Verify 2x1 with 2 units at 500.00 discounts 500.00 on that item."""

    item = make_item(uuid4(), quantity=2, unit_price="500.00")
    outcome = apply_strategy(FixedQuantity(take_quantity=2, pay_quantity=1), ScopeMatch(target_items=(item,)))

    assert outcome.amount == Decimal("500.00")
    assert outcome.item_id == item.item_id


def test_fixed_quantity_counts_only_complete_groups(make_item) -> None:
    """Verify 3x2 on 7 units frees 2 units, not 3."""

    item = make_item(uuid4(), quantity=7, unit_price="100.00")
    outcome = apply_strategy(FixedQuantity(take_quantity=3, pay_quantity=2), ScopeMatch(target_items=(item,)))

    assert outcome.amount == Decimal("200.00")


def test_fixed_quantity_frees_cheapest_unit_of_each_group(make_item) -> None:
    """Verify the free unit is the cheapest of its group across line items."""

    product = uuid4()
    expensive = make_item(product, quantity=1, unit_price="1000.00")
    cheap = make_item(product, quantity=1, unit_price="800.00")
    outcome = apply_strategy(
        FixedQuantity(take_quantity=2, pay_quantity=1),
        ScopeMatch(target_items=(expensive, cheap)),
    )

    assert outcome.amount == Decimal("800.00")
    assert outcome.item_id == cheap.item_id


def test_fixed_quantity_orders_runs_by_price(make_item) -> None:
    """Verify 3x2 over 2 units at 1000.00 and 2 at 800.00 frees one 800.00 unit."""

    product = uuid4()
    cheap = make_item(product, quantity=2, unit_price="800.00")
    expensive = make_item(product, quantity=2, unit_price="1000.00")
    outcome = apply_strategy(
        FixedQuantity(take_quantity=3, pay_quantity=2),
        ScopeMatch(target_items=(cheap, expensive)),
    )

    assert outcome.amount == Decimal("800.00")
    assert outcome.item_id == cheap.item_id


def test_fixed_quantity_spreads_free_units_over_runs(make_item) -> None:
    """Verify 2x1 over 3 units at 1000.00 and 3 at 800.00 frees 1000.00 + 2 x 800.00."""

    product = uuid4()
    expensive = make_item(product, quantity=3, unit_price="1000.00")
    cheap = make_item(product, quantity=3, unit_price="800.00")
    outcome = apply_strategy(
        FixedQuantity(take_quantity=2, pay_quantity=1),
        ScopeMatch(target_items=(expensive, cheap)),
    )

    assert outcome.amount == Decimal("2600.00")
    assert outcome.item_id is None


def test_large_quantities_are_priced_without_expanding_units(make_item) -> None:
    """Verify strategies handle millions of units on a single line item."""

    item = make_item(uuid4(), quantity=2_000_000, unit_price="100.00")
    match = ScopeMatch(target_items=(item,))

    two_for_one = apply_strategy(FixedQuantity(take_quantity=2, pay_quantity=1), match)
    ten_percent = apply_strategy(DirectDiscount(mode=DiscountMode.PERCENTAGE, value=Decimal("10")), match)
    pack = apply_strategy(FixedPricePerQuantity(activation_quantity=1_000_000, pack_price=Decimal("1.00")), match)

    assert two_for_one.amount == Decimal("100000000.00")
    assert ten_percent.amount == Decimal("20000000.00")
    assert pack.amount == Decimal("99999999.00")


def test_repeated_target_item_is_rejected(make_item) -> None:
    """Verify a line item matched twice as TARGET is a computation error."""

    item = make_item(uuid4(), quantity=2)

    with pytest.raises(PricingComputationError):
        apply_strategy(FixedQuantity(take_quantity=2, pay_quantity=1), ScopeMatch(target_items=(item, item)))


def test_fixed_quantity_groups_per_product(make_item) -> None:
    """Verify units of different products do not form a group together."""

    outcome = apply_strategy(
        FixedQuantity(take_quantity=2, pay_quantity=1),
        ScopeMatch(target_items=(make_item(uuid4()), make_item(uuid4()))),
    )

    assert outcome.amount == Decimal("0.00")


def test_direct_percentage_over_target_subtotal(make_item) -> None:
    """Verify 10% over targets worth 1200.00 is 120.00 and spans the order."""

    match = ScopeMatch(
        target_items=(
            make_item(uuid4(), quantity=2, unit_price="400.00"),
            make_item(uuid4(), quantity=1, unit_price="400.00"),
        )
    )
    outcome = apply_strategy(DirectDiscount(mode=DiscountMode.PERCENTAGE, value=Decimal("10")), match)

    assert outcome.amount == Decimal("120.00")
    assert outcome.item_id is None


def test_direct_fixed_amount_is_capped_at_target_subtotal(make_item) -> None:
    """Verify a fixed discount never exceeds what it discounts."""

    match = ScopeMatch(target_items=(make_item(uuid4(), quantity=3, unit_price="400.00"),))
    outcome = apply_strategy(DirectDiscount(mode=DiscountMode.FIXED_AMOUNT, value=Decimal("5000")), match)

    assert outcome.amount == Decimal("1200.00")


def test_direct_discount_ignores_extras(make_item) -> None:
    """Verify extras are not part of the discounted base."""

    extra = LineItemExtra(extra_id=uuid4(), name="Ice cream", unit_price=Decimal("300.00"))
    match = ScopeMatch(target_items=(make_item(uuid4(), quantity=1, unit_price="1000.00", extras=[extra]),))
    outcome = apply_strategy(DirectDiscount(mode=DiscountMode.PERCENTAGE, value=Decimal("100")), match)

    assert outcome.amount == Decimal("1000.00")


def test_conditional_combo_requires_trigger_units(make_item) -> None:
    """Verify the benefit only applies once enough trigger units are present."""

    strategy = ConditionalCombo(minimum_trigger_quantity=2, benefit_percentage=Decimal("50"))
    dessert = make_item(uuid4(), quantity=1, unit_price="600.00")

    not_enough = ScopeMatch(
        trigger_items=(make_item(uuid4(), quantity=1),),
        target_items=(dessert,),
        has_trigger_entries=True,
    )
    none_in_order = ScopeMatch(target_items=(dessert,), has_trigger_entries=True)
    enough = ScopeMatch(
        trigger_items=(make_item(uuid4(), quantity=2),),
        target_items=(dessert,),
        has_trigger_entries=True,
    )

    assert apply_strategy(strategy, not_enough).amount == Decimal("0.00")
    assert apply_strategy(strategy, none_in_order).amount == Decimal("0.00")

    outcome = apply_strategy(strategy, enough)
    assert outcome.amount == Decimal("300.00")
    assert outcome.item_id == dessert.item_id


def test_conditional_combo_without_trigger_entries_applies_directly(make_item) -> None:
    """Verify a combo whose scope has no TRIGGER entries discounts the targets."""

    strategy = ConditionalCombo(minimum_trigger_quantity=2, benefit_percentage=Decimal("50"))
    dessert = make_item(uuid4(), quantity=1, unit_price="600.00")

    outcome = apply_strategy(strategy, ScopeMatch(target_items=(dessert,)))

    assert outcome.amount == Decimal("300.00")
    assert outcome.item_id == dessert.item_id


def test_fixed_price_per_quantity_sells_cheapest_pack(make_item) -> None:
    """Verify 3 units for 1000.00 over the cheapest 3 target units."""

    strategy = FixedPricePerQuantity(activation_quantity=3, pack_price=Decimal("1000.00"))
    cheap = make_item(uuid4(), quantity=3, unit_price="500.00")
    expensive = make_item(uuid4(), quantity=1, unit_price="900.00")

    outcome = apply_strategy(strategy, ScopeMatch(target_items=(expensive, cheap)))

    assert outcome.amount == Decimal("500.00")
    assert outcome.item_id == cheap.item_id


def test_fixed_price_per_quantity_needs_activation_and_a_saving(make_item) -> None:
    """Verify no discount below the activation quantity or when the pack costs more."""

    strategy = FixedPricePerQuantity(activation_quantity=3, pack_price=Decimal("1000.00"))

    too_few = ScopeMatch(target_items=(make_item(uuid4(), quantity=2, unit_price="500.00"),))
    no_saving = ScopeMatch(target_items=(make_item(uuid4(), quantity=3, unit_price="300.00"),))

    assert apply_strategy(strategy, too_few).amount == Decimal("0.00")
    assert apply_strategy(strategy, no_saving).amount == Decimal("0.00")


def test_strategy_parameters_are_validated() -> None:
    """Verify invalid strategy configurations fail at construction."""

    with pytest.raises(InvalidPromotionConfiguration):
        FixedQuantity(take_quantity=2, pay_quantity=2)

    with pytest.raises(InvalidPromotionConfiguration):
        FixedQuantity(take_quantity=3, pay_quantity=0)

    with pytest.raises(InvalidPromotionConfiguration):
        DirectDiscount(mode=DiscountMode.PERCENTAGE, value=Decimal("120"))

    with pytest.raises(InvalidPromotionConfiguration):
        DirectDiscount(mode=DiscountMode.FIXED_AMOUNT, value=Decimal("0"))

    with pytest.raises(InvalidPromotionConfiguration):
        ConditionalCombo(minimum_trigger_quantity=0, benefit_percentage=Decimal("10"))

    with pytest.raises(InvalidPromotionConfiguration):
        FixedPricePerQuantity(activation_quantity=1, pack_price=Decimal("100"))

    with pytest.raises(InvalidPromotionConfiguration):
        require_strategy(object())
