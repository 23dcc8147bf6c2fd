"""
Domain: Promotion benefit strategies.

The catalog of strategies is closed:

- DirectDiscount: percentage or fixed amount off the target subtotal.
- FixedQuantity: NxM ("take 2, pay 1").
- ConditionalCombo: percentage off targets once trigger units reach a minimum.
- FixedPricePerQuantity: a pack of N target units sold at a fixed price.

Every strategy is a pure function of a ScopeMatch. Only snapshot unit prices
are used; extras are never discounted and never counted as units.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID

from .discount import DiscountMode
from .errors import InvalidPromotionConfiguration, PricingComputationError
from .money import ZERO, Percentage, clamp_non_negative, clamp_to, money, total
from .scope import ScopeMatch


class StrategyKind(str, Enum):
    DIRECT_DISCOUNT = "DIRECT_DISCOUNT"
    FIXED_QUANTITY = "FIXED_QUANTITY"
    CONDITIONAL_COMBO = "CONDITIONAL_COMBO"
    FIXED_PRICE_PER_QUANTITY = "FIXED_PRICE_PER_QUANTITY"


@dataclass(frozen=True, slots=True)
class StrategyOutcome:
    """
    Discount produced by a strategy.

    item_id is set when the whole benefit falls on a single line item, which
    makes the resulting discount ITEM-scoped.
    """

    amount: Decimal
    item_id: Optional[UUID] = None

    @staticmethod
    def nothing() -> "StrategyOutcome":
        return StrategyOutcome(amount=ZERO)


@dataclass(frozen=True, slots=True)
class _Run:
    """Consecutive identical units: one target line item."""

    price: Decimal
    position: int
    quantity: int
    item_id: UUID
    product_id: UUID


def _require_int(name: str, value: object, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidPromotionConfiguration(f"{name} must be an integer >= {minimum}, got {value!r}")


def _require_positive_decimal(name: str, value: object) -> Decimal:
    if not isinstance(value, Decimal) or not value.is_finite() or value <= ZERO:
        raise InvalidPromotionConfiguration(f"{name} must be a Decimal greater than zero, got {value!r}")
    return value


def _target_runs(match: ScopeMatch) -> List[_Run]:
    """One run per target item, in insertion order. Never expands quantities."""

    runs: List[_Run] = []
    seen = set()
    for position, item in enumerate(match.target_items):
        if item.item_id in seen:
            raise PricingComputationError(f"Line item {item.item_id} matched twice as TARGET")
        seen.add(item.item_id)
        if item.quantity <= 0 or item.unit_price < ZERO:
            raise PricingComputationError(f"Line item {item.item_id} has inconsistent quantity or price")
        runs.append(_Run(item.unit_price, position, item.quantity, item.item_id, item.product_id))
    return runs


def _single_item(item_ids) -> Optional[UUID]:
    distinct = set(item_ids)
    return next(iter(distinct)) if len(distinct) == 1 else None


@dataclass(frozen=True, slots=True)
class DirectDiscount:
    mode: DiscountMode
    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.mode, DiscountMode):
            raise InvalidPromotionConfiguration(f"Unknown discount mode: {self.mode!r}")
        _require_positive_decimal("value", self.value)
        if self.mode is DiscountMode.PERCENTAGE and self.value > Decimal("100"):
            raise InvalidPromotionConfiguration("Discount percentage cannot exceed 100%")

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.DIRECT_DISCOUNT

    def terms(self) -> Tuple[Optional[DiscountMode], Optional[Decimal], Optional[Decimal]]:
        if self.mode is DiscountMode.PERCENTAGE:
            return self.mode, self.value, None
        return self.mode, None, self.value

    def apply(self, match: ScopeMatch) -> StrategyOutcome:
        _target_runs(match)
        base = match.target_subtotal()
        if base <= ZERO:
            return StrategyOutcome.nothing()
        if self.mode is DiscountMode.PERCENTAGE:
            amount = Percentage(self.value).of(base)
        else:
            amount = clamp_to(money(self.value), base)
        return StrategyOutcome(amount, _single_item(item.item_id for item in match.target_items))


@dataclass(frozen=True, slots=True)
class FixedQuantity:
    """
    NxM: for every complete group of `take_quantity` units of the same
    product, the cheapest `take_quantity - pay_quantity` units are free.
    """

    take_quantity: int
    pay_quantity: int

    def __post_init__(self) -> None:
        _require_int("take_quantity", self.take_quantity, 1)
        _require_int("pay_quantity", self.pay_quantity, 1)
        if self.take_quantity <= self.pay_quantity:
            raise InvalidPromotionConfiguration(
                f"take_quantity ({self.take_quantity}) must be greater than pay_quantity ({self.pay_quantity})"
            )

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.FIXED_QUANTITY

    @property
    def free_per_group(self) -> int:
        return self.take_quantity - self.pay_quantity

    def terms(self) -> Tuple[Optional[DiscountMode], Optional[Decimal], Optional[Decimal]]:
        return None, None, None

    def _free_before(self, index: int) -> int:
        """Free units among the first `index` units of a price-ordered product."""
        groups, rest = divmod(index, self.take_quantity)
        return groups * self.free_per_group + max(0, rest - self.pay_quantity)

    def apply(self, match: ScopeMatch) -> StrategyOutcome:
        by_product: Dict[UUID, List[_Run]] = {}
        for run in _target_runs(match):
            by_product.setdefault(run.product_id, []).append(run)

        amounts: List[Decimal] = []
        free_items: List[UUID] = []
        for runs in by_product.values():
            ordered = sorted(runs, key=lambda r: (-r.price, r.position))
            grouped = sum(run.quantity for run in ordered) // self.take_quantity * self.take_quantity
            start = 0
            for run in ordered:
                end = min(start + run.quantity, grouped)
                if end > start:
                    free = self._free_before(end) - self._free_before(start)
                    if free:
                        amounts.append(run.price * free)
                        free_items.append(run.item_id)
                start += run.quantity

        if not amounts:
            return StrategyOutcome.nothing()
        return StrategyOutcome(total(amounts), _single_item(free_items))


@dataclass(frozen=True, slots=True)
class ConditionalCombo:
    """
    Combo: enough trigger units unlock a percentage off the targets.

    Without TRIGGER scope entries the benefit applies directly.
    """

    minimum_trigger_quantity: int
    benefit_percentage: Decimal

    def __post_init__(self) -> None:
        _require_int("minimum_trigger_quantity", self.minimum_trigger_quantity, 1)
        _require_positive_decimal("benefit_percentage", self.benefit_percentage)
        if self.benefit_percentage > Decimal("100"):
            raise InvalidPromotionConfiguration("Benefit percentage cannot exceed 100%")

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.CONDITIONAL_COMBO

    def terms(self) -> Tuple[Optional[DiscountMode], Optional[Decimal], Optional[Decimal]]:
        return DiscountMode.PERCENTAGE, self.benefit_percentage, None

    def apply(self, match: ScopeMatch) -> StrategyOutcome:
        _target_runs(match)
        if match.has_trigger_entries and match.trigger_units < self.minimum_trigger_quantity:
            return StrategyOutcome.nothing()
        base = match.target_subtotal()
        if base <= ZERO:
            return StrategyOutcome.nothing()
        amount = Percentage(self.benefit_percentage).of(base)
        return StrategyOutcome(amount, _single_item(item.item_id for item in match.target_items))


@dataclass(frozen=True, slots=True)
class FixedPricePerQuantity:
    """
    Pack price: once `activation_quantity` target units are present, the
    cheapest of them cost `pack_price` together. One pack per order; any
    further units keep their normal price.
    """

    activation_quantity: int
    pack_price: Decimal

    def __post_init__(self) -> None:
        _require_int("activation_quantity", self.activation_quantity, 2)
        _require_positive_decimal("pack_price", self.pack_price)

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.FIXED_PRICE_PER_QUANTITY

    def terms(self) -> Tuple[Optional[DiscountMode], Optional[Decimal], Optional[Decimal]]:
        return None, None, None

    def apply(self, match: ScopeMatch) -> StrategyOutcome:
        runs = _target_runs(match)
        if sum(run.quantity for run in runs) < self.activation_quantity:
            return StrategyOutcome.nothing()

        needed = self.activation_quantity
        pack_amounts: List[Decimal] = []
        pack_items: List[UUID] = []
        for run in sorted(runs, key=lambda r: (r.price, r.position)):
            if needed == 0:
                break
            taken = min(run.quantity, needed)
            pack_amounts.append(run.price * taken)
            pack_items.append(run.item_id)
            needed -= taken

        amount = clamp_non_negative(total(pack_amounts) - money(self.pack_price))
        if amount <= ZERO:
            return StrategyOutcome.nothing()
        return StrategyOutcome(amount, _single_item(pack_items))


Strategy = Union[DirectDiscount, FixedQuantity, ConditionalCombo, FixedPricePerQuantity]
STRATEGY_TYPES = (DirectDiscount, FixedQuantity, ConditionalCombo, FixedPricePerQuantity)


def require_strategy(value: object) -> Strategy:
    """Reject anything outside the closed strategy catalog."""

    if not isinstance(value, STRATEGY_TYPES):
        raise InvalidPromotionConfiguration(f"Unsupported strategy kind: {type(value).__name__}")
    return value


def apply_strategy(strategy: Strategy, match: ScopeMatch) -> StrategyOutcome:
    """
    Compute a strategy's outcome, capped at the target subtotal.

    Raises PricingComputationError for an unknown strategy or inconsistent data.
    """

    if not isinstance(strategy, STRATEGY_TYPES):
        raise PricingComputationError(f"Unsupported strategy kind: {type(strategy).__name__}")
    outcome = strategy.apply(match)
    capped = clamp_to(outcome.amount, match.target_subtotal())
    if capped != outcome.amount:
        return StrategyOutcome(capped, outcome.item_id)
    return outcome


__all__ = [
    "Strategy",
    "StrategyKind",
    "StrategyOutcome",
    "STRATEGY_TYPES",
    "DirectDiscount",
    "FixedQuantity",
    "ConditionalCombo",
    "FixedPricePerQuantity",
    "apply_strategy",
    "require_strategy",
]
