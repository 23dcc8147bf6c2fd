"""
Order pricing service.

The only place in the system allowed to compute an order total. Given an order
snapshot, the local's promotion catalog and a clock, it returns a complete
price breakdown:

- subtotal: items plus extras, recomputed from item snapshots every time
- promotion discounts: recomputed by the promotion engine
- manual discounts: taken as-is from the order (amounts frozen at creation)
- total discount: sum of both layers, never above the subtotal
- total: subtotal - total discount, never below zero

No side effects: persisting the discount records is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from domain.discount import Discount, DiscountOrigin, DiscountScope
from domain.errors import InvalidOrderSnapshot
from domain.money import clamp_non_negative, clamp_to, total
from domain.order import OrderSnapshot
from domain.time import Clock, require_aware_timestamp, to_operating_time
from services.promotion_engine import evaluate_promotions
from services.settings import get_settings


@dataclass(frozen=True, slots=True)
class EconomicAdjustment:
    """
    One line of the discount trail shown on tickets and daily reports.
    """
    origin: DiscountOrigin
    scope: DiscountScope
    description: str
    amount: Decimal
    item_id: Optional[UUID] = None


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """
    Complete pricing result for one order at one instant.

    Invariants:
    - total == subtotal - total_discount
    - 0 <= total_discount <= subtotal
    """
    order_id: UUID
    evaluated_at: datetime
    subtotal: Decimal
    promotion_discounts: Tuple[Discount, ...]
    manual_discounts: Tuple[Discount, ...]
    total_discount: Decimal
    total: Decimal
    warnings: Tuple[str, ...] = ()

    @property
    def promotion_discount_total(self) -> Decimal:
        return total(d.amount for d in self.promotion_discounts)

    @property
    def manual_discount_total(self) -> Decimal:
        return total(d.amount for d in self.manual_discounts)

    @property
    def discounts(self) -> Tuple[Discount, ...]:
        """Promotion layer first, then manual layer."""
        return self.promotion_discounts + self.manual_discounts

    def adjustments(self) -> List[EconomicAdjustment]:
        return [
            EconomicAdjustment(
                origin=d.origin,
                scope=d.scope,
                description=d.description(),
                amount=d.amount,
                item_id=d.item_id,
            )
            for d in self.discounts
        ]


def price_at(
    order: OrderSnapshot,
    promotions: Iterable[object],
    instant: datetime,
) -> PriceBreakdown:
    """
    Compute the breakdown for an explicit evaluation instant.

    Args:
        order: Immutable order snapshot
        promotions: The local's promotion catalog
        instant: Aware instant already expressed in the operating timezone

    Returns:
        PriceBreakdown

    Raises:
        InvalidOrderSnapshot: If the snapshot cannot be priced at all
    """
    if not isinstance(order, OrderSnapshot):
        raise InvalidOrderSnapshot(f"Expected an OrderSnapshot, got {type(order).__name__}")
    require_aware_timestamp("instant", instant)

    try:
        subtotal = order.subtotal()
    except ValueError as exc:
        raise InvalidOrderSnapshot(f"Order {order.order_id} cannot be totalled: {exc}") from exc

    evaluation = evaluate_promotions(order, promotions, instant)
    manual = order.manual_discounts()

    all_amounts = [d.amount for d in evaluation.discounts] + [d.amount for d in manual]
    total_discount = clamp_to(total(all_amounts), subtotal)

    return PriceBreakdown(
        order_id=order.order_id,
        evaluated_at=instant,
        subtotal=subtotal,
        promotion_discounts=evaluation.discounts,
        manual_discounts=manual,
        total_discount=total_discount,
        total=clamp_non_negative(subtotal - total_discount),
        warnings=evaluation.warnings,
    )


def reprice(
    order: OrderSnapshot,
    promotions: Iterable[object],
    clock: Clock,
    operating_timezone: Optional[tzinfo] = None,
) -> PriceBreakdown:
    """
    Reprice an order: the single entry point of the pricing core.

    The clock is read exactly once; every trigger of the pass sees that same
    reading, localized to the operating timezone.

    Example:
        breakdown = reprice(order, catalog, SystemClock())
        print(f"Subtotal {breakdown.subtotal} - {breakdown.total_discount} = {breakdown.total}")
    """
    zone = operating_timezone or get_settings().operating_timezone
    instant = to_operating_time(clock.now(), zone)
    return price_at(order, promotions, instant)


__all__ = [
    "EconomicAdjustment",
    "PriceBreakdown",
    "price_at",
    "reprice",
]
