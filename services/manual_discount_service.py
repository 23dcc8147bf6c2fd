"""
Manual discount service.

Builds the frozen Discount record for a manual discount granted by a user
(percentage or fixed amount, optionally restricted to one line item).

The amount is computed once, here, against what is still left to pay after
the promotion layer and any earlier manual discounts:

- TOTAL scope: the breakdown's remaining total.
- ITEM scope: the item's line total minus discounts already on that item,
  never more than the remaining total.

Repricing later only sums the stored amount; it never recomputes it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from domain.discount import Discount, DiscountMode
from domain.errors import InvalidDiscountValue
from domain.money import ZERO, Percentage, clamp_non_negative, clamp_to, money, total
from domain.order import OrderSnapshot
from services.pricing_service import PriceBreakdown


def remaining_item_value(order: OrderSnapshot, breakdown: PriceBreakdown, item_id: UUID) -> Decimal:
    """Line total of an item minus every ITEM discount already attached to it."""

    item = order.find_item(item_id)
    if item is None:
        raise InvalidDiscountValue(f"Item {item_id} is not part of order {order.order_id}")
    already = total(d.amount for d in breakdown.discounts if d.item_id == item_id)
    return min(clamp_non_negative(item.line_total() - already), breakdown.total)


def calculate_manual_amount(mode: DiscountMode, value: Decimal, base: Decimal) -> Decimal:
    """
    Validate a manual discount value and compute its amount over a base.

    Raises:
        InvalidDiscountValue: percentage outside [0, 100] or negative fixed amount
    """
    if not isinstance(mode, DiscountMode):
        raise InvalidDiscountValue(f"Unknown discount mode: {mode!r}")
    if not isinstance(value, Decimal):
        raise InvalidDiscountValue(f"Discount value must be a Decimal, got {value!r}")

    if mode is DiscountMode.PERCENTAGE:
        return Percentage(value).of(base)

    if value < ZERO:
        raise InvalidDiscountValue(f"Fixed amount must be >= 0. Received: {value}")
    return clamp_to(money(value), base)


def apply_manual_discount(
    order: OrderSnapshot,
    breakdown: PriceBreakdown,
    *,
    mode: DiscountMode,
    value: Decimal,
    user_id: UUID,
    applied_at: datetime,
    reason: Optional[str] = None,
    item_id: Optional[UUID] = None,
    discount_id: Optional[UUID] = None,
) -> Discount:
    """
    Create a manual discount against the order's current breakdown.

    Args:
        order: The order snapshot the breakdown was computed from
        breakdown: Current breakdown (promotion layer already applied)
        mode: PERCENTAGE or FIXED_AMOUNT
        value: Percentage in [0, 100] or a non-negative amount
        user_id: Acting user, kept for audit
        applied_at: Aware application timestamp
        reason: Optional free-text justification
        item_id: Restrict the discount to one line item

    Returns:
        Discount with origin MANUAL and its amount frozen

    Example:
        breakdown = reprice(order, catalog, clock)
        discount = apply_manual_discount(
            order, breakdown, mode=DiscountMode.PERCENTAGE, value=Decimal("15"),
            user_id=cashier_id, applied_at=clock.now(), reason="Regular customer",
        )
        order = order.with_discount(discount)
    """
    if breakdown.order_id != order.order_id:
        raise InvalidDiscountValue(
            f"Breakdown belongs to order {breakdown.order_id}, not {order.order_id}"
        )

    if item_id is None:
        base = breakdown.total
    else:
        base = remaining_item_value(order, breakdown, item_id)

    amount = calculate_manual_amount(mode, value, base)

    return Discount.manual(
        order_id=order.order_id,
        mode=mode,
        value=value,
        amount=amount,
        user_id=user_id,
        applied_at=applied_at,
        reason=reason,
        item_id=item_id,
        discount_id=discount_id,
    )


__all__ = [
    "apply_manual_discount",
    "calculate_manual_amount",
    "remaining_item_value",
]
