"""
Domain: Order snapshot and line items.

Contract excerpts implemented here:
- A line item's unit price and its extras' prices are snapshots captured when
  the item was added; later catalog edits never change them.
- Quantity is an integer > 0.
- Items are ground truth; discounts are layers on top; the total is never
  stored on the order and never used to recompute items.
- An order snapshot keeps items in insertion order.

This module contains only pure value objects: no I/O, no frameworks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from .discount import Discount, DiscountOrigin, DiscountScope
from .errors import InvalidOrderSnapshot
from .money import ZERO, money, multiply_by_quantity, total


def _snapshot_price(name: str, value: Decimal) -> Decimal:
    if not isinstance(value, Decimal):
        raise InvalidOrderSnapshot(f"{name} must be a Decimal snapshot, got {type(value).__name__}")
    if not value.is_finite() or value < ZERO:
        raise InvalidOrderSnapshot(f"{name} must be >= 0, got {value}")
    try:
        return money(value)
    except ValueError as exc:
        raise InvalidOrderSnapshot(f"{name} is out of range: {value}") from exc


@dataclass(frozen=True, slots=True)
class LineItemExtra:
    """An add-on attached to a line item, priced once per unit of the item."""

    extra_id: UUID
    name: str
    unit_price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", _snapshot_price("extra unit_price", self.unit_price))


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    Snapshot-priced entry of an order.

    Extras are charged per unit of the item but are invisible to promotions:
    they are never discounted and never counted as trigger or target units.
    """

    item_id: UUID
    product_id: UUID
    quantity: int
    unit_price: Decimal
    category_id: Optional[UUID] = None
    product_name: str = ""
    note: Optional[str] = None
    extras: Tuple[LineItemExtra, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidOrderSnapshot(f"quantity must be an integer, got {self.quantity!r}")
        if self.quantity <= 0:
            raise InvalidOrderSnapshot(f"quantity must be > 0, got {self.quantity}")
        object.__setattr__(self, "unit_price", _snapshot_price("unit_price", self.unit_price))
        object.__setattr__(self, "extras", tuple(self.extras))

    def base_total(self) -> Decimal:
        """unit_price x quantity, the only amount promotions ever see."""

        return multiply_by_quantity(self.unit_price, self.quantity)

    def extras_total(self) -> Decimal:
        return total(multiply_by_quantity(extra.unit_price, self.quantity) for extra in self.extras)

    def line_total(self) -> Decimal:
        return self.base_total() + self.extras_total()

    def with_quantity(self, quantity: int) -> "LineItem":
        return replace(self, quantity=quantity)

    def with_extra(self, extra: LineItemExtra) -> "LineItem":
        return replace(self, extras=self.extras + (extra,))


@dataclass(frozen=True, slots=True)
class OrderSnapshot:
    """
    Read-only view of an order handed to the pricing core.

    Validation here is what lets repricing refuse a malformed order instead
    of producing a wrong breakdown.
    """

    order_id: UUID
    local_id: UUID
    items: Tuple[LineItem, ...] = ()
    discounts: Tuple[Discount, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "discounts", tuple(self.discounts))

        seen = set()
        for item in self.items:
            if not isinstance(item, LineItem):
                raise InvalidOrderSnapshot(f"Order items must be LineItem, got {type(item).__name__}")
            if item.item_id in seen:
                raise InvalidOrderSnapshot(f"Duplicate line item id {item.item_id}")
            seen.add(item.item_id)

        for discount in self.discounts:
            if discount.order_id != self.order_id:
                raise InvalidOrderSnapshot(
                    f"Discount belongs to order {discount.order_id}, not {self.order_id}"
                )
            if discount.scope is DiscountScope.ITEM and discount.item_id not in seen:
                raise InvalidOrderSnapshot(
                    f"Discount targets item {discount.item_id} which is not in order {self.order_id}"
                )

    def find_item(self, item_id: UUID) -> Optional[LineItem]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def quantity_of(self, product_id: UUID) -> int:
        """Aggregate quantity of a product across all line items."""

        return sum(item.quantity for item in self.items if item.product_id == product_id)

    def items_base_subtotal(self) -> Decimal:
        """Pre-discount subtotal without extras; what minimum-amount triggers compare against."""

        return total(item.base_total() for item in self.items)

    def subtotal(self) -> Decimal:
        """Sum of line totals including extras."""

        return total(item.line_total() for item in self.items)

    def manual_discounts(self) -> Tuple[Discount, ...]:
        return tuple(d for d in self.discounts if d.origin is DiscountOrigin.MANUAL)

    def with_items(self, *items: LineItem) -> "OrderSnapshot":
        return replace(self, items=self.items + tuple(items))

    def with_discount(self, discount: Discount) -> "OrderSnapshot":
        return replace(self, discounts=self.discounts + (discount,))


__all__ = [
    "LineItemExtra",
    "LineItem",
    "OrderSnapshot",
]
