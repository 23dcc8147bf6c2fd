"""
Domain: Discount records.

One record type covers every negative adjustment to an order's total,
automatic (PROMOTION) or manual (MANUAL).

Contract excerpts implemented here:
- A discount is attached to exactly one order.
- Promotion reference is present iff origin = PROMOTION.
- Target item reference is present iff scope = ITEM.
- Manual discounts carry the acting user and an optional reason.
- The monetary amount is stored explicitly and frozen when applied; it is
  never re-derived from the rule that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from .errors import InvalidDiscountValue
from .money import ZERO, Percentage, money
from .time import require_aware_timestamp


class DiscountOrigin(str, Enum):
    PROMOTION = "PROMOTION"
    MANUAL = "MANUAL"


class DiscountScope(str, Enum):
    ITEM = "ITEM"
    TOTAL = "TOTAL"


class DiscountMode(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


@dataclass(frozen=True, slots=True)
class Discount:
    """
    Immutable discount layer of an order.

    Build through `Discount.from_promotion` or `Discount.manual`; the
    constructor validates every cross-field invariant and fails fast.
    """

    order_id: UUID
    origin: DiscountOrigin
    scope: DiscountScope
    amount: Decimal
    applied_at: datetime
    item_id: Optional[UUID] = None
    promotion_id: Optional[UUID] = None
    promotion_name: Optional[str] = None
    mode: Optional[DiscountMode] = None
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    user_id: Optional[UUID] = None
    reason: Optional[str] = None
    discount_id: Optional[UUID] = None

    def __post_init__(self) -> None:
        require_aware_timestamp("applied_at", self.applied_at)

        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            raise InvalidDiscountValue(f"Discount amount must be a Decimal, got {self.amount!r}")
        if self.amount < ZERO:
            raise InvalidDiscountValue(f"Discount amount cannot be negative: {self.amount}")
        try:
            object.__setattr__(self, "amount", money(self.amount))
        except ValueError as exc:
            raise InvalidDiscountValue(f"Discount amount is out of range: {self.amount}") from exc

        if self.origin is DiscountOrigin.PROMOTION:
            if self.promotion_id is None:
                raise InvalidDiscountValue("Promotion discounts require promotion_id")
            if self.user_id is not None:
                raise InvalidDiscountValue("Promotion discounts have no acting user")
        else:
            if self.promotion_id is not None or self.promotion_name is not None:
                raise InvalidDiscountValue("Manual discounts cannot reference a promotion")
            if self.user_id is None:
                raise InvalidDiscountValue("Manual discounts require the acting user_id")
            if self.mode is None:
                raise InvalidDiscountValue("Manual discounts require a mode")

        if self.scope is DiscountScope.ITEM and self.item_id is None:
            raise InvalidDiscountValue("ITEM discounts require item_id")
        if self.scope is DiscountScope.TOTAL and self.item_id is not None:
            raise InvalidDiscountValue("TOTAL discounts cannot reference an item")

        if self.percentage is not None:
            object.__setattr__(self, "percentage", Percentage(self.percentage).value)
        if self.fixed_amount is not None:
            if (
                not isinstance(self.fixed_amount, Decimal)
                or not self.fixed_amount.is_finite()
                or self.fixed_amount < ZERO
            ):
                raise InvalidDiscountValue(f"Fixed amount must be a non-negative Decimal: {self.fixed_amount!r}")
            try:
                object.__setattr__(self, "fixed_amount", money(self.fixed_amount))
            except ValueError as exc:
                raise InvalidDiscountValue(f"Fixed amount is out of range: {self.fixed_amount}") from exc

        if self.mode is DiscountMode.PERCENTAGE and self.percentage is None:
            raise InvalidDiscountValue("PERCENTAGE discounts require a percentage value")
        if self.mode is DiscountMode.FIXED_AMOUNT and self.fixed_amount is None:
            raise InvalidDiscountValue("FIXED_AMOUNT discounts require a fixed_amount value")

    @staticmethod
    def from_promotion(
        *,
        order_id: UUID,
        promotion_id: UUID,
        promotion_name: str,
        amount: Decimal,
        applied_at: datetime,
        item_id: Optional[UUID] = None,
        mode: Optional[DiscountMode] = None,
        percentage: Optional[Decimal] = None,
        fixed_amount: Optional[Decimal] = None,
    ) -> "Discount":
        return Discount(
            order_id=order_id,
            origin=DiscountOrigin.PROMOTION,
            scope=DiscountScope.ITEM if item_id is not None else DiscountScope.TOTAL,
            amount=amount,
            applied_at=applied_at,
            item_id=item_id,
            promotion_id=promotion_id,
            promotion_name=promotion_name,
            mode=mode,
            percentage=percentage,
            fixed_amount=fixed_amount,
        )

    @staticmethod
    def manual(
        *,
        order_id: UUID,
        mode: DiscountMode,
        value: Decimal,
        amount: Decimal,
        user_id: UUID,
        applied_at: datetime,
        reason: Optional[str] = None,
        item_id: Optional[UUID] = None,
        discount_id: Optional[UUID] = None,
    ) -> "Discount":
        return Discount(
            order_id=order_id,
            origin=DiscountOrigin.MANUAL,
            scope=DiscountScope.ITEM if item_id is not None else DiscountScope.TOTAL,
            amount=amount,
            applied_at=applied_at,
            item_id=item_id,
            mode=mode,
            percentage=value if mode is DiscountMode.PERCENTAGE else None,
            fixed_amount=value if mode is DiscountMode.FIXED_AMOUNT else None,
            user_id=user_id,
            reason=reason,
            discount_id=discount_id,
        )

    def description(self) -> str:
        """Human-readable label used on tickets and audit trails."""

        if self.origin is DiscountOrigin.PROMOTION:
            return f"Promotion: {self.promotion_name or self.promotion_id}"
        if self.mode is DiscountMode.PERCENTAGE:
            label = f"Manual discount {self.percentage}%"
        else:
            label = f"Manual discount ${self.fixed_amount}"
        return f"{label} ({self.reason})" if self.reason else label


__all__ = [
    "Discount",
    "DiscountMode",
    "DiscountOrigin",
    "DiscountScope",
]
