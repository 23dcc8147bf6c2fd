"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Money values are serialized as decimal strings.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.discount import Discount, DiscountMode
from domain.order import LineItem, LineItemExtra, OrderSnapshot
from services.pricing_service import PriceBreakdown


# ============================================================================
# Order Snapshot Models
# ============================================================================

class LineItemExtraModel(BaseModel):
    """Add-on attached to a line item, with its price snapshot."""
    extra_id: UUID
    name: str = ""
    unit_price: Decimal = Field(..., ge=0)


class LineItemModel(BaseModel):
    """Line item as captured by the order (snapshot prices)."""
    item_id: UUID
    product_id: UUID
    category_id: Optional[UUID] = None
    product_name: str = ""
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    note: Optional[str] = None
    extras: List[LineItemExtraModel] = Field(default_factory=list)


class ManualDiscountModel(BaseModel):
    """Manual discount already applied to the order (amount frozen)."""
    discount_id: Optional[UUID] = None
    mode: DiscountMode
    value: Decimal
    amount: Decimal = Field(..., ge=0)
    user_id: UUID
    applied_at: datetime
    reason: Optional[str] = None
    item_id: Optional[UUID] = None


class OrderSnapshotRequest(BaseModel):
    """Order to reprice: items in insertion order plus manual discounts."""
    order_id: UUID
    items: List[LineItemModel] = Field(default_factory=list)
    manual_discounts: List[ManualDiscountModel] = Field(default_factory=list)

    def to_snapshot(self, local_id: UUID) -> OrderSnapshot:
        """Build the immutable domain snapshot the pricing core works on."""
        items = [
            LineItem(
                item_id=item.item_id,
                product_id=item.product_id,
                category_id=item.category_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                note=item.note,
                extras=tuple(
                    LineItemExtra(extra_id=extra.extra_id, name=extra.name, unit_price=extra.unit_price)
                    for extra in item.extras
                ),
            )
            for item in self.items
        ]
        discounts = [
            Discount.manual(
                order_id=self.order_id,
                mode=discount.mode,
                value=discount.value,
                amount=discount.amount,
                user_id=discount.user_id,
                applied_at=discount.applied_at,
                reason=discount.reason,
                item_id=discount.item_id,
                discount_id=discount.discount_id,
            )
            for discount in self.manual_discounts
        ]
        return OrderSnapshot(order_id=self.order_id, local_id=local_id, items=items, discounts=discounts)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "order_id": "123e4567-e89b-12d3-a456-426614174000",
            "items": [
                {
                    "item_id": "123e4567-e89b-12d3-a456-426614174001",
                    "product_id": "123e4567-e89b-12d3-a456-426614174002",
                    "category_id": "123e4567-e89b-12d3-a456-426614174003",
                    "product_name": "Cerveza IPA",
                    "quantity": 2,
                    "unit_price": "500.00",
                    "extras": []
                }
            ],
            "manual_discounts": []
        }
    })


# ============================================================================
# Pricing Models
# ============================================================================

class DiscountResponse(BaseModel):
    """Single discount layer of a breakdown."""
    origin: str
    scope: str
    amount: Decimal
    description: str
    applied_at: datetime
    item_id: Optional[UUID] = None
    promotion_id: Optional[UUID] = None
    promotion_name: Optional[str] = None
    mode: Optional[str] = None
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    user_id: Optional[UUID] = None
    reason: Optional[str] = None
    discount_id: Optional[UUID] = None

    @classmethod
    def from_discount(cls, discount: Discount) -> "DiscountResponse":
        return cls(
            origin=discount.origin.value,
            scope=discount.scope.value,
            amount=discount.amount,
            description=discount.description(),
            applied_at=discount.applied_at,
            item_id=discount.item_id,
            promotion_id=discount.promotion_id,
            promotion_name=discount.promotion_name,
            mode=discount.mode.value if discount.mode else None,
            percentage=discount.percentage,
            fixed_amount=discount.fixed_amount,
            user_id=discount.user_id,
            reason=discount.reason,
            discount_id=discount.discount_id,
        )


class PriceBreakdownResponse(BaseModel):
    """Complete pricing result of an order."""
    order_id: UUID
    evaluated_at: datetime
    subtotal: Decimal
    promotion_discounts: List[DiscountResponse]
    manual_discounts: List[DiscountResponse]
    total_discount: Decimal
    total: Decimal
    warnings: List[str]

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "PriceBreakdownResponse":
        return cls(
            order_id=breakdown.order_id,
            evaluated_at=breakdown.evaluated_at,
            subtotal=breakdown.subtotal,
            promotion_discounts=[DiscountResponse.from_discount(d) for d in breakdown.promotion_discounts],
            manual_discounts=[DiscountResponse.from_discount(d) for d in breakdown.manual_discounts],
            total_discount=breakdown.total_discount,
            total=breakdown.total,
            warnings=list(breakdown.warnings),
        )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "order_id": "123e4567-e89b-12d3-a456-426614174000",
            "evaluated_at": "2025-01-01T23:30:00-03:00",
            "subtotal": "1000.00",
            "promotion_discounts": [],
            "manual_discounts": [],
            "total_discount": "500.00",
            "total": "500.00",
            "warnings": []
        }
    })


class ManualDiscountRequest(BaseModel):
    """Request to grant a manual discount on an order or one of its items."""
    order: OrderSnapshotRequest
    mode: DiscountMode
    value: Decimal = Field(..., description="Percentage in [0, 100] or a non-negative amount")
    user_id: UUID = Field(..., description="User granting the discount")
    reason: Optional[str] = None
    item_id: Optional[UUID] = Field(None, description="Restrict the discount to one line item")


class ManualDiscountResponse(BaseModel):
    """The frozen manual discount plus the breakdown including it."""
    discount: DiscountResponse
    breakdown: PriceBreakdownResponse

