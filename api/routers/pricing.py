"""
Pricing API Endpoints.

Endpoints for repricing an order snapshot and granting manual discounts.
The promotion catalog and the clock are injected dependencies so tests and
simulations can replace them.
"""

from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from api.models import (
    DiscountResponse,
    ManualDiscountRequest,
    ManualDiscountResponse,
    OrderSnapshotRequest,
    PriceBreakdownResponse,
)
from domain.errors import PricingError
from domain.promotion import Promotion
from domain.time import Clock, SystemClock, to_operating_time
from services.manual_discount_service import apply_manual_discount
from services.pricing_service import price_at
from services.settings import get_settings

router = APIRouter()

PromotionLoader = Callable[[UUID], List[Promotion]]


def get_promotion_loader() -> PromotionLoader:
    """Default catalog source: the Supabase promotion repository."""
    from repositories.promotion_repository import get_promotions_for_local

    return get_promotions_for_local


def get_clock() -> Clock:
    return SystemClock()


@router.post(
    "/locals/{local_id}/orders/reprice",
    response_model=PriceBreakdownResponse,
    summary="Reprice Order",
    description="Recompute subtotal, promotion discounts, manual discounts and total for an order snapshot."
)
def reprice_order(
    local_id: UUID,
    request: OrderSnapshotRequest,
    load_promotions: PromotionLoader = Depends(get_promotion_loader),
    clock: Clock = Depends(get_clock),
):
    """
    Reprice an order against the local's promotion catalog.

    **How it works:**
    1. Reads the clock once and localizes it to the operating timezone
    2. Evaluates every active promotion of the local (priority order)
    3. Adds the order's manual discounts as they were frozen
    4. Returns subtotal, discount layers and total (never negative)

    Malformed snapshots or discounts are rejected with 422 so the caller can
    refuse the mutation that produced them.
    """
    try:
        order = request.to_snapshot(local_id)
        instant = to_operating_time(clock.now(), get_settings().operating_timezone)
        breakdown = price_at(order, load_promotions(local_id), instant)
        return PriceBreakdownResponse.from_breakdown(breakdown)

    except HTTPException:
        raise
    except (PricingError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to reprice order: {str(e)}"
        )


@router.post(
    "/locals/{local_id}/orders/manual-discount",
    response_model=ManualDiscountResponse,
    summary="Apply Manual Discount",
    description="Compute a manual discount against the order's remaining value and return the new breakdown."
)
def grant_manual_discount(
    local_id: UUID,
    request: ManualDiscountRequest,
    load_promotions: PromotionLoader = Depends(get_promotion_loader),
    clock: Clock = Depends(get_clock),
):
    """
    Grant a manual discount (percentage or fixed amount).

    The amount is computed against what is left after promotions and earlier
    manual discounts, then frozen. Persisting the returned discount is the
    caller's job.
    """
    try:
        order = request.order.to_snapshot(local_id)
        promotions = load_promotions(local_id)
        instant = to_operating_time(clock.now(), get_settings().operating_timezone)

        current = price_at(order, promotions, instant)
        discount = apply_manual_discount(
            order,
            current,
            mode=request.mode,
            value=request.value,
            user_id=request.user_id,
            applied_at=instant,
            reason=request.reason,
            item_id=request.item_id,
        )
        updated = price_at(order.with_discount(discount), promotions, instant)

        return ManualDiscountResponse(
            discount=DiscountResponse.from_discount(discount),
            breakdown=PriceBreakdownResponse.from_breakdown(updated),
        )

    except HTTPException:
        raise
    except (PricingError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to apply manual discount: {str(e)}"
        )
