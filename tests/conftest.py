"""
Pytest configuration for pricing tests.

This file adds the project root to the Python path so that tests can import
from the domain, services, repositories and api modules, and provides small
factories for order snapshots and promotions.
"""

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

import pytest

# Add the project root to the Python path
# so tests can import domain, services, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.order import LineItem, OrderSnapshot  # noqa: E402
from domain.promotion import Promotion  # noqa: E402
from domain.scope import PromotionScope  # noqa: E402
from domain.triggers import TemporalTrigger  # noqa: E402

OPERATING_TZ = timezone(timedelta(hours=-3))

LOCAL_ID = UUID("00000000-0000-0000-0000-00000000a001")
OTHER_LOCAL_ID = UUID("00000000-0000-0000-0000-00000000a002")
ORDER_ID = UUID("00000000-0000-0000-0000-00000000b001")
USER_ID = UUID("00000000-0000-0000-0000-00000000c001")


@pytest.fixture
def instant() -> datetime:
    """Friday 2025-01-03 23:30 in the operating timezone."""
    return datetime(2025, 1, 3, 23, 30, tzinfo=OPERATING_TZ)


@pytest.fixture
def make_item():
    def _make_item(
        product_id: UUID,
        quantity: int = 1,
        unit_price: str = "100.00",
        category_id: UUID = None,
        extras=(),
        item_id: UUID = None,
    ) -> LineItem:
        return LineItem(
            item_id=item_id or uuid4(),
            product_id=product_id,
            quantity=quantity,
            unit_price=Decimal(unit_price),
            category_id=category_id,
            extras=tuple(extras),
        )

    return _make_item


@pytest.fixture
def make_order():
    def _make_order(*items, discounts=(), local_id: UUID = LOCAL_ID) -> OrderSnapshot:
        return OrderSnapshot(order_id=ORDER_ID, local_id=local_id, items=items, discounts=discounts)

    return _make_order


@pytest.fixture
def make_promotion():
    base_created = datetime(2024, 12, 1, 12, 0, tzinfo=timezone.utc)

    def _make_promotion(
        strategy,
        scope=(),
        triggers=None,
        priority: int = 1,
        name: str = None,
        local_id: UUID = LOCAL_ID,
        active: bool = True,
        created_offset: int = 0,
        promotion_id: UUID = None,
    ) -> Promotion:
        promotion_id = promotion_id or uuid4()
        return Promotion(
            promotion_id=promotion_id,
            local_id=local_id,
            name=name or f"Promo {promotion_id}",
            priority=priority,
            strategy=strategy,
            triggers=tuple(triggers) if triggers is not None else (TemporalTrigger(),),
            created_at=base_created + timedelta(minutes=created_offset),
            scope=PromotionScope.of(scope),
            active=active,
        )

    return _make_promotion
