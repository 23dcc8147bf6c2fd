"""
Tests for `api/routers/pricing.py`.

Covers contract rules:
- Repricing returns the full breakdown with money as decimal strings.
- The clock reading is localized to the operating timezone.
- Manual discounts are computed after promotions and returned with the new breakdown.
- Malformed orders and discount values are rejected with 422.
"""

from __future__ import annotations

from datetime import datetime, time, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routers.pricing import get_clock, get_promotion_loader
from conftest import LOCAL_ID, ORDER_ID, USER_ID
from domain.discount import DiscountMode
from domain.scope import ScopeEntry
from domain.strategies import DirectDiscount, FixedQuantity
from domain.time import FixedClock
from domain.triggers import TemporalTrigger

PRODUCT_X = uuid4()


@pytest.fixture
def client(make_promotion):
    catalog = [
        make_promotion(
            FixedQuantity(take_quantity=2, pay_quantity=1),
            [ScopeEntry.product_target(PRODUCT_X)],
            name="2x1 X",
        ),
        make_promotion(
            DirectDiscount(mode=DiscountMode.PERCENTAGE, value=Decimal("10")),
            [ScopeEntry.product_target(PRODUCT_X)],
            triggers=[TemporalTrigger(start_time=time(22, 0), end_time=time(2, 0))],
            priority=2,
            name="Night",
        ),
    ]
    # 12:00 UTC is 09:00 in Buenos Aires: the night promotion is off.
    clock = FixedClock(datetime(2025, 1, 3, 12, 0, tzinfo=timezone.utc))

    app.dependency_overrides[get_promotion_loader] = lambda: (lambda local_id: catalog)
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def _order(quantity: int = 2, unit_price: str = "500.00"):
    return {
        "order_id": str(ORDER_ID),
        "items": [
            {
                "item_id": str(uuid4()),
                "product_id": str(PRODUCT_X),
                "product_name": "X",
                "quantity": quantity,
                "unit_price": unit_price,
            }
        ],
        "manual_discounts": [],
    }


def test_health(client) -> None:
    """Verify the health endpoint."""

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_openapi_schema_carries_model_examples(client) -> None:
    """Verify request and response examples reach the published schema."""

    schemas = client.get("/openapi.json").json()["components"]["schemas"]

    assert schemas["OrderSnapshotRequest"]["example"]["items"][0]["unit_price"] == "500.00"
    assert schemas["PriceBreakdownResponse"]["example"]["total"] == "500.00"
    assert "ErrorResponse" not in schemas


def test_reprice_applies_promotions(client) -> None:
    """Verify 2x1 on 2 units at 500.00 and the localized evaluation instant."""

    response = client.post(f"/api/v1/locals/{LOCAL_ID}/orders/reprice", json=_order())

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["subtotal"]) == Decimal("1000.00")
    assert Decimal(body["total_discount"]) == Decimal("500.00")
    assert Decimal(body["total"]) == Decimal("500.00")
    assert [d["promotion_name"] for d in body["promotion_discounts"]] == ["2x1 X"]
    assert body["promotion_discounts"][0]["scope"] == "ITEM"
    assert body["evaluated_at"].startswith("2025-01-03T09:00:00")


def test_reprice_rejects_malformed_order(client) -> None:
    """Verify a zero quantity never reaches the pricing core."""

    response = client.post(f"/api/v1/locals/{LOCAL_ID}/orders/reprice", json=_order(quantity=0))
    assert response.status_code == 422


def test_reprice_rejects_duplicate_items(client) -> None:
    """Verify snapshot validation errors map to 422."""

    order = _order()
    order["items"].append(dict(order["items"][0]))

    response = client.post(f"/api/v1/locals/{LOCAL_ID}/orders/reprice", json=order)
    assert response.status_code == 422


def test_reprice_rejects_out_of_range_amounts(client) -> None:
    """Verify prices and totals beyond the decimal precision map to 422."""

    huge_price = client.post(f"/api/v1/locals/{LOCAL_ID}/orders/reprice", json=_order(unit_price="1E+30"))
    huge_total = client.post(
        f"/api/v1/locals/{LOCAL_ID}/orders/reprice",
        json=_order(quantity=10_000, unit_price="1E+24"),
    )

    assert huge_price.status_code == 422
    assert huge_total.status_code == 422


def test_manual_discount_after_promotions(client) -> None:
    """Verify 15% is computed on the post-promotion total."""

    response = client.post(
        f"/api/v1/locals/{LOCAL_ID}/orders/manual-discount",
        json={
            "order": _order(quantity=4, unit_price="500.00"),
            "mode": "PERCENTAGE",
            "value": "15",
            "user_id": str(USER_ID),
            "reason": "Regular customer",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["discount"]["amount"]) == Decimal("150.00")
    assert body["discount"]["origin"] == "MANUAL"
    assert Decimal(body["breakdown"]["total"]) == Decimal("850.00")
    assert len(body["breakdown"]["manual_discounts"]) == 1


def test_manual_discount_out_of_range_is_rejected(client) -> None:
    """Verify a 120% manual discount is a 422."""

    response = client.post(
        f"/api/v1/locals/{LOCAL_ID}/orders/manual-discount",
        json={
            "order": _order(),
            "mode": "PERCENTAGE",
            "value": "120",
            "user_id": str(USER_ID),
        },
    )

    assert response.status_code == 422
    assert "between 0 and 100" in response.json()["detail"]
