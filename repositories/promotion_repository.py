"""
Promotion repository for reading a local's promotion catalog.

Fetches promotions and their scope entries from the `promotions` and
`promotion_scope` tables and maps rows to domain values. The row mapping
functions are pure so the CLI and tests can reuse them on JSON documents.

Row shape (`promotions`):
    id, local_id, name, description, priority, active, created_at,
    strategy_type, discount_mode, discount_value, take_quantity, pay_quantity,
    minimum_trigger_quantity, benefit_percentage, activation_quantity,
    pack_price, triggers_json

`triggers_json` is a JSON array such as:
    [{"type": "TEMPORAL", "start_time": "22:00", "end_time": "02:00",
      "weekdays": ["FRIDAY", "SATURDAY"]},
     {"type": "MINIMUM_AMOUNT", "threshold": "5000.00"}]
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from domain.discount import DiscountMode
from domain.errors import InvalidPromotionConfiguration
from domain.promotion import Promotion
from domain.scope import PromotionScope, ReferenceKind, ScopeEntry, ScopeRole
from domain.strategies import (
    ConditionalCombo,
    DirectDiscount,
    FixedPricePerQuantity,
    FixedQuantity,
    Strategy,
    StrategyKind,
)
from domain.triggers import (
    MinimumAmountTrigger,
    RequiredContentTrigger,
    TemporalTrigger,
    Trigger,
    TriggerKind,
    Weekday,
)
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase table names.
# Keep these aligned with your database schema.
_PROMOTIONS_TABLE: str = "promotions"
_SCOPE_TABLE: str = "promotion_scope"


def _parse_timestamp(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    Naive values are taken as UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _decimal(value: Any, name: str) -> Decimal:
    if value is None:
        raise InvalidPromotionConfiguration(f"{name} is required")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidPromotionConfiguration(f"{name} is not a decimal: {value!r}") from exc


def _int(value: Any, name: str) -> int:
    if value is None:
        raise InvalidPromotionConfiguration(f"{name} is required")
    return int(value)


def _optional_date(value: Any) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _optional_time(value: Any) -> Optional[time]:
    return time.fromisoformat(value) if value else None


def _weekday(value: Any) -> Weekday:
    if isinstance(value, int):
        return Weekday(value)
    return Weekday[str(value).strip().upper()]


def trigger_from_json(data: Mapping[str, Any]) -> Trigger:
    """Map one element of `triggers_json` to a trigger."""

    kind = TriggerKind(str(data.get("type", "")).upper())

    if kind is TriggerKind.TEMPORAL:
        return TemporalTrigger(
            start_date=_optional_date(data.get("start_date")),
            end_date=_optional_date(data.get("end_date")),
            weekdays=frozenset(_weekday(day) for day in data.get("weekdays") or ()),
            start_time=_optional_time(data.get("start_time")),
            end_time=_optional_time(data.get("end_time")),
        )
    if kind is TriggerKind.REQUIRED_CONTENT:
        return RequiredContentTrigger(
            product_ids=frozenset(UUID(str(pid)) for pid in data.get("product_ids") or ()),
            minimum_quantity=int(data.get("minimum_quantity", 1)),
        )
    if kind is TriggerKind.MINIMUM_AMOUNT:
        return MinimumAmountTrigger(threshold=_decimal(data.get("threshold"), "threshold"))

    raise InvalidPromotionConfiguration(f"Unsupported trigger type: {kind}")


def strategy_from_row(row: Mapping[str, Any]) -> Strategy:
    """Map the flattened strategy columns to a strategy."""

    kind = StrategyKind(str(row["strategy_type"]).upper())

    if kind is StrategyKind.DIRECT_DISCOUNT:
        return DirectDiscount(
            mode=DiscountMode(str(row["discount_mode"]).upper()),
            value=_decimal(row.get("discount_value"), "discount_value"),
        )
    if kind is StrategyKind.FIXED_QUANTITY:
        return FixedQuantity(
            take_quantity=_int(row.get("take_quantity"), "take_quantity"),
            pay_quantity=_int(row.get("pay_quantity"), "pay_quantity"),
        )
    if kind is StrategyKind.CONDITIONAL_COMBO:
        return ConditionalCombo(
            minimum_trigger_quantity=_int(row.get("minimum_trigger_quantity"), "minimum_trigger_quantity"),
            benefit_percentage=_decimal(row.get("benefit_percentage"), "benefit_percentage"),
        )
    if kind is StrategyKind.FIXED_PRICE_PER_QUANTITY:
        return FixedPricePerQuantity(
            activation_quantity=_int(row.get("activation_quantity"), "activation_quantity"),
            pack_price=_decimal(row.get("pack_price"), "pack_price"),
        )

    raise InvalidPromotionConfiguration(f"Unsupported strategy type: {kind}")


def scope_entry_from_row(row: Mapping[str, Any]) -> ScopeEntry:
    return ScopeEntry(
        reference_id=UUID(str(row["reference_id"])),
        kind=ReferenceKind(str(row["reference_kind"]).upper()),
        role=ScopeRole(str(row["role"]).upper()),
    )


def row_to_promotion(row: Mapping[str, Any], scope_rows: Sequence[Mapping[str, Any]] = ()) -> Promotion:
    """
    Convert a promotions row (plus its scope rows) into a Promotion.

    Raises:
        InvalidPromotionConfiguration: If any column is missing or invalid
    """
    try:
        raw_triggers = row.get("triggers_json") or "[]"
        triggers_data = json.loads(raw_triggers) if isinstance(raw_triggers, str) else raw_triggers

        return Promotion(
            promotion_id=UUID(str(row["id"])),
            local_id=UUID(str(row["local_id"])),
            name=str(row["name"]),
            description=row.get("description"),
            priority=int(row["priority"]),
            active=bool(row.get("active", True)),
            created_at=_parse_timestamp(row["created_at"]),
            strategy=strategy_from_row(row),
            triggers=tuple(trigger_from_json(item) for item in triggers_data),
            scope=PromotionScope.of(scope_entry_from_row(scope) for scope in scope_rows),
        )
    except InvalidPromotionConfiguration:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidPromotionConfiguration(f"Malformed promotion row {row.get('id')}: {e}") from e


def get_promotions_for_local(local_id: UUID) -> List[Promotion]:
    """
    Get every promotion (active or not) of a local, with its scope.

    Rows that cannot be mapped are skipped with a warning so one broken
    promotion never blocks pricing for the whole local.

    Example:
        catalog = get_promotions_for_local(local_id)
        breakdown = reprice(order, catalog, SystemClock())
    """
    supabase = get_supabase()

    response = (
        supabase.table(_PROMOTIONS_TABLE)
        .select("*")
        .eq("local_id", str(local_id))
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch promotions: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return []

    scope_response = (
        supabase.table(_SCOPE_TABLE)
        .select("promotion_id, reference_id, reference_kind, role")
        .in_("promotion_id", [str(row["id"]) for row in rows])
        .execute()
    )

    error = getattr(scope_response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch promotion scope: {error}")

    scope_by_promotion: Dict[str, List[Mapping[str, Any]]] = {}
    for scope_row in getattr(scope_response, "data", None) or []:
        scope_by_promotion.setdefault(str(scope_row["promotion_id"]), []).append(scope_row)

    promotions: List[Promotion] = []
    for row in rows:
        try:
            promotions.append(row_to_promotion(row, scope_by_promotion.get(str(row["id"]), [])))
        except InvalidPromotionConfiguration as e:
            logger.warning("Skipping promotion %s for local %s: %s", row.get("id"), local_id, e)

    return promotions


__all__ = [
    "get_promotions_for_local",
    "row_to_promotion",
    "scope_entry_from_row",
    "strategy_from_row",
    "trigger_from_json",
]
