"""
Domain: Promotion triggers (eligibility criteria).

A promotion is eligible only when every one of its triggers holds (AND).
The catalog of trigger kinds is closed:

- TemporalTrigger: date range, optional weekdays, optional time-of-day window.
- RequiredContentTrigger: every listed product is in the order.
- MinimumAmountTrigger: the order's pre-discount subtotal reaches a threshold.

Each variant answers `is_satisfied(order, instant)`. The instant is the single
clock reading of the repricing pass, already expressed in the operating
timezone. Nothing here reads a clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, IntEnum
from typing import FrozenSet, Optional, Union
from uuid import UUID

from .errors import InvalidPromotionConfiguration
from .money import ZERO, money
from .order import OrderSnapshot


class TriggerKind(str, Enum):
    TEMPORAL = "TEMPORAL"
    REQUIRED_CONTENT = "REQUIRED_CONTENT"
    MINIMUM_AMOUNT = "MINIMUM_AMOUNT"


class Weekday(IntEnum):
    """Numbered like `date.weekday()`."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


@dataclass(frozen=True, slots=True)
class TemporalTrigger:
    """
    Calendar/time-of-day window.

    - Dates are inclusive on both ends; a missing bound is unbounded.
    - An empty weekday set means every day.
    - The time window is half-open [start_time, end_time). When end_time is
      earlier than start_time the window wraps midnight (22:00-02:00).
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    weekdays: FrozenSet[Weekday] = field(default_factory=frozenset)
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    def __post_init__(self) -> None:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise InvalidPromotionConfiguration(
                f"start_date ({self.start_date}) cannot be after end_date ({self.end_date})"
            )
        try:
            weekdays = frozenset(Weekday(day) for day in self.weekdays)
        except ValueError as exc:
            raise InvalidPromotionConfiguration(f"Invalid weekday in {set(self.weekdays)!r}") from exc
        object.__setattr__(self, "weekdays", weekdays)

        if (self.start_time is None) != (self.end_time is None):
            raise InvalidPromotionConfiguration("start_time and end_time must be configured together")
        if self.start_time is not None and self.start_time == self.end_time:
            raise InvalidPromotionConfiguration("Time window cannot start and end at the same time")

    @property
    def kind(self) -> TriggerKind:
        return TriggerKind.TEMPORAL

    @property
    def wraps_midnight(self) -> bool:
        return self.start_time is not None and self.end_time is not None and self.end_time < self.start_time

    def covers_time(self, moment: time) -> bool:
        if self.start_time is None or self.end_time is None:
            return True
        moment = moment.replace(tzinfo=None)
        if self.wraps_midnight:
            return moment >= self.start_time or moment < self.end_time
        return self.start_time <= moment < self.end_time

    def is_satisfied(self, order: OrderSnapshot, instant: datetime) -> bool:
        day = instant.date()
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        if self.weekdays and Weekday(day.weekday()) not in self.weekdays:
            return False
        return self.covers_time(instant.time())


@dataclass(frozen=True, slots=True)
class RequiredContentTrigger:
    """
    Every required product must be present with at least `minimum_quantity`
    units. Products are checked independently; quantities are never pooled
    across different products.
    """

    product_ids: FrozenSet[UUID]
    minimum_quantity: int = 1

    def __post_init__(self) -> None:
        product_ids = frozenset(self.product_ids)
        if not product_ids:
            raise InvalidPromotionConfiguration("At least one required product must be specified")
        if isinstance(self.minimum_quantity, bool) or not isinstance(self.minimum_quantity, int) \
                or self.minimum_quantity < 1:
            raise InvalidPromotionConfiguration("minimum_quantity must be an integer >= 1")
        object.__setattr__(self, "product_ids", product_ids)

    @property
    def kind(self) -> TriggerKind:
        return TriggerKind.REQUIRED_CONTENT

    def is_satisfied(self, order: OrderSnapshot, instant: datetime) -> bool:
        return all(order.quantity_of(product_id) >= self.minimum_quantity for product_id in self.product_ids)


@dataclass(frozen=True, slots=True)
class MinimumAmountTrigger:
    """
    The order's raw item subtotal (unit price x quantity, no extras, no
    discounts) must reach the threshold. Using the raw subtotal keeps the
    result independent of the order in which other promotions were applied.
    """

    threshold: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.threshold, Decimal):
            raise InvalidPromotionConfiguration(f"threshold must be a Decimal, got {self.threshold!r}")
        threshold = money(self.threshold)
        if threshold <= ZERO:
            raise InvalidPromotionConfiguration("Minimum amount must be greater than zero")
        object.__setattr__(self, "threshold", threshold)

    @property
    def kind(self) -> TriggerKind:
        return TriggerKind.MINIMUM_AMOUNT

    def is_satisfied(self, order: OrderSnapshot, instant: datetime) -> bool:
        return order.items_base_subtotal() >= self.threshold


Trigger = Union[TemporalTrigger, RequiredContentTrigger, MinimumAmountTrigger]
TRIGGER_TYPES = (TemporalTrigger, RequiredContentTrigger, MinimumAmountTrigger)


def require_trigger(value: object) -> Trigger:
    """Reject anything outside the closed trigger catalog."""

    if not isinstance(value, TRIGGER_TYPES):
        raise InvalidPromotionConfiguration(f"Unsupported trigger kind: {type(value).__name__}")
    return value


def all_satisfied(triggers, order: OrderSnapshot, instant: datetime) -> bool:
    """AND over a non-empty trigger set."""

    if not triggers:
        raise InvalidPromotionConfiguration("A promotion needs at least one trigger")
    return all(trigger.is_satisfied(order, instant) for trigger in triggers)


__all__ = [
    "Trigger",
    "TriggerKind",
    "TRIGGER_TYPES",
    "TemporalTrigger",
    "RequiredContentTrigger",
    "MinimumAmountTrigger",
    "Weekday",
    "all_satisfied",
    "require_trigger",
]
