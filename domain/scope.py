"""
Domain: Promotion scope.

A scope tells which products or categories activate a promotion (TRIGGER)
and which receive its benefit (TARGET).

Contract excerpts implemented here:
- Each entry is (reference id, PRODUCT | CATEGORY, TRIGGER | TARGET).
- A reference appears at most once per promotion.
- A matched line item is counted at most once per role; it may be counted
  under both roles when different entries reference it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Tuple
from uuid import UUID

from .errors import InvalidPromotionConfiguration
from .money import total
from .order import LineItem


class ReferenceKind(str, Enum):
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"


class ScopeRole(str, Enum):
    TRIGGER = "TRIGGER"
    TARGET = "TARGET"


@dataclass(frozen=True, slots=True)
class ScopeEntry:
    reference_id: UUID
    kind: ReferenceKind
    role: ScopeRole

    @staticmethod
    def product_trigger(product_id: UUID) -> "ScopeEntry":
        return ScopeEntry(product_id, ReferenceKind.PRODUCT, ScopeRole.TRIGGER)

    @staticmethod
    def product_target(product_id: UUID) -> "ScopeEntry":
        return ScopeEntry(product_id, ReferenceKind.PRODUCT, ScopeRole.TARGET)

    @staticmethod
    def category_trigger(category_id: UUID) -> "ScopeEntry":
        return ScopeEntry(category_id, ReferenceKind.CATEGORY, ScopeRole.TRIGGER)

    @staticmethod
    def category_target(category_id: UUID) -> "ScopeEntry":
        return ScopeEntry(category_id, ReferenceKind.CATEGORY, ScopeRole.TARGET)

    def matches(self, item: LineItem) -> bool:
        if self.kind is ReferenceKind.PRODUCT:
            return item.product_id == self.reference_id
        return item.category_id is not None and item.category_id == self.reference_id


@dataclass(frozen=True, slots=True)
class PromotionScope:
    """Ordered, duplicate-free set of scope entries."""

    entries: Tuple[ScopeEntry, ...] = ()

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        references = set()
        for entry in entries:
            if entry.reference_id in references:
                raise InvalidPromotionConfiguration(
                    f"Product/category {entry.reference_id} is duplicated in the promotion scope"
                )
            references.add(entry.reference_id)
        object.__setattr__(self, "entries", entries)

    @staticmethod
    def of(entries: Iterable[ScopeEntry]) -> "PromotionScope":
        return PromotionScope(entries=tuple(entries))

    def with_role(self, role: ScopeRole) -> Tuple[ScopeEntry, ...]:
        return tuple(entry for entry in self.entries if entry.role is role)

    @property
    def triggers(self) -> Tuple[ScopeEntry, ...]:
        return self.with_role(ScopeRole.TRIGGER)

    @property
    def targets(self) -> Tuple[ScopeEntry, ...]:
        return self.with_role(ScopeRole.TARGET)

    def has_triggers(self) -> bool:
        return bool(self.triggers)

    def has_targets(self) -> bool:
        return bool(self.targets)


@dataclass(frozen=True, slots=True)
class ScopeMatch:
    """
    Line items of one order matched against a promotion scope, per role.

    Both tuples keep the order's insertion order. has_trigger_entries tells
    whether the scope configured any TRIGGER entry at all.
    """

    trigger_items: Tuple[LineItem, ...] = ()
    target_items: Tuple[LineItem, ...] = ()
    has_trigger_entries: bool = False

    @property
    def trigger_units(self) -> int:
        return sum(item.quantity for item in self.trigger_items)

    @property
    def target_units(self) -> int:
        return sum(item.quantity for item in self.target_items)

    def target_subtotal(self) -> Decimal:
        """Target base totals only; extras never take part in promotions."""

        return total(item.base_total() for item in self.target_items)


__all__ = [
    "ReferenceKind",
    "ScopeRole",
    "ScopeEntry",
    "PromotionScope",
    "ScopeMatch",
]
