"""
Domain: Promotion rules.

Contract excerpts implemented here:
- A promotion belongs to one local and has a positive priority (lower first).
- It has exactly one strategy and a non-empty ordered set of triggers (AND).
- Its scope never repeats a product/category reference.
- The pricing core only reads promotions; edits return new instances.

Name uniqueness within a local needs the whole catalog and is enforced by
services.promotion_catalog_service.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional, Tuple
from uuid import UUID

from .errors import InvalidPromotionConfiguration
from .scope import PromotionScope, ScopeEntry
from .strategies import Strategy, require_strategy
from .time import require_aware_timestamp
from .triggers import Trigger, require_trigger


@dataclass(frozen=True, slots=True)
class Promotion:
    """
    Reusable, tenant-owned rule combining triggers, scope and a strategy.

    Ordering key for evaluation: (priority, created_at, promotion_id).
    """

    promotion_id: UUID
    local_id: UUID
    name: str
    priority: int
    strategy: Strategy
    triggers: Tuple[Trigger, ...]
    created_at: datetime
    scope: PromotionScope = field(default_factory=PromotionScope)
    active: bool = True
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidPromotionConfiguration("Promotion name is required")
        object.__setattr__(self, "name", self.name.strip())

        if isinstance(self.priority, bool) or not isinstance(self.priority, int) or self.priority <= 0:
            raise InvalidPromotionConfiguration(f"Priority must be a positive integer, got {self.priority!r}")

        require_strategy(self.strategy)

        triggers = tuple(self.triggers or ())
        if not triggers:
            raise InvalidPromotionConfiguration(f"Promotion '{self.name}' must have at least one trigger")
        for trigger in triggers:
            require_trigger(trigger)
        object.__setattr__(self, "triggers", triggers)

        if not isinstance(self.scope, PromotionScope):
            object.__setattr__(self, "scope", PromotionScope.of(self.scope))

        try:
            require_aware_timestamp("created_at", self.created_at)
        except (TypeError, ValueError) as exc:
            raise InvalidPromotionConfiguration(str(exc)) from exc

    @property
    def sort_key(self) -> Tuple[int, datetime, str]:
        return (self.priority, self.created_at, str(self.promotion_id))

    def activated(self) -> "Promotion":
        return replace(self, active=True)

    def deactivated(self) -> "Promotion":
        return replace(self, active=False)

    def with_scope(self, entries: Iterable[ScopeEntry]) -> "Promotion":
        return replace(self, scope=PromotionScope.of(entries))


__all__ = ["Promotion"]
