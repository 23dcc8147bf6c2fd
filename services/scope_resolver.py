"""
Scope resolver.

Maps a promotion's scope entries onto the concrete line items of an order.
PRODUCT entries match on the item's product id; CATEGORY entries match every
item whose product belongs to that category.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from domain.order import LineItem
from domain.scope import PromotionScope, ScopeEntry, ScopeMatch


def _match_role(entries: Tuple[ScopeEntry, ...], items: Iterable[LineItem]) -> Tuple[LineItem, ...]:
    matched: List[LineItem] = []
    for item in items:
        # An item referenced by several entries of the same role counts once.
        if any(entry.matches(item) for entry in entries):
            matched.append(item)
    return tuple(matched)


def resolve_scope(scope: PromotionScope, items: Iterable[LineItem]) -> ScopeMatch:
    """
    Resolve trigger-role and target-role items for one order.

    Args:
        scope: The promotion's scope entries
        items: The order's line items, in insertion order

    Returns:
        ScopeMatch with both roles' items, insertion order preserved

    Example:
        match = resolve_scope(promotion.scope, order.items)
        print(f"{match.target_units} target units, {match.trigger_units} trigger units")
    """
    items = tuple(items)
    return ScopeMatch(
        trigger_items=_match_role(scope.triggers, items),
        target_items=_match_role(scope.targets, items),
        has_trigger_entries=scope.has_triggers(),
    )


__all__ = ["resolve_scope"]
