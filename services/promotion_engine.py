"""
Promotion evaluation engine.

Computes the automatic (PROMOTION-origin) discounts of an order from a
local's promotion catalog. Pure and stateless: it runs from scratch on every
repricing and caches nothing besides the Discount records it returns.

Algorithm:
1. Keep the active promotions of the order's local, ordered by priority
   ascending, then creation time, then id.
2. For each promotion: check every trigger at the pass instant; when
   eligible, resolve its scope and apply its strategy; a positive amount
   becomes one Discount (ITEM-scoped when the benefit falls on one line).
3. Every promotion is computed against the original item prices, so
   promotions stack additively and never compound.
4. A promotion fires at most once per pass.

Failure isolation: a promotion that cannot be evaluated is logged, reported as
a warning and contributes nothing; the pass always completes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from domain.discount import Discount
from domain.money import ZERO, total
from domain.order import OrderSnapshot
from domain.promotion import Promotion
from domain.strategies import apply_strategy
from domain.time import require_aware_timestamp
from domain.triggers import all_satisfied
from services.scope_resolver import resolve_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromotionEvaluation:
    """Result of one engine pass."""

    discounts: Tuple[Discount, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def total_amount(self) -> Decimal:
        return total(discount.amount for discount in self.discounts)


def select_candidates(promotions: Iterable[object], local_id) -> Tuple[List[Promotion], List[str]]:
    """
    Filter and order the promotions a pass will evaluate.

    Returns:
        (ordered candidates, warnings for entries that are not promotions)
    """
    candidates: List[Promotion] = []
    warnings: List[str] = []
    seen = set()

    for promotion in promotions:
        if not isinstance(promotion, Promotion):
            message = f"Skipped malformed catalog entry of type {type(promotion).__name__}"
            logger.warning(message)
            warnings.append(message)
            continue
        if not promotion.active:
            logger.debug("Skipping inactive promotion %s", promotion.promotion_id)
            continue
        if promotion.local_id != local_id:
            logger.debug("Skipping promotion %s owned by local %s", promotion.promotion_id, promotion.local_id)
            continue
        if promotion.promotion_id in seen:
            logger.debug("Skipping repeated promotion %s", promotion.promotion_id)
            continue
        seen.add(promotion.promotion_id)
        candidates.append(promotion)

    candidates.sort(key=lambda p: p.sort_key)
    return candidates, warnings


def evaluate_promotion(promotion: Promotion, order: OrderSnapshot, instant: datetime) -> Optional[Discount]:
    """
    Evaluate a single promotion against the order.

    Returns the resulting Discount, or None when the promotion does not fire.
    Raises whatever the triggers or strategy raise; callers isolate failures.
    """
    if not promotion.scope.has_targets():
        logger.debug("Skipping promotion %s: scope has no targets", promotion.promotion_id)
        return None

    if not all_satisfied(promotion.triggers, order, instant):
        return None

    match = resolve_scope(promotion.scope, order.items)
    if not match.target_items:
        return None

    outcome = apply_strategy(promotion.strategy, match)
    if outcome.amount <= ZERO:
        return None

    mode, percentage, fixed_amount = promotion.strategy.terms()
    return Discount.from_promotion(
        order_id=order.order_id,
        promotion_id=promotion.promotion_id,
        promotion_name=promotion.name,
        amount=outcome.amount,
        applied_at=instant,
        item_id=outcome.item_id,
        mode=mode,
        percentage=percentage,
        fixed_amount=fixed_amount,
    )


def evaluate_promotions(
    order: OrderSnapshot,
    promotions: Iterable[object],
    instant: datetime,
) -> PromotionEvaluation:
    """
    Run one evaluation pass over a local's promotion catalog.

    Args:
        order: Immutable order snapshot
        promotions: The local's promotion catalog (any order; inactive allowed)
        instant: The pass's single clock reading, in the operating timezone

    Returns:
        PromotionEvaluation with discounts in evaluation order and warnings

    Example:
        evaluation = evaluate_promotions(order, catalog, clock.now())
        for discount in evaluation.discounts:
            print(f"{discount.promotion_name}: -{discount.amount}")
    """
    require_aware_timestamp("instant", instant)

    candidates, warnings = select_candidates(promotions, order.local_id)
    discounts: List[Discount] = []

    for promotion in candidates:
        try:
            discount = evaluate_promotion(promotion, order, instant)
        except Exception as e:
            message = f"Promotion '{promotion.name}' ({promotion.promotion_id}) skipped: {e}"
            logger.warning(
                message,
                exc_info=True,
                extra={
                    "promotion_id": str(promotion.promotion_id),
                    "order_id": str(order.order_id),
                    "local_id": str(order.local_id),
                },
            )
            warnings.append(message)
            continue

        if discount is not None:
            discounts.append(discount)

    return PromotionEvaluation(discounts=tuple(discounts), warnings=tuple(warnings))


__all__ = [
    "PromotionEvaluation",
    "evaluate_promotion",
    "evaluate_promotions",
    "select_candidates",
]
