"""
Promotion catalog service.

Catalog-write rules for promotions. Single-promotion rules (non-empty
triggers, positive priority, strategy parameters, duplicate scope references)
are enforced by the domain constructors; this module adds the rules that need
the rest of the local's catalog, such as name uniqueness.

Every operation takes the current catalog and returns new immutable values;
persisting them is the caller's job.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from domain.errors import InvalidPromotionConfiguration, PromotionNotFound
from domain.promotion import Promotion
from domain.scope import PromotionScope, ScopeEntry
from domain.strategies import Strategy
from domain.triggers import Trigger

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"name", "description", "priority", "strategy", "triggers"})


def _normalize_name(name: str) -> str:
    return " ".join(name.split()).casefold()


def ensure_unique_name(
    catalog: Iterable[Promotion],
    local_id: UUID,
    name: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    """Names are unique per local, ignoring case and repeated whitespace."""

    wanted = _normalize_name(name)
    for promotion in catalog:
        if promotion.local_id != local_id or promotion.promotion_id == exclude_id:
            continue
        if _normalize_name(promotion.name) == wanted:
            raise InvalidPromotionConfiguration(
                f"A promotion named '{promotion.name}' already exists in local {local_id}"
            )


def find_promotion(catalog: Iterable[Promotion], promotion_id: UUID) -> Promotion:
    for promotion in catalog:
        if promotion.promotion_id == promotion_id:
            return promotion
    raise PromotionNotFound(promotion_id)


def replace_in_catalog(catalog: Sequence[Promotion], promotion: Promotion) -> Tuple[Promotion, ...]:
    """Return the catalog with `promotion` replacing the entry of the same id (or appended)."""

    updated = [p for p in catalog if p.promotion_id != promotion.promotion_id]
    updated.append(promotion)
    return tuple(updated)


def create_promotion(
    catalog: Iterable[Promotion],
    *,
    local_id: UUID,
    name: str,
    priority: int,
    strategy: Strategy,
    triggers: Sequence[Trigger],
    created_at: datetime,
    description: Optional[str] = None,
    scope: Iterable[ScopeEntry] = (),
    active: bool = True,
    promotion_id: Optional[UUID] = None,
) -> Promotion:
    """
    Create a promotion for a local.

    Raises:
        InvalidPromotionConfiguration: duplicate name in the local, empty
            triggers, non-positive priority, invalid strategy parameters or
            duplicate scope references
    """
    catalog = tuple(catalog)
    if not isinstance(name, str) or not name.strip():
        raise InvalidPromotionConfiguration("Promotion name is required")
    ensure_unique_name(catalog, local_id, name)

    promotion = Promotion(
        promotion_id=promotion_id or uuid4(),
        local_id=local_id,
        name=name,
        priority=priority,
        strategy=strategy,
        triggers=tuple(triggers),
        created_at=created_at,
        scope=PromotionScope.of(scope),
        active=active,
        description=description,
    )
    logger.info("Created promotion %s '%s' for local %s", promotion.promotion_id, promotion.name, local_id)
    return promotion


def edit_promotion(catalog: Iterable[Promotion], promotion_id: UUID, **changes) -> Promotion:
    """
    Edit name, description, priority, strategy or triggers.

    Discounts already applied keep their frozen amounts; only future
    repricing passes see the edited rule.
    """
    catalog = tuple(catalog)
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise InvalidPromotionConfiguration(f"Fields not editable: {sorted(unknown)}")

    current = find_promotion(catalog, promotion_id)
    if "name" in changes:
        if not isinstance(changes["name"], str) or not changes["name"].strip():
            raise InvalidPromotionConfiguration("Promotion name is required")
        ensure_unique_name(catalog, current.local_id, changes["name"], exclude_id=promotion_id)
    if "triggers" in changes:
        changes["triggers"] = tuple(changes["triggers"] or ())

    return replace(current, **changes)


def toggle_promotion(catalog: Iterable[Promotion], promotion_id: UUID, active: bool) -> Promotion:
    current = find_promotion(catalog, promotion_id)
    logger.info("Promotion %s set %s", promotion_id, "active" if active else "inactive")
    return current.activated() if active else current.deactivated()


def associate_scope(catalog: Iterable[Promotion], promotion_id: UUID, entries: Iterable[ScopeEntry]) -> Promotion:
    """Replace a promotion's scope. Duplicate references are rejected."""

    return find_promotion(catalog, promotion_id).with_scope(entries)


__all__ = [
    "associate_scope",
    "create_promotion",
    "edit_promotion",
    "ensure_unique_name",
    "find_promotion",
    "replace_in_catalog",
    "toggle_promotion",
]
