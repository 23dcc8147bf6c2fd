"""
Domain: Pricing error taxonomy.

Every failure raised by the pricing core derives from PricingError so callers
can catch the whole family at their boundary.

- InvalidPromotionConfiguration: rejected at catalog-write time.
- InvalidDiscountValue: rejected at discount-creation time.
- PricingComputationError: isolated per promotion during evaluation.
- InvalidOrderSnapshot: repricing cannot produce a breakdown at all.
"""

from __future__ import annotations


class PricingError(Exception):
    """Base class for all pricing core failures."""
    pass


class InvalidPromotionConfiguration(PricingError, ValueError):
    """A promotion (or one of its parts) violates a catalog rule."""
    pass


class InvalidDiscountValue(PricingError, ValueError):
    """A percentage outside [0, 100], a negative amount, or inconsistent discount fields."""
    pass


class PricingComputationError(PricingError):
    """A strategy or trigger met data it cannot price."""

    def __init__(self, message: str, promotion_id: object = None):
        self.promotion_id = promotion_id
        super().__init__(message)


class InvalidOrderSnapshot(PricingError, ValueError):
    """The order snapshot is malformed; the triggering mutation must be refused."""
    pass


class PromotionNotFound(PricingError, KeyError):
    """Raised by catalog operations referencing an unknown promotion id."""

    def __init__(self, promotion_id: object):
        self.promotion_id = promotion_id
        super().__init__(f"Promotion {promotion_id} not found in catalog")

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "PricingError",
    "InvalidPromotionConfiguration",
    "InvalidDiscountValue",
    "PricingComputationError",
    "InvalidOrderSnapshot",
    "PromotionNotFound",
]
