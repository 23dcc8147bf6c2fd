#!/usr/bin/env python3
"""
Order Repricing Script

Reprices an order snapshot against a promotion catalog read from JSON files,
without a database. Useful to replay a ticket or to try a promotion before
publishing it.

Usage:
    python reprice_order.py order.json promotions.json
    python reprice_order.py order.json promotions.json --at 2025-01-03T23:30:00-03:00
    python reprice_order.py order.json promotions.json --timezone America/Mexico_City

The order file uses the API request shape plus a "local_id" key. The
promotions file is a JSON array of `promotions` rows, each with its scope rows
embedded under "scope".
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping
from uuid import UUID
from zoneinfo import ZoneInfo

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.models import OrderSnapshotRequest, PriceBreakdownResponse
from domain.errors import PricingError
from domain.promotion import Promotion
from domain.time import Clock, FixedClock, SystemClock
from repositories.promotion_repository import row_to_promotion
from services.pricing_service import reprice
from services.settings import configure_logging, get_settings

logger = logging.getLogger(__name__)


def load_catalog(rows: List[Mapping[str, Any]]) -> List[Promotion]:
    """Map promotion rows (scope embedded under "scope") to promotions."""
    return [row_to_promotion(row, row.get("scope") or ()) for row in rows]


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Reprice an order snapshot against a promotion catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reprice now
  python reprice_order.py order.json promotions.json

  # Replay the order at a fixed instant (happy hour check)
  python reprice_order.py order.json promotions.json --at 2025-01-03T23:30:00-03:00
        """
    )

    parser.add_argument("order", help="Path to the order snapshot JSON file")
    parser.add_argument("promotions", help="Path to the promotions JSON file")
    parser.add_argument(
        "--at",
        help="Evaluate at this ISO-8601 instant (with offset) instead of now"
    )
    parser.add_argument(
        "--timezone",
        "-z",
        help="Operating timezone override (IANA name)"
    )

    args = parser.parse_args()
    configure_logging()

    try:
        order_data = json.loads(Path(args.order).read_text(encoding="utf-8"))
        promotion_rows = json.loads(Path(args.promotions).read_text(encoding="utf-8"))

        local_id = UUID(str(order_data["local_id"]))
        order = OrderSnapshotRequest.model_validate(order_data).to_snapshot(local_id)
        catalog = load_catalog(promotion_rows)

        clock: Clock = FixedClock(datetime.fromisoformat(args.at)) if args.at else SystemClock()
        zone = ZoneInfo(args.timezone) if args.timezone else get_settings().operating_timezone

        breakdown = reprice(order, catalog, clock, zone)

    except (PricingError, ValueError, KeyError) as e:
        print(f"✗ Cannot reprice order: {e}", file=sys.stderr)
        return 1

    for warning in breakdown.warnings:
        logger.warning(warning)

    print(PriceBreakdownResponse.from_breakdown(breakdown).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
