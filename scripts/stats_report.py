#!/usr/bin/env python3
"""CLI report of sticky bar daily stats.

Usage:
    # Last 30 days for the configured shop
    PYTHONPATH=. python scripts/stats_report.py

    # Specific shop and window
    PYTHONPATH=. python scripts/stats_report.py --shop demo.myshopify.com --days 7

    # Explicit date range
    PYTHONPATH=. python scripts/stats_report.py --start 2024-12-01 --end 2024-12-07
"""
import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.stickyadd_core.stats.daily import DailyStatStore, stat_day


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="StickyAdd daily stats report")
    parser.add_argument(
        "--shop",
        type=str,
        default=os.getenv("SHOPIFY_STORE_DOMAIN"),
        help="Shop domain. Defaults to SHOPIFY_STORE_DOMAIN.",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=os.getenv("STATS_DB_PATH", "data/stats.db"),
        help="Stats database path. Defaults to STATS_DB_PATH or data/stats.db.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Window size ending today (ignored with --start/--end)",
    )
    parser.add_argument("--start", type=str, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="End date (YYYY-MM-DD)")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.shop:
        parser.error("--shop is required when SHOPIFY_STORE_DOMAIN is not set")

    store = DailyStatStore(args.db)

    if args.start or args.end:
        end_date = (
            datetime.strptime(args.end, "%Y-%m-%d").date() if args.end else stat_day()
        )
        start_date = (
            datetime.strptime(args.start, "%Y-%m-%d").date() if args.start else end_date
        )
        if start_date > end_date:
            parser.error("--start must not be after --end")
        days = (end_date - start_date).days + 1
    else:
        end_date = stat_day()
        days = args.days

    summary = store.get_summary(args.shop, days=days, end=end_date)
    rows = store.get_daily(args.shop, summary.window_start, summary.window_end)

    print(f"Sticky bar stats for {args.shop}: {summary.window_start} .. {summary.window_end}")
    print(f"{'date':<12}{'impr':>8}{'clicks':>8}{'orders':>8}{'revenue':>12}")
    for row in rows:
        print(
            f"{row.stat_date.isoformat():<12}{row.impressions:>8}{row.clicks:>8}"
            f"{row.orders:>8}{row.revenue:>12.2f}"
        )

    print("-" * 48)
    print(
        f"{'total':<12}{summary.impressions:>8}{summary.clicks:>8}"
        f"{summary.orders:>8}{summary.revenue:>12.2f}"
    )
    print(f"CTR: {summary.ctr:.2%}  Conversion: {summary.conversion_rate:.2%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
