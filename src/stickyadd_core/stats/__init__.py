"""Sticky bar stats layer.

Counts storefront impressions/clicks and attributed orders per shop per day.

Persists to:
- SQLite: data/stats.db (daily_stats, one row per shop and day)
"""
from .attribution import attribute_order
from .daily import DailyStatStore, EventType, InvalidEventError, stat_day
from .schema import init_database

__all__ = [
    "DailyStatStore",
    "EventType",
    "InvalidEventError",
    "attribute_order",
    "init_database",
    "stat_day",
]
