"""Per-shop, per-day counters for the sticky bar (DailyStat).

Every write is a single INSERT ... ON CONFLICT DO UPDATE so concurrent
beacons and webhooks never create duplicate rows or lose increments.
"""
import logging
import os
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from .schema import connect, init_database


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Storefront beacon event types."""

    IMPRESSION = "impression"
    CLICK = "click"


# Column incremented for each event type
_EVENT_COLUMNS = {
    EventType.IMPRESSION: "impressions",
    EventType.CLICK: "clicks",
}


class InvalidEventError(ValueError):
    """Raised for beacon event types other than impression/click."""

    def __init__(self, event_type: object):
        self.event_type = event_type
        super().__init__(f"Invalid event type: {event_type!r}")


class DailyStat(BaseModel):
    shop: str
    stat_date: date
    impressions: int = 0
    clicks: int = 0
    orders: int = 0
    revenue: float = 0.0


class StatsSummary(BaseModel):
    """Totals over a date window."""

    shop: str
    window_start: date
    window_end: date
    impressions: int = 0
    clicks: int = 0
    orders: int = 0
    revenue: float = 0.0
    ctr: float = 0.0
    conversion_rate: float = 0.0


def _resolve_timezone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except Exception:
        logger.warning("Invalid STATS_TIMEZONE '%s', using UTC", tz_name)
        return ZoneInfo("UTC")


def stat_day(now: Optional[datetime] = None) -> date:
    """Calendar day that counters are booked against.

    Uses STATS_TIMEZONE (default UTC). Naive ``now`` values are taken as UTC.
    """
    tzinfo = _resolve_timezone(os.getenv("STATS_TIMEZONE", "UTC"))
    if now is None:
        return datetime.now(tzinfo).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo("UTC"))
    return now.astimezone(tzinfo).date()


def parse_event_type(value: object) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise InvalidEventError(value) from None


class DailyStatStore:
    """SQLite-backed DailyStat repository."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the store, creating the schema if needed.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        init_database(self.db_path)

    @classmethod
    def from_env(cls) -> "DailyStatStore":
        return cls(os.getenv("STATS_DB_PATH", "data/stats.db"))

    def record_event(
        self,
        shop: str,
        event_type: EventType | str,
        day: Optional[date] = None,
    ) -> None:
        """Increment the impression or click counter for ``shop`` on ``day``.

        Raises:
            InvalidEventError: For event types other than impression/click
        """
        event = parse_event_type(event_type)
        column = _EVENT_COLUMNS[event]
        day = day or stat_day()

        conn = connect(self.db_path)
        try:
            conn.execute(
                f"""
                INSERT INTO daily_stats (shop, stat_date, {column})
                VALUES (?, ?, 1)
                ON CONFLICT(shop, stat_date)
                DO UPDATE SET
                    {column}={column} + 1,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (shop, day.isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Recorded %s for shop=%s day=%s", event.value, shop, day)

    def record_attributed_order(
        self,
        shop: str,
        revenue: float,
        day: Optional[date] = None,
    ) -> None:
        """Book one attributed order and its revenue for ``shop`` on ``day``."""
        day = day or stat_day()

        conn = connect(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO daily_stats (shop, stat_date, orders, revenue)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(shop, stat_date)
                DO UPDATE SET
                    orders=orders + 1,
                    revenue=revenue + excluded.revenue,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (shop, day.isoformat(), revenue),
            )
            conn.commit()
        finally:
            conn.close()

    def get_daily(self, shop: str, start: date, end: date) -> list[DailyStat]:
        """Rows for ``shop`` between ``start`` and ``end`` inclusive, by date."""
        conn = connect(self.db_path)
        try:
            cursor = conn.execute(
                """
                SELECT shop, stat_date, impressions, clicks, orders, revenue
                FROM daily_stats
                WHERE shop=? AND stat_date BETWEEN ? AND ?
                ORDER BY stat_date
                """,
                (shop, start.isoformat(), end.isoformat()),
            )
            rows = cursor.fetchall()
        finally:
            conn.close()

        return [DailyStat(**dict(row)) for row in rows]

    def get_summary(
        self,
        shop: str,
        days: int = 30,
        end: Optional[date] = None,
    ) -> StatsSummary:
        """Aggregate the last ``days`` days (ending ``end``, default today)."""
        if days < 1:
            raise ValueError("days must be >= 1")

        end = end or stat_day()
        start = end - timedelta(days=days - 1)

        conn = connect(self.db_path)
        try:
            cursor = conn.execute(
                """
                SELECT
                    COALESCE(SUM(impressions), 0) AS impressions,
                    COALESCE(SUM(clicks), 0) AS clicks,
                    COALESCE(SUM(orders), 0) AS orders,
                    COALESCE(SUM(revenue), 0) AS revenue
                FROM daily_stats
                WHERE shop=? AND stat_date BETWEEN ? AND ?
                """,
                (shop, start.isoformat(), end.isoformat()),
            )
            row = cursor.fetchone()
        finally:
            conn.close()

        impressions = row["impressions"]
        clicks = row["clicks"]
        orders = row["orders"]

        return StatsSummary(
            shop=shop,
            window_start=start,
            window_end=end,
            impressions=impressions,
            clicks=clicks,
            orders=orders,
            revenue=round(row["revenue"], 2),
            ctr=clicks / impressions if impressions else 0.0,
            conversion_rate=orders / clicks if clicks else 0.0,
        )
