"""
Calendar-day bucketing for daily rules.

A trade belongs to the calendar day of its *open* time, converted to the
engine's day-boundary timezone. Every daily figure in the engine (daily
profit, best trading day, trading-day count, daily realized loss) uses this
one policy so that the numbers agree with each other.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from ..models.account import Trade


def trading_day(timestamp: datetime, tz: ZoneInfo) -> date:
    """
    Return the calendar day of ``timestamp`` in ``tz``.

    Naive timestamps are taken as UTC.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> late = datetime(2025, 8, 21, 23, 30, tzinfo=UTC)
        >>> trading_day(late, ZoneInfo("Europe/Rome"))
        datetime.date(2025, 8, 22)
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(tz).date()


def daily_net_pnl(trades: Iterable[Trade], tz: ZoneInfo) -> dict[date, float]:
    """Sum net P&L per open-time calendar day, ordered by day."""
    buckets: dict[date, float] = defaultdict(float)
    for trade in trades:
        buckets[trading_day(trade.open_time, tz)] += trade.net_pnl
    return dict(sorted(buckets.items()))


def trades_on_day(trades: Iterable[Trade], day: date, tz: ZoneInfo) -> list[Trade]:
    """Trades opened on ``day`` in ``tz``."""
    return [trade for trade in trades if trading_day(trade.open_time, tz) == day]
