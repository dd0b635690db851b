from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.services.aggregation import TradeRecord


@dataclass(frozen=True)
class DateWindow:
    start: date
    end: date

    def contains(self, day: date | None) -> bool:
        return day is not None and self.start <= day <= self.end


def local_today(timezone_name: str, now: datetime | None = None) -> date:
    """Calendar date of ``now`` (default: the current moment) in ``timezone_name``."""
    tz = ZoneInfo(timezone_name)
    return (now or datetime.now(tz)).astimezone(tz).date()


def week_window(today: date) -> DateWindow:
    # isoweekday(): Monday=1 ... Sunday=7
    return DateWindow(start=today - timedelta(days=today.isoweekday() - 1), end=today)


def month_window(today: date) -> DateWindow:
    return DateWindow(start=today.replace(day=1), end=today)


def year_window(today: date) -> DateWindow:
    return DateWindow(start=date(today.year, 1, 1), end=today)


def is_last_day_of_month(today: date) -> bool:
    return (today + timedelta(days=1)).day == 1


def filter_trades(trades: Iterable[TradeRecord], window: DateWindow) -> list[TradeRecord]:
    return [trade for trade in trades if window.contains(trade.entry_date)]
