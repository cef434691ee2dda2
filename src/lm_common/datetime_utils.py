"""Datetime utilities.

Storage is always timezone-aware UTC. Calendar bucketing (weekly stats)
happens in the zone named by ``settings.TIMEZONE``.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from config.settings import settings


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def local_date(dt: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar date of ``dt`` in the server zone. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz or local_zone()).date()


def start_of_local_day(day: date, tz: ZoneInfo | None = None) -> datetime:
    """Local midnight of ``day`` expressed in UTC."""
    zone = tz or local_zone()
    return datetime(day.year, day.month, day.day, tzinfo=zone).astimezone(timezone.utc)


def trailing_days(today: date, count: int) -> list[date]:
    """``count`` consecutive dates ending at ``today`` (inclusive), oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
