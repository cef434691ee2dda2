"""Shopkeeper weekly aggregate: orders and gross revenue per calendar day.

Revenue counts every order's total whatever its status, i.e. gross order
value rather than delivered value.
"""
from collections.abc import Iterable
from datetime import date
from zoneinfo import ZoneInfo

from src.lm_common.datetime_utils import local_date, trailing_days
from src.lm_order.domain.models import DailyStat, Order

WEEK_DAYS = 7


def bucket_by_day(
    orders: Iterable[Order], today: date, tz: ZoneInfo, days: int = WEEK_DAYS
) -> list[DailyStat]:
    """One DailyStat per day, oldest first, zero-filled; out-of-window orders are ignored."""
    buckets = {d: DailyStat(date=d) for d in trailing_days(today, days)}
    for order in orders:
        if order.created_at is None:
            continue
        bucket = buckets.get(local_date(order.created_at, tz))
        if bucket is None:
            continue
        bucket.order_count += 1
        bucket.revenue += order.total
    return list(buckets.values())
