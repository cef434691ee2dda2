"""Tests for lm_common.datetime_utils."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from src.lm_common.datetime_utils import local_date, start_of_local_day, trailing_days, utc_now

KOLKATA = ZoneInfo("Asia/Kolkata")


def test_utc_now_is_aware_utc() -> None:
    assert utc_now().tzinfo == UTC


def test_local_date_crosses_midnight() -> None:
    # 20:00 UTC is 01:30 the next day in IST
    assert local_date(datetime(2026, 3, 1, 20, 0, tzinfo=UTC), KOLKATA) == date(2026, 3, 2)


def test_local_date_treats_naive_as_utc() -> None:
    assert local_date(datetime(2026, 3, 1, 20, 0), KOLKATA) == date(2026, 3, 2)


def test_start_of_local_day_in_utc() -> None:
    start = start_of_local_day(date(2026, 3, 2), KOLKATA)
    assert start == datetime(2026, 3, 1, 18, 30, tzinfo=UTC)


def test_trailing_days_oldest_first() -> None:
    days = trailing_days(date(2026, 3, 2), 3)
    assert days == [date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 2)]
