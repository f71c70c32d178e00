# tests/test_core_utils.py

from datetime import datetime, timedelta, timezone

from dateutil import tz

import uritrack.config.config_manager as cf
from uritrack.utils import core_utils as cu

UTC = timezone.utc
NEW_YORK = tz.gettz("America/New_York")


def test_to_utc_treats_naive_as_utc():
    naive = datetime(2026, 10, 19, 8, 30)
    assert cu.to_utc(naive) == datetime(2026, 10, 19, 8, 30, tzinfo=UTC)


def test_to_utc_converts_aware_datetimes():
    local = datetime(2026, 1, 15, 9, 0, tzinfo=NEW_YORK)
    assert cu.to_utc(local) == datetime(2026, 1, 15, 14, 0, tzinfo=UTC)


def test_days_before_keeps_local_wall_clock_across_dst():
    # DST starts in New York on 2026-03-08
    t = datetime(2026, 3, 10, 12, 0, tzinfo=NEW_YORK)
    earlier = cu.days_before(t, 7, NEW_YORK)
    assert earlier.hour == 12
    assert earlier.date().isoformat() == "2026-03-03"
    # one hour shorter than 7 x 24h in absolute time
    assert cu.to_utc(t) - cu.to_utc(earlier) == timedelta(days=6, hours=23)


def test_months_before_clamps_to_month_end():
    t = datetime(2026, 3, 31, 10, 0, tzinfo=UTC)
    assert cu.months_before(t, 1, UTC) == datetime(2026, 2, 28, 10, 0, tzinfo=UTC)


def test_start_of_day_and_hour_in_zone():
    t = datetime(2026, 10, 19, 3, 0, tzinfo=UTC)  # 23:00 previous day in New York
    assert cu.hour_of_day(t, NEW_YORK) == 23
    midnight = cu.start_of_day(t, NEW_YORK)
    assert (midnight.year, midnight.month, midnight.day, midnight.hour) == (2026, 10, 18, 0)


def test_same_day_depends_on_zone():
    a = datetime(2026, 10, 19, 2, 0, tzinfo=UTC)
    b = datetime(2026, 10, 19, 10, 0, tzinfo=UTC)
    assert cu.is_same_day(a, b, UTC)
    assert not cu.is_same_day(a, b, NEW_YORK)


def test_is_same_week_uses_iso_monday_weeks():
    sunday = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
    monday = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
    next_sunday = datetime(2026, 10, 25, 12, 0, tzinfo=UTC)
    assert not cu.is_same_week(sunday, monday, UTC)
    assert cu.is_same_week(monday, next_sunday, UTC)


def test_is_same_month():
    assert cu.is_same_month(datetime(2026, 10, 1, tzinfo=UTC), datetime(2026, 10, 31, tzinfo=UTC), UTC)
    assert not cu.is_same_month(datetime(2026, 10, 1, tzinfo=UTC), datetime(2025, 10, 1, tzinfo=UTC), UTC)


def test_calendar_days_between_counts_whole_days():
    start = datetime(2026, 10, 1, 10, 0, tzinfo=UTC)
    assert cu.calendar_days_between(start, datetime(2026, 10, 3, 9, 0, tzinfo=UTC), UTC) == 1
    assert cu.calendar_days_between(start, datetime(2026, 10, 3, 10, 0, tzinfo=UTC), UTC) == 2
    assert cu.calendar_days_between(start, datetime(2026, 10, 1, 23, 0, tzinfo=UTC), UTC) == 0


def test_format_duration():
    assert cu.format_duration(65) == "1m 5s"
    assert cu.format_duration(42) == "42s"
    assert cu.format_duration(0) == "0s"


def test_format_date_for_report():
    assert cu.format_date_for_report(datetime(2026, 10, 19, 12, 0, tzinfo=UTC), UTC) == "Oct 19, 2026"


def test_get_user_timezone_reads_config():
    cf.set_config_value("location", "timezone", "America/New_York")
    zone = cu.get_user_timezone()
    assert zone.utcoffset(datetime(2026, 1, 15, 12, 0)) == timedelta(hours=-5)


def test_get_user_timezone_falls_back_to_local_for_unknown_name():
    cf.set_config_value("location", "timezone", "Not/AZone")
    assert isinstance(cu.get_user_timezone(), tz.tzlocal)
