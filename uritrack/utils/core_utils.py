# uritrack/utils/core_utils.py
"""
Calendar-aware time helpers shared by the session store and the analytics.

Every helper takes the calendar context (a tzinfo) explicitly. Day and month
arithmetic happens on local wall-clock time, the way a calendar would, so
"7 days before" lands on the same local hour across a DST change and
"1 month before Mar 31" is Feb 28/29.
"""

import logging
from datetime import datetime, timezone, tzinfo as TzInfo
from typing import Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta

import uritrack.config.config_manager as cf

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """
    Return current time as UTC-aware datetime.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC-aware datetime.
    - If dt is naïve, interpret it as UTC.
    - If dt is aware, convert from its tzinfo to UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_user_timezone() -> TzInfo:
    """
    Return a tzinfo object for the user's configured timezone.
    - Reads config["location"]["timezone"] (IANA name, e.g., "America/Los_Angeles").
    - If missing or invalid, falls back to system local timezone.
    """
    tz_name = cf.get_timezone_name()
    if tz_name:
        user_tz = tz.gettz(tz_name)
        if user_tz is not None:
            return user_tz
        logger.warning(
            f"Unknown timezone '{tz_name}' in config; using system local.")
    return tz.tzlocal()


def resolve_tz(tzinfo: Optional[TzInfo] = None) -> TzInfo:
    """Return the given calendar zone, or the system zone when none is injected."""
    return tzinfo if tzinfo is not None else tz.tzlocal()


def to_local(dt: datetime, tzinfo: Optional[TzInfo] = None) -> datetime:
    """
    Convert a datetime to the calendar's local timezone.
    Naïve datetimes are interpreted as UTC.
    """
    return to_utc(dt).astimezone(resolve_tz(tzinfo))


def _settle(local_dt: datetime) -> datetime:
    # Wall-clock results that fall into a DST gap move forward past it.
    return tz.resolve_imaginary(local_dt)


def start_of_day(t: datetime, tzinfo: Optional[TzInfo] = None) -> datetime:
    """Local midnight of the calendar day containing t."""
    local = to_local(t, tzinfo)
    return _settle(local.replace(hour=0, minute=0, second=0, microsecond=0))


def days_before(t: datetime, n: int, tzinfo: Optional[TzInfo] = None) -> datetime:
    """Same local wall-clock time, n calendar days earlier."""
    return _settle(to_local(t, tzinfo) - relativedelta(days=n))


def months_before(t: datetime, n: int, tzinfo: Optional[TzInfo] = None) -> datetime:
    """
    Same local wall-clock time, n calendar months earlier.
    The day is clamped to the target month's length (Mar 31 -> Feb 28).
    """
    return _settle(to_local(t, tzinfo) - relativedelta(months=n))


def hour_of_day(t: datetime, tzinfo: Optional[TzInfo] = None) -> int:
    return to_local(t, tzinfo).hour


def is_same_day(a: datetime, b: datetime, tzinfo: Optional[TzInfo] = None) -> bool:
    return to_local(a, tzinfo).date() == to_local(b, tzinfo).date()


def is_same_week(a: datetime, b: datetime, tzinfo: Optional[TzInfo] = None) -> bool:
    """Same ISO calendar week (Monday-based, year-aware)."""
    return to_local(a, tzinfo).isocalendar()[:2] == to_local(b, tzinfo).isocalendar()[:2]


def is_same_month(a: datetime, b: datetime, tzinfo: Optional[TzInfo] = None) -> bool:
    la, lb = to_local(a, tzinfo), to_local(b, tzinfo)
    return (la.year, la.month) == (lb.year, lb.month)


def calendar_days_between(start: datetime, end: datetime, tzinfo: Optional[TzInfo] = None) -> int:
    """
    Whole calendar days elapsed from start to end in local time.
    Partial days do not count; the result is negative when end precedes start.
    """
    a, b = to_local(start, tzinfo), to_local(end, tzinfo)
    days = (b.date() - a.date()).days
    if days > 0 and b.time() < a.time():
        days -= 1
    elif days < 0 and b.time() > a.time():
        days += 1
    return days


def format_duration(seconds: float) -> str:
    """
    Format elapsed seconds for display: "1m 5s" or "42s".
    """
    total = int(seconds or 0)
    minutes, secs = divmod(total, 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_date_for_report(dt: datetime, tzinfo: Optional[TzInfo] = None) -> str:
    """Abbreviated local date, e.g. 'Oct 19, 2026'."""
    local = to_local(dt, tzinfo)
    return f"{local:%b} {local.day}, {local.year}"
