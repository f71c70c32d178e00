# uritrack/utils/reporting/analytics/periods.py
'''
uritrack - Reporting periods
Date ranges, rolling trend periods and hour-of-day clusters used by the
analytics. All calendar decisions go through core_utils with an explicit
tzinfo.
'''

import calendar
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, tzinfo as TzInfo
from enum import Enum
from typing import Optional

from uritrack.utils import core_utils as cu


class DateRange(ABC):
    """Closed set of range kinds: day, calendar week, calendar month, explicit interval."""

    @abstractmethod
    def number_of_days(self, tzinfo: Optional[TzInfo] = None) -> int:
        pass

    @abstractmethod
    def contains(self, date: datetime, tzinfo: Optional[TzInfo] = None) -> bool:
        pass


@dataclass(frozen=True)
class DayRange(DateRange):
    reference: datetime

    def number_of_days(self, tzinfo=None) -> int:
        return 1

    def contains(self, date, tzinfo=None) -> bool:
        return cu.is_same_day(date, self.reference, tzinfo)


@dataclass(frozen=True)
class WeekRange(DateRange):
    reference: datetime

    def number_of_days(self, tzinfo=None) -> int:
        return 7

    def contains(self, date, tzinfo=None) -> bool:
        return cu.is_same_week(date, self.reference, tzinfo)


@dataclass(frozen=True)
class MonthRange(DateRange):
    reference: datetime

    def number_of_days(self, tzinfo=None) -> int:
        local = cu.to_local(self.reference, tzinfo)
        return calendar.monthrange(local.year, local.month)[1]

    def contains(self, date, tzinfo=None) -> bool:
        return cu.is_same_month(date, self.reference, tzinfo)


@dataclass(frozen=True)
class CustomRange(DateRange):
    start: datetime
    end: datetime

    def number_of_days(self, tzinfo=None) -> int:
        return cu.calendar_days_between(self.start, self.end, tzinfo)

    def contains(self, date, tzinfo=None) -> bool:
        return cu.to_utc(self.start) <= cu.to_utc(date) <= cu.to_utc(self.end)


class TrendPeriod(Enum):
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "three_months"

    @classmethod
    def parse(cls, value) -> "TrendPeriod":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown period '{value}'. Use week, month or three-months.") from None

    @property
    def number_of_days(self) -> int:
        """Nominal length used for per-day averages in the summary report."""
        return {TrendPeriod.WEEK: 7, TrendPeriod.MONTH: 30, TrendPeriod.THREE_MONTHS: 90}[self]

    @property
    def label(self) -> str:
        return {TrendPeriod.WEEK: "Week", TrendPeriod.MONTH: "Month",
                TrendPeriod.THREE_MONTHS: "3 Months"}[self]

    def _step_back(self, date: datetime, tzinfo: Optional[TzInfo]) -> datetime:
        if self is TrendPeriod.WEEK:
            return cu.days_before(date, 7, tzinfo)
        if self is TrendPeriod.MONTH:
            return cu.months_before(date, 1, tzinfo)
        return cu.months_before(date, 3, tzinfo)

    def start_date(self, now: datetime, tzinfo: Optional[TzInfo] = None) -> datetime:
        """Start of the current window ending at `now`."""
        return self._step_back(now, tzinfo)

    def previous_period_start(self, current_start: datetime, tzinfo: Optional[TzInfo] = None) -> datetime:
        """Start of the window immediately before the one starting at current_start."""
        return self._step_back(current_start, tzinfo)


class TimeCluster(Enum):
    EARLY_MORNING = "Early Morning (12am-6am)"
    MORNING = "Morning (6am-12pm)"
    AFTERNOON = "Afternoon (12pm-6pm)"
    EVENING = "Evening (6pm-12am)"

    @classmethod
    def from_hour(cls, hour: int) -> "TimeCluster":
        if 0 <= hour < 6:
            return cls.EARLY_MORNING
        if 6 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 18:
            return cls.AFTERNOON
        return cls.EVENING

    @property
    def label(self) -> str:
        return self.value
