# uritrack/utils/reporting/analytics/trends.py
'''
uritrack - Trend Analytics Module
Compares a count in the current rolling window with the window of the same
length right before it.
'''

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo as TzInfo
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple

from uritrack.utils.core_utils import to_utc
from uritrack.utils.db.models import Session, Symptom
from uritrack.utils.reporting.analytics.descriptive import sessions_ending_between
from uritrack.utils.reporting.analytics.periods import TrendPeriod

logger = logging.getLogger(__name__)


class TrendDirection(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class Trend:
    direction: TrendDirection
    percentage: Optional[float] = None

    @property
    def description(self) -> str:
        if self.direction is TrendDirection.INCREASING:
            return f"↑ {self.percentage:.1f}%"
        if self.direction is TrendDirection.DECREASING:
            return f"↓ {self.percentage:.1f}%"
        return "Stable"

    def is_increase_over(self, threshold: float) -> bool:
        return self.direction is TrendDirection.INCREASING and self.percentage > threshold

    def is_decrease_over(self, threshold: float) -> bool:
        return self.direction is TrendDirection.DECREASING and self.percentage > threshold


STABLE = Trend(TrendDirection.STABLE)


def detect_trend(current_count: int, previous_count: int) -> Trend:
    """
    Signed change from previous to current. The denominator is
    max(previous, 1), so a first occurrence after an empty period reads as
    count x 100%.
    """
    # TODO: classify a zero/near-zero previous period as insufficient baseline
    # instead of reporting an inflated percentage.
    base = max(previous_count, 1)
    if current_count > previous_count:
        return Trend(TrendDirection.INCREASING, (current_count - previous_count) / base * 100)
    if current_count < previous_count:
        return Trend(TrendDirection.DECREASING, (previous_count - current_count) / base * 100)
    return STABLE


def period_windows(period: TrendPeriod, now: datetime,
                   tzinfo: Optional[TzInfo] = None) -> Tuple[datetime, datetime]:
    """(previous_start, current_start) for the window ending at now."""
    current_start = period.start_date(now, tzinfo)
    previous_start = period.previous_period_start(current_start, tzinfo)
    return previous_start, current_start


def _windowed_trend(sessions: Iterable[Session], period: TrendPeriod, now: datetime,
                    tzinfo: Optional[TzInfo], matches: Callable[[Session], bool]) -> Trend:
    sessions = list(sessions)
    now = to_utc(now)
    previous_start, current_start = period_windows(period, now, tzinfo)

    current = sessions_ending_between(sessions, current_start, now)
    previous = sessions_ending_between(sessions, previous_start, current_start,
                                       include_end=False)
    current_count = sum(1 for s in current if matches(s))
    previous_count = sum(1 for s in previous if matches(s))
    logger.debug("%s window: current=%d previous=%d",
                 period.value, current_count, previous_count)
    return detect_trend(current_count, previous_count)


def detect_frequency_trend(sessions: Iterable[Session], period: TrendPeriod, now: datetime,
                           tzinfo: Optional[TzInfo] = None) -> Trend:
    return _windowed_trend(sessions, period, now, tzinfo, lambda s: True)


def detect_symptom_trend(sessions: Iterable[Session], symptom: Symptom, period: TrendPeriod,
                         now: datetime, tzinfo: Optional[TzInfo] = None) -> Trend:
    return _windowed_trend(sessions, period, now, tzinfo,
                           lambda s: symptom in s.symptoms)
