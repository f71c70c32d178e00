# tests/test_trends.py

from datetime import datetime, timedelta, timezone

import pytest

from uritrack.utils.db.models import Session, Symptom
from uritrack.utils.reporting.analytics.periods import TrendPeriod
from uritrack.utils.reporting.analytics.trends import (
    TrendDirection,
    detect_frequency_trend,
    detect_symptom_trend,
    detect_trend,
    period_windows,
)

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize("current, previous, direction, pct", [
    (10, 5, TrendDirection.INCREASING, 100.0),
    (5, 0, TrendDirection.INCREASING, 500.0),
    (3, 6, TrendDirection.DECREASING, 50.0),
    (0, 4, TrendDirection.DECREASING, 100.0),
])
def test_detect_trend_percentages(current, previous, direction, pct):
    trend = detect_trend(current, previous)
    assert trend.direction is direction
    assert trend.percentage == pytest.approx(pct)


def test_equal_counts_are_stable():
    assert detect_trend(5, 5).direction is TrendDirection.STABLE
    assert detect_trend(0, 0).direction is TrendDirection.STABLE


def test_trend_descriptions():
    assert detect_trend(10, 5).description == "↑ 100.0%"
    assert detect_trend(7, 8).description == "↓ 12.5%"
    assert detect_trend(2, 2).description == "Stable"


def test_threshold_helpers():
    up = detect_trend(4, 3)
    assert up.is_increase_over(30)
    assert not up.is_increase_over(34)
    assert not up.is_decrease_over(0)


def test_period_windows():
    previous_start, current_start = period_windows(TrendPeriod.WEEK, NOW, UTC)
    assert current_start == datetime(2026, 10, 12, 12, 0, tzinfo=UTC)
    assert previous_start == datetime(2026, 10, 5, 12, 0, tzinfo=UTC)

    previous_start, current_start = period_windows(TrendPeriod.MONTH, NOW, UTC)
    assert current_start == datetime(2026, 9, 19, 12, 0, tzinfo=UTC)
    assert previous_start == datetime(2026, 8, 19, 12, 0, tzinfo=UTC)

    previous_start, current_start = period_windows(TrendPeriod.THREE_MONTHS, NOW, UTC)
    assert current_start == datetime(2026, 7, 19, 12, 0, tzinfo=UTC)
    assert previous_start == datetime(2026, 4, 19, 12, 0, tzinfo=UTC)


def test_frequency_trend_boundary_belongs_to_current_window(make_session):
    boundary = datetime(2026, 10, 12, 12, 0, tzinfo=UTC)
    sessions = [
        make_session(boundary),                         # current
        make_session(NOW - timedelta(days=1)),          # current
        make_session(boundary - timedelta(seconds=1)),  # previous
        make_session(NOW - timedelta(days=20)),         # outside both
        Session(start_time=NOW - timedelta(hours=1)),   # active, ignored
    ]
    trend = detect_frequency_trend(sessions, TrendPeriod.WEEK, NOW, UTC)
    assert trend.direction is TrendDirection.INCREASING
    assert trend.percentage == pytest.approx(100.0)


def test_frequency_trend_first_period_reads_as_count_times_hundred(make_session):
    sessions = [make_session(NOW - timedelta(days=d)) for d in (1, 2, 3, 4, 5)]
    trend = detect_frequency_trend(sessions, TrendPeriod.WEEK, NOW, UTC)
    assert trend.percentage == pytest.approx(500.0)


def test_symptom_trend_counts_sessions_with_symptom(make_session):
    sessions = [
        make_session(NOW - timedelta(days=2), symptoms=(Symptom.PAIN,)),
        make_session(NOW - timedelta(days=3), symptoms=(Symptom.PAIN, Symptom.BLOOD)),
        make_session(NOW - timedelta(days=4), symptoms=(Symptom.PAIN,)),
        make_session(NOW - timedelta(days=5), symptoms=(Symptom.URGENCY,)),
        make_session(NOW - timedelta(days=40), symptoms=(Symptom.PAIN,)),
    ]
    trend = detect_symptom_trend(sessions, Symptom.PAIN, TrendPeriod.MONTH, NOW, UTC)
    assert trend.direction is TrendDirection.INCREASING
    assert trend.percentage == pytest.approx(200.0)

    stable = detect_symptom_trend(sessions, Symptom.HESITANCY, TrendPeriod.MONTH, NOW, UTC)
    assert stable.direction is TrendDirection.STABLE


def test_trend_period_parse():
    assert TrendPeriod.parse("three-months") is TrendPeriod.THREE_MONTHS
    assert TrendPeriod.parse("Week") is TrendPeriod.WEEK
    with pytest.raises(ValueError):
        TrendPeriod.parse("fortnight")
    assert [p.number_of_days for p in TrendPeriod] == [7, 30, 90]
