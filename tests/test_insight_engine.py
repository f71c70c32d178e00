# tests/test_insight_engine.py

from datetime import datetime, timedelta, timezone

import pytest

from uritrack.utils.db.models import Session, Symptom
from uritrack.utils.reporting.analytics.periods import TimeCluster
from uritrack.utils.reporting.insight_engine import generate_weekly_insights, week_sessions

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def test_empty_week_reports_zeroes_and_morning():
    insights = generate_weekly_insights([], NOW, UTC)
    assert insights.total_sessions == 0
    assert insights.average_per_day == 0.0
    assert insights.most_common_symptoms == []
    assert insights.most_active_time_cluster is TimeCluster.MORNING
    assert insights.nighttime_sessions == 0
    assert insights.negative_percentage == 0.0


def test_week_window_is_seven_days_inclusive(make_session):
    sessions = [
        make_session(NOW),
        make_session(NOW - timedelta(days=7)),
        make_session(NOW - timedelta(days=7, seconds=1)),
        Session(start_time=NOW - timedelta(minutes=5)),
    ]
    assert len(week_sessions(sessions, NOW, UTC)) == 2


def test_weekly_insights_aggregate(make_session):
    sessions = []
    for day in range(7):
        base = NOW - timedelta(days=day)
        sessions.append(make_session(base.replace(hour=9)))
        sessions.append(make_session(base.replace(hour=23) - timedelta(days=1)))
    sessions[0] = make_session(NOW.replace(hour=9), symptoms=(Symptom.URGENCY,))
    sessions[2] = make_session(sessions[2].end_time, symptoms=(Symptom.URGENCY, Symptom.PAIN))
    sessions.append(make_session(NOW - timedelta(days=10), symptoms=(Symptom.BLOOD,)))

    insights = generate_weekly_insights(sessions, NOW, UTC)
    assert insights.total_sessions == 14
    assert insights.average_per_day == pytest.approx(2.0)
    assert insights.most_common_symptoms == [(Symptom.URGENCY, 2), (Symptom.PAIN, 1)]
    assert insights.most_active_time_cluster is TimeCluster.MORNING
    assert insights.nighttime_sessions == 7
    assert insights.negative_percentage == pytest.approx(2 / 14 * 100)
