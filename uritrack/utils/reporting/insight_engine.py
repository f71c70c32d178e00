# uritrack/utils/reporting/insight_engine.py
'''
uritrack Weekly Insight Module
Bundles the descriptive analytics for the trailing seven days into one
record for the dashboard-style `report weekly` view.
'''

from dataclasses import dataclass, field
from datetime import datetime, tzinfo as TzInfo
from typing import List, Optional, Tuple

from uritrack.utils import core_utils as cu
from uritrack.utils.db.models import Session, Symptom
from uritrack.utils.reporting.analytics import descriptive as stats
from uritrack.utils.reporting.analytics.periods import TimeCluster

WEEK_DAYS = 7
TOP_SYMPTOMS = 3


@dataclass
class WeeklyInsights:
    average_per_day: float
    total_sessions: int
    most_common_symptoms: List[Tuple[Symptom, int]] = field(default_factory=list)
    most_active_time_cluster: TimeCluster = TimeCluster.MORNING
    nighttime_sessions: int = 0
    negative_percentage: float = 0.0


def week_sessions(sessions, now: datetime, tzinfo: Optional[TzInfo] = None) -> List[Session]:
    """Completed sessions that ended in the trailing seven days up to now."""
    return stats.sessions_ending_between(sessions, cu.days_before(now, WEEK_DAYS, tzinfo), now)


def generate_weekly_insights(sessions, now: datetime,
                             tzinfo: Optional[TzInfo] = None) -> WeeklyInsights:
    recent = week_sessions(sessions, now, tzinfo)
    clusters = stats.time_of_day_clustering(recent, tzinfo)
    return WeeklyInsights(
        average_per_day=len(recent) / WEEK_DAYS,
        total_sessions=len(recent),
        most_common_symptoms=stats.most_common_symptoms(recent, TOP_SYMPTOMS),
        # an empty week reports morning
        most_active_time_cluster=stats.most_active_cluster(clusters) or TimeCluster.MORNING,
        nighttime_sessions=stats.nighttime_frequency(recent, tzinfo),
        negative_percentage=stats.negative_session_percentage(recent),
    )
