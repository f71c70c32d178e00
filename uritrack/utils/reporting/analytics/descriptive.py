# uritrack/utils/reporting/analytics/descriptive.py
'''
uritrack - Descriptive Analytics Module
Aggregates over a snapshot of sessions: counts, averages, percentages,
symptom tallies and hour-of-day clustering. Every function is pure and only
looks at completed sessions; sessions lacking a timestamp a computation
needs are left out of that computation.
'''

import logging
from datetime import datetime, tzinfo as TzInfo
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from uritrack.utils import core_utils as cu
from uritrack.utils.db.models import Feeling, Session, Symptom
from uritrack.utils.reporting.analytics.periods import DateRange, TimeCluster

logger = logging.getLogger(__name__)

NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6


def completed_sessions(sessions: Iterable[Session]) -> List[Session]:
    return [s for s in sessions if s.end_time is not None]


def _timed_sessions(sessions: Iterable[Session]) -> List[Session]:
    # completed and with a known start
    return [s for s in sessions if s.end_time is not None and s.start_time is not None]


def sessions_ending_between(sessions: Iterable[Session], start: datetime, end: datetime,
                            include_end: bool = True) -> List[Session]:
    """Completed sessions whose end_time is in [start, end] (or [start, end))."""
    start, end = cu.to_utc(start), cu.to_utc(end)
    result = []
    for s in completed_sessions(sessions):
        if s.end_time < start:
            continue
        if s.end_time < end or (include_end and s.end_time == end):
            result.append(s)
    return result


def total_sessions(sessions: Iterable[Session], date_range: DateRange,
                   tzinfo: Optional[TzInfo] = None) -> int:
    return sum(1 for s in completed_sessions(sessions)
               if date_range.contains(s.end_time, tzinfo))


def average_sessions_per_day(sessions: Iterable[Session], date_range: DateRange,
                             tzinfo: Optional[TzInfo] = None) -> float:
    days = date_range.number_of_days(tzinfo)
    if days <= 0:
        return 0.0
    return total_sessions(sessions, date_range, tzinfo) / days


def average_duration(sessions: Iterable[Session]) -> float:
    timed = _timed_sessions(sessions)
    if not timed:
        return 0.0
    return sum(s.duration for s in timed) / len(timed)


def _tally_symptoms(sessions: Iterable[Session]) -> Dict[Symptom, int]:
    counts: Dict[Symptom, int] = {}
    for s in completed_sessions(sessions):
        for symptom in s.symptoms:
            counts[symptom] = counts.get(symptom, 0) + 1
    return counts


def most_common_symptoms(sessions: Iterable[Session],
                         limit: Optional[int] = 3) -> List[Tuple[Symptom, int]]:
    """
    Symptoms by descending count. Equal counts keep first-encountered order.
    limit=None returns the full tally.
    """
    ranked = sorted(_tally_symptoms(sessions).items(),
                    key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


def symptom_frequency(sessions: Iterable[Session]) -> Dict[Symptom, float]:
    """Occurrences per completed session, per symptom."""
    completed = completed_sessions(sessions)
    if not completed:
        return {}
    return {symptom: count / len(completed)
            for symptom, count in _tally_symptoms(completed).items()}


def negative_session_percentage(sessions: Iterable[Session]) -> float:
    completed = completed_sessions(sessions)
    if not completed:
        return 0.0
    negative = sum(1 for s in completed if s.feeling is Feeling.NEGATIVE)
    return negative / len(completed) * 100


def time_of_day_clustering(sessions: Iterable[Session],
                           tzinfo: Optional[TzInfo] = None) -> Dict[TimeCluster, int]:
    """Counts per cluster of start hour. Clusters with no sessions are absent."""
    clusters: Dict[TimeCluster, int] = {}
    for s in _timed_sessions(sessions):
        cluster = TimeCluster.from_hour(cu.hour_of_day(s.start_time, tzinfo))
        clusters[cluster] = clusters.get(cluster, 0) + 1
    return clusters


def is_nighttime(start_time: datetime, tzinfo: Optional[TzInfo] = None) -> bool:
    hour = cu.hour_of_day(start_time, tzinfo)
    return hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR


def nighttime_frequency(sessions: Iterable[Session], tzinfo: Optional[TzInfo] = None) -> int:
    return sum(1 for s in _timed_sessions(sessions) if is_nighttime(s.start_time, tzinfo))


def most_active_cluster(clusters: Dict[TimeCluster, int]) -> Optional[TimeCluster]:
    """Cluster with the highest count; ties go to the earliest cluster of the day."""
    best = None
    for cluster in TimeCluster:
        count = clusters.get(cluster, 0)
        if count > 0 and (best is None or count > clusters[best]):
            best = cluster
    return best


def daily_session_counts(sessions: Iterable[Session], days: int, now: datetime,
                         tzinfo: Optional[TzInfo] = None) -> pd.DataFrame:
    """
    Per local calendar day for the trailing `days` days (today included):
    completed sessions, negative sessions and mean duration in seconds.
    """
    columns = ["date", "sessions", "negative", "avg_duration"]
    if days <= 0:
        return pd.DataFrame(columns=columns)

    first_day = cu.start_of_day(cu.days_before(now, days - 1, tzinfo), tzinfo)
    window = sessions_ending_between(sessions, first_day, now)
    records = [{
        "date": cu.to_local(s.end_time, tzinfo).date().isoformat(),
        "negative": int(s.feeling is Feeling.NEGATIVE),
        "duration": s.duration,
    } for s in window]

    all_days = [cu.to_local(cu.days_before(now, offset, tzinfo), tzinfo).date().isoformat()
                for offset in range(days - 1, -1, -1)]
    if not records:
        return pd.DataFrame({"date": all_days, "sessions": 0, "negative": 0,
                             "avg_duration": 0.0}, columns=columns)

    df = pd.DataFrame(records)
    grouped = df.groupby("date").agg(
        sessions=("negative", "size"),
        negative=("negative", "sum"),
        avg_duration=("duration", "mean"),
    )
    grouped = grouped.reindex(all_days, fill_value=0)
    grouped["sessions"] = grouped["sessions"].astype(int)
    grouped["negative"] = grouped["negative"].astype(int)
    grouped["avg_duration"] = grouped["avg_duration"].astype(float).round(1)
    return grouped.rename_axis("date").reset_index()[columns]
