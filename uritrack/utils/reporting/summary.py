# uritrack/utils/reporting/summary.py
'''
uritrack - Doctor Summary Module
Renders a plain-text digest of one reporting period that can be handed to a
clinician or saved to a file.
'''

import logging
from datetime import datetime, tzinfo as TzInfo
from pathlib import Path
from typing import Iterable, List, Optional, Union

from uritrack.utils import core_utils as cu
from uritrack.utils.db.models import Session
from uritrack.utils.reporting.analytics import descriptive as stats
from uritrack.utils.reporting.analytics.periods import TrendPeriod
from uritrack.utils.reporting.analytics.trends import detect_frequency_trend

logger = logging.getLogger(__name__)

BULLET = "•"


def period_sessions(sessions: Iterable[Session], period: TrendPeriod, now: datetime,
                    tzinfo: Optional[TzInfo] = None) -> List[Session]:
    return stats.sessions_ending_between(sessions, period.start_date(now, tzinfo), now)


def generate_doctor_summary(sessions: Iterable[Session],
                            period: TrendPeriod = TrendPeriod.MONTH,
                            now: Optional[datetime] = None,
                            tzinfo: Optional[TzInfo] = None) -> str:
    """
    Build the summary text for the period ending at `now`.

    Per-day averages divide by the period's nominal length (7, 30 or 90
    days). The frequency trend is computed over the full history passed in,
    not only the sessions inside the period.
    """
    sessions = list(sessions)
    now = cu.to_utc(now) if now is not None else cu.now_utc()
    period = TrendPeriod.parse(period)

    start = period.start_date(now, tzinfo)
    relevant = period_sessions(sessions, period, now, tzinfo)
    trend = detect_frequency_trend(sessions, period, now, tzinfo)

    lines = [
        "URINARY HEALTH SUMMARY",
        f"Period: {cu.format_date_for_report(start, tzinfo)} - {cu.format_date_for_report(now, tzinfo)}",
        "",
        "FREQUENCY:",
        f"{BULLET} Average sessions per day: {len(relevant) / period.number_of_days:.1f}",
        f"{BULLET} Total sessions: {len(relevant)}",
        f"{BULLET} Nighttime sessions: {stats.nighttime_frequency(relevant, tzinfo)}",
        f"{BULLET} Average duration: {int(stats.average_duration(relevant))} seconds",
        "",
        "SYMPTOMS:",
        f"{BULLET} Sessions with issues: {stats.negative_session_percentage(relevant):.0f}%",
    ]

    top = stats.most_common_symptoms(relevant)
    if top:
        lines.append(f"{BULLET} Most common symptoms:")
        for symptom, count in top:
            pct = count / len(relevant) * 100
            lines.append(f"  - {symptom.label}: {count} times ({pct:.0f}%)")

    lines += [
        "",
        "TRENDS:",
        f"{BULLET} Frequency trend: {trend.description}",
    ]
    logger.debug("Doctor summary built for %s (%d sessions)", period.value, len(relevant))
    return "\n".join(lines)


def export_summary(text: str, path: Union[str, Path]) -> Path:
    """Write a rendered summary to a UTF-8 text file and return its path."""
    out = Path(path).expanduser()
    if out.parent and not out.parent.exists():
        out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    logger.info("Summary exported to %s", out)
    return out
