# uritrack/utils/reporting/clinical_insight_engine.py
"""
Rule-based health insights.

Each rule is a plain function of a RuleContext returning zero or more
HealthInsight records. RULES lists them in evaluation order; the final list
is sorted by descending priority and rules that tie keep that order.
All thresholds below are fixed.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo as TzInfo
from enum import Enum, IntEnum
from typing import Callable, Dict, List, Optional, Sequence

from uritrack.utils import core_utils as cu
from uritrack.utils.db.models import Session, Symptom
from uritrack.utils.reporting.analytics import descriptive as stats
from uritrack.utils.reporting.analytics.periods import TrendPeriod
from uritrack.utils.reporting.analytics.trends import (
    detect_frequency_trend,
    detect_symptom_trend,
)
from uritrack.utils.reporting.insight_engine import week_sessions

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
SYMPTOM_WINDOW_DAYS = 14

HIGH_FREQUENCY_PER_DAY = 10
LOW_FREQUENCY_PER_DAY = 4
HEALTHY_FREQUENCY_RANGE = (6, 8)

PAIN_THRESHOLD = 3
INCOMPLETE_THRESHOLD = 5
WEAK_STREAM_THRESHOLD = 5
BURNING_THRESHOLD = 3
HESITANCY_THRESHOLD = 5
URGENCY_THRESHOLD = 7

NOCTURIA_PER_NIGHT = 2
SHORT_DURATION_SECONDS = 5
UNEVEN_CLUSTER_SHARE = 0.5

FREQUENCY_TREND_PERCENT = 30
SYMPTOM_TREND_PERCENT = 50


class InsightPriority(IntEnum):
    CRITICAL = 4
    HIGH = 3
    MEDIUM = 2
    LOW = 1


class InsightCategory(Enum):
    FREQUENCY = "Frequency"
    SYMPTOMS = "Symptoms"
    PATTERNS = "Patterns"
    HYDRATION = "Hydration"
    TRENDS = "Trends"


@dataclass(frozen=True)
class HealthInsight:
    title: str
    description: str
    recommendation: str
    priority: InsightPriority
    category: InsightCategory

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "priority": self.priority.name.lower(),
            "category": self.category.value,
        }


class RuleContext:
    """Read-only view of the history and the windows the rules look at."""

    def __init__(self, sessions: Sequence[Session], now: datetime, tzinfo: Optional[TzInfo] = None):
        self.sessions = stats.completed_sessions(sessions)
        self.now = cu.to_utc(now)
        self.tzinfo = tzinfo
        self.week = week_sessions(self.sessions, self.now, tzinfo)
        self.two_weeks = stats.sessions_ending_between(
            self.sessions, cu.days_before(self.now, SYMPTOM_WINDOW_DAYS, tzinfo), self.now)
        self._symptom_counts = dict(stats.most_common_symptoms(self.two_weeks, limit=None))

    def recent_symptom_count(self, symptom: Symptom) -> int:
        return self._symptom_counts.get(symptom, 0)

    def share_of_recent(self, count: int) -> float:
        return count / len(self.two_weeks) * 100 if self.two_weeks else 0.0


Rule = Callable[[RuleContext], List[HealthInsight]]


# ---------- Frequency ----------

def rule_frequency(ctx: RuleContext) -> List[HealthInsight]:
    # Averages strictly between 4 and 6 or between 8 and 10 produce nothing.
    avg = len(ctx.week) / WEEK_DAYS
    low, high = HEALTHY_FREQUENCY_RANGE
    if avg > HIGH_FREQUENCY_PER_DAY:
        return [HealthInsight(
            "High Urination Frequency",
            f"You're averaging {avg:.1f} sessions per day, which is higher than normal (6-8/day). "
            "This could indicate overhydration, diabetes, or urinary tract infection.",
            "Consider tracking your fluid intake and consult with a healthcare provider if this persists.",
            InsightPriority.HIGH, InsightCategory.FREQUENCY)]
    if avg < LOW_FREQUENCY_PER_DAY:
        return [HealthInsight(
            "Low Urination Frequency",
            f"You're averaging {avg:.1f} sessions per day, which is lower than normal (6-8/day). "
            "This might suggest dehydration.",
            "Increase your fluid intake to 8-10 glasses of water per day and monitor for improvement.",
            InsightPriority.MEDIUM, InsightCategory.FREQUENCY)]
    if low <= avg <= high:
        return [HealthInsight(
            "Healthy Frequency",
            f"Your urination frequency of {avg:.1f} sessions per day is within the normal range.",
            "Keep up your current hydration habits!",
            InsightPriority.LOW, InsightCategory.FREQUENCY)]
    return []


# ---------- Symptom patterns (last 14 days) ----------

def rule_blood(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.BLOOD)
    if count <= 0:
        return []
    return [HealthInsight(
        "⚠️ Blood Detected",
        f"You've reported blood in your urine {count} time(s) in the past two weeks. "
        "This requires immediate medical attention.",
        "Seek medical evaluation immediately. Blood in urine (hematuria) can indicate infection, "
        "kidney stones, or other serious conditions.",
        InsightPriority.CRITICAL, InsightCategory.SYMPTOMS)]


def rule_pain(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.PAIN)
    if count < PAIN_THRESHOLD:
        return []
    return [HealthInsight(
        "Recurring Pain",
        f"You've experienced pain during {count} sessions in the past two weeks.",
        "Persistent pain could indicate a urinary tract infection, kidney stones, or prostate issues. "
        "Schedule an appointment with your healthcare provider.",
        InsightPriority.HIGH, InsightCategory.SYMPTOMS)]


def rule_incomplete_emptying(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.INCOMPLETE)
    if count < INCOMPLETE_THRESHOLD:
        return []
    return [HealthInsight(
        "Incomplete Bladder Emptying",
        f"You've reported not feeling fully empty in {ctx.share_of_recent(count):.0f}% of your sessions.",
        "This could indicate benign prostatic hyperplasia (BPH) or bladder dysfunction. "
        "Consider pelvic floor exercises and consult a urologist.",
        InsightPriority.MEDIUM, InsightCategory.SYMPTOMS)]


def rule_weak_stream(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.WEAK_STREAM)
    if count < WEAK_STREAM_THRESHOLD:
        return []
    return [HealthInsight(
        "Weak Urine Stream",
        f"You've experienced weak stream in {count} sessions recently.",
        "This is common with age or prostate enlargement. Try double voiding (urinate, wait a moment, "
        "then try again) and consider pelvic floor strengthening.",
        InsightPriority.MEDIUM, InsightCategory.SYMPTOMS)]


def rule_burning(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.BURNING)
    if count < BURNING_THRESHOLD:
        return []
    return [HealthInsight(
        "Burning Sensation",
        f"You've experienced burning while urinating in {count} recent sessions.",
        "Burning sensation often indicates urinary tract infection (UTI) or inflammation. "
        "Increase water intake and consult a healthcare provider if symptoms persist.",
        InsightPriority.HIGH, InsightCategory.SYMPTOMS)]


def rule_hesitancy(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.HESITANCY)
    if count < HESITANCY_THRESHOLD:
        return []
    return [HealthInsight(
        "Difficulty Initiating Flow",
        f"You've had trouble starting urination in {count} sessions.",
        "Hesitancy can be related to prostate issues or pelvic floor tension. "
        "Relaxation techniques and medical evaluation may help.",
        InsightPriority.MEDIUM, InsightCategory.SYMPTOMS)]


def rule_urgency(ctx: RuleContext) -> List[HealthInsight]:
    count = ctx.recent_symptom_count(Symptom.URGENCY)
    if count < URGENCY_THRESHOLD:
        return []
    return [HealthInsight(
        "Frequent Urgent Urges",
        f"You've experienced urgent needs to urinate in {ctx.share_of_recent(count):.0f}% of sessions.",
        "Urgency can indicate overactive bladder. Bladder training exercises, reducing caffeine/alcohol, "
        "and medical consultation may help.",
        InsightPriority.HIGH, InsightCategory.SYMPTOMS)]


# ---------- Nighttime ----------

def rule_nocturia(ctx: RuleContext) -> List[HealthInsight]:
    per_night = stats.nighttime_frequency(ctx.week, ctx.tzinfo) / WEEK_DAYS
    if per_night < NOCTURIA_PER_NIGHT:
        return []
    return [HealthInsight(
        "Nocturia (Nighttime Urination)",
        f"You're waking up an average of {per_night:.1f} times per night to urinate.",
        "Limit fluids 2-3 hours before bedtime, avoid caffeine and alcohol in the evening, and elevate "
        "your legs in the afternoon. If persistent, consult your doctor about possible sleep apnea or "
        "heart conditions.",
        InsightPriority.MEDIUM, InsightCategory.PATTERNS)]


# ---------- Hydration proxies ----------

def rule_short_duration(ctx: RuleContext) -> List[HealthInsight]:
    avg = stats.average_duration(ctx.week)
    if avg >= SHORT_DURATION_SECONDS:
        return []
    return [HealthInsight(
        "Short Duration Sessions",
        f"Your sessions are averaging only {int(avg)} seconds, which might indicate inadequate "
        "hydration or bladder irritation.",
        "Ensure you're drinking enough water throughout the day. Aim for clear to pale yellow urine color.",
        InsightPriority.LOW, InsightCategory.HYDRATION)]


def rule_uneven_hydration(ctx: RuleContext) -> List[HealthInsight]:
    clusters = stats.time_of_day_clustering(ctx.week, ctx.tzinfo)
    top = stats.most_active_cluster(clusters)
    if top is None or clusters[top] / len(ctx.week) <= UNEVEN_CLUSTER_SHARE:
        return []
    return [HealthInsight(
        "Uneven Hydration Pattern",
        f"Most of your sessions occur during {top.label.lower()}.",
        "Try to distribute your fluid intake more evenly throughout the day for better bladder health.",
        InsightPriority.MEDIUM, InsightCategory.PATTERNS)]


# ---------- Month-over-month trends ----------

def rule_frequency_trend(ctx: RuleContext) -> List[HealthInsight]:
    trend = detect_frequency_trend(ctx.sessions, TrendPeriod.MONTH, ctx.now, ctx.tzinfo)
    if trend.is_increase_over(FREQUENCY_TREND_PERCENT):
        return [HealthInsight(
            "Increasing Frequency Trend",
            f"Your urination frequency has increased by {trend.percentage:.0f}% over the past month.",
            "This significant increase warrants medical evaluation. Track any new medications, "
            "dietary changes, or other symptoms to discuss with your doctor.",
            InsightPriority.HIGH, InsightCategory.TRENDS)]
    if trend.is_decrease_over(FREQUENCY_TREND_PERCENT):
        return [HealthInsight(
            "Decreasing Frequency Trend",
            f"Your urination frequency has decreased by {trend.percentage:.0f}% over the past month.",
            "Ensure you're maintaining adequate hydration. If accompanied by dark urine or other "
            "symptoms, consult a healthcare provider.",
            InsightPriority.MEDIUM, InsightCategory.TRENDS)]
    return []


def rule_symptom_trends(ctx: RuleContext) -> List[HealthInsight]:
    insights = []
    for symptom in Symptom:
        trend = detect_symptom_trend(ctx.sessions, symptom, TrendPeriod.MONTH, ctx.now, ctx.tzinfo)
        if trend.is_increase_over(SYMPTOM_TREND_PERCENT):
            insights.append(HealthInsight(
                f"Worsening {symptom.label}",
                f"Your {symptom.label.lower()} symptoms have increased by {trend.percentage:.0f}% this month.",
                "Schedule an appointment with your healthcare provider to evaluate this worsening symptom.",
                InsightPriority.HIGH, InsightCategory.SYMPTOMS))
    return insights


RULES: List[Rule] = [
    rule_frequency,
    rule_blood,
    rule_pain,
    rule_incomplete_emptying,
    rule_weak_stream,
    rule_burning,
    rule_hesitancy,
    rule_urgency,
    rule_nocturia,
    rule_short_duration,
    rule_uneven_hydration,
    rule_frequency_trend,
    rule_symptom_trends,
]


def generate_health_insights(sessions: Sequence[Session], now: datetime,
                             tzinfo: Optional[TzInfo] = None,
                             rules: Sequence[Rule] = RULES) -> List[HealthInsight]:
    """
    Evaluate every rule against the completed history and return the
    insights ordered by descending priority (stable for equal priorities).
    """
    ctx = RuleContext(sessions, now, tzinfo)
    insights: List[HealthInsight] = []
    for rule in rules:
        produced = rule(ctx)
        if produced:
            logger.debug("%s produced %d insight(s)", rule.__name__, len(produced))
        insights.extend(produced)
    return sorted(insights, key=lambda i: i.priority, reverse=True)


def group_by_priority(insights: Sequence[HealthInsight]) -> Dict[InsightPriority, List[HealthInsight]]:
    """Group an already-sorted insight list for display without reordering it."""
    groups: Dict[InsightPriority, List[HealthInsight]] = {}
    for insight in insights:
        groups.setdefault(insight.priority, []).append(insight)
    return groups
