# uritrack/commands/report.py
'''
uritrack CLI - Report Module
Weekly dashboard, health insights, doctor summary, trends and a per-day table.
'''

import logging
from datetime import datetime, tzinfo as TzInfo
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import uritrack.config.config_manager as cf
from uritrack.utils.core_utils import days_before, format_duration, get_user_timezone, now_utc
from uritrack.utils.db import session_repository
from uritrack.utils.db.models import Session, decode_symptom
from uritrack.utils.error_handler import SymptomDecodeError, ValidationError
from uritrack.utils.reporting.analytics.descriptive import daily_session_counts
from uritrack.utils.reporting.analytics.periods import TrendPeriod
from uritrack.utils.reporting.analytics.trends import (
    TrendDirection,
    detect_frequency_trend,
    detect_symptom_trend,
    period_windows,
)
from uritrack.utils.reporting.clinical_insight_engine import (
    InsightPriority,
    generate_health_insights,
    group_by_priority,
)
from uritrack.utils.reporting.insight_engine import generate_weekly_insights
from uritrack.utils.reporting.summary import export_summary, generate_doctor_summary

app = typer.Typer(help="📈 Reports, insights and summaries.")
console = Console()
logger = logging.getLogger(__name__)

PRIORITY_STYLES = {
    InsightPriority.CRITICAL: "bold red",
    InsightPriority.HIGH: "red",
    InsightPriority.MEDIUM: "yellow",
    InsightPriority.LOW: "green",
}

period_option = typer.Option(
    None, "--period", "-p", help="week, month or three-months.")


def _parse_period(value: Optional[str]) -> TrendPeriod:
    try:
        return TrendPeriod.parse(value or cf.get_default_report_period())
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1)


def _load_history(now: datetime, tzinfo: TzInfo,
                  period: TrendPeriod = TrendPeriod.THREE_MONTHS) -> List[Session]:
    """
    Everything the reports can look at: two windows of `period` back from now,
    plus a day so sessions that started before the boundary are included.
    """
    previous_start, _ = period_windows(period, now, tzinfo)
    since = days_before(previous_start, 1, tzinfo)
    try:
        return session_repository.get_all_sessions(since=since)
    except SymptomDecodeError as e:
        logger.error(f"Unreadable symptom in session history: {e.label!r}")
        console.print(
            f"[bold red]Session history contains an unknown symptom: {e.label!r}[/bold red]")
        raise typer.Exit(code=1)


@app.command("weekly")
def weekly():
    """
    📅 Dashboard numbers for the last seven days.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    insights = generate_weekly_insights(_load_history(now, tzinfo), now, tzinfo)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Sessions", str(insights.total_sessions))
    table.add_row("Average per day", f"{insights.average_per_day:.1f}")
    table.add_row("Nighttime sessions", str(insights.nighttime_sessions))
    table.add_row("Sessions with issues", f"{insights.negative_percentage:.0f}%")
    table.add_row("Most active time", insights.most_active_time_cluster.label)
    console.print(Panel(table, title="This Week", expand=False))

    if insights.most_common_symptoms:
        console.print("[bold]Most common symptoms[/bold]")
        for symptom, count in insights.most_common_symptoms:
            console.print(f"  • {symptom.label}: {count}")


@app.command("insights")
def insights():
    """
    🩺 Health insights from your recent history, most urgent first.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    results = generate_health_insights(_load_history(now, tzinfo), now, tzinfo)
    if not results:
        console.print("[italic]No insights yet. Keep tracking![/italic]")
        return

    for priority, group in group_by_priority(results).items():
        style = PRIORITY_STYLES[priority]
        console.print(f"[{style}]{priority.name.title()} priority[/{style}]")
        for insight in group:
            body = f"{insight.description}\n\n[dim]💡 {insight.recommendation}[/dim]"
            console.print(Panel(
                body,
                title=f"[{style}]{insight.title}[/{style}]",
                subtitle=insight.category.value,
                expand=False,
            ))


@app.command("summary")
def summary(
    period: Optional[str] = period_option,
    export: Optional[Path] = typer.Option(
        None, "--export", "-e", help="Also write the summary to this text file."),
):
    """
    📝 Plain-text summary to share with a doctor.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    chosen = _parse_period(period)
    text = generate_doctor_summary(_load_history(now, tzinfo, chosen), chosen, now, tzinfo)
    console.print(text, markup=False, highlight=False)
    if export:
        path = export_summary(text, export)
        console.print(f"[green]✓ Summary written to {path}[/green]")


@app.command("trend")
def trend(
    period: Optional[str] = period_option,
    symptom: Optional[str] = typer.Option(
        None, "--symptom", "-s", help="Show the trend for one symptom instead of frequency."),
):
    """
    📈 Compare the current period with the one before it.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    chosen = _parse_period(period)
    history = _load_history(now, tzinfo, chosen)

    if symptom:
        try:
            tag = decode_symptom(symptom)
        except ValidationError as e:
            console.print(f"[bold red]{e}[/bold red]")
            raise typer.Exit(code=1)
        result = detect_symptom_trend(history, tag, chosen, now, tzinfo)
        subject = tag.label
    else:
        result = detect_frequency_trend(history, chosen, now, tzinfo)
        subject = "Frequency"

    color = {TrendDirection.INCREASING: "red", TrendDirection.DECREASING: "cyan",
             TrendDirection.STABLE: "green"}[result.direction]
    console.print(
        f"{subject} ({chosen.label}): [{color}]{result.description}[/{color}]")


@app.command("daily")
def daily(days: int = typer.Option(7, "--days", "-d", help="Number of days to show.")):
    """
    🗓️ Sessions per day for the last N days.
    """
    if days <= 0:
        console.print("[bold red]--days must be positive.[/bold red]")
        raise typer.Exit(code=1)
    now = now_utc()
    tzinfo = get_user_timezone()
    try:
        history = session_repository.get_all_sessions(since=days_before(now, days + 1, tzinfo))
    except SymptomDecodeError as e:
        console.print(
            f"[bold red]Session history contains an unknown symptom: {e.label!r}[/bold red]")
        raise typer.Exit(code=1)
    df = daily_session_counts(history, days, now, tzinfo)
    df["avg_duration"] = df["avg_duration"].map(format_duration)
    print_dataframe(df)


def print_dataframe(df):
    if df.empty:
        console.print("[yellow]⚠️ No data found.[/yellow]")
        return
    table = Table(show_header=True, header_style="bold magenta")
    for col in df.columns:
        table.add_column(col)
    for _, row in df.iterrows():
        table.add_row(*[str(val) for val in row])
    console.print(table)
