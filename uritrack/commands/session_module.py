# uritrack/commands/session_module.py
'''
uritrack CLI - Session Module
Start and stop bathroom sessions, record how they went, and review or correct
the history.
'''

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

import uritrack.config.config_manager as cf
from uritrack.utils.core_utils import (
    days_before,
    format_duration,
    get_user_timezone,
    now_utc,
    to_local,
)
from uritrack.utils.db import session_repository
from uritrack.utils.db.models import CompletionStatus, Feeling, Symptom
from uritrack.utils.error_handler import DatabaseError, ValidationError, validate_outcome_data
from uritrack.utils.sync_monitor import SyncMonitor, SyncState

app = typer.Typer(help="🚽 Start, stop and review tracked sessions.")

console = Console()
logger = logging.getLogger(__name__)

symptom_option = typer.Option(
    None, "--symptom", "-s",
    help="Symptom label or name (repeatable), e.g. 'Weak stream' or weak_stream.")
notes_option = typer.Option(None, "--notes", "-n", help="Optional notes.")


def _print_sync_result(monitor: SyncMonitor):
    if monitor.status.state is SyncState.ERROR:
        console.print(f"[red]⚠️ {monitor.status.message}[/red]")
    elif monitor.last_sync_time is not None:
        console.print("[dim]✓ Saved[/dim]")


@app.command("start")
def start():
    """
    ▶️ Start a new session.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    active = session_repository.get_active_session()
    if active is not None:
        started = to_local(active.start_time, tzinfo).strftime("%H:%M:%S")
        console.print(
            f"[yellow]⚠️ A session is already running (started {started}).[/yellow]")
        console.print(
            "[dim]Use 'utrack session stop' to finish it or 'utrack session cancel' to discard it.[/dim]")
        return

    monitor = SyncMonitor()
    try:
        session = session_repository.start_session(now, monitor)
    except DatabaseError as e:
        console.print(f"[bold red]Could not start session: {e}[/bold red]")
        raise typer.Exit(code=1)

    console.print(
        f"[green]▶️ Session started at {to_local(session.start_time, tzinfo):%H:%M:%S}.[/green]")
    _print_sync_result(monitor)


@app.command("stop")
def stop(
    negative: bool = typer.Option(
        False, "--negative", help="Mark the session as not feeling right."),
    symptoms: Optional[List[str]] = symptom_option,
    notes: Optional[str] = notes_option,
):
    """
    ⏹️ Stop the running session and record the outcome.
    """
    now = now_utc()
    feeling = Feeling.NEGATIVE if negative else Feeling.POSITIVE
    try:
        outcome = validate_outcome_data(feeling, symptoms or [], notes)
    except ValidationError as e:
        console.print(f"[bold red]Invalid outcome: {e}[/bold red]")
        if symptoms and not negative:
            console.print("[dim]Add --negative to record symptoms.[/dim]")
        raise typer.Exit(code=1)

    monitor = SyncMonitor()
    try:
        status, session = session_repository.complete_active_session(now, outcome, monitor)
    except (ValidationError, DatabaseError) as e:
        console.print(f"[bold red]Could not stop session: {e}[/bold red]")
        raise typer.Exit(code=1)

    if status is CompletionStatus.NO_ACTIVE_SESSION:
        console.print("[yellow]⚠️ No active session to stop.[/yellow]")
        console.print("[dim]Use 'utrack session start' to begin one.[/dim]")
        return
    if status is not CompletionStatus.COMPLETED:
        console.print(f"[yellow]⚠️ Session not completed: {status.value}[/yellow]")
        raise typer.Exit(code=1)

    console.print(
        f"[green]⏹️ Session completed {session.feeling.emoji} "
        f"(Duration: {format_duration(session.duration)})[/green]")
    if session.symptoms:
        console.print(
            f"[dim]Symptoms: {', '.join(s.label for s in session.symptoms)}[/dim]")
    _print_sync_result(monitor)


@app.command("cancel")
def cancel():
    """
    🗑️ Discard the running session without recording it.
    """
    monitor = SyncMonitor()
    try:
        cancelled = session_repository.cancel_active_session(monitor)
    except (ValidationError, DatabaseError) as e:
        console.print(f"[bold red]Could not cancel session: {e}[/bold red]")
        raise typer.Exit(code=1)
    if cancelled:
        console.print("[green]Active session discarded.[/green]")
    else:
        console.print("[yellow]No active session to cancel.[/yellow]")


@app.command("status")
def status():
    """
    📊 Show the running session, if any.
    """
    active = session_repository.get_active_session()
    if active is None:
        console.print("[italic]No active session.[/italic]")
        return
    elapsed = (now_utc() - active.start_time).total_seconds()
    started = to_local(active.start_time, get_user_timezone())
    console.print(
        f"[cyan]⏱️ Session running since {started:%H:%M:%S} ({format_duration(elapsed)})[/cyan]")


@app.command("list")
def list_sessions(
    days: int = typer.Option(7, "--days", "-d", help="How many days back to show."),
    limit: Optional[int] = typer.Option(
        None, "--limit", help="Maximum rows (defaults to [sessions].fetch_limit)."),
):
    """
    📋 List recent sessions, newest first.
    """
    now = now_utc()
    tzinfo = get_user_timezone()
    since = days_before(now, days, tzinfo)
    try:
        sessions = session_repository.get_all_sessions(
            since=since, limit=limit or cf.get_fetch_limit())
    except ValidationError as e:
        console.print(f"[bold red]Could not read session history: {e}[/bold red]")
        raise typer.Exit(code=1)

    if not sessions:
        console.print("[italic]No sessions recorded in this period.[/italic]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("UID", style="dim", no_wrap=True)
    table.add_column("Date")
    table.add_column("Start")
    table.add_column("Duration", justify="right")
    table.add_column("Feeling", justify="center")
    table.add_column("Symptoms")
    table.add_column("Notes")

    for s in sessions:
        local = to_local(s.start_time, tzinfo) if s.start_time else None
        table.add_row(
            s.uid,
            f"{local:%Y-%m-%d}" if local else "-",
            f"{local:%H:%M}" if local else "-",
            format_duration(s.duration) if s.is_completed else "[cyan]running[/cyan]",
            s.feeling.emoji if s.is_completed else "",
            ", ".join(sym.label for sym in s.symptoms),
            s.notes,
        )
    console.print(table)


@app.command("edit")
def edit(
    uid: str = typer.Argument(..., help="UID of the session to edit."),
    feeling: Optional[str] = typer.Option(
        None, "--feeling", "-f", help="positive or negative."),
    symptoms: Optional[List[str]] = symptom_option,
    notes: Optional[str] = notes_option,
):
    """
    ✏️ Change the feeling, symptoms or notes of a completed session.
    Timing is never changed.
    """
    try:
        session = session_repository.get_session_by_uid(uid)
    except (ValidationError, DatabaseError) as e:
        console.print(f"[bold red]Could not read session {uid}: {e}[/bold red]")
        raise typer.Exit(code=1)
    if session is None:
        console.print(f"[bold red]No session with uid {uid}.[/bold red]")
        raise typer.Exit(code=1)

    new_feeling = feeling if feeling is not None else session.feeling
    if symptoms:
        new_symptoms = symptoms
    elif feeling is not None and feeling.strip().lower() == "positive":
        new_symptoms = []
    else:
        new_symptoms = list(session.symptoms)
    new_notes = notes if notes is not None else session.notes

    monitor = SyncMonitor()
    try:
        outcome = validate_outcome_data(new_feeling, new_symptoms, new_notes)
        updated = session_repository.update_session_outcome(uid, outcome, monitor)
    except (ValidationError, DatabaseError) as e:
        console.print(f"[bold red]Could not update session: {e}[/bold red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✏️ Session {uid} updated {updated.feeling.emoji}[/green]")
    _print_sync_result(monitor)


@app.command("delete")
def delete(
    uid: str = typer.Argument(..., help="UID of the session to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
):
    """
    ❌ Delete a session permanently.
    """
    if not yes and not typer.confirm(f"Delete session {uid}?", default=False):
        console.print("[yellow]Aborted.[/yellow]")
        return
    monitor = SyncMonitor()
    try:
        deleted = session_repository.delete_session(uid, monitor)
    except DatabaseError as e:
        console.print(f"[bold red]Could not delete session: {e}[/bold red]")
        raise typer.Exit(code=1)
    if deleted:
        console.print(f"[green]Session {uid} deleted.[/green]")
    else:
        console.print(f"[yellow]No session with uid {uid}.[/yellow]")


@app.command("symptoms")
def list_symptoms():
    """
    🩺 Show the symptom labels accepted by --symptom.
    """
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("Description")
    for symptom in Symptom:
        table.add_row(symptom.name.lower(), symptom.label, symptom.description)
    console.print(table)
