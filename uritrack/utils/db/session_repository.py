# uritrack/utils/db/session_repository.py
"""
SQLite-backed session store.

Only one session can be active at a time. Completing a session fixes its
end_time exactly once; cancelling deletes an active session so it never
reaches the analytics. Every write can report to an injected SyncMonitor.
"""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Tuple

from uritrack.utils.core_utils import now_utc, to_utc
from uritrack.utils.db.database_manager import add_record, update_record
from uritrack.utils.db.db_helper import safe_execute, safe_query
from uritrack.utils.db.models import (
    CompletionStatus,
    Outcome,
    Session,
    encode_symptoms,
    get_session_fields,
    session_from_row,
)
from uritrack.utils.error_handler import ValidationError, handle_db_errors
from uritrack.utils.sync_monitor import EventKind, SyncMonitor

logger = logging.getLogger(__name__)


@contextmanager
def _reporting(monitor: Optional[SyncMonitor], success_message: str):
    if monitor is None:
        yield
        return
    monitor.report_start()
    try:
        yield
    except sqlite3.Error as e:
        monitor.report_error(f"Failed to save session: {e}")
        raise
    monitor.report_success()
    monitor.log_event(success_message, EventKind.SUCCESS)


def _fetch_one(sql: str, params: tuple = ()) -> Optional[Session]:
    rows = safe_query(sql, params)
    if not rows:
        return None
    return session_from_row(dict(rows[0]))


def get_active_session() -> Optional[Session]:
    return _fetch_one(
        "SELECT * FROM sessions WHERE end_time IS NULL ORDER BY start_time DESC LIMIT 1"
    )


def get_session_by_uid(uid_val: str) -> Optional[Session]:
    return _fetch_one("SELECT * FROM sessions WHERE uid = ?", (uid_val,))


def get_all_sessions(
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Session]:
    """
    Return sessions newest first, optionally bounded by start_time.
    Rows with unknown symptom labels raise SymptomDecodeError.
    """
    clauses, params = [], []
    if since is not None:
        clauses.append("start_time >= ?")
        params.append(to_utc(since).isoformat())
    if until is not None:
        clauses.append("start_time <= ?")
        params.append(to_utc(until).isoformat())
    sql = "SELECT * FROM sessions"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY start_time DESC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))

    return [session_from_row(dict(r)) for r in safe_query(sql, tuple(params))]


@handle_db_errors("start_session")
def start_session(now: Optional[datetime] = None, monitor: Optional[SyncMonitor] = None) -> Session:
    """
    Create an active session starting at `now`.
    If a session is already active it is returned unchanged.
    """
    active = get_active_session()
    if active is not None:
        logger.info("Session %s already active; not starting another", active.uid)
        return active

    now = to_utc(now or now_utc())
    session = Session(start_time=now, updated_at=now)
    if monitor:
        monitor.log_event("Session started", EventKind.INFO)
    with _reporting(monitor, "Session saved locally"):
        session.id = add_record("sessions", session.to_dict(), get_session_fields())
    return session


@handle_db_errors("complete_active_session")
def complete_active_session(
    end_time: Optional[datetime] = None,
    outcome: Optional[Outcome] = None,
    monitor: Optional[SyncMonitor] = None,
) -> Tuple[CompletionStatus, Optional[Session]]:
    """
    Complete the active session with its outcome.
    Returns (status, session). Conflicts are reported through the status.
    """
    active = get_active_session()
    if active is None:
        logger.warning("No current session to end")
        return CompletionStatus.NO_ACTIVE_SESSION, None

    status = active.complete(end_time or now_utc(), outcome)
    if status is not CompletionStatus.COMPLETED:
        return status, active

    active.updated_at = now_utc()
    record = active.to_dict()
    updates = {k: record[k] for k in
               ("end_time", "duration", "feeling", "symptoms", "notes", "updated_at")}
    if monitor:
        monitor.log_event("Completing session", EventKind.INFO)
    with _reporting(monitor, f"Session completed and saved (Duration: {int(active.duration)}s)"):
        update_record("sessions", active.id, updates)
    return status, active


@handle_db_errors("cancel_active_session")
def cancel_active_session(monitor: Optional[SyncMonitor] = None) -> bool:
    """Discard the active session. Returns False when nothing was active."""
    active = get_active_session()
    if active is None:
        return False
    with _reporting(monitor, "Active session discarded"):
        safe_execute("DELETE FROM sessions WHERE id = ?", (active.id,))
    return True


@handle_db_errors("update_session_outcome")
def update_session_outcome(uid_val: str, outcome: Outcome,
                           monitor: Optional[SyncMonitor] = None) -> Session:
    """
    Replace feeling/symptoms/notes of a completed session.
    end_time and duration never change here.
    """
    session = get_session_by_uid(uid_val)
    if session is None:
        raise ValidationError(f"No session with uid {uid_val}")
    if session.is_active:
        raise ValidationError("Cannot edit the outcome of an active session")

    session.outcome = outcome
    session.updated_at = now_utc()
    updates = {
        "feeling": outcome.feeling.value,
        "symptoms": encode_symptoms(outcome.symptoms),
        "notes": outcome.notes,
        "updated_at": session.updated_at.isoformat(),
    }
    with _reporting(monitor, f"Session {uid_val} updated"):
        update_record("sessions", session.id, updates)
    return session


@handle_db_errors("delete_session")
def delete_session(uid_val: str, monitor: Optional[SyncMonitor] = None) -> bool:
    with _reporting(monitor, f"Session {uid_val} deleted"):
        deleted = safe_execute("DELETE FROM sessions WHERE uid = ?", (uid_val,))
    return deleted > 0


@handle_db_errors("delete_all_sessions")
def delete_all_sessions(monitor: Optional[SyncMonitor] = None) -> int:
    with _reporting(monitor, "All sessions deleted"):
        deleted = safe_execute("DELETE FROM sessions")
    return deleted
