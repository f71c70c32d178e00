# tests/test_sync_monitor.py

from datetime import datetime, timezone

from uritrack.utils.sync_monitor import EventKind, SyncMonitor, SyncState

FIXED = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def test_initial_state_is_idle():
    monitor = SyncMonitor(clock=lambda: FIXED)
    assert monitor.status.state is SyncState.IDLE
    assert monitor.last_sync_time is None
    assert monitor.entries == []


def test_start_success_and_error_transitions():
    monitor = SyncMonitor(clock=lambda: FIXED)
    monitor.report_start()
    assert monitor.status.state is SyncState.SYNCING

    monitor.report_success()
    assert monitor.status.state is SyncState.SUCCESS
    assert monitor.last_sync_time == FIXED

    monitor.report_error("disk full")
    assert monitor.status.state is SyncState.ERROR
    assert monitor.status.message == "disk full"
    assert monitor.entries[-1].kind is EventKind.ERROR
    # an error does not erase the last good sync
    assert monitor.last_sync_time == FIXED


def test_report_success_with_explicit_time():
    monitor = SyncMonitor()
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    monitor.report_success(at)
    assert monitor.last_sync_time == at


def test_log_keeps_most_recent_entries():
    monitor = SyncMonitor(clock=lambda: FIXED, max_entries=3)
    for i in range(5):
        monitor.log_event(f"event {i}")
    assert [e.message for e in monitor.entries] == ["event 2", "event 3", "event 4"]


def test_events_are_mirrored_to_logging(caplog):
    monitor = SyncMonitor(clock=lambda: FIXED)
    with caplog.at_level("WARNING"):
        monitor.log_event("clock skew", EventKind.WARNING)
    assert "clock skew" in caplog.text
