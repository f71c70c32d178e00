# uritrack/utils/sync_monitor.py
"""
Sync/status reporting for session writes.

A SyncMonitor is created by the composition root (the CLI) and handed to the
repository functions that persist sessions. Nothing reaches it through a
module-level instance.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, List, Optional

from uritrack.utils.core_utils import now_utc

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 50


class SyncState(Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class EventKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    EventKind.INFO: logging.INFO,
    EventKind.SUCCESS: logging.INFO,
    EventKind.WARNING: logging.WARNING,
    EventKind.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class SyncLogEntry:
    timestamp: datetime
    message: str
    kind: EventKind = EventKind.INFO


@dataclass
class SyncStatus:
    state: SyncState = SyncState.IDLE
    message: str = "Not syncing"


class SyncMonitor:
    """Tracks the status of the last write and keeps a short event log."""

    def __init__(self, clock: Callable[[], datetime] = now_utc, max_entries: int = MAX_LOG_ENTRIES):
        self._clock = clock
        self.status = SyncStatus()
        self.last_sync_time: Optional[datetime] = None
        self._entries: Deque[SyncLogEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> List[SyncLogEntry]:
        return list(self._entries)

    def report_start(self):
        self.status = SyncStatus(SyncState.SYNCING, "Syncing...")
        self.log_event("Sync started", EventKind.INFO)

    def report_success(self, at: Optional[datetime] = None):
        self.last_sync_time = at or self._clock()
        self.status = SyncStatus(SyncState.SUCCESS, "Synced")
        self.log_event("Sync completed successfully", EventKind.SUCCESS)

    def report_error(self, message: str):
        self.status = SyncStatus(SyncState.ERROR, message)
        self.log_event(f"Sync error: {message}", EventKind.ERROR)

    def log_event(self, message: str, kind: EventKind = EventKind.INFO):
        self._entries.append(SyncLogEntry(self._clock(), message, kind))
        logger.log(_LOG_LEVELS[kind], message)
