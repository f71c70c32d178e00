# uritrack/utils/db/database_manager.py
import logging
import sqlite3
import uuid

from uritrack.utils.db.db_helper import _resolve_db_path, get_connection

logger = logging.getLogger(__name__)


def is_initialized() -> bool:
    """Check if database exists and has tables"""
    db_path = _resolve_db_path()
    if not db_path.exists():
        return False

    try:
        with get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = cur.fetchall()
        return len(tables) > 0
    except sqlite3.Error:
        return False


def initialize_schema():
    """
    Create the sessions table and its indexes.
    Uses get_connection() as a context‐manager, which:
      • commits on normal exit,
      • rolls back on exception,
      • and always closes.
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.executescript("""
        CREATE TABLE IF NOT EXISTS sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            uid TEXT UNIQUE,
            start_time DATETIME,
            end_time DATETIME,
            duration REAL,
            feeling TEXT,
            symptoms TEXT DEFAULT '[]',
            notes TEXT,
            updated_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time);
        CREATE INDEX IF NOT EXISTS idx_sessions_end ON sessions(end_time);
        """)
        cursor.execute("SELECT COUNT(*) FROM sessions")
    logger.info("Database schema initialized at %s", _resolve_db_path())


def add_record(table, data, fields):
    with get_connection() as conn:
        cursor = conn.cursor()
        if "uid" in fields and not data.get("uid"):
            data["uid"] = str(uuid.uuid4())
        cols = ', '.join(fields)
        ph = ', '.join('?' for _ in fields)
        vals = [data.get(f) for f in fields]
        cursor.execute(f"INSERT INTO {table} ({cols}) VALUES ({ph})", vals)
        new_id = cursor.lastrowid
        # commit and close are handled by get_connection()
    return new_id


def update_record(table, record_id, updates):
    """
    Update a single row in `table` by its numeric primary key `id`.
    `updates` is a dict mapping column names to new values.
    """
    fields = [f"{col} = ?" for col in updates.keys()]
    values = list(updates.values())
    values.append(record_id)

    sql = f"UPDATE {table} SET {', '.join(fields)} WHERE id = ?"

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, values)
