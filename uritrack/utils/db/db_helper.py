# uritrack/utils/db/db_helper.py
from contextlib import contextmanager
import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Any, List, Optional, Tuple

import uritrack.config.config_manager as cf

logger = logging.getLogger(__name__)


def _resolve_db_path() -> Path:
    # Always read the latest env var at call time
    env_db = os.getenv("URITRACK_DB_PATH", "").strip()
    if env_db:
        return Path(env_db).expanduser().resolve()
    return cf.BASE_DIR / "uritrack.db"


# ───────────────────────────────────────────────────────────────────────────────
# Core Connection Context Manager
# ───────────────────────────────────────────────────────────────────────────────


@contextmanager
def get_connection():
    """
    Yields an sqlite3.Connection that:
      • uses sqlite3.Row rows,
      • will COMMIT on normal exit,
      • ROLLBACK on exception,
      • and ALWAYS CLOSE.
    """
    db_path = _resolve_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def safe_execute(
    sql: str,
    params: Tuple[Any, ...] = (),
    retries: int = 5,
    backoff: float = 0.1
) -> int:
    """
    Execute a write with retry on OperationalError (e.g. SQLITE_BUSY).
    Returns the number of affected rows.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(1, retries + 1):
        try:
            with get_connection() as conn:
                cur = conn.execute(sql, params)
                return cur.rowcount
        except sqlite3.OperationalError as e:
            last_exc = e
            logger.warning(
                "safe_execute attempt %d/%d failed: %s", attempt, retries, e)
            time.sleep(backoff * attempt)
    logger.error("safe_execute failed after %d retries", retries)
    raise last_exc  # type: ignore


def safe_query(
    sql: str,
    params: Tuple[Any, ...] = (),
    retries: int = 5,
    backoff: float = 0.1
) -> List[sqlite3.Row]:
    """
    Execute a read with retry on OperationalError.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(1, retries + 1):
        try:
            with get_connection() as conn:
                cur = conn.execute(sql, params)
                return cur.fetchall()
        except sqlite3.OperationalError as e:
            last_exc = e
            logger.warning("safe_query attempt %d/%d failed: %s",
                           attempt, retries, e)
            time.sleep(backoff * attempt)
    logger.error("safe_query failed after %d retries", retries)
    raise last_exc  # type: ignore
