# uritrack/utils/db/__init__.py

"""
Database connection, schema initialization, and repository APIs.
"""

# ─── Core connection helpers ────────────────────────────────────────────────────
from uritrack.utils.db.db_helper import (
    get_connection,
    safe_execute,
    safe_query,
)

# ─── Schema management ───────────────────────────────────────────────────────────
from uritrack.utils.db.database_manager import (
    is_initialized,
    initialize_schema,
    add_record,
    update_record,
)

# ─── Data models ────────────────────────────────────────────────────────────────
from uritrack.utils.db import models

# ─── Repository sub-modules ─────────────────────────────────────────────────────
from uritrack.utils.db import session_repository

# ─── Public API ─────────────────────────────────────────────────────────────────
__all__ = [
    "get_connection",
    "safe_execute",
    "safe_query",
    "is_initialized",
    "initialize_schema",
    "add_record",
    "update_record",
    "models",
    "session_repository",
]
