# tests/conftest.py

import logging
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler

import pytest
import typer
from rich.prompt import Confirm

import uritrack.config.config_manager as cf
from uritrack.utils.db.database_manager import add_record, initialize_schema
from uritrack.utils.db.models import (
    NegativeOutcome,
    PositiveOutcome,
    Session,
    get_session_fields,
)

UTC = timezone.utc
# Monday
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _stub_typer_prompts(monkeypatch):
    """
    Silence every interactive question coming from typer.confirm,
    typer.prompt, and rich.prompt.Confirm.ask so tests run headless.
    """
    monkeypatch.setattr(typer, "confirm", lambda *a, **k: False)
    monkeypatch.setattr(Confirm, "ask", lambda *a, **k: False)
    monkeypatch.setattr(typer, "prompt", lambda *a, **k: "")
    yield


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """
    Point BASE_DIR / USER_CONFIG at a temporary directory so nothing touches
    the real ~/.uritrack.
    """
    base = tmp_path / "uritrack_home"
    monkeypatch.setattr(cf, "BASE_DIR", base)
    monkeypatch.setattr(cf, "USER_CONFIG", base / "config.toml")
    yield base


@pytest.fixture(autouse=True)
def test_db_file(tmp_path, monkeypatch):
    """
    Fresh SQLite file per test through URITRACK_DB_PATH, schema initialized.
    """
    db_file = tmp_path / "test_uritrack.db"
    monkeypatch.setenv("URITRACK_DB_PATH", str(db_file))
    initialize_schema()
    yield db_file


@pytest.fixture(autouse=True)
def _drop_app_log_handlers():
    """Remove handlers added by setup_logging() so they don't leak between tests."""
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if type(h) in (RotatingFileHandler, logging.StreamHandler):
            root.removeHandler(h)
            h.close()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_session():
    """
    Build a completed Session ending at `end` (defaults to NOW).
    Passing symptoms or negative=True makes the outcome negative.
    """
    def _make(end=None, duration=30, symptoms=(), negative=False, notes="", start=True):
        end = end or NOW
        if symptoms or negative:
            outcome = NegativeOutcome(symptoms=tuple(symptoms), notes=notes)
        else:
            outcome = PositiveOutcome(notes=notes)
        return Session(
            start_time=end - timedelta(seconds=duration) if start else None,
            end_time=end,
            outcome=outcome,
        )
    return _make


@pytest.fixture
def store_session(make_session):
    """Persist a completed session straight into the test DB and return it."""
    def _store(*args, **kwargs):
        session = make_session(*args, **kwargs)
        session.id = add_record("sessions", session.to_dict(), get_session_fields())
        return session
    return _store
