# uritrack/utils/error_handler.py
"""
Centralized error handling and validation for uritrack.
"""
import sqlite3
import logging
from functools import wraps
from typing import Any, Iterable, Optional
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 500


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


class SymptomDecodeError(ValidationError):
    """Raised when a stored or user-supplied symptom label matches no known tag."""

    def __init__(self, label: Any):
        self.label = label
        super().__init__(
            f"Cannot initialize Symptom from unknown value: {label!r}")


class DatabaseError(Exception):
    """Raised when database operations fail."""
    pass


def handle_db_errors(operation_name: str):
    """Decorator for consistent database error handling."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except sqlite3.OperationalError as e:
                error_msg = str(e).lower()
                if 'locked' in error_msg or 'busy' in error_msg:
                    logger.warning(f"{operation_name} - Database busy: {e}")
                    console.print(
                        "[yellow]Database busy, please try again in a moment[/yellow]")
                else:
                    logger.error(
                        f"{operation_name} - DB operational error: {e}")
                    console.print(
                        f"[red]Database error in {operation_name}[/red]")
                raise DatabaseError(f"Database operation failed: {e}") from e
            except sqlite3.Error as e:
                logger.error(f"{operation_name} - DB error: {e}")
                console.print(f"[red]Database error in {operation_name}[/red]")
                raise DatabaseError(f"Database error: {e}") from e
            except ValidationError as e:
                logger.warning(f"{operation_name} - Validation error: {e}")
                raise
        return wrapper
    return decorator


def sanitize_string(value: Any, max_length: int = MAX_NOTES_LENGTH) -> Optional[str]:
    """Sanitize and truncate string values."""
    if value is None:
        return None

    sanitized = str(value).strip()
    if not sanitized:
        return None

    if len(sanitized) > max_length:
        logger.warning(
            f"Truncating string from {len(sanitized)} to {max_length} characters")
        sanitized = sanitized[:max_length]

    return sanitized


def validate_outcome_data(feeling: Any, symptoms: Optional[Iterable[Any]] = None, notes: Any = None):
    """
    Validate the outcome a user attaches to a session and build the Outcome value.

    - feeling: Feeling, or its label / name ("Positive", "negative").
    - symptoms: Symptom members or labels (legacy labels are accepted).
    - notes: free text, trimmed and truncated.

    Symptoms are only allowed on a negative feeling.
    """
    from uritrack.utils.db.models import (
        Feeling, NegativeOutcome, PositiveOutcome, decode_feeling, decode_symptoms)

    if feeling is None:
        raise ValidationError("Feeling is required to complete a session")
    if not isinstance(feeling, Feeling):
        feeling = decode_feeling(feeling)

    decoded = decode_symptoms(symptoms or [])
    clean_notes = sanitize_string(notes) or ""

    if feeling is Feeling.POSITIVE:
        if decoded:
            raise ValidationError(
                "Symptoms can only be recorded for a negative session")
        return PositiveOutcome(notes=clean_notes)
    return NegativeOutcome(symptoms=decoded, notes=clean_notes)
