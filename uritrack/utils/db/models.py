# uritrack/utils/db/models.py
import json
import logging
import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from uritrack.utils.core_utils import to_utc
from uritrack.utils.error_handler import SymptomDecodeError, ValidationError

logger = logging.getLogger(__name__)


class BaseModel:
    def asdict(self) -> dict:
        """
        Convert dataclass to dict, but keep raw types (Enum, datetime) for internal use.
        """
        return asdict(self)

    def to_dict(self) -> dict:
        """
        Convert dataclass to JSON-serializable dict:
         - Enum fields → their .value
         - datetime fields → ISO-format strings
         - Nested values with to_dict() → converted recursively
        """
        result = {}
        for f in fields(self.__class__):
            result[f.name] = _serialize(getattr(self, f.name))
        return result


def _serialize(val: Any) -> Any:
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, datetime):
        return val.isoformat()
    if hasattr(val, "to_dict") and callable(val.to_dict):
        return val.to_dict()
    if isinstance(val, (list, tuple)):
        return [_serialize(item) for item in val]
    return val


class Feeling(Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"

    @property
    def emoji(self) -> str:
        return "✅" if self is Feeling.POSITIVE else "❌"


class Symptom(Enum):
    PAIN = "Pain/Discomfort"
    BURNING = "Burning sensation"
    HESITANCY = "Difficulty starting"
    WEAK_STREAM = "Weak stream"
    INCOMPLETE = "Incomplete emptying"
    URGENCY = "Frequent urges"
    BLOOD = "Blood present"

    @property
    def label(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        return SYMPTOM_DESCRIPTIONS[self]


SYMPTOM_DESCRIPTIONS = {
    Symptom.PAIN: "Any pain or discomfort during urination",
    Symptom.BURNING: "Burning or stinging sensation while urinating",
    Symptom.HESITANCY: "Trouble initiating urine flow",
    Symptom.WEAK_STREAM: "Weak or slow urine stream",
    Symptom.INCOMPLETE: "Feeling that bladder isn't fully empty",
    Symptom.URGENCY: "Sudden, urgent need to urinate",
    Symptom.BLOOD: "Visible blood in urine (hematuria)",
}

# Stored label -> canonical tag, one table per vocabulary version.
# Historical data may carry any of these labels; they are normalized once,
# when rows are decoded.
SYMPTOM_VOCABULARY: Dict[str, Dict[str, Symptom]] = {
    "1.0": {
        "Not fully empty": Symptom.INCOMPLETE,
        "Dripping": Symptom.WEAK_STREAM,
        "Pain": Symptom.PAIN,
        "Blood": Symptom.BLOOD,
    },
    "1.1": {
        "Pain/Discomfort": Symptom.PAIN,
        "Burning sensation": Symptom.BURNING,
        "Difficulty starting": Symptom.HESITANCY,
        "Weak stream/Dripping": Symptom.WEAK_STREAM,
        "Incomplete emptying": Symptom.INCOMPLETE,
        "Frequent urges": Symptom.URGENCY,
        "Blood present": Symptom.BLOOD,
    },
    "1.2": {
        "Weak stream": Symptom.WEAK_STREAM,
    },
}

CURRENT_VOCABULARY_VERSION = "1.2"

SYMPTOM_LABELS: Dict[str, Symptom] = {
    label: symptom
    for version in SYMPTOM_VOCABULARY.values()
    for label, symptom in version.items()
}


def decode_symptom(label: Union[str, Symptom]) -> Symptom:
    """
    Map a stored label (current or legacy) or an enum name to its canonical Symptom.
    Unknown labels raise SymptomDecodeError; they are never coerced.
    """
    if isinstance(label, Symptom):
        return label
    if isinstance(label, str):
        if label in SYMPTOM_LABELS:
            return SYMPTOM_LABELS[label]
        name = label.strip().upper().replace("-", "_").replace(" ", "_")
        if name in Symptom.__members__:
            return Symptom[name]
    raise SymptomDecodeError(label)


def decode_symptoms(labels: Iterable[Union[str, Symptom]]) -> Tuple[Symptom, ...]:
    """
    Decode a symptom collection. Duplicates collapse; first-seen order is kept.
    """
    result = []
    for label in labels:
        symptom = decode_symptom(label)
        if symptom not in result:
            result.append(symptom)
    return tuple(result)


def encode_symptoms(symptoms: Iterable[Symptom]) -> str:
    """Serialize symptoms with current-version labels (JSON list)."""
    return json.dumps([s.value for s in symptoms])


def decode_feeling(value: Union[str, Feeling]) -> Feeling:
    if isinstance(value, Feeling):
        return value
    if isinstance(value, str):
        for feeling in Feeling:
            if value.strip().lower() in (feeling.value.lower(), feeling.name.lower()):
                return feeling
    raise ValidationError(f"Unknown feeling: {value!r}")


@dataclass(frozen=True)
class PositiveOutcome(BaseModel):
    notes: str = ""

    feeling = Feeling.POSITIVE

    @property
    def symptoms(self) -> Tuple[Symptom, ...]:
        return ()


@dataclass(frozen=True)
class NegativeOutcome(BaseModel):
    symptoms: Tuple[Symptom, ...] = ()
    notes: str = ""

    feeling = Feeling.NEGATIVE

    def __post_init__(self):
        object.__setattr__(self, "symptoms", decode_symptoms(self.symptoms))


Outcome = Union[PositiveOutcome, NegativeOutcome]


def outcome_from_parts(feeling: Optional[Union[str, Feeling]], symptoms: Iterable[Any] = (),
                       notes: Optional[str] = None) -> Outcome:
    """
    Build an Outcome from stored columns. A positive row that still carries
    symptoms is a data error and is reported as such.
    """
    decoded = decode_symptoms(symptoms or ())
    feeling = decode_feeling(feeling) if feeling else Feeling.POSITIVE
    if feeling is Feeling.NEGATIVE:
        return NegativeOutcome(symptoms=decoded, notes=notes or "")
    if decoded:
        raise ValidationError("Positive session cannot carry symptoms")
    return PositiveOutcome(notes=notes or "")


class CompletionStatus(Enum):
    COMPLETED = "completed"
    ALREADY_COMPLETED = "already_completed"
    MISSING_START = "missing_start"
    NO_ACTIVE_SESSION = "no_active_session"


@dataclass
class Session(BaseModel):
    """
    One tracked start-to-stop episode.

    A session is active while end_time is None. Completion sets end_time once;
    duration is always derived from the two timestamps.
    """
    uid: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    outcome: Optional[Outcome] = None
    id: Optional[int] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.start_time is not None:
            self.start_time = to_utc(self.start_time)
        if self.end_time is not None:
            self.end_time = to_utc(self.end_time)

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def is_completed(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def feeling(self) -> Feeling:
        return self.outcome.feeling if self.outcome is not None else Feeling.POSITIVE

    @property
    def symptoms(self) -> Tuple[Symptom, ...]:
        return self.outcome.symptoms if self.outcome is not None else ()

    @property
    def notes(self) -> str:
        return self.outcome.notes if self.outcome is not None else ""

    def complete(self, end_time: datetime, outcome: Optional[Outcome] = None) -> CompletionStatus:
        """
        Fix end_time (and so duration) and attach the outcome.
        Re-completing is a no-op reported as ALREADY_COMPLETED.
        """
        if self.end_time is not None:
            logger.warning(
                f"Session {self.uid} already ended at {self.end_time.isoformat()}")
            return CompletionStatus.ALREADY_COMPLETED
        if self.start_time is None:
            logger.warning(
                f"Cannot end session {self.uid}: missing start time")
            return CompletionStatus.MISSING_START
        end_time = to_utc(end_time)
        if end_time < self.start_time:
            raise ValidationError(
                f"End time {end_time.isoformat()} is before start time {self.start_time.isoformat()}")
        self.end_time = end_time
        self.outcome = outcome if outcome is not None else PositiveOutcome()
        return CompletionStatus.COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uid": self.uid,
            "start_time": _serialize(self.start_time),
            "end_time": _serialize(self.end_time),
            "duration": self.duration if self.is_completed else None,
            "feeling": self.feeling.value if self.outcome is not None else None,
            "symptoms": encode_symptoms(self.symptoms),
            "notes": self.notes,
            "updated_at": _serialize(self.updated_at),
        }


def get_session_fields():
    # Exclude 'id' (auto-incremented primary key)
    return ["uid", "start_time", "end_time", "duration", "feeling",
            "symptoms", "notes", "updated_at"]


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable timestamp in session row: {value!r}")
        return None


def _parse_symptom_column(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Malformed symptoms column: {value!r}") from e
    if not isinstance(parsed, list):
        raise ValidationError(f"Malformed symptoms column: {value!r}")
    return parsed


def session_from_row(row: Mapping[str, Any]) -> Session:
    """
    Decode a stored row. Legacy symptom labels are normalized here; unknown
    labels raise SymptomDecodeError.
    """
    end_time = _parse_dt(row.get("end_time"))
    outcome = None
    if end_time is not None:
        outcome = outcome_from_parts(
            row.get("feeling"),
            _parse_symptom_column(row.get("symptoms")),
            row.get("notes"),
        )
    return Session(
        id=row.get("id"),
        uid=row.get("uid") or str(uuid.uuid4()),
        start_time=_parse_dt(row.get("start_time")),
        end_time=end_time,
        outcome=outcome,
        updated_at=_parse_dt(row.get("updated_at")),
    )
