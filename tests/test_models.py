# tests/test_models.py

import json
from datetime import datetime, timedelta, timezone

import pytest

import uritrack.utils.db.models as m
from uritrack.utils.error_handler import SymptomDecodeError, ValidationError, validate_outcome_data

UTC = timezone.utc
START = datetime(2026, 10, 19, 8, 0, 0, tzinfo=UTC)


def test_get_session_fields_matches_schema_columns():
    assert m.get_session_fields() == [
        "uid", "start_time", "end_time", "duration", "feeling",
        "symptoms", "notes", "updated_at"]


@pytest.mark.parametrize("label, expected", [
    ("Not fully empty", m.Symptom.INCOMPLETE),
    ("Dripping", m.Symptom.WEAK_STREAM),
    ("Pain", m.Symptom.PAIN),
    ("Blood", m.Symptom.BLOOD),
    ("Weak stream/Dripping", m.Symptom.WEAK_STREAM),
    ("Weak stream", m.Symptom.WEAK_STREAM),
    ("Frequent urges", m.Symptom.URGENCY),
    ("weak_stream", m.Symptom.WEAK_STREAM),
])
def test_decode_symptom_accepts_every_vocabulary_version(label, expected):
    assert m.decode_symptom(label) is expected


def test_decode_symptom_rejects_unknown_labels():
    with pytest.raises(SymptomDecodeError) as exc:
        m.decode_symptom("Tingling")
    assert exc.value.label == "Tingling"


def test_decode_symptoms_collapses_duplicates_in_first_seen_order():
    decoded = m.decode_symptoms(["Dripping", "Pain", "Weak stream", "Pain/Discomfort"])
    assert decoded == (m.Symptom.WEAK_STREAM, m.Symptom.PAIN)


def test_encode_symptoms_uses_current_labels():
    encoded = m.encode_symptoms(m.decode_symptoms(["Dripping", "Not fully empty"]))
    assert json.loads(encoded) == ["Weak stream", "Incomplete emptying"]


def test_legacy_labels_survive_encode_and_decode():
    legacy = m.decode_symptoms(["Dripping", "Blood"])
    stored = m.encode_symptoms(legacy)
    assert m.decode_symptoms(json.loads(stored)) == m.decode_symptoms(["Weak stream", "Blood present"])


def test_negative_outcome_normalizes_symptom_labels():
    outcome = m.NegativeOutcome(symptoms=("Blood", m.Symptom.PAIN))
    assert outcome.symptoms == (m.Symptom.BLOOD, m.Symptom.PAIN)
    assert outcome.feeling is m.Feeling.NEGATIVE


def test_positive_outcome_has_no_symptoms():
    outcome = m.PositiveOutcome(notes="fine")
    assert outcome.symptoms == ()
    assert outcome.feeling is m.Feeling.POSITIVE


def test_outcome_from_parts_rejects_positive_with_symptoms():
    with pytest.raises(ValidationError):
        m.outcome_from_parts("Positive", ["Pain"])


def test_complete_sets_end_time_once_and_derives_duration():
    s = m.Session(start_time=START)
    assert s.is_active
    status = s.complete(START + timedelta(seconds=45), m.NegativeOutcome(symptoms=("Pain",)))
    assert status is m.CompletionStatus.COMPLETED
    assert s.duration == 45.0
    assert s.symptoms == (m.Symptom.PAIN,)

    again = s.complete(START + timedelta(seconds=90))
    assert again is m.CompletionStatus.ALREADY_COMPLETED
    assert s.end_time == START + timedelta(seconds=45)
    assert s.duration == 45.0


def test_complete_without_start_reports_missing_start():
    s = m.Session()
    assert s.complete(START) is m.CompletionStatus.MISSING_START
    assert s.end_time is None


def test_complete_rejects_end_before_start():
    s = m.Session(start_time=START)
    with pytest.raises(ValidationError):
        s.complete(START - timedelta(seconds=1))


def test_complete_defaults_to_positive_outcome():
    s = m.Session(start_time=START)
    s.complete(START + timedelta(seconds=10))
    assert s.feeling is m.Feeling.POSITIVE


def test_session_converts_naive_times_to_utc():
    s = m.Session(start_time=datetime(2026, 10, 19, 8, 0))
    assert s.start_time.tzinfo is not None
    assert s.start_time == START


def test_session_from_row_decodes_legacy_symptoms():
    row = {
        "id": 3,
        "uid": "legacy-1",
        "start_time": "2026-10-19T08:00:00+00:00",
        "end_time": "2026-10-19T08:00:40+00:00",
        "duration": 40,
        "feeling": "Negative",
        "symptoms": json.dumps(["Pain", "Not fully empty", "Pain"]),
        "notes": "old app",
        "updated_at": None,
    }
    s = m.session_from_row(row)
    assert s.uid == "legacy-1"
    assert s.symptoms == (m.Symptom.PAIN, m.Symptom.INCOMPLETE)
    assert s.duration == 40.0
    assert s.notes == "old app"


def test_session_from_row_raises_on_unknown_label():
    row = {
        "uid": "bad-1",
        "start_time": "2026-10-19T08:00:00+00:00",
        "end_time": "2026-10-19T08:00:40+00:00",
        "feeling": "Negative",
        "symptoms": json.dumps(["Sparkles"]),
    }
    with pytest.raises(SymptomDecodeError):
        m.session_from_row(row)


def test_active_row_has_no_outcome():
    s = m.session_from_row({"uid": "a", "start_time": "2026-10-19T08:00:00+00:00"})
    assert s.is_active
    assert s.outcome is None
    assert s.to_dict()["feeling"] is None


def test_validate_outcome_data_builds_variants():
    neg = validate_outcome_data("negative", ["Burning sensation"], "  sore  ")
    assert isinstance(neg, m.NegativeOutcome)
    assert neg.symptoms == (m.Symptom.BURNING,)
    assert neg.notes == "sore"

    pos = validate_outcome_data(m.Feeling.POSITIVE, [], None)
    assert isinstance(pos, m.PositiveOutcome)
    assert pos.notes == ""


def test_validate_outcome_data_rejects_symptoms_on_positive():
    with pytest.raises(ValidationError):
        validate_outcome_data("Positive", ["Pain"])


def test_validate_outcome_data_truncates_long_notes():
    outcome = validate_outcome_data("Positive", [], "x" * 600)
    assert len(outcome.notes) == 500


def test_symptom_descriptions_cover_every_tag():
    for symptom in m.Symptom:
        assert symptom.description
