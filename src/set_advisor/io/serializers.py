"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts, and
parsing of the compact set notation accepted by the CLI.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.anchors import SessionAnchorStore
from ..core.models import Performance, SetRecord, WorkoutSession


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp.

    Args:
        value: Timestamp string (e.g. 2026-10-19T18:04:11)

    Returns:
        Parsed datetime

    Raises:
        ValidationError: If the string is not ISO 8601
    """
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_effort(value: float | None) -> float | None:
    """Validate an optional 0-10 effort rating."""
    if value is None:
        return None
    if not 0.0 <= value <= 10.0:
        raise ValidationError(f"effort must be within 0-10, got {value}")
    return value


def set_record_to_dict(record: SetRecord) -> dict[str, Any]:
    """Convert SetRecord to a JSON-compatible dict (effort omitted when unknown)."""
    d: dict[str, Any] = {
        "id": record.id,
        "session_id": record.session_id,
        "exercise_id": record.exercise_id,
        "ordinal": record.ordinal,
        "weight": record.weight,
        "reps": record.reps,
        "timestamp": record.timestamp.isoformat(timespec="seconds"),
    }
    if record.effort is not None:
        d["effort"] = record.effort
    return d


def dict_to_set_record(data: dict[str, Any]) -> SetRecord:
    """
    Convert dict to SetRecord.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        weight = float(validate_non_negative(data["weight"], "weight"))
        reps = int(validate_positive(data["reps"], "reps"))
        effort = data.get("effort")
        effort = validate_effort(float(effort)) if effort is not None else None
        return SetRecord(
            id=int(data.get("id", 0)),
            session_id=int(data["session_id"]),
            exercise_id=str(data["exercise_id"]),
            ordinal=int(validate_positive(data.get("ordinal", 1), "ordinal")),
            weight=weight,
            reps=reps,
            effort=effort,
            timestamp=validate_datetime(data["timestamp"]),
        )
    except KeyError as e:
        raise ValidationError(f"Set record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set record: {e}") from e


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """Convert WorkoutSession to a JSON-compatible dict."""
    return {
        "id": session.id,
        "started_at": session.started_at.isoformat(timespec="seconds"),
        "ended_at": (
            session.ended_at.isoformat(timespec="seconds") if session.ended_at else None
        ),
        "notes": session.notes,
        "closed": session.closed,
    }


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        ended = data.get("ended_at")
        return WorkoutSession(
            id=int(validate_positive(data["id"], "id")),
            started_at=validate_datetime(data["started_at"]),
            ended_at=validate_datetime(ended) if ended else None,
            notes=data.get("notes"),
            closed=bool(data.get("closed", False)),
        )
    except KeyError as e:
        raise ValidationError(f"Session record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid session record: {e}") from e


def performance_to_dict(performance: Performance) -> dict[str, Any]:
    d: dict[str, Any] = {"weight": performance.weight, "reps": performance.reps}
    if performance.effort is not None:
        d["effort"] = performance.effort
    return d


def dict_to_performance(data: dict[str, Any]) -> Performance:
    if not isinstance(data, dict):
        raise ValidationError("anchor must be a mapping")
    try:
        effort = data.get("effort")
        return Performance(
            weight=float(validate_non_negative(data["weight"], "weight")),
            reps=int(validate_positive(data["reps"], "reps")),
            effort=validate_effort(float(effort)) if effort is not None else None,
        )
    except KeyError as e:
        raise ValidationError(f"Anchor missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid anchor: {e}") from e


def anchors_to_dict(store: SessionAnchorStore) -> dict[str, Any]:
    """Snapshot an anchor store: {"session_id": ..., "anchors": {exercise_id: perf}}."""
    return {
        "session_id": store.session_id,
        "anchors": {ex: performance_to_dict(p) for ex, p in store.items()},
    }


def dict_to_anchors(data: dict[str, Any]) -> SessionAnchorStore:
    """
    Restore an anchor store snapshot.

    Raises:
        ValidationError: If the snapshot is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("anchor snapshot must be a mapping")
    try:
        session_id = data.get("session_id")
        store = SessionAnchorStore(int(session_id) if session_id is not None else None)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid anchor session id: {e}") from e
    anchors = data.get("anchors") or {}
    if not isinstance(anchors, dict):
        raise ValidationError("anchors must be a mapping")
    for exercise_id, raw in anchors.items():
        store.set(str(exercise_id), dict_to_performance(raw))
    return store


def to_json_line(data: dict[str, Any]) -> str:
    """Serialize a dict to a single compact JSON line (no trailing newline)."""
    return json.dumps(data, separators=(",", ":"))


_NUMBER = r"(\d+(?:[.,]\d+)?)"


def parse_set_string(text: str) -> tuple[float, int, float | None]:
    """
    Parse a set in compact notation.

    Formats:
        WxR      e.g. "100x8"       100 units for 8 reps
        WxR@E    e.g. "100x8@8.5"   ... at effort 8.5
        W R [E]  e.g. "100 8 8.5"   space-separated

    Args:
        text: Set string

    Returns:
        (weight, reps, effort or None)

    Raises:
        ValidationError: If format is invalid or values are out of range
    """
    s = text.strip()
    if not s:
        raise ValidationError("Set string cannot be empty")

    m = re.fullmatch(rf"{_NUMBER}\s*[xX×]\s*(\d+)(?:\s*@\s*{_NUMBER})?", s)
    if m is None:
        m = re.fullmatch(rf"{_NUMBER}\s+(\d+)(?:\s+{_NUMBER})?", s)
    if m is None:
        raise ValidationError(
            f"Invalid set format: '{text}'.\n"
            "Use weightxreps or weightxreps@effort (e.g. 100x8@8), or weight reps effort (e.g. 100 8 8)."
        )

    weight = float(m.group(1).replace(",", "."))
    reps = int(m.group(2))
    effort = float(m.group(3).replace(",", ".")) if m.group(3) else None

    validate_non_negative(weight, "weight")
    validate_positive(reps, "reps")
    validate_effort(effort)
    return weight, reps, effort
