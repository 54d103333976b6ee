"""
JSONL-based storage for workout sessions and logged sets.

Handles reading, writing, and managing the files in the data directory:

    sessions.jsonl   one WorkoutSession per line
    sets.jsonl       one SetRecord per line
    settings.json    selected training goal
    anchors.json     session anchors of the open session
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, TypeVar

from ..core.anchors import SessionAnchorStore
from ..core.config import DEFAULT_GOAL
from ..core.models import SetRecord, TrainingGoal, WorkoutSession
from .serializers import (
    ValidationError,
    anchors_to_dict,
    dict_to_anchors,
    dict_to_session,
    dict_to_set_record,
    session_to_dict,
    set_record_to_dict,
    to_json_line,
)

T = TypeVar("T")


class NoOpenSessionError(Exception):
    """Raised when a set is logged while no session is open."""

    pass


class HistoryStore:
    """
    Manages sessions, sets and settings stored under one data directory.

    Session and set files are rewritten whole on every change; they are
    small (one line per set) and this keeps them sorted.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the data files
        """
        self.data_dir = Path(data_dir)
        self.sessions_path = self.data_dir / "sessions.jsonl"
        self.sets_path = self.data_dir / "sets.jsonl"
        self.settings_path = self.data_dir / "settings.json"
        self.anchors_path = self.data_dir / "anchors.json"

    def exists(self) -> bool:
        """Check if the data files exist."""
        return self.sessions_path.exists() and self.sets_path.exists()

    def init(self) -> None:
        """
        Create the data directory and empty data files if missing.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.sessions_path, self.sets_path):
            if not path.exists():
                path.touch()

    # ------------------------------------------------------------------
    # Raw file access
    # ------------------------------------------------------------------

    def _read_jsonl(self, path: Path, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}. Run 'init' first.")

        items: list[T] = []
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    items.append(parse(json.loads(line)))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {path}: {e}"
                    ) from e
        return items

    def _write_jsonl(self, path: Path, rows: list[dict[str, Any]]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            for row in rows:
                f.write(to_json_line(row) + "\n")

    def load_sessions(self) -> list[WorkoutSession]:
        """
        Load all sessions, oldest first.

        Raises:
            FileNotFoundError: If the sessions file doesn't exist
            ValidationError: If a line is malformed
        """
        sessions = self._read_jsonl(self.sessions_path, dict_to_session)
        sessions.sort(key=lambda s: (s.started_at, s.id))
        return sessions

    def load_sets(self) -> list[SetRecord]:
        """
        Load all sets, oldest first.

        Raises:
            FileNotFoundError: If the sets file doesn't exist
            ValidationError: If a line is malformed
        """
        sets = self._read_jsonl(self.sets_path, dict_to_set_record)
        sets.sort(key=lambda s: (s.timestamp, s.id))
        return sets

    def _write_sessions(self, sessions: list[WorkoutSession]) -> None:
        self._write_jsonl(self.sessions_path, [session_to_dict(s) for s in sessions])

    def _write_sets(self, sets: list[SetRecord]) -> None:
        self._write_jsonl(self.sets_path, [set_record_to_dict(s) for s in sets])

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def get_open_session(self, now: datetime | None = None) -> WorkoutSession | None:
        """
        Get the open session.

        A session is open if it is not closed and was started today;
        yesterday's unclosed session no longer counts.

        Returns:
            Most recent open session or None
        """
        today = (now or datetime.now()).date()
        open_sessions = [
            s for s in self.load_sessions()
            if not s.closed and s.started_at.date() >= today
        ]
        return max(open_sessions, key=lambda s: s.id) if open_sessions else None

    def start_session(self, notes: str | None = None, now: datetime | None = None) -> WorkoutSession:
        """
        Start a session, or return the one already open today.

        Args:
            notes: Optional session notes
            now: Start time (default: now)

        Returns:
            The open session
        """
        now = now or datetime.now()
        existing = self.get_open_session(now)
        if existing is not None:
            return existing

        sessions = self.load_sessions()
        session = WorkoutSession(
            id=max((s.id for s in sessions), default=0) + 1,
            started_at=now,
            notes=notes,
        )
        sessions.append(session)
        self._write_sessions(sessions)
        return session

    def end_session(self, notes: str | None = None, now: datetime | None = None) -> WorkoutSession | None:
        """
        Close the open session.

        Args:
            notes: Replaces the session notes when given
            now: End time (default: now)

        Returns:
            The closed session, or None if no session was open
        """
        now = now or datetime.now()
        current = self.get_open_session(now)
        if current is None:
            return None

        sessions = self.load_sessions()
        for s in sessions:
            if s.id == current.id:
                s.closed = True
                s.ended_at = now
                if notes is not None:
                    s.notes = notes
                current = s
        self._write_sessions(sessions)
        return current

    def get_recent_sessions(self, limit: int = 20) -> list[WorkoutSession]:
        """Most recent sessions, newest first."""
        sessions = self.load_sessions()
        sessions.reverse()
        return sessions[:limit]

    def delete_session(self, session_id: int) -> None:
        """
        Delete a session and all of its sets.

        Raises:
            LookupError: If no session has this id
        """
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            raise LookupError(f"Session {session_id} not found")

        # Sets first, so a failure never leaves sets without their session
        self._write_sets([s for s in self.load_sets() if s.session_id != session_id])
        self._write_sessions(remaining)

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def add_set(
        self,
        exercise_id: str,
        weight: float,
        reps: int,
        effort: float | None = None,
        now: datetime | None = None,
    ) -> SetRecord:
        """
        Log a set into the open session.

        The ordinal is the next number for this exercise within the session.

        Returns:
            The stored SetRecord

        Raises:
            NoOpenSessionError: If no session is open
        """
        now = now or datetime.now()
        session = self.get_open_session(now)
        if session is None:
            raise NoOpenSessionError("No open session. Run 'start' first.")

        sets = self.load_sets()
        ordinal = 1 + max(
            (s.ordinal for s in sets if s.session_id == session.id and s.exercise_id == exercise_id),
            default=0,
        )
        record = SetRecord(
            id=max((s.id for s in sets), default=0) + 1,
            session_id=session.id,
            exercise_id=exercise_id,
            ordinal=ordinal,
            weight=weight,
            reps=reps,
            effort=effort,
            timestamp=now,
        )
        sets.append(record)
        self._write_sets(sets)
        return record

    def delete_set(self, set_id: int) -> SetRecord:
        """
        Delete one set.

        Returns:
            The deleted set

        Raises:
            LookupError: If no set has this id
        """
        sets = self.load_sets()
        for i, s in enumerate(sets):
            if s.id == set_id:
                del sets[i]
                self._write_sets(sets)
                return s
        raise LookupError(f"Set {set_id} not found")

    def get_session_sets(self, session_id: int) -> list[SetRecord]:
        """All sets of a session in logging order."""
        return [s for s in self.load_sets() if s.session_id == session_id]

    def get_prior_session_sets(
        self,
        exercise_id: str,
        exclude_session_id: int | None = None,
    ) -> list[SetRecord]:
        """
        Sets of an exercise from the most recent session it appeared in.

        Args:
            exercise_id: Exercise to look up
            exclude_session_id: Session to skip (the active one)

        Returns:
            Sets ordered by ordinal, or [] if the exercise was never logged
        """
        candidates = [
            s for s in self.load_sets()
            if s.exercise_id == exercise_id and s.session_id != exclude_session_id
        ]
        if not candidates:
            return []

        latest = max(candidates, key=lambda s: s.timestamp)
        same_session = [s for s in candidates if s.session_id == latest.session_id]
        return sorted(same_session, key=lambda s: s.ordinal)

    # ------------------------------------------------------------------
    # Settings and anchors
    # ------------------------------------------------------------------

    def load_goal(self) -> TrainingGoal:
        """
        Load the selected goal from settings.json.

        Returns:
            Stored goal, or the default goal if unset or unreadable
        """
        if not self.settings_path.exists():
            return DEFAULT_GOAL
        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return TrainingGoal(data["goal"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return DEFAULT_GOAL

    def save_goal(self, goal: TrainingGoal) -> None:
        """Persist the selected goal."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        data: dict[str, Any] = {}
        if self.settings_path.exists():
            try:
                with open(self.settings_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError:
                data = {}
        if not isinstance(data, dict):
            data = {}
        data["goal"] = goal.value
        with open(self.settings_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def load_anchors(self, session_id: int | None) -> SessionAnchorStore:
        """
        Load the anchor snapshot for a session.

        A snapshot saved for a different session (or an unreadable one) is
        discarded and an empty store bound to session_id is returned.
        """
        if not self.anchors_path.exists():
            return SessionAnchorStore(session_id)
        try:
            with open(self.anchors_path, "r", encoding="utf-8") as f:
                store = dict_to_anchors(json.load(f))
        except (json.JSONDecodeError, ValidationError, OSError):
            return SessionAnchorStore(session_id)
        store.bind(session_id)
        return store

    def save_anchors(self, store: SessionAnchorStore) -> None:
        """Persist the anchor store snapshot."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.anchors_path, "w", encoding="utf-8") as f:
            json.dump(anchors_to_dict(store), f, indent=2)
