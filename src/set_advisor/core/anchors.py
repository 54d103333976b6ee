"""
Per-session memory of the reference performance for each exercise.

Each (session, exercise) pair moves through two states:

    NO_ANCHOR --(first performance observed or proposed)--> ANCHORED

and never back, except that every anchor is dropped when the bound session
changes. Writes to an anchored exercise are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum

from .models import Performance

logger = logging.getLogger(__name__)


class AnchorState(str, Enum):
    NO_ANCHOR = "no_anchor"
    ANCHORED = "anchored"


class SessionAnchorStore:
    """
    Anchor cache bound to at most one session.

    session_id is None when no session is open; nothing is cached then.
    """

    def __init__(self, session_id: int | None = None):
        self.session_id = session_id
        self._anchors: dict[str, Performance] = {}

    def state(self, exercise_id: str) -> AnchorState:
        """Current state of the exercise within the bound session."""
        if exercise_id in self._anchors:
            return AnchorState.ANCHORED
        return AnchorState.NO_ANCHOR

    def get(self, exercise_id: str) -> Performance | None:
        return self._anchors.get(exercise_id)

    def set(self, exercise_id: str, performance: Performance) -> bool:
        """
        Anchor an exercise.

        Returns:
            True if the anchor was stored, False if the exercise was already
            anchored or no session is bound
        """
        if self.session_id is None:
            return False
        if self.state(exercise_id) is AnchorState.ANCHORED:
            return False
        self._anchors[exercise_id] = performance
        logger.debug(
            "anchored %s in session %s at %.1f x %d",
            exercise_id, self.session_id, performance.weight, performance.reps,
        )
        return True

    def clear(self) -> None:
        self._anchors.clear()

    def bind(self, session_id: int | None) -> bool:
        """
        Bind to the active session, clearing anchors if it changed.

        Returns:
            True if the session changed (and anchors were cleared)
        """
        if session_id == self.session_id:
            return False
        logger.debug("session changed %s -> %s, clearing anchors", self.session_id, session_id)
        self.session_id = session_id
        self.clear()
        return True

    def items(self) -> list[tuple[str, Performance]]:
        """Anchored (exercise_id, performance) pairs in insertion order."""
        return list(self._anchors.items())

    def __len__(self) -> int:
        return len(self._anchors)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._anchors
