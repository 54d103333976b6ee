"""
Async orchestration around the recommendation engine.

The Advisor plays the part of the logging screen: it owns the weight and
reps input fields, fetches what the engine needs from the storage
collaborator one awaited call at a time, and writes a suggestion into the
fields only if the user has not moved on to another selection meanwhile.

Recommendations are advisory. Any failure while fetching or computing is
logged and leaves the fields as they were.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .engine import RecommendationEngine
from .models import ExerciseInfo, Recommendation, SetRecord, TrainingGoal, WorkoutSession

logger = logging.getLogger(__name__)


class SetRepository(Protocol):
    """Read side of the storage and catalog collaborators."""

    async def get_open_session(self) -> WorkoutSession | None: ...

    async def get_session_sets(self, session_id: int) -> list[SetRecord]: ...

    async def get_prior_session_sets(
        self, exercise_id: str, exclude_session_id: int | None
    ) -> list[SetRecord]: ...

    async def get_exercise(self, exercise_id: str) -> ExerciseInfo | None: ...


def format_weight(weight: float) -> str:
    """102.5 -> '102.5', 20.0 -> '20'."""
    return f"{weight:g}"


class Advisor:
    """
    Input-field state plus the fetch -> recommend -> write cycle.

    Args:
        repository: Storage/catalog collaborator
        engine: Engine to use (a fresh one if omitted)
    """

    def __init__(self, repository: SetRepository, engine: RecommendationEngine | None = None):
        self.repository = repository
        self.engine = engine if engine is not None else RecommendationEngine()
        self.weight_text: str = ""
        self.reps: int | None = None
        self._version = 0

    def session_changed(self, session_id: int | None) -> None:
        """Notification from the session collaborator (start, end, reload)."""
        self.engine.session_changed(session_id)

    async def select(
        self,
        exercise_id: str,
        goal: TrainingGoal,
        typed_weight: str | None = None,
    ) -> Recommendation | None:
        """
        Select an exercise/goal and fill in the suggested next set.

        Args:
            exercise_id: Selected exercise
            goal: Selected goal; NO_RECOMMENDATION leaves the fields alone
                without touching the repository
            typed_weight: Weight text in the input field (defaults to the
                current field value)

        Returns:
            The recommendation written to the fields, or None if nothing
            was written
        """
        self._version += 1
        version = self._version

        if goal is TrainingGoal.NO_RECOMMENDATION:
            return None

        if typed_weight is None:
            typed_weight = self.weight_text

        try:
            session = await self.repository.get_open_session()
            session_id = session.id if session is not None else None
            self.session_changed(session_id)

            today = (
                await self.repository.get_session_sets(session_id)
                if session_id is not None
                else []
            )
            prior = await self.repository.get_prior_session_sets(exercise_id, session_id)
            info = await self.repository.get_exercise(exercise_id)

            rec = self.engine.recommend(
                exercise_id,
                goal,
                prior,
                today,
                is_compound=info.is_compound if info is not None else True,
                min_increment=info.min_increment if info is not None else None,
                typed_weight=typed_weight,
            )
        except Exception as exc:
            logger.warning("no recommendation for %s: %s", exercise_id, exc)
            return None

        if version != self._version:
            logger.debug("selection moved on, dropping recommendation for %s", exercise_id)
            return None

        if rec is not None:
            self.weight_text = format_weight(rec.weight)
            self.reps = rec.reps
        return rec
