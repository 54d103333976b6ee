"""
Async adapter exposing HistoryStore and ExerciseCatalog to the Advisor.

File reads run in a worker thread so the event loop stays free; the
Advisor awaits them one at a time.
"""

import asyncio

from ..core.catalog import ExerciseCatalog
from ..core.models import ExerciseInfo, SetRecord, WorkoutSession
from .history_store import HistoryStore


class StoreRepository:
    """SetRepository backed by the JSONL store and the YAML catalog."""

    def __init__(self, store: HistoryStore, catalog: ExerciseCatalog):
        self.store = store
        self.catalog = catalog

    async def get_open_session(self) -> WorkoutSession | None:
        return await asyncio.to_thread(self.store.get_open_session)

    async def get_session_sets(self, session_id: int) -> list[SetRecord]:
        return await asyncio.to_thread(self.store.get_session_sets, session_id)

    async def get_prior_session_sets(
        self, exercise_id: str, exclude_session_id: int | None
    ) -> list[SetRecord]:
        return await asyncio.to_thread(
            self.store.get_prior_session_sets, exercise_id, exclude_session_id
        )

    async def get_exercise(self, exercise_id: str) -> ExerciseInfo | None:
        return self.catalog.get(exercise_id)
