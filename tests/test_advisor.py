"""
Tests for the async fetch -> recommend -> write cycle.

The repository is an in-memory fake that records every call, so the tests
can check what was fetched and in which order.
"""

import asyncio
import logging
from datetime import datetime, timedelta

import pytest

from set_advisor.core.advisor import Advisor, format_weight
from set_advisor.core.models import ExerciseInfo, SetRecord, TrainingGoal, WorkoutSession

T0 = datetime(2026, 3, 9, 18, 0)
BENCH = "barbell_bench_press"


def _set(weight, reps, effort=None, *, session_id=2, exercise_id=BENCH, ordinal=1):
    return SetRecord(
        session_id=session_id,
        exercise_id=exercise_id,
        weight=weight,
        reps=reps,
        effort=effort,
        ordinal=ordinal,
        timestamp=T0 + timedelta(minutes=ordinal),
    )


class FakeRepository:
    """SetRepository backed by plain lists."""

    def __init__(self, session_id=2, sets=None, exercises=None):
        self.session_id = session_id
        self.sets = list(sets or [])
        self.exercises = dict(exercises or {})
        self.calls = []
        self.fail_on = None
        self.gates = {}

    async def _enter(self, name, exercise_id=None):
        self.calls.append(name)
        gate = self.gates.get(exercise_id)
        if gate is not None:
            await gate.wait()
        if self.fail_on == name:
            raise RuntimeError(f"{name} unavailable")

    async def get_open_session(self):
        await self._enter("get_open_session")
        if self.session_id is None:
            return None
        return WorkoutSession(id=self.session_id, started_at=T0)

    async def get_session_sets(self, session_id):
        await self._enter("get_session_sets")
        return [s for s in self.sets if s.session_id == session_id]

    async def get_prior_session_sets(self, exercise_id, exclude_session_id):
        await self._enter("get_prior_session_sets", exercise_id)
        return [
            s for s in self.sets
            if s.exercise_id == exercise_id and s.session_id != exclude_session_id
        ]

    async def get_exercise(self, exercise_id):
        await self._enter("get_exercise")
        return self.exercises.get(exercise_id)


class TestFormatWeight:
    def test_whole_and_fractional(self):
        assert format_weight(20.0) == "20"
        assert format_weight(102.5) == "102.5"


class TestAdvisorSelect:
    def test_no_recommendation_makes_no_calls(self):
        repo = FakeRepository(sets=[_set(100, 10, 8, session_id=1)])
        advisor = Advisor(repo)
        advisor.weight_text, advisor.reps = "50", 10

        rec = asyncio.run(advisor.select(BENCH, TrainingGoal.NO_RECOMMENDATION))

        assert rec is None
        assert repo.calls == []
        assert (advisor.weight_text, advisor.reps) == ("50", 10)

    def test_fetches_in_sequence_and_fills_fields(self):
        repo = FakeRepository(sets=[_set(100, 10, 8, session_id=1)])
        advisor = Advisor(repo)

        rec = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        assert repo.calls == [
            "get_open_session",
            "get_session_sets",
            "get_prior_session_sets",
            "get_exercise",
        ]
        assert rec.source == "first_set"
        assert (advisor.weight_text, advisor.reps) == ("102.5", 9)

    def test_without_session_skips_today_query(self):
        repo = FakeRepository(session_id=None, sets=[_set(100, 10, 8, session_id=1)])
        advisor = Advisor(repo)

        rec = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        assert "get_session_sets" not in repo.calls
        assert rec.source == "baseline"
        assert (advisor.weight_text, advisor.reps) == ("102.5", 9)

    def test_typed_weight_taken_from_field(self):
        repo = FakeRepository()
        advisor = Advisor(repo)
        advisor.weight_text = "61"

        asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        assert (advisor.weight_text, advisor.reps) == ("60", 8)

    def test_isolation_classification_used(self):
        curl = ExerciseInfo("barbell_curl", "Barbell Curl", is_compound=False)
        repo = FakeRepository(
            sets=[_set(100, 5, 8, exercise_id="barbell_curl")],
            exercises={"barbell_curl": curl},
        )
        advisor = Advisor(repo)

        # Strength: raw 103.36, +3.36 kept for isolation -> 102.5 (105 if compound)
        rec = asyncio.run(advisor.select("barbell_curl", TrainingGoal.STRENGTH))

        assert rec.weight == 102.5

    def test_unknown_exercise_treated_as_compound(self):
        repo = FakeRepository(sets=[_set(100, 5, 8, exercise_id="zercher_squat")])
        advisor = Advisor(repo)

        rec = asyncio.run(advisor.select("zercher_squat", TrainingGoal.STRENGTH))

        assert rec.weight == 105.0


class TestAdvisorFailSoft:
    @pytest.mark.parametrize(
        "failing",
        ["get_open_session", "get_session_sets", "get_prior_session_sets", "get_exercise"],
    )
    def test_collaborator_failure_leaves_fields(self, failing, caplog):
        repo = FakeRepository(sets=[_set(100, 10, 8, session_id=1)])
        repo.fail_on = failing
        advisor = Advisor(repo)
        advisor.weight_text, advisor.reps = "50", 10

        with caplog.at_level(logging.WARNING, logger="set_advisor.core.advisor"):
            rec = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        assert rec is None
        assert (advisor.weight_text, advisor.reps) == ("50", 10)
        assert "unavailable" in caplog.text


class TestAdvisorStaleSelection:
    def test_superseded_selection_does_not_write(self):
        repo = FakeRepository(
            sets=[
                _set(100, 10, 8, session_id=1),
                _set(140, 5, 8, session_id=1, exercise_id="barbell_back_squat"),
            ]
        )
        advisor = Advisor(repo)

        async def scenario():
            gate = asyncio.Event()
            repo.gates["barbell_back_squat"] = gate
            slow = asyncio.create_task(advisor.select("barbell_back_squat", TrainingGoal.HYPERTROPHY))
            await asyncio.sleep(0)
            fast = await advisor.select(BENCH, TrainingGoal.HYPERTROPHY)
            gate.set()
            return await slow, fast

        stale, current = asyncio.run(scenario())

        assert stale is None
        assert current.weight == 102.5
        assert (advisor.weight_text, advisor.reps) == ("102.5", 9)


class TestAdvisorSessionChange:
    def test_new_session_clears_anchors(self):
        repo = FakeRepository(session_id=2, sets=[_set(100, 10, 8, session_id=1)])
        advisor = Advisor(repo)

        first = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))
        again = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))
        repo.session_id = 3
        fresh = asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        assert first.source == "first_set"
        assert again.source == "anchor"
        assert fresh.source == "first_set"
        assert advisor.engine.anchors.session_id == 3

    def test_explicit_notification(self):
        repo = FakeRepository(session_id=2, sets=[_set(100, 10, 8, session_id=1)])
        advisor = Advisor(repo)
        asyncio.run(advisor.select(BENCH, TrainingGoal.HYPERTROPHY))

        advisor.session_changed(None)

        assert len(advisor.engine.anchors) == 0
