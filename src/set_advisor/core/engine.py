"""
Recommendation engine: weight and reps for the next set of one exercise.

The engine is a pure decision procedure over data that has already been
fetched (see advisor.py for the I/O side). Its only state is the session
anchor store and the last recommendation it produced.

Decision order:
  1. NO_RECOMMENDATION goal: nothing to suggest.
  2. First set of the session (nothing logged today, exercise not anchored,
     history available, session open): progress from the previous session's
     baseline and anchor the proposal. Runs at most once per exercise and
     session.
  3. Steady state, anchored on (in priority order) the last set logged today,
     the cached session anchor, the previous session's baseline (never
     cached), or a synthetic starting point.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Sequence

from .anchors import AnchorState, SessionAnchorStore
from .baseline import select_baseline
from .config import (
    BIAS_PER_RIR,
    DEFAULT_ANCHOR_EFFORT,
    DEFAULT_START_REPS,
    DEFAULT_START_WEIGHT,
    FATIGUE_EFFORT_THRESHOLD,
    FIRST_SET_PROGRESSION_FRACTION,
    FIRST_SET_PROGRESSION_MIN,
    GOAL_CONFIGS,
    GOOD_SET_EFFORT_MAX,
    INFERRED_RIR_CENTER,
    RIR_CLAMP_MAX,
    RIR_CLAMP_MIN,
    GoalConfig,
)
from .estimator import effort_to_rir, estimate_one_rep_max
from .intensity import clamp, enforce_min_delta, intensity_fraction, predict_reps, round_to_step
from .models import Performance, Recommendation, SetRecord, TrainingGoal

logger = logging.getLogger(__name__)


def parse_weight_text(text: str | None) -> float | None:
    """
    Parse a user-typed weight ("62.5", "62,5").

    Returns:
        The weight if it is a finite positive number, None otherwise
    """
    if text is None:
        return None
    try:
        value = float(text.strip().replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def infer_rir(anchor: Performance, target_reps: int) -> float:
    """
    Reps in reserve of the anchor set.

    Taken from the effort rating when present. Otherwise inferred from how
    far the anchor's reps fell short of (or exceeded) the target:

        rir = clip(2 + (target_reps - reps), 0, 5)
    """
    if anchor.effort is not None:
        return effort_to_rir(anchor.effort)
    return clamp(INFERRED_RIR_CENTER + (target_reps - anchor.reps), RIR_CLAMP_MIN, RIR_CLAMP_MAX)


def was_good_working_set(baseline: Performance, cfg: GoalConfig) -> bool:
    """Baseline hit the goal's rep range without being near-maximal."""
    in_range = cfg.reps_low <= baseline.reps <= cfg.reps_high
    manageable = baseline.effort is None or baseline.effort <= GOOD_SET_EFFORT_MAX
    return in_range and manageable


class RecommendationEngine:
    """
    Produces next-set recommendations for the active session.

    Args:
        anchors: Anchor store bound to the active session (a fresh unbound
            store if omitted)
        goal_configs: Per-goal parameters (defaults to config.GOAL_CONFIGS)
    """

    def __init__(
        self,
        anchors: SessionAnchorStore | None = None,
        goal_configs: Mapping[TrainingGoal, GoalConfig] | None = None,
    ):
        self.anchors = anchors if anchors is not None else SessionAnchorStore()
        self.goal_configs: dict[TrainingGoal, GoalConfig] = dict(goal_configs or GOAL_CONFIGS)
        self.last_recommendation: Recommendation | None = None

    def session_changed(self, session_id: int | None) -> bool:
        """Rebind the anchor store; anchors are dropped if the session differs."""
        return self.anchors.bind(session_id)

    def recommend(
        self,
        exercise_id: str,
        goal: TrainingGoal,
        prior_sets: Sequence[SetRecord],
        today_sets: Sequence[SetRecord],
        *,
        is_compound: bool = True,
        min_increment: float | None = None,
        typed_weight: str | None = None,
    ) -> Recommendation | None:
        """
        Recommend weight and reps for the next set.

        Args:
            exercise_id: Exercise being trained
            goal: Selected training goal
            prior_sets: Sets of this exercise from the most recent earlier
                session (may be empty)
            today_sets: All sets logged in the active session; filtered to
                the exercise here
            is_compound: Exercise classification (selects the minimum jump)
            min_increment: Per-exercise minimum jump overriding the goal's
            typed_weight: Weight text currently in the input field, used
                only when there is no data at all

        Returns:
            Recommendation, or None for the NO_RECOMMENDATION goal
        """
        if goal is TrainingGoal.NO_RECOMMENDATION:
            return None

        cfg = self.goal_configs[goal]
        todays = [s for s in today_sets if s.exercise_id == exercise_id]
        last_today = max(todays, key=lambda s: s.ordinal) if todays else None
        session_open = self.anchors.session_id is not None

        if (
            last_today is None
            and session_open
            and self.anchors.state(exercise_id) is AnchorState.NO_ANCHOR
            and prior_sets
        ):
            return self._first_set(exercise_id, cfg, prior_sets)

        source = "steady_state"
        if last_today is not None:
            anchor = last_today.to_performance()
            first_today = min(todays, key=lambda s: s.ordinal)
            self.anchors.set(exercise_id, first_today.to_performance())
        else:
            cached = self.anchors.get(exercise_id)
            if cached is not None:
                # Nothing logged since the anchor was proposed; serve it again.
                logger.debug("%s: re-serving session anchor", exercise_id)
                return self._remember(
                    Recommendation(weight=cached.weight, reps=cached.reps, source="anchor")
                )
            if prior_sets:
                anchor = select_baseline(prior_sets)
                source = "baseline"
            else:
                return self._default(exercise_id, cfg, typed_weight)

        min_delta = min_increment if min_increment is not None else cfg.min_delta(is_compound)
        return self._steady_state(anchor, cfg, last_today, min_delta, source)

    def _first_set(
        self,
        exercise_id: str,
        cfg: GoalConfig,
        prior_sets: Sequence[SetRecord],
    ) -> Recommendation:
        baseline = select_baseline(prior_sets)

        if was_good_working_set(baseline, cfg):
            weight = max(
                baseline.weight * (1 + FIRST_SET_PROGRESSION_FRACTION),
                baseline.weight + FIRST_SET_PROGRESSION_MIN,
            )
        else:
            weight = baseline.weight

        rec = Recommendation(
            weight=round_to_step(weight),
            reps=cfg.clamp_reps(cfg.target_reps),
            source="first_set",
        )
        logger.debug(
            "%s: first set from baseline %.1f x %d -> %.1f x %d",
            exercise_id, baseline.weight, baseline.reps, rec.weight, rec.reps,
        )
        self.anchors.set(exercise_id, Performance(weight=rec.weight, reps=rec.reps))
        return self._remember(rec)

    def _default(
        self,
        exercise_id: str,
        cfg: GoalConfig,
        typed_weight: str | None,
    ) -> Recommendation:
        weight = parse_weight_text(typed_weight)
        if weight is None:
            weight = DEFAULT_START_WEIGHT
        rec = Recommendation(
            weight=round_to_step(weight),
            reps=max(cfg.reps_low, DEFAULT_START_REPS),
            source="default",
        )
        logger.debug("%s: no data, starting at %.1f x %d", exercise_id, rec.weight, rec.reps)
        self.anchors.set(exercise_id, Performance(weight=rec.weight, reps=rec.reps))
        return self._remember(rec)

    def _steady_state(
        self,
        anchor: Performance,
        cfg: GoalConfig,
        last_today: SetRecord | None,
        min_delta: float,
        source: str,
    ) -> Recommendation:
        one_rm = estimate_one_rep_max(anchor)
        target_reps = cfg.target_reps
        inferred_rir = infer_rir(anchor, target_reps)

        raw = intensity_fraction(target_reps, cfg.target_rir) * one_rm

        # Easier than the goal's target difficulty -> ease up, harder -> ease down
        bias = clamp(
            (inferred_rir - cfg.target_rir) * BIAS_PER_RIR,
            -cfg.max_step_down,
            cfg.max_step_up,
        )
        raw *= 1 + bias

        effort = anchor.effort if anchor.effort is not None else DEFAULT_ANCHOR_EFFORT
        if effort >= FATIGUE_EFFORT_THRESHOLD:
            raw *= 1 - cfg.fatigue_drop

        if last_today is not None and not math.isclose(raw, last_today.weight):
            raw = enforce_min_delta(raw, last_today.weight, min_delta)

        weight = round_to_step(raw)
        reps = cfg.clamp_reps(predict_reps(one_rm, weight, cfg.target_rir))

        logger.debug(
            "steady state (%s): 1RM %.1f, rir %.1f, bias %+.3f -> %.1f x %d",
            source, one_rm, inferred_rir, bias, weight, reps,
        )
        return self._remember(
            Recommendation(weight=weight, reps=reps, source=source, one_rep_max=one_rm)
        )

    def _remember(self, rec: Recommendation) -> Recommendation:
        self.last_recommendation = rec
        return rec
