"""
Configuration constants for the next-set recommendation model.

All adjustable parameters are centralized here for easy tuning.
Per-goal parameters can be overridden from ~/.set-advisor/config.yaml
(see config_loader.py); everything else is fixed.
"""

from dataclasses import dataclass
from typing import Final

from .models import TrainingGoal

# =============================================================================
# PLATE ROUNDING
# =============================================================================

PLATE_STEP: Final[float] = 2.5  # Smallest practical weight increment (mass units)

# =============================================================================
# INTENSITY MODEL (%1RM vs reps at RIR 0)
# =============================================================================

# (reps, fraction of 1RM when the set is taken to failure)
# Linear interpolation between rows; reps above the last row use its value.
INTENSITY_TABLE: Final[list[tuple[int, float]]] = [
    ( 1, 1.000),
    ( 2, 0.955),
    ( 3, 0.922),
    ( 4, 0.892),
    ( 5, 0.863),
    ( 6, 0.837),
    ( 7, 0.811),
    ( 8, 0.786),
    ( 9, 0.762),
    (10, 0.739),
    (11, 0.707),
    (12, 0.680),
    (13, 0.653),
    (14, 0.626),
    (15, 0.599),
    (17, 0.570),
    (20, 0.550),
]

RIR_INTENSITY_STEP: Final[float] = 0.025  # Intensity lost per rep left in reserve
INTENSITY_MIN: Final[float] = 0.30
INTENSITY_MAX: Final[float] = 1.10
REPS_CLAMP_MIN: Final[int] = 1
REPS_CLAMP_MAX: Final[int] = 20
RIR_CLAMP_MIN: Final[float] = 0.0
RIR_CLAMP_MAX: Final[float] = 5.0

PREDICT_REPS_MIN: Final[int] = 3  # Rep-count search range for the inverse mapping
PREDICT_REPS_MAX: Final[int] = 20

# =============================================================================
# ONE-REP-MAX ESTIMATION
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0
EFFORT_MAX: Final[float] = 10.0  # Effort rating of a set taken to failure
PCT_OVERRIDE_LOW: Final[float] = 0.20  # Effort-based estimate only trusted inside
PCT_OVERRIDE_HIGH: Final[float] = 1.20  # this open interval of %1RM

# =============================================================================
# BASELINE SELECTION
# =============================================================================

WORKING_SET_EFFORT_LOW: Final[float] = 7.0
WORKING_SET_EFFORT_HIGH: Final[float] = 9.0

# =============================================================================
# FIRST SET OF SESSION
# =============================================================================

GOOD_SET_EFFORT_MAX: Final[float] = 8.5  # Baseline at or below this effort was a good working set
FIRST_SET_PROGRESSION_FRACTION: Final[float] = 0.025
FIRST_SET_PROGRESSION_MIN: Final[float] = 2.5

# =============================================================================
# STEADY STATE
# =============================================================================

INFERRED_RIR_CENTER: Final[float] = 2.0  # RIR assumed when target reps were hit exactly
BIAS_PER_RIR: Final[float] = 0.02  # Weight change fraction per rep of RIR off target
DEFAULT_ANCHOR_EFFORT: Final[float] = 8.0
FATIGUE_EFFORT_THRESHOLD: Final[float] = 9.0

# =============================================================================
# SYNTHETIC DEFAULT (no history, nothing logged today)
# =============================================================================

DEFAULT_START_WEIGHT: Final[float] = 20.0
DEFAULT_START_REPS: Final[int] = 8

# =============================================================================
# GOAL PARAMETERS
# =============================================================================


@dataclass(frozen=True)
class GoalConfig:
    """Tunable parameters for one training goal."""

    reps_low: int
    reps_high: int
    target_rir: float  # Reps-in-reserve target for recommended sets
    max_step_up: float  # Fraction of weight the bias may add
    max_step_down: float  # Fraction of weight the bias may remove
    fatigue_drop: float  # Extra cut after a near-maximal set
    min_delta_compound: float  # Smallest nonzero change, compound lifts
    min_delta_isolation: float  # Smallest nonzero change, isolation lifts

    def __post_init__(self) -> None:
        """Validate goal parameters."""
        if self.reps_low < 1:
            raise ValueError("reps_low must be at least 1")
        if self.reps_low >= self.reps_high:
            raise ValueError("reps_low must be below reps_high")
        if self.target_rir < 0:
            raise ValueError("target_rir must be non-negative")
        for name in ("max_step_up", "max_step_down", "fatigue_drop"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.min_delta_compound < 0 or self.min_delta_isolation < 0:
            raise ValueError("minimum deltas must be non-negative")

    @property
    def target_reps(self) -> int:
        """Midpoint of the rep range, rounded down."""
        return (self.reps_low + self.reps_high) // 2

    def clamp_reps(self, reps: int) -> int:
        """Clamp a rep count into the goal's range."""
        return max(self.reps_low, min(self.reps_high, reps))

    def min_delta(self, is_compound: bool) -> float:
        """Minimum weight jump for the exercise classification."""
        return self.min_delta_compound if is_compound else self.min_delta_isolation


GOAL_CONFIGS: Final[dict[TrainingGoal, GoalConfig]] = {
    TrainingGoal.STRENGTH: GoalConfig(
        reps_low=3,
        reps_high=6,
        target_rir=2.0,
        max_step_up=0.05,
        max_step_down=0.10,
        fatigue_drop=0.05,
        min_delta_compound=5.0,
        min_delta_isolation=2.5,
    ),
    TrainingGoal.HYPERTROPHY: GoalConfig(
        reps_low=6,
        reps_high=12,
        target_rir=2.0,
        max_step_up=0.05,
        max_step_down=0.10,
        fatigue_drop=0.05,
        min_delta_compound=2.5,
        min_delta_isolation=2.5,
    ),
    TrainingGoal.ENDURANCE: GoalConfig(
        reps_low=12,
        reps_high=20,
        target_rir=3.0,
        max_step_up=0.05,
        max_step_down=0.10,
        fatigue_drop=0.05,
        min_delta_compound=2.5,
        min_delta_isolation=2.5,
    ),
}

DEFAULT_GOAL: Final[TrainingGoal] = TrainingGoal.HYPERTROPHY
