"""
Data models for set-advisor.

Logged sets and sessions are owned by the storage layer; the recommendation
core only reads them. Performance and Recommendation are transient values.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TrainingGoal(str, Enum):
    """Training goal selected by the user."""

    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"
    NO_RECOMMENDATION = "none"

    @classmethod
    def parse(cls, value: str) -> "TrainingGoal":
        """Parse a goal name or its first letter (s/h/e/n), case-insensitive."""
        text = value.strip().lower()
        for goal in cls:
            if text in (goal.value, goal.name.lower(), goal.value[0]):
                return goal
        if text in ("off", "no_recommendation"):
            return cls.NO_RECOMMENDATION
        valid = ", ".join(g.value for g in cls)
        raise ValueError(f"Unknown goal {value!r}. Valid goals: {valid}")


@dataclass(frozen=True)
class SetRecord:
    """
    A single logged set.

    ordinal is the set's position within its session for that exercise
    (1-indexed). effort is an optional 0-10 perceived exertion rating.
    """

    session_id: int
    exercise_id: str
    weight: float
    reps: int
    timestamp: datetime
    ordinal: int = 1
    effort: float | None = None
    id: int = 0

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 1:
            raise ValueError("reps must be positive")
        if self.ordinal < 1:
            raise ValueError("ordinal must be positive")
        if self.effort is not None and not 0.0 <= self.effort <= 10.0:
            raise ValueError("effort must be within 0-10")

    def to_performance(self) -> "Performance":
        """The weight/reps/effort triple the engine reasons over."""
        return Performance(weight=self.weight, reps=self.reps, effort=self.effort)


@dataclass(frozen=True)
class Performance:
    """A weight x reps (@ effort) performance, observed or synthesized."""

    weight: float
    reps: int
    effort: float | None = None


@dataclass(frozen=True)
class Recommendation:
    """
    Suggested weight and reps for the next set.

    source names the branch that produced it:
    "first_set", "anchor", "steady_state", "baseline" or "default".
    """

    weight: float
    reps: int
    source: str
    one_rep_max: float | None = None


@dataclass
class WorkoutSession:
    """A training session; open until closed."""

    id: int
    started_at: datetime
    ended_at: datetime | None = None
    notes: str | None = None
    closed: bool = False

    def __post_init__(self) -> None:
        """Validate session data."""
        if self.id < 1:
            raise ValueError("session id must be positive")


@dataclass(frozen=True)
class ExerciseInfo:
    """
    Catalog entry for one exercise.

    is_compound selects the minimum weight jump; min_increment, when set,
    replaces the goal's compound/isolation constant for this exercise.
    """

    exercise_id: str
    display_name: str
    is_compound: bool = True
    body_part: str | None = None
    aliases: tuple[str, ...] = field(default_factory=tuple)
    min_increment: float | None = None

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.min_increment is not None and self.min_increment < 0:
            raise ValueError("min_increment must be non-negative")
