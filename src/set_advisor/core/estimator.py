"""
One-rep-max estimation from a single performance.

  Epley (1985):  1RM = weight * (1 + reps / 30)

When the lifter reported an effort rating the intensity model is inverted
instead, which accounts for the reps left in reserve:

  rir = clip(10 - effort, 0, 5)
  1RM = weight / pct(reps, rir)
"""

from .config import (
    EFFORT_MAX,
    EPLEY_DIVISOR,
    PCT_OVERRIDE_HIGH,
    PCT_OVERRIDE_LOW,
    RIR_CLAMP_MAX,
    RIR_CLAMP_MIN,
)
from .intensity import clamp, intensity_fraction
from .models import Performance


def effort_to_rir(effort: float) -> float:
    """Convert a 0-10 effort rating to reps in reserve (0 to 5)."""
    return clamp(EFFORT_MAX - effort, RIR_CLAMP_MIN, RIR_CLAMP_MAX)


def epley_1rm(weight: float, reps: int) -> float:
    """
    Epley 1RM estimate.

    Args:
        weight: Weight lifted
        reps: Reps performed (floored at 1)

    Returns:
        Estimated 1RM
    """
    return weight * (1 + max(reps, 1) / EPLEY_DIVISOR)


def estimate_one_rep_max(performance: Performance) -> float:
    """
    Estimate 1RM from one performance.

    Uses the effort-aware estimate when effort is known and the implied
    intensity is plausible (between 20% and 120%), Epley otherwise.

    Args:
        performance: Observed or synthesized performance

    Returns:
        Estimated 1RM (0 for a zero-weight performance)
    """
    if performance.weight <= 0:
        return 0.0

    estimate = epley_1rm(performance.weight, performance.reps)

    if performance.effort is not None:
        rir = effort_to_rir(performance.effort)
        pct = intensity_fraction(performance.reps, rir)
        if PCT_OVERRIDE_LOW < pct < PCT_OVERRIDE_HIGH:
            estimate = performance.weight / pct

    return estimate
