"""
Intensity model: (reps, reps-in-reserve) <-> fraction of one-rep-max.

A %1RM-vs-reps chart at failure (config.INTENSITY_TABLE), shifted down by a
fixed step per rep left in reserve:

    pct(reps, rir) = clip(base(reps) * (1 - 0.025 * rir), 0.30, 1.10)

Also holds the plate rounding and minimum-jump rules shared by the engine.
"""

import math

from .config import (
    INTENSITY_MAX,
    INTENSITY_MIN,
    INTENSITY_TABLE,
    PLATE_STEP,
    PREDICT_REPS_MAX,
    PREDICT_REPS_MIN,
    REPS_CLAMP_MAX,
    REPS_CLAMP_MIN,
    RIR_CLAMP_MAX,
    RIR_CLAMP_MIN,
    RIR_INTENSITY_STEP,
)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def _base_intensity(reps: int) -> float:
    """
    %1RM at failure for a rep count (linear between table rows).

    Args:
        reps: Rep count, already clamped to [1, 20]

    Returns:
        Fraction of 1RM (0.55 to 1.00)
    """
    if reps <= INTENSITY_TABLE[0][0]:
        return INTENSITY_TABLE[0][1]
    for i in range(len(INTENSITY_TABLE) - 1):
        r0, f0 = INTENSITY_TABLE[i]
        r1, f1 = INTENSITY_TABLE[i + 1]
        if r0 <= reps <= r1:
            if reps == r0:
                return f0
            alpha = (reps - r0) / (r1 - r0)
            return f0 + alpha * (f1 - f0)
    return INTENSITY_TABLE[-1][1]


def intensity_fraction(reps: int, rir: float) -> float:
    """
    Fraction of 1RM that allows `reps` reps with `rir` reps left in reserve.

    Non-increasing in both reps and rir.

    Args:
        reps: Rep count (clamped to [1, 20])
        rir: Reps in reserve (clamped to [0, 5])

    Returns:
        Fraction of 1RM in [0.30, 1.10]
    """
    r = int(clamp(reps, REPS_CLAMP_MIN, REPS_CLAMP_MAX))
    rir = clamp(rir, RIR_CLAMP_MIN, RIR_CLAMP_MAX)
    pct = _base_intensity(r) * (1.0 - RIR_INTENSITY_STEP * rir)
    return clamp(pct, INTENSITY_MIN, INTENSITY_MAX)


def predict_reps(one_rep_max: float, weight: float, rir: float) -> int:
    """
    Inverse of intensity_fraction: reps achievable at `weight` leaving `rir`.

    Scans 3..20 reps and returns the count whose predicted weight is closest
    to `weight`. On an exact tie the lower rep count wins.

    Args:
        one_rep_max: Estimated 1RM
        weight: Weight to be lifted
        rir: Reps in reserve to leave

    Returns:
        Rep count in [3, 20]
    """
    best_reps = PREDICT_REPS_MIN
    best_err = math.inf
    for reps in range(PREDICT_REPS_MIN, PREDICT_REPS_MAX + 1):
        err = abs(intensity_fraction(reps, rir) * one_rep_max - weight)
        if err < best_err:
            best_reps = reps
            best_err = err
    return best_reps


def round_to_step(value: float, step: float = PLATE_STEP) -> float:
    """
    Round to the nearest multiple of `step`, ties away from zero.

    round_to_step(12.6) == 12.5, round_to_step(11.25) == 12.5
    """
    q = value / step
    n = math.floor(abs(q) + 0.5)
    return n * step if q >= 0 else -n * step


def enforce_min_delta(raw_weight: float, last_weight: float, min_delta: float) -> float:
    """
    Keep a nonzero change from the last set at least `min_delta` wide.

    A change smaller than min_delta is snapped to last_weight +/- min_delta
    in the direction of the change. No change means no jump.

    Args:
        raw_weight: Computed weight for the next set
        last_weight: Weight of the last logged set
        min_delta: Smallest allowed nonzero change

    Returns:
        Adjusted weight (never negative)
    """
    delta = raw_weight - last_weight
    if delta == 0 or abs(delta) >= min_delta:
        return raw_weight
    direction = 1.0 if delta >= 0 else -1.0
    return max(0.0, last_weight + direction * min_delta)
