"""
Baseline selection: the representative performance of a previous session.
"""

from typing import Sequence

from .config import WORKING_SET_EFFORT_HIGH, WORKING_SET_EFFORT_LOW
from .models import Performance, SetRecord


def is_working_set(record: SetRecord) -> bool:
    """True if the set has an effort rating inside the working band (7-9)."""
    return (
        record.effort is not None
        and WORKING_SET_EFFORT_LOW <= record.effort <= WORKING_SET_EFFORT_HIGH
    )


def select_baseline(records: Sequence[SetRecord]) -> Performance:
    """
    Pick the representative performance from one session's sets.

    Working sets are preferred when any exist. Among the candidates the
    heaviest set wins; ties go to the most recent working set, or to the
    set with more reps when no working sets were rated.

    Args:
        records: Non-empty list of sets for one exercise

    Returns:
        Performance of the selected set

    Raises:
        ValueError: If records is empty
    """
    if not records:
        raise ValueError("Cannot select a baseline from an empty set list")

    working = [r for r in records if is_working_set(r)]
    if working:
        chosen = max(working, key=lambda r: (r.weight, r.timestamp))
    else:
        chosen = max(records, key=lambda r: (r.weight, r.reps))

    return chosen.to_performance()
