"""
Exercise catalog: display names, aliases and compound/isolation flags.

Entries come from the "exercises:" section of the merged YAML config
(bundled exercises.yaml plus the user's config.yaml). The recommendation
core only asks it one question: is this exercise compound, and does it
carry its own minimum jump. Unknown exercises are treated as compound.
"""

from __future__ import annotations

import re
import warnings
from typing import Any, Iterator

from .config_loader import load_model_config
from .models import ExerciseInfo

_REQUIRED_FIELDS: frozenset[str] = frozenset({"display_name"})


def slugify(text: str) -> str:
    """'Barbell Bench-Press' -> 'barbell_bench_press'."""
    return re.sub(r"[^a-z0-9]+", "_", text.strip().lower()).strip("_")


def exercise_from_dict(exercise_id: str, d: dict[str, Any]) -> ExerciseInfo:
    """Convert a raw dict (from YAML) to an ExerciseInfo.

    Raises ValueError if a required field is absent.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"exercise missing fields: {sorted(missing)}")

    min_increment = d.get("min_increment")
    return ExerciseInfo(
        exercise_id=slugify(exercise_id),
        display_name=str(d["display_name"]),
        is_compound=bool(d.get("compound", True)),
        body_part=d.get("body_part"),
        aliases=tuple(str(a) for a in d.get("aliases") or ()),
        min_increment=float(min_increment) if min_increment is not None else None,
    )


class ExerciseCatalog:
    """Read-only exercise lookup."""

    def __init__(self, entries: dict[str, ExerciseInfo] | None = None):
        self._entries: dict[str, ExerciseInfo] = dict(entries or {})

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "ExerciseCatalog":
        """Build the catalog from the merged YAML config (loaded if omitted)."""
        if config is None:
            config = load_model_config()

        entries: dict[str, ExerciseInfo] = {}
        for exercise_id, raw in (config.get("exercises") or {}).items():
            try:
                if not isinstance(raw, dict):
                    raise ValueError("expected a mapping")
                info = exercise_from_dict(str(exercise_id), raw)
            except ValueError as exc:
                warnings.warn(
                    f"set-advisor: skipping exercise '{exercise_id}' ({exc})",
                    stacklevel=2,
                )
                continue
            entries[info.exercise_id] = info
        return cls(entries)

    def get(self, exercise_id: str) -> ExerciseInfo | None:
        return self._entries.get(exercise_id)

    def resolve(self, text: str) -> str:
        """
        Map user text to an exercise id.

        Matches id, display name or alias, case-insensitively. Text that
        matches nothing becomes a free-form id (slugified).
        """
        slug = slugify(text)
        if slug in self._entries:
            return slug
        for info in self._entries.values():
            names = (info.display_name, *info.aliases)
            if any(slugify(n) == slug for n in names):
                return info.exercise_id
        return slug

    def is_compound(self, exercise_id: str) -> bool:
        """Classification lookup; compound when the exercise is unknown."""
        info = self.get(exercise_id)
        return True if info is None else info.is_compound

    def display_name(self, exercise_id: str) -> str:
        info = self.get(exercise_id)
        return info.display_name if info is not None else exercise_id.replace("_", " ").title()

    def __iter__(self) -> Iterator[ExerciseInfo]:
        return iter(sorted(self._entries.values(), key=lambda e: e.display_name))

    def __len__(self) -> int:
        return len(self._entries)
