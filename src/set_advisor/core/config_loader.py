"""
YAML -> configuration loader.

Loads the bundled exercises.yaml and optionally merges user overrides from
~/.set-advisor/config.yaml ($SET_ADVISOR_HOME/config.yaml when set).

Usage:
    from set_advisor.core.config_loader import load_model_config, load_goal_configs
    cfg = load_model_config()
    goals = load_goal_configs(cfg)

A YAML file that cannot be read or parsed is ignored with a warning, so a
broken user file never prevents recommendations.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from .config import GOAL_CONFIGS, GoalConfig
from .models import TrainingGoal

DATA_DIR_ENV = "SET_ADVISOR_HOME"
USER_CONFIG_NAME = "config.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; warn and return {} on error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"set-advisor: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_data_dir() -> Path:
    """Return the data directory ($SET_ADVISOR_HOME or ~/.set-advisor)."""
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".set-advisor"


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled exercises.yaml, or None if not found."""
    ref = importlib.resources.files("set_advisor").joinpath("exercises.yaml")
    candidate = Path(str(ref))
    return candidate if candidate.exists() else None


def get_user_yaml_path(data_dir: Path | None = None) -> Path | None:
    """Return the user config.yaml if it exists, else None."""
    p = (data_dir or get_data_dir()) / USER_CONFIG_NAME
    return p if p.exists() else None


def load_model_config(data_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/set_advisor/exercises.yaml
    2. User override at <data_dir>/config.yaml

    Returns:
        Merged dict of config sections ("exercises", "goals").
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path(data_dir)
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user))

    return config


def load_goal_configs(config: dict[str, Any] | None = None) -> dict[TrainingGoal, GoalConfig]:
    """
    Build the goal table, applying any "goals:" overrides.

    An override that names an unknown goal or field, or that breaks a
    GoalConfig invariant, is skipped with a warning.

    Args:
        config: Merged config dict (loaded from YAML if omitted)

    Returns:
        {goal: GoalConfig} for every goal that has parameters
    """
    if config is None:
        config = load_model_config()

    result = dict(GOAL_CONFIGS)
    overrides = config.get("goals") or {}
    if not isinstance(overrides, dict):
        warnings.warn("set-advisor: 'goals' must be a mapping; ignoring", stacklevel=2)
        return result

    for name, fields in overrides.items():
        try:
            goal = TrainingGoal.parse(str(name))
            if goal not in result:
                raise ValueError("goal has no parameters")
            if not isinstance(fields, dict):
                raise ValueError("expected a mapping of parameters")
            result[goal] = dataclasses.replace(result[goal], **fields)
        except (ValueError, TypeError) as exc:
            warnings.warn(f"set-advisor: skipping goal override {name!r} ({exc})", stacklevel=2)

    return result
