"""Training commands: goal, suggest, log, exercises."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import Recommendation, TrainingGoal
from ...io.history_store import NoOpenSessionError
from ...io.serializers import ValidationError, parse_set_string, set_record_to_dict, validate_effort
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    app,
    get_store,
    load_advisor_config,
    require_store,
    suggest_next,
)


GoalOption = Annotated[
    Optional[str],
    typer.Option("--goal", "-g", help="strength | hypertrophy | endurance | none (default: saved goal)"),
]


def _parse_goal(text: str) -> TrainingGoal:
    try:
        return TrainingGoal.parse(text)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _recommendation_dict(exercise_id: str, goal: TrainingGoal, rec: Recommendation | None) -> dict:
    return {
        "exercise_id": exercise_id,
        "goal": goal.value,
        "weight": rec.weight if rec else None,
        "reps": rec.reps if rec else None,
        "source": rec.source if rec else None,
        "one_rep_max": round(rec.one_rep_max, 2) if rec and rec.one_rep_max else None,
    }


def _print_suggestion(exercise_name: str, goal: TrainingGoal, rec: Recommendation | None) -> None:
    if goal is TrainingGoal.NO_RECOMMENDATION:
        views.print_info("Recommendations are off (goal: none).")
    elif rec is None:
        views.print_warning("No suggestion available right now.")
    else:
        views.print_recommendation(exercise_name, rec)


@app.command()
def goal(
    new_goal: Annotated[
        Optional[str],
        typer.Argument(help="strength | hypertrophy | endurance | none"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show or set the training goal used for suggestions.
    """
    store = get_store(data_dir)
    if new_goal is not None:
        selected = _parse_goal(new_goal)
        store.save_goal(selected)
        views.print_success(f"Goal set to {selected.value}.")
    else:
        selected = store.load_goal()

    if selected is TrainingGoal.NO_RECOMMENDATION:
        views.print_info("Recommendations are off.")
        return

    cfg = load_advisor_config(store)
    views.console.print(views.format_goal_table(selected, cfg.goal_configs[selected]))


@app.command()
def suggest(
    exercise: Annotated[str, typer.Argument(help="Exercise id, name or alias")],
    goal_name: GoalOption = None,
    weight: Annotated[
        Optional[str],
        typer.Option("--weight", "-w", help="Weight you have in mind (used when there is no history)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Suggest weight and reps for the next set of an exercise.
    """
    store = require_store(data_dir)
    cfg = load_advisor_config(store)
    exercise_id = cfg.catalog.resolve(exercise)
    selected = _parse_goal(goal_name) if goal_name else store.load_goal()

    rec = suggest_next(store, cfg, exercise_id, selected, typed_weight=weight)

    if json_out:
        print(json.dumps(_recommendation_dict(exercise_id, selected, rec), indent=2))
        return
    _print_suggestion(cfg.catalog.display_name(exercise_id), selected, rec)


@app.command()
def log(
    exercise: Annotated[str, typer.Argument(help="Exercise id, name or alias")],
    set_text: Annotated[
        Optional[str],
        typer.Argument(help="Set as weightxreps or weightxreps@rpe, e.g. 100x8@8"),
    ] = None,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Weight lifted")] = None,
    reps: Annotated[Optional[int], typer.Option("--reps", "-r", help="Reps performed")] = None,
    rpe: Annotated[Optional[float], typer.Option("--rpe", "-e", help="Effort 0-10 (10 = failure)")] = None,
    goal_name: GoalOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a set into the open session and suggest the next one.

      set-advisor log bench 100x8@8
      set-advisor log "Barbell Bench Press" --weight 100 --reps 8 --rpe 8
    """
    store = require_store(data_dir)
    cfg = load_advisor_config(store)
    exercise_id = cfg.catalog.resolve(exercise)
    selected = _parse_goal(goal_name) if goal_name else store.load_goal()

    try:
        if set_text is not None:
            weight, reps, parsed_rpe = parse_set_string(set_text)
            rpe = rpe if rpe is not None else parsed_rpe
        if weight is None or reps is None:
            raise ValidationError("Give the set as weightxreps or with --weight and --reps")
        if weight < 0 or reps < 1:
            raise ValidationError("Weight must be non-negative and reps positive")
        validate_effort(rpe)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        record = store.add_set(exercise_id, weight, reps, rpe)
    except (NoOpenSessionError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    rec = suggest_next(store, cfg, exercise_id, selected)

    if json_out:
        print(json.dumps({
            "logged": set_record_to_dict(record),
            "next": _recommendation_dict(exercise_id, selected, rec),
        }, indent=2))
        return

    effort_note = f" @ RPE {record.effort:g}" if record.effort is not None else ""
    views.print_success(
        f"Logged {cfg.catalog.display_name(exercise_id)} set {record.ordinal}: "
        f"{record.weight:g} x {record.reps}{effort_note}"
    )
    _print_suggestion(cfg.catalog.display_name(exercise_id), selected, rec)


@app.command()
def exercises(data_dir: DataDirOption = None) -> None:
    """
    List the exercise catalog.
    """
    cfg = load_advisor_config(get_store(data_dir))
    views.print_exercises(cfg.catalog)
