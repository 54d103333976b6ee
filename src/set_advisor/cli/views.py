"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of sessions, sets and suggestions.
"""

from rich.console import Console
from rich.table import Table

from ..core.catalog import ExerciseCatalog
from ..core.config import GoalConfig
from ..core.models import Recommendation, SetRecord, TrainingGoal, WorkoutSession

console = Console()

_SOURCE_LABELS: dict[str, str] = {
    "first_set": "progressed from last session",
    "anchor": "session starting point",
    "steady_state": "adjusted from your last set",
    "baseline": "based on last session",
    "default": "starting weight (no history)",
}


def _fmt_weight(weight: float) -> str:
    return f"{weight:g}"


def _fmt_effort(effort: float | None) -> str:
    return f"{effort:g}" if effort is not None else "-"


def print_recommendation(exercise_name: str, rec: Recommendation) -> None:
    """
    Print a next-set suggestion.

    Args:
        exercise_name: Display name of the exercise
        rec: Suggestion to show
    """
    label = _SOURCE_LABELS.get(rec.source, rec.source)
    console.print(
        f"[bold]Next set[/bold] {exercise_name}: "
        f"[bold green]{_fmt_weight(rec.weight)} x {rec.reps}[/bold green] "
        f"[dim]({label})[/dim]"
    )
    if rec.one_rep_max:
        console.print(f"[dim]  estimated 1RM {rec.one_rep_max:.1f}[/dim]")


def format_goal_table(goal: TrainingGoal, cfg: GoalConfig) -> Table:
    """Create a Rich table with a goal's parameters."""
    table = Table(title=f"Goal: {goal.value}")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Rep range", f"{cfg.reps_low}-{cfg.reps_high}")
    table.add_row("Target RIR", f"{cfg.target_rir:g}")
    table.add_row("Max step up", f"{cfg.max_step_up:.0%}")
    table.add_row("Max step down", f"{cfg.max_step_down:.0%}")
    table.add_row("Fatigue drop", f"{cfg.fatigue_drop:.0%}")
    table.add_row("Min jump (compound)", _fmt_weight(cfg.min_delta_compound))
    table.add_row("Min jump (isolation)", _fmt_weight(cfg.min_delta_isolation))
    return table


def format_session_table(sessions: list[WorkoutSession], set_counts: dict[int, int]) -> Table:
    """
    Create a Rich table displaying recent sessions.

    Args:
        sessions: Sessions to display, newest first
        set_counts: {session_id: number of sets}

    Returns:
        Rich Table object
    """
    table = Table(title="Recent Sessions")

    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Date", style="cyan")
    table.add_column("Started", style="magenta")
    table.add_column("Sets", justify="right", style="bold")
    table.add_column("Status")
    table.add_column("Notes", style="dim")

    for session in sessions:
        table.add_row(
            str(session.id),
            session.started_at.strftime("%a, %d %b %Y"),
            session.started_at.strftime("%H:%M"),
            str(set_counts.get(session.id, 0)),
            "closed" if session.closed else "[green]open[/green]",
            session.notes or "",
        )

    return table


def print_history(sessions: list[WorkoutSession], set_counts: dict[int, int]) -> None:
    """
    Print recent sessions to console.
    """
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    console.print(format_session_table(sessions, set_counts))


def format_sets_table(title: str, sets: list[SetRecord], catalog: ExerciseCatalog) -> Table:
    """Create a Rich table listing the sets of one session."""
    table = Table(title=title)

    table.add_column("ID", justify="right", style="dim", width=4)
    table.add_column("Time", style="cyan")
    table.add_column("Exercise", style="green")
    table.add_column("Set", justify="right")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("RPE", justify="right")

    for s in sets:
        table.add_row(
            str(s.id),
            s.timestamp.strftime("%H:%M"),
            catalog.display_name(s.exercise_id),
            str(s.ordinal),
            _fmt_weight(s.weight),
            str(s.reps),
            _fmt_effort(s.effort),
        )

    return table


def print_session_sets(session: WorkoutSession, sets: list[SetRecord], catalog: ExerciseCatalog) -> None:
    """Print the sets of one session."""
    title = f"Session #{session.id} - {session.started_at.strftime('%a, %d %b %Y')}"
    if not sets:
        console.print(f"[yellow]{title}: no sets logged.[/yellow]")
        return
    console.print(format_sets_table(title, sets, catalog))


def print_exercises(catalog: ExerciseCatalog) -> None:
    """Print the exercise catalog."""
    table = Table(title="Exercises")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Body part", style="green")
    table.add_column("Min jump", justify="right")

    for info in catalog:
        table.add_row(
            info.exercise_id,
            info.display_name,
            "compound" if info.is_compound else "isolation",
            info.body_part or "",
            _fmt_weight(info.min_increment) if info.min_increment is not None else "goal",
        )
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
