"""
CLI entry point using Typer.

Provides commands for next-set suggestions:
- init: Create the data directory
- start / end: Open and close a training session
- goal: Show or set the training goal
- suggest: Suggest weight and reps for the next set
- log: Log a set and suggest the next one
- history / show: Display sessions and their sets
- delete-set / delete-session: Remove records
- exercises: List the exercise catalog
"""

from typing import Annotated

import typer

from . import views
from .app import app, configure_logging, get_store, load_advisor_config
from .commands import sessions, training  # noqa: F401  (registers commands)

VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging on stderr"),
]


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context, verbose: VerboseOption = False) -> None:
    """
    Weight and rep suggestions for your next set. Run without a command for a status summary.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return

    store = get_store(None)
    views.console.print("[bold cyan]set-advisor[/bold cyan]: next-set weight and rep suggestions")
    views.console.print()

    if not store.exists():
        views.print_info(f"No data in {store.data_dir}. Run 'set-advisor init' to get started.")
        return

    goal = store.load_goal()
    session = store.get_open_session()
    views.console.print(f"Goal: [bold]{goal.value}[/bold]")
    if session is None:
        views.console.print("No open session. Run 'set-advisor start'.")
        return

    sets = store.get_session_sets(session.id)
    views.print_session_sets(session, sets, load_advisor_config(store).catalog)


if __name__ == "__main__":
    app()
