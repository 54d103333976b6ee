"""Session commands: init, start, end, history, show, delete-set, delete-session."""

import json
from typing import Annotated, Optional

import typer

from ...io.serializers import ValidationError, session_to_dict, set_record_to_dict
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    app,
    get_store,
    load_advisor_config,
    notify_session_changed,
    require_store,
)

NotesOption = Annotated[
    Optional[str],
    typer.Option("--notes", "-n", help="Session notes"),
]

YesOption = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Do not ask for confirmation"),
]


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory and empty history files.
    """
    store = get_store(data_dir)
    store.init()
    views.print_success(f"Data directory ready: {store.data_dir}")


@app.command()
def start(notes: NotesOption = None, data_dir: DataDirOption = None) -> None:
    """
    Start a training session (or show the one already open today).
    """
    store = require_store(data_dir)
    existing = store.get_open_session()
    session = store.start_session(notes)
    notify_session_changed(store, session.id)

    if existing is not None:
        views.print_info(f"Session #{session.id} is already open.")
    else:
        views.print_success(f"Started session #{session.id}.")


@app.command()
def end(notes: NotesOption = None, data_dir: DataDirOption = None) -> None:
    """
    Close the open session.
    """
    store = require_store(data_dir)
    session = store.end_session(notes)
    if session is None:
        views.print_warning("No open session.")
        return

    notify_session_changed(store, None)
    n_sets = len(store.get_session_sets(session.id))
    views.print_success(f"Closed session #{session.id} ({n_sets} set{'s' if n_sets != 1 else ''}).")


@app.command()
def history(
    limit: Annotated[int, typer.Option("--limit", "-l", help="Number of sessions to show")] = 20,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Display recent sessions as a table.
    """
    store = require_store(data_dir)
    try:
        sessions = store.get_recent_sessions(limit)
        all_sets = store.load_sets()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    counts: dict[int, int] = {}
    for s in all_sets:
        counts[s.session_id] = counts.get(s.session_id, 0) + 1

    if json_out:
        print(json.dumps(
            [dict(session_to_dict(s), set_count=counts.get(s.id, 0)) for s in sessions],
            indent=2,
        ))
        return

    views.print_history(sessions, counts)


@app.command()
def show(
    session_id: Annotated[int, typer.Argument(help="Session number (see 'history')")],
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the sets logged in one session.
    """
    store = require_store(data_dir)
    session = next((s for s in store.load_sessions() if s.id == session_id), None)
    if session is None:
        views.print_error(f"Session {session_id} not found")
        raise typer.Exit(1)

    sets = store.get_session_sets(session_id)
    if json_out:
        print(json.dumps(
            dict(session_to_dict(session), sets=[set_record_to_dict(s) for s in sets]),
            indent=2,
        ))
        return

    cfg = load_advisor_config(store)
    views.print_session_sets(session, sets, cfg.catalog)


@app.command("delete-set")
def delete_set(
    set_id: Annotated[int, typer.Argument(help="Set ID (see 'show')")],
    yes: YesOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete one logged set.
    """
    store = require_store(data_dir)
    if not yes and not views.confirm_action(f"Delete set {set_id}?"):
        views.print_info("Cancelled.")
        return
    try:
        record = store.delete_set(set_id)
    except LookupError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(
        f"Deleted set {record.id}: {record.exercise_id} {record.weight:g} x {record.reps}"
    )


@app.command("delete-session")
def delete_session(
    session_id: Annotated[int, typer.Argument(help="Session number (see 'history')")],
    yes: YesOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a session and all of its sets.
    """
    store = require_store(data_dir)
    if not yes and not views.confirm_action(f"Delete session #{session_id} and its sets?"):
        views.print_info("Cancelled.")
        return

    open_session = store.get_open_session()
    try:
        store.delete_session(session_id)
    except LookupError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if open_session is not None and open_session.id == session_id:
        notify_session_changed(store, None)
    views.print_success(f"Deleted session #{session_id}.")
