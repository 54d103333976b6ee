"""Shared Typer app object, shared option types, and store/advisor utilities."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core.advisor import Advisor
from ..core.anchors import SessionAnchorStore
from ..core.catalog import ExerciseCatalog
from ..core.config import GoalConfig
from ..core.config_loader import get_data_dir, load_goal_configs, load_model_config
from ..core.engine import RecommendationEngine
from ..core.models import Recommendation, TrainingGoal
from ..io.history_store import HistoryStore
from ..io.repository import StoreRepository
from ..io.serializers import ValidationError
from . import views

logger = logging.getLogger(__name__)

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.set-advisor)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="set-advisor",
    help="Weight and rep suggestions for your next resistance-training set.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@dataclass
class AdvisorConfig:
    """Catalog and goal table loaded from YAML for one data directory."""

    catalog: ExerciseCatalog
    goal_configs: dict[TrainingGoal, GoalConfig]


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_store(data_dir: Path | None) -> HistoryStore:
    """Get store from path or default location."""
    if data_dir is None:
        data_dir = get_data_dir()
    return HistoryStore(data_dir)


def require_store(data_dir: Path | None) -> HistoryStore:
    """Get the store, exiting with an error if it has not been initialised."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"No data found in {store.data_dir}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    return store


def load_advisor_config(store: HistoryStore) -> AdvisorConfig:
    """Load the catalog and goal overrides for the store's data directory."""
    config = load_model_config(store.data_dir)
    return AdvisorConfig(
        catalog=ExerciseCatalog.from_config(config),
        goal_configs=load_goal_configs(config),
    )


def notify_session_changed(store: HistoryStore, session_id: int | None) -> None:
    """Rebind the persisted anchors to the now-active session."""
    anchors = store.load_anchors(session_id)
    anchors.bind(session_id)
    store.save_anchors(anchors)


def suggest_next(
    store: HistoryStore,
    cfg: AdvisorConfig,
    exercise_id: str,
    goal: TrainingGoal,
    typed_weight: str | None = None,
) -> Recommendation | None:
    """
    Run one advisor cycle against the store and persist the anchors.

    Storage failures are logged and give no suggestion; they never stop
    the command that asked for one.

    Returns:
        The recommendation, or None (goal off, or nothing could be computed)
    """
    if goal is TrainingGoal.NO_RECOMMENDATION:
        return None

    async def _run() -> Recommendation | None:
        anchors = SessionAnchorStore()
        session = await asyncio.to_thread(store.get_open_session)
        if session is not None:
            anchors = await asyncio.to_thread(store.load_anchors, session.id)

        engine = RecommendationEngine(anchors, cfg.goal_configs)
        advisor = Advisor(StoreRepository(store, cfg.catalog), engine)
        rec = await advisor.select(exercise_id, goal, typed_weight)
        if rec is not None and engine.anchors.session_id is not None:
            await asyncio.to_thread(store.save_anchors, engine.anchors)
        return rec

    try:
        return asyncio.run(_run())
    except (ValidationError, OSError, ValueError) as exc:
        logger.warning("no suggestion for %s: %s", exercise_id, exc)
        return None
