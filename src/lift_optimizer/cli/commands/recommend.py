"""Recommend command: run the optimizer over config, history and context files."""

from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.engine import compute_recommendations
from ...core.exercises.loader import load_exercise_library
from ...core.models import OptimizerConfig, SavedWorkout, TrainingContext
from ...io.serializers import ValidationError, parse_timestamp, recommendation_to_json
from ...io.store import HistoryStore, load_config, load_context
from .. import views
from ..app import JsonOption, app


@app.command()
def recommend(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Optimizer config (YAML or JSON)"),
    ] = None,
    history_path: Annotated[
        Optional[Path],
        typer.Option("--history", "-p", help="Workout history (JSON array or JSONL)"),
    ] = None,
    context_path: Annotated[
        Optional[Path],
        typer.Option("--context", help="Readiness / phase context (YAML or JSON)"),
    ] = None,
    library_path: Annotated[
        Optional[Path],
        typer.Option("--library", help="Exercise library YAML merged over the bundled one"),
    ] = None,
    now: Annotated[
        Optional[str],
        typer.Option("--now", help="Anchor time, ISO 8601 (default: newest workout)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Recommend volume, intensity and rest for the next session.
    """
    anchor: datetime | None = None
    if now is not None:
        anchor = parse_timestamp(now)
        if anchor is None:
            views.print_error(f"Invalid --now: {now!r}. Expected ISO 8601, e.g. 2026-03-01T09:00")
            raise typer.Exit(1)

    library = None
    if library_path is not None:
        if not library_path.is_file():
            views.print_error(f"Exercise library not found: {library_path}")
            raise typer.Exit(1)
        library = load_exercise_library(library_path)

    try:
        config = load_config(config_path) if config_path else OptimizerConfig()
        context = load_context(context_path) if context_path else TrainingContext()
        history: list[SavedWorkout] = HistoryStore(history_path).load_history() if history_path else []
        rec = compute_recommendations(config, history, context, now=anchor, library=library)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if rec is None:
        if json_out:
            print("null")
        else:
            views.print_info("Optimizer is disabled in this config; no recommendation.")
        return

    if json_out:
        print(recommendation_to_json(rec))
        return

    views.print_recommendation(rec)
