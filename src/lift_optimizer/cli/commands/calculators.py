"""Calculator commands: score, reverse, frederick, peak-force, tonnage, 1rm."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.fatigue import (
    compute_session_fatigue_score,
    compute_session_metabolic_load,
    compute_session_metabolic_load_with_drift,
    compute_set_fatigue_score,
    compute_tonnage,
    estimate_one_rep_max,
    estimate_peak_force_drop_rep,
    peak_force_table,
)
from ...core.models import FatigueZone, SetLoad, SetPrescription
from ...core.set_division import prescribe_strength_sets, reverse_prescribe_reps, suggest_set_divisions
from ...core.zones import classify_metabolic_zone, classify_zone
from ...io.serializers import ValidationError, parse_set_spec
from .. import views
from ..app import JsonOption, app

SetOption = Annotated[
    list[str],
    typer.Option("--set", "-s", help="Set spec SETSxREPS@INTENSITY/RPE (sets and RPE optional), repeatable"),
]


def _parse_specs(specs: list[str]) -> list[tuple[int, int, float, float | None]]:
    try:
        return [parse_set_spec(s) for s in specs]
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def score(
    set_specs: SetOption,
    json_out: JsonOption = False,
) -> None:
    """
    Hanley fatigue score of one or more prescriptions.

    score = reps x (100 / (100 - %1RM))^2 per set; a 4x5@80 line counts
    all four sets.
    """
    try:
        prescriptions = [
            SetPrescription(reps=reps, sets=sets, intensity_pct=intensity)
            for sets, reps, intensity, _ in _parse_specs(set_specs)
        ]
        rows = [(p, compute_set_fatigue_score(p.reps, p.intensity_pct)) for p in prescriptions]
        total = compute_session_fatigue_score(prescriptions)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    zone = classify_zone(total)

    if json_out:
        print(json.dumps({
            "sets": [
                {"sets": p.sets, "reps": p.reps, "intensity_pct": p.intensity_pct, "score_per_set": s}
                for p, s in rows
            ],
            "total": total,
            "zone": zone.value,
        }, indent=2))
        return

    views.console.print(views.format_score_table(rows))
    views.console.print(f"  Total: [bold]{total:.1f}[/bold]  {views.format_zone(zone)}")


@app.command()
def reverse(
    intensity: Annotated[
        float,
        typer.Option("--intensity", "-i", help="Load as %1RM (0-99)"),
    ],
    zone: Annotated[
        FatigueZone,
        typer.Option("--zone", "-z", help="Target Hanley zone"),
    ] = FatigueZone.MODERATE,
    strength: Annotated[
        bool,
        typer.Option("--strength", help="Split at the peak-force drop rep instead"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Total reps that land one exercise in a Hanley zone, and how to split them.
    """
    try:
        target = reverse_prescribe_reps(intensity, zone)
        if strength:
            division = prescribe_strength_sets(target.target_reps, target.intensity_pct)
            divisions = []
        else:
            division = None
            divisions = suggest_set_divisions(target.target_reps)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        data = asdict(target)
        data["zone"] = target.zone.value
        data["divisions"] = [asdict(d) for d in divisions]
        if division is not None:
            data["strength_division"] = asdict(division)
        print(json.dumps(data, indent=2))
        return

    views.print_rep_target(target)
    if division is not None:
        views.print_strength_division(division)
    elif divisions:
        views.console.print(views.format_divisions_table(divisions))
    else:
        views.print_warning("No practical set division for this total.")


@app.command()
def frederick(
    set_specs: SetOption,
    drift: Annotated[
        bool,
        typer.Option("--drift/--no-drift", help="Add RPE drift across sets"),
    ] = True,
    json_out: JsonOption = False,
) -> None:
    """
    Frederick metabolic load of a session, set by set.

    Each spec needs an RPE, e.g. 3x10@75/8.  With --drift every later set
    is scored at a slightly higher effective RPE.
    """
    loads: list[SetLoad] = []
    for sets, reps, intensity, rpe in _parse_specs(set_specs):
        if rpe is None:
            views.print_error("Each set needs an RPE, e.g. 3x10@75/8")
            raise typer.Exit(1)
        loads.extend(SetLoad(intensity_pct=intensity, reps=reps, rpe=rpe) for _ in range(sets))

    try:
        if drift:
            breakdown = compute_session_metabolic_load_with_drift(loads)
        else:
            breakdown = compute_session_metabolic_load_with_drift(loads, drift_per_set=0.0)
        plain_total = compute_session_metabolic_load(loads)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    zone = classify_metabolic_zone(breakdown.total_load)

    if json_out:
        print(json.dumps({
            "total": breakdown.total_load,
            "total_without_drift": plain_total,
            "per_set": list(breakdown.per_set_loads),
            "effective_rpe": list(breakdown.effective_rpes),
            "zone": zone.value,
        }, indent=2))
        return

    views.console.print(views.format_frederick_table(loads, breakdown))
    views.console.print(f"  Total: [bold]{breakdown.total_load:.1f}[/bold]  {views.format_zone(zone)}")
    if drift:
        views.console.print(f"  [dim]Without drift: {plain_total:.1f}[/dim]")


@app.command("peak-force")
def peak_force(
    intensity: Annotated[
        Optional[float],
        typer.Option("--intensity", "-i", help="Single %1RM instead of the reference table"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Rep at which bar speed / force output starts to drop.
    """
    if intensity is not None:
        try:
            drop = estimate_peak_force_drop_rep(intensity)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if json_out:
            print(json.dumps({"intensity": intensity, "drop_rep": drop}, indent=2))
        else:
            views.console.print(f"Peak force drops after rep [bold]{drop}[/bold] at {intensity:g}% 1RM")
        return

    rows = peak_force_table()
    if json_out:
        print(json.dumps(rows, indent=2))
        return
    views.console.print(views.format_peak_force_table(rows))


@app.command()
def tonnage(
    sets: Annotated[int, typer.Option("--sets", help="Number of sets")],
    reps: Annotated[float, typer.Option("--reps", help="Reps per set")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight per rep (lbs)")],
    json_out: JsonOption = False,
) -> None:
    """
    Total weight moved: sets x reps x weight.
    """
    try:
        total = compute_tonnage(sets, reps, weight)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({"tonnage": total}, indent=2))
        return
    views.console.print(f"Tonnage: [bold]{total:,.0f}[/bold] lbs")


@app.command("1rm")
def onerepmax(
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight lifted")],
    reps: Annotated[int, typer.Option("--reps", "-r", help="Reps completed")],
    json_out: JsonOption = False,
) -> None:
    """
    Estimate 1-rep max from a set (Epley).
    """
    one_rm = estimate_one_rep_max(weight, reps)
    if one_rm <= 0:
        views.print_error("Weight and reps must be positive.")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({"weight": weight, "reps": reps, "one_rep_max": one_rm}, indent=2))
        return
    views.console.print(f"Estimated 1RM: [bold]{one_rm:.1f}[/bold]  ({reps} reps @ {weight:g})")
