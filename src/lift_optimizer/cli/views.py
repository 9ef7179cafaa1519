"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of scores and recommendations.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.models import (
    FatigueZone,
    MetabolicBreakdown,
    Recommendation,
    RepTarget,
    SetDivision,
    SetLoad,
    SetPrescription,
    StrengthDivision,
)
from ..core.zones import zone_label

console = Console()

ZONE_STYLES: dict[FatigueZone, str] = {
    FatigueZone.LIGHT: "green",
    FatigueZone.MODERATE: "cyan",
    FatigueZone.MODERATE_HIGH: "yellow",
    FatigueZone.HIGH: "magenta",
    FatigueZone.EXTREME: "bold red",
}


def format_zone(zone: FatigueZone) -> str:
    style = ZONE_STYLES[zone]
    return f"[{style}]{zone_label(zone)}[/{style}]"


def format_score_table(rows: list[tuple[SetPrescription, float]]) -> Table:
    """
    Create a Rich table of Hanley scores per prescription line.

    Args:
        rows: (prescription, score per set) pairs

    Returns:
        Rich Table object
    """
    table = Table(title="Hanley Fatigue Score")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("%1RM", justify="right", style="cyan")
    table.add_column("Per set", justify="right")
    table.add_column("Total", justify="right", style="bold")

    for i, (p, per_set) in enumerate(rows, 1):
        table.add_row(
            str(i),
            str(p.sets),
            str(p.reps),
            f"{p.intensity_pct:g}",
            f"{per_set:.1f}",
            f"{per_set * p.sets:.1f}",
        )

    return table


def format_divisions_table(divisions: list[SetDivision]) -> Table:
    table = Table(title="Set Divisions")
    table.add_column("Sets", justify="right")
    table.add_column("Reps/set", justify="right", style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Exact", justify="center")
    for d in divisions:
        table.add_row(str(d.sets), str(d.reps_per_set), str(d.total_reps), "yes" if d.exact else "~")
    return table


def format_frederick_table(sets: list[SetLoad], breakdown: MetabolicBreakdown) -> Table:
    """Per-set Frederick loads, with the effective RPE actually used."""
    table = Table(title="Frederick Metabolic Load")

    table.add_column("Set", justify="right", style="dim", width=4)
    table.add_column("%1RM", justify="right", style="cyan")
    table.add_column("Reps", justify="right")
    table.add_column("RPE", justify="right")
    table.add_column("Eff. RPE", justify="right")
    table.add_column("Load", justify="right", style="bold")

    for i, (s, load, rpe) in enumerate(zip(sets, breakdown.per_set_loads, breakdown.effective_rpes), 1):
        table.add_row(
            str(i),
            f"{s.intensity_pct:g}",
            str(s.reps),
            f"{s.rpe:g}",
            f"{rpe:g}",
            f"{load:.1f}",
        )

    return table


def format_peak_force_table(rows: list[dict[str, float]]) -> Table:
    table = Table(title="Peak Force Drop-Off")
    table.add_column("%1RM", justify="right", style="cyan")
    table.add_column("Max reps", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("Drop after rep", justify="right", style="bold")
    table.add_column("Hanley x", justify="right", style="dim")
    for row in rows:
        table.add_row(
            f"{row['intensity']:g}",
            f"{row['max_reps']:.1f}",
            f"{row['quality_pct']:.0f}%",
            str(int(row["drop_rep"])),
            f"{row['multiplier']:.2f}",
        )
    return table


def print_rep_target(target: RepTarget) -> None:
    console.print()
    console.print(
        f"[bold cyan]{format_zone(target.zone)} @ {target.intensity_pct:g}% 1RM[/bold cyan]"
    )
    console.print(f"  Multiplier:   {target.multiplier:.2f}")
    console.print(f"  Target score: {target.target_score:g}")
    console.print(
        f"  Total reps:   [bold]{target.target_reps}[/bold]  "
        f"(range {target.min_reps}-{target.max_reps})"
    )
    console.print()


def print_strength_division(division: StrengthDivision) -> None:
    if division.is_empty:
        console.print("[yellow]No reps requested.[/yellow]")
        return
    console.print(
        f"[bold]{division.sets} x {division.reps_per_set}[/bold] quality reps "
        f"({division.quality_reps} total, {division.rep_delta:+g} vs requested), "
        f"rest {division.rest_seconds // 60} min"
    )


def print_recommendation(rec: Recommendation) -> None:
    """
    Print a session recommendation.

    Args:
        rec: Recommendation to display
    """
    title = "Session Recommendation" + (" [red](deload)[/red]" if rec.deload else "")
    console.print()
    console.print(f"[bold cyan]{title}[/bold cyan]")
    console.print(f"  Working sets:  [bold]{rec.session_volume}[/bold]")
    console.print(f"  Rep scheme:    {escape(rec.rep_scheme)}")
    console.print(
        f"  Intensity:     {rec.intensity_range.min:g}-{rec.intensity_range.max:g}% 1RM"
    )
    console.print(f"  Rest:          {rec.rest_range.min}-{rec.rest_range.max} s")
    console.print(f"  Exercises:     {rec.exercise_count.min}-{rec.exercise_count.max}")
    if rec.suggested_focus is not None:
        console.print(f"  Focus:         {rec.suggested_focus.value}")
    if rec.fatigue_score_zone is not None and rec.target_reps_per_exercise:
        console.print(
            f"  Hanley:        {rec.target_reps_per_exercise} reps/exercise "
            f"({format_zone(rec.fatigue_score_zone)})"
        )
    if rec.metabolic_load_zone is not None:
        console.print(f"  Frederick:     {format_zone(rec.metabolic_load_zone)}")

    if rec.weekly_volume_status:
        table = Table(title="Weekly Volume")
        table.add_column("Muscle", style="cyan")
        table.add_column("Sets", justify="right")
        table.add_column("Target", justify="right")
        table.add_column("Status")
        table.add_column("Priority", style="bold")
        status_styles = {"under": "yellow", "on-track": "green", "over": "red"}
        for mg, vs in rec.weekly_volume_status.items():
            style = status_styles[vs.status]
            priority = (rec.muscle_group_priorities or {}).get(mg, "")
            table.add_row(
                mg.value, f"{vs.current:g}", str(vs.target), f"[{style}]{vs.status}[/{style}]", priority
            )
        console.print()
        console.print(table)

    console.print()
    console.print(f"[dim]{escape(rec.rationale)}[/dim]")
    console.print()


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{escape(message)}[/blue]")
