"""
Training history aggregation.

Read-only summaries of the athlete's saved workouts used by the
recommendation engine: weekly sets per muscle group, recent fatigue
signals, RPE trend, last-session set RPE and the auto-deload check.

Time windows are anchored on an explicit ``now``; nothing here reads the
clock.  Missing fields count as zero/empty.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Literal

from .config import (
    AUTO_DELOAD_LOOKBACK_WEEKS,
    AUTO_DELOAD_MIN_SESSIONS_PER_WEEK,
    DEFAULT_REPS_PER_SET,
    HARD_SESSION_AVG_RPE,
    HARD_SESSION_PCT_1RM,
    HARD_SESSION_SESSION_RPE,
    HIGH_SET_RPE,
    HISTORY_WINDOW_DAYS,
    RPE_TREND_DIRECTION_DELTA,
    RPE_TREND_SESSIONS,
    SECONDARY_MUSCLE_WEIGHT,
)
from .exercises import ExerciseDefinition, get_exercise
from .fatigue import completed_sets_tonnage
from .models import ExerciseBlock, MuscleGroup, OptimizerConfig, SavedWorkout

TrendDirection = Literal["rising", "falling", "stable"]

_RANGE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[-–]\s*(\d+(?:\.\d+)?)\s*$")
_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class FatigueSignals:
    """Recent-load summary over the trailing week plus the session-RPE trend."""

    sessions_last_7d: int = 0
    hard_sessions: int = 0
    total_sets: int = 0
    total_tonnage: float = 0.0
    rpe_trend_avg: float | None = None
    rpe_trend_direction: TrendDirection | None = None
    rpe_trend_session_count: int = 0


@dataclass(frozen=True)
class SetRPESummary:
    summary: str
    had_high_rpe: bool


def as_utc(ts: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so mixed inputs compare cleanly."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def latest_timestamp(history: Iterable[SavedWorkout]) -> datetime | None:
    stamps = [as_utc(w.timestamp) for w in history if w.timestamp is not None]
    return max(stamps) if stamps else None


def sort_recent_first(history: Iterable[SavedWorkout]) -> list[SavedWorkout]:
    """Most recent first; undated workouts last, in their original order."""
    return sorted(
        history,
        key=lambda w: (w.timestamp is None, -as_utc(w.timestamp).timestamp() if w.timestamp else 0.0),
    )


def in_window(ts: datetime | None, now: datetime | None, days: int, offset_days: int = 0) -> bool:
    """True if ``ts`` lies in (now - offset - days, now - offset]."""
    if ts is None or now is None:
        return False
    end = as_utc(now) - timedelta(days=offset_days)
    start = end - timedelta(days=days)
    return start < as_utc(ts) <= end


def parse_rep_range(reps: str | int | float | None) -> float:
    """
    Average reps per set from a prescription string.

    "5" → 5, "8-12" → 10, anything else ("AMRAP", "5/3/1", "") → 8.
    """
    if isinstance(reps, (int, float)):
        return float(reps) if reps > 0 else float(DEFAULT_REPS_PER_SET)
    text = str(reps or "")
    m = _RANGE_RE.match(text)
    if m:
        return (float(m.group(1)) + float(m.group(2))) / 2
    m = _NUMBER_RE.match(text)
    if m and float(m.group(1)) > 0:
        return float(m.group(1))
    return float(DEFAULT_REPS_PER_SET)


def _working_blocks(workout: SavedWorkout) -> list[ExerciseBlock]:
    return [b for b in workout.exercises if not b.is_warmup]


def _block_muscles(
    block: ExerciseBlock,
    library: dict[str, ExerciseDefinition] | None,
) -> tuple[tuple[MuscleGroup, ...], tuple[MuscleGroup, ...]] | None:
    if block.primary_muscles:
        return block.primary_muscles, block.secondary_muscles
    ex = get_exercise(block.exercise_id, library) or get_exercise(block.name, library)
    if ex is None:
        return None
    return ex.primary_muscles, ex.secondary_muscles


def workout_muscle_sets(
    workout: SavedWorkout,
    library: dict[str, ExerciseDefinition] | None = None,
) -> dict[MuscleGroup, float]:
    """
    Weighted working sets per muscle group for one workout.

    Primary muscles get full credit, secondary muscles half.  Sets of
    exercises with no known muscles are split evenly over the workout's
    ``muscle_groups_covered``.
    """
    volume: dict[MuscleGroup, float] = {}
    unassigned = 0.0

    for block in _working_blocks(workout):
        sets = max(0, block.sets or 0)
        if sets == 0:
            continue
        muscles = _block_muscles(block, library)
        if muscles is None:
            unassigned += sets
            continue
        primary, secondary = muscles
        for mg in dict.fromkeys(primary):
            volume[mg] = volume.get(mg, 0.0) + sets
        for mg in dict.fromkeys(secondary):
            if mg in primary:
                continue
            volume[mg] = volume.get(mg, 0.0) + sets * SECONDARY_MUSCLE_WEIGHT

    groups = list(dict.fromkeys(workout.muscle_groups_covered))
    if unassigned and groups:
        share = unassigned / len(groups)
        for mg in groups:
            volume[mg] = volume.get(mg, 0.0) + share
    return volume


def weekly_muscle_volume(
    history: Iterable[SavedWorkout],
    now: datetime | None,
    library: dict[str, ExerciseDefinition] | None = None,
    days: int = HISTORY_WINDOW_DAYS,
    offset_days: int = 0,
) -> dict[MuscleGroup, float]:
    """
    Weighted working sets per muscle group over a trailing window.

    Args:
        history: Saved workouts, any order
        now: Window anchor; None means no window (empty result)
        library: Exercise library (defaults to the bundled one)
        days: Window length
        offset_days: Shift the window back, e.g. 7 for the previous week

    Returns:
        {muscle_group: sets}
    """
    volume: dict[MuscleGroup, float] = {}
    for workout in history:
        if not in_window(workout.timestamp, now, days, offset_days):
            continue
        for mg, sets in workout_muscle_sets(workout, library).items():
            volume[mg] = volume.get(mg, 0.0) + sets
    return volume


def workout_tonnage(workout: SavedWorkout) -> float:
    """Recorded tonnage, else logged sets, else sets x avg reps x weight of the plan."""
    if workout.actual_tonnage:
        return max(0.0, workout.actual_tonnage)
    if workout.completed_sets:
        return completed_sets_tonnage(workout.completed_sets)
    return sum(
        max(0, b.sets or 0) * parse_rep_range(b.reps) * max(0.0, b.weight_lbs or 0.0)
        for b in _working_blocks(workout)
    )


def is_hard_session(workout: SavedWorkout) -> bool:
    """Heavy (avg >= 85% 1RM), grinding (avg RPE >= 8.5) or rated hard (session RPE >= 8)."""
    blocks = _working_blocks(workout)
    count = len(blocks) or 1
    avg_pct = sum(b.percent_of_1rm or 0.0 for b in blocks) / count
    avg_rpe = sum(b.rpe_target or 0.0 for b in blocks) / count
    return (
        avg_pct >= HARD_SESSION_PCT_1RM
        or avg_rpe >= HARD_SESSION_AVG_RPE
        or (workout.session_rpe or 0.0) >= HARD_SESSION_SESSION_RPE
    )


def compute_fatigue_signals(
    history: Iterable[SavedWorkout],
    now: datetime | None,
) -> FatigueSignals:
    """
    Summarize recent load.

    Session counts, hard sessions, sets and tonnage cover the trailing
    7 days.  The RPE trend uses the last 5 sessions with a session RPE,
    whenever they happened: the average needs at least 2, the direction
    (most recent 2 vs oldest 2) at least 4.
    """
    workouts = list(history)
    recent = [w for w in workouts if in_window(w.timestamp, now, HISTORY_WINDOW_DAYS)]

    hard = sum(1 for w in recent if is_hard_session(w))
    total_sets = sum(max(0, b.sets or 0) for w in recent for b in _working_blocks(w))
    tonnage = sum(workout_tonnage(w) for w in recent)

    rated = [w for w in sort_recent_first(workouts) if (w.session_rpe or 0) > 0]
    rated = rated[:RPE_TREND_SESSIONS]
    trend_avg = None
    if len(rated) >= 2:
        trend_avg = sum(w.session_rpe for w in rated) / len(rated)

    direction: TrendDirection | None = None
    if len(rated) >= 4:
        recent_avg = (rated[0].session_rpe + rated[1].session_rpe) / 2
        older_avg = (rated[-2].session_rpe + rated[-1].session_rpe) / 2
        diff = recent_avg - older_avg
        if diff >= RPE_TREND_DIRECTION_DELTA:
            direction = "rising"
        elif diff <= -RPE_TREND_DIRECTION_DELTA:
            direction = "falling"
        else:
            direction = "stable"

    return FatigueSignals(
        sessions_last_7d=len(recent),
        hard_sessions=hard,
        total_sets=total_sets,
        total_tonnage=tonnage,
        rpe_trend_avg=trend_avg,
        rpe_trend_direction=direction,
        rpe_trend_session_count=len(rated),
    )


def last_session_rpe_summary(history: Iterable[SavedWorkout]) -> SetRPESummary | None:
    """
    Per-exercise set RPE of the most recent session.

    ``had_high_rpe`` is set when an exercise had 2+ sets at RPE 8.5+, or at
    least half its sets there.  Returns None without rated sets.
    """
    ordered = sort_recent_first(history)
    if not ordered:
        return None
    rated = [s for s in ordered[0].completed_sets if s.rpe is not None and s.rpe > 0]
    if not rated:
        return None

    by_exercise: dict[str, tuple[str, list[float]]] = {}
    for s in rated:
        key = s.exercise_id or s.exercise_name
        name = s.exercise_name or s.exercise_id or "Exercise"
        by_exercise.setdefault(key, (name, []))[1].append(s.rpe)

    parts = []
    had_high = False
    for name, rpes in by_exercise.values():
        avg = sum(rpes) / len(rpes)
        high = sum(1 for r in rpes if r >= HIGH_SET_RPE)
        if high >= 2 or high / len(rpes) >= 0.5:
            had_high = True
        if high >= len(rpes):
            note = " (all hard)"
        elif high > 0:
            note = f" ({high} set(s) RPE {HIGH_SET_RPE:g}+)"
        else:
            note = ""
        parts.append(f"{name}: {len(rpes)} sets, avg RPE {avg:.1f}{note}")

    return SetRPESummary(summary="; ".join(parts), had_high_rpe=had_high)


def consecutive_training_weeks(
    history: Iterable[SavedWorkout],
    now: datetime | None,
    lookback_weeks: int = AUTO_DELOAD_LOOKBACK_WEEKS,
) -> int:
    """Trailing weeks (back from ``now``) with at least 2 sessions each, without a gap."""
    workouts = list(history)
    weeks = 0
    for w in range(lookback_weeks):
        count = sum(1 for h in workouts if in_window(h.timestamp, now, 7, offset_days=7 * w))
        if count < AUTO_DELOAD_MIN_SESSIONS_PER_WEEK:
            break
        weeks += 1
    return weeks


def should_auto_deload(
    config: OptimizerConfig,
    history: Iterable[SavedWorkout],
    now: datetime | None,
) -> bool:
    """Deload once the athlete has trained ``deload_frequency_weeks`` weeks straight."""
    if not config.auto_deload or not config.deload_frequency_weeks:
        return False
    return consecutive_training_weeks(history, now) >= config.deload_frequency_weeks
