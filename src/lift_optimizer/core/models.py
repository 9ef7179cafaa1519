"""
Data models for lift-optimizer.

Core dataclasses for the optimizer's inputs (configuration, training
history, readiness context) and its output (the session recommendation).
Inputs are read-only snapshots; the engine never mutates them.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from .enums import (
    FatigueZone,
    MuscleGroup,
    ReadinessLevel,
    RepRangePreference,
    SessionStructure,
    TrainingGoal,
)
from .validation import ValidationError

VolumeStatusLabel = Literal["under", "on-track", "over"]
Priority = Literal["increase", "maintain", "decrease"]


@dataclass(frozen=True)
class ZoneBounds:
    """Half-open score interval [min, max); max is inf for the top zone."""

    min: float
    max: float

    def contains(self, score: float) -> bool:
        return self.min <= score < self.max

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.max)


@dataclass(frozen=True)
class SetPrescription:
    """
    One exercise's assigned work: sets x reps at an intensity.

    Hanley scores for a prescription count every set, so the aggregate for
    a 4 x 5 @ 80% block is 4 x score(5, 80).
    """

    reps: int
    sets: int
    intensity_pct: float
    rest_seconds: int = 0

    def __post_init__(self) -> None:
        """Validate prescription data."""
        if self.reps < 1:
            raise ValidationError("reps must be at least 1")
        if self.sets < 1:
            raise ValidationError("sets must be at least 1")
        if not 0 < self.intensity_pct < 100:
            raise ValidationError(
                f"intensity_pct must be within (0, 100), got {self.intensity_pct}"
            )
        if self.rest_seconds < 0:
            raise ValidationError("rest_seconds must be non-negative")


@dataclass(frozen=True)
class SetLoad:
    """A single set as seen by the Frederick metabolic-stress model."""

    intensity_pct: float
    reps: int
    rpe: float


@dataclass(frozen=True)
class IntRange:
    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValidationError(f"range min {self.min} exceeds max {self.max}")


@dataclass(frozen=True)
class FloatRange:
    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValidationError(f"range min {self.min} exceeds max {self.max}")


@dataclass
class OptimizerConfig:
    """
    Athlete-level optimizer settings.

    ``max_sets_per_session`` of 0 means "use the default".  Negative values
    anywhere are rejected by the engine before it computes anything.
    """

    enabled: bool = True
    max_sets_per_session: int = 25
    rep_range_preference: RepRangePreference = RepRangePreference.AUTO
    auto_deload: bool = True
    deload_frequency_weeks: int = 4
    target_sets_per_muscle_group: dict[MuscleGroup, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TrainingContext:
    """
    Readiness and periodization snapshot for the session being planned.

    Every field is optional; absent values fall back to neutral defaults.
    """

    phase_name: str | None = None
    block_name: str | None = None
    week_in_phase: int | None = None
    total_weeks_in_phase: int | None = None
    goal: TrainingGoal | None = None
    readiness: ReadinessLevel | None = None
    duration_minutes: int | None = None
    session_structure: SessionStructure | None = None
    sleep_hours: float | None = None
    hrv_baseline_ms: float | None = None
    hrv_today_ms: float | None = None
    volume_tolerance: int = 3  # 1 (very low) .. 5 (very high)
    goal_bias: int = 50  # 0 = pure hypertrophy .. 100 = pure strength


@dataclass(frozen=True)
class ExerciseBlock:
    """One prescribed exercise within a saved workout."""

    exercise_id: str
    name: str = ""
    sets: int = 0
    reps: str = ""  # "5", "8-12", "AMRAP"
    weight_lbs: float | None = None
    percent_of_1rm: float | None = None
    rpe_target: float | None = None
    rest_seconds: int = 0
    is_warmup: bool = False
    primary_muscles: tuple[MuscleGroup, ...] = ()
    secondary_muscles: tuple[MuscleGroup, ...] = ()


@dataclass(frozen=True)
class CompletedSet:
    """A logged set from a finished session."""

    exercise_id: str
    exercise_name: str = ""
    set_number: int = 0
    reps: int = 0
    weight_lbs: float = 0.0
    rpe: float | None = None


@dataclass(frozen=True)
class SavedWorkout:
    """
    A completed session from the athlete's history.

    ``timestamp`` may be None when the source record had no usable date;
    such workouts are excluded from time-windowed aggregates.
    """

    timestamp: datetime | None
    exercises: tuple[ExerciseBlock, ...] = ()
    completed_sets: tuple[CompletedSet, ...] = ()
    muscle_groups_covered: tuple[MuscleGroup, ...] = ()
    session_rpe: float | None = None
    actual_tonnage: float | None = None
    focus: str = ""
    title: str = ""


WorkoutHistory = list[SavedWorkout]


@dataclass(frozen=True)
class VolumeStatus:
    """Weekly working sets for one muscle group versus its target."""

    current: float
    target: int
    status: VolumeStatusLabel


@dataclass(frozen=True)
class RepTarget:
    """Reverse-prescribed total reps for one exercise at one intensity."""

    intensity_pct: float
    zone: FatigueZone
    target_score: float
    multiplier: float
    target_reps: int
    min_reps: int
    max_reps: int


@dataclass(frozen=True)
class SetDivision:
    """One way of splitting a rep total into equal sets."""

    sets: int
    reps_per_set: int
    total_reps: int
    exact: bool  # sets * reps_per_set equals the requested total


@dataclass(frozen=True)
class StrengthDivision:
    """
    Peak-force-capped split of a rep total.

    Every set is full, so ``quality_reps`` can overshoot the requested
    total; ``rep_delta`` records by how much.  A zero-set division means
    nothing was requested and must not be displayed.
    """

    sets: int
    reps_per_set: int
    quality_reps: int
    rest_seconds: int
    requested_reps: float = 0

    @property
    def rep_delta(self) -> float:
        return self.quality_reps - self.requested_reps

    @property
    def is_empty(self) -> bool:
        return self.sets == 0


@dataclass(frozen=True)
class MetabolicSetRange:
    """Sets per exercise needed to land a Frederick total in a target band."""

    min_sets: int
    max_sets: int
    per_set_load: float


@dataclass(frozen=True)
class MetabolicBreakdown:
    """Per-set detail of a session Frederick total."""

    total_load: float
    per_set_loads: tuple[float, ...]
    effective_rpes: tuple[float, ...]


@dataclass(frozen=True)
class TaperedPrescription:
    """Lead sets near target RPE followed by lighter taper sets at the same weight."""

    lead_sets: int
    lead_reps: int
    lead_rpe: float
    lead_intensity_pct: int
    taper_sets: int
    taper_reps: int
    taper_rpe: float
    total_reps: int
    total_frederick_load: float
    total_frederick_with_drift: float
    description: str


@dataclass(frozen=True)
class SetBlock:
    sets: int
    reps: int
    rpe: float


@dataclass(frozen=True)
class ClusterTaperPrescription:
    """Force block capped at the peak-force drop rep, then a metabolic block."""

    force_block: SetBlock
    metabolic_block: SetBlock
    intensity_pct: int
    force_rest_seconds: int
    metabolic_rest_seconds: int
    total_reps: int
    total_frederick_load: float
    total_frederick_with_drift: float
    description: str


@dataclass(frozen=True)
class MyoRepScheme:
    activation_reps: tuple[int, int]
    mini_set_reps: tuple[int, int]
    max_mini_sets: int
    mini_set_rest_seconds: int
    intensity_pct: int
    description: str


@dataclass(frozen=True)
class Recommendation:
    """
    Session prescription produced by the optimizer.

    Constructed fresh on every call and never mutated afterwards.
    """

    session_volume: int
    rep_scheme: str
    intensity_range: FloatRange
    rest_range: IntRange
    exercise_count: IntRange
    rationale: str
    suggested_focus: TrainingGoal | None = None
    muscle_group_priorities: dict[MuscleGroup, Priority] | None = None
    weekly_volume_status: dict[MuscleGroup, VolumeStatus] | None = None
    deload: bool = False
    metabolic_load_target: FloatRange | None = None
    metabolic_load_zone: FatigueZone | None = None
    metabolic_load_per_set: float | None = None
    metabolic_sets_per_exercise: IntRange | None = None
    fatigue_score_target: FloatRange | None = None
    fatigue_score_zone: FatigueZone | None = None
    target_reps_per_exercise: int | None = None
    peak_force_drop_rep: int | None = None
    strength_set_division: StrengthDivision | None = None
    tapered_rep_scheme: TaperedPrescription | None = None
    cluster_taper_scheme: ClusterTaperPrescription | None = None
    myo_rep_scheme: MyoRepScheme | None = None
    last_session_set_rpe_summary: str | None = None
