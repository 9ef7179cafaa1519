"""
Configuration constants for the volume/fatigue optimizer.

All adjustable parameters are centralized here for easy tuning.
The calibration constants of the Frederick and peak-force heuristics are
empirical; changing them changes prescriptions and is a product decision.
"""

from dataclasses import dataclass
from typing import Final

from .enums import ReadinessLevel, RepRangePreference, SessionStructure, TrainingGoal

# =============================================================================
# INTENSITY / RPE BOUNDS
# =============================================================================

MAX_INTENSITY_PCT: Final[float] = 99.0  # Hanley denominator is zero at 100
MIN_PRESCRIBED_INTENSITY_PCT: Final[float] = 30.0  # Floor for prescribed bands
MIN_RPE: Final[float] = 1.0
MAX_RPE: Final[float] = 10.0
WARMUP_MIN_RPE: Final[float] = 0.0

# =============================================================================
# HANLEY VOLUME-FATIGUE SCORE
# =============================================================================

# Upper bound used for the unbounded top zone when picking a midpoint target
ZONE_SEARCH_CAP: Final[float] = 1000.0

HANLEY_ZONE_THRESHOLDS: Final[tuple[float, ...]] = (400.0, 500.0, 600.0, 700.0)

# =============================================================================
# FREDERICK METABOLIC-STRESS SCORE
# =============================================================================

FREDERICK_DECAY: Final[float] = 0.215  # Per-rep exponential weight
RPE_DRIFT_PER_SET: Final[float] = 0.35  # Effective RPE added per set index

METABOLIC_ZONE_THRESHOLDS: Final[tuple[float, ...]] = (500.0, 650.0, 800.0, 1100.0)

# Ceiling on total Frederick load for tapered and cluster-taper structures
TAPERED_FREDERICK_GATE: Final[float] = 1600.0

# =============================================================================
# PEAK-FORCE DROP-OFF HEURISTIC
# =============================================================================

EPLEY_REP_FACTOR: Final[float] = 30.0
PEAK_FORCE_MIN_INTENSITY: Final[float] = 30.0
PEAK_FORCE_SINGLE_REP_ABOVE: Final[float] = 90.0  # Force drops after rep 1
QUALITY_RATIO_BASE: Final[float] = 0.30
QUALITY_RATIO_SPAN: Final[float] = 0.30
QUALITY_RATIO_EXPONENT: Final[float] = 0.7
QUALITY_RATIO_PIVOT: Final[float] = 90.0
QUALITY_RATIO_WIDTH: Final[float] = 30.0
PEAK_FORCE_TABLE_INTENSITIES: Final[tuple[int, ...]] = (60, 65, 70, 75, 80, 85, 90)

# Strength rest periods: (minimum intensity, rest seconds), highest first
STRENGTH_REST_TIERS: Final[tuple[tuple[float, int], ...]] = (
    (85.0, 300),
    (80.0, 240),
)
STRENGTH_REST_DEFAULT: Final[int] = 180

# =============================================================================
# SET DIVISION SEARCH
# =============================================================================

SET_COUNT_CANDIDATES: Final[tuple[int, ...]] = (3, 4, 5, 6, 8, 10)
PRACTICAL_REPS_PER_SET: Final[tuple[int, int]] = (1, 20)
HYPERTROPHY_REPS_PER_SET: Final[tuple[int, int]] = (8, 12)
MAX_DIVISION_SUGGESTIONS: Final[int] = 4

# Tapered sets: lead RPE / reps / sets options, taper reps options
TAPER_LEAD_RPE_OPTIONS: Final[tuple[float, ...]] = (8.0, 8.5, 7.5)
TAPER_LEAD_REPS_OPTIONS: Final[tuple[int, ...]] = (10, 9, 8)
TAPER_LEAD_SETS_OPTIONS: Final[tuple[int, ...]] = (2, 3)
TAPER_REPS_OPTIONS: Final[tuple[int, ...]] = (8, 7, 6, 5)
TAPER_LEAD_INTENSITY_BAND: Final[tuple[float, float]] = (55.0, 85.0)
TAPER_MIN_REMAINING_REPS: Final[int] = 4
TAPER_MAX_REP_MISS: Final[int] = 10

# Cluster-taper hybrid
CLUSTER_INTENSITY_BAND: Final[tuple[int, int]] = (68, 78)
CLUSTER_FORCE_SETS_OPTIONS: Final[tuple[int, ...]] = (3, 2)
CLUSTER_METABOLIC_REPS_OPTIONS: Final[tuple[int, ...]] = (10, 9, 8)
CLUSTER_MIN_METABOLIC_RPE: Final[float] = 6.0
CLUSTER_METABOLIC_REST: Final[int] = 90

# =============================================================================
# SESSION VOLUME
# =============================================================================

DEFAULT_MAX_SETS_PER_SESSION: Final[int] = 25
SESSION_VOLUME_FLOOR: Final[int] = 6
SESSION_VOLUME_CEILING: Final[int] = 40
MINUTES_PER_WORKING_SET: Final[int] = 4
DELOAD_VOLUME_FRACTION: Final[float] = 0.50
DEFAULT_VOLUME_TOLERANCE: Final[int] = 3
DEFAULT_GOAL_BIAS: Final[int] = 50

# Volume tolerance (1..5) → session volume / sets-per-exercise scalars
VOLUME_TOLERANCE_SCALARS: Final[dict[int, tuple[float, float]]] = {
    1: (0.70, 0.75),
    2: (0.85, 0.85),
    3: (1.00, 1.00),
    4: (1.20, 1.15),
    5: (1.40, 1.30),
}

# Recovery check-in
LOW_SLEEP_HOURS: Final[float] = 6.0
LOW_SLEEP_SCALAR: Final[float] = 0.85
HRV_SUPPRESSION_RATIO: Final[float] = 0.85
HRV_SUPPRESSED_SCALAR: Final[float] = 0.88

# =============================================================================
# HISTORY / FATIGUE SIGNALS
# =============================================================================

HISTORY_WINDOW_DAYS: Final[int] = 7
SECONDARY_MUSCLE_WEIGHT: Final[float] = 0.5
HARD_SESSION_PCT_1RM: Final[float] = 85.0
HARD_SESSION_AVG_RPE: Final[float] = 8.5
HARD_SESSION_SESSION_RPE: Final[float] = 8.0
HIGH_SET_RPE: Final[float] = 8.5
RPE_TREND_SESSIONS: Final[int] = 5
RPE_TREND_DIRECTION_DELTA: Final[float] = 0.5
DEFAULT_REPS_PER_SET: Final[int] = 8
AUTO_DELOAD_LOOKBACK_WEEKS: Final[int] = 12
AUTO_DELOAD_MIN_SESSIONS_PER_WEEK: Final[int] = 2

# =============================================================================
# WEEKLY VOLUME STATUS
# =============================================================================

ON_TRACK_RATIO: Final[float] = 0.7  # current >= 0.7 * target → on-track

# =============================================================================
# MYO-REP SESSIONS
# =============================================================================

MYO_REP_ROTATION: Final[int] = 4  # Every 4th qualifying session
MYO_REP_INTENSITY_BAND: Final[tuple[int, int]] = (55, 65)
MYO_REP_REST: Final[tuple[int, int]] = (15, 20)

# =============================================================================
# GOAL PROFILES
# =============================================================================


@dataclass(frozen=True)
class GoalProfile:
    """Default prescription parameters for one training goal."""

    intensity_range: tuple[float, float]  # %1RM
    rep_part: str  # e.g. "3-5 reps"
    sets_per_exercise: tuple[int, int]
    rest_range: tuple[int, int]  # seconds
    volume_multiplier: float  # relative to max_sets_per_session
    fatigue_target: tuple[float, float]  # Hanley per-exercise score target


GOAL_PROFILES: Final[dict[TrainingGoal, GoalProfile]] = {
    TrainingGoal.STRENGTH: GoalProfile(
        intensity_range=(80.0, 92.0),
        rep_part="3-5 reps",
        sets_per_exercise=(4, 6),
        rest_range=(180, 300),
        volume_multiplier=0.85,
        fatigue_target=(400.0, 600.0),
    ),
    TrainingGoal.HYPERTROPHY: GoalProfile(
        intensity_range=(60.0, 75.0),
        rep_part="8-12 reps",
        sets_per_exercise=(3, 4),
        rest_range=(60, 120),
        volume_multiplier=1.15,
        fatigue_target=(400.0, 600.0),
    ),
    TrainingGoal.POWER: GoalProfile(
        intensity_range=(70.0, 85.0),
        rep_part="2-3 reps (max intent)",
        sets_per_exercise=(4, 6),
        rest_range=(120, 240),
        volume_multiplier=0.75,
        fatigue_target=(250.0, 400.0),
    ),
    TrainingGoal.ENDURANCE: GoalProfile(
        intensity_range=(40.0, 60.0),
        rep_part="15-20 reps",
        sets_per_exercise=(2, 3),
        rest_range=(30, 75),
        volume_multiplier=1.0,
        fatigue_target=(350.0, 550.0),
    ),
    TrainingGoal.GENERAL: GoalProfile(
        intensity_range=(65.0, 80.0),
        rep_part="6-10 reps",
        sets_per_exercise=(3, 4),
        rest_range=(90, 150),
        volume_multiplier=1.0,
        fatigue_target=(400.0, 550.0),
    ),
}


@dataclass(frozen=True)
class RepPreferenceProfile:
    """Rep-range override chosen by the athlete instead of 'auto'."""

    rep_part: str
    intensity_range: tuple[float, float]


REP_PREFERENCE_PROFILES: Final[dict[RepRangePreference, RepPreferenceProfile]] = {
    RepRangePreference.LOW: RepPreferenceProfile(rep_part="3-5 reps", intensity_range=(78.0, 92.0)),
    RepRangePreference.MODERATE: RepPreferenceProfile(rep_part="8-12 reps", intensity_range=(60.0, 75.0)),
    RepRangePreference.HIGH: RepPreferenceProfile(rep_part="15-20+ reps", intensity_range=(40.0, 60.0)),
}

# Frederick per-exercise targets for hypertrophy-like sessions
# goal → (target_min, target_max, reference reps per set)
METABOLIC_TARGETS: Final[dict[TrainingGoal, tuple[float, float, int]]] = {
    TrainingGoal.HYPERTROPHY: (618.0, 989.0, 10),
    TrainingGoal.GENERAL: (495.0, 865.0, 8),
}
METABOLIC_REFERENCE_RPE: Final[float] = 8.0
STRENGTH_REFERENCE_REPS: Final[int] = 4
STRENGTH_REFERENCE_RPE: Final[float] = 8.5

# =============================================================================
# READINESS / PHASE SCALARS
# =============================================================================

READINESS_VOLUME_SCALARS: Final[dict[ReadinessLevel, float]] = {
    ReadinessLevel.LOW: 0.55,
    ReadinessLevel.MEDIUM: 1.0,
    ReadinessLevel.HIGH: 1.10,
}
LOW_READINESS_INTENSITY_CAP: Final[float] = 75.0
LOW_READINESS_REP_SCALAR: Final[float] = 0.80


@dataclass(frozen=True)
class PhaseRule:
    """Volume / intensity adjustment for a periodization phase keyword."""

    keywords: tuple[str, ...]
    volume_scalar: float
    intensity_shift: float


# Evaluated in order; the first rule whose keyword appears in the phase name wins
PHASE_RULES: Final[tuple[PhaseRule, ...]] = (
    PhaseRule(keywords=("deload", "taper"), volume_scalar=0.50, intensity_shift=-10.0),
    PhaseRule(keywords=("peak",), volume_scalar=0.65, intensity_shift=5.0),
    PhaseRule(keywords=("intensif",), volume_scalar=0.85, intensity_shift=5.0),
    PhaseRule(keywords=("accumulation",), volume_scalar=1.15, intensity_shift=-5.0),
    PhaseRule(keywords=("volume",), volume_scalar=1.15, intensity_shift=0.0),
    PhaseRule(keywords=("hypertrophy",), volume_scalar=1.20, intensity_shift=-3.0),
)

# Phase keyword → suggested training focus, first match wins
PHASE_FOCUS_RULES: Final[tuple[tuple[tuple[str, ...], TrainingGoal], ...]] = (
    (("strength", "intensif"), TrainingGoal.STRENGTH),
    (("hypertrophy", "accumulation"), TrainingGoal.HYPERTROPHY),
    (("power", "peak"), TrainingGoal.POWER),
)

# =============================================================================
# SESSION STRUCTURE PRESETS (exercise count range)
# =============================================================================

SESSION_STRUCTURE_EXERCISES: Final[dict[SessionStructure, tuple[int, int]]] = {
    SessionStructure.ONE_LIFT: (1, 1),
    SessionStructure.MAIN_PLUS_ACCESSORY: (2, 3),
    SessionStructure.STANDARD: (4, 6),
    SessionStructure.HIGH_VARIETY: (6, 8),
}
EXERCISE_COUNT_FLOOR: Final[int] = 3
EXERCISE_COUNT_CEILING: Final[int] = 10
MIN_SETS_PER_EXERCISE: Final[int] = 2
CONCENTRATED_SESSION_MAX_EXERCISES: Final[int] = 2
CONCENTRATED_MIN_SETS_PER_EXERCISE: Final[int] = 4
CONCENTRATED_MAX_REP_FRACTION: Final[float] = 0.65


for _table, _keys in (
    (GOAL_PROFILES, set(TrainingGoal)),
    (REP_PREFERENCE_PROFILES, set(RepRangePreference) - {RepRangePreference.AUTO}),
    (READINESS_VOLUME_SCALARS, set(ReadinessLevel)),
    (SESSION_STRUCTURE_EXERCISES, set(SessionStructure)),
):
    if set(_table) != _keys:
        raise RuntimeError(f"config table is missing entries for {sorted(_keys - set(_table))}")
