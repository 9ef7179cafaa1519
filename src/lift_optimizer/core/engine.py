"""
Recommendation engine.

Single pass over (config, history, context):

1. Session volume from max sets, goal profile, volume tolerance,
   readiness, phase and recovery check-in, then fatigue, RPE-trend and
   last-session adjustments and the auto-deload override.
2. Weekly sets per muscle group vs. the athlete's targets.
3. Rep scheme, intensity and rest from the goal profile or the rep-range
   preference, shifted by phase, readiness and deload.
4. Per-exercise prescriptions: Frederick metabolic sets, Hanley total
   reps, Myo-Rep rotation, tapered / cluster-taper structures and the
   peak-force strength division.
5. A deterministic rationale that opens with the dominant driver.

The engine reads no clock: all time windows are anchored on ``now``,
which defaults to the newest workout timestamp.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from .config import (
    CONCENTRATED_MAX_REP_FRACTION,
    CONCENTRATED_MIN_SETS_PER_EXERCISE,
    CONCENTRATED_SESSION_MAX_EXERCISES,
    DEFAULT_GOAL_BIAS,
    DEFAULT_MAX_SETS_PER_SESSION,
    DEFAULT_VOLUME_TOLERANCE,
    DELOAD_VOLUME_FRACTION,
    EPLEY_REP_FACTOR,
    EXERCISE_COUNT_CEILING,
    EXERCISE_COUNT_FLOOR,
    GOAL_PROFILES,
    HISTORY_WINDOW_DAYS,
    HRV_SUPPRESSED_SCALAR,
    HRV_SUPPRESSION_RATIO,
    LOW_READINESS_INTENSITY_CAP,
    LOW_READINESS_REP_SCALAR,
    LOW_SLEEP_HOURS,
    LOW_SLEEP_SCALAR,
    MAX_INTENSITY_PCT,
    METABOLIC_REFERENCE_RPE,
    METABOLIC_TARGETS,
    MIN_PRESCRIBED_INTENSITY_PCT,
    MIN_SETS_PER_EXERCISE,
    MINUTES_PER_WORKING_SET,
    MYO_REP_INTENSITY_BAND,
    MYO_REP_REST,
    MYO_REP_ROTATION,
    ON_TRACK_RATIO,
    PHASE_FOCUS_RULES,
    PHASE_RULES,
    READINESS_VOLUME_SCALARS,
    REP_PREFERENCE_PROFILES,
    SESSION_STRUCTURE_EXERCISES,
    SESSION_VOLUME_CEILING,
    SESSION_VOLUME_FLOOR,
    STRENGTH_REFERENCE_REPS,
    STRENGTH_REFERENCE_RPE,
    VOLUME_TOLERANCE_SCALARS,
    PhaseRule,
)
from .enums import coerce_enum
from .exercises import ExerciseDefinition
from .fatigue import (
    compute_set_fatigue_score,
    compute_set_metabolic_load,
    estimate_peak_force_drop_rep,
    reverse_compute_reps,
    round_half_up,
)
from .history import (
    FatigueSignals,
    SetRPESummary,
    compute_fatigue_signals,
    consecutive_training_weeks,
    last_session_rpe_summary,
    latest_timestamp,
    should_auto_deload,
    weekly_muscle_volume,
)
from .models import (
    ClusterTaperPrescription,
    FatigueZone,
    FloatRange,
    IntRange,
    MuscleGroup,
    MyoRepScheme,
    OptimizerConfig,
    Priority,
    ReadinessLevel,
    Recommendation,
    RepRangePreference,
    SavedWorkout,
    SessionStructure,
    StrengthDivision,
    TaperedPrescription,
    TrainingContext,
    TrainingGoal,
    VolumeStatus,
)
from .set_division import (
    prescribe_cluster_taper_sets,
    prescribe_hypertrophy_sets,
    prescribe_strength_sets,
    prescribe_tapered_sets,
)
from .validation import ValidationError
from .zones import classify_metabolic_zone, classify_zone

logger = logging.getLogger(__name__)


# =============================================================================
# INPUT CHECKS AND SCALARS
# =============================================================================


def validate_config(config: OptimizerConfig) -> None:
    """
    Reject configurations the engine cannot interpret.

    Raises:
        ValidationError: negative max sets, deload frequency or muscle target
    """
    if config.max_sets_per_session is None or config.max_sets_per_session < 0:
        raise ValidationError(
            f"max_sets_per_session must be non-negative, got {config.max_sets_per_session}"
        )
    if config.deload_frequency_weeks is None or config.deload_frequency_weeks < 0:
        raise ValidationError(
            f"deload_frequency_weeks must be non-negative, got {config.deload_frequency_weeks}"
        )
    for mg, target in (config.target_sets_per_muscle_group or {}).items():
        if target is None or target < 0:
            raise ValidationError(f"target sets for {mg} must be non-negative, got {target}")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _number(value: object) -> float | None:
    """Finite real number, else None (bools and strings are not numbers here)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return float(value)


def _tolerance_level(context: TrainingContext) -> int:
    level = _number(context.volume_tolerance)
    if level is None:
        return DEFAULT_VOLUME_TOLERANCE
    return int(_clamp(level, 1, 5))


def _goal_bias(context: TrainingContext) -> int:
    bias = _number(context.goal_bias)
    if bias is None:
        return DEFAULT_GOAL_BIAS
    return int(_clamp(bias, 0, 100))


def readiness_scalar(readiness: ReadinessLevel | None) -> float:
    level = coerce_enum(ReadinessLevel, readiness)
    if level is None:
        return 1.0
    return READINESS_VOLUME_SCALARS[level]


def recovery_scalar(context: TrainingContext) -> float:
    """Short sleep wins over suppressed HRV; only one penalty applies."""
    sleep = _number(context.sleep_hours)
    if sleep is not None and sleep < LOW_SLEEP_HOURS:
        return LOW_SLEEP_SCALAR
    baseline, today = _number(context.hrv_baseline_ms), _number(context.hrv_today_ms)
    if baseline and baseline > 0 and today is not None and today < baseline * HRV_SUPPRESSION_RATIO:
        return HRV_SUPPRESSED_SCALAR
    return 1.0


def phase_rule(phase_name: str | None) -> PhaseRule | None:
    """First rule whose keyword appears in the phase name."""
    if not phase_name or not isinstance(phase_name, str):
        return None
    phase = phase_name.lower()
    for rule in PHASE_RULES:
        if any(k in phase for k in rule.keywords):
            return rule
    return None


def phase_focus(phase_name: str | None) -> TrainingGoal | None:
    if not phase_name or not isinstance(phase_name, str):
        return None
    phase = phase_name.lower()
    for keywords, goal in PHASE_FOCUS_RULES:
        if any(k in phase for k in keywords):
            return goal
    return None


def volume_status(current: float, target: int) -> VolumeStatus:
    if current >= target:
        status = "over"
    elif current >= ON_TRACK_RATIO * target:
        status = "on-track"
    else:
        status = "under"
    return VolumeStatus(current=round(current, 1), target=target, status=status)


# =============================================================================
# SESSION VOLUME
# =============================================================================


@dataclass
class _VolumeTrace:
    """Which adjustments fired while deriving session volume."""

    fatigue_scalar: float = 1.0
    rpe_trend_scalar: float = 1.0
    set_rpe_trimmed: bool = False
    deload: bool = False
    time_capped: bool = False
    max_sets_capped: bool = False

    @property
    def fatigue_driven(self) -> bool:
        return self.fatigue_scalar < 1 or self.rpe_trend_scalar < 1 or self.set_rpe_trimmed


def _fatigue_scalar(fatigue: FatigueSignals) -> float:
    if fatigue.hard_sessions >= 3:
        return 0.80
    if fatigue.hard_sessions >= 2 and fatigue.sessions_last_7d >= 4:
        return 0.90
    return 1.0


def _rpe_trend_scalar(fatigue: FatigueSignals) -> float:
    avg = fatigue.rpe_trend_avg
    if avg is None or fatigue.rpe_trend_session_count < 2:
        return 1.0
    if avg >= 9.0:
        return 0.80
    if avg >= 8.5:
        return 0.88
    if avg >= 8.0 and fatigue.rpe_trend_direction == "rising":
        return 0.92
    if avg <= 6.0 and fatigue.rpe_trend_direction != "rising":
        return 1.05
    return 1.0


def _base_session_volume(
    max_sets: int,
    volume_multiplier: float,
    tolerance_scalar: float,
    context: TrainingContext,
    rule: PhaseRule | None,
) -> int:
    return round_half_up(
        max_sets
        * volume_multiplier
        * tolerance_scalar
        * readiness_scalar(context.readiness)
        * (rule.volume_scalar if rule else 1.0)
        * recovery_scalar(context)
    )


# =============================================================================
# ENGINE
# =============================================================================


def compute_recommendations(
    config: OptimizerConfig,
    history: list[SavedWorkout] | None,
    context: TrainingContext | None = None,
    *,
    now: datetime | None = None,
    library: dict[str, ExerciseDefinition] | None = None,
) -> Recommendation | None:
    """
    Build the session prescription for the next workout.

    Args:
        config: Athlete optimizer settings
        history: Saved workouts, any order (None or empty is fine)
        context: Readiness / periodization snapshot, optional
        now: Anchor for time windows; defaults to the newest workout
        library: Exercise library for muscle credit (defaults to bundled)

    Returns:
        Recommendation, or None when the optimizer is disabled

    Raises:
        ValidationError: config contains negative values
    """
    validate_config(config)
    if not config.enabled:
        logger.debug("optimizer disabled; no recommendation")
        return None

    history = list(history or [])
    context = context or TrainingContext()
    if now is None:
        now = latest_timestamp(history)

    max_sets = config.max_sets_per_session or DEFAULT_MAX_SETS_PER_SESSION
    tolerance = _tolerance_level(context)
    bias = _goal_bias(context)
    volume_scalar, sets_scalar = VOLUME_TOLERANCE_SCALARS[tolerance]
    rule = phase_rule(context.phase_name)
    focus_from_phase = phase_focus(context.phase_name)
    low_readiness = coerce_enum(ReadinessLevel, context.readiness) is ReadinessLevel.LOW
    structure = coerce_enum(SessionStructure, context.session_structure)

    goal = coerce_enum(TrainingGoal, context.goal) or focus_from_phase or TrainingGoal.HYPERTROPHY
    profile = GOAL_PROFILES[goal]
    trace = _VolumeTrace()

    # -- Session volume -------------------------------------------------------
    session_volume = _base_session_volume(
        max_sets, profile.volume_multiplier, volume_scalar, context, rule
    )

    fatigue = compute_fatigue_signals(history, now)
    trace.fatigue_scalar = _fatigue_scalar(fatigue)
    if trace.fatigue_scalar != 1.0:
        session_volume = round_half_up(session_volume * trace.fatigue_scalar)

    trace.rpe_trend_scalar = _rpe_trend_scalar(fatigue)
    if trace.rpe_trend_scalar != 1.0:
        session_volume = round_half_up(session_volume * trace.rpe_trend_scalar)

    last_rpe: SetRPESummary | None = last_session_rpe_summary(history)
    if last_rpe is not None and last_rpe.had_high_rpe:
        trace.set_rpe_trimmed = True
        session_volume = round_half_up(session_volume * 0.92)

    deload = should_auto_deload(config, history, now)
    trace.deload = deload
    if deload:
        session_volume = round_half_up(max_sets * DELOAD_VOLUME_FRACTION)

    session_volume = int(_clamp(session_volume, SESSION_VOLUME_FLOOR, SESSION_VOLUME_CEILING))

    # -- Exercise count -------------------------------------------------------
    sets_min = max(MIN_SETS_PER_EXERCISE, round_half_up(profile.sets_per_exercise[0] * sets_scalar))
    sets_max = max(sets_min, round_half_up(profile.sets_per_exercise[1] * sets_scalar))
    avg_sets = (sets_min + sets_max) / 2
    ex_min = max(EXERCISE_COUNT_FLOOR, session_volume // sets_max)
    ex_max = min(EXERCISE_COUNT_CEILING, math.ceil(session_volume / sets_min))
    ex_max = max(ex_min, ex_max)
    if structure is not None:
        ex_min, ex_max = SESSION_STRUCTURE_EXERCISES[structure]
    max_exercises = max(ex_min, ex_max)

    # -- Rep scheme / intensity / rest -----------------------------------------
    rep_part = profile.rep_part
    int_min, int_max = profile.intensity_range
    preference = coerce_enum(RepRangePreference, config.rep_range_preference) or RepRangePreference.AUTO
    if preference is not RepRangePreference.AUTO:
        pref = REP_PREFERENCE_PROFILES[preference]
        rep_part = pref.rep_part
        int_min, int_max = pref.intensity_range
    rep_scheme = f"{sets_min}-{sets_max} sets x {rep_part}"
    if deload:
        rep_scheme = "2-3 sets x 8-12 reps (deload: technique focus)"

    shift = rule.intensity_shift if rule else 0.0
    int_min = _clamp(int_min + shift, MIN_PRESCRIBED_INTENSITY_PCT, MAX_INTENSITY_PCT)
    int_max = max(int_min, min(int_max + shift, MAX_INTENSITY_PCT))
    if low_readiness:
        int_max = min(int_max, LOW_READINESS_INTENSITY_CAP)
    if deload:
        int_min = min(int_min, 50.0)
        int_max = min(int_max, 65.0)
    int_min = min(int_min, int_max)

    rest_min, rest_max = profile.rest_range
    if deload:
        rest_min, rest_max = 60, 120

    duration = _number(context.duration_minutes)
    if duration is not None and duration >= 0:
        time_cap = int(duration // MINUTES_PER_WORKING_SET)
        if session_volume > time_cap:
            trace.time_capped = True
            session_volume = time_cap
            ex_max = max(1, min(ex_max, math.ceil(time_cap / avg_sets)))
            ex_min = min(ex_min, ex_max)

    # -- Weekly volume status / priorities ------------------------------------
    weekly_status: dict[MuscleGroup, VolumeStatus] = {}
    priorities: dict[MuscleGroup, Priority] = {}
    targets = {mg: t for mg, t in (config.target_sets_per_muscle_group or {}).items() if t > 0}
    if targets:
        this_week = weekly_muscle_volume(history, now, library)
        last_week = weekly_muscle_volume(
            history, now, library, offset_days=HISTORY_WINDOW_DAYS
        )
        for mg in MuscleGroup:
            if mg not in targets:
                continue
            status = volume_status(this_week.get(mg, 0.0), targets[mg])
            weekly_status[mg] = status
            if status.status == "under":
                priorities[mg] = "increase"
            elif status.status == "over" and last_week.get(mg, 0.0) >= targets[mg]:
                priorities[mg] = "decrease"
            else:
                priorities[mg] = "maintain"

    # -- Suggested focus -------------------------------------------------------
    suggested_focus = TrainingGoal.GENERAL if deload else None
    if focus_from_phase is not None:
        suggested_focus = focus_from_phase
    effective_goal = suggested_focus or goal
    hypertrophy_like = effective_goal in (TrainingGoal.HYPERTROPHY, TrainingGoal.GENERAL)
    mid_intensity = (int_min + int_max) / 2

    # -- Frederick metabolic load ----------------------------------------------
    metabolic_target: FloatRange | None = None
    metabolic_zone: FatigueZone | None = None
    metabolic_per_set: float | None = None
    metabolic_sets: IntRange | None = None
    if hypertrophy_like and not deload:
        target_min, target_max, ref_reps = METABOLIC_TARGETS[effective_goal]
        metabolic_target = FloatRange(target_min, target_max)
        per_set = prescribe_hypertrophy_sets(
            mid_intensity, ref_reps, METABOLIC_REFERENCE_RPE, target_min, target_max
        )
        metabolic_per_set = round(per_set.per_set_load, 2)
        if per_set.per_set_load > 0:
            metabolic_sets = IntRange(per_set.min_sets, per_set.max_sets)
            projected_sets = (per_set.min_sets + per_set.max_sets) / 2
        else:
            projected_sets = avg_sets
        metabolic_zone = classify_metabolic_zone(metabolic_per_set * projected_sets)
    elif effective_goal is TrainingGoal.STRENGTH:
        metabolic_per_set = round(compute_set_metabolic_load(
            mid_intensity, STRENGTH_REFERENCE_REPS, STRENGTH_REFERENCE_RPE
        ), 2)
        profile_avg = sum(profile.sets_per_exercise) / 2
        metabolic_zone = classify_metabolic_zone(metabolic_per_set * profile_avg)

    # -- Hanley total reps per exercise ----------------------------------------
    fatigue_target: FloatRange | None = None
    fatigue_zone: FatigueZone | None = None
    target_reps: int | None = None
    hanley_capped = False
    if not deload:
        f_min, f_max = GOAL_PROFILES[effective_goal].fatigue_target
        fatigue_target = FloatRange(f_min, f_max)
        computed = reverse_compute_reps((f_min + f_max) / 2, mid_intensity)
        target_reps = max(1, round_half_up(computed * sets_scalar))
        if low_readiness:
            target_reps = max(1, round_half_up(target_reps * LOW_READINESS_REP_SCALAR))
        fatigue_zone = classify_zone(compute_set_fatigue_score(target_reps, mid_intensity))

        if max_exercises <= CONCENTRATED_SESSION_MAX_EXERCISES:
            epley_max = max(1, round_half_up(EPLEY_REP_FACTOR * (100 / mid_intensity - 1)))
            reps_per_set = max(1, min(
                round_half_up(target_reps / avg_sets),
                round_half_up(epley_max * CONCENTRATED_MAX_REP_FRACTION),
            ))
            sets_per_ex = max(CONCENTRATED_MIN_SETS_PER_EXERCISE, math.ceil(target_reps / reps_per_set))
            capped = sets_per_ex * max_exercises
            if session_volume > capped:
                hanley_capped = True
                session_volume = capped
                rep_scheme = f"{sets_per_ex} sets x {reps_per_set} reps (Hanley fatigue-capped)"

    # -- Myo-Rep rotation -------------------------------------------------------
    myo_rep: MyoRepScheme | None = None
    if (
        hypertrophy_like
        and not deload
        and bias < 50
        and not low_readiness
        and len(history) % MYO_REP_ROTATION == 0
    ):
        myo_intensity = round_half_up(sum(MYO_REP_INTENSITY_BAND) / 2)
        myo_rep = MyoRepScheme(
            activation_reps=(12, 15),
            mini_set_reps=(3, 5),
            max_mini_sets=5,
            mini_set_rest_seconds=MYO_REP_REST[0],
            intensity_pct=myo_intensity,
            description=(
                f"Myo-Rep: 12-15 activation @ RPE 8, then up to 5x3-5 with "
                f"{MYO_REP_REST[0]}s rest. ~{myo_intensity}% 1RM. "
                "Accessories/machines only, compounds use straight sets."
            ),
        )
        rep_scheme = (
            f"Myo-Rep: 12-15 + up to 5x3-5 ({MYO_REP_REST[0]}s rest) for accessories; "
            "straight sets for compounds"
        )
        int_min = min(int_min, float(MYO_REP_INTENSITY_BAND[0]))
        int_max = min(int_max, float(MYO_REP_INTENSITY_BAND[1]))
        rest_min, rest_max = MYO_REP_REST
        fatigue_target = fatigue_zone = target_reps = None

    # -- Tapered / cluster-taper set structure ---------------------------------
    tapered: TaperedPrescription | None = None
    cluster: ClusterTaperPrescription | None = None
    if hypertrophy_like and not deload and myo_rep is None and target_reps and metabolic_target:
        if bias >= 50:
            cluster = prescribe_cluster_taper_sets(target_reps, int_min, int_max)
            if cluster is not None:
                rep_scheme = (
                    f"Cluster-Taper: {cluster.description} "
                    f"(~{cluster.total_reps} reps, Frederick ~{round_half_up(cluster.total_frederick_load)})"
                )
                int_max = float(cluster.intensity_pct)
                int_min = min(max(int_min, int_max - 3), int_max)
        if cluster is None:
            tapered = prescribe_tapered_sets(target_reps)
            if tapered is not None:
                rep_scheme = (
                    f"Tapered: {tapered.description} "
                    f"(~{tapered.total_reps} reps, Frederick ~{round_half_up(tapered.total_frederick_load)})"
                )
                int_max = float(tapered.lead_intensity_pct)
                int_min = min(max(int_min, int_max - 3), int_max)

    # -- Peak-force strength division ------------------------------------------
    drop_rep: int | None = None
    strength_division: StrengthDivision | None = None
    if effective_goal in (TrainingGoal.STRENGTH, TrainingGoal.POWER) and not deload and target_reps:
        strength_mid = (int_min + int_max) / 2
        drop_rep = estimate_peak_force_drop_rep(strength_mid)
        strength_division = prescribe_strength_sets(target_reps, strength_mid)
        rep_scheme = (
            f"{strength_division.sets} sets x {strength_division.reps_per_set} reps "
            f"(peak force, {round_half_up(strength_division.rest_seconds / 60)}+ min rest)"
        )

    # -- Final bounds ----------------------------------------------------------
    if session_volume > max_sets:
        trace.max_sets_capped = True
        session_volume = max_sets
    session_volume = max(1, session_volume)

    int_min = _clamp(int_min, MIN_PRESCRIBED_INTENSITY_PCT, MAX_INTENSITY_PCT)
    int_max = _clamp(int_max, int_min, MAX_INTENSITY_PCT)
    rest_max = max(rest_min, rest_max)

    logger.debug(
        "goal=%s effective=%s volume=%d fatigue=%.2f trend=%.2f deload=%s time_cap=%s",
        goal.value, effective_goal.value, session_volume, trace.fatigue_scalar,
        trace.rpe_trend_scalar, deload, trace.time_capped,
    )

    rationale = _build_rationale(
        goal=goal,
        config=config,
        context=context,
        rule=rule,
        trace=trace,
        fatigue=fatigue,
        last_rpe=last_rpe,
        training_weeks=consecutive_training_weeks(history, now) if deload else 0,
        max_sets=max_sets,
        session_volume=session_volume,
        max_exercises=max_exercises,
        hanley_capped=hanley_capped,
        priorities=priorities,
        metabolic_target=metabolic_target,
        metabolic_per_set=metabolic_per_set,
        metabolic_sets=metabolic_sets,
        metabolic_zone=metabolic_zone,
        avg_sets=avg_sets,
        fatigue_target=fatigue_target,
        fatigue_zone=fatigue_zone,
        target_reps=target_reps,
        mid_intensity=(int_min + int_max) / 2,
        drop_rep=drop_rep,
        strength_division=strength_division,
        cluster=cluster,
        tapered=tapered,
        myo_rep=myo_rep,
    )

    return Recommendation(
        session_volume=session_volume,
        rep_scheme=rep_scheme,
        intensity_range=FloatRange(int_min, int_max),
        rest_range=IntRange(rest_min, rest_max),
        exercise_count=IntRange(ex_min, ex_max),
        rationale=rationale,
        suggested_focus=suggested_focus,
        muscle_group_priorities=priorities or None,
        weekly_volume_status=weekly_status or None,
        deload=deload,
        metabolic_load_target=metabolic_target,
        metabolic_load_zone=metabolic_zone,
        metabolic_load_per_set=metabolic_per_set,
        metabolic_sets_per_exercise=metabolic_sets,
        fatigue_score_target=fatigue_target,
        fatigue_score_zone=fatigue_zone,
        target_reps_per_exercise=target_reps,
        peak_force_drop_rep=drop_rep,
        strength_set_division=strength_division,
        tapered_rep_scheme=tapered,
        cluster_taper_scheme=cluster,
        myo_rep_scheme=myo_rep,
        last_session_set_rpe_summary=last_rpe.summary if last_rpe else None,
    )


# =============================================================================
# RATIONALE
# =============================================================================


def _fmt(value: float) -> str:
    return f"{value:g}"


def _dominant_driver(
    goal: TrainingGoal,
    config: OptimizerConfig,
    context: TrainingContext,
    rule: PhaseRule | None,
    trace: _VolumeTrace,
    fatigue: FatigueSignals,
    training_weeks: int,
    under: list[str],
) -> str:
    """Lead sentence: deload, then fatigue, then phase, then volume gap, then goal."""
    if trace.deload:
        return (
            f"Deload: {training_weeks} consecutive training weeks reached the "
            f"{config.deload_frequency_weeks}-week deload frequency."
        )
    if trace.fatigue_driven:
        reasons = []
        if trace.fatigue_scalar < 1:
            reasons.append(f"{fatigue.hard_sessions} hard session(s) in the last 7 days")
        if trace.rpe_trend_scalar < 1:
            reasons.append(f"session RPE averaging {fatigue.rpe_trend_avg:.1f}")
        if trace.set_rpe_trimmed:
            reasons.append("a very hard last session")
        return f"Fatigue: volume reduced for {' and '.join(reasons)}."
    if rule is not None:
        return (
            f"Phase: {context.phase_name} sets volume x{_fmt(rule.volume_scalar)} "
            f"and intensity {rule.intensity_shift:+g}%."
        )
    if under:
        return f"Volume gap: {', '.join(under)} below weekly target."
    return f"Goal profile: {goal.value}."


def _build_rationale(
    *,
    goal: TrainingGoal,
    config: OptimizerConfig,
    context: TrainingContext,
    rule: PhaseRule | None,
    trace: _VolumeTrace,
    fatigue: FatigueSignals,
    last_rpe: SetRPESummary | None,
    training_weeks: int,
    max_sets: int,
    session_volume: int,
    max_exercises: int,
    hanley_capped: bool,
    priorities: dict[MuscleGroup, Priority],
    metabolic_target: FloatRange | None,
    metabolic_per_set: float | None,
    metabolic_sets: IntRange | None,
    metabolic_zone: FatigueZone | None,
    avg_sets: float,
    fatigue_target: FloatRange | None,
    fatigue_zone: FatigueZone | None,
    target_reps: int | None,
    mid_intensity: float,
    drop_rep: int | None,
    strength_division: StrengthDivision | None,
    cluster: ClusterTaperPrescription | None,
    tapered: TaperedPrescription | None,
    myo_rep: MyoRepScheme | None,
) -> str:
    under = [mg.value for mg, p in priorities.items() if p == "increase"]
    lead = _dominant_driver(goal, config, context, rule, trace, fatigue, training_weeks, under)
    parts = [lead]

    if not lead.startswith("Goal profile"):
        parts.append(f"Goal profile: {goal.value}.")
    parts.append(f"Base max sets: {max_sets}, adjusted to {session_volume} working sets.")
    if hanley_capped:
        plural = "s" if max_exercises > 1 else ""
        parts.append(
            f"Hanley fatigue cap applied: concentrated session ({max_exercises} exercise{plural}), "
            "volume capped to stay within the per-exercise fatigue ceiling."
        )
    if trace.time_capped:
        parts.append(f"Time budget of {_fmt(context.duration_minutes)} min limits working sets.")
    if trace.max_sets_capped:
        parts.append(f"Capped at the configured {max_sets} sets per session.")
    if fatigue.hard_sessions > 0:
        parts.append(
            f"Fatigue: {fatigue.hard_sessions} hard session(s) and "
            f"{fatigue.sessions_last_7d} total in last 7 days."
        )
    if fatigue.rpe_trend_avg is not None and fatigue.rpe_trend_session_count >= 2:
        direction = f", {fatigue.rpe_trend_direction}" if fatigue.rpe_trend_direction else ""
        parts.append(
            f"RPE trend (last {fatigue.rpe_trend_session_count} sessions): "
            f"avg {fatigue.rpe_trend_avg:.1f}{direction}."
        )
    if last_rpe is not None:
        extra = " Moderating volume today." if last_rpe.had_high_rpe else ""
        parts.append(f"Last session set-level RPE: {last_rpe.summary}.{extra}")
    if trace.deload:
        parts.append("Auto-deload: volume halved, intensity capped.")
    if context.phase_name:
        block = f'Active block "{context.block_name}", ' if context.block_name else ""
        week = ""
        if context.week_in_phase and context.total_weeks_in_phase:
            week = f" (wk {context.week_in_phase}/{context.total_weeks_in_phase})"
        parts.append(f"{block}phase: {context.phase_name}{week}.")
    if under:
        parts.append(f"Under-volume muscles to prioritize: {', '.join(under)}.")
    decrease = [mg.value for mg, p in priorities.items() if p == "decrease"]
    if decrease:
        parts.append(f"Persistently over target: {', '.join(decrease)}.")
    if metabolic_target is not None and metabolic_per_set:
        sets = (metabolic_sets.min + metabolic_sets.max) / 2 if metabolic_sets else avg_sets
        set_note = f", {metabolic_sets.min}-{metabolic_sets.max} sets/exercise" if metabolic_sets else ""
        parts.append(
            f"Frederick metabolic load per exercise: ~{round_half_up(metabolic_per_set * sets)} "
            f"(target: {_fmt(metabolic_target.min)}-{_fmt(metabolic_target.max)}, "
            f"zone: {metabolic_zone.value}{set_note})."
        )
    if fatigue_target is not None and target_reps:
        parts.append(
            f"Hanley fatigue: {target_reps} total reps/exercise at ~{round_half_up(mid_intensity)}% "
            f"(target zone: {_fmt(fatigue_target.min)}-{_fmt(fatigue_target.max)}, {fatigue_zone.value})."
        )
    if drop_rep and strength_division is not None:
        parts.append(
            f"Peak force drops after rep {drop_rep} at ~{round_half_up(mid_intensity)}%. "
            f"Strength prescription: {strength_division.sets}x{strength_division.reps_per_set} "
            f"with {round_half_up(strength_division.rest_seconds / 60)}+ min rest."
        )
    if cluster is not None:
        fb, mb = cluster.force_block, cluster.metabolic_block
        parts.append(
            f"Cluster-Taper hybrid: Force {fb.sets}x{fb.reps} @ RPE {_fmt(fb.rpe)}, "
            f"then Metabolic {mb.sets}x{mb.reps} @ RPE {_fmt(mb.rpe)}, all @ {cluster.intensity_pct}% 1RM. "
            f"~{cluster.total_reps} reps, Frederick ~{round_half_up(cluster.total_frederick_load)}, "
            f"effective ~{round_half_up(cluster.total_frederick_with_drift)} with RPE drift."
        )
    if tapered is not None:
        parts.append(
            f"Tapered sets: {tapered.description}. ~{tapered.total_reps} reps, "
            f"Frederick ~{round_half_up(tapered.total_frederick_load)}, "
            f"effective ~{round_half_up(tapered.total_frederick_with_drift)} with RPE drift."
        )
    if myo_rep is not None:
        parts.append(
            f"Myo-Rep session: {myo_rep.description} Hanley targets suspended; "
            "Frederick metabolic load still applies."
        )
    return " ".join(parts)
