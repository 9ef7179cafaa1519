"""
JSON serialization for optimizer inputs and outputs.

History and context records are parsed leniently: a malformed field falls
back to its default and an unusable record is dropped, so a partly broken
export still yields a recommendation.  Optimizer configuration is parsed
strictly and raises ValidationError.

Keys are accepted in snake_case or in the camelCase of app exports
("sessionRPE", "completedSets", "muscleGroupsCovered", ...).
"""

import json
import logging
import math
import re
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..core.models import (
    CompletedSet,
    ExerciseBlock,
    MuscleGroup,
    OptimizerConfig,
    ReadinessLevel,
    Recommendation,
    RepRangePreference,
    SavedWorkout,
    SessionStructure,
    TrainingContext,
    TrainingGoal,
)
from ..core.validation import ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationError",
    "dict_to_completed_set",
    "dict_to_exercise_block",
    "dict_to_optimizer_config",
    "dict_to_saved_workout",
    "dict_to_training_context",
    "dicts_to_history",
    "optimizer_config_to_dict",
    "parse_set_spec",
    "parse_timestamp",
    "recommendation_to_dict",
    "recommendation_to_json",
]


# =============================================================================
# FIELD HELPERS
# =============================================================================


def _get(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key wins."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any, default: float | None = None) -> float | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        logger.debug("dropping non-numeric value %r", value)
        return default
    return result if math.isfinite(result) else default


def _as_int(value: Any, default: int = 0) -> int:
    result = _as_float(value)
    return default if result is None else int(result)


def _enum_or_none(enum_cls: type[Enum], value: Any) -> Any:
    if value is None or value == "":
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.debug("unknown %s %r; ignoring", enum_cls.__name__, value)
        return None


def _muscles(raw: Any) -> tuple[MuscleGroup, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    result = []
    for name in raw:
        muscle = MuscleGroup.parse(name) if isinstance(name, str) else None
        if muscle is None:
            logger.debug("unknown muscle group %r; ignoring", name)
            continue
        result.append(muscle)
    return tuple(result)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a workout timestamp.

    Numbers are epoch milliseconds; strings are ISO 8601 ("Z" allowed).
    Naive values are taken as UTC.  Anything else gives None.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("timestamp %r out of range", value)
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("unparseable timestamp %r", value)
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


# =============================================================================
# HISTORY (lenient)
# =============================================================================


def dict_to_exercise_block(data: dict[str, Any]) -> ExerciseBlock | None:
    """
    Convert a dict to ExerciseBlock.

    Returns:
        ExerciseBlock, or None when the record carries no exercise id or name
    """
    if not isinstance(data, dict):
        return None
    name = str(_get(data, "name", "exercise_name", "exerciseName", default=""))
    exercise_id = str(_get(data, "exercise_id", "exerciseId", "id", default="") or name)
    if not exercise_id:
        return None
    reps = _get(data, "reps", default="")
    return ExerciseBlock(
        exercise_id=exercise_id,
        name=name,
        sets=max(0, _as_int(_get(data, "sets"))),
        reps=str(reps),
        weight_lbs=_as_float(_get(data, "weight_lbs", "weightLbs", "weight")),
        percent_of_1rm=_as_float(_get(data, "percent_of_1rm", "percentOf1RM")),
        rpe_target=_as_float(_get(data, "rpe_target", "rpeTarget", "rpe")),
        rest_seconds=max(0, _as_int(_get(data, "rest_seconds", "restSeconds"))),
        is_warmup=bool(_get(data, "is_warmup", "isWarmup", default=False)),
        primary_muscles=_muscles(_get(data, "primary_muscles", "primaryMuscles")),
        secondary_muscles=_muscles(_get(data, "secondary_muscles", "secondaryMuscles")),
    )


def dict_to_completed_set(data: dict[str, Any]) -> CompletedSet | None:
    """Convert a dict to CompletedSet; None if it is not a mapping."""
    if not isinstance(data, dict):
        return None
    return CompletedSet(
        exercise_id=str(_get(data, "exercise_id", "exerciseId", default="")),
        exercise_name=str(_get(data, "exercise_name", "exerciseName", default="")),
        set_number=_as_int(_get(data, "set_number", "setNumber")),
        reps=max(0, _as_int(_get(data, "reps", "reps_completed", "repsCompleted"))),
        weight_lbs=max(0.0, _as_float(_get(data, "weight_lbs", "weightLbs", "weight"), 0.0)),
        rpe=_as_float(_get(data, "rpe")),
    )


def dict_to_saved_workout(data: dict[str, Any]) -> SavedWorkout | None:
    """
    Convert a dict to SavedWorkout.

    Malformed nested records are dropped; a missing timestamp leaves the
    workout out of time windows but keeps it in the history.

    Returns:
        SavedWorkout, or None if ``data`` is not a mapping
    """
    if not isinstance(data, dict):
        return None

    raw_blocks = _get(data, "exercises", default=[])
    if not isinstance(raw_blocks, list):
        raw_blocks = []
    blocks = tuple(b for b in map(dict_to_exercise_block, raw_blocks) if b is not None)

    raw_sets = _get(data, "completed_sets", "completedSets", default=[])
    if not isinstance(raw_sets, list):
        raw_sets = []
    completed = tuple(s for s in map(dict_to_completed_set, raw_sets) if s is not None)

    session_rpe = _as_float(_get(data, "session_rpe", "sessionRPE", "sessionRpe"))
    tonnage = _as_float(_get(data, "actual_tonnage", "actualTonnage"))

    return SavedWorkout(
        timestamp=parse_timestamp(_get(data, "timestamp", "date", "completed_at", "completedAt")),
        exercises=blocks,
        completed_sets=completed,
        muscle_groups_covered=_muscles(_get(data, "muscle_groups_covered", "muscleGroupsCovered")),
        session_rpe=session_rpe if session_rpe and session_rpe > 0 else None,
        actual_tonnage=tonnage if tonnage and tonnage > 0 else None,
        focus=str(_get(data, "focus", default="")),
        title=str(_get(data, "title", default="")),
    )


def dicts_to_history(records: Any) -> list[SavedWorkout]:
    """Convert a list of workout dicts, dropping anything unusable."""
    if not isinstance(records, list):
        logger.debug("history is %s, not a list; treating as empty", type(records).__name__)
        return []
    history = []
    for index, record in enumerate(records):
        workout = dict_to_saved_workout(record)
        if workout is None:
            logger.debug("dropping history record %d: not a mapping", index)
            continue
        history.append(workout)
    return history


# =============================================================================
# CONFIG (strict) / CONTEXT (lenient)
# =============================================================================


def dict_to_optimizer_config(data: dict[str, Any]) -> OptimizerConfig:
    """
    Convert a dict to OptimizerConfig.

    Args:
        data: Dict with any subset of the OptimizerConfig fields

    Returns:
        OptimizerConfig

    Raises:
        ValidationError: wrong types, negative counts, unknown rep-range
            preference or muscle group
    """
    if not isinstance(data, dict):
        raise ValidationError(f"optimizer config must be a mapping, got {type(data).__name__}")

    def _count(key: str, *aliases: str, default: int) -> int:
        raw = _get(data, key, *aliases, default=default)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw != int(raw):
            raise ValidationError(f"{key} must be a whole number, got {raw!r}")
        if raw < 0:
            raise ValidationError(f"{key} must be non-negative, got {raw}")
        return int(raw)

    pref_raw = _get(data, "rep_range_preference", "repRangePreference", default="auto")
    try:
        preference = RepRangePreference(str(pref_raw).lower())
    except ValueError as e:
        valid = [p.value for p in RepRangePreference]
        raise ValidationError(
            f"Invalid rep_range_preference: {pref_raw!r}. Must be one of {valid}"
        ) from e

    raw_targets = _get(data, "target_sets_per_muscle_group", "targetSetsPerMuscleGroup", default={})
    if not isinstance(raw_targets, dict):
        raise ValidationError("target_sets_per_muscle_group must be a mapping")
    targets: dict[MuscleGroup, int] = {}
    for name, value in raw_targets.items():
        muscle = MuscleGroup.parse(name)
        if muscle is None:
            raise ValidationError(f"Unknown muscle group: {name!r}")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValidationError(f"target sets for {muscle.value} must be non-negative, got {value!r}")
        targets[muscle] = int(value)

    return OptimizerConfig(
        enabled=bool(_get(data, "enabled", default=True)),
        max_sets_per_session=_count("max_sets_per_session", "maxSetsPerSession", default=25),
        rep_range_preference=preference,
        auto_deload=bool(_get(data, "auto_deload", "autoDeload", default=True)),
        deload_frequency_weeks=_count("deload_frequency_weeks", "deloadFrequencyWeeks", default=4),
        target_sets_per_muscle_group=targets,
    )


def optimizer_config_to_dict(config: OptimizerConfig) -> dict[str, Any]:
    return {
        "enabled": config.enabled,
        "max_sets_per_session": config.max_sets_per_session,
        "rep_range_preference": RepRangePreference(config.rep_range_preference).value,
        "auto_deload": config.auto_deload,
        "deload_frequency_weeks": config.deload_frequency_weeks,
        "target_sets_per_muscle_group": {
            mg.value: n for mg, n in config.target_sets_per_muscle_group.items()
        },
    }


def dict_to_training_context(data: dict[str, Any] | None) -> TrainingContext:
    """Convert a dict to TrainingContext; bad fields fall back to defaults."""
    if not isinstance(data, dict):
        return TrainingContext()

    def _opt_int(*keys: str) -> int | None:
        value = _as_float(_get(data, *keys))
        return None if value is None else int(value)

    phase = _get(data, "phase_name", "phaseName")
    block = _get(data, "block_name", "blockName")
    tolerance = _opt_int("volume_tolerance", "volumeTolerance")
    bias = _opt_int("goal_bias", "goalBias")

    return TrainingContext(
        phase_name=str(phase) if phase else None,
        block_name=str(block) if block else None,
        week_in_phase=_opt_int("week_in_phase", "weekInPhase"),
        total_weeks_in_phase=_opt_int("total_weeks_in_phase", "totalWeeksInPhase"),
        goal=_enum_or_none(TrainingGoal, _get(data, "goal", "training_goal", "trainingGoalFocus")),
        readiness=_enum_or_none(ReadinessLevel, _get(data, "readiness")),
        duration_minutes=_opt_int("duration_minutes", "durationMinutes", "duration"),
        session_structure=_enum_or_none(
            SessionStructure, _get(data, "session_structure", "sessionStructure")
        ),
        sleep_hours=_as_float(_get(data, "sleep_hours", "sleepHoursLastNight")),
        hrv_baseline_ms=_as_float(_get(data, "hrv_baseline_ms", "hrvBaselineMs")),
        hrv_today_ms=_as_float(_get(data, "hrv_today_ms", "hrvTodayMs")),
        volume_tolerance=3 if tolerance is None else max(1, min(tolerance, 5)),
        goal_bias=50 if bias is None else max(0, min(bias, 100)),
    )


# =============================================================================
# RECOMMENDATION OUTPUT
# =============================================================================


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {
            (k.value if isinstance(k, Enum) else str(k)): _to_jsonable(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, float) and math.isinf(value):
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def recommendation_to_dict(rec: Recommendation) -> dict[str, Any]:
    """
    Convert a Recommendation to a JSON-compatible dict.

    Enums become their values, unbounded maxima become None and absent
    optional fields are omitted.
    """
    data = _to_jsonable(rec)
    return {k: v for k, v in data.items() if v is not None}


def recommendation_to_json(rec: Recommendation) -> str:
    """Stable JSON (sorted keys) so identical recommendations compare byte-equal."""
    return json.dumps(recommendation_to_dict(rec), sort_keys=True, indent=2)


# =============================================================================
# COMPACT SET SPECS
# =============================================================================

_SET_SPEC_RE = re.compile(
    r"^\s*(?:(\d+)\s*[xX×]\s*)?(\d+)\s*@\s*(\d+(?:\.\d+)?)\s*%?\s*(?:/\s*(\d+(?:\.\d+)?))?\s*$"
)


def parse_set_spec(spec: str) -> tuple[int, int, float, float | None]:
    """
    Parse a compact set spec: ``[SETSx]REPS@INTENSITY[/RPE]``.

    Examples:
        "10@80"      → (1, 10, 80.0, None)
        "4x5@80"     → (4, 5, 80.0, None)
        "3x10@75/8"  → (3, 10, 75.0, 8.0)

    Returns:
        (sets, reps, intensity_pct, rpe)

    Raises:
        ValidationError: If the spec doesn't match the format
    """
    m = _SET_SPEC_RE.match(spec or "")
    if not m:
        raise ValidationError(
            f"Invalid set spec: {spec!r}. Expected [SETSx]REPS@INTENSITY[/RPE], e.g. 4x5@80 or 3x10@75/8"
        )
    sets = int(m.group(1)) if m.group(1) else 1
    reps = int(m.group(2))
    rpe = float(m.group(4)) if m.group(4) else None
    if sets < 1 or reps < 1:
        raise ValidationError(f"Invalid set spec: {spec!r}. Sets and reps must be at least 1")
    return sets, reps, float(m.group(3)), rpe
