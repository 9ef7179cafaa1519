"""
Integration tests for the recommendation engine.

Exercises compute_recommendations end to end with in-memory history and
checks the guarantees every recommendation must hold: volume never above
the configured maximum, well-formed ranges, deterministic output and a
rationale that opens with the dominant driver.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from lift_optimizer.core.config import (
    GOAL_PROFILES,
    READINESS_VOLUME_SCALARS,
    REP_PREFERENCE_PROFILES,
    SESSION_STRUCTURE_EXERCISES,
)
from lift_optimizer.core.engine import (
    compute_recommendations,
    phase_focus,
    phase_rule,
    recovery_scalar,
    volume_status,
)
from lift_optimizer.core.enums import coerce_enum
from lift_optimizer.core.fatigue import estimate_peak_force_drop_rep
from lift_optimizer.core.models import (
    CompletedSet,
    ExerciseBlock,
    MuscleGroup,
    OptimizerConfig,
    ReadinessLevel,
    RepRangePreference,
    SavedWorkout,
    SessionStructure,
    TrainingContext,
    TrainingGoal,
)
from lift_optimizer.core.validation import ValidationError
from lift_optimizer.io.serializers import recommendation_to_json

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _workout(days_ago: float, *blocks: ExerciseBlock, **kwargs) -> SavedWorkout:
    return SavedWorkout(timestamp=NOW - timedelta(days=days_ago), exercises=blocks, **kwargs)


def _bench(sets: int) -> ExerciseBlock:
    return ExerciseBlock(exercise_id="bench_press", name="Bench Press", sets=sets, reps="8")


def _training_weeks(weeks: int) -> list[SavedWorkout]:
    return [_workout(7 * w + d) for w in range(weeks) for d in (1, 3)]


def _assert_well_formed(rec, max_sets: int = 25) -> None:
    assert 1 <= rec.session_volume <= max_sets
    assert rec.intensity_range.min <= rec.intensity_range.max
    assert 30 <= rec.intensity_range.min
    assert rec.intensity_range.max <= 99
    assert rec.rest_range.min <= rec.rest_range.max
    assert rec.exercise_count.min <= rec.exercise_count.max
    assert rec.rationale


# ===========================================================================
# Scalars and helpers
# ===========================================================================


class TestHelpers:
    def test_profile_tables_keyed_by_enums(self):
        assert set(GOAL_PROFILES) == set(TrainingGoal)
        assert set(READINESS_VOLUME_SCALARS) == set(ReadinessLevel)
        assert set(SESSION_STRUCTURE_EXERCISES) == set(SessionStructure)
        assert set(REP_PREFERENCE_PROFILES) == set(RepRangePreference) - {RepRangePreference.AUTO}
        assert GOAL_PROFILES[TrainingGoal.STRENGTH].rest_range == (180, 300)

    @pytest.mark.parametrize(
        "value, expected",
        [
            (TrainingGoal.POWER, TrainingGoal.POWER),
            ("power", TrainingGoal.POWER),
            (" Power ", TrainingGoal.POWER),
            ("POWER", TrainingGoal.POWER),
            ("bulking", None),
            (None, None),
            (3, None),
        ],
    )
    def test_coerce_enum(self, value, expected):
        assert coerce_enum(TrainingGoal, value) is expected

    def test_volume_status_thresholds(self):
        assert volume_status(10, 10).status == "over"
        assert volume_status(7, 10).status == "on-track"
        assert volume_status(6.9, 10).status == "under"
        assert volume_status(3.333, 10).current == pytest.approx(3.3)

    def test_recovery_scalar(self):
        assert recovery_scalar(TrainingContext()) == pytest.approx(1.0)
        assert recovery_scalar(TrainingContext(sleep_hours=5.5)) == pytest.approx(0.85)
        hrv = TrainingContext(hrv_baseline_ms=60, hrv_today_ms=45)
        assert recovery_scalar(hrv) == pytest.approx(0.88)
        both = TrainingContext(sleep_hours=5, hrv_baseline_ms=60, hrv_today_ms=45)
        assert recovery_scalar(both) == pytest.approx(0.85)

    def test_phase_rule_first_match(self):
        # "deload" is listed before "peak"
        assert phase_rule("Peak deload week").volume_scalar == pytest.approx(0.5)
        assert phase_rule("Accumulation 2").intensity_shift == pytest.approx(-5.0)
        assert phase_rule("Off-season") is None
        assert phase_rule(None) is None

    def test_phase_focus(self):
        assert phase_focus("Strength Intensification") is TrainingGoal.STRENGTH
        assert phase_focus("Hypertrophy Block") is TrainingGoal.HYPERTROPHY
        assert phase_focus("Peaking") is TrainingGoal.POWER
        assert phase_focus("Base") is None


# ===========================================================================
# Input handling
# ===========================================================================


class TestInputs:
    def test_disabled_returns_none(self):
        assert compute_recommendations(OptimizerConfig(enabled=False), []) is None

    @pytest.mark.parametrize(
        "config",
        [
            OptimizerConfig(max_sets_per_session=-1),
            OptimizerConfig(deload_frequency_weeks=-2),
            OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: -4}),
        ],
    )
    def test_negative_config_raises(self, config):
        with pytest.raises(ValidationError):
            compute_recommendations(config, [])

    def test_negative_config_raises_even_when_disabled(self):
        with pytest.raises(ValidationError):
            compute_recommendations(OptimizerConfig(enabled=False, max_sets_per_session=-1), [])

    def test_empty_history(self):
        rec = compute_recommendations(OptimizerConfig(), [])
        _assert_well_formed(rec)
        assert not rec.deload
        assert rec.weekly_volume_status is None
        assert rec.last_session_set_rpe_summary is None
        assert rec.rationale.startswith("Goal profile: hypertrophy.")

    def test_none_history_and_context(self):
        rec = compute_recommendations(OptimizerConfig(), None, None)
        _assert_well_formed(rec)

    def test_zero_max_sets_means_default(self):
        rec = compute_recommendations(OptimizerConfig(max_sets_per_session=0), [])
        assert rec.session_volume == 25

    def test_history_is_not_mutated(self):
        history = [_workout(1, _bench(3)), _workout(3, _bench(4))]
        snapshot = list(history)
        compute_recommendations(OptimizerConfig(), history, now=NOW)
        assert history == snapshot


class TestLenientInputs:
    """Dataclasses built by hand with missing or unusable fields still recommend."""

    def test_block_without_sets(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 10})
        history = [
            _workout(1, ExerciseBlock("back_squat", sets=None, reps="5")),
            _workout(2, ExerciseBlock("bench_press", sets=None, reps=None, weight_lbs=185)),
        ]
        rec = compute_recommendations(config, history, now=NOW)
        _assert_well_formed(rec)
        assert rec.weekly_volume_status[MuscleGroup.CHEST].current == 0

    def test_completed_sets_without_load(self):
        logged = CompletedSet("bench_press", "Bench Press", 1, reps=None, weight_lbs=None, rpe=9)
        rec = compute_recommendations(
            OptimizerConfig(), [_workout(1, _bench(3), completed_sets=(logged,))], now=NOW
        )
        _assert_well_formed(rec)

    @pytest.mark.parametrize(
        "context",
        [
            TrainingContext(goal="bulking"),
            TrainingContext(readiness="groggy"),
            TrainingContext(session_structure="circuit"),
            TrainingContext(sleep_hours="lots", hrv_baseline_ms="n/a", hrv_today_ms=40),
            TrainingContext(duration_minutes="an hour"),
            TrainingContext(volume_tolerance="high", goal_bias=None),
            TrainingContext(volume_tolerance=float("nan")),
        ],
    )
    def test_unusable_context_fields_use_defaults(self, context):
        default = compute_recommendations(OptimizerConfig(), [])
        rec = compute_recommendations(OptimizerConfig(), [], context)
        assert recommendation_to_json(rec) == recommendation_to_json(default)

    def test_unusable_rep_preference_is_auto(self):
        default = compute_recommendations(OptimizerConfig(), [])
        rec = compute_recommendations(OptimizerConfig(rep_range_preference="extreme"), [])
        assert rec.rep_scheme == default.rep_scheme

    def test_enum_values_given_as_strings(self):
        as_enum = compute_recommendations(
            OptimizerConfig(),
            [],
            TrainingContext(goal=TrainingGoal.STRENGTH, readiness=ReadinessLevel.LOW),
        )
        as_text = compute_recommendations(
            OptimizerConfig(), [], TrainingContext(goal="Strength", readiness="low")
        )
        assert recommendation_to_json(as_text) == recommendation_to_json(as_enum)

    def test_non_text_phase_name(self):
        rec = compute_recommendations(OptimizerConfig(), [], TrainingContext(phase_name=42))
        _assert_well_formed(rec)
        assert rec.suggested_focus is None


# ===========================================================================
# Output guarantees
# ===========================================================================


class TestGuarantees:
    @pytest.mark.parametrize("max_sets", [1, 3, 8, 12, 25, 60])
    def test_volume_never_exceeds_max_sets(self, max_sets):
        config = OptimizerConfig(max_sets_per_session=max_sets)
        for goal in TrainingGoal:
            rec = compute_recommendations(config, [], TrainingContext(goal=goal))
            assert rec.session_volume <= max_sets
            _assert_well_formed(rec, max_sets)

    def test_capped_volume_is_explained(self):
        rec = compute_recommendations(OptimizerConfig(max_sets_per_session=3), [])
        assert rec.session_volume == 3
        assert "Capped at the configured 3 sets per session." in rec.rationale

    @pytest.mark.parametrize(
        "context",
        [
            TrainingContext(),
            TrainingContext(goal=TrainingGoal.STRENGTH, readiness=ReadinessLevel.LOW),
            TrainingContext(goal=TrainingGoal.POWER, phase_name="Peaking"),
            TrainingContext(goal=TrainingGoal.ENDURANCE, volume_tolerance=1),
            TrainingContext(phase_name="Deload", session_structure=SessionStructure.ONE_LIFT),
            TrainingContext(goal_bias=0, volume_tolerance=5, readiness=ReadinessLevel.HIGH),
            TrainingContext(goal_bias=100, duration_minutes=20),
            TrainingContext(duration_minutes=0),
        ],
    )
    def test_ranges_are_well_formed(self, context):
        rec = compute_recommendations(OptimizerConfig(), [_workout(1, _bench(3))], context)
        _assert_well_formed(rec)

    def test_deterministic(self):
        history = [_workout(d, _bench(4), session_rpe=7.5) for d in (1, 3, 5)]
        context = TrainingContext(phase_name="Accumulation", block_name="Block A")
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 12})
        first = compute_recommendations(config, history, context)
        second = compute_recommendations(config, list(reversed(history)), context)
        assert recommendation_to_json(first) == recommendation_to_json(second)

    def test_explicit_now_matches_default_anchor(self):
        history = [_workout(d, _bench(4)) for d in (0, 2)]
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 12})
        implicit = compute_recommendations(config, history)
        explicit = compute_recommendations(config, history, now=NOW)
        assert recommendation_to_json(implicit) == recommendation_to_json(explicit)


# ===========================================================================
# Volume drivers
# ===========================================================================


class TestVolumeDrivers:
    def test_auto_deload(self):
        rec = compute_recommendations(OptimizerConfig(), _training_weeks(4), now=NOW)
        assert rec.deload
        assert rec.session_volume == 13  # round(25 * 0.5)
        assert rec.rep_scheme.startswith("2-3 sets x 8-12 reps")
        assert rec.intensity_range.max <= 65
        assert (rec.rest_range.min, rec.rest_range.max) == (60, 120)
        assert rec.suggested_focus is TrainingGoal.GENERAL
        assert rec.target_reps_per_exercise is None
        assert rec.rationale.startswith(
            "Deload: 4 consecutive training weeks reached the 4-week deload frequency."
        )

    def test_no_deload_before_frequency(self):
        rec = compute_recommendations(OptimizerConfig(), _training_weeks(3), now=NOW)
        assert not rec.deload

    def test_hard_sessions_reduce_volume(self):
        history = [_workout(d, _bench(4), session_rpe=9) for d in (1, 2, 4)]
        fresh = compute_recommendations(OptimizerConfig(), [])
        tired = compute_recommendations(OptimizerConfig(), history)
        assert tired.session_volume < fresh.session_volume
        assert tired.rationale.startswith("Fatigue: volume reduced for 3 hard session(s)")

    def test_high_last_session_rpe(self):
        from lift_optimizer.core.models import CompletedSet

        sets = tuple(CompletedSet("bench_press", "Bench Press", i, 8, 185, 9.0) for i in (1, 2, 3))
        history = [_workout(1, _bench(3), completed_sets=sets)]
        rec = compute_recommendations(OptimizerConfig(), history)
        assert rec.last_session_set_rpe_summary == "Bench Press: 3 sets, avg RPE 9.0 (all hard)"
        assert "Moderating volume today." in rec.rationale
        assert rec.rationale.startswith("Fatigue: volume reduced for a very hard last session.")

    def test_short_sleep_lowers_volume(self):
        config = OptimizerConfig()
        rested = compute_recommendations(config, [], TrainingContext(goal=TrainingGoal.STRENGTH))
        tired = compute_recommendations(
            config, [], TrainingContext(goal=TrainingGoal.STRENGTH, sleep_hours=5)
        )
        assert tired.session_volume < rested.session_volume

    def test_time_budget(self):
        rec = compute_recommendations(OptimizerConfig(), [], TrainingContext(duration_minutes=40))
        assert rec.session_volume <= 10
        assert "Time budget of 40 min limits working sets." in rec.rationale

    def test_fractional_time_budget_gives_whole_sets(self):
        rec = compute_recommendations(OptimizerConfig(), [], TrainingContext(duration_minutes=45.5))
        assert rec.session_volume == 11
        assert isinstance(rec.session_volume, int)
        assert type(json.loads(recommendation_to_json(rec))["session_volume"]) is int
        assert "Time budget of 45.5 min limits working sets." in rec.rationale

    def test_phase_leads_rationale(self):
        context = TrainingContext(
            phase_name="Hypertrophy Block", week_in_phase=2, total_weeks_in_phase=6
        )
        rec = compute_recommendations(OptimizerConfig(), [], context)
        assert rec.rationale.startswith("Phase: Hypertrophy Block sets volume x1.2 and intensity -3%.")
        assert "phase: Hypertrophy Block (wk 2/6)." in rec.rationale
        assert rec.suggested_focus is TrainingGoal.HYPERTROPHY

    def test_one_lift_session_is_hanley_capped(self):
        rec = compute_recommendations(
            OptimizerConfig(), [], TrainingContext(session_structure=SessionStructure.ONE_LIFT)
        )
        assert (rec.exercise_count.min, rec.exercise_count.max) == (1, 1)
        assert rec.session_volume < 25
        assert "Hanley fatigue cap applied: concentrated session (1 exercise)" in rec.rationale


# ===========================================================================
# Weekly volume / priorities
# ===========================================================================


class TestWeeklyVolume:
    def test_under_target_is_increase(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 10})
        rec = compute_recommendations(config, [_workout(1, _bench(3))])
        status = rec.weekly_volume_status[MuscleGroup.CHEST]
        assert (status.current, status.target, status.status) == (3.0, 10, "under")
        assert rec.muscle_group_priorities == {MuscleGroup.CHEST: "increase"}
        assert rec.rationale.startswith("Volume gap: Chest below weekly target.")

    def test_over_this_week_only_is_maintain(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 10})
        rec = compute_recommendations(config, [_workout(1, _bench(12))])
        assert rec.weekly_volume_status[MuscleGroup.CHEST].status == "over"
        assert rec.muscle_group_priorities[MuscleGroup.CHEST] == "maintain"

    def test_persistently_over_is_decrease(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 10})
        history = [_workout(1, _bench(12)), _workout(8, _bench(12))]
        rec = compute_recommendations(config, history)
        assert rec.muscle_group_priorities[MuscleGroup.CHEST] == "decrease"
        assert "Persistently over target: Chest." in rec.rationale

    def test_secondary_muscles_count_half(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.TRICEPS: 4})
        rec = compute_recommendations(config, [_workout(1, _bench(6))])
        assert rec.weekly_volume_status[MuscleGroup.TRICEPS].current == pytest.approx(3.0)

    def test_zero_targets_are_ignored(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CALVES: 0})
        rec = compute_recommendations(config, [_workout(1, _bench(3))])
        assert rec.weekly_volume_status is None


# ===========================================================================
# Prescription structures
# ===========================================================================


class TestPrescriptions:
    def test_hypertrophy_default_uses_cluster_taper(self):
        rec = compute_recommendations(OptimizerConfig(), [])
        assert rec.cluster_taper_scheme is not None
        assert rec.intensity_range.max == rec.cluster_taper_scheme.intensity_pct
        assert rec.metabolic_load_target is not None
        assert rec.metabolic_sets_per_exercise.min <= rec.metabolic_sets_per_exercise.max
        assert rec.fatigue_score_zone is not None
        assert rec.rep_scheme.startswith("Cluster-Taper:")

    def test_strength_goal_division(self):
        rec = compute_recommendations(
            OptimizerConfig(), [_workout(1, _bench(3))], TrainingContext(goal=TrainingGoal.STRENGTH)
        )
        division = rec.strength_set_division
        assert division is not None
        assert division.reps_per_set <= rec.peak_force_drop_rep
        mid = (rec.intensity_range.min + rec.intensity_range.max) / 2
        assert division.reps_per_set == estimate_peak_force_drop_rep(mid)
        assert division.quality_reps >= rec.target_reps_per_exercise
        assert "peak force" in rec.rep_scheme
        assert rec.metabolic_load_target is None
        assert rec.metabolic_load_per_set is not None

    def test_low_readiness_caps_intensity(self):
        rec = compute_recommendations(
            OptimizerConfig(),
            [],
            TrainingContext(goal=TrainingGoal.STRENGTH, readiness=ReadinessLevel.LOW),
        )
        assert rec.intensity_range.max <= 75
        assert rec.intensity_range.min <= rec.intensity_range.max

    def test_myo_rep_rotation(self):
        context = TrainingContext(goal_bias=30)
        rec = compute_recommendations(OptimizerConfig(), [], context)
        assert rec.myo_rep_scheme is not None
        assert (rec.rest_range.min, rec.rest_range.max) == (15, 20)
        assert rec.intensity_range.max <= 65
        assert rec.target_reps_per_exercise is None
        assert rec.rep_scheme.startswith("Myo-Rep:")

        off_rotation = compute_recommendations(OptimizerConfig(), [_workout(1, _bench(3))], context)
        assert off_rotation.myo_rep_scheme is None

    def test_rep_range_preference_overrides_scheme(self):
        config = OptimizerConfig(rep_range_preference=RepRangePreference.LOW)
        rec = compute_recommendations(config, [])
        assert "3-5 reps" in rec.rep_scheme
        assert rec.intensity_range.min >= 78
