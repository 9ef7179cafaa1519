"""
Tests for input parsing and output serialization.

History and context parse leniently; optimizer config parses strictly.
"""

import json
from datetime import datetime, timezone

import pytest

from lift_optimizer.core.engine import compute_recommendations
from lift_optimizer.core.models import (
    MuscleGroup,
    OptimizerConfig,
    ReadinessLevel,
    RepRangePreference,
    SessionStructure,
    TrainingGoal,
)
from lift_optimizer.core.validation import ValidationError
from lift_optimizer.io.serializers import (
    dict_to_optimizer_config,
    dict_to_saved_workout,
    dict_to_training_context,
    dicts_to_history,
    optimizer_config_to_dict,
    parse_set_spec,
    parse_timestamp,
    recommendation_to_dict,
    recommendation_to_json,
)
from lift_optimizer.io.store import HistoryStore, load_config, load_context


def _workout_dict(ts: str = "2026-03-01T09:00:00Z", **extra) -> dict:
    data = {
        "timestamp": ts,
        "exercises": [
            {"exercise_id": "bench_press", "name": "Bench Press", "sets": 4, "reps": "8-12"},
        ],
    }
    data.update(extra)
    return data


# ===========================================================================
# Timestamps
# ===========================================================================


class TestParseTimestamp:
    def test_iso_with_z(self):
        assert parse_timestamp("2026-03-01T09:00:00Z") == datetime(2026, 3, 1, 9, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2026-03-01T09:00").tzinfo is not None

    def test_epoch_milliseconds(self):
        assert parse_timestamp(1_772_355_600_000) == datetime(2026, 3, 1, 9, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["yesterday", "", None, True, [], {}])
    def test_unusable_values(self, value):
        assert parse_timestamp(value) is None


# ===========================================================================
# History (lenient)
# ===========================================================================


class TestHistoryParsing:
    def test_snake_case(self):
        workout = dict_to_saved_workout(_workout_dict(session_rpe=8))
        assert workout.timestamp == datetime(2026, 3, 1, 9, tzinfo=timezone.utc)
        assert workout.exercises[0].sets == 4
        assert workout.exercises[0].reps == "8-12"
        assert workout.session_rpe == 8.0

    def test_camel_case(self):
        data = {
            "timestamp": "2026-03-01T09:00:00Z",
            "sessionRPE": 7.5,
            "muscleGroupsCovered": ["Chest", "triceps", "Wings"],
            "completedSets": [
                {"exerciseId": "bench_press", "exerciseName": "Bench Press", "setNumber": 1,
                 "reps": 8, "weightLbs": 185, "rpe": 8},
            ],
            "exercises": [
                {"exerciseId": "bench_press", "sets": 3, "percentOf1RM": 75, "isWarmup": False},
            ],
        }
        workout = dict_to_saved_workout(data)
        assert workout.session_rpe == 7.5
        assert workout.muscle_groups_covered == (MuscleGroup.CHEST, MuscleGroup.TRICEPS)
        assert workout.completed_sets[0].weight_lbs == 185.0
        assert workout.exercises[0].percent_of_1rm == 75.0

    def test_malformed_fields_fall_back(self):
        data = _workout_dict(ts="not a date", session_rpe="hard", actual_tonnage=-5)
        data["exercises"].append("garbage")
        data["exercises"].append({"sets": 3})
        data["completed_sets"] = "nope"
        workout = dict_to_saved_workout(data)
        assert workout.timestamp is None
        assert workout.session_rpe is None
        assert workout.actual_tonnage is None
        assert len(workout.exercises) == 1
        assert workout.completed_sets == ()

    def test_non_list_history_is_empty(self):
        assert dicts_to_history({"workouts": []}) == []
        assert dicts_to_history(None) == []

    def test_non_dict_records_dropped(self):
        history = dicts_to_history([_workout_dict(), 42, "x", _workout_dict()])
        assert len(history) == 2

    def test_malformed_history_still_recommends(self):
        history = dicts_to_history([{"timestamp": None, "exercises": "??"}, {}, _workout_dict()])
        rec = compute_recommendations(OptimizerConfig(), history)
        assert rec is not None
        assert rec.session_volume >= 1


# ===========================================================================
# Config (strict) / context (lenient)
# ===========================================================================


class TestConfigParsing:
    def test_defaults(self):
        config = dict_to_optimizer_config({})
        assert config == OptimizerConfig()

    def test_full_config(self):
        config = dict_to_optimizer_config({
            "enabled": True,
            "maxSetsPerSession": 18,
            "repRangePreference": "LOW",
            "autoDeload": False,
            "deloadFrequencyWeeks": 5,
            "targetSetsPerMuscleGroup": {"Chest": 12, "quads": 10},
        })
        assert config.max_sets_per_session == 18
        assert config.rep_range_preference is RepRangePreference.LOW
        assert not config.auto_deload
        assert config.target_sets_per_muscle_group == {MuscleGroup.CHEST: 12, MuscleGroup.QUADS: 10}

    def test_round_trip(self):
        config = OptimizerConfig(
            max_sets_per_session=20, target_sets_per_muscle_group={MuscleGroup.BACK: 14}
        )
        assert dict_to_optimizer_config(optimizer_config_to_dict(config)) == config

    @pytest.mark.parametrize(
        "data",
        [
            {"max_sets_per_session": -1},
            {"max_sets_per_session": 2.5},
            {"max_sets_per_session": "many"},
            {"deload_frequency_weeks": -4},
            {"rep_range_preference": "extreme"},
            {"target_sets_per_muscle_group": {"Wings": 10}},
            {"target_sets_per_muscle_group": {"Chest": -2}},
            {"target_sets_per_muscle_group": ["Chest"]},
        ],
    )
    def test_invalid_config_raises(self, data):
        with pytest.raises(ValidationError):
            dict_to_optimizer_config(data)

    def test_non_mapping_raises(self):
        with pytest.raises(ValidationError):
            dict_to_optimizer_config(["enabled"])


class TestContextParsing:
    def test_camel_case_context(self):
        context = dict_to_training_context({
            "phaseName": "Accumulation",
            "blockName": "Block A",
            "weekInPhase": 2,
            "totalWeeksInPhase": 4,
            "trainingGoalFocus": "Strength",
            "readiness": "low",
            "sessionStructure": "main-plus-accessory",
            "sleepHoursLastNight": 6.5,
        })
        assert context.phase_name == "Accumulation"
        assert context.goal is TrainingGoal.STRENGTH
        assert context.readiness is ReadinessLevel.LOW
        assert context.session_structure is SessionStructure.MAIN_PLUS_ACCESSORY
        assert context.sleep_hours == pytest.approx(6.5)

    def test_out_of_range_values_clamped(self):
        context = dict_to_training_context({"volumeTolerance": 9, "goalBias": -20})
        assert context.volume_tolerance == 5
        assert context.goal_bias == 0

    def test_bad_values_fall_back(self):
        context = dict_to_training_context({"goal": "bulk", "readiness": 3, "sleep_hours": "lots"})
        assert context.goal is None
        assert context.readiness is None
        assert context.sleep_hours is None

    def test_non_mapping_is_default(self):
        assert dict_to_training_context(None).volume_tolerance == 3


# ===========================================================================
# Output
# ===========================================================================


class TestRecommendationOutput:
    def test_dict_uses_plain_values(self):
        config = OptimizerConfig(target_sets_per_muscle_group={MuscleGroup.CHEST: 10})
        rec = compute_recommendations(config, dicts_to_history([_workout_dict()]))
        data = recommendation_to_dict(rec)
        assert data["intensity_range"] == {"min": rec.intensity_range.min, "max": rec.intensity_range.max}
        assert data["weekly_volume_status"]["Chest"]["status"] == "under"
        assert data["muscle_group_priorities"] == {"Chest": "increase"}
        assert "myo_rep_scheme" not in data

    def test_json_is_parseable_and_sorted(self):
        rec = compute_recommendations(OptimizerConfig(), [])
        text = recommendation_to_json(rec)
        data = json.loads(text)
        assert list(data) == sorted(data)
        assert data["session_volume"] == rec.session_volume


# ===========================================================================
# Set specs
# ===========================================================================


class TestSetSpec:
    @pytest.mark.parametrize(
        "spec, expected",
        [
            ("10@80", (1, 10, 80.0, None)),
            ("4x5@80", (4, 5, 80.0, None)),
            ("3x10@75/8", (3, 10, 75.0, 8.0)),
            (" 3 X 8 @ 72.5% / 8.5 ", (3, 8, 72.5, 8.5)),
        ],
    )
    def test_valid(self, spec, expected):
        assert parse_set_spec(spec) == expected

    @pytest.mark.parametrize("spec", ["", "10", "x5@80", "0x5@80", "4x0@80", "4x5@", "five@80"])
    def test_invalid(self, spec):
        with pytest.raises(ValidationError):
            parse_set_spec(spec)


# ===========================================================================
# Files
# ===========================================================================


class TestStore:
    def test_json_array_history(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps([
            _workout_dict("2026-02-20T09:00:00Z", title="old"),
            _workout_dict("2026-03-01T09:00:00Z", title="new"),
        ]), encoding="utf-8")
        history = HistoryStore(path).load_history()
        assert [w.title for w in history] == ["new", "old"]

    def test_jsonl_history_skips_bad_lines(self, tmp_path):
        path = tmp_path / "history.jsonl"
        path.write_text(
            json.dumps(_workout_dict()) + "\n{broken\n\n" + json.dumps(_workout_dict()) + "\n",
            encoding="utf-8",
        )
        with pytest.warns(UserWarning, match="skipping line 2"):
            history = HistoryStore(path).load_history()
        assert len(history) == 2

    def test_broken_json_array_raises(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ValidationError):
            HistoryStore(path).load_history()

    def test_missing_history(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            HistoryStore(tmp_path / "none.jsonl").load_history()

    def test_yaml_config_with_optimizer_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "optimizer:\n"
            "  max_sets_per_session: 16\n"
            "  target_sets_per_muscle_group:\n"
            "    Back: 12\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.max_sets_per_session == 16
        assert config.target_sets_per_muscle_group == {MuscleGroup.BACK: 12}

    def test_invalid_yaml_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("max_sets_per_session: [1,\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_non_mapping_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_json_context(self, tmp_path):
        path = tmp_path / "context.json"
        path.write_text(json.dumps({"goal": "power", "duration_minutes": 45}), encoding="utf-8")
        context = load_context(path)
        assert context.goal is TrainingGoal.POWER
        assert context.duration_minutes == 45

    def test_empty_context_file(self, tmp_path):
        path = tmp_path / "context.yaml"
        path.write_text("", encoding="utf-8")
        assert load_context(path).goal is None
