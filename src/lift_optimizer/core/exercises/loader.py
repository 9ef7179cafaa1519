"""
YAML → ExerciseDefinition loader.

Loads the exercise library from the bundled
``src/lift_optimizer/exercises/library.yaml``.  An override file with the
same layout can be deep-merged over it, so only changed keys need to be
listed; exercise ids absent from the bundled library are added.

Usage (internal, called by registry.py):
    from .loader import load_exercise_library
    library = load_exercise_library()   # dict or None on failure
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..models import MuscleGroup
from .base import ExerciseDefinition, normalize_exercise_id

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "display_name",
        "movement_pattern",
        "is_compound",
        "primary_muscles",
    }
)


def _parse_muscles(raw: list | None, field_name: str, exercise_id: str) -> tuple[MuscleGroup, ...]:
    muscles = []
    for name in raw or []:
        muscle = MuscleGroup.parse(name)
        if muscle is None:
            raise ValueError(f"{exercise_id}.{field_name}: unknown muscle group {name!r}")
        muscles.append(muscle)
    return tuple(muscles)


def exercise_from_dict(exercise_id: str, d: dict) -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValueError if any required field is absent or a muscle name is
    not a MuscleGroup.
    """
    if not isinstance(d, dict):
        raise ValueError(f"{exercise_id}: expected a mapping, got {type(d).__name__}")
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"{exercise_id}: missing fields {sorted(missing)}")

    return ExerciseDefinition(
        exercise_id=normalize_exercise_id(exercise_id),
        display_name=str(d["display_name"]),
        movement_pattern=str(d["movement_pattern"]),
        is_compound=bool(d["is_compound"]),
        primary_muscles=_parse_muscles(d["primary_muscles"], "primary_muscles", exercise_id),
        secondary_muscles=_parse_muscles(
            d.get("secondary_muscles"), "secondary_muscles", exercise_id
        ),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} when it is missing or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-optimizer: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_library_path() -> Path | None:
    """Return path to the bundled library.yaml, or None if not found."""
    # loader.py lives at src/lift_optimizer/core/exercises/loader.py
    # three levels up → src/lift_optimizer/
    candidate = Path(__file__).parent.parent.parent / "exercises" / "library.yaml"
    return candidate if candidate.is_file() else None


def load_exercise_library(
    override_path: str | Path | None = None,
) -> dict[str, ExerciseDefinition] | None:
    """Return {exercise_id: ExerciseDefinition} from the bundled YAML.

    If ``override_path`` is given and readable, its ``exercises`` mapping is
    deep-merged over the bundled one.  Invalid entries are skipped with a
    warning.  Returns None when nothing could be loaded.
    """
    raw: dict = {}
    bundled = get_bundled_library_path()
    if bundled is not None:
        raw = _load_yaml_file(bundled).get("exercises") or {}

    if override_path is not None:
        override = _load_yaml_file(Path(override_path)).get("exercises") or {}
        if isinstance(override, dict):
            raw = _deep_merge(raw, override)

    result: dict[str, ExerciseDefinition] = {}
    for exercise_id, entry in raw.items():
        try:
            ex = exercise_from_dict(str(exercise_id), entry)
        except ValueError as exc:
            warnings.warn(
                f"lift-optimizer: skipping exercise '{exercise_id}' ({exc})",
                stacklevel=2,
            )
            continue
        result[ex.exercise_id] = ex

    return result if result else None
