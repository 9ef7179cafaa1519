"""
Exercise registry.

The bundled exercise library is loaded once at import time.  If it cannot
be loaded a RuntimeError is raised, since weekly volume accounting depends on
it.  Lookups by unknown id return None so that history referencing
exercises outside the library degrades to an even muscle split instead of
failing.
"""

from .base import ExerciseDefinition, normalize_exercise_id


def _build_registry() -> dict[str, ExerciseDefinition]:
    from .loader import load_exercise_library

    loaded = load_exercise_library()
    if not loaded:
        raise RuntimeError(
            "lift-optimizer: no exercise definitions could be loaded. "
            "Check that src/lift_optimizer/exercises/library.yaml is present and valid."
        )
    return loaded


EXERCISE_LIBRARY: dict[str, ExerciseDefinition] = _build_registry()


def get_exercise(
    exercise_id: str,
    library: dict[str, ExerciseDefinition] | None = None,
) -> ExerciseDefinition | None:
    """
    Return the ExerciseDefinition for an id or display name.

    Args:
        exercise_id: e.g. "back_squat" or "Back Squat"
        library: Library to search (defaults to the bundled one)

    Returns:
        ExerciseDefinition, or None if the exercise is unknown
    """
    if not exercise_id:
        return None
    lib = EXERCISE_LIBRARY if library is None else library
    key = normalize_exercise_id(exercise_id)
    if key in lib:
        return lib[key]
    for ex in lib.values():
        if normalize_exercise_id(ex.display_name) == key:
            return ex
    return None
