"""
Exercise library for lift-optimizer.

Maps exercise ids to the muscle groups they train, for weekly volume
accounting.
"""

from .base import ExerciseDefinition, normalize_exercise_id
from .registry import EXERCISE_LIBRARY, get_exercise

__all__ = [
    "ExerciseDefinition",
    "EXERCISE_LIBRARY",
    "get_exercise",
    "normalize_exercise_id",
]
