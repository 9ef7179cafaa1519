"""
Base types for exercise definitions.

An ExerciseDefinition tells the history aggregator which muscle groups an
exercise trains: primary muscles get full set credit, secondary muscles
half.
"""

import re
from dataclasses import dataclass

from ..models import MuscleGroup


@dataclass(frozen=True)
class ExerciseDefinition:
    """Muscle credit and classification for one exercise."""

    exercise_id: str  # e.g. "back_squat"
    display_name: str  # e.g. "Back Squat"
    movement_pattern: str  # e.g. "squat", "hinge", "isolation"
    is_compound: bool
    primary_muscles: tuple[MuscleGroup, ...]
    secondary_muscles: tuple[MuscleGroup, ...] = ()


def normalize_exercise_id(value: str) -> str:
    """'Back Squat', 'back-squat' and 'back_squat' all map to 'back_squat'."""
    return re.sub(r"[^a-z0-9]+", "_", str(value).strip().lower()).strip("_")
