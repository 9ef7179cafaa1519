"""
lift-optimizer: volume/fatigue scoring and session recommendations for
strength training.
"""

from .core.engine import compute_recommendations
from .core.fatigue import (
    compute_session_fatigue_score,
    compute_set_fatigue_score,
    estimate_peak_force_drop_rep,
    reverse_compute_reps,
)
from .core.models import (
    FatigueZone,
    MuscleGroup,
    OptimizerConfig,
    Recommendation,
    SavedWorkout,
    SetPrescription,
    TrainingContext,
)
from .core.set_division import prescribe_strength_sets
from .core.validation import ValidationError
from .core.zones import classify_zone

__version__ = "0.1.0"

__all__ = [
    "FatigueZone",
    "MuscleGroup",
    "OptimizerConfig",
    "Recommendation",
    "SavedWorkout",
    "SetPrescription",
    "TrainingContext",
    "ValidationError",
    "classify_zone",
    "compute_recommendations",
    "compute_session_fatigue_score",
    "compute_set_fatigue_score",
    "estimate_peak_force_drop_rep",
    "prescribe_strength_sets",
    "reverse_compute_reps",
]
