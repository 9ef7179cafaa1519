"""
Closed vocabularies shared by the configuration tables and the data models.

Kept free of imports from the rest of the package so that config.py can key
its tables by these enums.
"""

from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)


class FatigueZone(str, Enum):
    """Named fatigue zones, ordered from lightest to heaviest."""

    LIGHT = "light"
    MODERATE = "moderate"
    MODERATE_HIGH = "moderate-high"
    HIGH = "high"
    EXTREME = "extreme"


class MuscleGroup(str, Enum):
    CHEST = "Chest"
    BACK = "Back"
    SHOULDERS = "Shoulders"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    QUADS = "Quads"
    HAMSTRINGS = "Hamstrings"
    GLUTES = "Glutes"
    CALVES = "Calves"
    CORE = "Core"
    FOREARMS = "Forearms"
    TRAPS = "Traps"

    @classmethod
    def parse(cls, value: "str | MuscleGroup") -> "MuscleGroup | None":
        """Look up a muscle group by value or name, case-insensitively."""
        if isinstance(value, MuscleGroup):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        return None


class TrainingGoal(str, Enum):
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    POWER = "power"
    ENDURANCE = "endurance"
    GENERAL = "general"


class RepRangePreference(str, Enum):
    AUTO = "auto"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ReadinessLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SessionStructure(str, Enum):
    ONE_LIFT = "one-lift"
    MAIN_PLUS_ACCESSORY = "main-plus-accessory"
    STANDARD = "standard"
    HIGH_VARIETY = "high-variety"



def coerce_enum(enum_cls: type[E], value: Any) -> E | None:
    """Member for ``value`` (member, value or name, any case), else None."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if text in (str(member.value).lower(), member.name.lower()):
            return member
    return None
