"""
Fatigue zone classification.

Zone tables are ordered, contiguous and partition [0, inf): each zone
covers [min, max) and the top zone is unbounded.  Two tables exist, one per
fatigue model, and callers pick the table explicitly.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Final

from .config import HANLEY_ZONE_THRESHOLDS, METABOLIC_ZONE_THRESHOLDS, ZONE_SEARCH_CAP
from .models import FatigueZone, ZoneBounds
from .validation import ValidationError

ZONE_ORDER: Final[tuple[FatigueZone, ...]] = tuple(FatigueZone)

ZONE_LABELS: Final[dict[FatigueZone, str]] = {
    FatigueZone.LIGHT: "Light",
    FatigueZone.MODERATE: "Moderate",
    FatigueZone.MODERATE_HIGH: "Moderate-High",
    FatigueZone.HIGH: "High",
    FatigueZone.EXTREME: "Extreme",
}


@dataclass(frozen=True)
class ZoneTable:
    """
    Upper-exclusive thresholds separating consecutive zones.

    ``thresholds[k]`` is where zone ``k`` ends and zone ``k + 1`` begins.
    """

    name: str
    thresholds: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.thresholds) != len(ZONE_ORDER) - 1:
            raise ValueError(
                f"{self.name}: expected {len(ZONE_ORDER) - 1} thresholds, "
                f"got {len(self.thresholds)}"
            )
        previous = 0.0
        for t in self.thresholds:
            if t <= previous:
                raise ValueError(f"{self.name}: thresholds must be positive and increasing")
            previous = t

    def bounds(self) -> dict[FatigueZone, ZoneBounds]:
        edges = (0.0,) + self.thresholds + (math.inf,)
        return {
            zone: ZoneBounds(min=edges[i], max=edges[i + 1])
            for i, zone in enumerate(ZONE_ORDER)
        }


HANLEY_ZONES: Final[ZoneTable] = ZoneTable("hanley", HANLEY_ZONE_THRESHOLDS)
METABOLIC_ZONES: Final[ZoneTable] = ZoneTable("frederick", METABOLIC_ZONE_THRESHOLDS)


def classify_zone(score: float, table: ZoneTable = HANLEY_ZONES) -> FatigueZone:
    """
    Map a non-negative score to its zone.

    Args:
        score: Fatigue score (Hanley by default)
        table: Zone table for the model that produced the score

    Returns:
        The zone whose [min, max) contains the score

    Raises:
        ValidationError: If score is negative or NaN
    """
    if math.isnan(score) or score < 0:
        raise ValidationError(f"score must be a non-negative number, got {score}")
    return ZONE_ORDER[bisect_right(table.thresholds, score)]


def classify_metabolic_zone(load: float) -> FatigueZone:
    """Zone of a Frederick metabolic load."""
    return classify_zone(load, METABOLIC_ZONES)


def bounds_of(zone: FatigueZone, table: ZoneTable = HANLEY_ZONES) -> ZoneBounds:
    """Score interval covered by ``zone`` in ``table``."""
    return table.bounds()[FatigueZone(zone)]


def representative_score(
    zone: FatigueZone,
    table: ZoneTable = HANLEY_ZONES,
    cap: float = ZONE_SEARCH_CAP,
) -> float:
    """
    Midpoint target score for a zone.

    (min + min(max, cap)) / 2, so the unbounded top zone still yields a
    finite target.
    """
    b = bounds_of(zone, table)
    return (b.min + min(b.max, cap)) / 2


def zone_label(zone: FatigueZone) -> str:
    return ZONE_LABELS[FatigueZone(zone)]


if set(ZONE_LABELS) != set(FatigueZone):
    raise RuntimeError("ZONE_LABELS must cover every FatigueZone")
