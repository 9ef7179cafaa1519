"""
Closed-form fatigue models.

Two independent scores exist for the same workload and are never mixed:

* Hanley volume-fatigue score (neuromuscular cost, quadratic in intensity)
      score = reps * (100 / (100 - I))^2
* Frederick metabolic-stress load (per set, exponential in proximity to failure)
      load = I * sum_{i=1..reps} exp(-0.215 * (RIR + reps - i)),  RIR = 10 - RPE

Plus the peak-force drop-off heuristic used to cap strength sets, Epley
helpers and plain tonnage arithmetic.  Everything here is pure.
"""

import math
from typing import Iterable, Sequence

from .config import (
    EPLEY_REP_FACTOR,
    FREDERICK_DECAY,
    MAX_RPE,
    PEAK_FORCE_MIN_INTENSITY,
    PEAK_FORCE_SINGLE_REP_ABOVE,
    PEAK_FORCE_TABLE_INTENSITIES,
    QUALITY_RATIO_BASE,
    QUALITY_RATIO_EXPONENT,
    QUALITY_RATIO_PIVOT,
    QUALITY_RATIO_SPAN,
    QUALITY_RATIO_WIDTH,
    RPE_DRIFT_PER_SET,
)
from .models import CompletedSet, MetabolicBreakdown, SetLoad, SetPrescription
from .validation import (
    ValidationError,
    clamp_rpe,
    validate_intensity,
    validate_load_intensity,
    validate_non_negative,
    validate_positive_intensity,
    validate_reps,
    validate_whole_reps,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


# =============================================================================
# HANLEY
# =============================================================================


def fatigue_multiplier(intensity_pct: float) -> float:
    """
    Per-rep Hanley cost at an intensity.

    M(I) = (100 / (100 - I))^2

    At 80% each rep costs 25 points, at 90% 100 points.
    """
    intensity = validate_intensity(intensity_pct)
    return (100.0 / (100.0 - intensity)) ** 2


def compute_set_fatigue_score(reps: float, intensity_pct: float) -> float:
    """
    Hanley fatigue score for a single set.

    score = reps * (100 / (100 - I))^2

    Args:
        reps: Reps performed (>= 0)
        intensity_pct: %1RM, 0 <= I < 100

    Returns:
        Non-negative fatigue score

    Raises:
        ValidationError: If reps < 0 or intensity is outside [0, 100)
    """
    reps = validate_reps(reps)
    return reps * fatigue_multiplier(intensity_pct)


def compute_session_fatigue_score(sets: Iterable[SetPrescription]) -> float:
    """
    Aggregate Hanley score over prescriptions.

    Each prescription contributes ``sets * score(reps, intensity)``.
    """
    total = 0.0
    for prescription in sets:
        total += prescription.sets * compute_set_fatigue_score(
            prescription.reps, prescription.intensity_pct
        )
    return total


def reverse_compute_reps(target_score: float, intensity_pct: float) -> float:
    """
    Invert the Hanley formula.

    reps = target / (100 / (100 - I))^2

    Returns a fractional rep count; rounding is the caller's policy.
    """
    target = validate_non_negative(target_score, "target_score")
    return float(target) / fatigue_multiplier(intensity_pct)


# =============================================================================
# FREDERICK
# =============================================================================


def compute_set_metabolic_load(
    intensity_pct: float,
    reps: int,
    rpe: float,
    *,
    warmup: bool = False,
) -> float:
    """
    Frederick metabolic load for a single set.

    load = I * sum_{i=1..reps} exp(-0.215 * (RIR + reps - i))

    Later reps sit closer to failure and carry more weight.  RPE is
    clamped into [1, 10] ([0, 10] for warm-up sets) before RIR is taken.

    Args:
        intensity_pct: %1RM (0..100)
        reps: Whole reps in the set
        rpe: Rate of perceived exertion
        warmup: Allow RPE below 1

    Returns:
        Metabolic load units
    """
    intensity = validate_load_intensity(intensity_pct)
    whole_reps = validate_whole_reps(reps)
    rir = max(0.0, MAX_RPE - clamp_rpe(rpe, warmup=warmup))

    load = 0.0
    for i in range(1, whole_reps + 1):
        load += math.exp(-FREDERICK_DECAY * (rir + whole_reps - i))
    return intensity * load


def compute_session_metabolic_load(sets: Iterable[SetLoad]) -> float:
    """Frederick total with constant prescribed RPE (no within-session fatigue)."""
    return sum(compute_set_metabolic_load(s.intensity_pct, s.reps, s.rpe) for s in sets)


def effective_rpe(
    set_index: int,
    prescribed_rpe: float,
    drift_per_set: float = RPE_DRIFT_PER_SET,
) -> float:
    """
    Effective RPE for a 0-based set index.

    RPE_eff = clamp(prescribed + drift * index, 1, 10)
    """
    if set_index < 0:
        raise ValidationError(f"set_index must be non-negative, got {set_index}")
    return clamp_rpe(prescribed_rpe + drift_per_set * set_index)


def compute_session_metabolic_load_with_drift(
    sets: Sequence[SetLoad],
    drift_per_set: float = RPE_DRIFT_PER_SET,
) -> MetabolicBreakdown:
    """
    Frederick total with effective-RPE drift across the session.

    Later sets at the same load feel harder: set ``k`` (0-based) is scored
    at RPE + drift * k.  This is a calibration heuristic layered on top of
    the base formula; the constant-RPE total is
    :func:`compute_session_metabolic_load`.
    """
    per_set: list[float] = []
    rpes: list[float] = []
    for index, s in enumerate(sets):
        rpe = effective_rpe(index, s.rpe, drift_per_set)
        rpes.append(rpe)
        per_set.append(compute_set_metabolic_load(s.intensity_pct, s.reps, rpe))
    return MetabolicBreakdown(
        total_load=sum(per_set),
        per_set_loads=tuple(per_set),
        effective_rpes=tuple(rpes),
    )


# =============================================================================
# EPLEY / PEAK FORCE
# =============================================================================


def max_reps_at_intensity(intensity_pct: float) -> float:
    """
    Epley-estimated reps to failure at an intensity.

    maxReps = 30 * (100 / I - 1)
    """
    intensity = validate_positive_intensity(intensity_pct)
    return EPLEY_REP_FACTOR * (100.0 / intensity - 1.0)


def peak_force_quality_ratio(intensity_pct: float) -> float:
    """
    Fraction of max reps performed before peak force falls below 95%.

    ratio = 0.30 + 0.30 * (max(0, (90 - I) / 30))^0.7
    """
    intensity = validate_load_intensity(intensity_pct)
    normalised = max(0.0, (QUALITY_RATIO_PIVOT - intensity) / QUALITY_RATIO_WIDTH)
    return QUALITY_RATIO_BASE + QUALITY_RATIO_SPAN * normalised ** QUALITY_RATIO_EXPONENT


def estimate_peak_force_drop_rep(intensity_pct: float) -> int:
    """
    Last rep of a set still at >= 95% of first-rep peak force.

    dropRep = round(maxReps(I) * qualityRatio(I)), at least 1.  Above 90%
    force drops after the first rep.  Intensities below 30% are treated
    as 30%.

    Args:
        intensity_pct: %1RM, 0 < I <= 100

    Returns:
        Quality reps per set (>= 1)
    """
    intensity = validate_positive_intensity(intensity_pct)
    intensity = max(PEAK_FORCE_MIN_INTENSITY, intensity)
    if intensity > PEAK_FORCE_SINGLE_REP_ABOVE:
        return 1
    drop = max_reps_at_intensity(intensity) * peak_force_quality_ratio(intensity)
    return max(1, round_half_up(drop))


def peak_force_table() -> list[dict[str, float]]:
    """Reference rows of the peak-force heuristic for common intensities."""
    rows = []
    for pct in PEAK_FORCE_TABLE_INTENSITIES:
        max_reps = max_reps_at_intensity(pct)
        drop = estimate_peak_force_drop_rep(pct)
        rows.append({
            "intensity": pct,
            "max_reps": round_half_up(max_reps),
            "drop_rep": drop,
            "quality_pct": round_half_up(drop / max_reps * 100),
            "multiplier": round(fatigue_multiplier(pct), 1),
        })
    return rows


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """
    Epley 1RM estimate: weight * (1 + reps / 30).

    Returns 0 for non-positive input; a single is its own 1RM.
    """
    if weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / EPLEY_REP_FACTOR)


def intensity_for_rpe(reps: int, target_rpe: float) -> int:
    """%1RM that makes ``reps`` land at ``target_rpe`` (Epley inverse), rounded."""
    rir = max(0.0, MAX_RPE - target_rpe)
    effective_max = reps + rir
    return round_half_up(100.0 / (1 + effective_max / EPLEY_REP_FACTOR))


def rpe_at_intensity(reps: int, intensity_pct: float) -> float:
    """Epley-consistent RPE for ``reps`` at ``intensity_pct``, one decimal."""
    if intensity_pct >= 100:
        return MAX_RPE
    rir = max(0.0, max_reps_at_intensity(intensity_pct) - reps)
    rpe = MAX_RPE - rir
    return min(MAX_RPE, max(1.0, round_half_up(rpe * 10) / 10))


# =============================================================================
# TONNAGE
# =============================================================================


def compute_tonnage(sets: int, reps: float, weight: float) -> float:
    """
    Mechanical work proxy: sets * reps * weight.

    Independent of either fatigue score.
    """
    validate_non_negative(sets, "sets")
    validate_reps(reps)
    validate_non_negative(weight, "weight")
    return sets * reps * weight


def completed_sets_tonnage(sets: Iterable[CompletedSet]) -> float:
    """Sum of reps * weight over logged sets."""
    return sum(max(0, s.reps or 0) * max(0.0, s.weight_lbs or 0.0) for s in sets)
