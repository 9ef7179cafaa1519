"""
Set division planning.

Turns a fatigue target into concrete work for one exercise:

1. Reverse prescription: Hanley zone + intensity → total reps.
2. Division of the total into sets, with two policies:
   - hypertrophy: search a small set of set counts for moderate reps/set
   - strength/power: cap reps/set at the peak-force drop rep
3. Metabolic set structures for hypertrophy-like sessions (Frederick gated):
   tapered sets and the cluster-taper hybrid.
"""

import math

from .config import (
    CLUSTER_FORCE_SETS_OPTIONS,
    CLUSTER_INTENSITY_BAND,
    CLUSTER_METABOLIC_REPS_OPTIONS,
    CLUSTER_METABOLIC_REST,
    CLUSTER_MIN_METABOLIC_RPE,
    HYPERTROPHY_REPS_PER_SET,
    MAX_DIVISION_SUGGESTIONS,
    MAX_INTENSITY_PCT,
    PRACTICAL_REPS_PER_SET,
    SET_COUNT_CANDIDATES,
    STRENGTH_REST_DEFAULT,
    STRENGTH_REST_TIERS,
    TAPER_LEAD_INTENSITY_BAND,
    TAPER_LEAD_REPS_OPTIONS,
    TAPER_LEAD_RPE_OPTIONS,
    TAPER_LEAD_SETS_OPTIONS,
    TAPER_MAX_REP_MISS,
    TAPER_MIN_REMAINING_REPS,
    TAPER_REPS_OPTIONS,
    TAPERED_FREDERICK_GATE,
    ZONE_SEARCH_CAP,
)
from .fatigue import (
    compute_session_metabolic_load_with_drift,
    compute_set_metabolic_load,
    estimate_peak_force_drop_rep,
    fatigue_multiplier,
    intensity_for_rpe,
    reverse_compute_reps,
    round_half_up,
    rpe_at_intensity,
)
from .models import (
    ClusterTaperPrescription,
    FatigueZone,
    MetabolicSetRange,
    RepTarget,
    SetBlock,
    SetDivision,
    SetLoad,
    StrengthDivision,
    TaperedPrescription,
)
from .validation import (
    ValidationError,
    validate_load_intensity,
    validate_positive_intensity,
    validate_reps,
)
from .zones import HANLEY_ZONES, ZoneTable, bounds_of, representative_score


# =============================================================================
# REVERSE PRESCRIPTION
# =============================================================================


def reverse_prescribe_reps(
    intensity_pct: float,
    zone: FatigueZone,
    table: ZoneTable = HANLEY_ZONES,
) -> RepTarget:
    """
    Total reps for one exercise that land its Hanley score in ``zone``.

    The representative target is the zone midpoint; ``min_reps`` is the
    fewest reps reaching the zone floor and ``max_reps`` the most reps
    staying below its ceiling.  Intensity is clamped to 99%.

    Args:
        intensity_pct: %1RM (0..100)
        zone: Target fatigue zone

    Returns:
        RepTarget with all rep counts >= 1
    """
    intensity = min(validate_load_intensity(intensity_pct), MAX_INTENSITY_PCT)
    zone = FatigueZone(zone)
    bounds = bounds_of(zone, table)
    target = representative_score(zone, table)

    target_reps = max(1, round_half_up(reverse_compute_reps(target, intensity)))
    min_reps = max(1, math.ceil(reverse_compute_reps(bounds.min or 1, intensity)))
    ceiling = min(bounds.max, ZONE_SEARCH_CAP)
    max_reps = max(min_reps, math.ceil(reverse_compute_reps(ceiling, intensity)) - 1)

    return RepTarget(
        intensity_pct=intensity,
        zone=zone,
        target_score=target,
        multiplier=fatigue_multiplier(intensity),
        target_reps=target_reps,
        min_reps=min_reps,
        max_reps=max_reps,
    )


# =============================================================================
# HYPERTROPHY DIVISION
# =============================================================================


def suggest_set_divisions(
    total_reps: float,
    candidates: tuple[int, ...] = SET_COUNT_CANDIDATES,
    rep_range: tuple[int, int] = PRACTICAL_REPS_PER_SET,
    preferred: tuple[int, int] = HYPERTROPHY_REPS_PER_SET,
    limit: int = MAX_DIVISION_SUGGESTIONS,
) -> list[SetDivision]:
    """
    Candidate sets x reps splits of a rep total.

    A set count is accepted when total / sets falls in ``rep_range``.
    Accepted splits are ranked: reps/set inside ``preferred`` first, then
    exact splits, then closeness to the preferred centre, then fewer sets.

    Returns:
        Up to ``limit`` divisions; empty for a non-positive total
    """
    if total_reps <= 0:
        return []
    total = validate_reps(total_reps, "total_reps")

    low, high = rep_range
    pref_low, pref_high = preferred
    centre = (pref_low + pref_high) / 2

    divisions: list[SetDivision] = []
    for sets in candidates:
        if sets <= 0:
            continue
        per_set = total / sets
        if not low <= per_set <= high:
            continue
        reps = round_half_up(per_set)
        if reps < 1:
            continue
        divisions.append(SetDivision(
            sets=sets,
            reps_per_set=reps,
            total_reps=sets * reps,
            exact=sets * reps == total,
        ))

    divisions.sort(key=lambda d: (
        not pref_low <= d.reps_per_set <= pref_high,
        not d.exact,
        abs(d.reps_per_set - centre),
        d.sets,
    ))
    return divisions[:limit]


def prescribe_hypertrophy_sets(
    intensity_pct: float,
    reps: int,
    rpe: float,
    target_min: float,
    target_max: float,
) -> MetabolicSetRange:
    """
    Sets per exercise that put the Frederick total inside [target_min, target_max].

    min_sets = ceil(target_min / per_set), max_sets = floor(target_max / per_set)
    """
    per_set = compute_set_metabolic_load(intensity_pct, reps, rpe)
    if per_set <= 0:
        return MetabolicSetRange(min_sets=3, max_sets=4, per_set_load=0.0)
    min_sets = max(1, math.ceil(target_min / per_set))
    max_sets = max(min_sets, math.floor(target_max / per_set))
    return MetabolicSetRange(min_sets=min_sets, max_sets=max_sets, per_set_load=per_set)


# =============================================================================
# STRENGTH / POWER DIVISION
# =============================================================================


def strength_rest_seconds(intensity_pct: float) -> int:
    """Rest for full neural recovery; depends on intensity only."""
    for floor, rest in STRENGTH_REST_TIERS:
        if intensity_pct >= floor:
            return rest
    return STRENGTH_REST_DEFAULT


def prescribe_strength_sets(total_reps: float, intensity_pct: float) -> StrengthDivision:
    """
    Split a rep total into sets capped at the peak-force drop rep.

    Every set is a full set of ``drop_rep`` quality reps, so
    ``quality_reps = sets * reps_per_set`` may overshoot the request
    (``rep_delta`` > 0).  A non-positive total yields a zero-set division.

    Args:
        total_reps: Hanley-prescribed total reps
        intensity_pct: %1RM, 0 < I <= 100

    Returns:
        StrengthDivision
    """
    intensity = validate_positive_intensity(intensity_pct)
    if math.isnan(total_reps):
        raise ValidationError("total_reps must be a number")
    if total_reps <= 0:
        return StrengthDivision(
            sets=0, reps_per_set=0, quality_reps=0, rest_seconds=0, requested_reps=total_reps
        )

    reps_per_set = estimate_peak_force_drop_rep(intensity)
    sets = max(1, math.ceil(total_reps / reps_per_set))
    return StrengthDivision(
        sets=sets,
        reps_per_set=reps_per_set,
        quality_reps=sets * reps_per_set,
        rest_seconds=strength_rest_seconds(intensity),
        requested_reps=total_reps,
    )


# =============================================================================
# METABOLIC SET STRUCTURES
# =============================================================================


def _drift_total(intensity_pct: float, blocks: list[tuple[int, int, float]]) -> float:
    sets = [
        SetLoad(intensity_pct=intensity_pct, reps=reps, rpe=rpe)
        for count, reps, rpe in blocks
        for _ in range(count)
    ]
    return compute_session_metabolic_load_with_drift(sets).total_load


def prescribe_tapered_sets(target_reps: int) -> TaperedPrescription | None:
    """
    Lead sets near failure, then taper sets with fewer reps at the same weight.

    Lead intensity comes from Epley for the lead reps at the lead RPE; the
    taper RPE is whatever Epley gives for fewer reps at that weight.  The
    first combination that reaches ``target_reps`` (within 10) and keeps
    the Frederick total under the gate wins.

    Returns:
        TaperedPrescription, or None if no combination fits
    """
    low, high = TAPER_LEAD_INTENSITY_BAND
    for lead_rpe in TAPER_LEAD_RPE_OPTIONS:
        for lead_reps in TAPER_LEAD_REPS_OPTIONS:
            intensity = intensity_for_rpe(lead_reps, lead_rpe)
            if intensity < low or intensity > high:
                continue
            lead_load = compute_set_metabolic_load(intensity, lead_reps, lead_rpe)

            for lead_sets in TAPER_LEAD_SETS_OPTIONS:
                lead_total = lead_sets * lead_reps
                remaining = target_reps - lead_total
                if remaining < TAPER_MIN_REMAINING_REPS:
                    continue

                for taper_reps in TAPER_REPS_OPTIONS:
                    if taper_reps >= lead_reps:
                        continue
                    taper_sets = max(1, round_half_up(remaining / taper_reps))
                    total = lead_total + taper_sets * taper_reps
                    if abs(total - target_reps) > TAPER_MAX_REP_MISS:
                        continue

                    taper_rpe = rpe_at_intensity(taper_reps, intensity)
                    taper_load = compute_set_metabolic_load(intensity, taper_reps, taper_rpe)
                    frederick = lead_sets * lead_load + taper_sets * taper_load
                    if frederick > TAPERED_FREDERICK_GATE:
                        continue

                    return TaperedPrescription(
                        lead_sets=lead_sets,
                        lead_reps=lead_reps,
                        lead_rpe=lead_rpe,
                        lead_intensity_pct=intensity,
                        taper_sets=taper_sets,
                        taper_reps=taper_reps,
                        taper_rpe=taper_rpe,
                        total_reps=total,
                        total_frederick_load=round(frederick, 2),
                        total_frederick_with_drift=round(_drift_total(intensity, [
                            (lead_sets, lead_reps, lead_rpe),
                            (taper_sets, taper_reps, taper_rpe),
                        ]), 2),
                        description=(
                            f"{lead_sets}x{lead_reps} @ RPE {lead_rpe:g} ({intensity}%), "
                            f"then {taper_sets}x{taper_reps} @ RPE {taper_rpe:g} (same weight)"
                        ),
                    )
    return None


def prescribe_cluster_taper_sets(
    target_reps: int,
    intensity_min: float,
    intensity_max: float,
) -> ClusterTaperPrescription | None:
    """
    Force block capped at the drop rep, then a metabolic block past it.

    Only viable between 68% and 78% 1RM, intersected with the supplied
    band; candidate intensities are tried from the centre of the band
    outwards.

    Returns:
        ClusterTaperPrescription, or None if the band misses the hybrid zone
        or no combination fits under the Frederick gate
    """
    lo = max(CLUSTER_INTENSITY_BAND[0], math.ceil(intensity_min))
    hi = min(CLUSTER_INTENSITY_BAND[1], math.floor(intensity_max))
    if lo > hi:
        return None

    mid = (lo + hi) / 2
    intensities = sorted(range(lo, hi + 1), key=lambda i: abs(i - mid))

    for intensity in intensities:
        force_reps = estimate_peak_force_drop_rep(intensity)
        for force_sets in CLUSTER_FORCE_SETS_OPTIONS:
            force_total = force_sets * force_reps
            remaining = target_reps - force_total
            if remaining < TAPER_MIN_REMAINING_REPS:
                continue

            for metab_reps in CLUSTER_METABOLIC_REPS_OPTIONS:
                if metab_reps <= force_reps:
                    continue
                metab_sets = max(1, round_half_up(remaining / metab_reps))
                total = force_total + metab_sets * metab_reps
                if abs(total - target_reps) > TAPER_MAX_REP_MISS:
                    continue

                force_rpe = rpe_at_intensity(force_reps, intensity)
                metab_rpe = rpe_at_intensity(metab_reps, intensity)
                if metab_rpe < CLUSTER_MIN_METABOLIC_RPE:
                    continue

                frederick = (
                    force_sets * compute_set_metabolic_load(intensity, force_reps, force_rpe)
                    + metab_sets * compute_set_metabolic_load(intensity, metab_reps, metab_rpe)
                )
                if frederick > TAPERED_FREDERICK_GATE:
                    continue

                force_rest = 180 if intensity >= 74 else 150
                return ClusterTaperPrescription(
                    force_block=SetBlock(sets=force_sets, reps=force_reps, rpe=force_rpe),
                    metabolic_block=SetBlock(sets=metab_sets, reps=metab_reps, rpe=metab_rpe),
                    intensity_pct=intensity,
                    force_rest_seconds=force_rest,
                    metabolic_rest_seconds=CLUSTER_METABOLIC_REST,
                    total_reps=total,
                    total_frederick_load=round(frederick, 2),
                    total_frederick_with_drift=round(_drift_total(intensity, [
                        (force_sets, force_reps, force_rpe),
                        (metab_sets, metab_reps, metab_rpe),
                    ]), 2),
                    description=(
                        f"Force: {force_sets}x{force_reps} @ RPE {force_rpe:g}, "
                        f"Metabolic: {metab_sets}x{metab_reps} @ RPE {metab_rpe:g} "
                        f"(all @ {intensity}% 1RM, same weight)"
                    ),
                )
    return None
