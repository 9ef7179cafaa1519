"""
Tests for fatigue zone classification.

Zone tables partition [0, inf) into [min, max) intervals; the Hanley and
Frederick tables are separate and never mixed.
"""

import math

import pytest

from lift_optimizer.core.models import FatigueZone
from lift_optimizer.core.validation import ValidationError
from lift_optimizer.core.zones import (
    HANLEY_ZONES,
    METABOLIC_ZONES,
    ZONE_ORDER,
    ZoneTable,
    bounds_of,
    classify_metabolic_zone,
    classify_zone,
    representative_score,
    zone_label,
)


class TestClassifyHanley:
    """Light <400, Moderate <500, Moderate-High <600, High <700, Extreme above."""

    @pytest.mark.parametrize(
        "score, zone",
        [
            (0, FatigueZone.LIGHT),
            (399.9, FatigueZone.LIGHT),
            (400, FatigueZone.MODERATE),
            (499.99, FatigueZone.MODERATE),
            (500, FatigueZone.MODERATE_HIGH),
            (600, FatigueZone.HIGH),
            (699.9, FatigueZone.HIGH),
            (700, FatigueZone.EXTREME),
            (1e9, FatigueZone.EXTREME),
        ],
    )
    def test_boundaries(self, score, zone):
        assert classify_zone(score) is zone

    def test_infinite_score_is_extreme(self):
        assert classify_zone(math.inf) is FatigueZone.EXTREME

    @pytest.mark.parametrize("score", [-0.01, -500, float("nan")])
    def test_invalid_score_raises(self, score):
        with pytest.raises(ValidationError):
            classify_zone(score)


class TestClassifyMetabolic:
    @pytest.mark.parametrize(
        "load, zone",
        [
            (499, FatigueZone.LIGHT),
            (500, FatigueZone.MODERATE),
            (650, FatigueZone.MODERATE_HIGH),
            (800, FatigueZone.HIGH),
            (1099.9, FatigueZone.HIGH),
            (1100, FatigueZone.EXTREME),
        ],
    )
    def test_boundaries(self, load, zone):
        assert classify_metabolic_zone(load) is zone

    def test_tables_are_not_mixed(self):
        # 450 is Moderate on the Hanley scale but Light on the Frederick scale
        assert classify_zone(450) is FatigueZone.MODERATE
        assert classify_metabolic_zone(450) is FatigueZone.LIGHT


class TestZoneTables:
    @pytest.mark.parametrize("table", [HANLEY_ZONES, METABOLIC_ZONES])
    def test_tables_tile_the_half_line(self, table):
        bounds = table.bounds()
        assert list(bounds) == list(ZONE_ORDER)
        ordered = [bounds[z] for z in ZONE_ORDER]
        assert ordered[0].min == 0
        assert ordered[-1].is_unbounded
        for lower, upper in zip(ordered, ordered[1:]):
            assert lower.max == upper.min
            assert lower.min < lower.max

    @pytest.mark.parametrize("table", [HANLEY_ZONES, METABOLIC_ZONES])
    def test_every_score_in_its_own_bounds(self, table):
        for score in range(0, 1500, 7):
            zone = classify_zone(score, table)
            assert bounds_of(zone, table).contains(score)

    def test_rejects_wrong_threshold_count(self):
        with pytest.raises(ValueError):
            ZoneTable("bad", (100.0, 200.0))

    def test_rejects_non_increasing_thresholds(self):
        with pytest.raises(ValueError):
            ZoneTable("bad", (100.0, 300.0, 200.0, 400.0))


class TestRepresentativeScore:
    def test_bounded_zone_midpoint(self):
        assert representative_score(FatigueZone.LIGHT) == pytest.approx(200.0)
        assert representative_score(FatigueZone.MODERATE) == pytest.approx(450.0)

    def test_top_zone_uses_cap(self):
        # (700 + 1000) / 2
        assert representative_score(FatigueZone.EXTREME) == pytest.approx(850.0)

    def test_representative_lies_in_zone(self):
        for zone in ZONE_ORDER:
            assert classify_zone(representative_score(zone)) is zone

    def test_accepts_zone_value(self):
        assert representative_score("moderate-high") == pytest.approx(550.0)


def test_zone_labels():
    assert zone_label(FatigueZone.MODERATE_HIGH) == "Moderate-High"
    assert [zone_label(z) for z in ZONE_ORDER][0] == "Light"
