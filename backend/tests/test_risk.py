"""
Tests for the Risk Classifier.
"""
from dataclasses import replace

import pytest

from risk import (
    DEFAULT_SCALE,
    LEGACY_4X4,
    STANDARD_5X5,
    TIER_COLORS,
    RiskBand,
    RiskTier,
    classify,
    coerce_score,
    get_scale,
    tier_for_level,
    validate_scale,
)


class TestBands:

    @pytest.mark.parametrize("scale", [STANDARD_5X5, LEGACY_4X4])
    def test_scales_are_valid(self, scale):
        is_valid, problems = validate_scale(scale)
        assert is_valid, problems
        assert problems == []

    @pytest.mark.parametrize("scale", [STANDARD_5X5, LEGACY_4X4])
    def test_every_score_in_exactly_one_band(self, scale):
        for score in range(scale.min_score, scale.max_score + 1):
            matches = [band for band in scale.bands if band.contains(score)]
            assert len(matches) == 1, score

    def test_default_bands(self):
        assert DEFAULT_SCALE is STANDARD_5X5
        assert classify(4).tier == RiskTier.LOW
        assert classify(5).tier == RiskTier.MEDIUM
        assert classify(9).tier == RiskTier.MEDIUM
        assert classify(10).tier == RiskTier.HIGH
        assert classify(14).tier == RiskTier.HIGH
        assert classify(15).tier == RiskTier.EXTREME
        assert classify(25).tier == RiskTier.EXTREME

    def test_legacy_bands(self):
        assert classify(6, LEGACY_4X4).tier == RiskTier.LOW
        assert classify(7, LEGACY_4X4).tier == RiskTier.MEDIUM
        assert classify(11, LEGACY_4X4).tier == RiskTier.HIGH
        assert classify(14, LEGACY_4X4).tier == RiskTier.EXTREME

    def test_gap_between_bands_is_reported(self):
        broken = replace(STANDARD_5X5, bands=(
            RiskBand(RiskTier.LOW, 1, 4, ""),
            RiskBand(RiskTier.MEDIUM, 6, 9, ""),
            RiskBand(RiskTier.HIGH, 10, 14, ""),
            RiskBand(RiskTier.EXTREME, 15, 25, ""),
        ))
        is_valid, problems = validate_scale(broken)
        assert not is_valid
        assert any("Medium band starts at 6" in p for p in problems)

    def test_short_range_is_reported(self):
        broken = replace(STANDARD_5X5, max_score=30)
        is_valid, problems = validate_scale(broken)
        assert not is_valid
        assert any("expected 30" in p for p in problems)


class TestClassify:

    def test_extreme_and_low_scenario(self):
        initial = classify(16)
        residual = classify(4)
        assert initial.label == "Extreme (16)"
        assert initial.color == TIER_COLORS[RiskTier.EXTREME] == "#DC2626"
        assert residual.label == "Low (4)"
        assert residual.color == TIER_COLORS[RiskTier.LOW] == "#16A34A"

    def test_scenario_holds_on_legacy_scale(self):
        assert classify(16, LEGACY_4X4).label == "Extreme (16)"
        assert classify(4, LEGACY_4X4).label == "Low (4)"

    def test_deterministic_and_idempotent(self):
        for score in range(-3, 30):
            first = classify(score)
            assert classify(score) == first
            again = classify(first.score)
            assert again.tier == first.tier
            assert again.score == first.score
            assert not again.clamped

    def test_out_of_range_clamps(self):
        low = classify(0)
        high = classify(99)
        assert (low.score, low.tier, low.clamped) == (1, RiskTier.LOW, True)
        assert (high.score, high.tier, high.clamped) == (25, RiskTier.EXTREME, True)

    def test_non_numeric_fails_safe_to_top_band(self):
        result = classify("unknown")
        assert result.tier == RiskTier.EXTREME
        assert result.score == 25
        assert result.clamped
        assert result.raw == "unknown"

    def test_numeric_strings_and_floats(self):
        assert classify("12").tier == RiskTier.HIGH
        assert not classify("12").clamped
        assert classify(9.6).score == 10
        assert classify(" 3 ").label == "Low (3)"

    def test_medium_uses_dark_text(self):
        assert classify(6).text_color != "#FFFFFF"
        assert classify(20).text_color == "#FFFFFF"


class TestCoerceScore:

    @pytest.mark.parametrize("value,expected", [
        (7, 7),
        (7.4, 7),
        (4.5, 5),
        (5.5, 6),
        ("2.5", 3),
        ("8", 8),
        ("8.0", 8),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        ([3], None),
    ])
    def test_coerce(self, value, expected):
        assert coerce_score(value) == expected


class TestMatrix:

    def test_standard_grid_is_likelihood_times_consequence(self):
        assert STANDARD_5X5.grid[0] == (5, 10, 15, 20, 25)
        assert STANDARD_5X5.grid[-1] == (1, 2, 3, 4, 5)

    @pytest.mark.parametrize("scale", [STANDARD_5X5, LEGACY_4X4])
    def test_matrix_cells_share_badge_colours(self, scale):
        for row, col, result in scale.cells():
            assert result.score == scale.grid[row][col]
            assert result.color == TIER_COLORS[result.tier]
            assert result.color == classify(result.score, scale).color


class TestLookups:

    def test_get_scale(self):
        assert get_scale(None) is DEFAULT_SCALE
        assert get_scale("4X4") is LEGACY_4X4
        assert get_scale("5x5") is STANDARD_5X5

    def test_unknown_scale(self):
        with pytest.raises(ValueError, match="Unknown risk scale"):
            get_scale("3x3")

    @pytest.mark.parametrize("level,tier", [
        ("Low", RiskTier.LOW),
        ("medium", RiskTier.MEDIUM),
        (" HIGH ", RiskTier.HIGH),
        ("Severe", RiskTier.EXTREME),
        ("extreme", RiskTier.EXTREME),
    ])
    def test_tier_for_level(self, level, tier):
        assert tier_for_level(level) == tier

    def test_tier_for_unknown_level(self):
        assert tier_for_level("catastrophic") is None
        assert tier_for_level(3) is None
