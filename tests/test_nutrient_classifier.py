"""
Tests for nutrient band classification.

The lower band owns its upper edge, so each threshold value itself
belongs to the band below the next one up.
"""
import pytest

from soil_health.services.nutrient_classifier import NutrientBand, NutrientKind, classify


class TestClassifyBoundaries:

    @pytest.mark.parametrize("value,band", [
        (0.0, NutrientBand.LOW),
        (279.9, NutrientBand.LOW),
        (280.0, NutrientBand.MEDIUM),
        (560.0, NutrientBand.MEDIUM),
        (560.1, NutrientBand.HIGH),
    ])
    def test_nitrogen(self, value, band):
        assert classify(value, "N") == band

    @pytest.mark.parametrize("value,band", [
        (9.9, NutrientBand.LOW),
        (10.0, NutrientBand.MEDIUM),
        (25.0, NutrientBand.MEDIUM),
        (25.1, NutrientBand.HIGH),
    ])
    def test_phosphorus(self, value, band):
        assert classify(value, "P") == band

    @pytest.mark.parametrize("value,band", [
        (109.9, NutrientBand.LOW),
        (110.0, NutrientBand.MEDIUM),
        (280.0, NutrientBand.MEDIUM),
        (280.1, NutrientBand.HIGH),
    ])
    def test_potassium(self, value, band):
        assert classify(value, "K") == band


class TestClassifyInputs:

    def test_accepts_enum_kind(self):
        assert classify(300.0, NutrientKind.N) == NutrientBand.MEDIUM

    def test_band_values_are_wire_strings(self):
        assert [b.value for b in NutrientBand] == ["Low", "Medium", "High"]

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            classify(10.0, "S")
