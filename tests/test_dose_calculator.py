"""
Tests for fertilizer dose calculation.

Covers the deficit formula, clamping at zero, half-up rounding and the
lime tiers.
"""
import pytest

from soil_health.services.crop_requirements import requirements_for
from soil_health.services.dose_calculator import (
    SoilReadings,
    calculate_lime_dose,
    compute_doses,
    lime_required,
    nutrient_deficit,
    round_half_up,
)


class TestDoseFormulas:

    def test_wheat_worked_example(self):
        """N=250, P=15, K=180 for wheat: only phosphorus is short."""
        dose = compute_doses(SoilReadings(250, 15, 180), requirements_for("wheat"), ph=7.2)
        assert dose.urea_kg == 0.0
        assert dose.dap_kg == 114.1
        assert dose.mop_kg == 0.0
        assert dose.ssp_kg == 328.1
        assert dose.lime_kg == 0.0

    def test_default_requirement_on_bare_soil(self):
        dose = compute_doses(SoilReadings(0, 0, 0), requirements_for("quinoa"))
        assert dose.urea_kg == 217.4
        assert dose.dap_kg == 108.7
        assert dose.mop_kg == 83.3
        assert dose.ssp_kg == 312.5

    def test_rich_soil_clamps_to_zero(self):
        dose = compute_doses(SoilReadings(900, 200, 600), requirements_for("sugarcane"))
        assert dose.to_dict() == {
            "urea_kg": 0.0, "dap_kg": 0.0, "mop_kg": 0.0, "ssp_kg": 0.0, "lime_kg": 0.0,
        }

    def test_half_of_soil_supply_counts(self):
        assert nutrient_deficit(100.0, 120.0) == 70.0
        assert nutrient_deficit(300.0, 120.0) == 0.0

    def test_ssp_and_dap_share_the_phosphorus_deficit(self):
        dose = compute_doses(SoilReadings(0, 0, 0), requirements_for("wheat"))
        # 60 kg P deficit: 60 / 0.46 and 60 / 0.16
        assert dose.dap_kg == 130.4
        assert dose.ssp_kg == 375.0

    def test_more_soil_supply_never_raises_a_dose(self):
        req = requirements_for("potato")
        poorer = compute_doses(SoilReadings(100, 10, 80), req)
        richer = compute_doses(SoilReadings(150, 20, 130), req)
        assert richer.urea_kg <= poorer.urea_kg
        assert richer.dap_kg <= poorer.dap_kg
        assert richer.mop_kg <= poorer.mop_kg
        assert richer.ssp_kg <= poorer.ssp_kg


class TestRounding:

    def test_half_goes_up(self):
        assert round_half_up(2.25) == 2.3
        assert round_half_up(114.13) == 114.1
        assert round_half_up(0.0) == 0.0


class TestLime:

    @pytest.mark.parametrize("ph,expected", [
        (4.8, 2000.0),
        (5.49, 2000.0),
        (5.5, 1000.0),
        (5.99, 1000.0),
        (6.0, 0.0),
        (7.5, 0.0),
        (None, 0.0),
    ])
    def test_lime_tiers_through_compute_doses(self, ph, expected):
        dose = compute_doses(SoilReadings(300, 20, 200), requirements_for("rice"), ph=ph)
        assert dose.lime_kg == expected

    def test_lime_required_gate(self):
        assert lime_required(5.9)
        assert not lime_required(6.0)
        assert not lime_required(None)

    def test_mild_tier_only_reachable_directly(self):
        assert calculate_lime_dose(6.5) == 500.0
