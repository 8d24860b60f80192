"""
Tests for the recommendation orchestrator.

The estimator is a plain callable here so the resolver can be exercised
without a database.
"""
import pytest

from soil_health.core.exceptions import DatastoreUnavailable, RecommendationValidationError
from soil_health.services.recommendation_service import (
    RecommendationInput,
    RecommendationService,
    resolve_nutrient,
)


def district_estimator(values):
    calls = []

    def estimate(district, state, kind):
        calls.append((district, state, kind))
        return values.get(kind)

    estimate.calls = calls
    return estimate


def failing_estimator(district, state, kind):
    raise DatastoreUnavailable("connection refused")


class TestResolveNutrient:

    def test_request_value_wins(self):
        resolved = resolve_nutrient("N", 320.0, lambda kind: 100.0)
        assert (resolved.value, resolved.source) == (320.0, "request")

    def test_zero_is_a_real_reading(self):
        resolved = resolve_nutrient("P", 0.0, lambda kind: 18.0)
        assert (resolved.value, resolved.source) == (0.0, "request")

    def test_district_average_when_missing(self):
        resolved = resolve_nutrient("K", None, lambda kind: 140.0)
        assert (resolved.value, resolved.source) == (140.0, "district")

    def test_global_default_when_no_history(self):
        assert resolve_nutrient("N", None, lambda kind: None).value == 250.0
        assert resolve_nutrient("P", None, lambda kind: None).value == 15.0
        assert resolve_nutrient("K", None, lambda kind: None).source == "default"

    def test_datastore_failure_falls_back_to_default(self):
        def broken(kind):
            raise DatastoreUnavailable("timeout")

        resolved = resolve_nutrient("K", None, broken)
        assert (resolved.value, resolved.source) == (150.0, "default")


class TestRecommendationService:

    def test_worked_example(self):
        service = RecommendationService()
        result = service.calculate(RecommendationInput(
            crop="wheat", nitrogen=250, phosphorus=15, potassium=180, ph=7.2,
        ))
        response = result.to_response()
        assert response["nitrogenStatus"] == "Low"
        assert response["phosphorusStatus"] == "Medium"
        assert response["potassiumStatus"] == "Medium"
        assert (response["ureaDose"], response["dapDose"], response["mopDose"], response["sspDose"]) == (
            0.0, 114.1, 0.0, 328.1,
        )
        assert "limeRequired" not in response
        assert "limeDose" not in response

    def test_acidic_soil_adds_lime(self):
        result = RecommendationService().calculate(RecommendationInput(crop="rice", ph=5.2))
        response = result.to_response()
        assert response["limeRequired"] is True
        assert response["limeDose"] == 2000.0

    @pytest.mark.parametrize("crop", [None, "", "   "])
    def test_missing_crop_rejected_before_lookup(self, crop):
        estimator = district_estimator({"N": 100.0})
        service = RecommendationService(estimator=estimator)
        with pytest.raises(RecommendationValidationError) as exc:
            service.calculate(RecommendationInput(crop=crop, district="Pune", state="Maharashtra"))
        assert exc.value.message == "Crop selection is required"
        assert estimator.calls == []

    def test_district_values_fill_gaps(self):
        estimator = district_estimator({"N": 110.0, "P": 18.0, "K": 140.0})
        service = RecommendationService(estimator=estimator)
        result = service.calculate(RecommendationInput(
            crop="wheat", potassium=300.0, district="Delhi", state="Delhi",
        ))
        assert result.readings["N"].source == "district"
        assert result.readings["K"].source == "request"
        assert estimator.calls == [("Delhi", "Delhi", "N"), ("Delhi", "Delhi", "P")]
        assert result.nitrogen_status.value == "Low"
        assert result.dose.urea_kg == 141.3

    def test_datastore_outage_still_recommends(self):
        result = RecommendationService(estimator=failing_estimator).calculate(
            RecommendationInput(crop="maize", district="Pune", state="Maharashtra")
        )
        assert {r.source for r in result.readings.values()} == {"default"}
        assert result.to_response()["nitrogenStatus"] == "Low"

    def test_unknown_crop_uses_default_requirement(self):
        result = RecommendationService().calculate(RecommendationInput(
            crop="Dragonfruit", nitrogen=0, phosphorus=0, potassium=0,
        ))
        assert result.requirement.nitrogen_target == 100.0
        assert result.schedule.first_topdress == "30 days after sowing/planting"

    def test_crop_name_is_case_insensitive(self):
        service = RecommendationService()
        upper = service.calculate(RecommendationInput(crop="  WHEAT ", nitrogen=200, phosphorus=8, potassium=90))
        lower = service.calculate(RecommendationInput(crop="wheat", nitrogen=200, phosphorus=8, potassium=90))
        assert upper.to_response() == lower.to_response()

    def test_repeated_calls_are_identical(self):
        service = RecommendationService(estimator=district_estimator({"N": 420.0, "P": 24.0, "K": 260.0}))
        request = RecommendationInput(crop="cotton", district="Pune", state="Maharashtra", ph=5.8)
        assert service.calculate(request) == service.calculate(request)
