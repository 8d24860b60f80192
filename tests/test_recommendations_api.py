"""HTTP tests for /api/recommendations."""
import pytest

from soil_health.main import app
from soil_health.routers.recommendations import get_recommendation_service

WHEAT_REQUEST = {"crop": "wheat", "nitrogen": 250, "phosphorus": 15, "potassium": 180, "ph": 7.2}


class TestCalculate:

    def test_worked_example(self, client):
        response = client.post("/api/recommendations/calculate", json=WHEAT_REQUEST)
        assert response.status_code == 200
        body = response.json()
        assert body["nitrogenStatus"] == "Low"
        assert body["ureaDose"] == 0.0
        assert body["dapDose"] == 114.1
        assert body["mopDose"] == 0.0
        assert body["sspDose"] == 328.1
        assert body["schedule"]["firstTopdress"] == "30-35 days after sowing"
        assert body["tips"][-1] == "Conduct soil testing every 2-3 years for best results"
        assert "limeRequired" not in body
        assert "limeDose" not in body

    @pytest.mark.parametrize("ph,lime", [(5.0, 2000.0), (5.7, 1000.0)])
    def test_lime_for_acidic_soil(self, client, ph, lime):
        response = client.post("/api/recommendations/calculate", json={**WHEAT_REQUEST, "ph": ph})
        body = response.json()
        assert body["limeRequired"] is True
        assert body["limeDose"] == lime

    @pytest.mark.parametrize("payload", [{}, {"crop": ""}, {"crop": "  ", "nitrogen": 100}])
    def test_missing_crop_is_400(self, client, payload):
        response = client.post("/api/recommendations/calculate", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Crop selection is required"}

    @pytest.mark.parametrize("field,value", [("nitrogen", -1), ("potassium", -0.5), ("ph", 14.5), ("ph", -1)])
    def test_out_of_range_inputs_rejected(self, client, field, value):
        response = client.post("/api/recommendations/calculate", json={**WHEAT_REQUEST, field: value})
        assert response.status_code == 422

    def test_missing_readings_use_district_history(self, client):
        response = client.post("/api/recommendations/calculate", json={
            "crop": "Wheat", "district": "Delhi", "state": "Delhi",
        })
        body = response.json()
        # Delhi: N=110 (Low), P=18, K=140
        assert body["nitrogenStatus"] == "Low"
        assert body["ureaDose"] == 141.3
        assert body["dapDose"] == 110.9
        assert body["mopDose"] == 0.0

    def test_unknown_district_uses_defaults(self, client):
        response = client.post("/api/recommendations/calculate", json={
            "crop": "maize", "district": "Nowhere", "state": "Delhi",
        })
        body = response.json()
        assert (body["nitrogenStatus"], body["phosphorusStatus"], body["potassiumStatus"]) == ("Low", "Medium", "Medium")

    def test_unexpected_failure_is_500(self, client):
        class BrokenService:
            def calculate(self, request):
                raise RuntimeError("boom")

        app.dependency_overrides[get_recommendation_service] = lambda: BrokenService()
        response = client.post("/api/recommendations/calculate", json=WHEAT_REQUEST)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to calculate recommendations"}


class TestCrops:

    def test_ordered_by_type_then_name(self, client):
        crops = client.get("/api/recommendations/crops").json()
        assert len(crops) == 10
        assert [c["name"] for c in crops[:2]] == ["Cotton", "Sugarcane"]
        wheat = next(c for c in crops if c["name"] == "Wheat")
        assert wheat["nRange"] == "280.0-560.0"
        assert wheat["phRange"] == "6.0-7.5"
        assert wheat["waterRequirement"] == "Medium"


class TestSavedRecommendations:

    def test_save_requires_auth(self, client):
        response = client.post("/api/recommendations/save", json=WHEAT_REQUEST)
        assert response.status_code == 401

    def test_save_list_get_delete(self, client, auth_headers):
        headers = auth_headers()
        saved = client.post(
            "/api/recommendations/save",
            json={**WHEAT_REQUEST, "district": "Ludhiana", "state": "Punjab", "notes": "North field"},
            headers=headers,
        )
        assert saved.status_code == 201
        rec_id = saved.json()["id"]

        listing = client.get("/api/recommendations/saved", headers=headers).json()
        assert listing["total"] == 1
        assert listing["items"][0]["cropName"] == "wheat"
        assert listing["items"][0]["dapDose"] == 114.1

        detail = client.get(f"/api/recommendations/saved/{rec_id}", headers=headers).json()
        assert detail["notes"] == "North field"
        assert detail["results"]["sspDose"] == 328.1
        assert detail["inputData"]["crop"] == "wheat"

        assert client.delete(f"/api/recommendations/saved/{rec_id}", headers=headers).status_code == 204
        assert client.get(f"/api/recommendations/saved/{rec_id}", headers=headers).status_code == 404

    def test_save_with_blank_crop_is_400(self, client, auth_headers):
        response = client.post("/api/recommendations/save", json={"crop": ""}, headers=auth_headers())
        assert response.status_code == 400

    def test_other_farmers_cannot_read(self, client, auth_headers):
        owner = auth_headers("owner")
        rec_id = client.post("/api/recommendations/save", json=WHEAT_REQUEST, headers=owner).json()["id"]

        intruder = auth_headers("intruder")
        assert client.get(f"/api/recommendations/saved/{rec_id}", headers=intruder).status_code == 404
        assert client.delete(f"/api/recommendations/saved/{rec_id}", headers=intruder).status_code == 404

    def test_pdf_download(self, client, auth_headers):
        headers = auth_headers()
        rec_id = client.post(
            "/api/recommendations/save",
            json={**WHEAT_REQUEST, "ph": 5.2, "notes": "N < P & K"},
            headers=headers,
        ).json()["id"]

        response = client.get(f"/api/recommendations/saved/{rec_id}/pdf", headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
