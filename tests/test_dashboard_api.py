"""HTTP tests for /api/dashboard and its exports."""
import csv
import io

from openpyxl import load_workbook

from soil_health.models.database_models import District, SoilHealthData
from soil_health.services.dashboard_service import CSV_HEADER


def add_previous_year(db, samples=10000):
    delhi = db.query(District).filter(District.name == "Delhi").one()
    db.add(SoilHealthData(
        district_id=delhi.id, district_name="Delhi", state_name="Delhi",
        nitrogen_avg=100.0, phosphorus_avg=12.0, potassium_avg=120.0,
        samples_analyzed=samples, measurement_year=2024, season="Rabi",
    ))
    db.commit()


class TestSummary:

    def test_metrics_for_latest_year(self, client):
        body = client.get("/api/dashboard/summary").json()
        assert body["year"] == 2025
        metrics = body["metrics"]
        assert metrics["districtsCovered"] == 7
        assert metrics["totalSamples"] == 155069
        assert metrics["avgSoilHealth"] == 5.4
        assert metrics["farmersBenefited"] == 387672.5
        assert metrics["districtsGrowth"] == 0.0
        assert metrics["samplesGrowth"] == 0.0

    def test_year_over_year_growth(self, client, db_session):
        add_previous_year(db_session)
        metrics = client.get("/api/dashboard/summary", params={"year": 2025}).json()["metrics"]
        assert metrics["districtsGrowth"] == 600.0
        assert metrics["samplesGrowth"] == 1450.7

    def test_npk_trends_by_year(self, client, db_session):
        add_previous_year(db_session)
        trends = client.get("/api/dashboard/summary").json()["npkTrends"]
        assert trends["labels"] == ["2024", "2025"]
        assert trends["nitrogen"] == [100.0, 335.0]

    def test_state_distribution_and_district_summary(self, client):
        body = client.get("/api/dashboard/summary").json()
        assert body["stateDistribution"][0]["state"] == "Maharashtra"
        assert body["stateDistribution"][0]["samples"] == 34890
        assert len(body["stateDistribution"]) == 7
        assert body["districtSummary"][0]["districtName"] == "Pune"
        assert body["districtSummary"][-1]["districtName"] == "Gurugram"

    def test_state_filter(self, client):
        metrics = client.get("/api/dashboard/summary", params={"state": "Punjab"}).json()["metrics"]
        assert metrics["districtsCovered"] == 1
        assert metrics["avgSoilHealth"] == 7.0

    def test_recent_activities(self, client, auth_headers):
        headers = auth_headers()
        client.post("/api/recommendations/save", json={
            "crop": "rice", "district": "Lucknow", "state": "Uttar Pradesh",
        }, headers=headers)

        activities = client.get("/api/dashboard/summary").json()["recentActivities"]
        assert len(activities) == 5
        assert activities[0]["type"] == "advisory"
        assert activities[0]["description"] == "rice recommendation for Lucknow, Uttar Pradesh"
        assert all(a["type"] == "map_update" for a in activities[1:])


class TestExports:

    def test_csv(self, client):
        response = client.get("/api/dashboard/export/csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="soil_health_data.csv"' in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 8
        assert rows[1][:8] == ["Pune", "Maharashtra", "34890", "Medium", "Medium", "Medium", "7.2", "0.65"]

    def test_csv_state_filter(self, client):
        rows = list(csv.reader(io.StringIO(client.get("/api/dashboard/export/csv", params={"state": "Delhi"}).text)))
        assert len(rows) == 2
        assert rows[1][6:8] == ["7.6", "0.55"]

    def test_excel(self, client):
        response = client.get("/api/dashboard/export/excel")
        assert response.status_code == 200
        assert response.headers["content-type"] == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

        wb = load_workbook(io.BytesIO(response.content))
        assert wb.sheetnames == ["District Summary", "State Distribution", "NPK Trends"]
        ws = wb["District Summary"]
        assert [c.value for c in ws[4]] == CSV_HEADER
        assert ws.cell(row=5, column=1).value == "Pune"
        assert wb["State Distribution"].cell(row=5, column=1).value == "Maharashtra"
