"""
Dashboard Service.

Aggregates district soil records into the dashboard summary:
- Key metrics with year-over-year growth
- NPK trends across measurement years
- State-wise sample distribution
- District summary table and CSV export
- Recent activity feed
"""
import csv
import io
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from soil_health.models.database_models import FertilizerRecommendation, SoilHealthData
from soil_health.services.soil_data_service import latest_district_rows

logger = logging.getLogger(__name__)

# Soil health score per nutrient status; anything else (Low, unknown) scores 3
STATUS_SCORES = {"Medium": 5, "High": 8}
DEFAULT_STATUS_SCORE = 3

FARMERS_PER_SAMPLE = 2.5
STATE_DISTRIBUTION_LIMIT = 10
DISTRICT_SUMMARY_LIMIT = 20
RECENT_ACTIVITY_LIMIT = 5

CSV_HEADER = ["District", "State", "Samples", "N Status", "P Status", "K Status", "pH", "OC%", "Last Updated"]


def resolve_year(db: Session, year: Optional[int] = None) -> int:
    """Requested year, else the latest year on record, else the current year."""
    if year is not None:
        return year
    latest = db.query(func.max(SoilHealthData.measurement_year)).scalar()
    return latest if latest is not None else datetime.utcnow().year


def soil_health_score(soil: SoilHealthData) -> float:
    statuses = (soil.nitrogen_status, soil.phosphorus_status, soil.potassium_status)
    return sum(STATUS_SCORES.get(s, DEFAULT_STATUS_SCORE) for s in statuses) / 3.0


def growth_pct(previous: float, current: float) -> float:
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def key_metrics(db: Session, state: Optional[str], year: int) -> Dict[str, Any]:
    rows = latest_district_rows(db, state=state, year=year)
    previous = latest_district_rows(db, state=state, year=year - 1)

    total_samples = sum(s.samples_analyzed or 0 for _, s in rows)
    previous_samples = sum(s.samples_analyzed or 0 for _, s in previous)
    avg_health = sum(soil_health_score(s) for _, s in rows) / len(rows) if rows else 0.0

    return {
        "districtsCovered": len(rows),
        "totalSamples": total_samples,
        "avgSoilHealth": round(avg_health, 1),
        "districtsGrowth": growth_pct(len(previous), len(rows)),
        "samplesGrowth": growth_pct(previous_samples, total_samples),
        "farmersBenefited": total_samples * FARMERS_PER_SAMPLE,
    }


def npk_trends(db: Session, state: Optional[str] = None) -> Dict[str, List]:
    """Mean N/P/K per measurement year."""
    query = db.query(
        SoilHealthData.measurement_year,
        func.avg(SoilHealthData.nitrogen_avg),
        func.avg(SoilHealthData.phosphorus_avg),
        func.avg(SoilHealthData.potassium_avg),
    )
    if state:
        query = query.filter(SoilHealthData.state_name == state)
    rows = (
        query.filter(SoilHealthData.measurement_year.isnot(None))
        .group_by(SoilHealthData.measurement_year)
        .order_by(SoilHealthData.measurement_year)
        .all()
    )

    def _r(value):
        return round(float(value), 1) if value is not None else None

    return {
        "labels": [str(r[0]) for r in rows],
        "nitrogen": [_r(r[1]) for r in rows],
        "phosphorus": [_r(r[2]) for r in rows],
        "potassium": [_r(r[3]) for r in rows],
    }


def state_distribution(db: Session, year: int) -> List[Dict[str, Any]]:
    grouped: Dict[str, List[SoilHealthData]] = {}
    for district, soil in latest_district_rows(db, year=year):
        grouped.setdefault(district.state_name, []).append(soil)

    def _avg(values):
        values = [v for v in values if v is not None]
        return round(sum(values) / len(values), 1) if values else None

    distribution = [
        {
            "state": state,
            "districts": len(soils),
            "samples": sum(s.samples_analyzed or 0 for s in soils),
            "avgNitrogen": _avg([s.nitrogen_avg for s in soils]),
            "avgPhosphorus": _avg([s.phosphorus_avg for s in soils]),
            "avgPotassium": _avg([s.potassium_avg for s in soils]),
        }
        for state, soils in grouped.items()
    ]
    distribution.sort(key=lambda item: item["samples"], reverse=True)
    return distribution[:STATE_DISTRIBUTION_LIMIT]


def district_summary(db: Session, state: Optional[str], year: int) -> List[Dict[str, Any]]:
    rows = latest_district_rows(db, state=state, year=year)
    rows.sort(key=lambda pair: pair[1].samples_analyzed or 0, reverse=True)
    return [
        {
            "districtName": district.name,
            "stateName": district.state_name,
            "samples": soil.samples_analyzed,
            "nitrogenStatus": soil.nitrogen_status,
            "phosphorusStatus": soil.phosphorus_status,
            "potassiumStatus": soil.potassium_status,
            "ph": soil.ph_avg,
            "organicCarbon": soil.organic_carbon,
            "lastUpdated": soil.last_updated,
        }
        for district, soil in rows[:DISTRICT_SUMMARY_LIMIT]
    ]


def recent_activities(db: Session) -> List[Dict[str, Any]]:
    """Latest saved recommendations and soil data updates, newest first."""
    activities = []

    for rec in (
        db.query(FertilizerRecommendation)
        .order_by(desc(FertilizerRecommendation.created_at))
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    ):
        location = ", ".join(p for p in (rec.district_name, rec.state_name) if p)
        activities.append({
            "type": "advisory",
            "title": "Recommendation Saved",
            "description": f"{rec.crop_name} recommendation" + (f" for {location}" if location else ""),
            "timestamp": rec.created_at,
        })

    for soil in (
        db.query(SoilHealthData)
        .order_by(desc(SoilHealthData.last_updated))
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    ):
        activities.append({
            "type": "map_update",
            "title": "Soil Data Updated",
            "description": f"{soil.district_name}, {soil.state_name} ({soil.measurement_year} {soil.season})",
            "timestamp": soil.last_updated,
        })

    activities.sort(key=lambda a: a["timestamp"] or datetime.min, reverse=True)
    return activities[:RECENT_ACTIVITY_LIMIT]


def dashboard_summary(db: Session, state: Optional[str] = None, year: Optional[int] = None) -> Dict[str, Any]:
    target_year = resolve_year(db, year)
    return {
        "year": target_year,
        "metrics": key_metrics(db, state, target_year),
        "npkTrends": npk_trends(db, state),
        "stateDistribution": state_distribution(db, target_year),
        "recentActivities": recent_activities(db),
        "districtSummary": district_summary(db, state, target_year),
    }


def _fmt(value: Optional[float], digits: int) -> str:
    return f"{value:.{digits}f}" if value is not None else ""


def district_summary_csv(districts: List[Dict[str, Any]]) -> str:
    """Render district summary rows as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for d in districts:
        writer.writerow([
            d["districtName"],
            d["stateName"],
            d["samples"] if d["samples"] is not None else "",
            d["nitrogenStatus"] or "",
            d["phosphorusStatus"] or "",
            d["potassiumStatus"] or "",
            _fmt(d["ph"], 1),
            _fmt(d["organicCarbon"], 2),
            d["lastUpdated"].isoformat(sep=" ", timespec="seconds") if d["lastUpdated"] else "",
        ])
    return buffer.getvalue()
