"""
Map Service.

Builds GeoJSON and per-state statistics from the latest soil record of each
district. Geometry is parsed as GeoJSON and handled with shapely.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from shapely.geometry import shape
from sqlalchemy import func
from sqlalchemy.orm import Session

from soil_health.models.database_models import District, SoilHealthData
from soil_health.services.soil_data_service import find_district, latest_district_rows

logger = logging.getLogger(__name__)

BANDS = ("Low", "Medium", "High")


def parse_geometry(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse stored GeoJSON; returns None for empty or malformed geometry."""
    if not raw:
        return None
    try:
        geometry = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse geometry: {e}")
        return None
    if not isinstance(geometry, dict) or "type" not in geometry:
        logger.warning("Geometry is not a GeoJSON object")
        return None
    return geometry


def district_feature(district: District, soil: SoilHealthData) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": parse_geometry(district.geometry),
        "properties": {
            "district_id": district.id,
            "district_name": district.name,
            "state_name": district.state_name,
            "nitrogen_avg": soil.nitrogen_avg,
            "nitrogen_status": soil.nitrogen_status,
            "phosphorus_avg": soil.phosphorus_avg,
            "phosphorus_status": soil.phosphorus_status,
            "potassium_avg": soil.potassium_avg,
            "potassium_status": soil.potassium_status,
            "ph_avg": soil.ph_avg,
            "organic_carbon": soil.organic_carbon,
            "samples_analyzed": soil.samples_analyzed,
            "measurement_year": soil.measurement_year,
        },
    }


def districts_geojson(db: Session, state: Optional[str] = None) -> Dict[str, Any]:
    """FeatureCollection of districts with their latest soil data."""
    features = [district_feature(d, s) for d, s in latest_district_rows(db, state=state)]
    return {"type": "FeatureCollection", "features": features}


def _mean(values: List[float], digits: int) -> float:
    values = [v for v in values if v is not None]
    if not values:
        return 0.0
    return round(sum(values) / len(values), digits)


def _band_counts(statuses: List[Optional[str]]) -> Dict[str, int]:
    return {band.lower(): sum(1 for s in statuses if s == band) for band in BANDS}


def state_stats(db: Session, state: str) -> Optional[Dict[str, Any]]:
    """Aggregate statistics for one state, or None when it has no data."""
    rows = latest_district_rows(db, state=state)
    if not rows:
        return None

    soils = [soil for _, soil in rows]
    return {
        "state": state,
        "district_count": len(rows),
        "avg_nitrogen": _mean([s.nitrogen_avg for s in soils], 1),
        "avg_phosphorus": _mean([s.phosphorus_avg for s in soils], 1),
        "avg_potassium": _mean([s.potassium_avg for s in soils], 1),
        "avg_ph": _mean([s.ph_avg for s in soils], 1),
        "avg_organic_carbon": _mean([s.organic_carbon for s in soils], 2),
        "total_samples": sum(s.samples_analyzed or 0 for s in soils),
        "npk_distribution": {
            "nitrogen": _band_counts([s.nitrogen_status for s in soils]),
            "phosphorus": _band_counts([s.phosphorus_status for s in soils]),
            "potassium": _band_counts([s.potassium_status for s in soils]),
        },
    }


def district_bounds(db: Session, name: str, state: str) -> Optional[Dict[str, float]]:
    """Envelope and center of a district's geometry, or None when unknown."""
    district = find_district(db, name, state)
    if district is None:
        return None

    geometry = parse_geometry(district.geometry)
    if geometry is None:
        return None

    min_lng, min_lat, max_lng, max_lat = shape(geometry).bounds
    return {
        "min_lng": min_lng,
        "min_lat": min_lat,
        "max_lng": max_lng,
        "max_lat": max_lat,
        "center_lng": (min_lng + max_lng) / 2,
        "center_lat": (min_lat + max_lat) / 2,
    }


def list_states(db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(District.state_name, func.count(District.id))
        .group_by(District.state_name)
        .order_by(District.state_name)
        .all()
    )
    return [{"name": name, "district_count": count} for name, count in rows]
