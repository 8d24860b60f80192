"""
Sample data loader.

Loads states, districts, soil aggregates and crop reference rows from the
JSON files in ``soil_health/data`` when the tables are empty.
"""
import json
import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from soil_health.config import CROP_REFERENCE_PATH, SAMPLE_DISTRICTS_PATH
from soil_health.models.database_models import CropReference, District, SoilHealthData, State

logger = logging.getLogger(__name__)


def load_json(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def seed_districts(db: Session, data: Dict) -> int:
    """Insert sample states, districts and their soil records. Returns districts added."""
    states = {}
    for item in data.get("states", []):
        state = State(
            name=item["name"],
            code=item["code"],
            population=item.get("population"),
            area_km2=item.get("area_km2"),
        )
        db.add(state)
        states[state.name] = state
    db.flush()

    year = data.get("measurement_year")
    season = data.get("season", "Annual")
    source = data.get("data_source")

    added = 0
    for item in data.get("districts", []):
        state = states.get(item["state_name"])
        district = District(
            name=item["name"],
            state_name=item["state_name"],
            state_id=state.id if state else None,
            geometry=json.dumps(item["geometry"]),
            area_km2=item.get("area_km2"),
            population=item.get("population"),
            agricultural_area_km2=item.get("agricultural_area_km2"),
        )
        db.add(district)
        db.flush()

        soil = item.get("soil")
        if soil:
            db.add(SoilHealthData(
                district_id=district.id,
                district_name=district.name,
                state_name=district.state_name,
                measurement_year=soil.get("measurement_year", year),
                season=soil.get("season", season),
                data_source=source,
                **{k: v for k, v in soil.items() if k not in ("measurement_year", "season")},
            ))
        added += 1
    return added


def seed_crops(db: Session, data: Dict) -> int:
    crops = data.get("crops", [])
    for item in crops:
        db.add(CropReference(**item))
    return len(crops)


def seed_sample_data(
    db: Session,
    districts_path: Optional[str] = None,
    crops_path: Optional[str] = None,
) -> None:
    """Seed every empty table group; tables that already hold rows are left alone."""
    try:
        if db.query(District).first() is None:
            count = seed_districts(db, load_json(districts_path or SAMPLE_DISTRICTS_PATH))
            logger.info(f"Seeded {count} sample districts")
        if db.query(CropReference).first() is None:
            count = seed_crops(db, load_json(crops_path or CROP_REFERENCE_PATH))
            logger.info(f"Seeded {count} crop reference rows")
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error seeding sample data")
        raise
