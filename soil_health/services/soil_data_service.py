"""
Read-only queries over district soil aggregates.

``estimate_nutrient`` is the read contract used by the recommendation
engine; the remaining helpers feed the map and dashboard.
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from soil_health.core.exceptions import DatastoreUnavailable
from soil_health.models.database_models import District, SoilHealthData
from soil_health.services.nutrient_classifier import NutrientKind

logger = logging.getLogger(__name__)

NUTRIENT_COLUMNS = {
    NutrientKind.N: SoilHealthData.nitrogen_avg,
    NutrientKind.P: SoilHealthData.phosphorus_avg,
    NutrientKind.K: SoilHealthData.potassium_avg,
}


def estimate_nutrient(db: Session, district: Optional[str], state: Optional[str], kind) -> Optional[float]:
    """
    Most recent district average for one nutrient.

    Returns None when district or state is missing or nothing is on record.
    Raises DatastoreUnavailable when the query itself fails.
    """
    if not district or not state:
        return None

    column = NUTRIENT_COLUMNS[NutrientKind(kind)]
    try:
        row = (
            db.query(column)
            .join(District, SoilHealthData.district_id == District.id)
            .filter(District.name == district, District.state_name == state)
            .order_by(desc(SoilHealthData.measurement_year), desc(SoilHealthData.last_updated))
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise DatastoreUnavailable(f"Could not read soil data for {district}, {state}") from e

    if row is None or row[0] is None:
        logger.debug(f"No {NutrientKind(kind).value} record for {district}, {state}")
        return None
    return float(row[0])


def latest_district_rows(
    db: Session,
    state: Optional[str] = None,
    year: Optional[int] = None,
) -> List[Tuple[District, SoilHealthData]]:
    """
    One (district, soil record) pair per district that has data.

    Without ``year`` the most recent measurement year is used; with it only
    that year is considered. Results are ordered by state then district.
    """
    query = db.query(District, SoilHealthData).join(
        SoilHealthData, SoilHealthData.district_id == District.id
    )
    if state:
        query = query.filter(District.state_name == state)
    if year is not None:
        query = query.filter(SoilHealthData.measurement_year == year)

    rows = query.order_by(
        District.state_name,
        District.name,
        desc(SoilHealthData.measurement_year),
        desc(SoilHealthData.last_updated),
    ).all()

    latest: Dict[int, Tuple[District, SoilHealthData]] = {}
    for district, soil in rows:
        if district.id not in latest:
            latest[district.id] = (district, soil)
    return list(latest.values())


def find_district(db: Session, name: str, state: Optional[str] = None) -> Optional[District]:
    query = db.query(District).filter(District.name == name)
    if state:
        query = query.filter(District.state_name == state)
    return query.first()
