"""
Soil Map Router.
GeoJSON districts, state statistics and district bounds for the map view.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from soil_health.database import get_db
from soil_health.schemas.map_schemas import DistrictBounds, StateListItem, StateStats
from soil_health.services import map_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/map", tags=["map"])


@router.get("/districts")
async def get_districts(state: Optional[str] = None, db: Session = Depends(get_db)):
    """GeoJSON FeatureCollection of districts with their latest soil data."""
    collection = map_service.districts_geojson(db, state=state)
    logger.debug(f"Returning {len(collection['features'])} district features (state={state})")
    return collection


@router.get("/stats/{state}", response_model=StateStats)
async def get_state_stats(state: str, db: Session = Depends(get_db)):
    stats = map_service.state_stats(db, state)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"No soil data for state '{state}'")
    return stats


@router.get("/district/{name}/bounds", response_model=DistrictBounds)
async def get_district_bounds(name: str, state: str = Query(...), db: Session = Depends(get_db)):
    bounds = map_service.district_bounds(db, name, state)
    if bounds is None:
        raise HTTPException(status_code=404, detail="District not found")
    return bounds


@router.get("/states", response_model=List[StateListItem])
async def get_states(db: Session = Depends(get_db)):
    return map_service.list_states(db)
