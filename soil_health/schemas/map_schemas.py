"""Pydantic schemas for the map endpoints."""
from pydantic import BaseModel
from typing import Dict


class StateListItem(BaseModel):
    name: str
    district_count: int


class DistrictBounds(BaseModel):
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float
    center_lng: float
    center_lat: float


class StateStats(BaseModel):
    state: str
    district_count: int
    avg_nitrogen: float
    avg_phosphorus: float
    avg_potassium: float
    avg_ph: float
    avg_organic_carbon: float
    total_samples: int
    npk_distribution: Dict[str, Dict[str, int]]
