"""Per-crop N/P/K targets."""
from dataclasses import dataclass
from typing import Optional

from soil_health.services.recommendation_rules import (
    CROP_REQUIREMENTS,
    DEFAULT_CROP_REQUIREMENT,
)


@dataclass(frozen=True)
class CropRequirement:
    """Target nutrient requirements in kg/ha."""
    crop_id: str
    nitrogen_target: float
    phosphorus_target: float
    potassium_target: float


def normalize_crop_key(crop_name: Optional[str]) -> str:
    """Lower-case and trim a crop name into a lookup key."""
    return (crop_name or "").strip().lower()


def requirements_for(crop_key: Optional[str]) -> CropRequirement:
    """
    Look up the requirement for a crop.

    Lookup is case-insensitive. Unknown crops get the default triple so a
    recommendation can always be computed.
    """
    key = normalize_crop_key(crop_key)
    n, p, k = CROP_REQUIREMENTS.get(key, DEFAULT_CROP_REQUIREMENT)
    return CropRequirement(crop_id=key, nitrogen_target=n, phosphorus_target=p, potassium_target=k)


def is_known_crop(crop_key: Optional[str]) -> bool:
    return normalize_crop_key(crop_key) in CROP_REQUIREMENTS
