"""
Recommendation Service.

Runs one recommendation request end to end:
1. Resolve N, P and K (request value -> district average -> global default)
2. Classify each reading into a band
3. Compute fertilizer doses for the crop, plus lime for acidic soil
4. Build the application schedule and advisory tips
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from soil_health.core.exceptions import DatastoreUnavailable, RecommendationValidationError
from soil_health.services.crop_requirements import (
    CropRequirement,
    is_known_crop,
    normalize_crop_key,
    requirements_for,
)
from soil_health.services.dose_calculator import (
    FertilizerDose,
    SoilReadings,
    compute_doses,
    lime_required,
)
from soil_health.services.nutrient_classifier import NutrientBand, NutrientKind, classify
from soil_health.services.recommendation_rules import GLOBAL_NUTRIENT_DEFAULTS
from soil_health.services.schedule_advisor import ApplicationSchedule, schedule, tips

logger = logging.getLogger(__name__)

# (district, state, kind) -> value or None
NutrientEstimator = Callable[[Optional[str], Optional[str], str], Optional[float]]

SOURCE_REQUEST = "request"
SOURCE_DISTRICT = "district"
SOURCE_DEFAULT = "default"


@dataclass
class RecommendationInput:
    """Soil test values and crop for one recommendation."""
    crop: Optional[str]
    nitrogen: Optional[float] = None
    phosphorus: Optional[float] = None
    potassium: Optional[float] = None
    ph: Optional[float] = None
    district: Optional[str] = None
    state: Optional[str] = None
    season: Optional[str] = None
    organic_carbon: Optional[float] = None
    ec: Optional[float] = None


@dataclass(frozen=True)
class ResolvedNutrient:
    kind: str
    value: float
    source: str


@dataclass
class RecommendationResult:
    nitrogen_status: NutrientBand
    phosphorus_status: NutrientBand
    potassium_status: NutrientBand
    dose: FertilizerDose
    schedule: ApplicationSchedule
    tips: List[str]
    lime_required: bool = False
    readings: Dict[str, ResolvedNutrient] = field(default_factory=dict)
    requirement: Optional[CropRequirement] = None

    def to_response(self) -> Dict[str, Any]:
        """Wire representation; lime keys only appear when lime is needed."""
        response: Dict[str, Any] = {
            "nitrogenStatus": self.nitrogen_status.value,
            "phosphorusStatus": self.phosphorus_status.value,
            "potassiumStatus": self.potassium_status.value,
            "ureaDose": self.dose.urea_kg,
            "dapDose": self.dose.dap_kg,
            "mopDose": self.dose.mop_kg,
            "sspDose": self.dose.ssp_kg,
            "schedule": {
                "basal": self.schedule.basal,
                "firstTopdress": self.schedule.first_topdress,
                "secondTopdress": self.schedule.second_topdress,
            },
            "tips": list(self.tips),
        }
        if self.lime_required:
            response["limeRequired"] = True
            response["limeDose"] = self.dose.lime_kg
        return response


def resolve_nutrient(
    kind: str,
    requested: Optional[float],
    estimate: Callable[[str], Optional[float]],
) -> ResolvedNutrient:
    """
    Resolve one nutrient reading with fixed precedence.

    1. The value supplied in the request
    2. The district's most recent average (``estimate``)
    3. The global default for the nutrient

    A datastore failure is logged and treated as "no district data".
    """
    kind = NutrientKind(kind).value
    if requested is not None:
        return ResolvedNutrient(kind, float(requested), SOURCE_REQUEST)

    try:
        estimated = estimate(kind)
    except DatastoreUnavailable as e:
        logger.warning(f"Could not fetch district data for {kind}, using default: {e}")
        estimated = None

    if estimated is not None:
        return ResolvedNutrient(kind, float(estimated), SOURCE_DISTRICT)
    return ResolvedNutrient(kind, GLOBAL_NUTRIENT_DEFAULTS[kind], SOURCE_DEFAULT)


def _no_district_data(district, state, kind):
    return None


class RecommendationService:
    """Orchestrates classification, dosing and scheduling for a request."""

    def __init__(self, estimator: Optional[NutrientEstimator] = None):
        self.estimator = estimator or _no_district_data

    def resolve_readings(self, request: RecommendationInput) -> Dict[str, ResolvedNutrient]:
        def estimate(kind: str) -> Optional[float]:
            return self.estimator(request.district, request.state, kind)

        return {
            "N": resolve_nutrient("N", request.nitrogen, estimate),
            "P": resolve_nutrient("P", request.phosphorus, estimate),
            "K": resolve_nutrient("K", request.potassium, estimate),
        }

    def calculate(self, request: RecommendationInput) -> RecommendationResult:
        """
        Calculate a fertilizer recommendation.

        Raises:
            RecommendationValidationError: crop is missing or blank
        """
        crop_key = normalize_crop_key(request.crop)
        if not crop_key:
            raise RecommendationValidationError("Crop selection is required")

        readings = self.resolve_readings(request)
        n, p, k = readings["N"], readings["P"], readings["K"]
        logger.debug(
            f"Resolved readings for {crop_key}: N={n.value} ({n.source}), "
            f"P={p.value} ({p.source}), K={k.value} ({k.source})"
        )

        n_band = classify(n.value, "N")
        p_band = classify(p.value, "P")
        k_band = classify(k.value, "K")

        if not is_known_crop(crop_key):
            logger.info(f"Crop '{crop_key}' not in requirement table, using default requirement")
        requirement = requirements_for(crop_key)

        dose = compute_doses(
            SoilReadings(nitrogen=n.value, phosphorus=p.value, potassium=k.value),
            requirement,
            ph=request.ph,
        )

        return RecommendationResult(
            nitrogen_status=n_band,
            phosphorus_status=p_band,
            potassium_status=k_band,
            dose=dose,
            schedule=schedule(crop_key, dose),
            tips=tips(n_band, p_band, k_band, crop_key),
            lime_required=lime_required(request.ph),
            readings=readings,
            requirement=requirement,
        )
