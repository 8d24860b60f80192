"""Application timetable and advisory tips."""
from dataclasses import dataclass, asdict
from typing import Dict, List

from soil_health.services.crop_requirements import normalize_crop_key
from soil_health.services.dose_calculator import FertilizerDose
from soil_health.services.nutrient_classifier import NutrientBand
from soil_health.services.recommendation_rules import (
    BASAL_TEMPLATE,
    FIRST_TOPDRESS_SCHEDULE,
    SECOND_TOPDRESS_SCHEDULE,
    DEFAULT_FIRST_TOPDRESS,
    DEFAULT_SECOND_TOPDRESS,
    GENERAL_TIPS,
    LOW_NUTRIENT_TIPS,
    RETEST_TIP,
)


@dataclass(frozen=True)
class ApplicationSchedule:
    basal: str
    first_topdress: str
    second_topdress: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def basal_dose_text(dose: FertilizerDose) -> str:
    return BASAL_TEMPLATE.format(urea=dose.urea_kg, dap=dose.dap_kg, mop=dose.mop_kg)


def schedule(crop_key: str, dose: FertilizerDose) -> ApplicationSchedule:
    """
    Build the basal/topdress timetable for a crop.

    Topdress timings come from a fixed per-crop table; unknown crops get the
    generic 30/60 day timings.
    """
    key = normalize_crop_key(crop_key)
    return ApplicationSchedule(
        basal=basal_dose_text(dose),
        first_topdress=FIRST_TOPDRESS_SCHEDULE.get(key, DEFAULT_FIRST_TOPDRESS),
        second_topdress=SECOND_TOPDRESS_SCHEDULE.get(key, DEFAULT_SECOND_TOPDRESS),
    )


def tips(n_band: NutrientBand, p_band: NutrientBand, k_band: NutrientBand, crop_key: str) -> List[str]:
    """
    Advisory tips in fixed order: general tips, one tip per Low nutrient
    (N, P, K), then the soil retest reminder.
    """
    advice = list(GENERAL_TIPS)
    for kind, band in (("N", n_band), ("P", p_band), ("K", k_band)):
        if band == NutrientBand.LOW:
            advice.append(LOW_NUTRIENT_TIPS[kind])
    advice.append(RETEST_TIP)
    return advice
