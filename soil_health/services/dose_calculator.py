"""
Fertilizer Dose Calculator Service.

Converts soil NPK readings and crop targets into product quantities:
- Urea for nitrogen
- DAP and SSP for phosphorus (SSP is an alternative source computed
  independently from the same deficit)
- MOP for potassium
- Agricultural lime for acidic soils

Methodology:
1. Assume 50% of the measured soil nutrient is available to the crop
2. Deficit = max(0, required - available)
3. Product quantity = deficit / nutrient content of the product
4. Round half-up to one decimal place
"""
import math
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from soil_health.services.crop_requirements import CropRequirement
from soil_health.services.recommendation_rules import (
    SOIL_AVAILABILITY_FACTOR,
    UREA_N_CONTENT,
    DAP_P2O5_CONTENT,
    SSP_P2O5_CONTENT,
    MOP_K2O_CONTENT,
    LIME_PH_THRESHOLD,
    STRONG_ACID_PH,
    LIME_DOSE_STRONG_ACID,
    LIME_DOSE_MODERATE_ACID,
    LIME_DOSE_MILD,
)


@dataclass(frozen=True)
class SoilReadings:
    """Resolved soil nutrient values in kg/ha."""
    nitrogen: float
    phosphorus: float
    potassium: float


@dataclass(frozen=True)
class FertilizerDose:
    """Product quantities in kg/ha, all >= 0."""
    urea_kg: float = 0.0
    dap_kg: float = 0.0
    mop_kg: float = 0.0
    ssp_kg: float = 0.0
    lime_kg: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to ``digits`` decimals with halves going up (2.25 -> 2.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def nutrient_deficit(current: float, required: float) -> float:
    """Requirement left after soil supply, never negative."""
    return max(0.0, required - current * SOIL_AVAILABILITY_FACTOR)


def product_quantity(deficit: float, content: float) -> float:
    return round_half_up(max(0.0, deficit / content))


def calculate_lime_dose(ph: float) -> float:
    """
    Lime amendment in kg/ha for an acidic soil.

    The last tier is unreachable from ``compute_doses``, which only asks
    for lime below pH 6.0.
    """
    if ph < STRONG_ACID_PH:
        return LIME_DOSE_STRONG_ACID
    elif ph < LIME_PH_THRESHOLD:
        return LIME_DOSE_MODERATE_ACID
    else:
        return LIME_DOSE_MILD


def lime_required(ph: Optional[float]) -> bool:
    return ph is not None and ph < LIME_PH_THRESHOLD


def compute_doses(
    readings: SoilReadings,
    requirement: CropRequirement,
    ph: Optional[float] = None,
) -> FertilizerDose:
    """
    Compute fertilizer quantities for one field.

    Args:
        readings: Soil N, P, K in kg/ha
        requirement: Crop targets in kg/ha
        ph: Soil pH, lime is only computed when present and below 6.0

    Returns:
        FertilizerDose with every quantity clamped to >= 0
    """
    n_deficit = nutrient_deficit(readings.nitrogen, requirement.nitrogen_target)
    p_deficit = nutrient_deficit(readings.phosphorus, requirement.phosphorus_target)
    k_deficit = nutrient_deficit(readings.potassium, requirement.potassium_target)

    lime_kg = calculate_lime_dose(ph) if lime_required(ph) else 0.0

    return FertilizerDose(
        urea_kg=product_quantity(n_deficit, UREA_N_CONTENT),
        dap_kg=product_quantity(p_deficit, DAP_P2O5_CONTENT),
        mop_kg=product_quantity(k_deficit, MOP_K2O_CONTENT),
        ssp_kg=product_quantity(p_deficit, SSP_P2O5_CONTENT),
        lime_kg=lime_kg,
    )
