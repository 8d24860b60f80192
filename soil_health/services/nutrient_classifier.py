"""
Nutrient band classification.

Maps a soil nutrient reading in kg/ha to a Low/Medium/High band using the
fixed thresholds in ``recommendation_rules``. The lower band owns its upper
edge: N=280 is Medium, N=560 is Medium, N=560.1 is High.
"""
from enum import Enum

from soil_health.services.recommendation_rules import NUTRIENT_THRESHOLDS


class NutrientKind(str, Enum):
    """Primary macronutrients."""
    N = "N"
    P = "P"
    K = "K"


class NutrientBand(str, Enum):
    """Soil fertility band."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def classify(value: float, kind) -> NutrientBand:
    """
    Classify a nutrient reading.

    Args:
        value: Reading in kg/ha, must be a concrete number >= 0
        kind: NutrientKind or its letter ("N", "P", "K")

    Returns:
        NutrientBand for the reading
    """
    low_below, medium_up_to = NUTRIENT_THRESHOLDS[NutrientKind(kind).value]
    if value < low_below:
        return NutrientBand.LOW
    if value <= medium_up_to:
        return NutrientBand.MEDIUM
    return NutrientBand.HIGH
