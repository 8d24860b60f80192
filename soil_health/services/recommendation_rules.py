"""
Deterministic agronomic rules and thresholds for fertilizer recommendations.

This module centralizes constants so the classification and dosing logic
stays deterministic, auditable, and consistent across services and tests.
All tables are read-only after import.
"""
from types import MappingProxyType

# Band thresholds in kg/ha: (low_below, medium_up_to)
NUTRIENT_THRESHOLDS = MappingProxyType({
    "N": (280.0, 560.0),
    "P": (10.0, 25.0),
    "K": (110.0, 280.0),
})

# Used when neither the request nor the district history has a value
GLOBAL_NUTRIENT_DEFAULTS = MappingProxyType({
    "N": 250.0,
    "P": 15.0,
    "K": 150.0,
})

# Fraction of the measured soil nutrient assumed available to the crop
SOIL_AVAILABILITY_FACTOR = 0.5

# Nutrient content of each fertilizer product
UREA_N_CONTENT = 0.46
DAP_P2O5_CONTENT = 0.46
SSP_P2O5_CONTENT = 0.16
MOP_K2O_CONTENT = 0.60

LIME_PH_THRESHOLD = 6.0
STRONG_ACID_PH = 5.5
LIME_DOSE_STRONG_ACID = 2000.0
LIME_DOSE_MODERATE_ACID = 1000.0
LIME_DOSE_MILD = 500.0

# Target N, P, K in kg/ha
CROP_REQUIREMENTS = MappingProxyType({
    "wheat": (120.0, 60.0, 60.0),
    "rice": (150.0, 60.0, 60.0),
    "maize": (120.0, 60.0, 40.0),
    "cotton": (160.0, 80.0, 60.0),
    "sugarcane": (300.0, 100.0, 150.0),
    "mustard": (80.0, 40.0, 40.0),
    "tomato": (150.0, 80.0, 100.0),
    "potato": (180.0, 80.0, 120.0),
})

DEFAULT_CROP_REQUIREMENT = (100.0, 50.0, 50.0)

FIRST_TOPDRESS_SCHEDULE = MappingProxyType({
    "wheat": "30-35 days after sowing",
    "rice": "20-25 days after transplanting",
    "maize": "25-30 days after sowing",
    "cotton": "40-45 days after sowing",
    "sugarcane": "45-50 days after planting",
})

SECOND_TOPDRESS_SCHEDULE = MappingProxyType({
    "wheat": "60-65 days after sowing",
    "rice": "45-50 days after transplanting",
    "maize": "50-55 days after sowing",
    "cotton": "70-75 days after sowing",
    "sugarcane": "90-100 days after planting",
})

DEFAULT_FIRST_TOPDRESS = "30 days after sowing/planting"
DEFAULT_SECOND_TOPDRESS = "60 days after sowing/planting"

BASAL_TEMPLATE = "Apply 50% of N ({urea} kg Urea), full P ({dap} kg DAP) and K ({mop} kg MOP) at sowing"

GENERAL_TIPS = (
    "Apply fertilizers when soil has adequate moisture",
    "Avoid fertilizer application during heavy rain",
)

LOW_NUTRIENT_TIPS = MappingProxyType({
    "N": "Consider adding organic manure to improve nitrogen content",
    "P": "Phosphorus deficiency may delay maturity - monitor crop closely",
    "K": "Potassium deficiency may affect disease resistance",
})

RETEST_TIP = "Conduct soil testing every 2-3 years for best results"
