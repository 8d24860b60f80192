#!/usr/bin/env python3
"""
Recommendation Engine Validation Script
Runs randomized scenarios through the engine and checks its invariants:
band boundaries, non-negative doses, monotonicity in soil supply and
lime gating.
"""
import argparse
import os
import random
import sys
from typing import Dict, List

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from soil_health.services.dose_calculator import SoilReadings, compute_doses
from soil_health.services.crop_requirements import requirements_for
from soil_health.services.nutrient_classifier import NutrientBand, classify
from soil_health.services.recommendation_rules import CROP_REQUIREMENTS, NUTRIENT_THRESHOLDS
from soil_health.services.recommendation_service import RecommendationInput, RecommendationService

CROPS = list(CROP_REQUIREMENTS) + ["Wheat", "RICE", "groundnut", "banana"]

READING_RANGES = {
    "N": (0.0, 800.0),
    "P": (0.0, 60.0),
    "K": (0.0, 450.0),
}


def random_input(rng: random.Random) -> RecommendationInput:
    def maybe(kind):
        if rng.random() < 0.15:
            return None
        low, high = READING_RANGES[kind]
        return round(rng.uniform(low, high), 1)

    return RecommendationInput(
        crop=rng.choice(CROPS),
        nitrogen=maybe("N"),
        phosphorus=maybe("P"),
        potassium=maybe("K"),
        ph=None if rng.random() < 0.2 else round(rng.uniform(4.0, 9.0), 1),
    )


def expected_band(value: float, kind: str) -> NutrientBand:
    low_below, medium_up_to = NUTRIENT_THRESHOLDS[kind]
    if value < low_below:
        return NutrientBand.LOW
    return NutrientBand.MEDIUM if value <= medium_up_to else NutrientBand.HIGH


def check_scenario(service: RecommendationService, request: RecommendationInput) -> List[str]:
    issues = []
    result = service.calculate(request)
    readings = result.readings

    for kind, band in (("N", result.nitrogen_status), ("P", result.phosphorus_status), ("K", result.potassium_status)):
        if band != expected_band(readings[kind].value, kind):
            issues.append(f"{kind} band {band.value} wrong for {readings[kind].value}")

    for name, value in result.dose.to_dict().items():
        if value < 0:
            issues.append(f"{name} negative: {value}")

    if (request.ph is not None and request.ph < 6.0) != result.lime_required:
        issues.append(f"lime gating wrong for pH {request.ph}")
    if not result.lime_required and result.dose.lime_kg != 0.0:
        issues.append("lime dose without lime requirement")

    # More soil supply never increases a dose
    richer = SoilReadings(
        nitrogen=readings["N"].value + 50,
        phosphorus=readings["P"].value + 10,
        potassium=readings["K"].value + 50,
    )
    richer_dose = compute_doses(richer, requirements_for(request.crop), ph=request.ph)
    for name in ("urea_kg", "dap_kg", "mop_kg", "ssp_kg"):
        if getattr(richer_dose, name) > getattr(result.dose, name):
            issues.append(f"{name} increased with more soil supply")

    if service.calculate(request) != result:
        issues.append("repeated calculation differs")

    if not (result.schedule.basal and result.schedule.first_topdress and result.schedule.second_topdress):
        issues.append("empty schedule entry")
    return issues


def check_boundaries() -> List[str]:
    issues = []
    for kind, (low_below, medium_up_to) in NUTRIENT_THRESHOLDS.items():
        cases = [
            (low_below - 0.1, NutrientBand.LOW),
            (low_below, NutrientBand.MEDIUM),
            (medium_up_to, NutrientBand.MEDIUM),
            (medium_up_to + 0.1, NutrientBand.HIGH),
        ]
        for value, band in cases:
            if classify(value, kind) != band:
                issues.append(f"{kind}={value} classified {classify(value, kind).value}, expected {band.value}")
    return issues


def run_validation(num_scenarios: int = 500, seed: int = 42) -> Dict:
    rng = random.Random(seed)
    service = RecommendationService()
    stats = {"total_tests": num_scenarios, "successful": 0, "failed": 0, "lime_cases": 0}
    anomalies = []

    for issue in check_boundaries():
        anomalies.append({"test_id": 0, "issue": issue})

    for i in range(num_scenarios):
        request = random_input(rng)
        try:
            issues = check_scenario(service, request)
        except Exception as e:
            stats["failed"] += 1
            anomalies.append({"test_id": i + 1, "issue": f"Calculation error: {e}"})
            continue

        if request.ph is not None and request.ph < 6.0:
            stats["lime_cases"] += 1
        if issues:
            stats["failed"] += 1
            anomalies.extend({"test_id": i + 1, "issue": issue, "crop": request.crop} for issue in issues)
        else:
            stats["successful"] += 1

    stats["anomalies"] = len(anomalies)
    return {"stats": stats, "anomalies": anomalies}


def generate_report(validation: Dict) -> str:
    stats = validation["stats"]
    anomalies = validation["anomalies"]
    report = []
    report.append("=" * 70)
    report.append("RECOMMENDATION ENGINE VALIDATION REPORT")
    report.append("=" * 70)
    report.append(f"Total scenarios: {stats['total_tests']}")
    report.append(f"Passed: {stats['successful']}")
    report.append(f"Failed: {stats['failed']}")
    report.append(f"Lime scenarios: {stats['lime_cases']}")
    report.append(f"Anomalies: {stats['anomalies']}")
    if anomalies:
        report.append("")
        report.append("## ANOMALIES")
        report.append("-" * 40)
        for anomaly in anomalies[:50]:
            report.append(f"#{anomaly['test_id']}: {anomaly['issue']}")
    report.append("=" * 70)
    return "\n".join(report)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Validate the recommendation engine")
    parser.add_argument("--scenarios", type=int, default=500, help="Number of scenarios")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    args = parser.parse_args()

    validation = run_validation(num_scenarios=args.scenarios, seed=args.seed)
    print(generate_report(validation))
    sys.exit(1 if validation["stats"]["anomalies"] else 0)
