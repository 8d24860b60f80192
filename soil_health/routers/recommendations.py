"""
Fertilizer Recommendation Router.
Provides endpoints for recommendation calculations and saved recommendations.
"""
from functools import partial
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy import desc
import io
import logging

from soil_health.core.auth import get_current_active_user
from soil_health.core.exceptions import RecommendationValidationError
from soil_health.database import get_db
from soil_health.models.database_models import CropReference, Farmer, FertilizerRecommendation
from soil_health.schemas.recommendation_schemas import (
    CropInfo,
    RecommendationRequest,
    RecommendationResponse,
    SaveRecommendationRequest,
    SaveRecommendationResponse,
    SavedRecommendationListResponse,
    SavedRecommendationSummary,
)
from soil_health.services.pdf_service import create_recommendation_pdf
from soil_health.services.recommendation_service import RecommendationInput, RecommendationService
from soil_health.services.soil_data_service import estimate_nutrient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])

CALCULATION_FAILED = "Failed to calculate recommendations"


def get_recommendation_service(db: Session = Depends(get_db)) -> RecommendationService:
    """Recommendation service backed by the district soil averages in ``db``."""
    return RecommendationService(estimator=partial(estimate_nutrient, db))


def to_input(payload: RecommendationRequest) -> RecommendationInput:
    return RecommendationInput(**payload.model_dump(exclude={"notes"}))


# ============== Calculation ==============

@router.post(
    "/calculate",
    response_model=RecommendationResponse,
    response_model_exclude_none=True,
)
async def calculate_recommendation(
    payload: RecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
):
    """
    Calculate fertilizer doses, schedule and tips for a crop.

    Missing N/P/K values are taken from the district's latest soil averages,
    then from global defaults.
    """
    try:
        result = service.calculate(to_input(payload))
    except RecommendationValidationError:
        raise
    except Exception:
        logger.exception("Error calculating recommendations")
        return JSONResponse(status_code=500, content={"error": CALCULATION_FAILED})

    return result.to_response()


def _range(low, high) -> str:
    return f"{float(low or 0.0)}-{float(high or 0.0)}"


@router.get("/crops", response_model=List[CropInfo])
async def list_crops(db: Session = Depends(get_db)):
    """Crop reference list with optimal nutrient ranges."""
    crops = db.query(CropReference).order_by(CropReference.crop_type, CropReference.crop_name).all()
    return [
        CropInfo(
            name=crop.crop_name,
            type=crop.crop_type,
            season=crop.season,
            n_range=_range(crop.nitrogen_min, crop.nitrogen_max),
            p_range=_range(crop.phosphorus_min, crop.phosphorus_max),
            k_range=_range(crop.potassium_min, crop.potassium_max),
            ph_range=_range(crop.ph_min, crop.ph_max),
            water_requirement=crop.water_requirement,
        )
        for crop in crops
    ]


# ============== Saved Recommendations ==============

def _get_owned(db: Session, recommendation_id: int, farmer: Farmer) -> FertilizerRecommendation:
    recommendation = db.query(FertilizerRecommendation).filter(
        FertilizerRecommendation.id == recommendation_id,
        FertilizerRecommendation.farmer_id == farmer.id
    ).first()

    if not recommendation:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return recommendation


@router.post("/save", response_model=SaveRecommendationResponse, status_code=status.HTTP_201_CREATED)
async def save_recommendation(
    payload: SaveRecommendationRequest,
    current_farmer: Farmer = Depends(get_current_active_user),
    service: RecommendationService = Depends(get_recommendation_service),
    db: Session = Depends(get_db)
):
    """Recalculate the recommendation for the submitted input and store it."""
    result = service.calculate(to_input(payload))
    readings = result.readings

    recommendation = FertilizerRecommendation(
        farmer_id=current_farmer.id,
        district_name=payload.district,
        state_name=payload.state,
        crop_name=payload.crop.strip(),
        season=payload.season,
        nitrogen_value=readings["N"].value,
        phosphorus_value=readings["P"].value,
        potassium_value=readings["K"].value,
        ph_value=payload.ph,
        urea_dose=result.dose.urea_kg,
        dap_dose=result.dose.dap_kg,
        mop_dose=result.dose.mop_kg,
        ssp_dose=result.dose.ssp_kg,
        lime_dose=result.dose.lime_kg if result.lime_required else None,
        basal_dose=result.schedule.basal,
        first_topdress=result.schedule.first_topdress,
        second_topdress=result.schedule.second_topdress,
        input_data=payload.model_dump(by_alias=True, exclude_none=True, exclude={"notes"}),
        results=result.to_response(),
        notes=payload.notes,
    )
    db.add(recommendation)
    db.commit()
    db.refresh(recommendation)

    logger.info(f"Farmer {current_farmer.id} saved recommendation {recommendation.id} for {recommendation.crop_name}")
    return SaveRecommendationResponse(message="Recommendation saved successfully", id=recommendation.id)


@router.get("/saved", response_model=SavedRecommendationListResponse)
async def list_saved_recommendations(
    current_farmer: Farmer = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get all saved recommendations for the current farmer, newest first."""
    recommendations = db.query(FertilizerRecommendation).filter(
        FertilizerRecommendation.farmer_id == current_farmer.id
    ).order_by(desc(FertilizerRecommendation.created_at), desc(FertilizerRecommendation.id)).all()

    items = [SavedRecommendationSummary.model_validate(rec) for rec in recommendations]
    return SavedRecommendationListResponse(items=items, total=len(items))


def _record_fields(rec: FertilizerRecommendation) -> Dict[str, Any]:
    return {
        "id": rec.id,
        "crop_name": rec.crop_name,
        "district_name": rec.district_name,
        "state_name": rec.state_name,
        "season": rec.season,
        "nitrogen_value": rec.nitrogen_value,
        "phosphorus_value": rec.phosphorus_value,
        "potassium_value": rec.potassium_value,
        "ph_value": rec.ph_value,
        "urea_dose": rec.urea_dose,
        "dap_dose": rec.dap_dose,
        "mop_dose": rec.mop_dose,
        "ssp_dose": rec.ssp_dose,
        "lime_dose": rec.lime_dose,
        "basal_dose": rec.basal_dose,
        "first_topdress": rec.first_topdress,
        "second_topdress": rec.second_topdress,
        "notes": rec.notes,
        "created_at": rec.created_at,
        "results": rec.results,
    }


@router.get("/saved/{recommendation_id}")
async def get_saved_recommendation(
    recommendation_id: int,
    current_farmer: Farmer = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get a specific saved recommendation by ID."""
    rec = _get_owned(db, recommendation_id, current_farmer)
    return {
        "id": rec.id,
        "cropName": rec.crop_name,
        "districtName": rec.district_name,
        "stateName": rec.state_name,
        "season": rec.season,
        "inputData": rec.input_data,
        "results": rec.results,
        "notes": rec.notes,
        "createdAt": rec.created_at,
    }


@router.delete("/saved/{recommendation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_recommendation(
    recommendation_id: int,
    current_farmer: Farmer = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a saved recommendation."""
    rec = _get_owned(db, recommendation_id, current_farmer)
    db.delete(rec)
    db.commit()
    return None


@router.get("/saved/{recommendation_id}/pdf")
async def download_recommendation_pdf(
    recommendation_id: int,
    current_farmer: Farmer = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Render a saved recommendation as a downloadable PDF."""
    rec = _get_owned(db, recommendation_id, current_farmer)

    pdf_bytes = create_recommendation_pdf(
        _record_fields(rec),
        farmer_name=current_farmer.full_name or current_farmer.username,
    )
    filename = f"recommendation_{rec.crop_name.replace(' ', '_')}_{rec.id}.pdf"

    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
