"""
Pydantic schemas for the recommendation module.

Wire names are camelCase; Python attributes stay snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ==================== CALCULATION ====================

class RecommendationRequest(CamelModel):
    """Soil test values for a fertilizer recommendation."""
    crop: Optional[str] = Field(None, max_length=100, description="Crop name, e.g. wheat")
    nitrogen: Optional[float] = Field(None, ge=0, description="Available N kg/ha")
    phosphorus: Optional[float] = Field(None, ge=0, description="Available P kg/ha")
    potassium: Optional[float] = Field(None, ge=0, description="Available K kg/ha")
    ph: Optional[float] = Field(None, ge=0, le=14, description="Soil pH")
    district: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    season: Optional[str] = Field(None, max_length=20)
    organic_carbon: Optional[float] = Field(None, ge=0, alias="organicCarbon", description="Organic carbon %")
    ec: Optional[float] = Field(None, ge=0, description="EC in dS/m")


class ApplicationScheduleResponse(CamelModel):
    basal: str
    first_topdress: str = Field(..., alias="firstTopdress")
    second_topdress: str = Field(..., alias="secondTopdress")


class RecommendationResponse(CamelModel):
    """Fertilizer recommendation. Lime fields are omitted unless pH < 6.0."""
    nitrogen_status: str = Field(..., alias="nitrogenStatus")
    phosphorus_status: str = Field(..., alias="phosphorusStatus")
    potassium_status: str = Field(..., alias="potassiumStatus")
    urea_dose: float = Field(..., alias="ureaDose")
    dap_dose: float = Field(..., alias="dapDose")
    mop_dose: float = Field(..., alias="mopDose")
    ssp_dose: float = Field(..., alias="sspDose")
    lime_required: Optional[bool] = Field(None, alias="limeRequired")
    lime_dose: Optional[float] = Field(None, alias="limeDose")
    schedule: ApplicationScheduleResponse
    tips: List[str]


# ==================== CROP REFERENCE ====================

class CropInfo(CamelModel):
    name: str
    type: Optional[str] = None
    season: Optional[str] = None
    n_range: str = Field(..., alias="nRange")
    p_range: str = Field(..., alias="pRange")
    k_range: str = Field(..., alias="kRange")
    ph_range: str = Field(..., alias="phRange")
    water_requirement: Optional[str] = Field(None, alias="waterRequirement")


# ==================== SAVED RECOMMENDATIONS ====================

class SaveRecommendationRequest(RecommendationRequest):
    notes: Optional[str] = Field(None, max_length=1000)


class SaveRecommendationResponse(CamelModel):
    message: str
    id: int


class SavedRecommendationSummary(CamelModel):
    id: int
    crop_name: str = Field(..., alias="cropName")
    district_name: Optional[str] = Field(None, alias="districtName")
    state_name: Optional[str] = Field(None, alias="stateName")
    urea_dose: Optional[float] = Field(None, alias="ureaDose")
    dap_dose: Optional[float] = Field(None, alias="dapDose")
    mop_dose: Optional[float] = Field(None, alias="mopDose")
    ssp_dose: Optional[float] = Field(None, alias="sspDose")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class SavedRecommendationListResponse(BaseModel):
    items: List[SavedRecommendationSummary]
    total: int
