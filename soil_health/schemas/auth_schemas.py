"""Pydantic schemas for farmer registration and login."""
from pydantic import Field
from typing import Optional

from soil_health.schemas.recommendation_schemas import CamelModel


class RegistrationRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")
    full_name: Optional[str] = Field(None, max_length=200, alias="fullName")
    phone: Optional[str] = Field(None, max_length=15)
    email: Optional[str] = Field(None, max_length=255)


class LoginRequest(CamelModel):
    username: str
    password: str


class FarmerResponse(CamelModel):
    id: int
    username: str
    postal_code: str = Field(..., alias="postalCode")
    district: Optional[str] = None
    state: Optional[str] = None
    full_name: Optional[str] = Field(None, alias="fullName")


class RegistrationResponse(CamelModel):
    success: bool
    message: str
    farmer: FarmerResponse


class LoginResponse(CamelModel):
    success: bool
    token: str
    farmer: FarmerResponse


class VerifyResponse(CamelModel):
    valid: bool
    farmer: FarmerResponse
