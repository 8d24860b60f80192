"""
Farmer Auth Router.
Registration, login and bearer token verification.
"""
import logging
import re
from datetime import datetime
from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from soil_health.core.auth import (
    get_current_active_user,
    get_current_token,
    hash_password,
    issue_token,
    verify_password,
)
from soil_health.database import get_db
from soil_health.models.database_models import AuthToken, District, Farmer
from soil_health.schemas.auth_schemas import (
    FarmerResponse,
    LoginRequest,
    LoginResponse,
    RegistrationRequest,
    RegistrationResponse,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
POSTAL_CODE_PATTERN = re.compile(r"^\d{6}$")

# Demo postal code lookup; unknown codes fall back to Delhi
POSTAL_CODE_LOCATIONS = {
    "110001": ("Delhi", "Delhi"),
    "122001": ("Gurugram", "Haryana"),
    "141001": ("Ludhiana", "Punjab"),
}
DEFAULT_LOCATION = ("Delhi", "Delhi")


def location_for_postal_code(postal_code: str) -> Tuple[str, str]:
    """(district, state) for a postal code."""
    return POSTAL_CODE_LOCATIONS.get(postal_code, DEFAULT_LOCATION)


def farmer_response(farmer: Farmer) -> FarmerResponse:
    return FarmerResponse(
        id=farmer.id,
        username=farmer.username,
        postal_code=farmer.postal_code,
        district=farmer.district_name,
        state=farmer.state_name,
        full_name=farmer.full_name,
    )


def _validate_registration(payload: RegistrationRequest) -> None:
    if not payload.username or len(payload.username.strip()) < MIN_USERNAME_LENGTH:
        raise HTTPException(status_code=400, detail="Username must be at least 3 characters")
    if not payload.password or len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    if not payload.postal_code or not POSTAL_CODE_PATTERN.match(payload.postal_code):
        raise HTTPException(status_code=400, detail="Valid 6-digit postal code required")


@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegistrationRequest, db: Session = Depends(get_db)):
    """Register a farmer and link them to the district of their postal code."""
    _validate_registration(payload)
    username = payload.username.strip()

    if db.query(Farmer).filter(Farmer.username == username).first():
        raise HTTPException(status_code=409, detail="Username already exists")

    district_name, state_name = location_for_postal_code(payload.postal_code)
    district = db.query(District).filter(
        func.lower(District.name) == district_name.lower(),
        func.lower(District.state_name) == state_name.lower(),
    ).first()

    farmer = Farmer(
        username=username,
        password_hash=hash_password(payload.password),
        postal_code=payload.postal_code,
        district_id=district.id if district else None,
        district_name=district_name,
        state_name=state_name,
        full_name=payload.full_name,
        phone=payload.phone,
        email=payload.email,
    )
    db.add(farmer)
    db.commit()
    db.refresh(farmer)

    logger.info(f"Registered farmer {farmer.id} ({username}) in {district_name}, {state_name}")
    return RegistrationResponse(
        success=True,
        message="Registration successful",
        farmer=farmer_response(farmer),
    )


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials and issue a bearer token."""
    farmer = db.query(Farmer).filter(Farmer.username == payload.username.strip()).first()

    if not farmer or not farmer.is_active or not verify_password(payload.password, farmer.password_hash):
        logger.info(f"Failed login for username '{payload.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = issue_token(db, farmer)
    farmer.last_login = datetime.utcnow()
    db.commit()

    return LoginResponse(success=True, token=token, farmer=farmer_response(farmer))


@router.get("/verify", response_model=VerifyResponse)
async def verify(current_farmer: Farmer = Depends(get_current_active_user)):
    """Confirm a bearer token is valid and return its farmer."""
    return VerifyResponse(valid=True, farmer=farmer_response(current_farmer))


@router.post("/logout")
async def logout(token: AuthToken = Depends(get_current_token), db: Session = Depends(get_db)):
    """Revoke the presented token."""
    token.revoked = True
    db.commit()
    return {"success": True, "message": "Logged out"}
