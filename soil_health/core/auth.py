"""
Farmer authentication helpers.

Passwords are hashed with werkzeug. Sessions are opaque bearer tokens
stored in ``auth_tokens`` with an expiry.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from soil_health.config import TOKEN_TTL_HOURS
from soil_health.database import get_db
from soil_health.models.database_models import AuthToken, Farmer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def issue_token(db: Session, farmer: Farmer) -> str:
    """Create and persist a new bearer token for the farmer."""
    token = secrets.token_urlsafe(48)
    db.add(AuthToken(
        token=token,
        farmer_id=farmer.id,
        expires_at=datetime.utcnow() + timedelta(hours=TOKEN_TTL_HOURS),
    ))
    return token


def find_valid_token(db: Session, token: str) -> Optional[AuthToken]:
    record = db.query(AuthToken).filter(AuthToken.token == token).first()
    if not record or not record.is_valid():
        return None
    return record


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthToken:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("No token provided")

    record = find_valid_token(db, credentials.credentials)
    if record is None:
        raise _unauthorized("Invalid token")
    return record


def get_current_active_user(token: AuthToken = Depends(get_current_token)) -> Farmer:
    farmer = token.farmer
    if farmer is None or not farmer.is_active:
        logger.warning(f"Token {token.id} used for inactive or missing farmer")
        raise _unauthorized("Invalid token")
    return farmer
