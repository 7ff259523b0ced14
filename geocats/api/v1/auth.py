"""JWT login and the get_current_claim auth dependency."""

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from geocats.core.config import get_settings
from geocats.core.database import get_db
from geocats.core.errors import AuthError
from geocats.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    TokenValidator,
    create_access_token,
    verify_password,
)
from geocats.schemas.auth import IdentityClaim, LoginRequest, TokenResponse
from geocats.services.repository import UserRepository

router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_validator() -> TokenValidator:
    """One validator per process, built from the configured secret."""
    settings = get_settings()
    return TokenValidator(
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def _validate_username(username: str) -> None:
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid username length.",
        )


def _validate_password(password: str) -> None:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid password length.",
        )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with user name (or email) and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    _validate_username(body.username)
    _validate_password(body.password)

    user = UserRepository(db).find_by_credential_identity(body.username)
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )
    token = create_access_token(sub=str(user.id), role=user.role)
    return TokenResponse(access_token=token, token_type="bearer")


def get_current_claim(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
) -> IdentityClaim:
    """
    Dependency: require a valid Bearer JWT and return its identity claim. Raises 401 if missing
    or invalid. No database lookup: the claim is exactly what the signed token says.
    """
    try:
        return validator.validate(credentials.credentials if credentials else None)
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
