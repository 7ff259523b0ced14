"""Account endpoints: public reads, registration, and self-service update/delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from geocats.api.v1.auth import get_current_claim
from geocats.core.database import get_db
from geocats.core.errors import AuthzError, InvalidIdentifierError
from geocats.core.identifiers import parse_identifier
from geocats.core.security import hash_password
from geocats.schemas.auth import IdentityClaim, Role
from geocats.schemas.policy import Action, DenyReason
from geocats.schemas.user import (
    TokenCheckResponse,
    UserCreate,
    UserMessageResponse,
    UserOutput,
    UserUpdate,
)
from geocats.services.access import authorize_user_action
from geocats.services.repository import UserRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[UserOutput])
def list_users(db: Annotated[Session, Depends(get_db)]) -> list[UserOutput]:
    """List all accounts (public view; empty list when there are none)."""
    return [UserOutput.model_validate(u) for u in UserRepository(db).list_all()]


@router.post("", response_model=UserMessageResponse)
def create_user(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
) -> UserMessageResponse:
    """Register an account. The password is hashed and the role is always 'user'."""
    user = UserRepository(db).create(
        user_name=body.user_name,
        email=str(body.email),
        password_hash=hash_password(body.password),
        role=Role.USER,
    )
    logger.info("User created", extra={"user_id": str(user.id)})
    return UserMessageResponse(message="User created", data=UserOutput.model_validate(user))


@router.put("", response_model=UserMessageResponse)
def update_current_user(
    body: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> UserMessageResponse:
    """Update the caller's own account. Role is never changed here."""
    user = authorize_user_action(db, claim, Action.UPDATE_USER)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = str(changes["email"])
    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))
    updated = UserRepository(db).update_by_id(user.id, changes) if changes else user
    if updated is None:
        raise AuthzError(DenyReason.NOT_FOUND, "User not found")
    return UserMessageResponse(message="User updated", data=UserOutput.model_validate(updated))


@router.delete("", response_model=UserMessageResponse)
def delete_current_user(
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> UserMessageResponse:
    """Delete the caller's own account together with the cats it owns."""
    user = authorize_user_action(db, claim, Action.DELETE_USER)
    output = UserOutput.model_validate(user)
    UserRepository(db).delete_by_id(user.id)
    logger.info("User deleted", extra={"user_id": str(output.id)})
    return UserMessageResponse(message="User deleted", data=output)


@router.get("/token", response_model=TokenCheckResponse)
def check_token(
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> TokenCheckResponse:
    """Echo the verified claim. No database query."""
    return TokenCheckResponse(subject=claim.subject, role=claim.role)


@router.get("/{user_id}", response_model=UserOutput)
def get_user(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> UserOutput:
    """Fetch one account by id (public view)."""
    try:
        parsed = parse_identifier(user_id)
    except InvalidIdentifierError as e:
        raise AuthzError(DenyReason.INVALID_IDENTIFIER) from e
    user = UserRepository(db).get_by_id(parsed)
    if user is None:
        raise AuthzError(DenyReason.NOT_FOUND, "User not found")
    return UserOutput.model_validate(user)
