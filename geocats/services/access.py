"""Request-side access checks: parse id, look the target up, then ask the policy engine.

Order is fixed: identifier syntax -> existence -> ownership/role -> (caller mutates).
Every deny raises AuthzError with the policy's reason.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from geocats.core.errors import AuthzError, InvalidIdentifierError
from geocats.core.identifiers import parse_identifier
from geocats.models import Cat, User
from geocats.schemas.auth import IdentityClaim, Role
from geocats.schemas.policy import ADMIN_ACTIONS, Action, Decision, DenyReason, ResourceRef
from geocats.services.policy import authorize
from geocats.services.repository import CatRepository, UserRepository

logger = logging.getLogger(__name__)


def _enforce(decision: Decision, claim: IdentityClaim | None, action: Action, target: str) -> None:
    if decision.allowed:
        return
    logger.info(
        "Access denied",
        extra={
            "action": action.value,
            "reason": decision.reason.value,
            "subject": claim.subject if claim else None,
            "target": target,
        },
    )
    raise AuthzError(decision.reason)


def _parse_or_deny(value: object) -> uuid.UUID:
    try:
        return parse_identifier(value)
    except InvalidIdentifierError as e:
        raise AuthzError(DenyReason.INVALID_IDENTIFIER) from e


def cat_ref(cat: Cat) -> ResourceRef:
    return ResourceRef(kind="cat", id=str(cat.id), owner_id=str(cat.owner_id))


def user_ref(user: User) -> ResourceRef:
    return ResourceRef(kind="user", id=str(user.id), owner_id=str(user.id))


def current_role_of(db: Session, claim: IdentityClaim) -> Role | None:
    """Role stored right now for claim.subject; None if the account no longer exists."""
    try:
        account_id = parse_identifier(claim.subject)
    except InvalidIdentifierError:
        return None
    account = UserRepository(db).get_by_id(account_id)
    return account.role_enum if account is not None else None


def authorize_cat_action(
    db: Session,
    claim: IdentityClaim | None,
    action: Action,
    cat_id: object,
) -> Cat:
    """Return the cat if claim may perform action on it; raise AuthzError otherwise."""
    if claim is None:
        _enforce(Decision.deny(DenyReason.NOT_AUTHENTICATED), claim, action, str(cat_id))
    parsed_id = _parse_or_deny(cat_id)
    cat = CatRepository(db).get_by_id(parsed_id)
    resource = cat_ref(cat) if cat is not None else None

    current_role = None
    if action in ADMIN_ACTIONS and resource is not None:
        current_role = current_role_of(db, claim)

    decision = authorize(claim, action, resource, current_role=current_role)
    _enforce(decision, claim, action, str(parsed_id))
    return cat


def authorize_user_action(db: Session, claim: IdentityClaim | None, action: Action) -> User:
    """Self-service account actions always target claim.subject."""
    if claim is None:
        _enforce(Decision.deny(DenyReason.NOT_AUTHENTICATED), claim, action, "")
    account_id = _parse_or_deny(claim.subject)
    user = UserRepository(db).get_by_id(account_id)
    resource = user_ref(user) if user is not None else None
    _enforce(authorize(claim, action, resource), claim, action, str(account_id))
    return user


def resolve_owner(db: Session, claim: IdentityClaim | None) -> User:
    """The account a new cat will belong to: always the caller, and it must exist."""
    _enforce(authorize(claim, Action.CREATE_CAT), claim, Action.CREATE_CAT, "")
    account_id = _parse_or_deny(claim.subject)
    owner = UserRepository(db).get_by_id(account_id)
    if owner is None:
        raise AuthzError(DenyReason.NOT_FOUND, "User not found")
    return owner
