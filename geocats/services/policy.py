"""Authorization policy: decide whether an identity may perform an action on a resource.

Pure predicate over the supplied state. The caller looks the resource up first (existence
precedes authorization) and, for admin actions, re-fetches the caller's account so that
current_role reflects storage rather than the token.

Rules, first match wins:
  1. reads are always allowed
  2. no claim -> NOT_AUTHENTICATED
  3. create cat -> allowed (owner is forced to the caller by the orchestrator)
  4. missing resource -> NOT_FOUND
  5. malformed subject or owner identifier -> INVALID_IDENTIFIER
  6. owner update/delete -> subject must equal owner, else NOT_OWNER
  7. admin update/delete -> current (stored) role must be admin, else NOT_ADMIN
  8. account update/delete -> subject must be the account, else NOT_OWNER
  9. anything else -> NOT_OWNER
"""

from geocats.core.errors import InvalidIdentifierError
from geocats.core.identifiers import normalize_identifier
from geocats.schemas.auth import IdentityClaim, Role
from geocats.schemas.policy import (
    ADMIN_ACTIONS,
    OWNER_ACTIONS,
    READ_ACTIONS,
    SELF_SERVICE_ACTIONS,
    Action,
    Decision,
    DenyReason,
    ResourceRef,
)


def authorize(
    claim: IdentityClaim | None,
    action: Action,
    resource: ResourceRef | None = None,
    current_role: Role | None = None,
) -> Decision:
    """
    Return Allow or Deny(reason) for claim performing action on resource.

    - resource: the looked-up target, or None if the lookup found nothing.
    - current_role: role of the account stored under claim.subject, re-fetched by the
      caller; only consulted for admin actions.
    """
    if action in READ_ACTIONS:
        return Decision.allow()
    if claim is None:
        return Decision.deny(DenyReason.NOT_AUTHENTICATED)
    if action is Action.CREATE_CAT:
        return Decision.allow()
    if resource is None:
        return Decision.deny(DenyReason.NOT_FOUND)

    try:
        subject = normalize_identifier(claim.subject)
        owner = normalize_identifier(resource.owner_id)
    except InvalidIdentifierError:
        return Decision.deny(DenyReason.INVALID_IDENTIFIER)

    if action in OWNER_ACTIONS:
        if resource.kind == "cat" and subject == owner:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER)

    if action in ADMIN_ACTIONS:
        if current_role == Role.ADMIN:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_ADMIN)

    if action in SELF_SERVICE_ACTIONS:
        if resource.kind == "user" and subject == owner:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER)

    return Decision.deny(DenyReason.NOT_OWNER)
