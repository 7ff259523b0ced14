"""Pydantic schemas for authorization decisions: actions, deny reasons, and resource references."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    """Every action the policy engine knows about. Anything else is denied."""

    CREATE_CAT = "create_cat"
    READ_CAT = "read_cat"
    UPDATE_CAT = "update_cat"
    DELETE_CAT = "delete_cat"
    ADMIN_UPDATE_CAT = "admin_update_cat"
    ADMIN_DELETE_CAT = "admin_delete_cat"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"


READ_ACTIONS: frozenset[Action] = frozenset({Action.READ_CAT})
OWNER_ACTIONS: frozenset[Action] = frozenset({Action.UPDATE_CAT, Action.DELETE_CAT})
ADMIN_ACTIONS: frozenset[Action] = frozenset({Action.ADMIN_UPDATE_CAT, Action.ADMIN_DELETE_CAT})
SELF_SERVICE_ACTIONS: frozenset[Action] = frozenset({Action.UPDATE_USER, Action.DELETE_USER})


class DenyReason(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_OWNER = "not_owner"
    NOT_ADMIN = "not_admin"
    NOT_FOUND = "not_found"
    INVALID_IDENTIFIER = "invalid_identifier"


class ResourceRef(BaseModel):
    """A looked-up target resource: what it is and who owns it (an account owns itself)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cat", "user"]
    id: str = Field(..., description="Identifier of the resource.")
    owner_id: str = Field(..., description="Identifier of the owning account.")


class Decision(BaseModel):
    """Allow, or Deny with a reason."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)
