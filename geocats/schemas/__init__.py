"""Pydantic request/response schemas."""

from geocats.schemas.auth import IdentityClaim, LoginRequest, Role, TokenResponse
from geocats.schemas.cat import (
    CatAdminUpdate,
    CatCreate,
    CatMessageResponse,
    CatOutput,
    CatUpdate,
)
from geocats.schemas.geo import BoxRegion, GeoPoint, PolygonQuery, PolygonRegion, Region
from geocats.schemas.health import HealthResponse
from geocats.schemas.policy import Action, Decision, DenyReason, ResourceRef
from geocats.schemas.user import (
    TokenCheckResponse,
    UserCreate,
    UserMessageResponse,
    UserOutput,
    UserUpdate,
)

__all__ = [
    "Action",
    "BoxRegion",
    "CatAdminUpdate",
    "CatCreate",
    "CatMessageResponse",
    "CatOutput",
    "CatUpdate",
    "Decision",
    "DenyReason",
    "GeoPoint",
    "HealthResponse",
    "IdentityClaim",
    "LoginRequest",
    "PolygonQuery",
    "PolygonRegion",
    "Region",
    "ResourceRef",
    "Role",
    "TokenCheckResponse",
    "TokenResponse",
    "UserCreate",
    "UserMessageResponse",
    "UserOutput",
    "UserUpdate",
]
