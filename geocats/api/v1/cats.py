"""Cat endpoints: public reads, region queries, owner and admin mutations."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from geocats.api.v1.auth import get_current_claim
from geocats.core.database import get_db
from geocats.core.errors import AuthzError, InvalidIdentifierError
from geocats.core.identifiers import parse_identifier
from geocats.schemas.auth import IdentityClaim
from geocats.schemas.cat import (
    CatAdminUpdate,
    CatCreate,
    CatMessageResponse,
    CatOutput,
    CatUpdate,
)
from geocats.schemas.geo import PolygonQuery
from geocats.schemas.policy import Action, DenyReason
from geocats.services.access import authorize_cat_action, resolve_owner
from geocats.services.geo import parse_bounds_query, parse_box_query, polygon_region
from geocats.services.repository import CatRepository, UserRepository

logger = logging.getLogger(__name__)
router = APIRouter()


def _outputs(cats: list) -> list[CatOutput]:
    return [CatOutput.from_model(c) for c in cats]


def _changes(body: CatUpdate) -> dict[str, Any]:
    """Map an update body to repository changes; location becomes a (lon, lat) pair."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"location", "owner"})
    if body.location is not None:
        changes["location"] = tuple(body.location.coordinates)
    return changes


@router.get("", response_model=list[CatOutput])
def list_cats(db: Annotated[Session, Depends(get_db)]) -> list[CatOutput]:
    """All cats; an empty list when there are none."""
    return _outputs(CatRepository(db).list_all())


@router.post("", response_model=CatMessageResponse)
def create_cat(
    body: CatCreate,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> CatMessageResponse:
    """Create a cat owned by the caller. Any owner in the body is ignored."""
    owner = resolve_owner(db, claim)
    cat = CatRepository(db).create(
        owner_id=owner.id,
        cat_name=body.cat_name,
        weight=body.weight,
        filename=body.filename,
        birthdate=body.birthdate,
        location=tuple(body.location.coordinates) if body.location else None,
    )
    logger.info("Cat created", extra={"cat_id": str(cat.id), "owner_id": str(owner.id)})
    return CatMessageResponse(message="Cat created", data=CatOutput.from_model(cat))


@router.get("/user", response_model=list[CatOutput])
def list_my_cats(
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> list[CatOutput]:
    """Cats owned by the caller."""
    owner = resolve_owner(db, claim)
    return _outputs(CatRepository(db).list_by_owner(owner.id))


@router.get("/area", response_model=list[CatOutput])
def list_cats_in_box(
    db: Annotated[Session, Depends(get_db)],
    top_right: Annotated[str | None, Query(alias="topRight", description="'lon,lat'")] = None,
    bottom_left: Annotated[str | None, Query(alias="bottomLeft", description="'lon,lat'")] = None,
) -> list[CatOutput]:
    """Cats inside the rectangle bottomLeft..topRight (edges inclusive). Missing corners are a 400."""
    region = parse_box_query(bottom_left, top_right)
    return _outputs(CatRepository(db).find_within(region))


@router.get("/bounds", response_model=list[CatOutput])
def list_cats_in_bounds(
    db: Annotated[Session, Depends(get_db)],
    min_lat: Annotated[str | None, Query()] = None,
    min_lng: Annotated[str | None, Query()] = None,
    max_lat: Annotated[str | None, Query()] = None,
    max_lng: Annotated[str | None, Query()] = None,
) -> list[CatOutput]:
    """Cats inside the rectangle polygon given by four bounds (edges inclusive)."""
    region = parse_bounds_query(min_lat, min_lng, max_lat, max_lng)
    return _outputs(CatRepository(db).find_within(region))


@router.post("/within", response_model=list[CatOutput])
def list_cats_in_polygon(
    body: PolygonQuery,
    db: Annotated[Session, Depends(get_db)],
) -> list[CatOutput]:
    """Cats inside an explicit closed polygon ring (boundary inclusive)."""
    region = polygon_region(body.coordinates)
    return _outputs(CatRepository(db).find_within(region))


@router.put("/admin/{cat_id}", response_model=CatMessageResponse)
def admin_update_cat(
    cat_id: str,
    body: CatAdminUpdate,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> CatMessageResponse:
    """Admin update of any cat, including owner reassignment. Role is re-checked from storage."""
    cat = authorize_cat_action(db, claim, Action.ADMIN_UPDATE_CAT, cat_id)
    changes = _changes(body)
    if body.owner is not None:
        try:
            new_owner_id = parse_identifier(body.owner)
        except InvalidIdentifierError as e:
            raise AuthzError(DenyReason.INVALID_IDENTIFIER, "Invalid owner id") from e
        if UserRepository(db).get_by_id(new_owner_id) is None:
            raise AuthzError(DenyReason.NOT_FOUND, "Owner account not found")
        changes["owner_id"] = new_owner_id
    updated = CatRepository(db).update_by_id(cat.id, changes)
    logger.info("Cat updated by admin", extra={"cat_id": str(cat.id), "admin_id": claim.subject})
    return CatMessageResponse(message="Cat updated", data=CatOutput.from_model(updated))


@router.delete("/admin/{cat_id}", response_model=CatMessageResponse)
def admin_delete_cat(
    cat_id: str,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> CatMessageResponse:
    """Admin delete of any cat. Role is re-checked from storage."""
    cat = authorize_cat_action(db, claim, Action.ADMIN_DELETE_CAT, cat_id)
    output = CatOutput.from_model(cat)
    CatRepository(db).delete_by_id(cat.id)
    logger.info("Cat deleted by admin", extra={"cat_id": str(output.id), "admin_id": claim.subject})
    return CatMessageResponse(message="Cat deleted", data=output)


@router.get("/{cat_id}", response_model=CatOutput)
def get_cat(
    cat_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> CatOutput:
    """Fetch one cat by id."""
    try:
        parsed = parse_identifier(cat_id)
    except InvalidIdentifierError as e:
        raise AuthzError(DenyReason.INVALID_IDENTIFIER) from e
    cat = CatRepository(db).get_by_id(parsed)
    if cat is None:
        raise AuthzError(DenyReason.NOT_FOUND, "Cat not found")
    return CatOutput.from_model(cat)


@router.put("/{cat_id}", response_model=CatMessageResponse)
def update_cat(
    cat_id: str,
    body: CatUpdate,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> CatMessageResponse:
    """Owner-only update. The owner cannot be changed here."""
    cat = authorize_cat_action(db, claim, Action.UPDATE_CAT, cat_id)
    updated = CatRepository(db).update_by_id(cat.id, _changes(body))
    return CatMessageResponse(message="Cat updated", data=CatOutput.from_model(updated))


@router.delete("/{cat_id}", response_model=CatMessageResponse)
def delete_cat(
    cat_id: str,
    db: Annotated[Session, Depends(get_db)],
    claim: Annotated[IdentityClaim, Depends(get_current_claim)],
) -> CatMessageResponse:
    """Owner-only delete."""
    cat = authorize_cat_action(db, claim, Action.DELETE_CAT, cat_id)
    output = CatOutput.from_model(cat)
    CatRepository(db).delete_by_id(cat.id)
    return CatMessageResponse(message="Cat deleted", data=output)
