"""Request/response schemas for cat records."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from geocats.schemas.geo import GeoPoint


class CatCreate(BaseModel):
    """Creation body. Owner is never taken from the body; it is the authenticated caller."""

    model_config = ConfigDict(extra="ignore")

    cat_name: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(..., gt=0)
    filename: str = Field(..., min_length=1, max_length=1024, description="Media reference")
    birthdate: datetime
    location: GeoPoint | None = Field(default=None, description="Defaults to [0, 0]")


class CatUpdate(BaseModel):
    """Owner update body; the owner field is not accepted here."""

    model_config = ConfigDict(extra="ignore")

    cat_name: str | None = Field(default=None, min_length=1, max_length=255)
    weight: float | None = Field(default=None, gt=0)
    filename: str | None = Field(default=None, min_length=1, max_length=1024)
    birthdate: datetime | None = None
    location: GeoPoint | None = None


class CatAdminUpdate(CatUpdate):
    """Admin update body; may reassign the owner."""

    owner: str | None = Field(default=None, description="Identifier of the new owning account")


class CatOutput(BaseModel):
    id: uuid.UUID
    cat_name: str
    weight: float
    filename: str
    birthdate: datetime
    location: GeoPoint
    owner: uuid.UUID

    @classmethod
    def from_model(cls, cat: object) -> "CatOutput":
        return cls(
            id=cat.id,
            cat_name=cat.cat_name,
            weight=cat.weight,
            filename=cat.filename,
            birthdate=cat.birthdate,
            location=GeoPoint(coordinates=cat.location),
            owner=cat.owner_id,
        )


class CatMessageResponse(BaseModel):
    """Mutation result: message plus the affected cat."""

    message: str
    data: CatOutput
