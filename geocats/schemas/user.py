"""Request/response schemas for account endpoints. Passwords and roles never leave the service."""

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from geocats.schemas.auth import Role


class UserCreate(BaseModel):
    """Registration body. Any 'role' field is ignored: new accounts are always 'user'."""

    model_config = ConfigDict(extra="ignore")

    user_name: str = Field(..., min_length=1, max_length=255, description="Unique display name")
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(..., min_length=8, max_length=128, description="Plain password (hashed before storage)")


class UserUpdate(BaseModel):
    """Self-service update body; all fields optional, role cannot be changed."""

    model_config = ConfigDict(extra="ignore")

    user_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)


class UserOutput(BaseModel):
    """Public account view."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_name: str
    email: str


class UserMessageResponse(BaseModel):
    """Mutation result: message plus the affected account."""

    message: str
    data: UserOutput


class TokenCheckResponse(BaseModel):
    """Result of GET /users/token: the verified claim, no database lookup."""

    message: str = "Token is valid"
    subject: str
    role: Role
