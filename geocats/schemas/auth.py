"""Request/response schemas for auth endpoints and the verified identity claim."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Account role. Every account is exactly one of these."""

    USER = "user"
    ADMIN = "admin"


class IdentityClaim(BaseModel):
    """Verified identity decoded from a bearer token: subject identifier and role, nothing else."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str = Field(..., min_length=1, description="Account identifier (token 'sub')")
    role: Role = Field(..., description="Role embedded at token issuance")


class LoginRequest(BaseModel):
    """Credentials for login. The identity may be a user name or an email address."""

    username: str = Field(..., min_length=1, max_length=255, description="User name or email")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
