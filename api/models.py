"""
API request and response models for Simpan REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields default to empty strings: a missing field must reach the auth
core's own checks and come back as a 400 ValidationError with a readable
message, not as FastAPI's generic 422. Length caps still apply.

Response field names follow the web client's camelCase contract
(accessToken, createdAt) via serialization aliases; dump with by_alias=True.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Credential

# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /auth."""

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


class SignupRequest(BaseModel):
    """Request body for POST /auth/signup."""

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)
    name: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=320)


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /auth/forgot-password."""

    email: str = Field(default="", max_length=320)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class AccessTokenResponse(BaseModel):
    """Body returned by login, signup and refresh. The refresh token travels in the cookie only."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(serialization_alias="accessToken")


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request body for POST /users."""

    username: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=255)
    name: str = Field(default="", max_length=255)
    reminder: str = Field(default="", max_length=64)


class UserUpdate(BaseModel):
    """Request body for PATCH /users. Replaces all profile fields of user `id`."""

    id: int
    username: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=320)
    name: str = Field(default="", max_length=255)
    reminder: str = Field(default="", max_length=64)


class UserDelete(BaseModel):
    """Request body for DELETE /users."""

    id: Optional[int] = None


class UserResponse(BaseModel):
    """Public view of a credential. The password hash is never included."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    name: str
    reminder: Optional[str] = None
    created_at: str = Field(default="", serialization_alias="createdAt")

    @classmethod
    def from_credential(cls, credential: Credential) -> "UserResponse":
        return cls(
            id=credential.id,
            username=credential.username,
            email=credential.email,
            name=credential.name,
            reminder=credential.reminder,
            created_at=credential.created_at or "",
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
