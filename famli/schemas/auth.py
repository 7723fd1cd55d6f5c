"""Request/response schemas for auth endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FirstRunResponse(BaseModel):
    """Whether no user exists yet (setup is open)."""

    model_config = ConfigDict(populate_by_name=True)

    is_first_run: bool = Field(..., alias="isFirstRun")


class SetupRequest(BaseModel):
    """Initial admin account. Validated in the handler after the first-run check; a payload that does not fit counts as missing fields."""

    username: str | None = Field(default=None, description="Username")
    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Password (at least 8 characters)")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class RefreshRequest(BaseModel):
    """Refresh token presented for rotation or logout."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str | None = Field(default=None, alias="refreshToken")


class TokenPairResponse(BaseModel):
    """Access and refresh tokens returned by login, setup and refresh."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken", description="JWT access token")
    refresh_token: str = Field(..., alias="refreshToken", description="JWT refresh token")


class UserProfile(BaseModel):
    """User as returned to the client after authentication (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    preferences: dict[str, Any] = Field(default_factory=dict)


class AuthResponse(TokenPairResponse):
    """Authenticated user plus a fresh token pair."""

    message: str | None = None
    user: UserProfile


class MessageResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) taken from the access token."""

    id: int
    username: str
    role: str

    class Config:
        from_attributes = True
