"""Pydantic request/response schemas."""

from famli.schemas.auth import (
    AuthResponse,
    CurrentUser,
    FirstRunResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    SetupRequest,
    TokenPairResponse,
    UserProfile,
)
from famli.schemas.common import Pagination
from famli.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "CurrentUser",
    "FirstRunResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Pagination",
    "RefreshRequest",
    "SetupRequest",
    "TokenPairResponse",
    "UserProfile",
]
