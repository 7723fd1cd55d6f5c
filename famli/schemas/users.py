"""Request/response schemas for user management and the audit log."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from famli.schemas.common import Pagination


class UserCreateRequest(BaseModel):
    """New account (admin only). Presence and role are checked in the handler."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class UserUpdateRequest(BaseModel):
    """Partial update; empty fields are left unchanged."""

    username: str | None = None
    email: str | None = None
    role: str | None = None
    password: str | None = None


class PreferencesRequest(BaseModel):
    preferences: dict[str, Any] | None = None


class PreferencesResponse(BaseModel):
    message: str
    preferences: dict[str, Any] | None = None


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    id: int
    username: str
    email: str
    role: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class UserDetail(BaseModel):
    """The caller's own profile."""

    id: int
    username: str
    email: str
    role: str
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class UserCreatedResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    message: str


class UserSummary(BaseModel):
    id: int
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


class AuditEntryItem(BaseModel):
    """One audit entry joined with the acting username (None once the user is deleted)."""

    id: int
    user_id: int | None
    username: str | None
    action: str
    entity_type: str
    entity_id: int | None
    details: dict[str, Any] | None
    created_at: datetime | None


class AuditLogResponse(BaseModel):
    logs: list[AuditEntryItem]
    pagination: Pagination
