"""User management (admin), the caller's own profile, and the audit log."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from famli.api.v1.auth import get_current_user, require, validate_password, validate_username
from famli.core.database import get_db
from famli.core.errors import Conflict, NotFound, ValidationError
from famli.core.permissions import ROLES
from famli.core.security import hash_password
from famli.schemas.auth import CurrentUser, MessageResponse
from famli.schemas.common import Pagination
from famli.schemas.users import (
    AuditEntryItem,
    AuditLogResponse,
    PreferencesRequest,
    PreferencesResponse,
    UserCreateRequest,
    UserCreatedResponse,
    UserDetail,
    UserListItem,
    UserSummary,
    UserUpdateRequest,
)
from famli.services import audit
from famli.services import credentials as credential_store

router = APIRouter()


def _validate_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError("Invalid role")


@router.get("", response_model=list[UserListItem])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require("users:list"))],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserListItem]:
    """List all users ordered by username (admin only)."""
    return [UserListItem.model_validate(u) for u in credential_store.list_users(db)]


@router.get("/me", response_model=UserDetail)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserDetail:
    """Profile of the user named in the access token."""
    user = credential_store.find_by_id(db, current_user.id)
    if user is None:
        raise NotFound("User not found")
    return UserDetail(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        preferences=user.preferences or {},
        created_at=user.created_at,
    )


@router.put("/me/preferences", response_model=PreferencesResponse)
def update_my_preferences(
    body: PreferencesRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PreferencesResponse:
    """Replace the caller's preferences blob."""
    user = credential_store.find_by_id(db, current_user.id)
    if user is None:
        raise NotFound("User not found")
    credential_store.update_preferences(db, user, body.preferences)
    return PreferencesResponse(
        message="Preferences updated successfully",
        preferences=body.preferences,
    )


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    admin: Annotated[CurrentUser, Depends(require("users:create"))],
    db: Annotated[Session, Depends(get_db)],
) -> UserCreatedResponse:
    """Create an account with any role (admin only)."""
    if not body.username or not body.email or not body.password or not body.role:
        raise ValidationError("All fields are required")
    validate_username(body.username)
    validate_password(body.password)
    _validate_role(body.role)

    try:
        user = credential_store.insert_user(
            db,
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            role=body.role,
        )
    except credential_store.DuplicateUserError as e:
        raise Conflict(e.message) from e

    audit.record(db, admin.id, "CREATE", "user", user.id, {"username": user.username, "role": user.role})
    return UserCreatedResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        message="User created successfully",
    )


@router.put("/{user_id}", response_model=UserSummary)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require("users:update"))],
    db: Annotated[Session, Depends(get_db)],
) -> UserSummary:
    """Partially update username, email, role or password (admin only)."""
    if not any([body.username, body.email, body.role, body.password]):
        raise ValidationError("No fields to update")
    if body.username:
        validate_username(body.username)
    if body.role:
        _validate_role(body.role)
    if body.password:
        validate_password(body.password)

    user = credential_store.find_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")

    try:
        user = credential_store.update_user(
            db,
            user,
            username=body.username,
            email=body.email,
            role=body.role,
            password_hash=hash_password(body.password) if body.password else None,
        )
    except credential_store.DuplicateUserError as e:
        raise Conflict(e.message) from e

    audit.record(db, admin.id, "UPDATE", "user", user.id, {"username": body.username, "role": body.role})
    return UserSummary.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Annotated[CurrentUser, Depends(require("users:delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete another user's account (admin only). Deleting your own account is refused."""
    if user_id == admin.id:
        raise ValidationError("Cannot delete your own account")

    user = credential_store.find_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    username = user.username
    credential_store.delete_user(db, user)

    audit.record(db, admin.id, "DELETE", "user", user_id, {"username": username})
    return MessageResponse(message="User deleted successfully")


@router.get("/audit/log", response_model=AuditLogResponse)
def get_audit_log(
    _admin: Annotated[CurrentUser, Depends(require("audit:read"))],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> AuditLogResponse:
    """Audit trail, newest first, with the acting username where it still exists (admin only)."""
    rows, total = audit.list_entries(db, page=page, limit=limit)
    return AuditLogResponse(
        logs=[
            AuditEntryItem(
                id=entry.id,
                user_id=entry.user_id,
                username=username,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                details=entry.details,
                created_at=entry.created_at,
            )
            for entry, username in rows
        ],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )
